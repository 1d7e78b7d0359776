"""
Solvers for curve lofting, plane fitting and intersections.

Pipelines:
1. PathOrderer -> LoftMesher - curve set to ordered paths to triangle mesh
2. PlaneFitter -> NormalsSolver - edge set to dominant plane to in-plane normals
3. IntersectionSolver - lines/segments to deduplicated crossing points
4. ReferenceScale - reference edge to calibration scale
"""

from .cg_path_orderer import (
    PathOrderer,
    mean_path_distance,
)

from .cg_loft_mesher import (
    LoftMesher,
    LoftMesh,
    CGTriangle,
    seam_edge,
)

from .cg_plane_fitter import (
    PlaneFitter,
    PlaneFit,
    unique_points_from_edges,
)

from .cg_intersection_solver import (
    IntersectionSolver,
    IntersectionSolution,
    IntersectionOutcome,
    PairIntersection,
)

from .cg_normals_solver import (
    NormalsSolver,
    NormalsSolution,
)

from .cg_reference_scale import (
    ReferenceScale,
    ScaleSolution,
)

__all__ = [
    # Lofting
    'PathOrderer',
    'mean_path_distance',
    'LoftMesher',
    'LoftMesh',
    'CGTriangle',
    'seam_edge',
    # Plane fitting
    'PlaneFitter',
    'PlaneFit',
    'unique_points_from_edges',
    'NormalsSolver',
    'NormalsSolution',
    # Intersections
    'IntersectionSolver',
    'IntersectionSolution',
    'IntersectionOutcome',
    'PairIntersection',
    # Calibration
    'ReferenceScale',
    'ScaleSolution',
]
