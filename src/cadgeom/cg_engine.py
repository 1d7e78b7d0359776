"""
cadgeom Engine - result-returning entry points for the geometry solvers.

Every entry point takes the geometric values to process, an optional
CGConfig and keyword overrides for individual config fields. Invalid or
degenerate input never raises: the error comes back on the result.

Usage:
    from cadgeom import loft_curves, fit_dominant_plane, find_intersections, CGConfig

    # Simple usage with defaults
    result = loft_curves(paths)
    if result.ok:
        mesh = result.value

    # With configuration
    config = CGConfig(eps=0.01, seed=7)
    result = fit_dominant_plane(edges, config=config)

    # With individual options
    result = find_intersections(lines, known_points=markers, eps=1e-4)

    # Raise instead of branching
    points = find_intersections(lines).unwrap().points
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Literal, Optional, Sequence

import numpy as np

from cadgeom.cg_errors import CGError, NoSolutionFound
from cadgeom.mathutils.vec3 import ORIGIN
from cadgeom.mathutils.cg_line import CGLine, CGSegment
import cadgeom.mathutils.cg_math as CGMath
from cadgeom.solvers import (
    PathOrderer,
    LoftMesher,
    PlaneFitter,
    IntersectionSolver,
    IntersectionOutcome,
    NormalsSolver,
    ReferenceScale,
)
from cadgeom.solvers.cg_plane_fitter import DEFAULT_MAX_SAMPLES, DEFAULT_EXHAUSTIVE_LIMIT
from cadgeom.render_engines import IndexedMeshContext

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_TOLERANCE = 1e-3

MeshFormat = Literal['mesh', 'indexed', 'dict', 'json']


@dataclass(frozen=True)
class CGConfig:
    """
    Configuration for one call into the engine.

    Attributes:
        eps: Tolerance for every proximity, collinearity and coplanarity test.
        max_samples: Random triples tested by the plane fit on large point sets.
        exhaustive_limit: Point sets up to this size are searched exhaustively.
        seed: Seed for the plane fit's random sampling (None = fresh entropy).
        mesh_format: How loft results are rendered into CGResult.output.
            - 'mesh': No rendering, output is None (default)
            - 'indexed': IndexedMeshContext instance
            - 'dict': Indexed mesh as a plain dict
            - 'json': Indexed mesh as a JSON string
    """
    eps: float = DEFAULT_TOLERANCE
    max_samples: int = DEFAULT_MAX_SAMPLES
    exhaustive_limit: int = DEFAULT_EXHAUSTIVE_LIMIT
    seed: Optional[int] = None
    mesh_format: MeshFormat = 'mesh'

    def validate(self) -> 'CGConfig':
        CGMath.validate_tolerance(self.eps)
        if self.max_samples < 1:
            raise ValueError(f"max_samples must be positive, got {self.max_samples}")
        if self.mesh_format not in ('mesh', 'indexed', 'dict', 'json'):
            raise ValueError(f"Unknown mesh_format: {self.mesh_format}")
        return self

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)


@dataclass
class CGResult:
    """
    Outcome of an engine call.

    Attributes:
        value: The solver result (None on failure, or a partial result for NoSolutionFound).
        error: The CGError that stopped the operation, or None.
        output: Rendered output, if the operation renders (see CGConfig.mesh_format).
        stats: Counts describing the result.
    """
    value: Any = None
    error: Optional[CGError] = None
    output: Any = None
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        """Return value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value


# =============================================================================
# Internal Helpers
# =============================================================================

def _resolve_config(config: Optional[CGConfig], overrides: Dict[str, Any]) -> CGConfig:
    """
    Merge keyword overrides into a copy of config and validate it.

    Only keys actually passed are applied, so an explicit None (e.g. seed=None)
    replaces the value from config.
    """
    if config is None:
        config = CGConfig()

    known = {f.name for f in dataclasses.fields(CGConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")

    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config.validate()


def _failure(operation: str, error: CGError, value=None) -> CGResult:
    logger.warning("%s failed: %s", operation, error)
    return CGResult(value=value, error=error)


def _render_mesh(mesh, config: CGConfig):
    if config.mesh_format == 'mesh':
        return None
    context = IndexedMeshContext.from_mesh(mesh)
    if config.mesh_format == 'indexed':
        return context
    if config.mesh_format == 'dict':
        return context.to_dict()
    return context.to_json()


def _as_segments(edges) -> list:
    return [e if isinstance(e, CGSegment) else CGSegment(*e) for e in edges]


def _as_lines(lines) -> list:
    return [l if isinstance(l, CGLine) else CGLine(*l) for l in lines]


# =============================================================================
# Lofting
# =============================================================================

def order_paths(paths: Sequence[Sequence], config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Order paths into a loft traversal sequence.

    Returns:
        CGResult whose value is a new list of the input paths in traversal order.
    """
    try:
        _resolve_config(config, options)
        ordered = PathOrderer.solve(paths)
    except CGError as e:
        return _failure("order_paths", e)
    return CGResult(value=ordered, stats={'path_count': len(ordered)})


def loft_paths(ordered_paths: Sequence[Sequence], config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Triangulate between already ordered paths.

    Returns:
        CGResult whose value is a LoftMesh.
    """
    try:
        config = _resolve_config(config, options)
        mesh = LoftMesher.build(ordered_paths, config.eps)
    except CGError as e:
        return _failure("loft_paths", e)

    return CGResult(
        value=mesh,
        output=_render_mesh(mesh, config),
        stats={
            'triangle_count': mesh.triangle_count,
            'seam_count': len(mesh.seam_edges),
            'skipped_count': mesh.skipped,
        },
    )


def loft_curves(paths: Sequence[Sequence], config: Optional[CGConfig] = None, **options) -> CGResult:
    """Order paths, then loft them. Equivalent to order_paths followed by loft_paths."""
    ordered = order_paths(paths, config, **options)
    if not ordered.ok:
        return ordered
    return loft_paths(ordered.value, config, **options)


# =============================================================================
# Plane fitting
# =============================================================================

def fit_dominant_plane(edges: Sequence, config: Optional[CGConfig] = None,
                       rng: Optional[np.random.Generator] = None, **options) -> CGResult:
    """
    Fit the plane supported by the most edge endpoints and split the edges by it.

    Args:
        edges: CGSegment instances or (start, end) pairs.
        rng: Random source; defaults to one seeded from config.seed.

    Returns:
        CGResult whose value is a PlaneFit. When no candidate plane is valid the
        error is NoSolutionFound and value still holds the PlaneFit (all outliers).
    """
    try:
        config = _resolve_config(config, options)
        fit = PlaneFitter.solve(edges, config.eps, config.max_samples, config.exhaustive_limit,
                                rng if rng is not None else config.make_rng())
    except CGError as e:
        return _failure("fit_dominant_plane", e)

    stats = {'inlier_count': len(fit.inliers), 'outlier_count': len(fit.outliers),
             'candidates_tested': fit.candidates_tested}
    if fit.plane is None:
        result = _failure("fit_dominant_plane", NoSolutionFound("No valid candidate plane found", fit), fit)
        result.stats = stats
        return result
    return CGResult(value=fit, stats=stats)


def fit_dominant_plane_to_points(points: Sequence, config: Optional[CGConfig] = None,
                                 rng: Optional[np.random.Generator] = None, **options) -> CGResult:
    """Same as fit_dominant_plane for raw points; inliers and outliers are points."""
    try:
        config = _resolve_config(config, options)
        fit = PlaneFitter.solve_points(points, config.eps, config.max_samples, config.exhaustive_limit,
                                       rng if rng is not None else config.make_rng())
    except CGError as e:
        return _failure("fit_dominant_plane_to_points", e)

    stats = {'inlier_count': len(fit.inliers), 'outlier_count': len(fit.outliers),
             'candidates_tested': fit.candidates_tested}
    if fit.plane is None:
        result = _failure("fit_dominant_plane_to_points",
                          NoSolutionFound("No valid candidate plane found", fit), fit)
        result.stats = stats
        return result
    return CGResult(value=fit, stats=stats)


def draw_in_plane_normals(edges: Sequence, transform=None, config: Optional[CGConfig] = None,
                          rng: Optional[np.random.Generator] = None, **options) -> CGResult:
    """
    In-plane perpendicular lines through the midpoints of coplanar edges.

    Args:
        edges: CGSegment instances or (start, end) pairs.
        transform: Optional 4x4 row-major matrix mapping results to world space.

    Returns:
        CGResult whose value is a NormalsSolution.
    """
    try:
        config = _resolve_config(config, options)
        solution = NormalsSolver.solve(edges, config.eps, transform, config.max_samples,
                                       config.exhaustive_limit,
                                       rng if rng is not None else config.make_rng())
    except CGError as e:
        return _failure("draw_in_plane_normals", e)

    return CGResult(value=solution, stats={
        'line_count': len(solution.lines),
        'kept_count': len(solution.kept_edges),
        'removed_count': len(solution.removed_edges),
    })


# =============================================================================
# Intersections
# =============================================================================

def find_intersections(lines: Sequence[CGLine], known_points: Iterable = (),
                       config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Crossing points between infinite lines, deduplicated against known_points.

    Returns:
        CGResult whose value is an IntersectionSolution; value.points holds the new points.
    """
    try:
        config = _resolve_config(config, options)
        solution = IntersectionSolver.solve(_as_lines(lines), config.eps, known_points)
    except CGError as e:
        return _failure("find_intersections", e)

    return CGResult(value=solution, stats={
        'point_count': len(solution.points),
        'duplicate_count': solution.duplicates,
        'pair_count': len(solution.pairs),
    })


def find_segment_intersections(segments: Sequence, known_points: Iterable = (),
                               config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Crossing points between bounded segments, deduplicated against known_points.

    Collinear overlaps are reported in value.collinear_pairs, not as points.
    Zero-length segments are skipped and listed in value.degenerate.
    """
    try:
        config = _resolve_config(config, options)
        solution = IntersectionSolver.solve(_as_segments(segments), config.eps, known_points)
    except CGError as e:
        return _failure("find_segment_intersections", e)

    return CGResult(value=solution, stats={
        'point_count': len(solution.points),
        'duplicate_count': solution.duplicates,
        'pair_count': len(solution.pairs),
        'collinear_count': len(solution.collinear_pairs),
        'degenerate_count': len(solution.degenerate),
    })


def find_crossing(a, b, config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Crossing point of exactly two primitives (each a CGLine or CGSegment).

    Returns:
        CGResult whose value is a PairIntersection. Any outcome without a
        point (parallel, collinear overlap, outside the extents, skew) is
        reported as NoSolutionFound carrying the PairIntersection.
    """
    try:
        config = _resolve_config(config, options)
        result = IntersectionSolver.intersect_pair(a, b, config.eps)
    except CGError as e:
        return _failure("find_crossing", e)

    if not result.outcome.has_point:
        messages = {
            IntersectionOutcome.OUT_OF_EXTENTS: "Entities are not crossing within the edge extents",
            IntersectionOutcome.COLLINEAR_OVERLAP: "Entities are collinear/overlapping, not a single crossing",
        }
        message = messages.get(result.outcome, "Entities are not crossing")
        return _failure("find_crossing", NoSolutionFound(message, result), result)
    return CGResult(value=result, stats={'point_count': 1})


# =============================================================================
# Calibration
# =============================================================================

def scale_to_reference(segment, target_length: float, transform=None, anchor=None,
                       config: Optional[CGConfig] = None, **options) -> CGResult:
    """
    Uniform scale that makes a reference edge measure target_length.

    Returns:
        CGResult whose value is a ScaleSolution (factor and 4x4 matrix about anchor).
    """
    try:
        config = _resolve_config(config, options)
        if not isinstance(segment, CGSegment):
            segment = CGSegment(*segment)
        solution = ReferenceScale.solve(segment, target_length, config.eps, transform,
                                        anchor if anchor is not None else ORIGIN)
    except CGError as e:
        return _failure("scale_to_reference", e)
    return CGResult(value=solution)
