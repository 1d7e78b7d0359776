"""
Normals solver - in-plane perpendicular construction lines for coplanar edges.

For every edge of a (nearly) planar edge set, produces an infinite line
through the edge midpoint that lies in the plane and is perpendicular to
the edge.

If the edges are not coplanar within eps (the least-squares plane through
all endpoints deviates by more than eps), the set is first trimmed to the
dominant plane found by PlaneFitter. The plane used for the normals is then
refit by least squares through the kept edges only.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from cadgeom.cg_errors import DegenerateInputError, InsufficientPointsError, NoSolutionFound
from cadgeom.mathutils.cg_line import CGLine, CGSegment
from cadgeom.mathutils.cg_plane import CGPlane
from cadgeom.solvers.cg_plane_fitter import (
    PlaneFitter,
    DEFAULT_MAX_SAMPLES,
    DEFAULT_EXHAUSTIVE_LIMIT,
    unique_points_from_edges,
)
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)


@dataclass
class NormalsSolution:
    """
    Attributes:
        plane: Least-squares plane through the kept edges.
        lines: One construction line per usable kept edge.
        kept_edges: Edges the lines were built from.
        removed_edges: Edges dropped as off-plane (empty unless trimmed).
        trimmed: True if the input had to be trimmed to its dominant plane.
    """
    plane: CGPlane
    lines: List[CGLine] = field(default_factory=list)
    kept_edges: List = field(default_factory=list)
    removed_edges: List = field(default_factory=list)
    trimmed: bool = False


def _as_segment(edge) -> CGSegment:
    if isinstance(edge, CGSegment):
        return edge
    start, end = edge
    return CGSegment(start, end)


class NormalsSolver:

    @staticmethod
    def trim_to_dominant_plane(edges: Sequence, eps: float, max_samples: int = DEFAULT_MAX_SAMPLES,
                               exhaustive_limit: int = DEFAULT_EXHAUSTIVE_LIMIT,
                               rng: Optional[np.random.Generator] = None):
        """
        Returns (kept, removed, plane).

        Edges are kept whole when they are already coplanar within eps, and
        plane is then their least-squares plane. Otherwise plane is the
        dominant plane found by PlaneFitter.
        """
        points = unique_points_from_edges(edges)
        if len(points) < 3:
            raise InsufficientPointsError(f"Need at least 3 unique points, got {len(points)}")

        plane = CGMath.fit_plane_to_points(points)
        deviation = CGMath.max_plane_deviation(points, plane)
        if deviation <= eps:
            return list(edges), [], plane

        logger.debug("Edges deviate %.6g from their best-fit plane (eps %.6g), trimming", deviation, eps)
        fit = PlaneFitter.solve(edges, eps, max_samples, exhaustive_limit, rng)
        if not fit.inliers:
            raise NoSolutionFound(f"No coplanar subset found within tolerance (eps = {eps})", fit)
        return fit.inliers, fit.outliers, fit.plane

    @staticmethod
    def solve(edges: Sequence, eps: float, transform=None, max_samples: int = DEFAULT_MAX_SAMPLES,
              exhaustive_limit: int = DEFAULT_EXHAUSTIVE_LIMIT,
              rng: Optional[np.random.Generator] = None) -> NormalsSolution:
        """
        Build in-plane perpendicular lines through edge midpoints.

        Args:
            edges: CGSegment instances or (start, end) pairs.
            eps: Coplanarity tolerance; edges and directions no longer than eps are skipped.
            transform: Optional 4x4 row-major matrix mapping results to world space.

        Raises:
            InsufficientPointsError: Fewer than three unique endpoints.
            DegenerateInputError: The endpoints are collinear.
            NoSolutionFound: Trimming left no coplanar edges.
        """
        eps = CGMath.validate_tolerance(eps)
        edges = list(edges)
        kept, removed, plane = NormalsSolver.trim_to_dominant_plane(
            edges, eps, max_samples, exhaustive_limit, rng)
        trimmed = bool(removed)

        if trimmed:
            # Refit through the survivors; one edge alone cannot define a plane
            try:
                plane = CGMath.fit_plane_to_points(unique_points_from_edges(kept))
            except DegenerateInputError:
                logger.debug("Kept edges are collinear, keeping the sampled plane")

        solution = NormalsSolution(plane, kept_edges=kept, removed_edges=removed, trimmed=trimmed)

        for edge in kept:
            segment = _as_segment(edge)
            v = segment.vector
            if CGMath.length(v) <= eps:
                continue

            direction = CGMath.cross(plane.normal, v)
            if CGMath.length(direction) <= eps:
                continue
            direction = CGMath.normalize(direction)
            mid = segment.midpoint

            if transform is not None:
                mid = CGMath.transform_point(mid, transform)
                direction = CGMath.normalize(CGMath.transform_direction(direction, transform))

            solution.lines.append(CGLine(mid, direction))

        logger.debug("Built %d normals from %d kept edges (%d removed)",
                     len(solution.lines), len(kept), len(removed))
        return solution
