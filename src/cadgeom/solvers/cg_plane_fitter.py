"""
Plane fitter - finds the plane supported by the most edge endpoints.

RANSAC-style search over minimal three-point samples:

    1. Collect the unique endpoint positions of all edges.
    2. Reject inputs with fewer than three unique points, or where every
       triple is collinear within eps.
    3. Candidates: every 3-combination when there are few points
       (<= exhaustive_limit), otherwise max_samples random triples.
    4. Score each candidate plane by counting edge endpoints within eps of
       it. The first plane reaching a strictly higher score is kept, and
       the search stops as soon as every endpoint is an inlier.
    5. An edge is an inlier when both endpoints are within eps of the best
       plane; everything else is an outlier.

Ties keep the first candidate found. In the exhaustive branch candidates
come in lexicographic order, so results are deterministic. The random
branch draws from the injected numpy Generator, so pass a seeded one for
reproducible results.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from cadgeom.cg_errors import DegenerateInputError, InsufficientPointsError
from cadgeom.mathutils.vec3 import Vec3
from cadgeom.mathutils.cg_line import CGSegment
from cadgeom.mathutils.cg_plane import CGPlane
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)

DEFAULT_MAX_SAMPLES = 400
DEFAULT_EXHAUSTIVE_LIMIT = 12


@dataclass
class PlaneFit:
    """
    Result of a dominant-plane search.

    Attributes:
        plane: Best plane, or None if no candidate produced a valid plane.
        inliers: Edges with both endpoints within eps of the plane (input order).
        outliers: All other edges (input order).
        score: Number of inlier endpoints for the best plane (-1 when there is none).
        candidates_tested: Number of non-degenerate candidate planes scored.
    """
    plane: Optional[CGPlane]
    inliers: List = field(default_factory=list)
    outliers: List = field(default_factory=list)
    score: int = -1
    candidates_tested: int = 0

    @property
    def found(self) -> bool:
        return self.plane is not None


def _endpoints(edge) -> Tuple[Vec3, Vec3]:
    if isinstance(edge, CGSegment):
        return edge.start, edge.end
    start, end = edge
    return Vec3(start), Vec3(end)


def unique_points_from_edges(edges) -> List[Vec3]:
    """Unique endpoint positions in first-seen order (exact equality)."""
    seen = {}
    for edge in edges:
        for p in _endpoints(edge):
            seen.setdefault(p, None)
    return list(seen)


def noncollinear_triple_exists(points: Sequence, eps: float) -> bool:
    """True if some ordered triple i < j < k spans a plane within eps."""
    n = len(points)
    for i in range(n - 2):
        for j in range(i + 1, n - 1):
            v1 = CGMath.sub3(points[j], points[i])
            if CGMath.length(v1) <= eps:
                continue
            for k in range(j + 1, n):
                v2 = CGMath.sub3(points[k], points[i])
                if CGMath.length(v2) <= eps:
                    continue
                if CGMath.length(CGMath.cross(v1, v2)) > eps:
                    return True
    return False


class PlaneFitter:

    @staticmethod
    def candidate_triples(points: Sequence, max_samples: int, exhaustive_limit: int,
                          rng: Optional[np.random.Generator]) -> Iterator[Tuple[Vec3, Vec3, Vec3]]:
        """Exhaustive combinations for small sets, random samples otherwise."""
        if len(points) <= exhaustive_limit:
            yield from itertools.combinations(points, 3)
            return

        if rng is None:
            rng = np.random.default_rng()
        for _ in range(max_samples):
            i, j, k = rng.choice(len(points), size=3, replace=False)
            yield points[i], points[j], points[k]

    @staticmethod
    def score_plane(plane: CGPlane, edges, eps: float) -> int:
        inlier_endpoints = 0
        for edge in edges:
            start, end = _endpoints(edge)
            if abs(plane.signed_distance(start)) <= eps:
                inlier_endpoints += 1
            if abs(plane.signed_distance(end)) <= eps:
                inlier_endpoints += 1
        return inlier_endpoints

    @staticmethod
    def partition(plane: CGPlane, edges, eps: float):
        inliers = []
        outliers = []
        for edge in edges:
            start, end = _endpoints(edge)
            if abs(plane.signed_distance(start)) <= eps and abs(plane.signed_distance(end)) <= eps:
                inliers.append(edge)
            else:
                outliers.append(edge)
        return inliers, outliers

    @staticmethod
    def solve(edges: Sequence, eps: float, max_samples: int = DEFAULT_MAX_SAMPLES,
              exhaustive_limit: int = DEFAULT_EXHAUSTIVE_LIMIT,
              rng: Optional[np.random.Generator] = None) -> PlaneFit:
        """
        Find the dominant plane of an edge set and split the edges by it.

        Args:
            edges: CGSegment instances or (start, end) point pairs.
            eps: Inlier distance and degeneracy tolerance.
            max_samples: Random triples to test when the point set is large.
            exhaustive_limit: Largest unique-point count that is searched exhaustively.
            rng: Random source for the sampling branch.

        Returns:
            PlaneFit. plane is None (and every edge an outlier) if no candidate was valid.

        Raises:
            InsufficientPointsError: Fewer than three unique endpoints.
            DegenerateInputError: Every triple of endpoints is collinear within eps.
        """
        eps = CGMath.validate_tolerance(eps)
        edges = list(edges)
        points = unique_points_from_edges(edges)

        if len(points) < 3:
            raise InsufficientPointsError(f"Need at least 3 unique points, got {len(points)}")
        if not noncollinear_triple_exists(points, eps):
            raise DegenerateInputError("All points are collinear within tolerance")

        max_score = 2 * len(edges)
        best_plane = None
        best_score = -1
        tested = 0

        for p1, p2, p3 in PlaneFitter.candidate_triples(points, max_samples, exhaustive_limit, rng):
            plane = CGMath.fit_plane_three_points(p1, p2, p3, eps)
            if plane is None:
                continue

            tested += 1
            score = PlaneFitter.score_plane(plane, edges, eps)
            if score > best_score:
                best_score = score
                best_plane = plane
                if best_score == max_score:
                    break

        if best_plane is None:
            logger.debug("No valid candidate plane among %d unique points", len(points))
            return PlaneFit(plane=None, inliers=[], outliers=edges, score=-1, candidates_tested=tested)

        inliers, outliers = PlaneFitter.partition(best_plane, edges, eps)
        logger.debug("Best plane scored %d/%d after %d candidates: %d inliers, %d outliers",
                     best_score, max_score, tested, len(inliers), len(outliers))
        return PlaneFit(best_plane, inliers, outliers, best_score, tested)

    @staticmethod
    def solve_points(points: Sequence, eps: float, max_samples: int = DEFAULT_MAX_SAMPLES,
                     exhaustive_limit: int = DEFAULT_EXHAUSTIVE_LIMIT,
                     rng: Optional[np.random.Generator] = None) -> PlaneFit:
        """Same as solve() for raw points; inliers and outliers are point lists."""
        points = [Vec3(p) for p in points]
        fit = PlaneFitter.solve([(p, p) for p in points], eps, max_samples, exhaustive_limit, rng)
        fit.inliers = [start for start, _ in fit.inliers]
        fit.outliers = [start for start, _ in fit.outliers]
        return fit
