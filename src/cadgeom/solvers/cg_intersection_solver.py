"""
Intersection solver - crossing points between lines and segments.

Primitives are CGLine (infinite) or CGSegment (bounded), mixed freely.
Every pair is classified by IntersectionOutcome:

    CROSSING           Lines meet exactly, inside every bounded extent.
    NEAR_CROSSING      Skew lines whose closest approach is within eps;
                       the midpoint of the two closest points is reported.
    OUT_OF_EXTENTS     The carrier lines meet, but outside a segment.
    PARALLEL           Directions are parallel within eps.
    COLLINEAR_OVERLAP  Parallel and on one line, sharing at least one point.
                       Reported separately, not as a single crossing.
    SKEW               Closest approach is further apart than eps.

Main API:
    # One pair
    result = IntersectionSolver.intersect_pair(a, b, eps)

    # All pairs i < j, deduplicated against known points
    solution = IntersectionSolver.solve(primitives, eps, known_points)
    solution.points -> new points only

Deduplication: a point is dropped if any known point, or any point already
accepted in this run, lies within eps of it. Seeding known_points with the
previous run's output makes repeat runs add nothing.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from cadgeom.cg_errors import DegenerateInputError, InsufficientInputError
from cadgeom.mathutils.vec3 import Vec3
from cadgeom.mathutils.cg_line import CGLine, CGSegment
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)

# Closest points closer than this are treated as an exact intersection
EXACT_INTERSECTION_TOLERANCE = 1e-9

Primitive = Union[CGLine, CGSegment]


class IntersectionOutcome(Enum):
    CROSSING = 1
    NEAR_CROSSING = 2
    OUT_OF_EXTENTS = 3
    PARALLEL = 4
    COLLINEAR_OVERLAP = 5
    SKEW = 6

    @property
    def has_point(self) -> bool:
        return self in (IntersectionOutcome.CROSSING, IntersectionOutcome.NEAR_CROSSING)


@dataclass(frozen=True)
class PairIntersection:
    """Classification of one primitive pair. point is set for CROSSING and NEAR_CROSSING."""
    outcome: IntersectionOutcome
    point: Optional[Vec3] = None


@dataclass
class IntersectionSolution:
    """
    Result of a pairwise intersection search.

    Attributes:
        points: Newly found points, in discovery order, deduplicated.
        pairs: (i, j, PairIntersection) for every tested pair.
        collinear_pairs: (i, j) index pairs that overlap collinearly.
        duplicates: Number of found points discarded as already known.
        degenerate: Indices of zero-length segments left out of the search.
    """
    points: List[Vec3] = field(default_factory=list)
    pairs: List[Tuple[int, int, PairIntersection]] = field(default_factory=list)
    collinear_pairs: List[Tuple[int, int]] = field(default_factory=list)
    duplicates: int = 0
    degenerate: List[int] = field(default_factory=list)


def _as_line(primitive: Primitive) -> CGLine:
    if isinstance(primitive, CGLine):
        return primitive
    line = primitive.to_line()
    if line is None:
        raise DegenerateInputError(f"Zero-length segment {primitive.start} - {primitive.end}")
    return line


def _is_degenerate(primitive: Primitive) -> bool:
    return isinstance(primitive, CGSegment) and primitive.to_line() is None


def _contains(primitive: Primitive, point, eps: float) -> bool:
    """Point lies within the primitive's extent (always true for infinite lines)."""
    if isinstance(primitive, CGSegment):
        return CGMath.is_point_on_segment(point, primitive, eps)
    return True


def _on_primitive(primitive: Primitive, point, eps: float) -> bool:
    if isinstance(primitive, CGSegment):
        return CGMath.is_point_on_segment(point, primitive, eps)
    return CGMath.is_point_on_line(point, primitive, eps)


def point_exists(point, known_points: Iterable, eps: float) -> bool:
    return any(CGMath.distance(point, p) <= eps for p in known_points)


class IntersectionSolver:

    @staticmethod
    def intersect_lines(line1: CGLine, line2: CGLine, eps: float) -> PairIntersection:
        """
        Intersection of two infinite lines.

        Parallel lines never intersect here; collinear handling is done by
        intersect_pair, which knows about segment extents.
        """
        if CGMath.is_parallel(line1.direction, line2.direction, eps):
            return PairIntersection(IntersectionOutcome.PARALLEL)

        cpts = CGMath.closest_points_between_lines(line1, line2)
        if cpts is None:
            return PairIntersection(IntersectionOutcome.PARALLEL)

        p1, p2 = cpts
        gap = CGMath.distance(p1, p2)
        if gap <= EXACT_INTERSECTION_TOLERANCE:
            return PairIntersection(IntersectionOutcome.CROSSING, p1)
        if gap <= eps:
            return PairIntersection(IntersectionOutcome.NEAR_CROSSING, CGMath.midpoint(p1, p2))
        return PairIntersection(IntersectionOutcome.SKEW)

    @staticmethod
    def intersect_pair(a: Primitive, b: Primitive, eps: float) -> PairIntersection:
        """
        Classify a pair of lines and/or segments.

        Raises:
            DegenerateInputError: A segment has zero length.
            ToleranceMisconfigured: eps is negative.
        """
        eps = CGMath.validate_tolerance(eps)
        line_a = _as_line(a)
        line_b = _as_line(b)

        if CGMath.is_parallel(line_a.direction, line_b.direction, eps):
            # Same carrier line and at least one shared point
            if CGMath.is_point_on_line(line_b.origin, line_a, eps):
                shares_point = (isinstance(a, CGLine) or isinstance(b, CGLine)
                                or any(_on_primitive(a, p, eps) for p in b.endpoints)
                                or any(_on_primitive(b, p, eps) for p in a.endpoints))
                if shares_point:
                    return PairIntersection(IntersectionOutcome.COLLINEAR_OVERLAP)
            return PairIntersection(IntersectionOutcome.PARALLEL)

        result = IntersectionSolver.intersect_lines(line_a, line_b, eps)
        if not result.outcome.has_point:
            return result

        if not (_contains(a, result.point, eps) and _contains(b, result.point, eps)):
            return PairIntersection(IntersectionOutcome.OUT_OF_EXTENTS)
        return result

    @staticmethod
    def solve(primitives: Sequence[Primitive], eps: float,
              known_points: Iterable = ()) -> IntersectionSolution:
        """
        Find all pairwise crossing points not already present.

        Zero-length segments are left out (their indices are listed in
        solution.degenerate); pair indices always refer to the input order.

        Args:
            primitives: Two or more CGLine/CGSegment values.
            eps: Near-intersection, extent and deduplication tolerance.
            known_points: Points already marked in the target context.

        Raises:
            InsufficientInputError: Fewer than two usable primitives.
        """
        eps = CGMath.validate_tolerance(eps)
        solution = IntersectionSolution()

        usable = []
        for index, primitive in enumerate(primitives):
            if _is_degenerate(primitive):
                solution.degenerate.append(index)
            else:
                usable.append(index)
        if solution.degenerate:
            logger.debug("Skipping %d zero-length segment(s): %s", len(solution.degenerate), solution.degenerate)
        if len(usable) < 2:
            raise InsufficientInputError(
                f"Need at least 2 usable lines or segments, got {len(usable)} of {len(primitives)}")

        known = [Vec3(p) for p in known_points]

        for a in range(len(usable) - 1):
            for b in range(a + 1, len(usable)):
                i, j = usable[a], usable[b]
                result = IntersectionSolver.intersect_pair(primitives[i], primitives[j], eps)
                solution.pairs.append((i, j, result))

                if result.outcome == IntersectionOutcome.COLLINEAR_OVERLAP:
                    solution.collinear_pairs.append((i, j))
                    continue
                if not result.outcome.has_point:
                    continue

                if point_exists(result.point, known, eps):
                    solution.duplicates += 1
                    continue

                known.append(result.point)
                solution.points.append(result.point)

        logger.debug("Tested %d pairs: %d new points, %d duplicates, %d collinear overlaps",
                     len(solution.pairs), len(solution.points), solution.duplicates,
                     len(solution.collinear_pairs))
        return solution
