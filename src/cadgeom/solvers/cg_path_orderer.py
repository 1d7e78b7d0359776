"""
Path orderer - sorts sampled curves into a loft traversal sequence.

The paths are expected to be cross sections of one surface, roughly stacked
along some direction. Ordering works in two steps:

    1. Seed: compute each path's centroid, pick the coordinate axis along
       which the centroids spread the most (ties go x, then y, then z), and
       start at the path with the smallest centroid coordinate on that axis.
    2. Chain: repeatedly append the unvisited path closest to the last one
       added, using mean_path_distance as the metric.

mean_path_distance compares points index by index both ways round, so two
curves drawn in opposite directions still measure as neighbours.

Main API:
    ordered = PathOrderer.solve(paths)

Ties always resolve to the lowest input index, so the ordering is
deterministic. The whole search is O(N^2 * L) for N paths of L points,
fine for the handful of curves a CAD selection holds.
"""

import logging
from typing import List, Sequence

from cadgeom.cg_errors import InsufficientInputError, MismatchedLengthError
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)

AXIS_NAMES = ('x', 'y', 'z')


def mean_path_distance(path_a: Sequence, path_b: Sequence) -> float:
    """
    Mean distance between corresponding points of two paths.

    Both the forward pairing A[i]-B[i] and the reversed pairing A[i]-B[n-1-i]
    are measured over the shared index range n = min(len(A), len(B)); the
    smaller mean is returned.
    """
    n = min(len(path_a), len(path_b))
    if n == 0:
        raise InsufficientInputError("Cannot measure distance between empty paths")

    sum_forward = 0.0
    sum_reverse = 0.0
    for i in range(n):
        sum_forward += CGMath.distance(path_a[i], path_b[i])
        sum_reverse += CGMath.distance(path_a[i], path_b[n - 1 - i])

    return min(sum_forward, sum_reverse) / n


def validate_paths(paths: Sequence[Sequence]) -> int:
    """Check loft input and return the common point count."""
    if len(paths) < 2:
        raise InsufficientInputError(f"Need at least 2 paths, got {len(paths)}")

    lengths = [len(p) for p in paths]
    expected = lengths[0]
    if any(n != expected for n in lengths):
        raise MismatchedLengthError(
            f"All paths must have the same point count, got {sorted(set(lengths))}", lengths)
    if expected < 2:
        raise InsufficientInputError(f"Each path needs at least 2 points, got {expected}")

    return expected


class PathOrderer:
    """Greedy nearest-neighbour ordering of equal-length paths."""

    @staticmethod
    def main_axis(centroids: Sequence) -> int:
        """Index (0, 1, 2) of the axis with the largest centroid spread."""
        ranges = []
        for axis in range(3):
            values = [c[axis] for c in centroids]
            ranges.append(max(values) - min(values))

        range_x, range_y, range_z = ranges
        if range_x >= range_y and range_x >= range_z:
            return 0
        if range_y >= range_z:
            return 1
        return 2

    @staticmethod
    def solve_indices(paths: Sequence[Sequence]) -> List[int]:
        """Traversal order as a list of indices into paths."""
        validate_paths(paths)

        centroids = [CGMath.centroid(p) for p in paths]
        axis = PathOrderer.main_axis(centroids)

        # min() keeps the first of equal keys, so ties go to the lowest index
        start = min(range(len(paths)), key=lambda i: centroids[i][axis])

        ordered = [start]
        remaining = [i for i in range(len(paths)) if i != start]

        while remaining:
            last = paths[ordered[-1]]
            best = min(remaining, key=lambda j: mean_path_distance(last, paths[j]))
            ordered.append(best)
            remaining.remove(best)

        logger.debug("Ordered %d paths along %s axis: %s", len(paths), AXIS_NAMES[axis], ordered)
        return ordered

    @staticmethod
    def solve(paths: Sequence[Sequence]) -> List:
        """
        Order paths for lofting.

        Args:
            paths: At least two paths, each a sequence of points, all of equal length.

        Returns:
            A new list with the same path objects in traversal order. Inputs are not modified.

        Raises:
            InsufficientInputError: Fewer than two paths, or paths with fewer than two points.
            MismatchedLengthError: Paths have differing point counts.
        """
        return [paths[i] for i in PathOrderer.solve_indices(paths)]
