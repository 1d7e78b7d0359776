"""
Loft mesher - triangulates the strip between consecutive paths.

For each neighbouring pair (left, right) of an ordered path sequence:

    p01 ---- p11        left[n+1]   right[n+1]
     |     / |
     |   /   |          triangles (p00, p10, p11) and (p00, p11, p01)
     | /     |
    p00 ---- p10        left[n]     right[n]

The shared diagonal p00-p11 is reported as a seam edge so a host can
soften/hide it and show each quad as one smooth surface.

Direction alignment: right is reversed when its last point is closer to
left[0] than its first point is. The aligned copy then serves as the left
path of the next pair. This only compares endpoint distances, so spiral or
self-crossing sections can still produce twisted strips.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Set, Tuple, NamedTuple

from cadgeom.mathutils.vec3 import Vec3
from cadgeom.solvers.cg_path_orderer import validate_paths
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)


class CGTriangle(NamedTuple):
    a: Vec3
    b: Vec3
    c: Vec3

    def doubled_area(self) -> float:
        return CGMath.length(CGMath.cross(CGMath.sub3(self.b, self.a), CGMath.sub3(self.c, self.a)))

    def edge_lengths(self):
        return (CGMath.distance(self.a, self.b), CGMath.distance(self.b, self.c),
                CGMath.distance(self.c, self.a))

    def min_height(self) -> float:
        """Smallest altitude, i.e. the distance from the longest edge to the opposite corner."""
        longest = max(self.edge_lengths())
        if longest == 0.0:
            return 0.0
        return self.doubled_area() / longest

    def is_degenerate(self, eps: float) -> bool:
        """True if an edge is no longer than eps or the corners are collinear within eps."""
        return min(self.edge_lengths()) <= eps or self.min_height() <= eps

    def edges(self):
        return (seam_edge(self.a, self.b), seam_edge(self.b, self.c), seam_edge(self.c, self.a))


# An edge identified by its two endpoints in sorted order
SeamEdge = Tuple[Vec3, Vec3]


def seam_edge(p1, p2) -> SeamEdge:
    p1, p2 = Vec3(p1), Vec3(p2)
    return (p1, p2) if p1 <= p2 else (p2, p1)


@dataclass
class LoftMesh:
    """
    Result of lofting an ordered path sequence.

    Attributes:
        triangles: Emitted triangles, pair by pair and quad by quad.
        seam_edges: Diagonals shared by both triangles of a quad.
        skipped: Number of degenerate triangles that were not emitted.
        paths: The direction-aligned paths that were actually meshed.
    """
    triangles: List[CGTriangle] = field(default_factory=list)
    seam_edges: Set[SeamEdge] = field(default_factory=set)
    skipped: int = 0
    paths: List[Tuple[Vec3, ...]] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)


class LoftMesher:

    @staticmethod
    def align(left: Sequence, right: Sequence) -> Tuple[Vec3, ...]:
        """right as a tuple, reversed if that runs it in the same direction as left."""
        d_start = CGMath.distance(left[0], right[0])
        d_end = CGMath.distance(left[0], right[-1])
        if d_end < d_start:
            return tuple(Vec3(p) for p in reversed(right))
        return tuple(Vec3(p) for p in right)

    @staticmethod
    def _make_triangle(p1, p2, p3, eps):
        triangle = CGTriangle(p1, p2, p3)
        if triangle.is_degenerate(eps):
            return None
        return triangle

    @staticmethod
    def build(ordered_paths: Sequence[Sequence], eps: float) -> LoftMesh:
        """
        Triangulate between consecutive paths.

        Args:
            ordered_paths: Paths in traversal order (see PathOrderer), all of equal length.
            eps: Triangles with an edge or altitude no longer than eps are skipped.

        Raises:
            InsufficientInputError: Fewer than two paths, or paths with fewer than two points.
            MismatchedLengthError: Paths have differing point counts.
        """
        eps = CGMath.validate_tolerance(eps)
        point_count = validate_paths(ordered_paths)

        mesh = LoftMesh()
        left = tuple(Vec3(p) for p in ordered_paths[0])
        mesh.paths.append(left)

        for i in range(1, len(ordered_paths)):
            right = LoftMesher.align(left, ordered_paths[i])
            mesh.paths.append(right)

            for n in range(point_count - 1):
                p00 = left[n]
                p01 = left[n + 1]
                p10 = right[n]
                p11 = right[n + 1]

                f1 = LoftMesher._make_triangle(p00, p10, p11, eps)
                f2 = LoftMesher._make_triangle(p00, p11, p01, eps)

                for face in (f1, f2):
                    if face is None:
                        mesh.skipped += 1
                    else:
                        mesh.triangles.append(face)

                # The diagonal is only a seam when both halves of the quad exist
                if f1 is not None and f2 is not None:
                    mesh.seam_edges.add(seam_edge(p00, p11))

            left = right

        logger.debug("Lofted %d paths: %d triangles, %d seams, %d degenerate skipped",
                     len(ordered_paths), mesh.triangle_count, len(mesh.seam_edges), mesh.skipped)
        return mesh
