"""
Reference scale - uniform scale that gives a reference edge a target length.

Typical use is calibrating an imported image or scan: the host draws an
edge over a feature of known size, and applies the returned matrix to the
group holding both.
"""

import logging
from dataclasses import dataclass

from cadgeom.cg_errors import DegenerateInputError
from cadgeom.mathutils.vec3 import ORIGIN, Vec3
from cadgeom.mathutils.cg_line import CGSegment
import cadgeom.mathutils.cg_math as CGMath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleSolution:
    factor: float
    current_length: float
    anchor: Vec3
    matrix: tuple   # 4x4 row-major, scales about anchor


class ReferenceScale:

    @staticmethod
    def measure(segment: CGSegment, transform=None) -> float:
        """Segment length, measured after mapping both endpoints through transform."""
        if transform is None:
            return segment.length
        p1 = CGMath.transform_point(segment.start, transform)
        p2 = CGMath.transform_point(segment.end, transform)
        return CGMath.distance(p1, p2)

    @staticmethod
    def solve(segment: CGSegment, target_length: float, eps: float,
              transform=None, anchor=ORIGIN) -> ScaleSolution:
        """
        Args:
            segment: Reference edge.
            target_length: Length the edge should have after scaling.
            eps: Reference edges no longer than this are rejected.
            transform: Optional 4x4 matrix placing the edge in world space.
            anchor: Fixed point of the scaling.

        Raises:
            DegenerateInputError: Zero-length reference edge or non-positive target.
        """
        eps = CGMath.validate_tolerance(eps)
        if not target_length > 0.0:
            raise DegenerateInputError(f"Target length must be positive, got {target_length!r}")

        current = ReferenceScale.measure(segment, transform)
        if current <= eps:
            raise DegenerateInputError("Reference edge has zero length")

        factor = float(target_length) / current
        anchor = Vec3(anchor)
        logger.debug("Reference edge %.6g -> %.6g, factor %.6g", current, target_length, factor)
        return ScaleSolution(factor, current, anchor, CGMath.scale_about_point_matrix(factor, anchor))
