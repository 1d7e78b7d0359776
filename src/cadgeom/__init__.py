"""cadgeom - curve lofting, dominant-plane fitting and intersection marking for CAD hosts."""
import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from cadgeom.cg_engine import (
    CGConfig,
    CGResult,
    DEFAULT_TOLERANCE,
    order_paths,
    loft_paths,
    loft_curves,
    fit_dominant_plane,
    fit_dominant_plane_to_points,
    draw_in_plane_normals,
    find_intersections,
    find_segment_intersections,
    find_crossing,
    scale_to_reference,
)
from cadgeom.cg_errors import (
    CGError,
    InsufficientInputError,
    InsufficientPointsError,
    MismatchedLengthError,
    DegenerateInputError,
    NoSolutionFound,
    ToleranceMisconfigured,
)
from cadgeom.mathutils import Vec3, Point3D, Vector3D, CGLine, CGSegment, CGPlane


__all__ = [
    'CGConfig',
    'CGResult',
    'DEFAULT_TOLERANCE',
    'order_paths',
    'loft_paths',
    'loft_curves',
    'fit_dominant_plane',
    'fit_dominant_plane_to_points',
    'draw_in_plane_normals',
    'find_intersections',
    'find_segment_intersections',
    'find_crossing',
    'scale_to_reference',
    'CGError',
    'InsufficientInputError',
    'InsufficientPointsError',
    'MismatchedLengthError',
    'DegenerateInputError',
    'NoSolutionFound',
    'ToleranceMisconfigured',
    'Vec3',
    'Point3D',
    'Vector3D',
    'CGLine',
    'CGSegment',
    'CGPlane',
]
