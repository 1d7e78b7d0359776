"""Geometry kernel: vectors, lines, segments, planes and 4x4 matrices."""

from .vec3 import Vec3, Point3D, Vector3D, ORIGIN, UNIT_X, UNIT_Y, UNIT_Z
from .cg_line import CGLine, CGSegment
from .cg_plane import CGPlane

__all__ = [
    'Vec3',
    'Point3D',
    'Vector3D',
    'ORIGIN',
    'UNIT_X',
    'UNIT_Y',
    'UNIT_Z',
    'CGLine',
    'CGSegment',
    'CGPlane',
]
