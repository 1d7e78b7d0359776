"""
Pure Python 3D vector math - no numpy dependency for hot paths.

This module provides Vec3, a lightweight immutable 3D vector used for both
points and directions. For 3-element vectors, pure Python tuples are much
faster than numpy arrays due to avoiding array creation overhead.

Vec3 is a tuple subclass, so it hashes, compares exactly and unpacks like a
plain (x, y, z) tuple. Arithmetic operators (+, -, *, /) return new Vec3
values; nothing here mutates in place.
"""
import math


class Vec3(tuple):
    """
    An immutable 3D vector/point.

    Accepts either three numbers or a single 3-element sequence:
        Vec3(1, 2, 3)
        Vec3((1, 2, 3))
        Vec3(np.array([1, 2, 3]))
    """
    __slots__ = ()

    def __new__(cls, x=0.0, y=0.0, z=0.0):
        try:
            return tuple.__new__(cls, (float(x), float(y), float(z)))
        except TypeError:
            # x is a sequence (tuple, list, array, Vec3)
            return tuple.__new__(cls, (float(x[0]), float(x[1]), float(x[2])))

    @property
    def x(self):
        return self[0]

    @property
    def y(self):
        return self[1]

    @property
    def z(self):
        return self[2]

    def __repr__(self):
        return f"Vec3({self[0]}, {self[1]}, {self[2]})"

    def __add__(self, other):
        return Vec3(self[0] + other[0], self[1] + other[1], self[2] + other[2])

    def __radd__(self, other):
        return Vec3(self[0] + other[0], self[1] + other[1], self[2] + other[2])

    def __sub__(self, other):
        return Vec3(self[0] - other[0], self[1] - other[1], self[2] - other[2])

    def __rsub__(self, other):
        return Vec3(other[0] - self[0], other[1] - self[1], other[2] - self[2])

    def __mul__(self, scalar):
        return Vec3(self[0] * scalar, self[1] * scalar, self[2] * scalar)

    def __rmul__(self, scalar):
        return Vec3(self[0] * scalar, self[1] * scalar, self[2] * scalar)

    def __truediv__(self, scalar):
        inv = 1.0 / scalar
        return Vec3(self[0] * inv, self[1] * inv, self[2] * inv)

    def __neg__(self):
        return Vec3(-self[0], -self[1], -self[2])

    def dot(self, other):
        """Dot product."""
        return self[0] * other[0] + self[1] * other[1] + self[2] * other[2]

    def cross(self, other):
        """Cross product."""
        return Vec3(
            self[1] * other[2] - self[2] * other[1],
            self[2] * other[0] - self[0] * other[2],
            self[0] * other[1] - self[1] * other[0]
        )

    def length_sq(self):
        """Squared length (avoids sqrt)."""
        return self[0] * self[0] + self[1] * self[1] + self[2] * self[2]

    def length(self):
        """Vector length/magnitude."""
        return math.sqrt(self[0] * self[0] + self[1] * self[1] + self[2] * self[2])

    def normalized(self, eps=1e-10):
        """Return a unit-length copy. Raises ValueError for a zero-length vector."""
        mag = self.length()
        if mag <= eps:
            raise ValueError("Cannot normalize a zero vector")
        inv_mag = 1.0 / mag
        return Vec3(self[0] * inv_mag, self[1] * inv_mag, self[2] * inv_mag)

    def distance(self, other):
        """Distance to another point."""
        dx, dy, dz = self[0] - other[0], self[1] - other[1], self[2] - other[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)


# Points and directions share one representation
Point3D = Vec3
Vector3D = Vec3

ORIGIN = Vec3(0.0, 0.0, 0.0)
UNIT_X = Vec3(1.0, 0.0, 0.0)
UNIT_Y = Vec3(0.0, 1.0, 0.0)
UNIT_Z = Vec3(0.0, 0.0, 1.0)


# Standalone functions for tuple-based math (for places that don't use Vec3)

def vec3_lerp(a, b, t):
    """Linear interpolation. Returns Vec3."""
    return Vec3(
        a[0] + t * (b[0] - a[0]),
        a[1] + t * (b[1] - a[1]),
        a[2] + t * (b[2] - a[2])
    )
