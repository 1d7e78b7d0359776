"""
CGPlane - an oriented plane stored as unit normal and signed offset.

For a point p the signed distance is dot(normal, p) - offset, so the plane
is the set of points where that expression is zero.
"""

from dataclasses import dataclass

from cadgeom.mathutils.vec3 import Vec3


@dataclass(frozen=True)
class CGPlane:
    normal: Vec3   # Unit length
    offset: float

    def __post_init__(self):
        object.__setattr__(self, 'normal', Vec3(self.normal))
        object.__setattr__(self, 'offset', float(self.offset))

    def signed_distance(self, point) -> float:
        n = self.normal
        return n[0] * point[0] + n[1] * point[1] + n[2] * point[2] - self.offset

    def distance(self, point) -> float:
        return abs(self.signed_distance(point))

    @property
    def origin(self) -> Vec3:
        """Point of the plane closest to the world origin."""
        return self.normal * self.offset

    def project_point(self, point) -> Vec3:
        """Orthogonal projection of point onto the plane."""
        return Vec3(point) - self.normal * self.signed_distance(point)

    def flipped(self) -> 'CGPlane':
        return CGPlane(-self.normal, -self.offset)

    def coefficients(self):
        """(a, b, c, d) such that ax + by + cz + d = 0."""
        return (self.normal[0], self.normal[1], self.normal[2], -self.offset)
