"""
CGLine and CGSegment - infinite lines and bounded edges.
"""

from dataclasses import dataclass
from typing import Optional

from cadgeom.cg_errors import DegenerateInputError
from cadgeom.mathutils.vec3 import Vec3, vec3_lerp


@dataclass(frozen=True)
class CGLine:
    """An infinite line through origin along direction (not necessarily unit length)."""
    origin: Vec3
    direction: Vec3

    def __post_init__(self):
        # Coerce sequences so callers can pass plain tuples or arrays
        object.__setattr__(self, 'origin', Vec3(self.origin))
        object.__setattr__(self, 'direction', Vec3(self.direction))
        if self.direction.length_sq() == 0.0:
            raise DegenerateInputError("Line direction must be non-zero")

    def point_at(self, t: float) -> Vec3:
        """Point at parameter t, measured in multiples of direction."""
        return self.origin + self.direction * t

    def project_point(self, point) -> float:
        """Parameter t of the orthogonal projection of point onto the line."""
        return (Vec3(point) - self.origin).dot(self.direction) / self.direction.length_sq()

    @staticmethod
    def from_points(start, end, tolerance: float = 0.0) -> Optional['CGLine']:
        """Create a CGLine through two points. Returns None if the points are too close."""
        start, end = Vec3(start), Vec3(end)
        direction = end - start
        if direction.length() <= tolerance or direction.length_sq() == 0.0:
            return None
        return CGLine(origin=start, direction=direction)


@dataclass(frozen=True)
class CGSegment:
    """A finite edge between start and end."""
    start: Vec3
    end: Vec3

    def __post_init__(self):
        object.__setattr__(self, 'start', Vec3(self.start))
        object.__setattr__(self, 'end', Vec3(self.end))

    @property
    def vector(self) -> Vec3:
        return self.end - self.start

    @property
    def length(self) -> float:
        return self.start.distance(self.end)

    @property
    def midpoint(self) -> Vec3:
        return vec3_lerp(self.start, self.end, 0.5)

    @property
    def endpoints(self):
        return (self.start, self.end)

    def reversed(self) -> 'CGSegment':
        return CGSegment(self.end, self.start)

    def to_line(self) -> Optional[CGLine]:
        """The infinite line carrying this segment, or None for a zero-length segment."""
        return CGLine.from_points(self.start, self.end)
