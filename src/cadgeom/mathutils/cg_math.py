import math
from typing import Optional, Sequence, Tuple

import numpy as np

from cadgeom.cg_errors import DegenerateInputError, ToleranceMisconfigured
from cadgeom.mathutils.vec3 import Vec3, vec3_lerp
from cadgeom.mathutils.cg_line import CGLine, CGSegment
from cadgeom.mathutils.cg_plane import CGPlane

# Relative threshold below which two line directions are treated as exactly parallel
# when solving for closest points (independent of the caller's eps)
PARALLEL_DENOM_EPSILON = 1e-12

# Rows of the 3x3 identity, used for zero-scale rows in explode_matrix
_IDENTITY_ROWS = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0)
)


def validate_tolerance(eps):
    """Return eps as float, raising ToleranceMisconfigured if it is negative or not finite."""
    try:
        value = float(eps)
    except (TypeError, ValueError):
        raise ToleranceMisconfigured(f"Tolerance must be a number, got {eps!r}")
    if math.isnan(value) or math.isinf(value) or value < 0.0:
        raise ToleranceMisconfigured(f"Tolerance must be a finite non-negative number, got {eps!r}")
    return value


def unpack_args(*args):
    """Accept f(x, y, z) or f((x, y, z)) and return the three components."""
    if len(args) == 1:
        args = tuple(args[0])
    if len(args) != 3:
        raise ValueError(f"Expected three components or one 3-sequence, got {len(args)} value(s)")
    return args[0], args[1], args[2]


# ============================================================================
# Vector operations
# ============================================================================

def distance(p1, p2):
    """Distance between two points."""
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    dz = p2[2] - p1[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)

def length(vector):
    """Length of a vector."""
    return math.sqrt(vector[0] * vector[0] + vector[1] * vector[1] + vector[2] * vector[2])

def sub3(a, b):
    """Subtract two 3D vectors. Returns Vec3."""
    return Vec3(a[0] - b[0], a[1] - b[1], a[2] - b[2])

def add3(a, b):
    """Add two 3D vectors. Returns Vec3."""
    return Vec3(a[0] + b[0], a[1] + b[1], a[2] + b[2])

def mul3(v, s):
    """Multiply vector by scalar. Returns Vec3."""
    return Vec3(v[0] * s, v[1] * s, v[2] * s)

def dot3(a, b):
    """Dot product of two 3D vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

def cross(a, b):
    """Cross product. Returns Vec3."""
    return Vec3(
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0]
    )

def normalize(vector, eps=1e-10):
    """Normalize a vector. Raises DegenerateInputError if its length is <= eps."""
    mag = math.sqrt(vector[0] * vector[0] + vector[1] * vector[1] + vector[2] * vector[2])
    if mag <= eps:
        raise DegenerateInputError("Cannot normalize a zero vector")
    inv_mag = 1.0 / mag
    return Vec3(vector[0] * inv_mag, vector[1] * inv_mag, vector[2] * inv_mag)

def midpoint(p1, p2):
    return vec3_lerp(p1, p2, 0.5)

def centroid(points):
    """Arithmetic mean of a sequence of points."""
    n = len(points)
    if n == 0:
        raise DegenerateInputError("Cannot take the centroid of an empty point set")
    sx = sy = sz = 0.0
    for p in points:
        sx += p[0]
        sy += p[1]
        sz += p[2]
    return Vec3(sx / n, sy / n, sz / n)

def is_parallel(vector1, vector2, eps):
    """
    True if the two directions are parallel (or anti-parallel) within eps.

    Both vectors are normalized first so the test does not depend on their
    magnitude; a zero-length vector counts as parallel to everything.
    """
    len1 = length(vector1)
    len2 = length(vector2)
    if len1 == 0.0 or len2 == 0.0:
        return True
    u = mul3(vector1, 1.0 / len1)
    v = mul3(vector2, 1.0 / len2)
    return length(cross(u, v)) <= eps

def distance_point_to_line(point, line: CGLine):
    """Perpendicular distance from a point to an infinite line."""
    return distance(point, line.point_at(line.project_point(point)))

def is_point_on_line(point, line: CGLine, eps):
    return distance_point_to_line(point, line) <= eps

def is_point_on_segment(point, segment: CGSegment, eps):
    """
    True if point lies on the segment within eps.

    Uses the degenerate triangle inequality: a point on the segment splits
    it into two parts whose lengths add up to the segment length.
    """
    a, b = segment.start, segment.end
    return abs(distance(point, a) + distance(point, b) - distance(a, b)) <= eps


# ============================================================================
# Lines
# ============================================================================

def closest_points_between_lines(line1: CGLine, line2: CGLine) -> Optional[Tuple[Vec3, Vec3]]:
    """
    Closest points between two infinite lines.

    Returns (point on line1, point on line2), or None if the lines are parallel.
    """
    p1x, p1y, p1z = line1.origin
    d1x, d1y, d1z = line1.direction
    p2x, p2y, p2z = line2.origin
    d2x, d2y, d2z = line2.direction

    wx, wy, wz = p1x - p2x, p1y - p2y, p1z - p2z

    a = d1x * d1x + d1y * d1y + d1z * d1z
    b = d1x * d2x + d1y * d2y + d1z * d2z
    c = d2x * d2x + d2y * d2y + d2z * d2z
    d = d1x * wx + d1y * wy + d1z * wz
    e = d2x * wx + d2y * wy + d2z * wz

    denom = a * c - b * b

    # Lagrange identity: denom == |d1 x d2|^2, compared relative to |d1|^2 |d2|^2
    if denom <= PARALLEL_DENOM_EPSILON * a * c:
        return None

    s = (b * e - c * d) / denom
    t = (a * e - b * d) / denom

    return (
        Vec3(p1x + s * d1x, p1y + s * d1y, p1z + s * d1z),
        Vec3(p2x + t * d2x, p2y + t * d2y, p2z + t * d2z)
    )


# ============================================================================
# Planes
# ============================================================================

def fit_plane_three_points(p1, p2, p3, eps) -> Optional[CGPlane]:
    """
    Plane through three points, or None if the triple is degenerate.

    Degenerate means either edge vector from p1 is no longer than eps, or
    their cross product is no longer than eps (collinear points).
    """
    v1 = sub3(p2, p1)
    v2 = sub3(p3, p1)
    if length(v1) <= eps or length(v2) <= eps:
        return None
    n = cross(v1, v2)
    n_len = length(n)
    if n_len <= eps:
        return None
    normal = mul3(n, 1.0 / n_len)
    return CGPlane(normal, dot3(normal, p1))

def fit_plane_to_points(points: Sequence) -> CGPlane:
    """
    Least-squares plane through a point set.

    The normal is the right singular vector of the centred coordinates with
    the smallest singular value. Raises DegenerateInputError for fewer than
    three points or a collinear set.
    """
    if len(points) < 3:
        raise DegenerateInputError(f"Need at least 3 points to fit a plane, got {len(points)}")

    coords = np.asarray([tuple(p) for p in points], dtype=float)
    center = coords.mean(axis=0)
    centered = coords - center
    _, singular_values, vt = np.linalg.svd(centered, full_matrices=False)

    # Rank < 2 means every point lies on a line (or coincides)
    scale = max(singular_values[0], 1.0)
    if singular_values[1] <= 1e-12 * scale:
        raise DegenerateInputError("Cannot fit a plane to collinear points")

    normal = Vec3(vt[2])
    normal = normalize(normal)
    return CGPlane(normal, dot3(normal, center))

def signed_distance_to_plane(point, plane: CGPlane):
    return plane.signed_distance(point)

def max_plane_deviation(points, plane: CGPlane):
    """Largest absolute distance from any of the points to the plane."""
    return max((abs(plane.signed_distance(p)) for p in points), default=0.0)


# ============================================================================
# Matrices (row-major, row vectors: p' = p @ M, translation in bottom row)
# ============================================================================

def scale_matrix(*args):
    x,y,z = unpack_args(*args)
    return (
        (x, 0.0, 0.0, 0.0),
        (0.0, y, 0.0, 0.0),
        (0.0, 0.0, z, 0.0),
        (0.0, 0.0, 0.0, 1.0)
    )

def translate_matrix(*args):
    x,y,z = unpack_args(*args)
    return (
        (1.0, 0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (x, y, z, 1.0)
    )

def mat_mul(matrix1, matrix2):
    """Multiply two 4x4 matrices."""
    result = [[0.0] * 4 for _ in range(4)]
    for i in range(4):
        for j in range(4):
            for k in range(4):
                result[i][j] += matrix1[i][k] * matrix2[k][j]
    return tuple(tuple(row) for row in result)

def scale_about_point_matrix(factor, anchor=(0.0, 0.0, 0.0)):
    """Uniform scaling by factor that keeps anchor fixed."""
    ax, ay, az = anchor[0], anchor[1], anchor[2]
    return mat_mul(mat_mul(translate_matrix(-ax, -ay, -az), scale_matrix(factor, factor, factor)),
                   translate_matrix(ax, ay, az))

def explode_matrix(matrix):
    """
    Split a 4x4 matrix into (translation, rotation, scale).

    Scale is the length of each of the upper three rows and rotation is
    those rows divided by their scale. A row with zero scale is replaced
    by the matching identity row.
    """
    translation = (matrix[3][0], matrix[3][1], matrix[3][2])

    scale = []
    rotation = []
    for i in range(3):
        row = (matrix[i][0], matrix[i][1], matrix[i][2])
        s = length(row)
        scale.append(s)
        rotation.append(_IDENTITY_ROWS[i] if s < 1e-10 else tuple(c / s for c in row))

    return translation, tuple(rotation), tuple(scale)

def transform_point(point, matrix):
    """Transform a 3D point by a 4x4 matrix. Returns Vec3."""
    x, y, z = point[0], point[1], point[2]
    w = x * matrix[0][3] + y * matrix[1][3] + z * matrix[2][3] + matrix[3][3]
    if abs(w) < 1e-10:
        raise DegenerateInputError("Transform maps the point to infinity")
    inv_w = 1.0 / w
    return Vec3(
        (x * matrix[0][0] + y * matrix[1][0] + z * matrix[2][0] + matrix[3][0]) * inv_w,
        (x * matrix[0][1] + y * matrix[1][1] + z * matrix[2][1] + matrix[3][1]) * inv_w,
        (x * matrix[0][2] + y * matrix[1][2] + z * matrix[2][2] + matrix[3][2]) * inv_w
    )

def transform_direction(vector, matrix):
    """Apply only the rotation part of matrix; translation and scale are ignored."""
    _, rows, _ = explode_matrix(matrix)
    return Vec3(
        sum(vector[k] * rows[k][0] for k in range(3)),
        sum(vector[k] * rows[k][1] for k in range(3)),
        sum(vector[k] * rows[k][2] for k in range(3))
    )
