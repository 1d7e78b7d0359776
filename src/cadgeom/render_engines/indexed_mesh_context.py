"""
Indexed mesh context for cadgeom.

Collects loft triangles as an indexed mesh: shared vertices plus triangle
indices, with seam edges expressed as vertex index pairs. A host can feed
this straight into a polygon-mesh builder instead of adding faces one by one.

Output format (to_dict):
    {
        'vertices': [[x, y, z], ...],
        'triangles': [[i, j, k], ...],
        'seams': [[i, j], ...],          # sorted pairs, sorted list
        'stats': {...},
    }
"""

import json

from cadgeom.solvers.cg_loft_mesher import LoftMesh


class IndexedMeshContext:
    """Indexed mesh builder with tolerance-based vertex sharing."""

    # Positions that round to the same multiple of this are merged
    VERTEX_TOLERANCE = 1e-6

    def __init__(self, vertex_tolerance=None):
        self.vertex_tolerance = vertex_tolerance or self.VERTEX_TOLERANCE
        self._vertices = []    # List of (x, y, z) tuples
        self._triangles = []   # List of (i, j, k) tuples
        self._seams = set()    # Set of sorted (i, j) tuples
        self._vertex_map = {}

    def _get_or_create_vertex(self, x: float, y: float, z: float) -> int:
        """Get index for a vertex, creating it if it doesn't exist."""
        tol = self.vertex_tolerance
        key = (round(x / tol), round(y / tol), round(z / tol))

        if key in self._vertex_map:
            return self._vertex_map[key]

        idx = len(self._vertices)
        self._vertices.append((float(x), float(y), float(z)))
        self._vertex_map[key] = idx
        return idx

    def add_triangle(self, a, b, c):
        indices = tuple(self._get_or_create_vertex(p[0], p[1], p[2]) for p in (a, b, c))
        self._triangles.append(indices)
        return indices

    def add_seam(self, p1, p2):
        i = self._get_or_create_vertex(p1[0], p1[1], p1[2])
        j = self._get_or_create_vertex(p2[0], p2[1], p2[2])
        self._seams.add((i, j) if i <= j else (j, i))

    def add_mesh(self, mesh: LoftMesh):
        for triangle in mesh.triangles:
            self.add_triangle(*triangle)
        for p1, p2 in sorted(mesh.seam_edges):
            self.add_seam(p1, p2)
        return self

    def get_stats(self) -> dict:
        return {
            'vertex_count': len(self._vertices),
            'triangle_count': len(self._triangles),
            'seam_count': len(self._seams),
        }

    def to_dict(self) -> dict:
        return {
            'vertices': [list(v) for v in self._vertices],
            'triangles': [list(t) for t in self._triangles],
            'seams': [list(s) for s in sorted(self._seams)],
            'stats': self.get_stats(),
        }

    def to_json(self, indent=None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @staticmethod
    def from_mesh(mesh: LoftMesh, vertex_tolerance=None) -> 'IndexedMeshContext':
        return IndexedMeshContext(vertex_tolerance).add_mesh(mesh)
