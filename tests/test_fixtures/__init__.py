"""Test fixtures and utilities for cadgeom testing.

Organized into logical modules:
- assertions: Custom assertion functions (assert_points_close, assert_unit_length)
- factories: Synthetic geometry (arc_path, line_path, unit_square_edges, grid_points)
"""

from .assertions import assert_points_close, assert_unit_length
from .factories import arc_path, line_path, unit_square_edges, grid_points

__all__ = [
    'assert_points_close',
    'assert_unit_length',
    'arc_path',
    'line_path',
    'unit_square_edges',
    'grid_points',
]
