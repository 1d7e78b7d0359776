"""
Unit tests for LoftMesher.

Tests cover strip triangulation, direction alignment and its propagation
to the next pair, degenerate triangle skipping and seam bookkeeping.
"""

import unittest

from cadgeom.cg_errors import InsufficientInputError, MismatchedLengthError, ToleranceMisconfigured
from cadgeom.solvers import LoftMesher, CGTriangle, seam_edge
from tests.test_fixtures.assertions import assert_points_close
from tests.test_fixtures.factories import arc_path, line_path


class LoftMesherAlignTests(unittest.TestCase):
    """Tests for direction alignment between neighbouring paths"""

    def testSameDirectionKept(self):
        """A path already running the same way is not reversed"""
        aligned = LoftMesher.align(line_path(0), line_path(1))
        assert_points_close(self, aligned, line_path(1))

    def testOppositeDirectionReversed(self):
        """A path drawn the other way round is reversed"""
        right = list(reversed(line_path(1)))
        aligned = LoftMesher.align(line_path(0), right)
        assert_points_close(self, aligned, line_path(1))

    def testAlignReturnsNewTuple(self):
        """The input path is not modified"""
        right = list(reversed(line_path(1)))
        snapshot = list(right)
        LoftMesher.align(line_path(0), right)
        self.assertEqual(right, snapshot)


class LoftMesherBuildTests(unittest.TestCase):
    """Tests for strip triangulation"""

    def testTwoPathStrip(self):
        """Two paths of L points give 2(L-1) triangles and L-1 seams"""
        mesh = LoftMesher.build([line_path(0, point_count=4), line_path(1, point_count=4)], 1e-9)
        self.assertEqual(mesh.triangle_count, 6)
        self.assertEqual(len(mesh.seam_edges), 3)
        self.assertEqual(mesh.skipped, 0)

    def testTriangleCornerOrder(self):
        """Each quad yields (p00, p10, p11) and (p00, p11, p01)"""
        left = [(0, 0, 0), (1, 0, 0)]
        right = [(0, 1, 0), (1, 1, 0)]
        mesh = LoftMesher.build([left, right], 1e-9)
        first, second = mesh.triangles
        assert_points_close(self, first, [(0, 0, 0), (0, 1, 0), (1, 1, 0)])
        assert_points_close(self, second, [(0, 0, 0), (1, 1, 0), (1, 0, 0)])
        self.assertEqual(mesh.seam_edges, {seam_edge((0, 0, 0), (1, 1, 0))})

    def testTriangleCountFormula(self):
        """N paths of L points give 2(L-1)(N-1) triangles when nothing degenerates"""
        paths = [arc_path(z, point_count=6) for z in range(4)]
        mesh = LoftMesher.build(paths, 1e-6)
        self.assertEqual(mesh.triangle_count, 2 * 5 * 3)
        self.assertEqual(len(mesh.seam_edges), 5 * 3)

    def testReversalPropagates(self):
        """The aligned copy of a reversed path becomes the next left path"""
        a = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
        b = [(2, 1, 0), (1, 1, 0), (0, 1, 0)]
        c = [(0, 2, 0), (1, 2, 0), (2, 2, 0)]
        mesh = LoftMesher.build([a, b, c], 1e-9)

        assert_points_close(self, mesh.paths[1], list(reversed(b)))
        # Compared against the unaligned b, c would have been reversed too
        assert_points_close(self, mesh.paths[2][0], (0, 2, 0))
        self.assertEqual(mesh.triangle_count, 8)
        self.assertEqual(len(mesh.seam_edges), 4)

    def testInputPathsUnchanged(self):
        """Reversal works on copies"""
        b = [(2, 1, 0), (1, 1, 0), (0, 1, 0)]
        LoftMesher.build([[(0, 0, 0), (1, 0, 0), (2, 0, 0)], b], 1e-9)
        self.assertEqual(b, [(2, 1, 0), (1, 1, 0), (0, 1, 0)])

    def testDegenerateTriangleSkipped(self):
        """A zero-area half quad is skipped and its diagonal is not a seam"""
        a = [(0, 0, 0), (1, 0, 0)]
        b = [(0, 0, 0), (1, 1, 0)]
        mesh = LoftMesher.build([a, b], 1e-9)
        self.assertEqual(mesh.triangle_count, 1)
        self.assertEqual(mesh.skipped, 1)
        self.assertEqual(len(mesh.seam_edges), 0)

    def testEpsControlsSkipping(self):
        """Slivers below eps are skipped, above eps they are kept"""
        a = [(0, 0, 0), (1, 0, 0)]
        b = [(0, 0.01, 0), (1, 0.01, 0)]
        self.assertEqual(LoftMesher.build([a, b], 1e-3).skipped, 0)
        self.assertEqual(LoftMesher.build([a, b], 0.1).skipped, 2)

    def testEmittedTrianglesHaveArea(self):
        """Every emitted triangle is above the degeneracy threshold"""
        paths = [arc_path(z, point_count=7) for z in (0, 0.5, 1.0)]
        eps = 1e-3
        for triangle in LoftMesher.build(paths, eps).triangles:
            self.assertIsInstance(triangle, CGTriangle)
            self.assertFalse(triangle.is_degenerate(eps))
            self.assertGreater(triangle.min_height(), eps)

    def testSmallScaleStripKept(self):
        """A 2 cm strip keeps all its faces at the default millimetre tolerance"""
        left = [(0, 0, 0), (0.02, 0, 0), (0.04, 0, 0)]
        right = [(0, 0.02, 0), (0.02, 0.02, 0), (0.04, 0.02, 0)]
        mesh = LoftMesher.build([left, right], 1e-3)
        self.assertEqual(mesh.triangle_count, 4)
        self.assertEqual(mesh.skipped, 0)
        self.assertEqual(len(mesh.seam_edges), 2)

    def testTriangleCountIndependentOfScale(self):
        """Scaling the whole model does not change which triangles survive"""
        base = [arc_path(z, point_count=5) for z in (0, 1, 2)]
        for factor in (0.05, 1.0, 1000.0):
            scaled = [[(x * factor, y * factor, z * factor) for x, y, z in path] for path in base]
            mesh = LoftMesher.build(scaled, 1e-3)
            self.assertEqual(mesh.triangle_count, 2 * 4 * 2, f"factor {factor}")


    def testSeamEdgesAreTriangleEdges(self):
        """Each seam is an edge of exactly two emitted triangles"""
        mesh = LoftMesher.build([line_path(0), line_path(1), line_path(2)], 1e-9)
        for seam in mesh.seam_edges:
            owners = [t for t in mesh.triangles if seam in t.edges()]
            self.assertEqual(len(owners), 2)

    def testInvalidInput(self):
        """Loft input is validated like path ordering input"""
        with self.assertRaises(InsufficientInputError):
            LoftMesher.build([line_path(0)], 1e-3)
        with self.assertRaises(MismatchedLengthError):
            LoftMesher.build([line_path(0, point_count=3), line_path(1, point_count=4)], 1e-3)
        with self.assertRaises(ToleranceMisconfigured):
            LoftMesher.build([line_path(0), line_path(1)], -1.0)


class CGTriangleTests(unittest.TestCase):
    """Tests for triangle degeneracy measures"""

    def testMinHeight(self):
        """The smallest altitude sits over the longest edge"""
        triangle = CGTriangle((0, 0, 0), (6, 0, 0), (2, 3, 0))
        self.assertAlmostEqual(triangle.doubled_area(), 18.0)
        self.assertAlmostEqual(triangle.min_height(), 3.0)

    def testSliverIsDegenerate(self):
        """Long edges do not hide corners that are collinear within eps"""
        sliver = CGTriangle((0, 0, 0), (5, 0.0005, 0), (10, 0, 0))
        self.assertGreater(sliver.doubled_area(), 1e-3)
        self.assertTrue(sliver.is_degenerate(1e-3))
        self.assertFalse(sliver.is_degenerate(1e-4))

    def testShortEdgeIsDegenerate(self):
        """A collapsed edge makes the triangle degenerate"""
        triangle = CGTriangle((0, 0, 0), (0, 0, 0), (1, 1, 0))
        self.assertEqual(triangle.min_height(), 0.0)
        self.assertTrue(triangle.is_degenerate(0.0))


if __name__ == '__main__':
    unittest.main()
