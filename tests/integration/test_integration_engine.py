"""
Integration tests for the cg_engine entry points.

These run the full pipelines through the public API: config resolution,
solver execution, error capture into CGResult and mesh rendering.
"""

import json
import logging
import unittest
from unittest.mock import patch

import numpy as np

import cadgeom
from cadgeom import (
    CGConfig,
    CGSegment,
    CGLine,
    DegenerateInputError,
    InsufficientInputError,
    InsufficientPointsError,
    MismatchedLengthError,
    NoSolutionFound,
    ToleranceMisconfigured,
    Vec3,
)
from cadgeom.cg_engine import _resolve_config
from cadgeom.cg_logging import setup_logging, LOGGER_NAME
from cadgeom.render_engines import IndexedMeshContext
from cadgeom.solvers import IntersectionOutcome, PlaneFitter, LoftMesh
import cadgeom.mathutils.cg_math as CGMath
from tests.test_fixtures.assertions import assert_points_close
from tests.test_fixtures.factories import arc_path, line_path, unit_square_edges, grid_points


class EngineConfigTests(unittest.TestCase):
    """Tests for CGConfig and option handling"""

    def testDefaults(self):
        """Default tolerance and sampling parameters"""
        config = CGConfig()
        self.assertEqual(config.eps, cadgeom.DEFAULT_TOLERANCE)
        self.assertEqual(config.max_samples, 400)
        self.assertEqual(config.exhaustive_limit, 12)
        self.assertIs(config.validate(), config)

    def testNegativeEpsReportedOnResult(self):
        """A bad tolerance comes back as a failed result"""
        result = cadgeom.loft_paths([line_path(0), line_path(1)], eps=-1.0)
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, ToleranceMisconfigured)

    def testUnknownOptionRaises(self):
        """Misspelt options are programming errors"""
        with self.assertRaises(TypeError):
            cadgeom.loft_paths([line_path(0), line_path(1)], epsilon=1e-3)

    def testOverridesDoNotMutateConfig(self):
        """Keyword overrides apply to a copy"""
        config = CGConfig(eps=0.5)
        paths = [[(0, 0, 0), (1, 0, 0)], [(0, 0.01, 0), (1, 0.01, 0)]]
        loose = cadgeom.loft_paths(paths, config=config)
        tight = cadgeom.loft_paths(paths, config=config, eps=1e-6)
        self.assertEqual(loose.stats['skipped_count'], 2)
        self.assertEqual(tight.stats['skipped_count'], 0)
        self.assertEqual(config.eps, 0.5)

    def testExplicitNoneOverridesConfig(self):
        """seed=None clears a seed set on the config"""
        config = CGConfig(seed=5)
        self.assertIsNone(_resolve_config(config, {'seed': None}).seed)
        self.assertEqual(_resolve_config(config, {}).seed, 5)
        self.assertEqual(config.seed, 5)

    def testSeedNoneDrawsFreshEntropy(self):
        """An explicit seed=None draws fresh entropy instead of the config seed"""
        config = CGConfig(seed=5)
        with patch('numpy.random.default_rng', wraps=np.random.default_rng) as default_rng:
            result = cadgeom.fit_dominant_plane(unit_square_edges(), config=config, seed=None)
        self.assertTrue(result.ok)
        default_rng.assert_called_once_with(None)


class EngineLoftTests(unittest.TestCase):
    """End-to-end lofting"""

    def testLoftCurves(self):
        """Shuffled, mixed-direction sections loft into one strip set"""
        paths = [arc_path(2), arc_path(0, reverse=True), arc_path(1), arc_path(3, reverse=True)]
        result = cadgeom.loft_curves(paths)
        self.assertTrue(result.ok)
        mesh = result.unwrap()
        self.assertIsInstance(mesh, LoftMesh)
        self.assertEqual(result.stats, {'triangle_count': 24, 'seam_count': 12, 'skipped_count': 0})
        # Sections are meshed bottom to top
        self.assertEqual([round(p[0][2]) for p in mesh.paths], [0, 1, 2, 3])
        self.assertIsNone(result.output)

    def testOrderPaths(self):
        """order_paths returns the input objects in traversal order"""
        paths = [line_path(2), line_path(0), line_path(1)]
        result = cadgeom.order_paths(paths)
        self.assertEqual([id(p) for p in result.value], [id(paths[1]), id(paths[2]), id(paths[0])])

    def testLoftRendersIndexedMesh(self):
        """mesh_format selects the rendered output"""
        paths = [arc_path(z) for z in range(3)]
        indexed = cadgeom.loft_curves(paths, mesh_format='indexed')
        self.assertIsInstance(indexed.output, IndexedMeshContext)

        as_dict = cadgeom.loft_curves(paths, mesh_format='dict')
        self.assertEqual(as_dict.output['stats'], {'vertex_count': 15, 'triangle_count': 16, 'seam_count': 8})

        as_json = cadgeom.loft_curves(paths, mesh_format='json')
        self.assertEqual(json.loads(as_json.output), as_dict.output)

    def testMismatchedLengths(self):
        """Unequal point counts fail without raising"""
        result = cadgeom.loft_curves([line_path(0, point_count=3), line_path(1, point_count=4)])
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, MismatchedLengthError)
        self.assertIsNone(result.value)
        with self.assertRaises(MismatchedLengthError):
            result.unwrap()

    def testSmallModelLoftsWithDefaults(self):
        """Centimetre-sized sections keep every face under the default config"""
        paths = [[(0, 0, 0), (0.02, 0, 0), (0.04, 0, 0)],
                 [(0, 0.02, 0), (0.02, 0.02, 0), (0.04, 0.02, 0)]]
        result = cadgeom.loft_paths(paths)
        self.assertTrue(result.ok)
        self.assertEqual(result.stats, {'triangle_count': 4, 'seam_count': 2, 'skipped_count': 0})

    def testSinglePath(self):
        """One curve is not enough to loft"""
        result = cadgeom.loft_curves([line_path(0)])
        self.assertIsInstance(result.error, InsufficientInputError)

    def testFailureIsLogged(self):
        """Failed entry points log a warning under the package logger"""
        with self.assertLogs(LOGGER_NAME, level='WARNING') as logs:
            cadgeom.loft_curves([line_path(0)])
        self.assertTrue(any('order_paths failed' in line for line in logs.output))


class EnginePlaneTests(unittest.TestCase):
    """End-to-end plane fitting and normals"""

    def testFitDominantPlane(self):
        """Square plus stray edges"""
        edges = unit_square_edges() + [((0, 0, 0), (0, 0, 1)), ((2, 0, 1), (2, 1, 1.5))]
        result = cadgeom.fit_dominant_plane(edges)
        self.assertTrue(result.ok)
        self.assertEqual(result.stats['inlier_count'], 4)
        self.assertEqual(result.stats['outlier_count'], 2)

    def testSeededFitIsReproducible(self):
        """config.seed drives the random sampling"""
        points = grid_points(5, 5) + [(0.5, 0.5, 1), (1.5, 2.5, -2), (3.5, 0.5, 2)]
        first = cadgeom.fit_dominant_plane_to_points(points, seed=11, exhaustive_limit=5)
        second = cadgeom.fit_dominant_plane_to_points(points, seed=11, exhaustive_limit=5)
        self.assertEqual(first.value.plane, second.value.plane)
        self.assertEqual(first.stats, second.stats)
        self.assertEqual(first.stats['inlier_count'], 25)

    def testNoCandidateIsNoSolution(self):
        """A search with no valid plane keeps the partial fit on the result"""
        edges = unit_square_edges()
        collinear = iter([(Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(2, 0, 0))])
        with patch.object(PlaneFitter, 'candidate_triples', return_value=collinear):
            result = cadgeom.fit_dominant_plane(edges)
        self.assertIsInstance(result.error, NoSolutionFound)
        self.assertIsNone(result.value.plane)
        self.assertEqual(result.value.outliers, edges)
        self.assertIs(result.error.partial, result.value)

    def testTooFewPoints(self):
        """InsufficientPointsError reaches the caller on the result"""
        result = cadgeom.fit_dominant_plane([((0, 0, 0), (1, 0, 0))])
        self.assertIsInstance(result.error, InsufficientPointsError)

    def testDrawInPlaneNormals(self):
        """Normals are built for the kept edges and moved by the transform"""
        edges = unit_square_edges() + [((0, 0, 0), (0.5, 0.5, 2))]
        result = cadgeom.draw_in_plane_normals(edges, transform=CGMath.translate_matrix(1, 0, 0))
        self.assertTrue(result.ok)
        self.assertEqual(result.stats, {'line_count': 4, 'kept_count': 4, 'removed_count': 1})
        assert_points_close(self, result.value.lines[0].origin, (1.5, 0, 0))

    def testDrawNormalsCollinear(self):
        """Collinear edges fail with DegenerateInputError"""
        result = cadgeom.draw_in_plane_normals([((0, 0, 0), (1, 0, 0)), ((1, 0, 0), (2, 0, 0))])
        self.assertIsInstance(result.error, DegenerateInputError)


class EngineIntersectionTests(unittest.TestCase):
    """End-to-end intersection marking"""

    def setUp(self):
        self.grid = [
            CGLine((0, 0, 0), (1, 0, 0)),
            CGLine((0, 1, 0), (1, 0, 0)),
            CGLine((0, 0, 0), (0, 1, 0)),
            ((2, 0, 0), (0, 1, 0)),
        ]

    def testFindIntersectionsIdempotent(self):
        """Marking twice adds nothing the second time"""
        first = cadgeom.find_intersections(self.grid)
        self.assertEqual(first.stats['point_count'], 4)
        second = cadgeom.find_intersections(self.grid, known_points=first.value.points)
        self.assertEqual(second.stats['point_count'], 0)
        self.assertEqual(second.stats['duplicate_count'], 4)

    def testEmptyResultIsSuccess(self):
        """No crossings is not an error"""
        result = cadgeom.find_intersections([CGLine((0, 0, 0), (1, 0, 0)), CGLine((0, 1, 0), (1, 0, 0))])
        self.assertTrue(result.ok)
        self.assertEqual(result.value.points, [])

    def testTooFewLines(self):
        """A single line fails with InsufficientInputError"""
        result = cadgeom.find_intersections([CGLine((0, 0, 0), (1, 0, 0))])
        self.assertIsInstance(result.error, InsufficientInputError)

    def testFindSegmentIntersections(self):
        """Segments given as point pairs, with one collinear overlap"""
        segments = [
            ((0, 0, 0), (2, 0, 0)),
            ((1, 0, 0), (3, 0, 0)),
            ((0.5, -1, 0), (0.5, 1, 0)),
        ]
        result = cadgeom.find_segment_intersections(segments)
        self.assertTrue(result.ok)
        self.assertEqual(result.stats['collinear_count'], 1)
        self.assertEqual(result.stats['point_count'], 1)
        assert_points_close(self, result.value.points[0], (0.5, 0, 0))

    def testZeroLengthSegmentDoesNotAbort(self):
        """A zero-length segment is skipped and the others still cross"""
        segments = [
            ((0, 0, 0), (2, 2, 0)),
            ((0, 2, 0), (2, 0, 0)),
            ((5, 5, 5), (5, 5, 5)),
        ]
        result = cadgeom.find_segment_intersections(segments)
        self.assertTrue(result.ok)
        self.assertEqual(result.stats['degenerate_count'], 1)
        self.assertEqual(result.value.degenerate, [2])
        assert_points_close(self, result.value.points[0], (1, 1, 0))

    def testFindCrossing(self):
        """Two crossing segments"""
        result = cadgeom.find_crossing(CGSegment((0, 0, 0), (2, 2, 0)), CGSegment((0, 2, 0), (2, 0, 0)))
        self.assertTrue(result.ok)
        assert_points_close(self, result.value.point, (1, 1, 0))

    def testFindCrossingOutsideExtents(self):
        """Crossing beyond an edge is reported with the pair classification"""
        result = cadgeom.find_crossing(CGSegment((0, 0, 0), (1, 0, 0)), CGSegment((2, -1, 0), (2, 1, 0)))
        self.assertIsInstance(result.error, NoSolutionFound)
        self.assertEqual(result.value.outcome, IntersectionOutcome.OUT_OF_EXTENTS)
        self.assertIn('extents', str(result.error))

    def testFindCrossingCollinear(self):
        """Overlapping edges are not a single crossing"""
        result = cadgeom.find_crossing(CGSegment((0, 0, 0), (2, 0, 0)), CGSegment((1, 0, 0), (3, 0, 0)))
        self.assertEqual(result.value.outcome, IntersectionOutcome.COLLINEAR_OVERLAP)
        self.assertIn('collinear', str(result.error))


class EngineScaleTests(unittest.TestCase):
    """End-to-end reference scaling"""

    def testScaleToReference(self):
        """Tuple segments are accepted and the factor reaches the target"""
        result = cadgeom.scale_to_reference(((0, 0, 0), (2, 0, 0)), 5.0)
        self.assertTrue(result.ok)
        self.assertAlmostEqual(result.value.factor, 2.5)

    def testScaleAboutAnchor(self):
        """The anchor option is passed through"""
        result = cadgeom.scale_to_reference(CGSegment((0, 0, 0), (2, 0, 0)), 5.0, anchor=(1, 0, 0))
        assert_points_close(self, CGMath.transform_point((2, 0, 0), result.value.matrix), (3.5, 0, 0))

    def testZeroLength(self):
        """A zero-length reference edge fails"""
        result = cadgeom.scale_to_reference(((1, 1, 1), (1, 1, 1)), 5.0)
        self.assertIsInstance(result.error, DegenerateInputError)


class LoggingSetupTests(unittest.TestCase):
    """Tests for setup_logging"""

    def tearDown(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    def testConsoleHandler(self):
        """One console handler at the requested level"""
        logger = setup_logging(logging.DEBUG)
        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

    def testRepeatedSetupDoesNotDuplicate(self):
        """Calling setup twice leaves a single handler"""
        setup_logging()
        logger = setup_logging()
        self.assertEqual(len(logger.handlers), 1)

    def testFileHandler(self):
        """A log file gets its own handler"""
        import tempfile
        import os
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'cadgeom.log')
            logger = setup_logging(logging.INFO, log_file=path)
            self.assertEqual(len(logger.handlers), 2)
            logger.info("written")
            for handler in logger.handlers:
                handler.flush()
            with open(path, encoding='utf-8') as f:
                self.assertIn("written", f.read())
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()


if __name__ == '__main__':
    unittest.main()
