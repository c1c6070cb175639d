"""
Tests for range circle (footprint) geometry.

Run with:
    python -m pytest tests/test_footprint.py -v
"""

import unittest

import numpy as np

from satpredict.footprint import range_circle, range_circle_radius_km
from satpredict.sat_pos import SatPos


def _fmt(point):
    return f"{point[0]:4.0f} {point[1]:4.0f}"


class TestRangeCircleRadius(unittest.TestCase):
    """Test the horizon great-circle distance."""

    def test_non_positive_altitude(self):
        self.assertEqual(range_circle_radius_km(0.0), 0.0)
        self.assertEqual(range_circle_radius_km(-10.0), 0.0)

    def test_leo(self):
        """Test a 400 km orbit, about 2200 km of ground range."""
        self.assertGreater(range_circle_radius_km(400.0), 2100.0)
        self.assertLess(range_circle_radius_km(400.0), 2300.0)

    def test_monotonic(self):
        radii = [range_circle_radius_km(alt) for alt in (200.0, 1000.0, 20000.0, 36000.0)]
        self.assertEqual(radii, sorted(radii))
        # never more than a quarter of the circumference
        self.assertLess(radii[-1], 0.25 * np.pi * 12756.33)


class TestRangeCircle(unittest.TestCase):
    """Test the 360-point boundary."""

    def test_shape_and_normalisation(self):
        circle = range_circle(52.0, -2.0, 420.0)
        self.assertEqual(circle.shape, (360, 2))
        self.assertTrue(np.all(circle[:, 1] >= 0.0))
        self.assertTrue(np.all(circle[:, 1] < 360.0))
        self.assertTrue(np.all(np.abs(circle[:, 0]) <= 90.0))

    def test_equator_origin(self):
        """Test the four cardinal points around (0, 0) at 1000 km."""
        circle = range_circle(0.0, 0.0, 1000.0)
        self.assertEqual(_fmt(circle[0]), "  30    0")
        self.assertEqual(_fmt(circle[89]), "   1   30")
        self.assertEqual(_fmt(circle[179]), " -30    1")
        self.assertEqual(_fmt(circle[269]), "  -1  330")

    def test_offset_origin(self):
        """Test the cardinal points around (10, 10) at 1000 km."""
        circle = range_circle(10.0, 10.0, 1000.0)
        self.assertEqual(_fmt(circle[0]), "  40   10")
        self.assertEqual(_fmt(circle[89]), "   9   41")
        self.assertEqual(_fmt(circle[179]), " -20   11")
        self.assertEqual(_fmt(circle[269]), "   8  339")

    def test_orientation(self):
        """Test that azimuth 90 lies east and azimuth 270 west of the centre."""
        circle = range_circle(0.0, 10.0, 800.0)
        self.assertAlmostEqual(circle[90, 0], 0.0, places=9)
        self.assertAlmostEqual(circle[270, 0], 0.0, places=9)
        self.assertGreater(circle[90, 1], 10.0)
        self.assertLess(circle[270, 1], 10.0)
        self.assertAlmostEqual(circle[90, 1] - 10.0, 10.0 - circle[270, 1], places=9)

        # bearings 1 to 179 are east, 181 to 359 west
        east = (circle[1:180, 1] - 10.0) % 360.0
        west = (10.0 - circle[181:, 1]) % 360.0
        self.assertTrue(np.all((east > 0.0) & (east < 180.0)))
        self.assertTrue(np.all((west > 0.0) & (west < 180.0)))

    def test_zero_altitude_collapses(self):
        """Test that a surface point has a degenerate circle at its own position."""
        circle = range_circle(20.0, 30.0, 0.0)
        np.testing.assert_allclose(circle[:, 0], 20.0, atol=1e-9)
        np.testing.assert_allclose(circle[:, 1], 30.0, atol=1e-5)

    def test_circle_over_pole(self):
        """Test a footprint that encloses the north pole."""
        circle = range_circle(80.0, 0.0, 2000.0)
        self.assertAlmostEqual(circle[0, 1], 180.0, places=6)
        self.assertTrue(np.all(np.isfinite(circle)))

    def test_sat_pos_delegates(self):
        sat_pos = SatPos(latitude=10.0, longitude=10.0, altitude=1000.0)
        np.testing.assert_array_equal(sat_pos.range_circle(), range_circle(10.0, 10.0, 1000.0))
        self.assertEqual(sat_pos.range_circle_radius_km(), range_circle_radius_km(1000.0))


if __name__ == "__main__":
    unittest.main()
