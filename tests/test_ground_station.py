"""
Tests for the ground station value type.

Run with:
    python -m pytest tests/test_ground_station.py -v
"""

import dataclasses
import math
import unittest

from satpredict.exceptions import ConfigurationError
from satpredict.ground_station import GroundStation


class TestGroundStation(unittest.TestCase):
    """Test construction, validation and the horizon mask."""

    def test_defaults(self):
        station = GroundStation(52.4670, -2.022, 200.0)
        self.assertEqual(len(station.horizon_elevations), 36)
        self.assertTrue(all(e == 0.0 for e in station.horizon_elevations))
        self.assertAlmostEqual(station.altitude_km, 0.2)
        self.assertAlmostEqual(station.latitude_rad, math.radians(52.4670))
        self.assertAlmostEqual(station.longitude_rad, math.radians(-2.022))

    def test_mask_of_wrong_length(self):
        """Test that a mask must have exactly 36 entries."""
        for count in (0, 2, 35, 37):
            with self.subTest(count=count):
                with self.assertRaises(ConfigurationError) as ctx:
                    GroundStation(52.0, 0.0, 0.0, [5.0] * count)
                self.assertIn("36", str(ctx.exception))
                self.assertIn(str(count), str(ctx.exception))
                self.assertEqual(ctx.exception.field, "horizon_elevations")

    def test_mask_of_two_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            GroundStation(52.4670, -2.022, 200.0, horizon_elevations=[1.0, 2.0])
        self.assertEqual(str(ctx.exception), "Expected 36 Horizon Elevations, got: 2")

    def test_horizon_sector_lookup(self):
        """Test that each 10 degree sector maps to its own mask entry."""
        mask = [float(i) for i in range(36)]
        station = GroundStation(0.0, 0.0, 0.0, mask)
        self.assertEqual(station.horizon_elevation(0.0), 0.0)
        self.assertEqual(station.horizon_elevation(9.99), 0.0)
        self.assertEqual(station.horizon_elevation(10.0), 1.0)
        self.assertEqual(station.horizon_elevation(185.0), 18.0)
        self.assertEqual(station.horizon_elevation(359.9), 35.0)
        self.assertEqual(station.horizon_elevation(360.0), 0.0)
        self.assertEqual(station.horizon_elevation(-5.0), 35.0)

    def test_mask_is_copied(self):
        """Test that later changes to the caller's list do not leak in."""
        mask = [0.0] * 36
        station = GroundStation(0.0, 0.0, 0.0, mask)
        mask[0] = 45.0
        self.assertEqual(station.horizon_elevation(0.0), 0.0)

    def test_latitude_out_of_range(self):
        for latitude in (-90.5, 91.0):
            with self.subTest(latitude=latitude):
                with self.assertRaises(ConfigurationError) as ctx:
                    GroundStation(latitude, 0.0)
                self.assertEqual(ctx.exception.field, "latitude")

    def test_non_finite_longitude(self):
        with self.assertRaises(ConfigurationError):
            GroundStation(0.0, float("nan"))

    def test_immutable(self):
        station = GroundStation(52.0, 0.0)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            station.latitude = 10.0

    def test_equality_and_hash(self):
        a = GroundStation(52.4670, -2.022, 200.0, name="home")
        b = GroundStation(52.4670, -2.022, 200.0, name="home")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, GroundStation(52.4670, -2.022, 201.0, name="home"))

    def test_local_sidereal_time(self):
        """Test that local sidereal time leads Greenwich by the longitude."""
        greenwich = GroundStation(0.0, 0.0)
        east = GroundStation(0.0, 90.0)
        jd = 2461086.5
        diff = (east.local_sidereal_time(jd) - greenwich.local_sidereal_time(jd)) % (2 * math.pi)
        self.assertAlmostEqual(diff, math.pi / 2, places=9)


if __name__ == "__main__":
    unittest.main()
