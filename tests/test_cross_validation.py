"""
Cross-validation against the reference sgp4 library.

The sgp4 library implements the revised (2006) SGP4/SDP4 formulation;
the models here follow Spacetrack Report #3, so results agree to within a
few kilometres for near-Earth orbits and to a looser bound in deep space.

Run with:
    python -m pytest tests/test_cross_validation.py -v
"""

import unittest
from datetime import timedelta

import numpy as np
from sgp4.api import Satrec

from satpredict.config import FALLBACK_GEOSYNC_TLE, FALLBACK_ISS_TLE, FALLBACK_MOLNIYA_TLE
from satpredict.satellite_factory import create_satellite
from satpredict.tle import TLE


def reference_state(satrec: Satrec, tsince: float):
    error, r, v = satrec.sgp4(satrec.jdsatepoch, satrec.jdsatepochF + tsince / 1440.0)
    return error, np.array(r), np.array(v)


class CrossValidationMixin:
    line1: str
    line2: str
    times = (0.0,)
    position_tolerance_km = 5.0
    velocity_tolerance_km_s = 0.01

    def setUp(self):
        self.tle = TLE([self.line1, self.line2])
        self.satellite = create_satellite(self.tle)
        self.satrec = Satrec.twoline2rv(self.line1, self.line2)

    def test_matches_reference(self):
        for tsince in self.times:
            with self.subTest(tsince=tsince):
                error, r_ref, v_ref = reference_state(self.satrec, tsince)
                self.assertEqual(error, 0, "Reference propagation should not error")

                position, velocity, _ = self.satellite.advance(
                    self.tle.epoch_datetime + timedelta(minutes=tsince)
                )
                self.assertLess(np.linalg.norm(position - r_ref), self.position_tolerance_km)
                self.assertLess(np.linalg.norm(velocity - v_ref), self.velocity_tolerance_km_s)


class TestISSAgainstReference(CrossValidationMixin, unittest.TestCase):
    """ISS, near-Earth with drag."""

    line1 = FALLBACK_ISS_TLE["line1"]
    line2 = FALLBACK_ISS_TLE["line2"]
    times = (0.0, 45.0, 90.0, 360.0, 720.0, 1440.0)


class TestSpacetrackAgainstReference(CrossValidationMixin, unittest.TestCase):
    """Object 11801, deep space without resonance."""

    line1 = "1 11801U          80230.29629788  .00000096  00000-0  00000-0 0    13"
    line2 = "2 11801  46.7916 230.4354 7318036  47.4722  10.4117  2.28537848    13"
    times = (0.0, 360.0, 720.0, 1080.0, 1440.0)
    position_tolerance_km = 20.0
    velocity_tolerance_km_s = 0.05


class TestMolniyaAgainstReference(CrossValidationMixin, unittest.TestCase):
    """Molniya, deep space with 12-hour resonance."""

    line1 = FALLBACK_MOLNIYA_TLE["line1"]
    line2 = FALLBACK_MOLNIYA_TLE["line2"]
    times = (0.0, 120.0, 360.0, 720.0)
    position_tolerance_km = 100.0
    velocity_tolerance_km_s = 0.3


class TestGeosynchronousAgainstReference(CrossValidationMixin, unittest.TestCase):
    """ES'HAIL 2, deep space with 24-hour resonance."""

    line1 = FALLBACK_GEOSYNC_TLE["line1"]
    line2 = FALLBACK_GEOSYNC_TLE["line2"]
    times = (0.0, 360.0, 720.0, 1440.0, 2880.0)
    position_tolerance_km = 5.0
    velocity_tolerance_km_s = 0.002


if __name__ == "__main__":
    unittest.main()
