"""
Tests for concurrent use of shared satellite and predictor instances.

Run with:
    python -m pytest tests/test_thread_safety.py -v
"""

import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from satpredict.config import FALLBACK_ISS_TLE, FALLBACK_MOLNIYA_TLE
from satpredict.ground_station import GroundStation
from satpredict.pass_predictor import PassPredictor
from satpredict.satellite_factory import create_satellite
from satpredict.tle import TLE

STATION = GroundStation(52.4670, -2.022, 200.0)
START = datetime(2026, 2, 15, tzinfo=timezone.utc)
WORKERS = 8


def reference_tle(reference):
    return TLE([reference["name"], reference["line1"], reference["line2"]])


class TestSharedSatellite(unittest.TestCase):
    """Test get_position from many threads on one instance."""

    def check_shared(self, tle):
        satellite = create_satellite(tle)
        times = [tle.epoch_datetime + timedelta(minutes=7 * i) for i in range(64)]
        expected = [create_satellite(tle).get_position(STATION, t) for t in times]

        with ThreadPoolExecutor(max_workers=WORKERS) as executor:
            results = list(executor.map(lambda t: satellite.get_position(STATION, t), times))

        self.assertEqual(results, expected)

    def test_near_earth(self):
        self.check_shared(reference_tle(FALLBACK_ISS_TLE))

    def test_deep_space(self):
        self.check_shared(reference_tle(FALLBACK_MOLNIYA_TLE))


class TestSharedPredictor(unittest.TestCase):
    """Test pass searches from many threads on one predictor."""

    def test_concurrent_searches(self):
        single = PassPredictor(reference_tle(FALLBACK_ISS_TLE), STATION)
        expected = single.next_sat_pass(START)
        per_search = single.iteration_count

        shared = PassPredictor(reference_tle(FALLBACK_ISS_TLE), STATION)
        with ThreadPoolExecutor(max_workers=WORKERS) as executor:
            results = list(executor.map(shared.next_sat_pass, [START] * WORKERS))
        shared.next_sat_pass(START)

        for result in results:
            self.assertEqual(result, expected)
        self.assertEqual(shared.iteration_count, (WORKERS + 1) * per_search)

    def test_concurrent_positions(self):
        predictor = PassPredictor(reference_tle(FALLBACK_ISS_TLE), STATION)
        with ThreadPoolExecutor(max_workers=WORKERS) as executor:
            tracks = list(executor.map(
                lambda _: predictor.get_positions(START, 60, 10, 10), range(WORKERS)
            ))
        for track in tracks:
            self.assertEqual(track, tracks[0])
        self.assertEqual(predictor.iteration_count, WORKERS * 20)


if __name__ == "__main__":
    unittest.main()
