"""
Tests for pass prediction.

Reference passes of the ISS over a station in the English Midlands on
15 February 2026. Times are checked to within a minute and azimuths to a
few degrees since the search resolution differs from the published table.

Run with:
    python -m pytest tests/test_pass_predictor.py -v
"""

import unittest
from datetime import datetime, timedelta, timezone

from satpredict.config import (
    FALLBACK_GEOSYNC_TLE,
    FALLBACK_ISS_TLE,
    FALLBACK_MOLNIYA_TLE,
    SPEED_OF_LIGHT,
)
from satpredict.exceptions import ConfigurationError, PassNotFoundError
from satpredict.ground_station import GroundStation
from satpredict.pass_event import POLE_NONE, POLE_NORTH, POLE_SOUTH, PassEvent
from satpredict.pass_predictor import PassPredictor, pole_crossing
from satpredict.tle import TLE

STATION = GroundStation(52.4670, -2.022, 200.0)
START = datetime(2026, 2, 15, tzinfo=timezone.utc)
TIME_TOLERANCE = timedelta(seconds=60)


def utc(hour, minute, second):
    return datetime(2026, 2, 15, hour, minute, second, tzinfo=timezone.utc)


def iss_tle():
    return TLE([FALLBACK_ISS_TLE["name"], FALLBACK_ISS_TLE["line1"], FALLBACK_ISS_TLE["line2"]])


class TestNextSatPass(unittest.TestCase):
    """Test the single-pass search against the reference table."""

    @classmethod
    def setUpClass(cls):
        cls.predictor = PassPredictor(iss_tle(), STATION)
        cls.first = cls.predictor.next_sat_pass(START)

    def assert_pass(self, sat_pass, start, end, pole, aos_azimuth, los_azimuth, max_elevation):
        self.assertIsInstance(sat_pass, PassEvent)
        self.assertAlmostEqual(sat_pass.start_time, start, delta=TIME_TOLERANCE)
        self.assertAlmostEqual(sat_pass.end_time, end, delta=TIME_TOLERANCE)
        self.assertEqual(sat_pass.pole_passed, pole)
        self.assertAlmostEqual(sat_pass.aos_azimuth, aos_azimuth, delta=3)
        self.assertAlmostEqual(sat_pass.los_azimuth, los_azimuth, delta=3)
        self.assertAlmostEqual(sat_pass.max_elevation, max_elevation, delta=1.0)
        self.assertLessEqual(sat_pass.start_time, sat_pass.tca)
        self.assertLessEqual(sat_pass.tca, sat_pass.end_time)

    def test_first_pass(self):
        self.assert_pass(self.first, utc(4, 33, 45), utc(4, 41, 0), POLE_NONE, 175, 90, 6.1)
        self.assertAlmostEqual(self.first.tca, utc(4, 37, 15), delta=TIME_TOLERANCE)

    def test_same_call_same_result(self):
        self.assertEqual(self.predictor.next_sat_pass(START), self.first)

    def test_successive_passes(self):
        """Test passes found by searching from each previous pass start."""
        expected = [
            (utc(6, 8, 10), utc(6, 18, 30), POLE_SOUTH, 222, 78, 27.63),
            (utc(7, 44, 25), utc(7, 55, 15), POLE_SOUTH, 255, 84, 69.3),
            (utc(9, 21, 15), utc(9, 32, 5), POLE_SOUTH, 275, 104, 69.35),
        ]
        sat_pass = self.first
        for start, end, pole, aos_azimuth, los_azimuth, max_elevation in expected:
            with self.subTest(start=start):
                sat_pass = self.predictor.next_sat_pass(sat_pass.start_time)
                self.assert_pass(sat_pass, start, end, pole, aos_azimuth, los_azimuth, max_elevation)

    def test_wind_back_reports_pass_in_progress(self):
        """Test that a search started mid-pass returns that pass."""
        mid_pass = utc(4, 37, 0)
        self.assertEqual(self.predictor.next_sat_pass(mid_pass, wind_back=True), self.first)
        later = self.predictor.next_sat_pass(mid_pass)
        self.assertGreater(later.start_time, self.first.end_time)

    def test_naive_start_is_utc(self):
        self.assertEqual(self.predictor.next_sat_pass(START.replace(tzinfo=None)), self.first)

    def test_two_predictors_agree(self):
        other = PassPredictor(iss_tle(), STATION)
        self.assertEqual(other.next_sat_pass(START), self.first)
        self.assertEqual(str(other.next_sat_pass(START)), str(self.first))


class TestGetPasses(unittest.TestCase):
    """Test pass enumeration over a window."""

    @classmethod
    def setUpClass(cls):
        cls.passes = PassPredictor(iss_tle(), STATION).get_passes(START, 24)

    def test_first_pass_matches_single_search(self):
        self.assertGreater(len(self.passes), 3)
        self.assertAlmostEqual(self.passes[0].start_time, utc(4, 33, 45), delta=TIME_TOLERANCE)

    def test_chronological(self):
        for earlier, later in zip(self.passes, self.passes[1:]):
            self.assertLess(earlier.end_time, later.start_time)

    def test_within_window(self):
        window_end = START + timedelta(hours=24)
        for sat_pass in self.passes:
            self.assertGreaterEqual(sat_pass.start_time, START)
            self.assertLess(sat_pass.start_time, window_end)
            self.assertLessEqual(sat_pass.start_time, sat_pass.tca)
            self.assertLessEqual(sat_pass.tca, sat_pass.end_time)
            self.assertGreater(sat_pass.max_elevation, 0.0)

    def test_empty_window(self):
        passes = PassPredictor(iss_tle(), STATION).get_passes(START, 1)
        self.assertEqual(passes, [])


class TestDeepSpacePasses(unittest.TestCase):
    """Test long passes of a 12-hour Molniya orbit against dense sampling."""

    WINDOW_START = datetime(2019, 1, 22, tzinfo=timezone.utc)
    WINDOW_HOURS = 48

    @classmethod
    def setUpClass(cls):
        tle = TLE([FALLBACK_MOLNIYA_TLE["name"], FALLBACK_MOLNIYA_TLE["line1"],
                   FALLBACK_MOLNIYA_TLE["line2"]])
        cls.predictor = PassPredictor(tle, STATION)
        cls.passes = cls.predictor.get_passes(cls.WINDOW_START, cls.WINDOW_HOURS)

    def above(self, time):
        return self.predictor.satellite.get_position(STATION, time).above_horizon

    def test_rises(self):
        """Test the rise times found by sampling every minute."""
        expected = [
            datetime(2019, 1, 22, 4, 53, tzinfo=timezone.utc),
            datetime(2019, 1, 22, 17, 13, tzinfo=timezone.utc),
            datetime(2019, 1, 23, 4, 13, tzinfo=timezone.utc),
            datetime(2019, 1, 23, 16, 43, tzinfo=timezone.utc),
        ]
        self.assertEqual(len(self.passes), len(expected))
        for sat_pass, rise in zip(self.passes, expected):
            self.assertAlmostEqual(sat_pass.start_time, rise, delta=timedelta(minutes=2))

    def test_next_pass_from_window_start(self):
        sat_pass = self.predictor.next_sat_pass(self.WINDOW_START)
        self.assertEqual(sat_pass, self.passes[0])

    def test_crossings_are_real(self):
        """Test that each AOS and LOS is an actual horizon crossing."""
        step = timedelta(seconds=2)
        for sat_pass in self.passes:
            with self.subTest(start=sat_pass.start_time):
                self.assertFalse(self.above(sat_pass.start_time - step))
                self.assertTrue(self.above(sat_pass.start_time))
                self.assertTrue(self.above(sat_pass.end_time - step))
                self.assertFalse(self.above(sat_pass.end_time))

    def test_no_visible_interval_is_missed(self):
        """Test that every visible sample after the first set lies in a pass."""
        window_end = self.WINDOW_START + timedelta(hours=self.WINDOW_HOURS)
        time = self.WINDOW_START
        while self.above(time):
            time += timedelta(minutes=10)
        while time < window_end:
            if self.above(time):
                self.assertTrue(
                    any(p.start_time <= time <= p.end_time for p in self.passes),
                    f"Visible at {time.isoformat()} outside every pass",
                )
            time += timedelta(minutes=10)

    def test_tca_at_elevation_maximum(self):
        """Test that the TCA is the peak of the pass, not its midpoint."""
        for sat_pass in self.passes:
            with self.subTest(start=sat_pass.start_time):
                self.assertLess(sat_pass.start_time, sat_pass.tca)
                self.assertLess(sat_pass.tca, sat_pass.end_time)
                tca_elevation = self.predictor.satellite.get_position(STATION, sat_pass.tca).elevation
                self.assertAlmostEqual(tca_elevation, sat_pass.max_elevation, delta=0.01)

                time = sat_pass.start_time
                while time <= sat_pass.end_time:
                    elevation = self.predictor.satellite.get_position(STATION, time).elevation
                    self.assertLessEqual(elevation, sat_pass.max_elevation + 0.01)
                    time += timedelta(minutes=5)

    def test_wind_back_from_mid_pass(self):
        """Test that winding back from inside a pass returns that pass."""
        first = self.passes[0]
        inside = first.start_time + (first.end_time - first.start_time) / 3
        self.assertAlmostEqual(
            self.predictor.next_sat_pass(inside, wind_back=True).start_time,
            first.start_time,
            delta=timedelta(seconds=2),
        )


class TestGetPositions(unittest.TestCase):
    """Test ground-track sampling."""

    def test_sample_count_and_spacing(self):
        predictor = PassPredictor(iss_tle(), STATION)
        before = predictor.iteration_count
        positions = predictor.get_positions(START, 30, 50, 50)

        self.assertEqual(len(positions), 200)
        self.assertEqual(predictor.iteration_count - before, 200)
        self.assertEqual(positions[0].time, START - timedelta(minutes=50))
        self.assertEqual(positions[1].time - positions[0].time, timedelta(seconds=30))
        self.assertEqual(positions[-1].time, START + timedelta(minutes=50, seconds=-30))

    def test_invalid_increment(self):
        predictor = PassPredictor(iss_tle(), STATION)
        with self.assertRaises(ConfigurationError):
            predictor.get_positions(START, 0, 50, 50)


class TestDoppler(unittest.TestCase):
    """Test Doppler-shifted frequencies through a pass."""

    @classmethod
    def setUpClass(cls):
        cls.predictor = PassPredictor(iss_tle(), STATION)
        cls.sat_pass = cls.predictor.next_sat_pass(START)
        cls.base = 145.8e6

    def test_downlink_through_pass(self):
        """Test that the downlink is high while approaching and low while receding."""
        near_aos = self.sat_pass.start_time + timedelta(seconds=30)
        near_los = self.sat_pass.end_time - timedelta(seconds=30)
        self.assertGreater(self.predictor.get_downlink_freq(self.base, near_aos), self.base)
        self.assertLess(self.predictor.get_downlink_freq(self.base, near_los), self.base)

    def test_formulas(self):
        time = self.sat_pass.start_time + timedelta(minutes=1)
        range_rate = self.predictor.get_sat_pos(time).range_rate * 1000.0

        downlink = self.predictor.get_downlink_freq(self.base, time)
        uplink = self.predictor.get_uplink_freq(self.base, time)
        self.assertIsInstance(downlink, int)
        self.assertEqual(downlink, round(self.base * (1.0 - range_rate / SPEED_OF_LIGHT)))
        self.assertEqual(uplink, round(self.base * (1.0 + range_rate / SPEED_OF_LIGHT)))
        self.assertEqual(self.predictor.doppler_freq(self.base, time), downlink)
        self.assertEqual(self.predictor.doppler_freq(self.base, time, uplink=True), uplink)

    def test_shift_is_bounded(self):
        """Test that the shift stays below the LEO maximum of about 3.7 kHz at 2 m."""
        for minutes in range(0, 90, 5):
            time = START + timedelta(minutes=minutes)
            shift = abs(self.predictor.get_downlink_freq(self.base, time) - self.base)
            self.assertLess(shift, 4000)


class TestPassNotFound(unittest.TestCase):
    """Test the bounded search failures."""

    def test_orbit_never_reaches_station(self):
        line2 = "2 25544   0.0000 185.5279 0011056  98.8248 261.3993 15.48601910552787"
        tle = TLE(["EQUATORIAL", FALLBACK_ISS_TLE["line1"], line2])
        predictor = PassPredictor(tle, GroundStation(80.0, 0.0))
        with self.assertRaises(PassNotFoundError) as context:
            predictor.next_sat_pass(START)
        self.assertEqual(context.exception.satellite_name, "EQUATORIAL")

    def test_iteration_budget(self):
        predictor = PassPredictor(iss_tle(), STATION, max_iterations=10)
        with self.assertRaises(PassNotFoundError) as context:
            predictor.next_sat_pass(START)
        self.assertGreater(context.exception.iterations, 10)

    def test_geostationary_never_sets(self):
        tle = TLE([FALLBACK_GEOSYNC_TLE["name"], FALLBACK_GEOSYNC_TLE["line1"],
                   FALLBACK_GEOSYNC_TLE["line2"]])
        predictor = PassPredictor(tle, STATION)
        with self.assertRaises(PassNotFoundError):
            predictor.next_sat_pass(datetime(2019, 1, 23, tzinfo=timezone.utc))

    def test_not_a_configuration_error(self):
        self.assertFalse(issubclass(PassNotFoundError, ConfigurationError))


class TestConfiguration(unittest.TestCase):
    """Test constructor validation."""

    def test_missing_arguments(self):
        with self.assertRaises(ConfigurationError):
            PassPredictor(None, None)
        with self.assertRaises(ConfigurationError):
            PassPredictor(iss_tle(), None)

    def test_non_positive_tuning(self):
        for name in ("coarse_step_seconds", "track_step_seconds", "resolution_seconds",
                     "max_iterations"):
            with self.subTest(name=name):
                with self.assertRaises(ConfigurationError) as context:
                    PassPredictor(iss_tle(), STATION, **{name: 0})
                self.assertEqual(context.exception.field, name)

    def test_private_copy_of_elements(self):
        tle = iss_tle()
        predictor = PassPredictor(tle, STATION)
        tle.name = "changed"
        self.assertEqual(predictor.tle.name, "ISS (ZARYA)")

    def test_orbit_minutes(self):
        self.assertAlmostEqual(PassPredictor(iss_tle(), STATION).orbit_minutes, 92.99, delta=0.05)


class TestPoleCrossing(unittest.TestCase):
    """Test meridian crossing classification."""

    def test_north(self):
        self.assertEqual(pole_crossing(350.0, 10.0), POLE_NORTH)
        self.assertEqual(pole_crossing(5.0, 355.0), POLE_NORTH)

    def test_south(self):
        self.assertEqual(pole_crossing(185.0, 175.0), POLE_SOUTH)
        self.assertEqual(pole_crossing(170.0, 190.0), POLE_SOUTH)

    def test_none(self):
        self.assertIsNone(pole_crossing(100.0, 120.0))
        self.assertIsNone(pole_crossing(200.0, 260.0))


if __name__ == "__main__":
    unittest.main()
