"""
Pass Prediction

Finds when a satellite rises above (AOS), culminates over (TCA) and sets
below (LOS) a ground station's horizon mask, enumerates the passes in a
time window, samples ground tracks and computes Doppler-shifted
frequencies.

Search strategy:
    1. If the satellite is up, either step back to before it rose
       (wind back) or step forward until it sets.
    2. From that below-horizon sample, step forward until it rises.
    3. Bisect the AOS between the last two coarse samples.
    4. Track in finer increments recording the highest elevation and any
       meridian crossing; bisect the LOS and refine the TCA.

Every search is bounded by an iteration budget and fails with
PassNotFoundError instead of looping forever.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from satpredict.config import (
    COARSE_STEP_SECONDS,
    MAX_SEARCH_ITERATIONS,
    MINS_PER_DAY,
    RESOLUTION_SECONDS,
    SPEED_OF_LIGHT,
    TRACK_STEP_SECONDS,
)
from satpredict.exceptions import ConfigurationError, PassNotFoundError
from satpredict.ground_station import GroundStation
from satpredict.julian import to_utc
from satpredict.pass_event import POLE_NONE, POLE_NORTH, POLE_SOUTH, PassEvent
from satpredict.sat_pos import SatPos
from satpredict.satellite_factory import create_satellite
from satpredict.tle import TLE

logger = logging.getLogger(__name__)


def _positive(name: str, value: float) -> float:
    if value is None or value <= 0:
        raise ConfigurationError(f"{name} must be positive, got: {value}", field=name, value=value)
    return value


def pole_crossing(previous_azimuth: float, azimuth: float) -> Optional[str]:
    """
    Meridian crossing between two consecutive azimuths in degrees.

    Returns:
        "north" when the track wraps through 0/360, "south" when it passes
        through 180, None otherwise
    """
    if abs(azimuth - previous_azimuth) > 180.0:
        return POLE_NORTH
    if min(previous_azimuth, azimuth) < 180.0 <= max(previous_azimuth, azimuth):
        return POLE_SOUTH
    return None


class PassPredictor:
    """
    Pass search for one satellite and one ground station.

    The instance is safe to share between threads: searches keep their
    state in local variables and the iteration counter is updated under a
    lock.
    """

    def __init__(
        self,
        tle: TLE,
        station: GroundStation,
        coarse_step_seconds: float = COARSE_STEP_SECONDS,
        track_step_seconds: float = TRACK_STEP_SECONDS,
        resolution_seconds: float = RESOLUTION_SECONDS,
        max_iterations: int = MAX_SEARCH_ITERATIONS,
    ):
        """
        Initialize the predictor.

        Args:
            tle: Element set of the satellite
            station: Observer location
            coarse_step_seconds: Step used while waiting for a rise
            track_step_seconds: Step used while the satellite is up
            resolution_seconds: Precision of the AOS, LOS and TCA times
            max_iterations: Propagation budget of a single pass search

        Raises:
            ConfigurationError: If the element set or station is missing or a
                tuning value is not positive
        """
        if tle is None:
            raise ConfigurationError("Element set must not be None", field="tle")
        if not isinstance(station, GroundStation):
            raise ConfigurationError("A GroundStation is required", field="station", value=station)

        self.tle = tle.copy()
        self.station = station
        self.satellite = create_satellite(self.tle)
        self.coarse_step = timedelta(seconds=_positive("coarse_step_seconds", coarse_step_seconds))
        self.track_step = timedelta(seconds=_positive("track_step_seconds", track_step_seconds))
        self.resolution = timedelta(seconds=_positive("resolution_seconds", resolution_seconds))
        self.max_iterations = int(_positive("max_iterations", max_iterations))

        self._iteration_count = 0
        self._count_lock = threading.Lock()

    @property
    def iteration_count(self) -> int:
        """Propagations performed by this predictor so far."""
        with self._count_lock:
            return self._iteration_count

    @property
    def orbit_minutes(self) -> float:
        return MINS_PER_DAY / self.tle.meanmo

    def get_sat_pos(self, time: datetime) -> SatPos:
        """Satellite position for the station at a time."""
        with self._count_lock:
            self._iteration_count += 1
        return self.satellite.get_position(self.station, time)

    def _fail(self, message: str, iterations: int) -> PassNotFoundError:
        logger.debug(f"{self.tle.name}: {message} after {iterations} iterations")
        return PassNotFoundError(message, satellite_name=self.tle.name, iterations=iterations)

    def _bisect(
        self,
        before: datetime,
        after: datetime,
        reached: Callable[[SatPos], bool],
    ) -> Tuple[datetime, SatPos]:
        """
        Narrow a transition down to the configured resolution.

        ``reached`` is False at ``before`` and True at ``after``; the first
        time found where it holds is returned with its position.
        """
        lo, hi = before, after
        hi_pos = self.get_sat_pos(hi)
        while hi - lo > self.resolution:
            mid = lo + (hi - lo) / 2
            pos = self.get_sat_pos(mid)
            if reached(pos):
                hi, hi_pos = mid, pos
            else:
                lo = mid
        return hi, hi_pos

    def _refine_tca(self, center: datetime, start: datetime, end: datetime) -> Tuple[datetime, float]:
        """Ternary search for the elevation maximum around a sampled peak."""
        lo = max(start, center - self.track_step)
        hi = min(end, center + self.track_step)
        while hi - lo > self.resolution:
            third = (hi - lo) / 3
            m1 = lo + third
            m2 = hi - third
            if self.get_sat_pos(m1).elevation < self.get_sat_pos(m2).elevation:
                lo = m1
            else:
                hi = m2
        tca = lo + (hi - lo) / 2
        return tca, self.get_sat_pos(tca).elevation

    def next_sat_pass(self, time: datetime, wind_back: bool = False) -> PassEvent:
        """
        Find the next pass after a time.

        Args:
            time: Search start (naive values are UTC)
            wind_back: Report a pass already in progress from its start
                instead of skipping it

        Returns:
            The next PassEvent

        Raises:
            PassNotFoundError: If the satellite can never be seen from the
                station, never sets, or no pass is found within the
                iteration budget
        """
        if not self.satellite.will_be_seen(self.station):
            raise self._fail("Satellite will never be seen from this ground station", 0)

        iterations = 0
        max_tracking = int(2 * self.orbit_minutes * 60 / self.track_step.total_seconds()) + 1
        max_rewind = int(2 * self.orbit_minutes * 60 / self.coarse_step.total_seconds()) + 1
        cal = to_utc(time)
        sat_pos = self.get_sat_pos(cal)

        if sat_pos.above_horizon and wind_back:
            # Step back to a time before the pass in progress rose
            while sat_pos.above_horizon:
                iterations += 1
                if iterations > min(max_rewind, self.max_iterations):
                    raise self._fail("Satellite never sets below the horizon", iterations)
                cal -= self.coarse_step
                sat_pos = self.get_sat_pos(cal)
        elif sat_pos.above_horizon:
            # Skip the pass in progress
            while sat_pos.above_horizon:
                iterations += 1
                if iterations > min(max_tracking, self.max_iterations):
                    raise self._fail("Satellite never sets below the horizon", iterations)
                cal += self.track_step
                sat_pos = self.get_sat_pos(cal)

        # Coarse search for the rise, always from a below-horizon sample
        previous = cal
        while not sat_pos.above_horizon:
            iterations += 1
            if iterations > self.max_iterations:
                raise self._fail("No pass found within the iteration budget", iterations)
            previous = cal
            cal += self.coarse_step
            sat_pos = self.get_sat_pos(cal)

        start_time, aos_pos = self._bisect(previous, cal, lambda p: p.above_horizon)

        # Track until set, recording the peak and any meridian crossing
        pole_passed = POLE_NONE
        max_elevation = aos_pos.elevation
        tca_sample = start_time
        cal = start_time
        sat_pos = aos_pos
        previous = cal
        tracked = 0
        while sat_pos.above_horizon:
            tracked += 1
            if tracked > max_tracking or iterations + tracked > self.max_iterations:
                raise self._fail("Satellite never sets below the horizon", iterations + tracked)
            previous_azimuth = sat_pos.azimuth
            previous = cal
            cal += self.track_step
            sat_pos = self.get_sat_pos(cal)

            crossing = pole_crossing(previous_azimuth, sat_pos.azimuth)
            if crossing is not None and sat_pos.above_horizon:
                pole_passed = crossing
            if sat_pos.elevation > max_elevation:
                max_elevation = sat_pos.elevation
                tca_sample = cal

        end_time, los_pos = self._bisect(previous, cal, lambda p: not p.above_horizon)

        if max_elevation > aos_pos.elevation:
            tca, tca_elevation = self._refine_tca(tca_sample, start_time, end_time)
            max_elevation = max(max_elevation, tca_elevation)
        else:
            tca = None

        event = PassEvent(
            start_time=start_time,
            end_time=end_time,
            tca=tca,
            pole_passed=pole_passed,
            aos_azimuth=int(aos_pos.azimuth) % 360,
            los_azimuth=int(los_pos.azimuth) % 360,
            max_elevation=max_elevation,
        )
        logger.debug(
            f"{self.tle.name}: pass {event.start_time.isoformat()} to "
            f"{event.end_time.isoformat()}, max elevation {event.max_elevation:.1f} deg"
        )
        return event

    def get_passes(self, start: datetime, hours_ahead: float, wind_back: bool = False) -> List[PassEvent]:
        """
        All passes starting within a window.

        Args:
            start: Window start (naive values are UTC)
            hours_ahead: Window length in hours
            wind_back: Wind back for the first search only

        Returns:
            Passes in chronological order
        """
        start = to_utc(start)
        track_end = start + timedelta(hours=hours_ahead)
        passes: List[PassEvent] = []

        track_start = start
        while track_start < track_end:
            sat_pass = self.next_sat_pass(track_start, wind_back)
            if sat_pass.start_time >= track_end:
                break
            passes.append(sat_pass)
            # below the horizon at LOS, so the next search starts with the rise
            track_start = sat_pass.end_time
            wind_back = False

        logger.debug(f"{self.tle.name}: {len(passes)} passes in {hours_ahead} hours")
        return passes

    def get_positions(
        self,
        reference_time: datetime,
        increment_seconds: float,
        minutes_before: float,
        minutes_after: float,
    ) -> List[SatPos]:
        """
        Evenly spaced positions around a reference time.

        Args:
            reference_time: Centre of the window
            increment_seconds: Sample spacing
            minutes_before: Window start before the reference time
            minutes_after: Window end after the reference time

        Returns:
            (minutes_before + minutes_after) * 60 / increment_seconds positions
        """
        _positive("increment_seconds", increment_seconds)
        reference_time = to_utc(reference_time)
        first = reference_time - timedelta(minutes=minutes_before)
        count = int((minutes_before + minutes_after) * 60 / increment_seconds)
        return [
            self.get_sat_pos(first + timedelta(seconds=i * increment_seconds))
            for i in range(count)
        ]

    def doppler_freq(self, base_freq: float, time: datetime, uplink: bool = False) -> int:
        """
        Doppler-shifted frequency in Hz, rounded to the nearest integer.

        Downlink: ``f * (1 - rr / c)``. Uplink uses the opposite sign so that
        the signal arrives at the satellite on ``base_freq``.
        """
        range_rate = self.get_sat_pos(time).range_rate * 1000.0
        if uplink:
            return int(round(base_freq * (1.0 + range_rate / SPEED_OF_LIGHT)))
        return int(round(base_freq * (1.0 - range_rate / SPEED_OF_LIGHT)))

    def get_downlink_freq(self, freq: float, time: datetime) -> int:
        return self.doppler_freq(freq, time)

    def get_uplink_freq(self, freq: float, time: datetime) -> int:
        return self.doppler_freq(freq, time, uplink=True)
