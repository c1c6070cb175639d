"""
Satellite Pass Prediction Demonstration

This script demonstrates the key capabilities of the satpredict package:
- TLE parsing and reconstruction
- SGP4/SDP4 propagation relative to a ground station
- Pass prediction with AOS, TCA and LOS
- Doppler-shifted downlink frequencies
- Footprint (range circle) geometry

Usage:
    python demo.py [--hours H] [--lat LAT] [--lon LON] [--alt ALT] [--verbose]

Arguments:
    --hours: Prediction window in hours (default 24)
    --lat, --lon, --alt: Ground station position (degrees, degrees, metres)
    --frequency: Downlink frequency in Hz for the Doppler table
    --verbose: Enable debug logging
"""

import argparse
import logging
from datetime import datetime, timedelta

from satpredict.config import FALLBACK_ISS_TLE, FALLBACK_MOLNIYA_TLE
from satpredict.exceptions import PassNotFoundError
from satpredict.ground_station import GroundStation
from satpredict.logging_config import configure_logging, get_logger
from satpredict.pass_predictor import PassPredictor
from satpredict.tle import TLE

logger = get_logger(__name__)


def demonstrate_tle_parsing(tle: TLE) -> None:
    """
    Log the parsed and derived fields of an element set.

    Parameters
    ----------
    tle : TLE
        Parsed element set
    """
    logger.info(f"Parsing TLE for {tle.name}")
    logger.info(f"NORAD ID: {tle.catnum}")
    logger.info(f"Epoch: {tle.epoch_datetime.isoformat()}")
    logger.info(f"Inclination: {tle.incl:.4f} degrees")
    logger.info(f"Eccentricity: {tle.eccn:.7f}")
    logger.info(f"Mean Motion: {tle.meanmo:.8f} rev/day")
    logger.info(f"Period: {tle.period_minutes:.2f} min, deep space: {tle.is_deep_space}")

    line1, line2 = tle.to_lines()
    logger.debug(f"Reconstructed Line 1: {line1}")
    logger.debug(f"Reconstructed Line 2: {line2}")


def demonstrate_passes(predictor: PassPredictor, start: datetime, hours: float) -> None:
    """
    Log every pass in a window.

    Parameters
    ----------
    predictor : PassPredictor
        Predictor for one satellite and station
    start : datetime
        Window start (UTC)
    hours : float
        Window length
    """
    try:
        passes = predictor.get_passes(start, hours)
    except PassNotFoundError as e:
        logger.warning(f"No passes for {predictor.tle.name}: {e}")
        return

    logger.info(f"{len(passes)} passes of {predictor.tle.name} in the next {hours:g} hours")
    for sat_pass in passes:
        logger.info(
            f"AOS {sat_pass.start_time:%Y-%m-%d %H:%M:%S} az {sat_pass.aos_azimuth:3d}  "
            f"TCA {sat_pass.tca:%H:%M:%S} el {sat_pass.max_elevation:5.1f}  "
            f"LOS {sat_pass.end_time:%H:%M:%S} az {sat_pass.los_azimuth:3d}  "
            f"pole {sat_pass.pole_passed}"
        )


def demonstrate_doppler(predictor: PassPredictor, start: datetime, frequency: float) -> None:
    """Log the downlink frequency across the first pass, once a minute."""
    try:
        sat_pass = predictor.next_sat_pass(start)
    except PassNotFoundError as e:
        logger.warning(f"No pass for the Doppler table: {e}")
        return

    logger.info(f"Doppler table for {frequency / 1e6:.3f} MHz")
    time = sat_pass.start_time
    while time <= sat_pass.end_time:
        sat_pos = predictor.get_sat_pos(time)
        logger.info(
            f"{time:%H:%M:%S} el {sat_pos.elevation:5.1f} "
            f"rr {sat_pos.range_rate:+7.3f} km/s "
            f"f {predictor.get_downlink_freq(frequency, time)} Hz"
        )
        time += timedelta(minutes=1)


def demonstrate_footprint(predictor: PassPredictor, time: datetime) -> None:
    """Log the sub-satellite point and a few range circle points."""
    sat_pos = predictor.get_sat_pos(time)
    logger.info(
        f"Sub-satellite point {sat_pos.latitude:.2f}, {sat_pos.longitude:.2f} "
        f"at {sat_pos.altitude:.0f} km, eclipsed: {sat_pos.eclipsed}"
    )
    logger.info(f"Footprint radius: {sat_pos.range_circle_radius_km():.0f} km")
    circle = sat_pos.range_circle()
    for azimuth in (0, 90, 180, 270):
        lat, lon = circle[azimuth]
        logger.info(f"Range circle at azimuth {azimuth:3d}: {lat:6.1f}, {lon:6.1f}")


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="Satellite Pass Prediction Demonstration")
    parser.add_argument("--hours", type=float, default=24.0, help="Prediction window in hours")
    parser.add_argument("--lat", type=float, default=52.4670, help="Station latitude (deg)")
    parser.add_argument("--lon", type=float, default=-2.022, help="Station longitude (deg)")
    parser.add_argument("--alt", type=float, default=200.0, help="Station altitude (m)")
    parser.add_argument(
        "--frequency", type=float, default=145.800e6, help="Downlink frequency (Hz)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    logger.info("Satellite Pass Prediction Demonstration")
    logger.info("=" * 60)

    station = GroundStation(args.lat, args.lon, args.alt, name="demo")

    for reference in (FALLBACK_ISS_TLE, FALLBACK_MOLNIYA_TLE):
        tle = TLE([reference["name"], reference["line1"], reference["line2"]])
        logger.info("")
        demonstrate_tle_parsing(tle)

        # predictions are most accurate close to the element set epoch
        start = tle.epoch_datetime
        predictor = PassPredictor(tle, station)
        demonstrate_passes(predictor, start, args.hours)
        demonstrate_footprint(predictor, start)

    iss = TLE([FALLBACK_ISS_TLE["name"], FALLBACK_ISS_TLE["line1"], FALLBACK_ISS_TLE["line2"]])
    logger.info("")
    demonstrate_doppler(PassPredictor(iss, station), iss.epoch_datetime, args.frequency)

    logger.info("=" * 60)
    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
