"""
Observer Transform

Converts an inertial (TEME) satellite state into what a ground station
sees: azimuth, elevation, slant range and range rate, plus the geodetic
sub-satellite point and the eclipse state against the Sun.

Vectors are numpy arrays in kilometres and kilometres per second. The
Earth is an oblate spheroid with the WGS-84 equatorial radius and
flattening; sidereal time is Greenwich mean sidereal time.

References:
    Kelso, T. S. "Orbital Coordinate Systems, Parts I-III", Satellite Times
    Meeus, J. "Astronomical Algorithms", chapter 25 (low-precision Sun)
"""

import logging
import math
from datetime import datetime
from typing import Tuple

import numpy as np

from satpredict.config import (
    ABOVE_HORIZON_EPSILON,
    ASTRONOMICAL_UNIT,
    DEG2RAD,
    EARTH_RADIUS_KM,
    EARTH_ROTATION_RATE,
    FLATTENING_FACTOR,
    LAT_LON_MAX_ITERATIONS,
    LAT_LON_TOLERANCE,
    PI_OVER_TWO,
    RAD2DEG,
    SECS_PER_DAY,
    SOLAR_RADIUS_KM,
    TWO_PI,
)
from satpredict.ground_station import GroundStation
from satpredict.julian import julian_date, mod2pi, modulus, theta_g_jd, to_utc
from satpredict.sat_pos import SatPos

logger = logging.getLogger(__name__)

# Julian date of 1900 January 0.5, origin of the solar theory
JD_1900: float = 2415020.0


def observer_state(station: GroundStation, jd: float) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Inertial position and velocity of a ground station.

    Args:
        station: Observer location
        jd: Julian date

    Returns:
        Tuple of (position km, velocity km/s, local sidereal angle rad)
    """
    lat = station.latitude_rad
    theta = mod2pi(theta_g_jd(jd) + station.longitude_rad)
    sin_lat = math.sin(lat)

    c = 1.0 / math.sqrt(1.0 + FLATTENING_FACTOR * (FLATTENING_FACTOR - 2.0) * sin_lat * sin_lat)
    sq = (1.0 - FLATTENING_FACTOR) ** 2 * c
    achcp = (EARTH_RADIUS_KM * c + station.altitude_km) * math.cos(lat)

    position = np.array([
        achcp * math.cos(theta),
        achcp * math.sin(theta),
        (EARTH_RADIUS_KM * sq + station.altitude_km) * sin_lat,
    ])
    velocity = np.array([
        -EARTH_ROTATION_RATE * position[1],
        EARTH_ROTATION_RATE * position[0],
        0.0,
    ])
    return position, velocity, theta


def look_angles(
    position: np.ndarray,
    velocity: np.ndarray,
    station: GroundStation,
    jd: float,
) -> Tuple[float, float, float, float]:
    """
    Topocentric look angles of a satellite.

    Args:
        position: Satellite inertial position (km)
        velocity: Satellite inertial velocity (km/s)
        station: Observer location
        jd: Julian date

    Returns:
        Tuple of (azimuth rad in [0, 2*pi), elevation rad, range km,
        range rate km/s)
    """
    obs_pos, obs_vel, theta = observer_state(station, jd)
    range_vec = np.asarray(position, dtype=float) - obs_pos
    range_vel = np.asarray(velocity, dtype=float) - obs_vel
    slant_range = float(np.linalg.norm(range_vec))

    sin_lat = math.sin(station.latitude_rad)
    cos_lat = math.cos(station.latitude_rad)
    sin_theta = math.sin(theta)
    cos_theta = math.cos(theta)

    top_s = (sin_lat * cos_theta * range_vec[0]
             + sin_lat * sin_theta * range_vec[1]
             - cos_lat * range_vec[2])
    top_e = -sin_theta * range_vec[0] + cos_theta * range_vec[1]
    top_z = (cos_lat * cos_theta * range_vec[0]
             + cos_lat * sin_theta * range_vec[1]
             + sin_lat * range_vec[2])

    azimuth = math.atan2(top_e, -top_s)
    if azimuth < 0.0:
        azimuth += TWO_PI
    if azimuth >= TWO_PI:
        azimuth = 0.0

    if slant_range > 0.0:
        elevation = math.asin(max(-1.0, min(1.0, top_z / slant_range)))
        range_rate = float(np.dot(range_vec, range_vel)) / slant_range
    else:
        elevation = PI_OVER_TWO
        range_rate = 0.0

    return azimuth, elevation, slant_range, range_rate


def geodetic_position(position: np.ndarray, jd: float) -> Tuple[float, float, float, float]:
    """
    Sub-satellite point of an inertial position.

    Args:
        position: Satellite inertial position (km)
        jd: Julian date

    Returns:
        Tuple of (latitude rad, longitude rad in [0, 2*pi), altitude km,
        right ascension theta rad)
    """
    x, y, z = float(position[0]), float(position[1]), float(position[2])
    theta = math.atan2(y, x)
    lon = mod2pi(theta - theta_g_jd(jd))
    r = math.sqrt(x * x + y * y)
    e2 = FLATTENING_FACTOR * (2.0 - FLATTENING_FACTOR)

    lat = math.atan2(z, r)
    c = 1.0
    for _ in range(LAT_LON_MAX_ITERATIONS):
        phi = lat
        sin_phi = math.sin(phi)
        c = 1.0 / math.sqrt(1.0 - e2 * sin_phi * sin_phi)
        lat = math.atan2(z + EARTH_RADIUS_KM * c * e2 * sin_phi, r)
        if abs(lat - phi) < LAT_LON_TOLERANCE:
            break
    else:
        logger.debug(f"Geodetic latitude not converged after {LAT_LON_MAX_ITERATIONS} iterations")

    cos_lat = math.cos(lat)
    if abs(cos_lat) > LAT_LON_TOLERANCE:
        alt = r / cos_lat - EARTH_RADIUS_KM * c
    else:
        # over a pole
        alt = abs(z) - EARTH_RADIUS_KM * c * (1.0 - e2)

    return lat, lon, alt, theta


def delta_et(year: float) -> float:
    """Approximate ET - UT (seconds) for a fractional year."""
    return 26.465 + 0.747622 * (year - 1950) + 1.886913 * math.sin(TWO_PI * (year - 1975) / 33)


def solar_position(jd: float) -> np.ndarray:
    """
    Geocentric inertial position of the Sun (km).

    Low precision solar theory, good to about 0.01 degree, which is ample
    for shadow tests.
    """
    mjd = jd - JD_1900
    year = 1900 + mjd / 365.25
    t = (mjd + delta_et(year) / SECS_PER_DAY) / 36525.0

    m = DEG2RAD * modulus(
        358.47583 + modulus(35999.04975 * t, 360.0) - (0.000150 + 0.0000033 * t) * t * t, 360.0
    )
    l = DEG2RAD * modulus(
        279.69668 + modulus(36000.76892 * t, 360.0) + 0.0003025 * t * t, 360.0
    )
    e = 0.01675104 - (0.0000418 + 0.000000126 * t) * t
    c = DEG2RAD * (
        (1.919460 - (0.004789 + 0.000014 * t) * t) * math.sin(m)
        + (0.020094 - 0.000100 * t) * math.sin(2 * m)
        + 0.000293 * math.sin(3 * m)
    )
    o = DEG2RAD * modulus(259.18 - 1934.142 * t, 360.0)
    lsa = modulus(l + c - DEG2RAD * (0.00569 - 0.00479 * math.sin(o)), TWO_PI)
    nu = modulus(m + c, TWO_PI)
    r = 1.0000002 * (1.0 - e * e) / (1.0 + e * math.cos(nu))
    eps = DEG2RAD * (
        23.452294 - (0.0130125 + (0.00000164 - 0.000000503 * t) * t) * t + 0.00256 * math.cos(o)
    )
    r *= ASTRONOMICAL_UNIT

    return np.array([
        r * math.cos(lsa),
        r * math.sin(lsa) * math.cos(eps),
        r * math.sin(lsa) * math.sin(eps),
    ])


def _angle(a: np.ndarray, b: np.ndarray) -> float:
    cos_angle = float(np.dot(a, b)) / (np.linalg.norm(a) * np.linalg.norm(b))
    return math.acos(max(-1.0, min(1.0, cos_angle)))


def eclipse_state(position: np.ndarray, sun: np.ndarray) -> Tuple[bool, float]:
    """
    Earth shadow test.

    Compares the apparent semi-diameters of the Earth and the Sun seen from
    the satellite with the angle between their centres.

    Args:
        position: Satellite inertial position (km)
        sun: Sun inertial position (km)

    Returns:
        Tuple of (eclipsed, depth rad); depth is negative when eclipsed
    """
    position = np.asarray(position, dtype=float)
    radius = float(np.linalg.norm(position))
    if radius <= EARTH_RADIUS_KM:
        return True, -PI_OVER_TWO

    sd_earth = math.asin(EARTH_RADIUS_KM / radius)
    rho = sun - position
    sd_sun = math.asin(min(1.0, SOLAR_RADIUS_KM / float(np.linalg.norm(rho))))
    delta = _angle(sun, -position)

    depth = delta + sd_sun - sd_earth
    eclipsed = sd_earth >= sd_sun and depth <= 0.0
    return eclipsed, depth


def observe(
    position: np.ndarray,
    velocity: np.ndarray,
    station: GroundStation,
    time: datetime,
    phase: float = 0.0,
) -> SatPos:
    """
    Build the full observer-relative state for one instant.

    Args:
        position: Satellite inertial position (km)
        velocity: Satellite inertial velocity (km/s)
        station: Observer location
        time: UTC time of the state vectors
        phase: Orbital phase (radians)

    Returns:
        Freshly allocated SatPos with angles in degrees
    """
    time = to_utc(time)
    jd = julian_date(time)

    azimuth, elevation, slant_range, range_rate = look_angles(position, velocity, station, jd)
    lat, lon, alt, theta = geodetic_position(position, jd)
    eclipsed, depth = eclipse_state(position, solar_position(jd))

    azimuth_deg = (azimuth * RAD2DEG) % 360.0
    elevation_deg = elevation * RAD2DEG
    above = elevation_deg - station.horizon_elevation(azimuth_deg) > ABOVE_HORIZON_EPSILON

    return SatPos(
        time=time,
        azimuth=azimuth_deg,
        elevation=elevation_deg,
        range=slant_range,
        range_rate=range_rate,
        latitude=lat * RAD2DEG,
        longitude=(lon * RAD2DEG) % 360.0,
        altitude=alt,
        phase=phase * RAD2DEG,
        theta=theta * RAD2DEG,
        eclipsed=eclipsed,
        eclipse_depth=depth * RAD2DEG,
        above_horizon=above,
    )
