"""
Time scale helpers.

Conversions between Python datetimes, Julian dates and TLE epochs, and the
Greenwich mean sidereal angle used to rotate inertial vectors into the
Earth-fixed frame. Naive datetimes are taken to be UTC.
"""

import math
from datetime import datetime, timedelta, timezone

from sgp4.api import jday

from satpredict.config import (
    EARTH_ROTATIONS_PER_SIDERIAL_DAY,
    SECS_PER_DAY,
    TWO_PI,
)

# Julian date of 2000 January 1.5 (J2000.0)
J2000: float = 2451545.0
DAYS_PER_CENTURY: float = 36525.0


def to_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime; naive values are assumed UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def julian_date(dt: datetime) -> float:
    """
    Convert a datetime to a Julian date.

    Args:
        dt: Datetime (naive values are treated as UTC)

    Returns:
        Julian date as a single float
    """
    dt = to_utc(dt)
    jd, fr = jday(
        dt.year, dt.month, dt.day,
        dt.hour, dt.minute, dt.second + dt.microsecond * 1e-6,
    )
    return jd + fr


def julian_date_of_year(year: float) -> float:
    """
    Julian date of day 0.0 (December 31.0 of the previous year) for a year.

    Valid for Gregorian calendar years.
    """
    year = year - 1
    a = int(year / 100)
    b = 2 - a + int(a / 4)
    i = int(365.25 * year)
    i = int(i + 30.6001 * 14)
    return i + 1720994.5 + b


def epoch_year(two_digit_year: int) -> int:
    """Expand a TLE two-digit year (1957 through 2056)."""
    return 1900 + two_digit_year if two_digit_year >= 57 else 2000 + two_digit_year


def julian_date_of_epoch(epoch: float) -> float:
    """
    Julian date of a TLE epoch in YYDDD.DDDDDDDD form.

    Args:
        epoch: Two-digit year * 1000 plus fractional day of year

    Returns:
        Julian date of the epoch
    """
    year = math.floor(epoch * 1e-3)
    day = (epoch * 1e-3 - year) * 1000.0
    return julian_date_of_year(epoch_year(int(year))) + day


def epoch_to_datetime(two_digit_year: int, day_of_year: float) -> datetime:
    """Convert a TLE epoch (2-digit year + fractional day) to a UTC datetime."""
    start = datetime(epoch_year(two_digit_year), 1, 1, tzinfo=timezone.utc)
    # day 1.0 is midnight on January 1
    return start + timedelta(days=day_of_year - 1.0)


def frac(value: float) -> float:
    """Fractional part, always in [0, 1)."""
    return value - math.floor(value)


def modulus(value: float, divisor: float) -> float:
    """Floating modulus with a non-negative result."""
    result = value - int(value / divisor) * divisor
    if result < 0.0:
        result += divisor
    return result


def mod2pi(angle: float) -> float:
    """Reduce an angle in radians to [0, 2*pi)."""
    return modulus(angle, TWO_PI)


def theta_g_jd(jd: float) -> float:
    """
    Greenwich mean sidereal angle for a Julian date.

    Args:
        jd: Julian date (UT)

    Returns:
        Sidereal angle in radians, in [0, 2*pi)
    """
    ut = frac(jd + 0.5)
    midnight = jd - ut
    tu = (midnight - J2000) / DAYS_PER_CENTURY
    gmst = 24110.54841 + tu * (8640184.812866 + tu * (0.093104 - tu * 6.2e-6))
    gmst = modulus(gmst + SECS_PER_DAY * EARTH_ROTATIONS_PER_SIDERIAL_DAY * ut, SECS_PER_DAY)
    return TWO_PI * gmst / SECS_PER_DAY
