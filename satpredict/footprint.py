"""
Footprint (range circle) geometry.

The range circle is the set of ground points from which the satellite is
on the geometric horizon. It is computed as a spherical destination at
the horizon great-circle distance for each whole degree of azimuth around
the sub-satellite point.
"""

import math

import numpy as np

from satpredict.config import (
    FOOTPRINT_EARTH_DIAMETER_KM,
    FOOTPRINT_EARTH_RADIUS_KM,
    PI_OVER_TWO,
    TWO_PI,
)


def range_circle_radius_km(altitude: float) -> float:
    """
    Great-circle radius of the footprint.

    Args:
        altitude: Satellite altitude above the surface (km)

    Returns:
        Distance along the surface from the sub-satellite point to the
        horizon circle (km); 0 for non-positive altitudes
    """
    if altitude <= 0.0:
        return 0.0
    return 0.5 * FOOTPRINT_EARTH_DIAMETER_KM * math.acos(
        FOOTPRINT_EARTH_RADIUS_KM / (FOOTPRINT_EARTH_RADIUS_KM + altitude)
    )


def range_circle(latitude: float, longitude: float, altitude: float) -> np.ndarray:
    """
    Boundary of the visibility circle around a sub-satellite point.

    Args:
        latitude: Sub-satellite latitude (degrees)
        longitude: Sub-satellite longitude (degrees east)
        altitude: Satellite altitude (km)

    Returns:
        Array of shape (360, 2) holding (latitude, longitude) in degrees, one
        row per degree of azimuth from north; longitudes in [0, 360)
    """
    lat = math.radians(latitude)
    lon = math.radians(longitude)
    beta = range_circle_radius_km(altitude) / FOOTPRINT_EARTH_RADIUS_KM

    azi = np.arange(360)
    azimuth = np.radians(azi)

    range_lat = np.arcsin(
        np.clip(math.sin(lat) * math.cos(beta)
                + np.cos(azimuth) * math.sin(beta) * math.cos(lat), -1.0, 1.0)
    )
    num = math.cos(beta) - math.sin(lat) * np.sin(range_lat)
    den = math.cos(lat) * np.cos(range_lat)

    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = num / den
    unresolved = ~np.isfinite(ratio) | (np.abs(ratio) > 1.0)
    delta_lon = np.arccos(np.clip(np.nan_to_num(ratio), -1.0, 1.0))

    # east of the meridian for bearings 0 to 180
    range_lon = np.where(azi <= 180, lon + delta_lon, lon - delta_lon)
    range_lon = np.where(unresolved, lon, range_lon)

    # circle encloses a pole
    over_pole = ((azi == 0) & (beta > PI_OVER_TWO - lat)) | (
        (azi == 180) & (beta > PI_OVER_TWO + lat)
    )
    range_lon = np.where(over_pole, lon + math.pi, range_lon)

    range_lon = np.mod(range_lon, TWO_PI)
    range_lon = np.where(range_lon >= TWO_PI, 0.0, range_lon)

    return np.column_stack((np.degrees(range_lat), np.degrees(range_lon)))
