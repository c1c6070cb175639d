"""
Ground station position and horizon mask.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from satpredict.config import (
    DEG2RAD,
    HORIZON_SECTOR_WIDTH_DEG,
    HORIZON_SECTORS,
)
from satpredict.exceptions import ConfigurationError
from satpredict.julian import mod2pi, theta_g_jd


@dataclass(frozen=True)
class GroundStation:
    """
    Geodetic position of an observer.

    Attributes:
        latitude: Geodetic latitude (degrees, north positive)
        longitude: Longitude (degrees, east positive)
        altitude: Height above mean sea level (metres)
        horizon_elevations: 36 minimum elevations (degrees), one per 10 degree
            azimuth sector starting at north; all zero when omitted
        name: Optional station name
    """

    latitude: float
    longitude: float
    altitude: float = 0.0
    horizon_elevations: Optional[Sequence[float]] = None
    name: str = ""
    latitude_rad: float = field(init=False, repr=False, compare=False)
    longitude_rad: float = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.latitude is None or not -90.0 <= self.latitude <= 90.0:
            raise ConfigurationError(
                f"Latitude must be within [-90, 90], got: {self.latitude}",
                field="latitude",
                value=self.latitude,
            )
        if self.longitude is None or not math.isfinite(self.longitude):
            raise ConfigurationError(
                f"Longitude must be finite, got: {self.longitude}",
                field="longitude",
                value=self.longitude,
            )

        if self.horizon_elevations is None:
            mask: Tuple[float, ...] = (0.0,) * HORIZON_SECTORS
        else:
            mask = tuple(float(e) for e in self.horizon_elevations)
            if len(mask) != HORIZON_SECTORS:
                raise ConfigurationError(
                    f"Expected {HORIZON_SECTORS} Horizon Elevations, got: {len(mask)}",
                    field="horizon_elevations",
                    value=len(mask),
                )

        # frozen dataclass: normalised and cached values go through object.__setattr__
        object.__setattr__(self, "horizon_elevations", mask)
        object.__setattr__(self, "latitude_rad", self.latitude * DEG2RAD)
        object.__setattr__(self, "longitude_rad", self.longitude * DEG2RAD)

    @property
    def altitude_km(self) -> float:
        return self.altitude / 1000.0

    def horizon_elevation(self, azimuth: float) -> float:
        """Minimum elevation (degrees) of the sector containing an azimuth in degrees."""
        sector = int((azimuth % 360.0) / HORIZON_SECTOR_WIDTH_DEG)
        return self.horizon_elevations[min(sector, HORIZON_SECTORS - 1)]

    def local_sidereal_time(self, jd: float) -> float:
        """Local mean sidereal angle (radians) at a Julian date."""
        return mod2pi(theta_g_jd(jd) + self.longitude_rad)
