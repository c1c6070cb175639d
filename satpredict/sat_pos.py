"""
Satellite position as seen from a ground station.
"""

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import numpy as np

from satpredict.footprint import range_circle, range_circle_radius_km


@dataclass
class SatPos:
    """
    Observer-relative and ground-track state at one instant.

    All angles are in degrees. Instances are plain result records: every
    propagation call fills a fresh one.

    Attributes:
        time: UTC time of the state
        azimuth: Azimuth from true north, clockwise, in [0, 360)
        elevation: Elevation above the horizon in [-90, 90]
        range: Slant range (km)
        range_rate: Range rate (km/s), positive when receding
        latitude: Sub-satellite geodetic latitude
        longitude: Sub-satellite longitude, east, in [0, 360)
        altitude: Height above the reference ellipsoid (km)
        phase: Orbital phase angle
        theta: Right ascension of the satellite position vector
        eclipsed: True when the satellite is in the Earth's shadow
        eclipse_depth: Signed shadow depth, negative when eclipsed
        above_horizon: Elevation clears the station horizon mask
    """

    time: Optional[datetime] = None
    azimuth: float = 0.0
    elevation: float = 0.0
    range: float = 0.0
    range_rate: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0
    phase: float = 0.0
    theta: float = 0.0
    eclipsed: bool = False
    eclipse_depth: float = 0.0
    above_horizon: bool = False

    def copy(self) -> "SatPos":
        return dataclasses.replace(self)

    def range_circle(self) -> np.ndarray:
        """Footprint boundary as (latitude, longitude) rows in degrees."""
        return range_circle(self.latitude, self.longitude, self.altitude)

    def range_circle_radius_km(self) -> float:
        return range_circle_radius_km(self.altitude)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["time"] = self.time.isoformat() if self.time is not None else None
        return data

    def __str__(self) -> str:
        return (
            f"Azimuth: {self.azimuth:.2f} deg, Elevation: {self.elevation:.2f} deg, "
            f"Latitude: {self.latitude:.2f} deg, Longitude: {self.longitude:.2f} deg, "
            f"Date: {self.time}, Range: {self.range:.2f} km, "
            f"Range rate: {self.range_rate:.3f} km/s, Phase: {self.phase:.2f} deg, "
            f"Altitude: {self.altitude:.0f} km, Theta: {self.theta:.2f} deg, "
            f"Eclipsed: {self.eclipsed}, Eclipse depth: {self.eclipse_depth:.2f} deg"
        )
