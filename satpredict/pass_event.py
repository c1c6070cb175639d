"""
Satellite pass description.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

POLE_NORTH = "north"
POLE_SOUTH = "south"
POLE_NONE = "none"


@dataclass(frozen=True)
class PassEvent:
    """
    One pass of a satellite over a ground station.

    Attributes:
        start_time: Acquisition of signal (AOS), UTC
        end_time: Loss of signal (LOS), UTC
        tca: Time of closest approach (maximum elevation); the midpoint of
            the pass when not given
        pole_passed: "north", "south" or "none"
        aos_azimuth: Azimuth at AOS, whole degrees in [0, 360)
        los_azimuth: Azimuth at LOS, whole degrees in [0, 360)
        max_elevation: Maximum elevation (degrees)
    """

    start_time: datetime
    end_time: datetime
    pole_passed: str = POLE_NONE
    aos_azimuth: int = 0
    los_azimuth: int = 0
    max_elevation: float = 0.0
    tca: Optional[datetime] = field(default=None)

    def __post_init__(self):
        if self.tca is None:
            object.__setattr__(self, "tca", self.start_time + (self.end_time - self.start_time) / 2)

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "tca": self.tca.isoformat(),
            "pole_passed": self.pole_passed,
            "aos_azimuth": self.aos_azimuth,
            "los_azimuth": self.los_azimuth,
            "max_elevation": self.max_elevation,
            "duration_minutes": self.duration_minutes,
        }

    def __str__(self) -> str:
        start = self.start_time
        return (
            f"Date: {start.strftime('%B')} {start.day}, {start.year}\n"
            f"Start Time: {_clock(start)}\n"
            f"End Time: {_clock(self.end_time)}\n"
            f"Duration: {self.duration_minutes:4.1f} min.\n"
            f"AOS Azimuth: {self.aos_azimuth} deg.\n"
            f"Max Elevation: {self.max_elevation:4.1f} deg.\n"
            f"LOS Azimuth: {self.los_azimuth} deg."
        )


def _clock(time: datetime) -> str:
    """12-hour clock time without a leading zero, e.g. ``4:33:45 AM``."""
    hour = time.hour % 12 or 12
    return f"{hour}:{time.minute:02d}:{time.second:02d} {'AM' if time.hour < 12 else 'PM'}"
