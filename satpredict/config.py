"""
Model Configuration and Constants

This module contains the physical constants, numerical stability thresholds,
pass search defaults and reference element sets used throughout the package.

Constants:
    SGP4/SDP4 Earth model constants as used by Spacetrack Report #3 and the
    PREDICT family of trackers (Earth radii and minutes as internal units,
    WGS-84 equatorial radius and flattening for the observer geometry).

Reference TLE Data:
    Element sets for a representative object of each orbit class. They are
    used for demonstrations and tests; their epochs are fixed, so
    predictions far from the epoch degrade in accuracy.

References:
    Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
    Kelso, T. S. "SGP4/SDP4 Pascal and Fortran sources", celestrak.com
"""

import math
from typing import Dict, Any

# Angles
TWO_PI: float = 2.0 * math.pi
PI_OVER_TWO: float = math.pi / 2.0
DEG2RAD: float = math.pi / 180.0
RAD2DEG: float = 180.0 / math.pi
TWO_THIRDS: float = 2.0 / 3.0

# Time
MINS_PER_DAY: float = 1440.0
SECS_PER_DAY: float = 86400.0
EARTH_ROTATIONS_PER_SIDERIAL_DAY: float = 1.00273790934
EARTH_ROTATION_RATE: float = 7.292115e-5  # rad/s

# Earth model (SGP4 internal units are Earth radii and minutes)
EARTH_RADIUS_KM: float = 6378.137  # equatorial radius (km)
FLATTENING_FACTOR: float = 3.35281066474748e-3
AE: float = 1.0  # distance units per Earth radius
CK2: float = 5.413079e-4  # 0.5 * J2 * AE^2
CK4: float = 6.209887e-7  # -0.375 * J4 * AE^4
XJ3: float = -2.53881e-6  # J3
XKE: float = 7.43669161e-2  # sqrt(GM) in (Earth radii)^1.5 / min
S: float = 1.012229  # density function parameter, 78 km above the surface
QOMS2T: float = 1.880279e-09  # ((120 - 78) / EARTH_RADIUS_KM)^4
PERIGEE_156_KM: float = 156.0
PERIGEE_98_KM: float = 98.0

# Sun and signal
SOLAR_RADIUS_KM: float = 6.96000e5
ASTRONOMICAL_UNIT: float = 1.49597870691e8  # km
SPEED_OF_LIGHT: float = 2.99792458e8  # m/s

# Orbit classification: periods of 225 minutes or longer use the SDP4 model
DEEP_SPACE_PERIOD_MINUTES: float = 225.0

# Kepler equation solver
KEPLER_TOLERANCE: float = 1.0e-6
KEPLER_MAX_ITERATIONS: int = 10

# Numerical stability thresholds
MIN_ECCENTRICITY: float = 1.0e-6
MAX_ECCENTRICITY: float = 0.999999
MIN_DRAG_ECCENTRICITY: float = 1.0e-4  # below this the c3/xmcof drag terms are dropped
MIN_SEMI_MAJOR_AXIS: float = 1.0e-3  # Earth radii
MIN_MEAN_MOTION: float = 1.0e-12  # rad/min
MIN_DENOMINATOR: float = 1.5e-12

# Observer geometry
HORIZON_SECTORS: int = 36
HORIZON_SECTOR_WIDTH_DEG: float = 10.0
ABOVE_HORIZON_EPSILON: float = 1.0e-6
LAT_LON_TOLERANCE: float = 1.0e-10
LAT_LON_MAX_ITERATIONS: int = 10

# Footprint: Earth diameter used by the range circle radius formula
FOOTPRINT_EARTH_DIAMETER_KM: float = 12756.33
FOOTPRINT_EARTH_RADIUS_KM: float = 6378.16

# Pass search defaults
COARSE_STEP_SECONDS: int = 60
TRACK_STEP_SECONDS: int = 30
RESOLUTION_SECONDS: float = 1.0
MAX_SEARCH_ITERATIONS: int = 100000
VISIBILITY_SAMPLES_PER_ORBIT: int = 360

# Reference ISS TLE for demonstrations and testing
# Epoch: 2026-02-14
FALLBACK_ISS_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'line1': '1 25544U 98067A   26045.79523799  .00007779  00000+0  15107-3 0  9994',
    'line2': '2 25544  51.6315 185.5279 0011056  98.8248 261.3993 15.48601910552787',
    'mean_motion': 15.48601910,
    'inclination': 51.6315,
    'eccentricity': 0.0011056
}

# Highly elliptical 12-hour orbit (12-hour resonance terms apply)
FALLBACK_MOLNIYA_TLE: Dict[str, Any] = {
    'name': 'MOLNIYA 1-80',
    'norad_id': 21118,
    'line1': '1 21118U 91012A   19021.70755179 -.00000500  00000-0  12360+0 0  9997',
    'line2': '2 21118  63.5565 115.5896 6805505 289.4226  12.3652  2.05245802205499',
    'mean_motion': 2.05245802,
    'inclination': 63.5565,
    'eccentricity': 0.6805505
}

# Geosynchronous orbit (24-hour resonance terms apply)
FALLBACK_GEOSYNC_TLE: Dict[str, Any] = {
    'name': "ES'HAIL 2",
    'norad_id': 43700,
    'line1': '1 43700U 18090A   19022.59033389  .00000135  00000-0  00000+0 0  9994',
    'line2': '2 43700   0.0189 110.5219 0001117 199.1803  50.2639  1.00270746   826',
    'mean_motion': 1.00270746,
    'inclination': 0.0189,
    'eccentricity': 0.0001117
}

# Deep-space, low inclination, highly elliptical (no resonance)
FALLBACK_AO40_TLE: Dict[str, Any] = {
    'name': 'AO-40',
    'norad_id': 26609,
    'line1': '1 26609U 00072B   19022.38481103 -.00000134  00000-0  00000+0 0  9992',
    'line2': '2 26609   7.4088  95.8526 7982264 349.5632   1.0214  1.25587570 83680',
    'mean_motion': 1.25587570,
    'inclination': 7.4088,
    'eccentricity': 0.7982264
}
