"""
Satellite Pass Prediction Package

This package propagates Two-Line Element sets with the SGP4 and SDP4
models and predicts what a ground station sees: look angles, passes,
Doppler shifts and footprints.

Modules:
    tle: Element set parsing and classification
    near_earth: SGP4 propagator for periods below 225 minutes
    deep_space: SDP4 propagator with lunar-solar and resonance terms
    satellite_factory: Propagator selection
    observer: Topocentric, geodetic and eclipse transforms
    pass_predictor: AOS/TCA/LOS search, pass lists, Doppler
    footprint: Range circle geometry

References:
    Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
    Magliacane, J. A. "PREDICT: A Satellite Tracking/Orbital Prediction Program"
"""

from satpredict.deep_space import DeepSpaceSatellite
from satpredict.exceptions import (
    ConfigurationError,
    MalformedElementsError,
    PassNotFoundError,
    PredictionError,
)
from satpredict.ground_station import GroundStation
from satpredict.near_earth import NearEarthSatellite
from satpredict.pass_event import PassEvent
from satpredict.pass_predictor import PassPredictor
from satpredict.sat_pos import SatPos
from satpredict.satellite import Satellite
from satpredict.satellite_factory import create_satellite
from satpredict.tle import TLE

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "DeepSpaceSatellite",
    "GroundStation",
    "MalformedElementsError",
    "NearEarthSatellite",
    "PassEvent",
    "PassNotFoundError",
    "PassPredictor",
    "PredictionError",
    "SatPos",
    "Satellite",
    "TLE",
    "create_satellite",
]
