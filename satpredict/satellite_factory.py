"""
Propagator selection.
"""

import logging

from satpredict.deep_space import DeepSpaceSatellite
from satpredict.exceptions import ConfigurationError
from satpredict.near_earth import NearEarthSatellite
from satpredict.satellite import Satellite
from satpredict.tle import TLE

logger = logging.getLogger(__name__)


def create_satellite(tle: TLE) -> Satellite:
    """
    Build the propagator matching an element set.

    Args:
        tle: Parsed element set

    Returns:
        DeepSpaceSatellite for periods of 225 minutes or more, otherwise
        NearEarthSatellite

    Raises:
        ConfigurationError: If tle is None
    """
    if tle is None:
        raise ConfigurationError("Element set must not be None", field="tle")

    if tle.is_deep_space:
        logger.debug(f"{tle.name}: deep-space model (period {tle.period_minutes:.1f} min)")
        return DeepSpaceSatellite(tle)

    logger.debug(f"{tle.name}: near-Earth model (period {tle.period_minutes:.1f} min)")
    return NearEarthSatellite(tle)
