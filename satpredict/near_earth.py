"""
Near-Earth propagator (SGP4).

Used for orbits with periods below 225 minutes. Secular gravity and
atmospheric drag are applied to the mean elements; for perigees below
220 km the drag equations are truncated to the simple form.
"""

import logging
import math
from typing import Tuple

import numpy as np

from satpredict.config import (
    AE,
    EARTH_RADIUS_KM,
    MIN_DRAG_ECCENTRICITY,
    TWO_THIRDS,
)
from satpredict.satellite import Satellite
from satpredict.tle import TLE

logger = logging.getLogger(__name__)

# Perigee below which the simplified drag model is used
SIMPLE_PERIGEE_KM = 220.0


class NearEarthSatellite(Satellite):
    """SGP4 propagator."""

    def __init__(self, tle: TLE):
        super().__init__(tle)
        tle = self._tle

        self.simple = (self.aodp * (1.0 - tle.eo) / AE) < (SIMPLE_PERIGEE_KM / EARTH_RADIUS_KM + AE)

        if tle.eo > MIN_DRAG_ECCENTRICITY:
            c3 = self.coef * self.tsi * self.a3ovk2 * self.xnodp * AE * self.sinio / tle.eo
            self.xmcof = -TWO_THIRDS * self.coef * tle.bstar * AE / self.eeta
        else:
            c3 = 0.0
            self.xmcof = 0.0
        self.omgcof = tle.bstar * c3 * math.cos(tle.omegao)
        self.delmo = math.pow(1.0 + self.eta * math.cos(tle.xmo), 3)
        self.sinmo = math.sin(tle.xmo)

        if not self.simple:
            c1sq = self.c1 * self.c1
            self.d2 = 4.0 * self.aodp * self.tsi * c1sq
            temp = self.d2 * self.tsi * self.c1 / 3.0
            self.d3 = (17.0 * self.aodp + self.s4) * temp
            self.d4 = 0.5 * temp * self.aodp * self.tsi * (221.0 * self.aodp + 31.0 * self.s4) * self.c1
            self.t3cof = self.d2 + 2.0 * c1sq
            self.t4cof = 0.25 * (3.0 * self.d3 + self.c1 * (12.0 * self.d2 + 10.0 * c1sq))
            self.t5cof = 0.2 * (3.0 * self.d4 + 12.0 * self.c1 * self.d3
                                + 6.0 * self.d2 * self.d2 + 15.0 * c1sq * (2.0 * self.d2 + c1sq))

        logger.debug(
            f"SGP4 initialised for {tle.name}: perigee {self.perigee_km:.1f} km, "
            f"simple drag model {self.simple}"
        )

    def is_deep_space(self) -> bool:
        return False

    def _propagate(self, tsince: float) -> Tuple[np.ndarray, np.ndarray, float]:
        tle = self._tle

        # Update for secular gravity and atmospheric drag
        xmdf = tle.xmo + self.xmdot * tsince
        omgadf = tle.omegao + self.omgdot * tsince
        xnoddf = tle.xnodeo + self.xnodot * tsince
        omega = omgadf
        xmp = xmdf
        tsq = tsince * tsince
        xnode = xnoddf + self.xnodcf * tsq
        tempa = 1.0 - self.c1 * tsince
        tempe = tle.bstar * self.c4 * tsince
        templ = self.t2cof * tsq

        if not self.simple:
            delomg = self.omgcof * tsince
            delm = self.xmcof * (math.pow(1.0 + self.eta * math.cos(xmdf), 3) - self.delmo)
            temp = delomg + delm
            xmp = xmdf + temp
            omega = omgadf - temp
            tcube = tsq * tsince
            tfour = tsince * tcube
            tempa = tempa - self.d2 * tsq - self.d3 * tcube - self.d4 * tfour
            tempe = tempe + tle.bstar * self.c5 * (math.sin(xmp) - self.sinmo)
            templ = templ + self.t3cof * tcube + tfour * (self.t4cof + tsince * self.t5cof)

        a = self._bounded_semi_major_axis(self.aodp * tempa * tempa, tsince)
        e = self._bounded_eccentricity(tle.eo - tempe, tsince)
        xl = xmp + omega + xnode + self.xnodp * templ

        return self._finish(a, e, omega, xl, xnode, tle.xincl, omgadf, tsince)
