"""
Satellite Propagator Base

Common machinery of the SGP4 (near-Earth) and SDP4 (deep-space) models:
recovery of the original mean motion and semi-major axis from the element
set, the atmospheric drag coefficients, the Kepler solution with long- and
short-period corrections, and the observer-facing API built on top of a
propagated state.

Internal units are Earth radii and minutes; everything returned to callers
is in kilometres, kilometres per second and UTC datetimes.

References:
    Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
"""

import logging
import math
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional, Tuple

import numpy as np

from satpredict.config import (
    AE,
    CK2,
    CK4,
    DEG2RAD,
    EARTH_RADIUS_KM,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    MAX_ECCENTRICITY,
    MIN_DENOMINATOR,
    MIN_ECCENTRICITY,
    MIN_MEAN_MOTION,
    MIN_SEMI_MAJOR_AXIS,
    MINS_PER_DAY,
    PERIGEE_156_KM,
    PERIGEE_98_KM,
    QOMS2T,
    RAD2DEG,
    S,
    SECS_PER_DAY,
    TWO_PI,
    TWO_THIRDS,
    VISIBILITY_SAMPLES_PER_ORBIT,
    XJ3,
    XKE,
)
from satpredict.exceptions import ConfigurationError, PredictionError
from satpredict.ground_station import GroundStation
from satpredict.julian import julian_date, mod2pi, to_utc
from satpredict.observer import eclipse_state, geodetic_position, observe, solar_position
from satpredict.sat_pos import SatPos
from satpredict.tle import TLE

logger = logging.getLogger(__name__)

# Earth radii per minute to kilometres per second
VELOCITY_SCALE: float = EARTH_RADIUS_KM * MINS_PER_DAY / SECS_PER_DAY


def safe_divisor(value: float) -> float:
    if abs(value) < MIN_DENOMINATOR:
        return MIN_DENOMINATOR if value >= 0 else -MIN_DENOMINATOR
    return value


class Satellite(ABC):
    """
    Abstract propagator for one element set.

    Subclasses initialise their model from the element set in ``__init__``
    and implement ``_propagate``. Initialisation depends only on the element
    set, so propagating to a given time always yields the same state.
    """

    def __init__(self, tle: TLE):
        if tle is None:
            raise ConfigurationError("Element set must not be None", field="tle")
        self._tle = tle.copy()
        self._lock = threading.Lock()

        # state of the multi-step API
        self._time: Optional[datetime] = None
        self._position: Optional[np.ndarray] = None
        self._velocity: Optional[np.ndarray] = None
        self._phase = 0.0

        self._init_common()

    @property
    def tle(self) -> TLE:
        return self._tle

    @abstractmethod
    def is_deep_space(self) -> bool:
        """True for the SDP4 model."""

    @abstractmethod
    def _propagate(self, tsince: float) -> Tuple[np.ndarray, np.ndarray, float]:
        """
        Propagate to minutes since epoch.

        Returns:
            Tuple of (position in Earth radii, velocity in Earth radii per
            minute, phase in radians)
        """

    def _init_common(self) -> None:
        """Model quantities shared by SGP4 and SDP4."""
        tle = self._tle

        # Recover original mean motion (xnodp) and semi-major axis (aodp)
        a1 = math.pow(XKE / max(tle.xno, MIN_MEAN_MOTION), TWO_THIRDS)
        self.cosio = math.cos(tle.xincl)
        self.sinio = math.sin(tle.xincl)
        self.theta2 = self.cosio * self.cosio
        self.x3thm1 = 3.0 * self.theta2 - 1.0
        self.x1mth2 = 1.0 - self.theta2
        self.x7thm1 = 7.0 * self.theta2 - 1.0
        self.eosq = tle.eo * tle.eo
        self.betao2 = max(1.0 - self.eosq, MIN_DENOMINATOR)
        self.betao = math.sqrt(self.betao2)
        del1 = 1.5 * CK2 * self.x3thm1 / (a1 * a1 * self.betao * self.betao2)
        ao = a1 * (1.0 - del1 * (0.5 * TWO_THIRDS + del1 * (1.0 + 134.0 / 81.0 * del1)))
        delo = 1.5 * CK2 * self.x3thm1 / (ao * ao * self.betao * self.betao2)
        self.xnodp = tle.xno / (1.0 + delo)
        self.aodp = max(ao / (1.0 - delo), MIN_SEMI_MAJOR_AXIS)

        # For perigees below 156 km the values of s and qoms2t are altered
        s4 = S
        qoms24 = QOMS2T
        perigee = (self.aodp * (1.0 - tle.eo) - AE) * EARTH_RADIUS_KM
        if perigee < PERIGEE_156_KM:
            if perigee <= PERIGEE_98_KM:
                s4 = 20.0
            else:
                s4 = perigee - 78.0
            qoms24 = math.pow((120.0 - s4) * AE / EARTH_RADIUS_KM, 4)
            s4 = s4 / EARTH_RADIUS_KM + AE
        self.s4 = s4
        self.perigee_km = perigee

        pinvsq = 1.0 / (self.aodp * self.aodp * self.betao2 * self.betao2)
        self.tsi = 1.0 / safe_divisor(self.aodp - s4)
        self.eta = self.aodp * tle.eo * self.tsi
        etasq = self.eta * self.eta
        self.eeta = tle.eo * self.eta
        psisq = max(abs(1.0 - etasq), MIN_DENOMINATOR)
        self.coef = qoms24 * math.pow(self.tsi, 4)
        self.coef1 = self.coef / math.pow(psisq, 3.5)
        c2 = self.coef1 * self.xnodp * (
            self.aodp * (1.0 + 1.5 * etasq + self.eeta * (4.0 + etasq))
            + 0.75 * CK2 * self.tsi / psisq * self.x3thm1 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
        self.c1 = tle.bstar * c2
        self.a3ovk2 = -XJ3 / CK2 * AE ** 3
        self.c4 = 2.0 * self.xnodp * self.coef1 * self.aodp * self.betao2 * (
            self.eta * (2.0 + 0.5 * etasq)
            + tle.eo * (0.5 + 2.0 * etasq)
            - 2.0 * CK2 * self.tsi / (self.aodp * psisq) * (
                -3.0 * self.x3thm1 * (1.0 - 2.0 * self.eeta + etasq * (1.5 - 0.5 * self.eeta))
                + 0.75 * self.x1mth2 * (2.0 * etasq - self.eeta * (1.0 + etasq))
                * math.cos(2.0 * tle.omegao)
            )
        )
        self.c5 = 2.0 * self.coef1 * self.aodp * self.betao2 * (
            1.0 + 2.75 * (etasq + self.eeta) + self.eeta * etasq
        )

        # Secular rates of mean anomaly, argument of perigee and node
        theta4 = self.theta2 * self.theta2
        temp1 = 3.0 * CK2 * pinvsq * self.xnodp
        temp2 = temp1 * CK2 * pinvsq
        temp3 = 1.25 * CK4 * pinvsq * pinvsq * self.xnodp
        self.xmdot = (self.xnodp + 0.5 * temp1 * self.betao * self.x3thm1
                      + 0.0625 * temp2 * self.betao * (13.0 - 78.0 * self.theta2 + 137.0 * theta4))
        x1m5th = 1.0 - 5.0 * self.theta2
        self.omgdot = (-0.5 * temp1 * x1m5th
                       + 0.0625 * temp2 * (7.0 - 114.0 * self.theta2 + 395.0 * theta4)
                       + temp3 * (3.0 - 36.0 * self.theta2 + 49.0 * theta4))
        xhdot1 = -temp1 * self.cosio
        self.xnodot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * self.theta2)
                                + 2.0 * temp3 * (3.0 - 7.0 * self.theta2)) * self.cosio
        self.xnodcf = 3.5 * self.betao2 * xhdot1 * self.c1
        self.t2cof = 1.5 * self.c1

        # Long period coefficients; 1 + cosio vanishes for retrograde equatorial orbits
        self.xlcof = (0.125 * self.a3ovk2 * self.sinio * (3.0 + 5.0 * self.cosio)
                      / safe_divisor(1.0 + self.cosio))
        self.aycof = 0.25 * self.a3ovk2 * self.sinio

    def _bounded_eccentricity(self, e: float, tsince: float) -> float:
        if e > MAX_ECCENTRICITY:
            logger.warning(
                f"{self._tle.name}: eccentricity {e:.6f} clamped to {MAX_ECCENTRICITY} "
                f"at t={tsince:.1f} min"
            )
            return MAX_ECCENTRICITY
        return max(e, MIN_ECCENTRICITY)

    def _bounded_semi_major_axis(self, a: float, tsince: float) -> float:
        if a < MIN_SEMI_MAJOR_AXIS:
            logger.warning(
                f"{self._tle.name}: semi-major axis collapsed ({a:.6f} Earth radii) "
                f"at t={tsince:.1f} min, satellite has probably decayed"
            )
            return MIN_SEMI_MAJOR_AXIS
        return a

    def _finish(
        self,
        a: float,
        e: float,
        omega: float,
        xl: float,
        xnode: float,
        xinc: float,
        omgadf: float,
        tsince: float,
    ) -> Tuple[np.ndarray, np.ndarray, float]:
        """
        Long-period periodics, Kepler's equation, short-period periodics.

        Args:
            a: Semi-major axis (Earth radii)
            e: Eccentricity
            omega: Argument of perigee (rad)
            xl: Mean longitude (rad)
            xnode: Right ascension of the ascending node (rad)
            xinc: Inclination (rad)
            omgadf: Secular argument of perigee used for the phase (rad)
            tsince: Minutes since epoch, for diagnostics

        Returns:
            Tuple of (position Earth radii, velocity Earth radii/min, phase rad)
        """
        beta = math.sqrt(1.0 - e * e)
        xn = XKE / math.pow(a, 1.5)

        # Long period periodics
        axn = e * math.cos(omega)
        temp = 1.0 / (a * beta * beta)
        xll = temp * self.xlcof * axn
        aynl = temp * self.aycof
        xlt = xl + xll
        ayn = e * math.sin(omega) + aynl

        # Solve Kepler's equation
        capu = mod2pi(xlt - xnode)
        epw = capu
        sinepw = cosepw = 0.0
        converged = False
        for _ in range(KEPLER_MAX_ITERATIONS):
            sinepw = math.sin(epw)
            cosepw = math.cos(epw)
            f = capu - ayn * cosepw + axn * sinepw - epw
            fp = 1.0 - axn * cosepw - ayn * sinepw
            delta = f / safe_divisor(fp)
            epw += delta
            if abs(delta) <= KEPLER_TOLERANCE:
                converged = True
                break
        if not converged:
            logger.warning(
                f"{self._tle.name}: Kepler solver did not converge at t={tsince:.1f} min "
                f"(e={e:.6f}), using last iterate"
            )
        sinepw = math.sin(epw)
        cosepw = math.cos(epw)

        # Short period preliminary quantities
        ecose = axn * cosepw + ayn * sinepw
        esine = axn * sinepw - ayn * cosepw
        elsq = axn * axn + ayn * ayn
        temp = max(1.0 - elsq, MIN_DENOMINATOR)
        pl = a * temp
        r = max(a * (1.0 - ecose), MIN_SEMI_MAJOR_AXIS)
        temp1 = 1.0 / r
        rdot = XKE * math.sqrt(a) * esine * temp1
        rfdot = XKE * math.sqrt(pl) * temp1
        temp2 = a * temp1
        betal = math.sqrt(temp)
        temp3 = 1.0 / (1.0 + betal)
        cosu = temp2 * (cosepw - axn + ayn * esine * temp3)
        sinu = temp2 * (sinepw - ayn - axn * esine * temp3)
        u = math.atan2(sinu, cosu)
        sin2u = 2.0 * sinu * cosu
        cos2u = 2.0 * cosu * cosu - 1.0
        temp = 1.0 / pl
        temp1 = CK2 * temp
        temp2 = temp1 * temp

        # Update for short periodics
        rk = r * (1.0 - 1.5 * temp2 * betal * self.x3thm1) + 0.5 * temp1 * self.x1mth2 * cos2u
        uk = u - 0.25 * temp2 * self.x7thm1 * sin2u
        xnodek = xnode + 1.5 * temp2 * self.cosio * sin2u
        xinck = xinc + 1.5 * temp2 * self.cosio * self.sinio * cos2u
        rdotk = rdot - xn * temp1 * self.x1mth2 * sin2u
        rfdotk = rfdot + xn * temp1 * (self.x1mth2 * cos2u + 1.5 * self.x3thm1)

        # Orientation vectors
        sinuk = math.sin(uk)
        cosuk = math.cos(uk)
        sinik = math.sin(xinck)
        cosik = math.cos(xinck)
        sinnok = math.sin(xnodek)
        cosnok = math.cos(xnodek)
        xmx = -sinnok * cosik
        xmy = cosnok * cosik
        u_vec = np.array([xmx * sinuk + cosnok * cosuk,
                          xmy * sinuk + sinnok * cosuk,
                          sinik * sinuk])
        v_vec = np.array([xmx * cosuk - cosnok * sinuk,
                          xmy * cosuk - sinnok * sinuk,
                          sinik * cosuk])

        position = rk * u_vec
        velocity = rdotk * u_vec + rfdotk * v_vec
        phase = mod2pi(xlt - xnode - omgadf + TWO_PI)

        return position, velocity, phase

    def tsince(self, time: datetime) -> float:
        """Minutes from the element set epoch to a time."""
        return (julian_date(time) - self._tle.epoch_jd) * MINS_PER_DAY

    def advance(self, time: datetime) -> Tuple[np.ndarray, np.ndarray, float]:
        """
        Propagate to a time without touching instance state.

        Args:
            time: Target time (naive values are UTC)

        Returns:
            Tuple of (position km, velocity km/s, phase rad) in the TEME frame
        """
        position, velocity, phase = self._propagate(self.tsince(time))
        return position * EARTH_RADIUS_KM, velocity * VELOCITY_SCALE, phase

    def get_position(self, station: GroundStation, time: datetime) -> SatPos:
        """
        Position of the satellite relative to a ground station.

        Safe to call concurrently on a shared instance: every call works on
        its own freshly propagated state.
        """
        if not isinstance(station, GroundStation):
            raise ConfigurationError("A GroundStation is required", field="station", value=station)
        position, velocity, phase = self.advance(time)
        return observe(position, velocity, station, time, phase)

    def calculate_satellite_vectors(self, time: datetime) -> None:
        """
        First step of the multi-step API: propagate and keep the vectors.

        The multi-step calls share instance state. Each step is serialised by
        an instance lock but a sequence of steps is not; use ``get_position``
        from concurrent code.
        """
        position, velocity, phase = self.advance(time)
        with self._lock:
            self._time = to_utc(time)
            self._position = position
            self._velocity = velocity
            self._phase = phase

    def _stored_state(self) -> Tuple[datetime, np.ndarray, np.ndarray, float]:
        if self._position is None:
            raise PredictionError("calculate_satellite_vectors must be called first")
        return self._time, self._position, self._velocity, self._phase

    def calculate_satellite_ground_track(self) -> SatPos:
        """Sub-satellite point of the vectors from ``calculate_satellite_vectors``."""
        with self._lock:
            time, position, _, phase = self._stored_state()
        jd = julian_date(time)
        lat, lon, alt, theta = geodetic_position(position, jd)
        eclipsed, depth = eclipse_state(position, solar_position(jd))
        return SatPos(
            time=time,
            latitude=lat * RAD2DEG,
            longitude=(lon * RAD2DEG) % 360.0,
            altitude=alt,
            phase=phase * RAD2DEG,
            theta=theta * RAD2DEG,
            eclipsed=eclipsed,
            eclipse_depth=depth * RAD2DEG,
        )

    def calculate_sat_pos_for_ground_station(self, station: GroundStation) -> SatPos:
        """Observer-relative state of the vectors from ``calculate_satellite_vectors``."""
        if not isinstance(station, GroundStation):
            raise ConfigurationError("A GroundStation is required", field="station", value=station)
        with self._lock:
            time, position, velocity, phase = self._stored_state()
        return observe(position, velocity, station, time, phase)

    def will_be_seen(self, station: GroundStation, start: Optional[datetime] = None) -> bool:
        """
        Whether the satellite can ever rise above the station's horizon.

        The footprint at apogee, widened by the orbit inclination, must reach
        the station latitude. When ``start`` is given, one orbital period from
        that time is also sampled against the horizon mask.

        Args:
            station: Observer location
            start: Optional start of the sampled orbit

        Returns:
            True if the satellite can be seen
        """
        if not isinstance(station, GroundStation):
            raise ConfigurationError("A GroundStation is required", field="station", value=station)
        tle = self._tle
        if tle.meanmo < 1e-8:
            return False

        lin = tle.incl
        if lin >= 90.0:
            lin = 180.0 - lin
        sma = 331.25 * math.exp(math.log(MINS_PER_DAY / tle.meanmo) * TWO_THIRDS)
        apogee = sma * (1.0 + tle.eccn) - EARTH_RADIUS_KM
        reach = math.acos(EARTH_RADIUS_KM / (apogee + EARTH_RADIUS_KM)) + lin * DEG2RAD
        if reach <= abs(station.latitude_rad):
            return False
        if start is None:
            return True

        step = MINS_PER_DAY / tle.meanmo / VISIBILITY_SAMPLES_PER_ORBIT
        start = to_utc(start)
        for i in range(VISIBILITY_SAMPLES_PER_ORBIT + 1):
            if self.get_position(station, start + timedelta(minutes=i * step)).above_horizon:
                return True
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._tle.name!r})"
