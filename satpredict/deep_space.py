"""
Deep-Space propagator (SDP4)

Used for orbits with periods of 225 minutes or longer. Extends the SGP4
secular model with:

- Lunar and solar secular rates and long-period periodics
- Geopotential resonance for 24-hour (synchronous) and 12-hour
  (semi-synchronous, eccentricity >= 0.5) orbits, integrated numerically
  in 720 minute steps

The lunar-solar and resonance coefficients are computed once from the
element set and never change. The resonance integration always restarts
from epoch, so a propagation depends only on the requested time.

References:
    Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
    Kelso, T. S. "SGP4/SDP4 Pascal and Fortran sources", celestrak.com
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from satpredict.config import MIN_MEAN_MOTION, TWO_PI, TWO_THIRDS, XKE
from satpredict.julian import mod2pi
from satpredict.satellite import Satellite, safe_divisor
from satpredict.tle import TLE

logger = logging.getLogger(__name__)

# Solar perturbation constants
ZNS = 1.19459e-5
C1SS = 2.9864797e-6
ZES = 1.675e-2
ZCOSIS = 9.1744867e-1
ZSINIS = 3.9785416e-1
ZSINGS = -9.8088458e-1
ZCOSGS = 1.945905e-1

# Lunar perturbation constants
ZNL = 1.5835218e-4
C1L = 4.7968065e-7
ZEL = 5.490e-2

# Resonance constants
Q22 = 1.7891679e-6
Q31 = 2.1460748e-6
Q33 = 2.2123015e-7
G22 = 5.7686396
G32 = 9.5240898e-1
G44 = 1.8014998
G52 = 1.0508330
G54 = 4.4108898
ROOT22 = 1.7891679e-6
ROOT32 = 3.7393792e-7
ROOT44 = 7.3636953e-9
ROOT52 = 1.1428639e-7
ROOT54 = 2.1765803e-9
FASX2 = 0.13130908
FASX4 = 2.8843198
FASX6 = 0.37448087
THDT = 4.3752691e-3  # Earth rotation rate (rad/min)

# Resonance integrator step (minutes) and step^2 / 2
STEP = 720.0
STEP2 = 259200.0

# Julian date of 1950 January 0.0, origin of ds50
JD_1950: float = 2433281.5

# Below this inclination (rad) the node terms are dropped
SMALL_INCLINATION = 5.2359877e-2
# Below this inclination (rad) periodics use the Lyddane modification
LYDDANE_INCLINATION = 0.2


@dataclass(frozen=True)
class LunarSolarTerms:
    """
    Perturbation coefficients of one body (Sun or Moon).

    The ``s*`` fields are secular rates; the rest feed the long-period
    periodics evaluated by ``periodics``.
    """

    se: float
    si: float
    sl: float
    sgh: float
    sh: float
    e2: float
    e3: float
    i2: float
    i3: float
    l2: float
    l3: float
    l4: float
    gh2: float
    gh3: float
    gh4: float
    h2: float
    h3: float
    zmo: float
    zn: float
    ze: float

    def periodics(self, t: float) -> Tuple[float, float, float, float, float]:
        """Periodic corrections (e, i, l, gh, h) at minutes since epoch."""
        zm = self.zmo + self.zn * t
        zf = zm + 2.0 * self.ze * math.sin(zm)
        sinzf = math.sin(zf)
        f2 = 0.5 * sinzf * sinzf - 0.25
        f3 = -0.5 * sinzf * math.cos(zf)
        return (
            self.e2 * f2 + self.e3 * f3,
            self.i2 * f2 + self.i3 * f3,
            self.l2 * f2 + self.l3 * f3 + self.l4 * sinzf,
            self.gh2 * f2 + self.gh3 * f3 + self.gh4 * sinzf,
            self.h2 * f2 + self.h3 * f3,
        )


@dataclass(frozen=True)
class ResonanceTerms:
    """Geopotential resonance coefficients and integrator start values."""

    synchronous: bool
    xlamo: float
    xnq: float
    xfact: float
    omegaq: float
    omgdot: float
    del1: float = 0.0
    del2: float = 0.0
    del3: float = 0.0
    d2201: float = 0.0
    d2211: float = 0.0
    d3210: float = 0.0
    d3222: float = 0.0
    d4410: float = 0.0
    d4422: float = 0.0
    d5220: float = 0.0
    d5232: float = 0.0
    d5421: float = 0.0
    d5433: float = 0.0

    def _dot_terms(self, xli: float, atime: float) -> Tuple[float, float]:
        if self.synchronous:
            xndot = (self.del1 * math.sin(xli - FASX2)
                     + self.del2 * math.sin(2.0 * (xli - FASX4))
                     + self.del3 * math.sin(3.0 * (xli - FASX6)))
            xnddt = (self.del1 * math.cos(xli - FASX2)
                     + 2.0 * self.del2 * math.cos(2.0 * (xli - FASX4))
                     + 3.0 * self.del3 * math.cos(3.0 * (xli - FASX6)))
            return xndot, xnddt

        xomi = self.omegaq + self.omgdot * atime
        x2omi = xomi + xomi
        x2li = xli + xli
        xndot = (self.d2201 * math.sin(x2omi + xli - G22)
                 + self.d2211 * math.sin(xli - G22)
                 + self.d3210 * math.sin(xomi + xli - G32)
                 + self.d3222 * math.sin(-xomi + xli - G32)
                 + self.d4410 * math.sin(x2omi + x2li - G44)
                 + self.d4422 * math.sin(x2li - G44)
                 + self.d5220 * math.sin(xomi + xli - G52)
                 + self.d5232 * math.sin(-xomi + xli - G52)
                 + self.d5421 * math.sin(xomi + x2li - G54)
                 + self.d5433 * math.sin(-xomi + x2li - G54))
        xnddt = (self.d2201 * math.cos(x2omi + xli - G22)
                 + self.d2211 * math.cos(xli - G22)
                 + self.d3210 * math.cos(xomi + xli - G32)
                 + self.d3222 * math.cos(-xomi + xli - G32)
                 + self.d5220 * math.cos(xomi + xli - G52)
                 + self.d5232 * math.cos(-xomi + xli - G52)
                 + 2.0 * (self.d4410 * math.cos(x2omi + x2li - G44)
                          + self.d4422 * math.cos(x2li - G44)
                          + self.d5421 * math.cos(xomi + x2li - G54)
                          + self.d5433 * math.cos(-xomi + x2li - G54)))
        return xndot, xnddt

    def integrate(self, t: float) -> Tuple[float, float]:
        """
        Integrate the resonance variables from epoch.

        Args:
            t: Minutes since epoch

        Returns:
            Tuple of (mean motion rad/min, resonant mean longitude rad)
        """
        delt = STEP if t >= 0.0 else -STEP
        atime = 0.0
        xni = self.xnq
        xli = self.xlamo

        while True:
            xndot, xnddt = self._dot_terms(xli, atime)
            xldot = xni + self.xfact
            xnddt *= xldot
            if abs(t - atime) < STEP:
                break
            xli += xldot * delt + xndot * STEP2
            xni += xndot * delt + xnddt * STEP2
            atime += delt

        ft = t - atime
        xn = xni + xndot * ft + xnddt * ft * ft * 0.5
        xl = xli + xldot * ft + xndot * ft * ft * 0.5
        return xn, xl


class DeepSpaceSatellite(Satellite):
    """SDP4 propagator."""

    def __init__(self, tle: TLE):
        super().__init__(tle)
        tle = self._tle

        self.sing = math.sin(tle.omegao)
        self.cosg = math.cos(tle.omegao)
        self.ds50 = tle.epoch_jd - JD_1950
        self.thgr = mod2pi(6.3003880987 * self.ds50 + 1.72944494)

        sinq = math.sin(tle.xnodeo)
        cosq = math.cos(tle.xnodeo)

        # Lunar orbit at epoch, days since 1900 January 0.5
        day = self.ds50 + 18261.5
        xnodce = 4.5236020 - 9.2422029e-4 * day
        stem = math.sin(xnodce)
        ctem = math.cos(xnodce)
        zcosil = 0.91375164 - 0.03568096 * ctem
        zsinil = math.sqrt(1.0 - zcosil * zcosil)
        zsinhl = 0.089683511 * stem / zsinil
        zcoshl = math.sqrt(1.0 - zsinhl * zsinhl)
        c = 4.7199672 + 0.22997150 * day
        gam = 5.8351514 + 0.0019443680 * day
        zmol = mod2pi(c - gam)
        zx = 0.39785416 * stem / zsinil
        zy = zcoshl * ctem + 0.91744867 * zsinhl * stem
        zx = gam + math.atan2(zx, zy) - xnodce
        zcosgl = math.cos(zx)
        zsingl = math.sin(zx)
        zmos = mod2pi(6.2565837 + 0.017201977 * day)

        self.solar = self._lunar_solar_terms(
            ZCOSGS, ZSINGS, ZCOSIS, ZSINIS, cosq, sinq, C1SS, ZNS, ZES, zmos
        )
        self.lunar = self._lunar_solar_terms(
            zcosgl, zsingl, zcosil, zsinil,
            zcoshl * cosq + zsinhl * sinq,
            sinq * zcoshl - cosq * zsinhl,
            C1L, ZNL, ZEL, zmol,
        )

        sinio = safe_divisor(self.sinio)
        self.sse = self.solar.se + self.lunar.se
        self.ssi = self.solar.si + self.lunar.si
        self.ssl = self.solar.sl + self.lunar.sl
        self.ssh = (self.solar.sh + self.lunar.sh) / sinio
        self.ssg = self.solar.sgh + self.lunar.sgh - self.cosio * self.ssh

        self.resonance = self._resonance_terms()

        if self.resonance is None:
            kind = "none"
        elif self.resonance.synchronous:
            kind = "synchronous"
        else:
            kind = "12-hour"
        logger.debug(f"SDP4 initialised for {tle.name}: resonance {kind}")

    def is_deep_space(self) -> bool:
        return True

    def _lunar_solar_terms(
        self,
        zcosg: float,
        zsing: float,
        zcosi: float,
        zsini: float,
        zcosh: float,
        zsinh: float,
        cc: float,
        zn: float,
        ze: float,
        zmo: float,
    ) -> LunarSolarTerms:
        eosq = self.eosq
        cosio = self.cosio
        sinio = self.sinio
        cosg = self.cosg
        sing = self.sing

        a1 = zcosg * zcosh + zsing * zcosi * zsinh
        a3 = -zsing * zcosh + zcosg * zcosi * zsinh
        a7 = -zcosg * zsinh + zsing * zcosi * zcosh
        a8 = zsing * zsini
        a9 = zsing * zsinh + zcosg * zcosi * zcosh
        a10 = zcosg * zsini
        a2 = cosio * a7 + sinio * a8
        a4 = cosio * a9 + sinio * a10
        a5 = -sinio * a7 + cosio * a8
        a6 = -sinio * a9 + cosio * a10
        x1 = a1 * cosg + a2 * sing
        x2 = a3 * cosg + a4 * sing
        x3 = -a1 * sing + a2 * cosg
        x4 = -a3 * sing + a4 * cosg
        x5 = a5 * sing
        x6 = a6 * sing
        x7 = a5 * cosg
        x8 = a6 * cosg
        z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
        z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
        z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
        z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * eosq
        z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * eosq
        z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * eosq
        z11 = -6.0 * a1 * a5 + eosq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
        z12 = -6.0 * (a1 * a6 + a3 * a5) + eosq * (
            -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5))
        z13 = -6.0 * a3 * a6 + eosq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
        z21 = 6.0 * a2 * a5 + eosq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
        z22 = 6.0 * (a4 * a5 + a2 * a6) + eosq * (
            24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8))
        z23 = 6.0 * a4 * a6 + eosq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
        z1 = z1 + z1 + self.betao2 * z31
        z2 = z2 + z2 + self.betao2 * z32
        z3 = z3 + z3 + self.betao2 * z33
        s3 = cc / self.xnodp
        s2 = -0.5 * s3 / self.betao
        s4 = s3 * self.betao
        s1 = -15.0 * self._tle.eo * s4
        s5 = x1 * x3 + x2 * x4
        s6 = x2 * x3 + x1 * x4
        s7 = x2 * x4 - x1 * x3

        sh = -zn * s2 * (z21 + z23)
        if self._tle.xincl < SMALL_INCLINATION:
            sh = 0.0

        return LunarSolarTerms(
            se=s1 * zn * s5,
            si=s2 * zn * (z11 + z13),
            sl=-zn * s3 * (z1 + z3 - 14.0 - 6.0 * eosq),
            sgh=s4 * zn * (z31 + z33 - 6.0),
            sh=sh,
            e2=2.0 * s1 * s6,
            e3=2.0 * s1 * s7,
            i2=2.0 * s2 * z12,
            i3=2.0 * s2 * (z13 - z11),
            l2=-2.0 * s3 * z2,
            l3=-2.0 * s3 * (z3 - z1),
            l4=-2.0 * s3 * (-21.0 - 9.0 * eosq) * ze,
            gh2=2.0 * s4 * z32,
            gh3=2.0 * s4 * (z33 - z31),
            gh4=-18.0 * s4 * ze,
            h2=-2.0 * s2 * z22,
            h3=-2.0 * s2 * (z23 - z21),
            zmo=zmo,
            zn=zn,
            ze=ze,
        )

    def _resonance_terms(self) -> Optional[ResonanceTerms]:
        """Resonance set-up, None when the orbit is not resonant."""
        tle = self._tle
        eq = tle.eo
        xnq = self.xnodp
        aqnv = 1.0 / self.aodp
        eosq = self.eosq
        cosio = self.cosio
        sinio = self.sinio
        theta2 = self.theta2

        if 0.0034906585 < xnq < 0.0052359877:
            # Synchronous resonance terms
            g200 = 1.0 + eosq * (-2.5 + 0.8125 * eosq)
            g310 = 1.0 + 2.0 * eosq
            g300 = 1.0 + eosq * (-6.0 + 6.60937 * eosq)
            f220 = 0.75 * (1.0 + cosio) * (1.0 + cosio)
            f311 = 0.9375 * sinio * sinio * (1.0 + 3.0 * cosio) - 0.75 * (1.0 + cosio)
            f330 = 1.0 + cosio
            f330 = 1.875 * f330 * f330 * f330
            del1 = 3.0 * xnq * xnq * aqnv * aqnv
            del2 = 2.0 * del1 * f220 * g200 * Q22
            del3 = 3.0 * del1 * f330 * g300 * Q33 * aqnv
            del1 = del1 * f311 * g310 * Q31 * aqnv
            xlamo = tle.xmo + tle.xnodeo + tle.omegao - self.thgr
            bfact = self.xmdot + self.omgdot + self.xnodot - THDT
            bfact = bfact + self.ssl + self.ssg + self.ssh
            return ResonanceTerms(
                synchronous=True,
                xlamo=xlamo,
                xnq=xnq,
                xfact=bfact - xnq,
                omegaq=tle.omegao,
                omgdot=self.omgdot,
                del1=del1,
                del2=del2,
                del3=del3,
            )

        if xnq < 0.00826 or xnq > 0.00924 or eq < 0.5:
            return None

        # 12-hour resonance terms
        eoc = eq * eosq
        g201 = -0.306 - (eq - 0.64) * 0.440
        if eq <= 0.65:
            g211 = 3.616 - 13.247 * eq + 16.290 * eosq
            g310 = -19.302 + 117.390 * eq - 228.419 * eosq + 156.591 * eoc
            g322 = -18.9068 + 109.7927 * eq - 214.6334 * eosq + 146.5816 * eoc
            g410 = -41.122 + 242.694 * eq - 471.094 * eosq + 313.953 * eoc
            g422 = -146.407 + 841.880 * eq - 1629.014 * eosq + 1083.435 * eoc
            g520 = -532.114 + 3017.977 * eq - 5740.0 * eosq + 3708.276 * eoc
        else:
            g211 = -72.099 + 331.819 * eq - 508.738 * eosq + 266.724 * eoc
            g310 = -346.844 + 1582.851 * eq - 2415.925 * eosq + 1246.113 * eoc
            g322 = -342.585 + 1554.908 * eq - 2366.899 * eosq + 1215.972 * eoc
            g410 = -1052.797 + 4758.686 * eq - 7193.992 * eosq + 3651.957 * eoc
            g422 = -3581.69 + 16178.11 * eq - 24462.77 * eosq + 12422.52 * eoc
            if eq <= 0.715:
                g520 = 1464.74 - 4664.75 * eq + 3763.64 * eosq
            else:
                g520 = -5149.66 + 29936.92 * eq - 54087.36 * eosq + 31324.56 * eoc

        if eq < 0.7:
            g533 = -919.2277 + 4988.61 * eq - 9064.77 * eosq + 5542.21 * eoc
            g521 = -822.71072 + 4568.6173 * eq - 8491.4146 * eosq + 5337.524 * eoc
            g532 = -853.666 + 4690.25 * eq - 8624.77 * eosq + 5341.4 * eoc
        else:
            g533 = -37995.78 + 161616.52 * eq - 229838.2 * eosq + 109377.94 * eoc
            g521 = -51752.104 + 218913.95 * eq - 309468.16 * eosq + 146349.42 * eoc
            g532 = -40023.88 + 170470.89 * eq - 242699.48 * eosq + 115605.82 * eoc

        sini2 = sinio * sinio
        f220 = 0.75 * (1.0 + 2.0 * cosio + theta2)
        f221 = 1.5 * sini2
        f321 = 1.875 * sinio * (1.0 - 2.0 * cosio - 3.0 * theta2)
        f322 = -1.875 * sinio * (1.0 + 2.0 * cosio - 3.0 * theta2)
        f441 = 35.0 * sini2 * f220
        f442 = 39.3750 * sini2 * sini2
        f522 = 9.84375 * sinio * (sini2 * (1.0 - 2.0 * cosio - 5.0 * theta2)
                                  + 0.33333333 * (-2.0 + 4.0 * cosio + 6.0 * theta2))
        f523 = sinio * (4.92187512 * sini2 * (-2.0 - 4.0 * cosio + 10.0 * theta2)
                        + 6.56250012 * (1.0 + 2.0 * cosio - 3.0 * theta2))
        f542 = 29.53125 * sinio * (2.0 - 8.0 * cosio
                                   + theta2 * (-12.0 + 8.0 * cosio + 10.0 * theta2))
        f543 = 29.53125 * sinio * (-2.0 - 8.0 * cosio
                                   + theta2 * (12.0 + 8.0 * cosio - 10.0 * theta2))

        xno2 = xnq * xnq
        ainv2 = aqnv * aqnv
        temp1 = 3.0 * xno2 * ainv2
        temp = temp1 * ROOT22
        d2201 = temp * f220 * g201
        d2211 = temp * f221 * g211
        temp1 = temp1 * aqnv
        temp = temp1 * ROOT32
        d3210 = temp * f321 * g310
        d3222 = temp * f322 * g322
        temp1 = temp1 * aqnv
        temp = 2.0 * temp1 * ROOT44
        d4410 = temp * f441 * g410
        d4422 = temp * f442 * g422
        temp1 = temp1 * aqnv
        temp = temp1 * ROOT52
        d5220 = temp * f522 * g520
        d5232 = temp * f523 * g532
        temp = 2.0 * temp1 * ROOT54
        d5421 = temp * f542 * g521
        d5433 = temp * f543 * g533

        xlamo = tle.xmo + tle.xnodeo + tle.xnodeo - self.thgr - self.thgr
        bfact = self.xmdot + self.xnodot + self.xnodot - THDT - THDT
        bfact = bfact + self.ssl + self.ssh + self.ssh
        return ResonanceTerms(
            synchronous=False,
            xlamo=xlamo,
            xnq=xnq,
            xfact=bfact - xnq,
            omegaq=tle.omegao,
            omgdot=self.omgdot,
            d2201=d2201,
            d2211=d2211,
            d3210=d3210,
            d3222=d3222,
            d4410=d4410,
            d4422=d4422,
            d5220=d5220,
            d5232=d5232,
            d5421=d5421,
            d5433=d5433,
        )

    def _propagate(self, tsince: float) -> Tuple[np.ndarray, np.ndarray, float]:
        tle = self._tle

        # Update for secular gravity and atmospheric drag
        xmdf = tle.xmo + self.xmdot * tsince
        omgadf = tle.omegao + self.omgdot * tsince
        xnoddf = tle.xnodeo + self.xnodot * tsince
        tsq = tsince * tsince
        xnode = xnoddf + self.xnodcf * tsq
        tempa = 1.0 - self.c1 * tsince
        tempe = tle.bstar * self.c4 * tsince
        templ = self.t2cof * tsq

        # Deep-space secular effects
        xll = xmdf + self.ssl * tsince
        omgadf += self.ssg * tsince
        xnode += self.ssh * tsince
        em = tle.eo + self.sse * tsince
        xinc = tle.xincl + self.ssi * tsince
        if xinc < 0.0:
            xinc = -xinc
            xnode += math.pi
            omgadf -= math.pi

        xn = self.xnodp
        if self.resonance is not None:
            xn, xl = self.resonance.integrate(tsince)
            temp = -xnode + self.thgr + tsince * THDT
            if self.resonance.synchronous:
                xll = xl - omgadf + temp
            else:
                xll = xl + temp + temp

        a = math.pow(XKE / max(xn, MIN_MEAN_MOTION), TWO_THIRDS) * tempa * tempa
        a = self._bounded_semi_major_axis(a, tsince)
        em -= tempe
        xmam = xll + self.xnodp * templ

        # Deep-space lunar-solar periodics
        solar = self.solar.periodics(tsince)
        lunar = self.lunar.periodics(tsince)
        pe = solar[0] + lunar[0]
        pinc = solar[1] + lunar[1]
        pl = solar[2] + lunar[2]
        pgh = solar[3] + lunar[3]
        ph = solar[4] + lunar[4]

        sinis = math.sin(xinc)
        cosis = math.cos(xinc)
        xinc += pinc
        em += pe

        if tle.xincl >= LYDDANE_INCLINATION:
            # Apply periodics directly
            ph = ph / safe_divisor(self.sinio)
            pgh = pgh - self.cosio * ph
            omgadf += pgh
            xnode += ph
            xmam += pl
        else:
            # Apply periodics with the Lyddane modification
            sinok = math.sin(xnode)
            cosok = math.cos(xnode)
            alfdp = sinis * sinok + ph * cosok + pinc * cosis * sinok
            betdp = sinis * cosok - ph * sinok + pinc * cosis * cosok
            xnode = mod2pi(xnode)
            xls = xmam + omgadf + cosis * xnode
            dls = pl + pgh - pinc * xnode * sinis
            xls += dls
            xnoh = xnode
            xnode = mod2pi(math.atan2(alfdp, betdp))

            # Rob Matson's correction for node wrap-around
            if abs(xnoh - xnode) > math.pi:
                if xnode < xnoh:
                    xnode += TWO_PI
                else:
                    xnode -= TWO_PI

            xmam += pl
            omgadf = xls - xmam - math.cos(xinc) * xnode

        e = self._bounded_eccentricity(em, tsince)
        xl = xmam + omgadf + xnode

        return self._finish(a, e, omgadf, xl, xnode, xinc, omgadf, tsince)
