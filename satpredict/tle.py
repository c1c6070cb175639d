"""
Two-Line Element Model

Parses fixed-format two-line (or three-line, with a leading name) element
sets into the raw record fields plus the derived quantities the SGP4/SDP4
propagators consume, and classifies the object as near-Earth or deep-space.

Parsing is strict about structure (line count, line prefixes, numeric
fields) and lenient about checksums: a checksum mismatch is logged and the
record is accepted.
"""

import copy
import logging
import math
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sgp4.io import compute_checksum

from satpredict.config import (
    CK2,
    DEEP_SPACE_PERIOD_MINUTES,
    DEG2RAD,
    EARTH_RADIUS_KM,
    MIN_DENOMINATOR,
    MIN_MEAN_MOTION,
    MINS_PER_DAY,
    TWO_PI,
    TWO_THIRDS,
    XKE,
)
from satpredict.exceptions import MalformedElementsError
from satpredict.julian import epoch_to_datetime, julian_date_of_epoch

logger = logging.getLogger(__name__)

LINE1_MIN_LENGTH = 68
LINE2_MIN_LENGTH = 63


def _field(line: str, start: int, end: int, field: str) -> str:
    text = line[start:end].strip()
    if not text:
        raise MalformedElementsError(f"Missing {field}", field=field, value=line[start:end])
    return text


def _parse_int(line: str, start: int, end: int, field: str, default: Optional[int] = None) -> int:
    text = line[start:end].strip()
    if not text and default is not None:
        return default
    text = _field(line, start, end, field)
    try:
        return int(text)
    except ValueError:
        raise MalformedElementsError(f"Non-numeric {field}: {text!r}", field=field, value=text)


def _parse_float(line: str, start: int, end: int, field: str) -> float:
    text = _field(line, start, end, field)
    try:
        return float(text)
    except ValueError:
        raise MalformedElementsError(f"Non-numeric {field}: {text!r}", field=field, value=text)


def _parse_exponential(line: str, start: int, field: str) -> float:
    """Decode the assumed-decimal ``±NNNNN±N`` notation used for nddot and B*."""
    mantissa = _parse_float(line, start, start + 6, field)
    exponent = _parse_float(line, start + 6, start + 8, field)
    return 1.0e-5 * mantissa * math.pow(10.0, exponent)


def _format_exponential(value: float) -> str:
    """Format a number in TLE assumed-decimal exponential notation."""
    if value == 0.0:
        return " 00000-0"

    sign = "-" if value < 0 else " "
    abs_val = abs(value)

    # value = 0.NNNNN * 10^exp
    exp = int(math.floor(math.log10(abs_val))) + 1
    digits = int(round(abs_val / (10.0 ** exp) * 100000))
    if digits >= 100000:
        digits //= 10
        exp += 1

    exp_sign = "-" if exp < 0 else "+"
    return f"{sign}{digits:05d}{exp_sign}{abs(exp):d}"


def _format_first_derivative(value: float) -> str:
    text = f"{abs(value):.8f}"[1:]
    return ("-" if value < 0 else " ") + text


def _check_checksum(line: str, name: str) -> None:
    if len(line) < 69 or not line[68].isdigit():
        return
    expected = compute_checksum(line)
    if int(line[68]) != expected:
        logger.warning(
            f"Checksum mismatch for {name}: line {line[0]} has {line[68]}, expected {expected}"
        )


class TLE:
    """
    Parsed orbital element set.

    Raw record fields keep the units of the text record (degrees,
    revolutions per day). Derived fields are the radian and
    radian-per-minute values the propagators use.

    Attributes:
        name: Object name (catalog number when the record has no name line)
        catnum: Catalog number
        setnum: Element set number
        year: Two-digit epoch year
        refepoch: Epoch day of year with fraction
        epoch: Combined epoch YYDDD.DDDDDDDD
        incl, raan, argper, meanan: Angles in degrees
        eccn: Eccentricity
        meanmo: Mean motion (rev/day)
        drag: First time derivative of mean motion / 2 (rev/day^2)
        nddot6: Second time derivative of mean motion / 6 (rev/day^3)
        bstar: B* drag term (1/Earth radii)
        orbitnum: Revolution number at epoch
    """

    def __init__(self, lines: Sequence[str]):
        """
        Parse an element set.

        Args:
            lines: Two lines (line 1, line 2) or three lines (name, line 1, line 2)

        Raises:
            MalformedElementsError: If the record is structurally invalid or a
                required field is missing or non-numeric
        """
        if lines is None:
            raise MalformedElementsError("Element set is None", field="lines")

        lines = [line.rstrip("\r\n") for line in lines]
        if len(lines) == 3:
            name_line, line1, line2 = lines
        elif len(lines) == 2:
            name_line = None
            line1, line2 = lines
        else:
            raise MalformedElementsError(
                f"Expected 2 or 3 lines, got: {len(lines)}", field="lines", value=len(lines)
            )

        if not line1.startswith("1 "):
            raise MalformedElementsError("Line 1 must start with '1 '", field="line1", value=line1)
        if not line2.startswith("2 "):
            raise MalformedElementsError("Line 2 must start with '2 '", field="line2", value=line2)
        if len(line1) < LINE1_MIN_LENGTH:
            raise MalformedElementsError(
                f"Line 1 too short: {len(line1)} characters", field="line1", value=line1
            )
        if len(line2) < LINE2_MIN_LENGTH:
            raise MalformedElementsError(
                f"Line 2 too short: {len(line2)} characters", field="line2", value=line2
            )

        self.line1 = line1
        self.line2 = line2

        # Line 1
        self.catnum = _parse_int(line1, 2, 7, "catalog_number")
        self.classification = line1[7] if line1[7].strip() else "U"
        self.designator = line1[9:17].strip()
        self.year = _parse_int(line1, 18, 20, "epoch_year")
        self.refepoch = _parse_float(line1, 20, 32, "epoch_day")
        self.drag = _parse_float(line1, 33, 43, "first_derivative")
        self.nddot6 = _parse_exponential(line1, 44, "second_derivative")
        self.bstar = _parse_exponential(line1, 53, "bstar")
        self.setnum = _parse_int(line1, 64, 68, "set_number", default=0)

        # Line 2
        catnum2 = _parse_int(line2, 2, 7, "catalog_number")
        if catnum2 != self.catnum:
            raise MalformedElementsError(
                f"Catalog number mismatch: line 1 has {self.catnum}, line 2 has {catnum2}",
                field="catalog_number",
                value=catnum2,
            )
        self.incl = _parse_float(line2, 8, 16, "inclination")
        self.raan = _parse_float(line2, 17, 25, "raan")
        self.eccn = 1.0e-7 * _parse_int(line2, 26, 33, "eccentricity")
        self.argper = _parse_float(line2, 34, 42, "argument_of_perigee")
        self.meanan = _parse_float(line2, 43, 51, "mean_anomaly")
        self.meanmo = _parse_float(line2, 52, 63, "mean_motion")
        self.orbitnum = _parse_int(line2, 63, 68, "orbit_number", default=0)

        if self.meanmo <= 0.0:
            raise MalformedElementsError(
                f"Mean motion must be positive, got: {self.meanmo}",
                field="mean_motion",
                value=self.meanmo,
            )

        if name_line is not None and name_line.strip():
            name = name_line.strip()
            if name.startswith("0 "):
                name = name[2:].strip()
            self.name = name
        else:
            self.name = str(self.catnum)

        _check_checksum(line1, self.name)
        _check_checksum(line2, self.name)

        self.epoch = self.year * 1000.0 + self.refepoch
        self._derive()

        logger.debug(
            f"Parsed {self.name} ({self.catnum}): epoch {self.epoch:.8f}, "
            f"period {self.period_minutes:.2f} min, deep space {self.is_deep_space}"
        )

    def _derive(self) -> None:
        """SGP4 input units and the near-Earth/deep-space classification."""
        self.xincl = self.incl * DEG2RAD
        self.xnodeo = self.raan * DEG2RAD
        self.omegao = self.argper * DEG2RAD
        self.xmo = self.meanan * DEG2RAD
        self.eo = self.eccn
        self.xno = self.meanmo * TWO_PI / MINS_PER_DAY
        # Mean motion derivatives in rad/min^2 and rad/min^3; SGP4 drag uses bstar
        # only, these are exposed for callers working with the raw record
        self.xndt2o = self.drag * TWO_PI / (MINS_PER_DAY * MINS_PER_DAY)
        self.xndd6o = self.nddot6 * TWO_PI / (MINS_PER_DAY * MINS_PER_DAY * MINS_PER_DAY)

        # Recover the original (un-Kozai) mean motion and semi-major axis
        a1 = math.pow(XKE / max(self.xno, MIN_MEAN_MOTION), TWO_THIRDS)
        cosio = math.cos(self.xincl)
        x3thm1 = 3.0 * cosio * cosio - 1.0
        betao2 = max(1.0 - self.eo * self.eo, MIN_DENOMINATOR)
        betao = math.sqrt(betao2)
        del1 = 1.5 * CK2 * x3thm1 / (a1 * a1 * betao * betao2)
        ao = a1 * (1.0 - del1 * (0.5 * TWO_THIRDS + del1 * (1.0 + 134.0 / 81.0 * del1)))
        delo = 1.5 * CK2 * x3thm1 / (ao * ao * betao * betao2)

        self.xnodp = self.xno / (1.0 + delo)
        self.aodp = ao / (1.0 - delo)
        self.period_minutes = TWO_PI / self.xnodp
        self.semi_major_axis_km = self.aodp * EARTH_RADIUS_KM
        self.is_deep_space = self.period_minutes >= DEEP_SPACE_PERIOD_MINUTES
        self.epoch_jd = julian_date_of_epoch(self.epoch)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: Optional[str] = None) -> "TLE":
        """Build from separate lines with an optional name."""
        if name is None:
            return cls([line1, line2])
        return cls([name, line1, line2])

    @classmethod
    def parse_batch(cls, text: str) -> List["TLE"]:
        """
        Parse a block of concatenated two- or three-line records.

        Args:
            text: Element sets separated by newlines; blank lines are ignored

        Returns:
            List of parsed element sets in input order
        """
        lines = [line.rstrip() for line in text.splitlines() if line.strip()]
        tles = []
        i = 0
        while i < len(lines):
            if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
                tles.append(cls(lines[i:i + 2]))
                i += 2
            elif i + 2 < len(lines):
                tles.append(cls(lines[i:i + 3]))
                i += 3
            else:
                raise MalformedElementsError(
                    f"Incomplete element set at line {i + 1}", field="lines", value=lines[i]
                )
        logger.debug(f"Parsed {len(tles)} element sets")
        return tles

    def copy(self) -> "TLE":
        """Independent copy of this element set."""
        return copy.copy(self)

    @property
    def epoch_datetime(self) -> datetime:
        return epoch_to_datetime(self.year, self.refepoch)

    def to_lines(self) -> Tuple[str, str]:
        """
        Reconstruct line 1 and line 2 from the parsed fields.

        Returns:
            Tuple of (line1, line2) with freshly computed checksums
        """
        line1 = f"1 {self.catnum:05d}{self.classification} {self.designator:<8} "
        line1 += f"{self.year:02d}{self.refepoch:012.8f} "
        line1 += _format_first_derivative(self.drag) + " "
        line1 += _format_exponential(self.nddot6) + " "
        line1 += _format_exponential(self.bstar)
        line1 += f" 0 {self.setnum % 10000:4d}"
        line1 = line1[:68] + str(compute_checksum(line1))

        line2 = f"2 {self.catnum:05d} "
        line2 += f"{self.incl:8.4f} "
        line2 += f"{self.raan:8.4f} "
        line2 += f"{int(round(self.eccn * 1.0e7)):07d} "
        line2 += f"{self.argper:8.4f} "
        line2 += f"{self.meanan:8.4f} "
        line2 += f"{self.meanmo:11.8f}"
        line2 += f"{self.orbitnum % 100000:5d}"
        line2 = line2[:68] + str(compute_checksum(line2))

        return line1, line2

    def __repr__(self) -> str:
        return f"TLE(name={self.name!r}, catnum={self.catnum}, epoch={self.epoch:.8f})"
