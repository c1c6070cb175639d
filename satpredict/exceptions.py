"""
Exception hierarchy for satellite prediction.

Every error raised by the package derives from PredictionError so callers
can catch the whole family in one place. Numeric non-convergence inside the
propagators is never raised; it is recovered locally and logged.
"""

from typing import Any, Optional


class PredictionError(Exception):
    """Base class for all satpredict errors."""


class MalformedElementsError(PredictionError, ValueError):
    """
    An element set record could not be parsed.

    Attributes:
        field: Name of the offending field or line (e.g. "line1", "bstar")
        value: The raw text that failed to parse
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class ConfigurationError(PredictionError, ValueError):
    """
    Invalid input supplied when building a satellite, station or predictor.

    Attributes:
        field: Name of the offending argument
        value: The value that was rejected
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class PassNotFoundError(PredictionError):
    """
    No pass could be located for the satellite and ground station.

    Raised when the orbit can never rise above the station's horizon, never
    sets, or the search exhausts its iteration budget.

    Attributes:
        satellite_name: Name of the satellite being searched
        iterations: Number of propagation steps spent before giving up
    """

    def __init__(self, message: str, satellite_name: Optional[str] = None, iterations: int = 0):
        super().__init__(message)
        self.satellite_name = satellite_name
        self.iterations = iterations
