"""
Logging Configuration

Centralized logging configuration for the satpredict package.
Library modules only create loggers; applications decide where the output
goes by calling configure_logging once at start-up.

Usage:
    from satpredict.logging_config import get_logger, configure_logging

    configure_logging(logging.DEBUG)
    logger = get_logger(__name__)
    logger.info("Pass search started")
    logger.warning("Kepler solver did not converge")
"""

import logging
import sys
from typing import Optional

# Default logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "satpredict"


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Parameters
    ----------
    level : int
        Logging level (e.g., logging.DEBUG, logging.INFO)
    log_file : str, optional
        Path to log file. If None, logs only to console.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a package module.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    logging.Logger
        Logger instance
    """
    return logging.getLogger(name)


# Library default: stay silent unless the application configures logging
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
