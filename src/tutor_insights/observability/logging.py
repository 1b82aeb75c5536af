"""Shared logging utilities for tutor-insights services.

Usage example:
    from tutor_insights.observability.logging import get_logger

    logger = get_logger("tutor_insights.tutor_search")
    logger.info("Ranked %s tutors", candidate_count)
"""

from __future__ import annotations

import logging
import time

_ROOT_LOGGER_NAME = "tutor_insights"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class UnknownLogLevelError(ValueError):
    """Raised when a log level name is not recognised."""

    def __init__(self, level: str) -> None:
        super().__init__(f"Unknown log level {level!r}. Use one of: {', '.join(_LEVELS)}.")


def parse_log_level(level: str) -> int:
    """Map a level name (case-insensitive) to a logging constant."""
    key = level.strip().upper()
    if key not in _LEVELS:
        raise UnknownLogLevelError(level)
    return _LEVELS[key]


def get_logger(name: str) -> logging.Logger:
    """Return a logger with a single UTC-formatted stream handler.

    Loggers under the ``tutor_insights`` namespace share one level, so
    ``set_log_level`` adjusts every service logger at once.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.getLogger(_ROOT_LOGGER_NAME).level or logging.INFO)
        logger.propagate = False
    return logger


def set_log_level(level: str) -> None:
    """Apply ``level`` to the package root and every logger already created under it."""
    value = parse_log_level(level)
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(value)
    prefix = f"{_ROOT_LOGGER_NAME}."
    for name, existing in logging.root.manager.loggerDict.items():
        if name.startswith(prefix) and isinstance(existing, logging.Logger):
            existing.setLevel(value)
