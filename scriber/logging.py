"""Logging helpers for the scriber project."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER_CONFIGURED = False

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map the number of ``-v`` flags given on the command line to a log level."""

    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(level: int = logging.INFO, *, force: bool = False) -> None:
    """Configure basic logging once for the application.

    ``force`` replaces an earlier configuration, which the CLI uses once it knows
    the requested verbosity.
    """

    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and not force:
        return

    logging.basicConfig(level=level, format=_LOG_FORMAT, force=force)
    _LOGGER_CONFIGURED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Convenience helper that ensures logging is configured."""

    configure_logging()
    return logging.getLogger(name or "scriber")


__all__ = ["configure_logging", "get_logger", "level_for_verbosity"]
