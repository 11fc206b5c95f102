"""Logging for the ``billrings`` package.

Library modules only call :func:`get_logger`. The scripts and the Streamlit
shell call :func:`configure_logging` once to send records to stderr.
"""

from __future__ import annotations

import logging
import os

PACKAGE_LOGGER = "billrings"
LOG_LEVEL_ENV = "BILLRINGS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_package_logger = logging.getLogger(PACKAGE_LOGGER)
_package_logger.addHandler(logging.NullHandler())


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Attach a stderr handler to the package logger unless one is present.

    ``level`` is a number or a level name; ``None`` reads ``BILLRINGS_LOG_LEVEL``.
    Unknown names fall back to ``INFO``.
    """

    if not any(isinstance(h, logging.StreamHandler) for h in _package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _package_logger.addHandler(handler)
        _package_logger.propagate = False
    _package_logger.setLevel(_parse_level(level))
    return _package_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
