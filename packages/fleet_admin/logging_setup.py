"""Logging for ``fleet_admin``.

Library modules only ever call ``get_logger("fleet_admin.<module>")``; they
never attach handlers. The CLI (or a host application) calls
:func:`configure_logging` once at startup, which installs one stream handler
on the ``"fleet_admin"`` logger and stops propagation to the root logger.

Until then the package logger carries a ``NullHandler`` so library use stays
silent.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from .config import get_log_level

_PKG_LOGGER_NAME = "fleet_admin"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` into a numeric logging level.

    ``None`` falls back to ``FLEET_ADMIN_LOG_LEVEL`` and then ``INFO``. Names
    are case-insensitive; numeric strings are accepted. Unknown names resolve
    to ``INFO``.
    """

    if level is None:
        level = get_log_level()
        if level is None:
            return logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(
    level: int | str | None = None,
    *,
    verbose: bool = False,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> logging.Logger:
    """Install the package handler, or adjust its level when already installed.

    ``verbose`` forces ``DEBUG`` regardless of ``level``. ``stream`` defaults to
    the process stderr at import time so that redirected ``sys.stdout`` (e.g.
    under a test runner) only ever receives command output.
    """

    global _handler
    resolved = logging.DEBUG if verbose else resolve_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    logger.setLevel(resolved)

    if _handler is not None:
        _handler.setLevel(resolved)
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    _handler = logging.StreamHandler(stream)
    _handler.setLevel(resolved)
    _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
