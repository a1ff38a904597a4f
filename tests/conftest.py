"""Pytest configuration for test isolation.

Calendar-day derivation depends on the "local" time zone, which the package
reads from ``FLEET_ADMIN_TZ`` (falling back to the host zone). To keep tests
deterministic regardless of where they run, pin the zone to UTC for every
test and clear the other ``FLEET_ADMIN_*`` settings so a developer's ``.env``
or shell cannot leak into assertions.

CLI tests run the root callback, which installs the package log handler and
turns off propagation. The package logger is put back to its library defaults
around every test so later tests see the same logging state in any order.
"""

from __future__ import annotations

import logging

import pytest

from fleet_admin import logging_setup

_SETTINGS = (
    "FLEET_ADMIN_CURRENCY",
    "FLEET_ADMIN_ENTITY_ROLES",
    "FLEET_ADMIN_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _pin_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLEET_ADMIN_TZ", "UTC")
    for name in _SETTINGS:
        monkeypatch.delenv(name, raising=False)


def _reset_package_logger() -> None:
    logger = logging.getLogger("fleet_admin")
    if logging_setup._handler is not None:
        logger.removeHandler(logging_setup._handler)
        logging_setup._handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _package_logging():
    _reset_package_logger()
    yield
    _reset_package_logger()
