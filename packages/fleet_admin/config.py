"""Environment-driven settings for ``fleet_admin``.

All settings are read lazily from the process environment on each call so
that a ``.env`` loaded by the CLI (``python-dotenv``) or a test's
``monkeypatch.setenv`` takes effect without re-importing modules.

Variables
---------
``FLEET_ADMIN_TZ``
    IANA zone name used as "local time" when deriving calendar days. When
    unset, the host's local zone is used.
``FLEET_ADMIN_CURRENCY``
    Currency symbol used in activity messages (default ``₱``).
``FLEET_ADMIN_ENTITY_ROLES``
    Comma-separated user roles counted as report entities (default
    ``Driver,Reliever``).
``FLEET_ADMIN_LOG_LEVEL``
    Log level name or number (default ``INFO``).
"""

from __future__ import annotations

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_CURRENCY = "₱"
DEFAULT_ENTITY_ROLES: tuple[str, ...] = ("Driver", "Reliever")


def _env(name: str) -> str | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return val.strip()


def get_timezone() -> ZoneInfo | None:
    """Return the configured zone, or ``None`` for the host's local zone."""

    name = _env("FLEET_ADMIN_TZ")
    if name is None:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"FLEET_ADMIN_TZ is not a known time zone: {name!r}") from exc


def get_currency_symbol() -> str:
    return _env("FLEET_ADMIN_CURRENCY") or DEFAULT_CURRENCY


def get_entity_roles() -> tuple[str, ...]:
    raw = _env("FLEET_ADMIN_ENTITY_ROLES")
    if raw is None:
        return DEFAULT_ENTITY_ROLES
    roles = tuple(r.strip() for r in raw.split(",") if r.strip())
    return roles or DEFAULT_ENTITY_ROLES


def get_log_level() -> str | None:
    return _env("FLEET_ADMIN_LOG_LEVEL")


__all__ = [
    "DEFAULT_CURRENCY",
    "DEFAULT_ENTITY_ROLES",
    "get_currency_symbol",
    "get_entity_roles",
    "get_log_level",
    "get_timezone",
]
