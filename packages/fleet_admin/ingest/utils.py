"""Ingest utilities shared by CLI commands and tests.

Exposes :func:`load_snapshot`, which reads a JSON dump of the collections
the back-office screens subscribe to. Two shapes are accepted:

- a JSON array: treated as the ``fuelLogs`` collection alone;
- a JSON object with any of the keys ``fuelLogs``, ``fuelPrice``, ``users``
  and ``fares``, each holding an array of documents (objects).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

from ..logging_setup import get_logger

_logger = get_logger("fleet_admin.ingest")

COLLECTION_KEYS: dict[str, str] = {
    "fuelLogs": "fuel_logs",
    "fuelPrice": "fuel_prices",
    "users": "users",
    "fares": "fares",
}


class SnapshotError(ValueError):
    """Raised when a snapshot file is unreadable or has an unexpected shape."""


@dataclass(frozen=True, slots=True)
class Snapshot:
    fuel_logs: list[Mapping[str, Any]] = field(default_factory=list)
    fuel_prices: list[Mapping[str, Any]] = field(default_factory=list)
    users: list[Mapping[str, Any]] = field(default_factory=list)
    fares: list[Mapping[str, Any]] = field(default_factory=list)


def _documents(name: str, value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        raise SnapshotError(f"collection {name!r} must be a JSON array")
    for pos, doc in enumerate(value):
        if not isinstance(doc, Mapping):
            raise SnapshotError(f"collection {name!r} item {pos} is not a JSON object")
    return value


def parse_snapshot(payload: Any) -> Snapshot:
    """Build a :class:`Snapshot` from already-decoded JSON."""

    if isinstance(payload, list):
        return Snapshot(fuel_logs=_documents("fuelLogs", payload))
    if not isinstance(payload, Mapping):
        raise SnapshotError("snapshot must be a JSON array or object")
    unknown = sorted(k for k in payload if k not in COLLECTION_KEYS)
    if unknown:
        _logger.warning("ignoring unknown snapshot collections: %s", ", ".join(unknown))
    kwargs = {
        attr: _documents(key, payload[key])
        for key, attr in COLLECTION_KEYS.items()
        if key in payload
    }
    return Snapshot(**kwargs)


def load_snapshot(path: str | PathLike[str]) -> Snapshot:
    """Read and parse a UTF-8 JSON snapshot file.

    ``FileNotFoundError``/``PermissionError`` propagate unchanged so callers
    can report them precisely; malformed content raises :class:`SnapshotError`.
    """

    p = Path(path)
    with p.open(encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except UnicodeDecodeError as exc:
            raise SnapshotError(f"{p} is not valid UTF-8: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"invalid JSON in {p}: {exc}") from exc
    snapshot = parse_snapshot(payload)
    _logger.debug(
        "loaded snapshot %s: %d fuel logs, %d prices, %d users, %d fares",
        p,
        len(snapshot.fuel_logs),
        len(snapshot.fuel_prices),
        len(snapshot.users),
        len(snapshot.fares),
    )
    return snapshot


__all__ = ["COLLECTION_KEYS", "Snapshot", "SnapshotError", "load_snapshot", "parse_snapshot"]
