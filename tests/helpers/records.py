"""Builders for fuel-log records and raw documents used across tests."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from itertools import count
from typing import Any

from fleet_admin.models import LogRecord

_ids = count(1)


def at(day: str, hh: int = 10, mm: int = 0) -> datetime:
    """UTC datetime on ``day`` (``YYYY-MM-DD``) at ``hh:mm``."""

    y, m, d = (int(p) for p in day.split("-"))
    return datetime(y, m, d, hh, mm, tzinfo=UTC)


def make_record(
    day: str | None = "2025-09-17",
    *,
    driver: str = "Juan Dela Cruz",
    officer: str = "Officer Reyes",
    quantity: str | int = "10",
    vehicle: str = "UNIT-01",
    status: str = "pending",
    hh: int = 10,
) -> LogRecord:
    return LogRecord(
        id=f"log-{next(_ids)}",
        occurred_at=at(day, hh) if day else None,
        subject_name=driver,
        category_label=officer,
        quantity=Decimal(str(quantity)),
        asset_label=vehicle,
        status=status,
    )


def make_document(
    day: str | None = "2025-09-17",
    *,
    doc_id: str | None = None,
    hh: int = 10,
    **fields: Any,
) -> dict[str, Any]:
    """A raw ``fuelLogs`` document with an exported ``{"seconds": n}`` timestamp."""

    doc: dict[str, Any] = {
        "id": doc_id or f"doc-{next(_ids)}",
        "Driver": "Juan Dela Cruz",
        "Officer": "Officer Reyes",
        "driverId": "drv-1",
        "fuelAmount": "10",
        "Vehicle": "UNIT-01",
        "status": "pending",
    }
    if day:
        doc["timestamp"] = {"seconds": int(at(day, hh).timestamp()), "nanoseconds": 0}
    doc.update(fields)
    return doc
