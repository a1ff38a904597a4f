"""Tabular export shape for the fuel report.

Produces ``(headers, rows)`` for an external CSV/PDF writer. Rows follow the
filtered order with 1-based sequence numbers:

``[sequence, timestamp, driver, officer, amount, vehicle]``
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeAlias

from .models import NOT_AVAILABLE, LogRecord
from .parsing import fmt_amount, to_amount, to_local

EXPORT_HEADERS: tuple[str, ...] = (
    "ID",
    "Timestamp",
    "Driver Name",
    "Officer",
    "Amount Spent",
    "Unit",
)

ExportRow: TypeAlias = list[int | str]


def format_date(dt: datetime) -> str:
    """``September 17, 2025`` in local time."""

    local = to_local(dt)
    return f"{local:%B} {local.day}, {local.year}"


def format_time(dt: datetime) -> str:
    """``10:28 AM`` in local time."""

    return f"{to_local(dt):%I:%M %p}"


def format_timestamp(dt: datetime | None) -> str:
    if dt is None:
        return NOT_AVAILABLE
    return f"{format_date(dt)}, {format_time(dt)}"


def build_export_rows(filtered: Iterable[LogRecord]) -> list[ExportRow]:
    rows: list[ExportRow] = []
    for seq, record in enumerate(filtered, start=1):
        rows.append(
            [
                seq,
                format_timestamp(record.occurred_at),
                record.subject_name,
                record.category_label,
                fmt_amount(to_amount(record.quantity)),
                record.asset_label,
            ]
        )
    return rows


def exported_by_name(first: str | None, middle: str | None, last: str | None) -> str:
    """Full name printed in the export footer; the middle name is optional."""

    parts = [first or "", middle or "", last or ""]
    if not parts[1]:
        del parts[1]
    return " ".join(parts)


__all__ = [
    "EXPORT_HEADERS",
    "ExportRow",
    "build_export_rows",
    "exported_by_name",
    "format_date",
    "format_time",
    "format_timestamp",
]
