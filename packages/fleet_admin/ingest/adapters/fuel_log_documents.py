"""Adapter for mapping raw fuel-log documents to :class:`LogRecord`.

Document keys (as written by the fueling app; capitalization is significant):
``Driver, Officer, driverId, fuelAmount, Vehicle, timestamp, status``

The document identifier is read from ``id`` when the snapshot embeds it in
the document body, or passed separately alongside the data.

Mapping rules:
- ``id``: document id as string
- ``occurred_at``: ``timestamp`` via :func:`fleet_admin.parsing.to_datetime`;
  ``None`` when missing/unreadable
- ``subject_name``/``category_label``/``asset_label``/``subject_id``:
  ``Driver``/``Officer``/``Vehicle``/``driverId``, or ``"N/A"`` when empty
- ``quantity``: ``fuelAmount`` coerced with :func:`fleet_admin.parsing.to_amount`
- ``status``: ``status`` or ``"pending"`` when empty
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ...models import NOT_AVAILABLE, STATUS_PENDING, LogRecord
from ...parsing import to_amount, to_datetime


def _text(value: Any, default: str = NOT_AVAILABLE) -> str:
    if value is None:
        return default
    s = str(value)
    return s if s != "" else default


def to_log_record(data: Mapping[str, Any], doc_id: str | None = None) -> LogRecord:
    ident = doc_id if doc_id is not None else data.get("id")
    return LogRecord(
        id=_text(ident, default=""),
        occurred_at=to_datetime(data.get("timestamp")),
        subject_name=_text(data.get("Driver")),
        category_label=_text(data.get("Officer")),
        quantity=to_amount(data.get("fuelAmount")),
        asset_label=_text(data.get("Vehicle")),
        status=_text(data.get("status"), default=STATUS_PENDING),
        subject_id=_text(data.get("driverId")),
    )


def to_log_records(documents: Iterable[Mapping[str, Any]]) -> Iterator[LogRecord]:
    """Convert documents in snapshot order; never raises on bad field values."""

    for doc in documents:
        yield to_log_record(doc)


__all__ = ["to_log_record", "to_log_records"]
