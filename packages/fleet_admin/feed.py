"""Snapshot-driven recomputation of the fuel report.

The document store pushes a full, ordered snapshot of fuel logs on every
change. The report is modeled as a pure reducer over those snapshots:
:func:`reduce_report` takes the previous :class:`ReportState` plus whichever
inputs changed and returns a fresh state with ``filtered`` and ``stats``
recomputed from scratch. There is no incremental update and no partially
updated state is ever observable.

The remaining helpers read the auxiliary collections the report needs (fuel
price history, user accounts) from their document snapshots.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .config import get_entity_roles
from .date_presets import range_for_mode
from .logging_setup import get_logger
from .models import FilterParams, LogRecord, ReportState
from .parsing import ZERO, to_amount, to_datetime
from .report import compute_stats, filter_records

_logger = get_logger("fleet_admin.feed")

_UNSET: Any = object()


def initial_state(today: date) -> ReportState:
    """Empty report in the default ``today`` mode."""

    start, end = range_for_mode("today", today)
    return ReportState(params=FilterParams(start_date=start, end_date=end))


def reduce_report(
    state: ReportState,
    *,
    records: Iterable[LogRecord] | None = None,
    params: FilterParams | None = None,
    unit_price: Any = _UNSET,
    entity_count: int | None = None,
) -> ReportState:
    """Return a new state with the given inputs replaced and outputs recomputed.

    Arguments left at their defaults keep the value from ``state``.
    """

    next_records = tuple(records) if records is not None else state.records
    next_params = params if params is not None else state.params
    next_price = to_amount(unit_price) if unit_price is not _UNSET else state.unit_price
    next_count = entity_count if entity_count is not None else state.entity_count

    filtered = tuple(filter_records(next_records, next_params))
    stats = compute_stats(filtered, next_price, next_count)
    _logger.debug(
        "report recomputed: %d records, %d after filter, total=%s",
        len(next_records),
        len(filtered),
        stats.total_expense,
    )
    return replace(
        state,
        records=next_records,
        params=next_params,
        unit_price=next_price,
        entity_count=next_count,
        filtered=filtered,
        stats=stats,
    )


def _doc_time(doc: Mapping[str, Any]) -> datetime | None:
    return to_datetime(doc.get("timestamp"))


def latest_unit_price(price_documents: Iterable[Mapping[str, Any]]) -> Decimal:
    """Return ``Price`` of the newest fuel-price document, or 0 when there is none.

    Documents without a readable timestamp are only considered when no
    timestamped document exists; among those the first one wins.
    """

    docs = list(price_documents)
    if not docs:
        return ZERO
    dated = [(d, _doc_time(d)) for d in docs]
    with_time = [(d, t) for d, t in dated if t is not None]
    if with_time:
        latest = max(with_time, key=lambda pair: pair[1].timestamp())[0]
    else:
        latest = docs[0]
    return to_amount(latest.get("Price"))


def count_entities(
    user_documents: Iterable[Mapping[str, Any]], roles: Iterable[str] | None = None
) -> int:
    """Count user documents whose ``role`` is one of ``roles``.

    ``roles`` defaults to ``FLEET_ADMIN_ENTITY_ROLES`` (drivers and relievers).
    """

    wanted = set(roles) if roles is not None else set(get_entity_roles())
    return sum(1 for u in user_documents if u.get("role") in wanted)


__all__ = ["count_entities", "initial_state", "latest_unit_price", "reduce_report"]
