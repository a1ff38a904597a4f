"""Filtering and summary statistics for the fuel report.

Both entry points are pure functions over already-materialized records:

- :func:`filter_records` keeps records matching the category, search and
  calendar-day predicates, preserving input order;
- :func:`compute_stats` aggregates the filtered subset into :class:`Stats`.

Callers re-run both on every new snapshot of records or change of filter
parameters; nothing here keeps state between calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .config import get_timezone
from .models import ALL_CATEGORIES, STATUS_DONE, FilterParams, LogRecord, LogRecords, Stats
from .parsing import ZERO, local_day, to_amount

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _matches_category(record: LogRecord, category_filter: str) -> bool:
    return category_filter == ALL_CATEGORIES or record.category_label == category_filter


def _matches_search(record: LogRecord, search_text: str) -> bool:
    if not search_text:
        return True
    needle = search_text.lower()
    return any(
        needle in (value or "").lower()
        for value in (record.subject_name, record.category_label, record.asset_label)
    )


def _matches_day(day: date | None, start: date | None, end: date | None) -> bool:
    if day is None:
        # Unknown day: included regardless of bounds.
        return True
    if start is not None and end is not None:
        return start <= day <= end
    if start is not None:
        # A lone start bound selects that single day.
        return day == start
    if end is not None:
        return day <= end
    return True


def matches(record: LogRecord, params: FilterParams) -> bool:
    """Return ``True`` when ``record`` passes every predicate of ``params``."""

    return (
        _matches_category(record, params.category_filter)
        and _matches_search(record, params.search_text)
        and _matches_day(local_day(record.occurred_at), params.start_date, params.end_date)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def filter_records(records: Iterable[LogRecord], params: FilterParams) -> list[LogRecord]:
    """Return the records matching ``params`` in their original order."""

    return [r for r in records if matches(r, params)]


def compute_stats(
    filtered: LogRecords, unit_price: Any, external_entity_count: int
) -> Stats:
    """Aggregate a filtered record list.

    Parameters
    ----------
    filtered:
        Output of :func:`filter_records`.
    unit_price:
        Price per unit of quantity (fuel price). Coerced like quantities, so
        an unreadable price counts as 0.
    external_entity_count:
        Count of drivers/relievers from a separate, unfiltered source. It is
        reported as-is, including when ``filtered`` is empty.
    """

    if not filtered:
        return Stats(entity_count=external_entity_count, fulfilled_count=0, total_expense=ZERO)

    price = to_amount(unit_price)
    total: Decimal = sum((to_amount(r.quantity) * price for r in filtered), ZERO)
    fulfilled = {r.subject_name for r in filtered if r.status == STATUS_DONE and r.subject_name}
    return Stats(
        entity_count=external_entity_count,
        fulfilled_count=len(fulfilled),
        total_expense=total,
    )


def unique_categories(records: Iterable[LogRecord]) -> list[str]:
    """Sorted distinct category labels, for populating the category filter."""

    return sorted({r.category_label for r in records})


def sort_newest_first(records: Iterable[LogRecord]) -> list[LogRecord]:
    """Order records by timestamp descending; records without one go last.

    The sort is stable, so records sharing a timestamp keep their input order.
    """

    def _key(r: LogRecord) -> tuple[bool, float]:
        if r.occurred_at is None:
            return (True, 0.0)
        return (False, -_epoch(r.occurred_at))

    return sorted(records, key=_key)


def _epoch(dt: datetime) -> float:
    # Naive values are wall-clock time in the configured zone, as in local_day().
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=get_timezone())
    return dt.timestamp()


__all__ = [
    "compute_stats",
    "filter_records",
    "matches",
    "sort_newest_first",
    "unique_categories",
]
