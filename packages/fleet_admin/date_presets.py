"""Quick date-range presets offered by the fuel report.

The report opens in ``today`` mode. Switching modes replaces both bounds,
except ``custom`` which keeps whatever bounds the user last entered.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Literal, TypeAlias

from .config import get_timezone

FilterMode: TypeAlias = Literal["today", "week", "month", "custom"]
DayRange: TypeAlias = tuple[date | None, date | None]

FILTER_MODES: tuple[str, ...] = ("today", "week", "month", "custom")


def local_today() -> date:
    return datetime.now(get_timezone()).date()


def monday_of_week(today: date) -> date:
    """Monday of the ISO week containing ``today`` (Sunday belongs to the past week)."""

    return today - timedelta(days=today.weekday())


def first_of_month(today: date) -> date:
    return today.replace(day=1)


def range_for_mode(mode: FilterMode, today: date, current: DayRange | None = None) -> DayRange:
    """Return ``(start, end)`` bounds for a preset ``mode``.

    ``today`` yields a lone start bound, which the report filter reads as a
    single day rather than an open-ended range.
    Any other ``mode`` raises ``ValueError``.
    """

    if mode == "today":
        return (today, None)
    if mode == "week":
        return (monday_of_week(today), today)
    if mode == "month":
        return (first_of_month(today), today)
    if mode == "custom":
        return current if current is not None else (None, None)
    raise ValueError(f"unknown filter mode: {mode!r} (expected one of {', '.join(FILTER_MODES)})")


__all__ = [
    "FILTER_MODES",
    "FilterMode",
    "first_of_month",
    "local_today",
    "monday_of_week",
    "range_for_mode",
]
