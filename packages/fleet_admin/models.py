"""Data models and type aliases for ``fleet_admin``.

Records arrive from the document store as loosely typed mappings; they are
coerced once, at the ingest boundary, into the frozen types below so the
aggregation code never has to re-check field shapes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .parsing import ZERO, fmt_plain, parse_day

# Sentinel accepted by ``FilterParams.category_filter`` meaning "no category filter".
ALL_CATEGORIES = "all"

STATUS_PENDING = "pending"
STATUS_DONE = "done"

# Placeholder the report screens show for absent text fields.
NOT_AVAILABLE = "N/A"


# ---------------------------------------------------------------------------
# Fuel logs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LogRecord:
    """A single fuel-log entry.

    Attributes
    ----------
    id:
        Opaque document identifier assigned by the store.
    occurred_at:
        When the fueling happened, or ``None`` when the stored timestamp was
        missing or unreadable. Records without a timestamp always pass the
        date filter.
    subject_name:
        The driver the log belongs to.
    category_label:
        Grouping tag shown in the category filter (the officer who logged it).
    quantity:
        Non-negative fuel amount. Never ``None``; unreadable input is 0.
    asset_label:
        Vehicle identifier.
    status:
        Lifecycle tag, ``"pending"`` or ``"done"``.
    subject_id:
        Identifier of the driver account, when known.
    """

    id: str
    occurred_at: datetime | None
    subject_name: str = NOT_AVAILABLE
    category_label: str = NOT_AVAILABLE
    quantity: Decimal = ZERO
    asset_label: str = NOT_AVAILABLE
    status: str = STATUS_PENDING
    subject_id: str = NOT_AVAILABLE


LogRecords: TypeAlias = Sequence[LogRecord]


class FilterParams(BaseModel):
    """Transient filter state of the fuel report.

    ``start_date``/``end_date`` are inclusive local calendar days. A lone
    ``start_date`` selects exactly that day; a lone ``end_date`` selects
    everything up to and including it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_text: str = ""
    category_filter: str = ALL_CATEGORIES
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("search_text", mode="before")
    @classmethod
    def _search_text_str(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("category_filter", mode="before")
    @classmethod
    def _normalize_category(cls, v: Any) -> str:
        if v is None:
            return ALL_CATEGORIES
        s = str(v)
        if s.strip().lower() in ("", ALL_CATEGORIES):
            return ALL_CATEGORIES
        return s

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _day_bound(cls, v: Any) -> date | None:
        return parse_day(v)


@dataclass(frozen=True, slots=True)
class Stats:
    """Summary numbers shown above the fuel report table."""

    entity_count: int = 0
    fulfilled_count: int = 0
    total_expense: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class ReportState:
    """Latest inputs of the fuel report together with their derived outputs.

    Instances are produced by :func:`fleet_admin.feed.reduce_report`; the
    ``filtered`` and ``stats`` fields are always consistent with the inputs.
    """

    records: tuple[LogRecord, ...] = ()
    params: FilterParams = field(default_factory=FilterParams)
    unit_price: Decimal = ZERO
    entity_count: int = 0
    filtered: tuple[LogRecord, ...] = ()
    stats: Stats = field(default_factory=Stats)


# ---------------------------------------------------------------------------
# Fares
# ---------------------------------------------------------------------------


class FareSettings(BaseModel):
    """The fare currently in effect, as read from the latest fare document."""

    model_config = ConfigDict(frozen=True)

    base_fare: Decimal = ZERO
    discount_percent: Decimal = ZERO
    rate_per_km: Decimal = ZERO
    updated_at: datetime | None = None


class FareChange(BaseModel):
    """A validated request to replace the fare in effect."""

    model_config = ConfigDict(frozen=True)

    base_fare: Decimal = Field(gt=0)
    discount_percent: Decimal = Field(ge=0, le=100)
    rate_per_km: Decimal | None = Field(default=None, gt=0)

    def to_document(self) -> dict[str, str]:
        """Return the fare document payload; numbers are stored as text."""

        doc = {
            "basePrice": fmt_plain(self.base_fare),
            "discount": fmt_plain(self.discount_percent),
        }
        if self.rate_per_km is not None:
            doc["perKmRate"] = fmt_plain(self.rate_per_km)
        return doc


@dataclass(frozen=True, slots=True)
class ActivityEntry:
    """One line of the system activity log."""

    activity: str
    performed_by: str
    role: str | None
    timestamp: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "activity": self.activity,
            "performedBy": self.performed_by,
            "role": self.role,
            "timestamp": self.timestamp.isoformat(),
        }


__all__ = [
    "ALL_CATEGORIES",
    "NOT_AVAILABLE",
    "STATUS_DONE",
    "STATUS_PENDING",
    "ActivityEntry",
    "FareChange",
    "FareSettings",
    "FilterParams",
    "LogRecord",
    "LogRecords",
    "ReportState",
    "Stats",
]
