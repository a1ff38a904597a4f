"""Public interface for the ``fleet_admin`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .export import EXPORT_HEADERS, build_export_rows, exported_by_name
from .fares import (
    FareValidationError,
    derive_discounted_rates,
    latest_fare,
    validate_fare_change,
)
from .feed import count_entities, initial_state, latest_unit_price, reduce_report
from .models import (
    ALL_CATEGORIES,
    ActivityEntry,
    FareChange,
    FareSettings,
    FilterParams,
    LogRecord,
    ReportState,
    Stats,
)
from .report import compute_stats, filter_records, sort_newest_first, unique_categories

__all__ = [
    # Report
    "filter_records",
    "compute_stats",
    "unique_categories",
    "sort_newest_first",
    "reduce_report",
    "initial_state",
    "latest_unit_price",
    "count_entities",
    "EXPORT_HEADERS",
    "build_export_rows",
    "exported_by_name",
    # Fares
    "derive_discounted_rates",
    "validate_fare_change",
    "latest_fare",
    "FareValidationError",
    # Models / types
    "ALL_CATEGORIES",
    "LogRecord",
    "FilterParams",
    "Stats",
    "ReportState",
    "FareSettings",
    "FareChange",
    "ActivityEntry",
]
