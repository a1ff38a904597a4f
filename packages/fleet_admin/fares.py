"""Fare-rate configuration: discount derivation and fare-change validation.

The super-admin fare screen lets an operator replace the base fare, the
discount percentage and the regular per-km rate. Each new value is typed
twice (new + confirm). This module holds the logic behind that screen:

- :func:`derive_discounted_rates` computes the discounted price and per-km
  rate shown next to the form;
- :func:`validate_fare_change` turns the raw form strings into a
  :class:`FareChange` or raises :class:`FareValidationError` with one message
  per offending field;
- :func:`latest_fare` reads the fare in effect from the fare history;
- activity helpers build the audit-log entry written after a change.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from .config import get_currency_symbol
from .export import format_date
from .logging_setup import get_logger
from .models import ActivityEntry, FareChange, FareSettings
from .parsing import (
    ZERO,
    exact_context,
    fmt_grouped,
    fmt_plain,
    quantize_money,
    to_amount,
    to_datetime,
    to_number,
)

_logger = get_logger("fleet_admin.fares")

# Roles recorded in the activity log; other roles are logged without one.
ROLE_MAPPING: dict[str, str] = {
    "Admin": "System Admin",
    "Super": "Super Admin",
}

RESET_ACTIVITY = "Reset fare fields for new fare setting"
UNKNOWN_USER = "Unknown User"
NOT_SET = "Not set"


class FareValidationError(ValueError):
    """Raised when a fare-change form is incomplete, out of range or mismatched.

    ``errors`` maps a form field (e.g. ``"new_base_fare"``, or
    ``"base_fare_match"`` for a new/confirm mismatch) to its message.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------


def _dec(value: Any) -> Decimal:
    d = to_number(value)
    return d if d is not None else ZERO


def _apply_discount(value: Decimal, percent: Decimal) -> Decimal:
    with exact_context(value, percent):
        discounted = value - (value * percent / Decimal(100))
    return quantize_money(discounted)


def derive_discounted_rates(
    base_fare: Any, discount_percent: Any, regular_rate_per_distance: Any
) -> tuple[Decimal, Decimal]:
    """Return ``(discounted_price, discounted_rate_per_distance)``.

    Each output is ``value - value * discount_percent / 100`` rounded to two
    places, half away from zero. Inputs are expected to be validated already
    (``base_fare > 0``, ``0 <= discount_percent <= 100``, rate ``> 0``).
    """

    pct = _dec(discount_percent)
    return (
        _apply_discount(_dec(base_fare), pct),
        _apply_discount(_dec(regular_rate_per_distance), pct),
    )


# ---------------------------------------------------------------------------
# Form validation
# ---------------------------------------------------------------------------


def _blank(raw: str | None) -> bool:
    return raw is None or str(raw).strip() == ""


def _check_positive(
    errors: dict[str, str], key: str, raw: str | None, required_msg: str, invalid_msg: str
) -> None:
    if _blank(raw):
        errors[key] = required_msg
        return
    d = to_number(raw)
    if d is None or d <= 0:
        errors[key] = invalid_msg


def _check_percent(
    errors: dict[str, str], key: str, raw: str | None, required_msg: str
) -> None:
    if _blank(raw):
        errors[key] = required_msg
        return
    d = to_number(raw)
    if d is None or d < 0 or d > 100:
        errors[key] = "Discount percentage must be between 0 and 100"


def _same(a: str | None, b: str | None) -> bool:
    return str(a).strip() == str(b).strip()


def validate_fare_change(
    new_base_fare: str | None,
    confirm_base_fare: str | None,
    new_discount: str | None,
    confirm_discount: str | None,
    new_rate_per_km: str | None = None,
    confirm_rate_per_km: str | None = None,
) -> FareChange:
    """Validate the raw fare-change form and return the parsed change.

    Field-level checks run for every field first. The new/confirm pairs are
    only compared once every field is individually valid, and the first
    mismatching pair is reported alone. The per-km rate pair is optional:
    when both of its fields are blank it is left unchanged.
    """

    errors: dict[str, str] = {}
    _check_positive(
        errors,
        "new_base_fare",
        new_base_fare,
        "New base fare is required",
        "New base fare must be a positive number",
    )
    _check_positive(
        errors,
        "confirm_base_fare",
        confirm_base_fare,
        "Please confirm the new base fare",
        "Confirm base fare must be a positive number",
    )
    _check_percent(errors, "new_discount", new_discount, "New discount percentage is required")
    _check_percent(
        errors, "confirm_discount", confirm_discount, "Please confirm the new discount percentage"
    )

    with_rate = not (_blank(new_rate_per_km) and _blank(confirm_rate_per_km))
    if with_rate:
        _check_positive(
            errors,
            "new_rate_per_km",
            new_rate_per_km,
            "New rate per km is required",
            "New rate per km must be a positive number",
        )
        _check_positive(
            errors,
            "confirm_rate_per_km",
            confirm_rate_per_km,
            "Please confirm the new rate per km",
            "Confirm rate per km must be a positive number",
        )

    if not errors:
        if not _same(new_base_fare, confirm_base_fare):
            errors["base_fare_match"] = "Base fares do not match"
        elif not _same(new_discount, confirm_discount):
            errors["discount_match"] = "Discount percentages do not match"
        elif with_rate and not _same(new_rate_per_km, confirm_rate_per_km):
            errors["rate_per_km_match"] = "Rates per km do not match"

    if errors:
        _logger.debug("fare change rejected: %s", errors)
        raise FareValidationError(errors)

    return FareChange(
        base_fare=_dec(new_base_fare),
        discount_percent=_dec(new_discount),
        rate_per_km=_dec(new_rate_per_km) if with_rate else None,
    )


# ---------------------------------------------------------------------------
# Fare history
# ---------------------------------------------------------------------------


def fare_settings_from_document(data: Mapping[str, Any]) -> FareSettings:
    """Read a fare document; unreadable numbers are treated as 0."""

    return FareSettings(
        base_fare=to_amount(data.get("basePrice")),
        discount_percent=to_amount(data.get("discount")),
        rate_per_km=to_amount(data.get("perKmRate")),
        updated_at=to_datetime(data.get("timestamp")),
    )


def latest_fare(fare_documents: Iterable[Mapping[str, Any]]) -> FareSettings:
    """Return the newest fare, or an all-zero fare when the history is empty."""

    settings = [fare_settings_from_document(d) for d in fare_documents]
    if not settings:
        return FareSettings()
    dated = [s for s in settings if s.updated_at is not None]
    if not dated:
        return settings[0]
    return max(dated, key=lambda s: s.updated_at.timestamp())


def fare_update_date(settings: FareSettings) -> str:
    if settings.updated_at is None:
        return NOT_SET
    return format_date(settings.updated_at)


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


def map_role_for_logging(role: str | None) -> str | None:
    return ROLE_MAPPING.get(role or "")


def performed_by_name(first: str | None, last: str | None, email: str | None) -> str:
    if first and last:
        return f"{first} {last}".strip()
    return email or UNKNOWN_USER


def fare_update_activity(change: FareChange, currency: str | None = None) -> str:
    symbol = currency if currency is not None else get_currency_symbol()
    base = f"{symbol}{fmt_grouped(change.base_fare)}"
    discount = f"{fmt_plain(change.discount_percent)}%"
    if change.rate_per_km is None:
        return f"Updated base fare to {base} and discount to {discount}"
    rate = f"{symbol}{fmt_grouped(change.rate_per_km)}"
    return f"Updated base fare to {base}, discount to {discount} and rate per km to {rate}"


def build_activity_entry(
    activity: str,
    performed_by: str,
    role: str | None,
    *,
    now: datetime | None = None,
) -> ActivityEntry:
    return ActivityEntry(
        activity=activity,
        performed_by=performed_by,
        role=map_role_for_logging(role),
        timestamp=now if now is not None else datetime.now(UTC),
    )


__all__ = [
    "NOT_SET",
    "RESET_ACTIVITY",
    "ROLE_MAPPING",
    "FareValidationError",
    "build_activity_entry",
    "derive_discounted_rates",
    "fare_settings_from_document",
    "fare_update_activity",
    "fare_update_date",
    "latest_fare",
    "map_role_for_logging",
    "performed_by_name",
    "validate_fare_change",
]
