from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from fleet_admin import FareChange, FareValidationError, derive_discounted_rates, latest_fare
from fleet_admin.fares import (
    RESET_ACTIVITY,
    build_activity_entry,
    fare_settings_from_document,
    fare_update_activity,
    fare_update_date,
    map_role_for_logging,
    performed_by_name,
    validate_fare_change,
)


def test_derive_discounted_rates_example():
    price, rate = derive_discounted_rates(1000, 20, 15)
    assert (price, rate) == (Decimal("800.00"), Decimal("12.00"))
    assert str(price) == "800.00"


def test_derive_discounted_rates_rounds_half_away_from_zero():
    # 0.0625 -> 0.06, 5.005 -> 5.01, 9.5095 -> 9.51
    assert derive_discounted_rates("0.125", "50", "10.01") == (Decimal("0.06"), Decimal("5.01"))
    assert derive_discounted_rates("10.01", "5", "10.01")[0] == Decimal("9.51")


def test_derive_discounted_rates_edges_of_percent_range():
    assert derive_discounted_rates(40, 0, 12.5) == (Decimal("40.00"), Decimal("12.50"))
    assert derive_discounted_rates(40, 100, 12.5) == (Decimal("0.00"), Decimal("0.00"))


def test_validate_fare_change_returns_parsed_values():
    change = validate_fare_change("1000", "1000", "20", "20", "15", "15")
    assert change == FareChange(
        base_fare=Decimal("1000"), discount_percent=Decimal("20"), rate_per_km=Decimal("15")
    )
    assert change.to_document() == {"basePrice": "1000", "discount": "20", "perKmRate": "15"}


def test_rate_pair_is_optional():
    change = validate_fare_change("50", "50", "12.5", "12.5")
    assert change.rate_per_km is None
    assert change.to_document() == {"basePrice": "50", "discount": "12.5"}


def test_field_errors_are_collected_for_every_field():
    with pytest.raises(FareValidationError) as info:
        validate_fare_change("", "-1", "150", " ")
    assert info.value.errors == {
        "new_base_fare": "New base fare is required",
        "confirm_base_fare": "Confirm base fare must be a positive number",
        "new_discount": "Discount percentage must be between 0 and 100",
        "confirm_discount": "Please confirm the new discount percentage",
    }


def test_mismatch_only_reported_once_fields_are_valid():
    with pytest.raises(FareValidationError) as info:
        validate_fare_change("100", "200", "10", "20")
    # Base fare mismatch shadows the discount mismatch
    assert info.value.errors == {"base_fare_match": "Base fares do not match"}

    with pytest.raises(FareValidationError) as info:
        validate_fare_change("100", "100", "10", "20")
    assert info.value.errors == {"discount_match": "Discount percentages do not match"}

    with pytest.raises(FareValidationError) as info:
        validate_fare_change("100", "100", "10", "10", "15", "16")
    assert info.value.errors == {"rate_per_km_match": "Rates per km do not match"}


def test_half_filled_rate_pair_is_an_error():
    with pytest.raises(FareValidationError) as info:
        validate_fare_change("100", "100", "10", "10", "15", "")
    assert info.value.errors == {"confirm_rate_per_km": "Please confirm the new rate per km"}


def test_fare_validation_error_is_a_value_error():
    with pytest.raises(ValueError, match="new_base_fare"):
        validate_fare_change("abc", "abc", "1", "1")


def test_latest_fare_picks_newest_and_coerces():
    docs = [
        {"basePrice": "40", "discount": "20", "timestamp": "2025-01-01T00:00:00Z"},
        {"basePrice": "45", "discount": "x", "perKmRate": "12", "timestamp": "2025-03-09T08:00:00Z"},
        {"basePrice": "99", "discount": "5"},
    ]
    fare = latest_fare(docs)
    assert fare.base_fare == Decimal("45")
    assert fare.discount_percent == 0
    assert fare.rate_per_km == Decimal("12")
    assert fare_update_date(fare) == "March 9, 2025"


def test_latest_fare_defaults_when_history_empty():
    fare = latest_fare([])
    assert fare.base_fare == 0 and fare.discount_percent == 0
    assert fare_update_date(fare) == "Not set"


def test_fare_settings_from_document_without_timestamp():
    fare = fare_settings_from_document({"basePrice": 30})
    assert fare.base_fare == Decimal(30)
    assert fare.updated_at is None


def test_activity_messages():
    change = validate_fare_change("1000", "1000", "20", "20")
    assert fare_update_activity(change) == "Updated base fare to ₱1,000 and discount to 20%"
    with_rate = validate_fare_change("1250.5", "1250.5", "7.5", "7.5", "15", "15")
    assert fare_update_activity(with_rate, currency="$") == (
        "Updated base fare to $1,250.5, discount to 7.5% and rate per km to $15"
    )


def test_currency_symbol_comes_from_settings(monkeypatch):
    monkeypatch.setenv("FLEET_ADMIN_CURRENCY", "$")
    change = validate_fare_change("10", "10", "0", "0")
    assert fare_update_activity(change) == "Updated base fare to $10 and discount to 0%"


def test_activity_entry_role_mapping_and_names():
    now = datetime(2025, 9, 17, 2, 0, tzinfo=UTC)
    entry = build_activity_entry(RESET_ACTIVITY, "Ana Cruz", "Super", now=now)
    assert entry.to_document() == {
        "activity": "Reset fare fields for new fare setting",
        "performedBy": "Ana Cruz",
        "role": "Super Admin",
        "timestamp": "2025-09-17T02:00:00+00:00",
    }
    assert map_role_for_logging("Admin") == "System Admin"
    assert map_role_for_logging("Driver") is None
    assert map_role_for_logging(None) is None
    assert performed_by_name("Ana", "Cruz", "ana@example.com") == "Ana Cruz"
    assert performed_by_name("Ana", "", "ana@example.com") == "ana@example.com"
    assert performed_by_name(None, None, None) == "Unknown User"


def test_derive_discounted_rates_handles_large_fares():
    price, rate = derive_discounted_rates(Decimal("1e27"), 20, 15)
    assert str(price) == "8" + "0" * 26 + ".00"
    assert rate == Decimal("12.00")
    odd, _ = derive_discounted_rates("123456789012345678901234567.5", "10", "1")
    assert str(odd) == "111111110111111111011111110.75"


def test_activity_message_for_large_base_fare():
    change = validate_fare_change("1" + "0" * 27, "1" + "0" * 27, "5", "5")
    assert fare_update_activity(change) == (
        "Updated base fare to ₱1,000,000,000,000,000,000,000,000,000 and discount to 5%"
    )
