from __future__ import annotations

from decimal import Decimal

from fleet_admin import Stats, compute_stats
from fleet_admin.ingest import to_log_record
from fleet_admin.models import LogRecord
from tests.helpers.records import make_record


def test_empty_filtered_set_keeps_external_entity_count():
    assert compute_stats([], 50, 7) == Stats(entity_count=7, fulfilled_count=0, total_expense=0)


def test_total_and_distinct_fulfilled_drivers():
    records = [
        make_record(quantity=10, status="done", driver="A"),
        make_record(quantity=5, status="done", driver="A"),
        make_record(quantity=3, status="pending", driver="B"),
    ]
    stats = compute_stats(records, 2, 7)
    assert stats.total_expense == Decimal("36")
    assert stats.fulfilled_count == 1
    assert stats.entity_count == 7


def test_entity_count_is_not_derived_from_records():
    records = [make_record(driver=f"D{i}", status="done") for i in range(4)]
    assert compute_stats(records, 1, 0).entity_count == 0


def test_empty_subject_names_are_not_counted_as_fulfilled():
    records = [
        LogRecord(id="1", occurred_at=None, subject_name="", status="done"),
        make_record(driver="B", status="done"),
    ]
    assert compute_stats(records, 1, 2).fulfilled_count == 1


def test_decimal_arithmetic_has_no_float_drift():
    records = [make_record(quantity="0.1"), make_record(quantity="0.2")]
    assert compute_stats(records, "3", 0).total_expense == Decimal("0.9")


def test_unreadable_unit_price_counts_as_zero():
    records = [make_record(quantity=10)]
    assert compute_stats(records, "n/a", 1).total_expense == 0
    assert compute_stats(records, None, 1).total_expense == 0


def test_compute_stats_is_pure():
    records = [make_record(quantity=4, status="done", driver="A")]
    snapshot = list(records)
    first = compute_stats(records, "62.50", 3)
    second = compute_stats(records, "62.50", 3)
    assert first == second
    assert records == snapshot
    assert first.total_expense == Decimal("250.00")


def test_out_of_range_amounts_degrade_to_zero():
    records = [
        to_log_record({"id": "1", "fuelAmount": "1e999999", "status": "done", "Driver": "A"}),
        to_log_record({"id": "2", "fuelAmount": "4"}),
    ]
    stats = compute_stats(records, "10", 1)
    assert stats.total_expense == Decimal("40")
    assert stats.fulfilled_count == 1
    assert compute_stats([make_record(quantity=3)], "1e999999", 1).total_expense == 0


def test_large_amounts_are_summed_exactly():
    records = [to_log_record({"id": "1", "fuelAmount": "1e30"})]
    assert compute_stats(records, "2", 1).total_expense == Decimal("2e30")
