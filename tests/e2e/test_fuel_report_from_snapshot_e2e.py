from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

from fleet_admin import (
    FilterParams,
    build_export_rows,
    count_entities,
    initial_state,
    latest_unit_price,
    reduce_report,
    sort_newest_first,
    unique_categories,
)
from fleet_admin.date_presets import range_for_mode
from fleet_admin.ingest import load_snapshot, to_log_records
from tests.helpers.records import make_document


def _write_snapshot(path: Path, logs: list[dict]) -> None:
    payload = {
        "fuelLogs": logs,
        "fuelPrice": [{"Price": "61.20", "timestamp": {"seconds": 1757635200}}],
        "users": [{"role": "Driver"}] * 4 + [{"role": "Reliever"}],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_report_follows_snapshots_and_filter_changes(tmp_path):
    today = date(2025, 9, 17)
    path = tmp_path / "snapshot.json"
    _write_snapshot(
        path,
        [
            make_document("2025-09-17", Driver="Ana", Officer="Reyes", fuelAmount="10", status="done"),
            make_document("2025-09-16", Driver="Ben", Officer="Cruz", fuelAmount="5", status="done"),
        ],
    )

    snap = load_snapshot(path)
    state = reduce_report(
        initial_state(today),
        records=sort_newest_first(to_log_records(snap.fuel_logs)),
        unit_price=latest_unit_price(snap.fuel_prices),
        entity_count=count_entities(snap.users),
    )
    assert [r.subject_name for r in state.filtered] == ["Ana"]
    assert state.stats.total_expense == Decimal("612.00")
    assert (state.stats.entity_count, state.stats.fulfilled_count) == (5, 1)
    assert unique_categories(state.records) == ["Cruz", "Reyes"]

    # Switch to the week preset
    start, end = range_for_mode("week", today)
    state = reduce_report(state, params=FilterParams(start_date=start, end_date=end))
    assert [r.subject_name for r in state.filtered] == ["Ana", "Ben"]
    assert state.stats.fulfilled_count == 2

    # A new snapshot arrives with Ana's log removed and a pending one added
    _write_snapshot(
        path,
        [
            make_document("2025-09-16", Driver="Ben", Officer="Cruz", fuelAmount="5", status="done"),
            make_document("2025-09-15", Driver="Cid", Officer="Cruz", fuelAmount="1.5"),
        ],
    )
    snap = load_snapshot(path)
    state = reduce_report(state, records=sort_newest_first(to_log_records(snap.fuel_logs)))
    assert [r.subject_name for r in state.filtered] == ["Ben", "Cid"]
    assert state.stats.total_expense == Decimal("397.80")
    assert state.stats.fulfilled_count == 1

    state = reduce_report(state, params=state.params.model_copy(update={"category_filter": "Cruz"}))
    rows = build_export_rows(state.filtered)
    assert [row[0] for row in rows] == [1, 2]
    assert rows[1][4] == "1.50"
