# ruff: noqa: I001
"""CLI for the ``fleet_admin`` package.

This module exposes callable command handlers (e.g., ``cmd_fuel_report``)
and a Typer-based console interface. Settings (``FLEET_ADMIN_*``) are loaded
from a local ``.env`` using ``python-dotenv`` before delegating to command
logic. Business logic lives in ``fleet_admin.report``, ``fleet_admin.feed``
and ``fleet_admin.fares``.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from typer.models import OptionInfo

from .logging_setup import configure_logging, get_logger

_logger = get_logger("fleet_admin.cli")

console = Console()
err_console = Console(stderr=True)


# ---- Small module-level helpers used by CLI commands -------------------------


def _error(msg: str) -> int:
    err_console.print(Text(f"Error: {msg}"), style="red")
    return 1


def _load(snapshot_path: Path):
    """Load a snapshot, returning ``(snapshot, None)`` or ``(None, exit_code)``."""

    from .ingest import SnapshotError, load_snapshot

    try:
        return load_snapshot(snapshot_path), None
    except FileNotFoundError:
        return None, _error(f"File not found: {snapshot_path}")
    except PermissionError:
        return None, _error(f"Permission denied: {snapshot_path}")
    except SnapshotError as e:
        return None, _error(f"Failed to parse snapshot: {e}")


def _check_timezone() -> int | None:
    """Return an exit code when ``FLEET_ADMIN_TZ`` names an unknown zone."""

    from .config import get_timezone

    try:
        get_timezone()
    except ValueError as e:
        return _error(str(e))
    return None


def _render_report(headers: list[str], rows: list[list[Any]], stats_lines: list[str]) -> None:
    console.print(Panel(Text("\n".join(stats_lines)), title="Fuel Report", border_style="cyan"))
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(Text(str(v)) for v in row))
    console.print(table)
    if not rows:
        console.print(Text("No fuel logs match the current filters."), style="yellow")


# ---- Command handlers ---------------------------------------------------------


def cmd_fuel_report(
    snapshot_path: Path,
    *,
    search: str = "",
    category: str = "All",
    mode: str = "today",
    start: str | None = None,
    end: str | None = None,
    unit_price: str | None = None,
    drivers: int | None = None,
    today: str | None = None,
    as_json: bool = False,
) -> int:
    """Filter the fuel logs of a snapshot and print stats plus export rows."""

    from .date_presets import local_today, range_for_mode
    from .export import EXPORT_HEADERS, build_export_rows
    from .feed import count_entities, initial_state, latest_unit_price, reduce_report
    from .ingest import to_log_records
    from .models import FilterParams
    from .parsing import fmt_amount, parse_day, to_number
    from .report import sort_newest_first

    snapshot, code = _load(snapshot_path)
    if snapshot is None:
        return code
    tz_error = _check_timezone()
    if tz_error is not None:
        return tz_error

    if today is not None:
        ref_day = parse_day(today)
        if ref_day is None:
            return _error(f"--today must be YYYY-MM-DD, got {today!r}")
    else:
        ref_day = local_today()

    for flag, value in (("--start", start), ("--end", end)):
        if value and parse_day(value) is None:
            return _error(f"{flag} must be YYYY-MM-DD, got {value!r}")

    if start or end:
        # Explicit bounds always mean a custom range.
        mode = "custom"
    try:
        bounds = range_for_mode(mode, ref_day, current=(parse_day(start), parse_day(end)))
    except ValueError as e:
        return _error(str(e))

    if unit_price is not None:
        price = to_number(unit_price)
        if price is None or price < 0:
            return _error(f"--unit-price must be a non-negative number, got {unit_price!r}")
    else:
        price = latest_unit_price(snapshot.fuel_prices)

    entity_count = drivers if drivers is not None else count_entities(snapshot.users)
    records = sort_newest_first(to_log_records(snapshot.fuel_logs))
    params = FilterParams(
        search_text=search, category_filter=category, start_date=bounds[0], end_date=bounds[1]
    )

    state = reduce_report(
        initial_state(ref_day),
        records=records,
        params=params,
        unit_price=price,
        entity_count=entity_count,
    )
    rows = build_export_rows(state.filtered)
    stats = state.stats
    _logger.info(
        "fuel report: %d of %d logs match (mode=%s)", len(state.filtered), len(records), mode
    )

    if as_json:
        payload = {
            "filters": {
                "search": params.search_text,
                "category": params.category_filter,
                "start": params.start_date.isoformat() if params.start_date else None,
                "end": params.end_date.isoformat() if params.end_date else None,
            },
            "stats": {
                "entity_count": stats.entity_count,
                "fulfilled_count": stats.fulfilled_count,
                "total_expense": fmt_amount(stats.total_expense),
            },
            "headers": list(EXPORT_HEADERS),
            "rows": rows,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    day_label = _describe_range(params.start_date, params.end_date)
    _render_report(
        list(EXPORT_HEADERS),
        rows,
        [
            f"Period: {day_label}",
            f"Drivers & relievers: {stats.entity_count}",
            f"Drivers fueled: {stats.fulfilled_count}",
            f"Total fuel expense: {fmt_amount(stats.total_expense)}",
        ],
    )
    return 0


def _describe_range(start: date | None, end: date | None) -> str:
    if start and end:
        return f"{start.isoformat()} to {end.isoformat()}"
    if start:
        return start.isoformat()
    if end:
        return f"up to {end.isoformat()}"
    return "all dates"


def cmd_fare_rates(base_fare: str, discount: str, rate_per_km: str) -> int:
    """Validate fare inputs and print the discounted price and per-km rate."""

    from .fares import FareValidationError, derive_discounted_rates, validate_fare_change
    from .parsing import fmt_amount

    try:
        change = validate_fare_change(
            base_fare, base_fare, discount, discount, rate_per_km, rate_per_km
        )
    except FareValidationError as e:
        for msg in dict.fromkeys(e.errors.values()):
            _error(msg)
        return 1

    price, rate = derive_discounted_rates(
        change.base_fare, change.discount_percent, change.rate_per_km
    )
    console.print(Text(f"Discounted price: {fmt_amount(price)}"))
    console.print(Text(f"Discounted rate per km: {fmt_amount(rate)}"))
    return 0


def cmd_current_fare(snapshot_path: Path) -> int:
    """Print the fare in effect according to a snapshot's fare history."""

    from .fares import derive_discounted_rates, fare_update_date, latest_fare
    from .parsing import fmt_amount, fmt_plain

    snapshot, code = _load(snapshot_path)
    if snapshot is None:
        return code
    tz_error = _check_timezone()
    if tz_error is not None:
        return tz_error

    fare = latest_fare(snapshot.fares)
    price, rate = derive_discounted_rates(fare.base_fare, fare.discount_percent, fare.rate_per_km)
    lines = [
        f"Base fare: {fmt_amount(fare.base_fare)}",
        f"Discount: {fmt_plain(fare.discount_percent)}%",
        f"Rate per km: {fmt_amount(fare.rate_per_km)}",
        f"Discounted price: {fmt_amount(price)}",
        f"Discounted rate per km: {fmt_amount(rate)}",
        f"Last updated: {fare_update_date(fare)}",
    ]
    console.print(Panel(Text("\n".join(lines)), title="Current Fare", border_style="green"))
    return 0


def cmd_set_fare(*, performed_by: str | None, role: str | None, with_rate: bool = True) -> int:
    """Prompt for a fare change and print the fare document and activity entry."""

    from . import term_ui
    from .fares import (
        FareValidationError,
        build_activity_entry,
        derive_discounted_rates,
        fare_update_activity,
        performed_by_name,
    )
    from .parsing import fmt_amount

    try:
        change = term_ui.prompt_fare_change(with_rate=with_rate)
    except FareValidationError:
        return _error("fare change rejected after repeated invalid input")
    except (EOFError, KeyboardInterrupt):
        return _error("fare change cancelled")

    entry = build_activity_entry(
        fare_update_activity(change),
        performed_by or performed_by_name(None, None, None),
        role,
    )
    payload: dict[str, Any] = {"fare": change.to_document(), "activity": entry.to_document()}
    if change.rate_per_km is not None:
        price, rate = derive_discounted_rates(
            change.base_fare, change.discount_percent, change.rate_per_km
        )
        payload["discounted"] = {"price": fmt_amount(price), "rate_per_km": fmt_amount(rate)}
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Back-office fleet reports: fuel expense report over a document snapshot "
        "and fare-rate configuration. Loads FLEET_ADMIN_* settings from a local .env."
    ),
)


# Shared by every command that reads a snapshot file.
SNAPSHOT_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--snapshot",
    help="Path to a JSON snapshot of the fuelLogs/fuelPrice/users/fares collections",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("fuel-report")
def fuel_report_cmd(
    snapshot: Annotated[Path, SNAPSHOT_OPTION],
    *,
    search: str = typer.Option("", help="Case-insensitive text matched against driver, officer and unit."),
    category: str = typer.Option("All", help="Officer to filter by, or 'All'."),
    mode: str = typer.Option("today", help="Date preset: today, week, month or custom."),
    start: str | None = typer.Option(None, help="Start day (YYYY-MM-DD); implies --mode custom."),
    end: str | None = typer.Option(None, help="End day (YYYY-MM-DD); implies --mode custom."),
    unit_price: str | None = typer.Option(
        None, help="Fuel price per unit; defaults to the latest fuelPrice document."
    ),
    drivers: int | None = typer.Option(
        None, help="Driver/reliever count; defaults to counting users in the snapshot."
    ),
    today: str | None = typer.Option(None, help="Reference day for presets (YYYY-MM-DD)."),
    as_json: bool = typer.Option(False, "--json", help="Print stats and rows as JSON."),
) -> None:
    """Print fuel report stats and the export rows for the current filters."""

    _exit(
        cmd_fuel_report(
            snapshot,
            search=search,
            category=category,
            mode=mode,
            start=start,
            end=end,
            unit_price=unit_price,
            drivers=drivers,
            today=today,
            as_json=as_json,
        )
    )


@app.command("fare-rates")
def fare_rates_cmd(
    base_fare: str = typer.Option(..., help="Base fare (> 0)."),
    discount: str = typer.Option(..., help="Discount percentage (0-100)."),
    rate_per_km: str = typer.Option(..., help="Regular rate per km (> 0)."),
) -> None:
    """Compute the discounted price and discounted per-km rate."""

    _exit(cmd_fare_rates(base_fare, discount, rate_per_km))


@app.command("current-fare")
def current_fare_cmd(snapshot: Annotated[Path, SNAPSHOT_OPTION]) -> None:
    """Show the fare in effect from the snapshot's fare history."""

    _exit(cmd_current_fare(snapshot))


@app.command("set-fare")
def set_fare_cmd(
    performed_by: str | None = typer.Option(None, help="Name recorded in the activity log."),
    role: str | None = typer.Option(None, help="Role of the operator (Admin, Super)."),
    with_rate: bool = typer.Option(True, help="Also prompt for the per-km rate."),
) -> None:
    """Interactively enter a new fare (each value typed twice)."""

    _exit(cmd_set_fare(performed_by=performed_by, role=role, with_rate=with_rate))


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level to stderr."),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(verbose=verbose)


if __name__ == "__main__":  # pragma: no cover
    app()
