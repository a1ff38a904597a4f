"""Typed coercion helpers shared by ingest, aggregation, export and fares.

Every conversion from loosely typed document values (strings typed into a
form, numbers stored as text, timestamps in several shapes) goes through this
module so that fallback behavior is identical at every call site:

- amounts: ``to_number`` returns ``None`` when unparseable; ``to_amount``
  clamps to a non-negative ``Decimal`` and falls back to ``0``;
- timestamps: ``to_datetime`` returns ``None`` when the value cannot be
  interpreted as a point in time;
- calendar days: ``parse_day`` reads ``YYYY-MM-DD`` bounds and ``local_day``
  derives the local calendar day of a timestamp.

None of these helpers raise on bad input.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from .config import get_timezone
from .logging_setup import get_logger

_logger = get_logger("fleet_admin.parsing")

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Nonzero amounts must lie strictly between 1e-100 and 1e100 in magnitude.
_MAX_ADJUSTED = 100

# Leading markers tolerated in typed amounts (e.g. "₱1,250.00").
_CURRENCY_PREFIXES = ("₱", "$", "PHP")


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def to_number(raw: Any) -> Decimal | None:
    """Interpret ``raw`` as a finite ``Decimal`` or return ``None``.

    Accepts ``Decimal``/``int``/``float`` and strings with optional
    surrounding whitespace, a leading currency symbol and thousands
    separators. Booleans are rejected, as are values whose magnitude is out of
    the range a fuel or fare amount can take.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int):
        d = Decimal(raw)
    elif isinstance(raw, float):
        # str() keeps the shortest repr (0.1 -> "0.1") instead of binary noise.
        d = Decimal(str(raw))
    elif isinstance(raw, str):
        s = raw.strip()
        for prefix in _CURRENCY_PREFIXES:
            if s.upper().startswith(prefix):
                s = s[len(prefix) :].lstrip()
                break
        s = s.replace(",", "")
        if not s:
            return None
        try:
            d = Decimal(s)
        except InvalidOperation:
            return None
    else:
        return None
    if not d.is_finite():
        return None
    if d and abs(d.adjusted()) >= _MAX_ADJUSTED:
        return None
    return d


def to_amount(raw: Any) -> Decimal:
    """Coerce ``raw`` to a non-negative ``Decimal``; anything else becomes 0."""

    d = to_number(raw)
    if d is None:
        if raw not in (None, ""):
            _logger.debug("unparseable amount %r coerced to 0", raw)
        return ZERO
    if d < 0:
        _logger.debug("negative amount %r coerced to 0", raw)
        return ZERO
    return d


def exact_context(*values: Decimal, places: int = 3):
    """Decimal context wide enough to hold ``values`` with ``places`` fraction digits.

    The default 28-digit context cannot quantize amounts of 1e26 and above.
    """

    width = max((max(v.adjusted(), 0) for v in values), default=0) + 1
    return localcontext(prec=max(28, width + places + 28))


def quantize_money(d: Decimal) -> Decimal:
    """Round to two places, half away from zero."""

    with exact_context(d, places=2):
        return d.quantize(CENT, rounding=ROUND_HALF_UP)


def fmt_amount(d: Decimal) -> str:
    # Exactly two decimals; ASCII dot; no thousands separator.
    return f"{quantize_money(d):.2f}"


def fmt_plain(d: Decimal) -> str:
    """``1000`` / ``12.5``: no exponent, no trailing zeros."""

    with exact_context(d):
        return format(d.normalize(), "f")


def fmt_grouped(d: Decimal) -> str:
    """``1,000`` / ``1,250.5``: thousands separators, at most three decimals."""

    with exact_context(d):
        q = d.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP).normalize()
    return format(q, ",f")


# ---------------------------------------------------------------------------
# Timestamps and calendar days
# ---------------------------------------------------------------------------


def _from_epoch_mapping(raw: Mapping[str, Any]) -> datetime | None:
    """Read a document-store export timestamp ``{"seconds": n, "nanoseconds": m}``.

    The underscored ``_seconds``/``_nanoseconds`` variant is accepted too.

    ``seconds == 0`` counts as an unset timestamp and yields ``None``, not
    1970-01-01T00:00Z.
    """

    seconds = raw.get("seconds", raw.get("_seconds"))
    if seconds is None or isinstance(seconds, bool):
        return None
    try:
        secs = float(seconds)
    except (TypeError, ValueError):
        return None
    if not secs:
        return None
    nanos = raw.get("nanoseconds", raw.get("_nanoseconds")) or 0
    try:
        secs += float(nanos) / 1e9
    except (TypeError, ValueError):
        pass
    try:
        return datetime.fromtimestamp(secs, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def to_datetime(raw: Any) -> datetime | None:
    """Interpret ``raw`` as a point in time, or return ``None``.

    Supported shapes, in order: ``datetime``; objects exposing a
    ``to_datetime()`` method; mappings with ``seconds``/``_seconds``;
    ISO-8601 strings (a trailing ``Z`` is accepted). A bare ``date`` is read
    as local midnight.
    """

    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    converter = getattr(raw, "to_datetime", None)
    if callable(converter):
        try:
            value = converter()
        except Exception as exc:  # third-party timestamp wrappers vary
            _logger.debug("timestamp conversion failed for %r: %s", raw, exc)
            return None
        return value if isinstance(value, datetime) else None
    if isinstance(raw, Mapping):
        return _from_epoch_mapping(raw)
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            _logger.debug("unparseable timestamp %r", raw)
            return None
    return None


def local_day(ts: Any) -> date | None:
    """Return the calendar day of ``ts`` in the configured local zone.

    Naive datetimes are taken to already be local wall-clock time.
    """

    dt = to_datetime(ts)
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(get_timezone()).date()


def to_local(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_timezone())


def parse_day(raw: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` day bound; blank or invalid input yields ``None``."""

    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            _logger.debug("unparseable day bound %r", raw)
            return None
    return None


__all__ = [
    "ZERO",
    "exact_context",
    "fmt_amount",
    "fmt_grouped",
    "fmt_plain",
    "local_day",
    "parse_day",
    "quantize_money",
    "to_amount",
    "to_datetime",
    "to_local",
    "to_number",
]
