"""Terminal prompts for the interactive fare change (prompt_toolkit-based).

Kept apart from :mod:`fleet_admin.fares` so the validation logic stays free of
terminal concerns and the prompts can be tested with a pipe-backed session.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.validation import ValidationError, Validator

from .fares import FareValidationError, validate_fare_change
from .models import FareChange
from .parsing import to_number


class NumberValidator(Validator):
    """Accept a number within ``[minimum, maximum]``; ``exclusive_min`` makes the lower bound strict.

    Blank input is accepted only when ``allow_blank`` is set.
    """

    def __init__(
        self,
        *,
        minimum: Decimal | None = None,
        maximum: Decimal | None = None,
        exclusive_min: bool = False,
        allow_blank: bool = False,
        message: str = "Enter a number",
    ) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.exclusive_min = exclusive_min
        self.allow_blank = allow_blank
        self.message = message

    def validate(self, document) -> None:
        text = document.text
        if not text.strip():
            if self.allow_blank:
                return
            raise ValidationError(message=self.message, cursor_position=0)
        d = to_number(text)
        bad = d is None
        if not bad and self.minimum is not None:
            bad = d <= self.minimum if self.exclusive_min else d < self.minimum
        if not bad and self.maximum is not None:
            bad = d > self.maximum
        if bad:
            raise ValidationError(message=self.message, cursor_position=len(text))


POSITIVE = NumberValidator(
    minimum=Decimal(0), exclusive_min=True, message="Must be a positive number"
)
PERCENT = NumberValidator(
    minimum=Decimal(0),
    maximum=Decimal(100),
    message="Discount percentage must be between 0 and 100",
)
OPTIONAL_POSITIVE = NumberValidator(
    minimum=Decimal(0),
    exclusive_min=True,
    allow_blank=True,
    message="Must be a positive number (or leave blank)",
)


def prompt_number(
    message: str,
    *,
    validator: Validator,
    session: PromptSession | None = None,
    default: str = "",
) -> str:
    """Prompt for one numeric field and return the raw accepted text."""

    sess = session or PromptSession()
    return sess.prompt(message, validator=validator, validate_while_typing=False, default=default)


def _print_errors(err: FareValidationError) -> None:
    for msg in err.errors.values():
        print_formatted_text(f"  {msg}")


def prompt_fare_change(
    *,
    session: PromptSession | None = None,
    with_rate: bool = True,
    max_attempts: int = 3,
    on_error: Callable[[FareValidationError], None] = _print_errors,
) -> FareChange:
    """Ask for new + confirm values of each fare field until they validate.

    After ``max_attempts`` rejected forms the last :class:`FareValidationError`
    is raised.
    """

    sess = session or PromptSession()
    last: FareValidationError | None = None
    for _ in range(max(1, max_attempts)):
        base = prompt_number("New base fare: ", validator=POSITIVE, session=sess)
        base_confirm = prompt_number("Confirm base fare: ", validator=POSITIVE, session=sess)
        disc = prompt_number("New discount (%): ", validator=PERCENT, session=sess)
        disc_confirm = prompt_number("Confirm discount (%): ", validator=PERCENT, session=sess)
        rate = rate_confirm = None
        if with_rate:
            rate = prompt_number(
                "New rate per km (blank to skip): ", validator=OPTIONAL_POSITIVE, session=sess
            )
            rate_confirm = prompt_number(
                "Confirm rate per km: ", validator=OPTIONAL_POSITIVE, session=sess
            )
        try:
            return validate_fare_change(base, base_confirm, disc, disc_confirm, rate, rate_confirm)
        except FareValidationError as err:
            last = err
            on_error(err)
    assert last is not None
    raise last


__all__ = [
    "OPTIONAL_POSITIVE",
    "PERCENT",
    "POSITIVE",
    "NumberValidator",
    "prompt_fare_change",
    "prompt_number",
]
