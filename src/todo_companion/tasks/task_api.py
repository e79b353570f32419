# src/todo_companion/tasks/task_api.py

"""
Argument parsing for task commands.

Every parser raises ValidationError with a user-facing message, so handlers can
reply with str(exc) and never reach the store with bad input.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.errors import ValidationError
from .recurrence import normalize_weekday
from .task_models import Custom, Weekly

DATE_FORMAT = "%d.%m.%Y"

ADD_USAGE = (
    "Usage: add [date?] [text]\n"
    "Examples:\n"
    "  add Buy milk\n"
    "  add 25.12.2023 Buy gifts"
)


@dataclass(frozen=True, slots=True)
class AddRequest:
    day: date
    text: str


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def try_parse_date(token: str) -> date | None:
    """day.month.year -> date, or None if `token` is not a date."""
    try:
        return datetime.strptime(token, DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_digits(token: str) -> int | None:
    # Plain ASCII digits only: int() would also take "1_0", "+3" or non-Latin digits.
    if not isinstance(token, str) or not (token.isascii() and token.isdigit()):
        return None
    return int(token)


def parse_task_id(token: str) -> int:
    task_id = _parse_digits(token)
    if task_id is None or task_id < 1:
        raise ValidationError("Invalid task ID")
    return task_id


def parse_add_args(args: list[str], today: date) -> AddRequest:
    """
    `add [dd.mm.yyyy] text...`

    A leading date token is optional; without one the task is scheduled for `today`.
    Remaining tokens are joined with single spaces.
    """
    if not args:
        raise ValidationError(ADD_USAGE)

    day = try_parse_date(args[0])
    if day is not None:
        rest = args[1:]
        if not rest:
            raise ValidationError("Please provide task text after the date")
    else:
        day = today
        rest = args

    text = " ".join(rest).strip()
    if not text:
        raise ValidationError(ADD_USAGE)
    return AddRequest(day=day, text=text)


def parse_interval(token: str) -> int:
    interval = _parse_digits(token)
    if interval is None or interval < 1:
        raise ValidationError("Interval must be a positive number")
    return interval


def parse_weekly(tokens: list[str]) -> Weekly:
    if not tokens:
        raise ValidationError(
            "Usage: repeat_weekly [ID] [week days]\nExample: repeat_weekly 1 monday wednesday friday"
        )
    return Weekly(tuple(normalize_weekday(t) for t in tokens))


def parse_custom(token: str) -> Custom:
    return Custom(parse_interval(token))
