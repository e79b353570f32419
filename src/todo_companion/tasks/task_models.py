# src/todo_companion/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import ClassVar

from ..core.errors import ValidationError

# Index matches date.weekday(): Monday == 0.
WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class RecurrenceKind(StrEnum):
    """Recurrence tag as stored on disk ("repeat" field)."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"

    @classmethod
    def from_db(cls, raw: object) -> RecurrenceKind:
        if not isinstance(raw, str) or not raw:
            return cls.NONE
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.NONE


@dataclass(frozen=True, slots=True)
class NoRepeat:
    kind: ClassVar[RecurrenceKind] = RecurrenceKind.NONE


@dataclass(frozen=True, slots=True)
class Daily:
    kind: ClassVar[RecurrenceKind] = RecurrenceKind.DAILY


@dataclass(frozen=True, slots=True)
class Weekly:
    """
    Repeat on the given weekdays.

    Days are canonical lower-case English names, kept in the order supplied.
    """

    kind: ClassVar[RecurrenceKind] = RecurrenceKind.WEEKLY
    days: tuple[str, ...]

    def __post_init__(self) -> None:
        # Duplicates collapse; first-seen order is kept.
        days = tuple(dict.fromkeys(str(d).strip().lower() for d in self.days))
        if not days:
            raise ValidationError("Weekly repeat needs at least one week day")
        bad = [d for d in days if d not in WEEKDAYS]
        if bad:
            raise ValidationError(f"Invalid day of week: {bad[0]}. Use: {', '.join(WEEKDAYS)}")
        object.__setattr__(self, "days", days)


@dataclass(frozen=True, slots=True)
class Custom:
    """Repeat every `interval` days counting from the task's date."""

    kind: ClassVar[RecurrenceKind] = RecurrenceKind.CUSTOM
    interval: int

    def __post_init__(self) -> None:
        if isinstance(self.interval, bool) or not isinstance(self.interval, int) or self.interval < 1:
            raise ValidationError("Interval must be a positive number")


Recurrence = NoRepeat | Daily | Weekly | Custom


@dataclass(slots=True)
class Task:
    id: int
    text: str
    date: date
    recurrence: Recurrence = field(default_factory=NoRepeat)

    @property
    def is_repeating(self) -> bool:
        return not isinstance(self.recurrence, NoRepeat)


@dataclass(slots=True)
class StoreSnapshot:
    """Whole-store state exchanged with persistence (user id -> tasks, plus the id counter)."""

    users: dict[str, list[Task]] = field(default_factory=dict)
    next_id: int = 1
