# src/todo_companion/tasks/recurrence.py

"""
Recurrence rules.

Pure functions only: no clock reads, no I/O. Callers pass the reference date
explicitly ("today" is decided at the call site).

Note: a one-off task (NoRepeat) is never "due" here; matching task.date against
the reference date is the caller's job (see TaskStore.list_due).
"""

from __future__ import annotations

from datetime import date

from ..core.errors import ValidationError
from .task_models import WEEKDAYS, Custom, Daily, Task, Weekly


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def normalize_weekday(token: str) -> str:
    """Canonical lower-case weekday name for `token` (case-insensitive), or ValidationError."""
    name = (token or "").strip().lower()
    if name not in WEEKDAYS:
        raise ValidationError(f"Invalid day of week. Use: {', '.join(WEEKDAYS)}")
    return name


def is_due_on(task: Task, ref_date: date) -> bool:
    rule = task.recurrence

    if isinstance(rule, Daily):
        return True

    if isinstance(rule, Weekly):
        today = weekday_name(ref_date)
        return any(d.lower() == today for d in rule.days)

    if isinstance(rule, Custom):
        interval = rule.interval
        # Construction rejects interval < 1; a malformed value is never due.
        if not isinstance(interval, int) or interval <= 0:
            return False
        delta = (ref_date - task.date).days
        return delta >= 0 and delta % interval == 0

    return False


def describe_recurrence(task: Task) -> str:
    rule = task.recurrence
    if isinstance(rule, Daily):
        return "daily"
    if isinstance(rule, Weekly):
        return "on " + ", ".join(rule.days)
    if isinstance(rule, Custom):
        return f"every {rule.interval} days"
    return "no repeat"
