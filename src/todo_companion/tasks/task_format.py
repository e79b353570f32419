# src/todo_companion/tasks/task_format.py

from __future__ import annotations

from collections.abc import Iterable

from .recurrence import describe_recurrence
from .task_api import format_date
from .task_models import Task

EMPTY_LIST = "Your todo list is empty"
NOTHING_TODAY = "No tasks for today"


def render_task(task: Task) -> str:
    lines = [f"ID {task.id}: {task.text}", f"Date: {format_date(task.date)}"]
    if task.is_repeating:
        lines.append(f"Repeat: {describe_recurrence(task)}")
    return "\n".join(lines)


def render_tasks(title: str, tasks: Iterable[Task]) -> str:
    blocks = [render_task(t) for t in tasks]
    return f"{title}\n\n" + "\n---\n".join(blocks) + "\n---"


def render_added(task: Task) -> str:
    return (
        f"ID {task.id}: {task.text}\n"
        "Task added!\n"
        f"Date: {format_date(task.date)}\n\n"
        "To make it repeating, use commands:\n"
        "  repeat_daily [ID] - repeat daily\n"
        "  repeat_weekly [ID] [days] - repeat on specific week days\n"
        "  repeat_custom [ID] [days] - repeat every N days"
    )
