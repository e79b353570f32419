# src/todo_companion/tasks/task_persistence.py

"""
JSON file persistence for the task store.

Document layout (version 1):

    {"version": 1, "next_id": 7,
     "users": {"<user_id>": {"user_id": "<user_id>", "todos": [<task>, ...]}}}

    <task> = {"id": 3, "text": "...", "date": "2024-03-01",
              "repeat": "none|daily|weekly|custom", "interval": 0, "days": []}

Legacy documents written by the earlier bot (a bare mapping user_id -> {"user_id", "todos"},
dates as RFC 3339 timestamps, no counter) are still accepted on load.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceError, ValidationError
from .task_models import (
    Custom,
    Daily,
    NoRepeat,
    Recurrence,
    RecurrenceKind,
    StoreSnapshot,
    Task,
    Weekly,
)

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def _recurrence_to_json(rule: Recurrence) -> dict[str, Any]:
    return {
        "repeat": rule.kind.value,
        "interval": rule.interval if isinstance(rule, Custom) else 0,
        "days": list(rule.days) if isinstance(rule, Weekly) else [],
    }


def _recurrence_from_json(raw: dict[str, Any], task_id: int) -> Recurrence:
    kind = RecurrenceKind.from_db(raw.get("repeat"))
    try:
        if kind == RecurrenceKind.DAILY:
            return Daily()
        if kind == RecurrenceKind.WEEKLY:
            return Weekly(tuple(raw.get("days") or ()))
        if kind == RecurrenceKind.CUSTOM:
            return Custom(int(raw.get("interval") or 0))
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("Task %s: malformed %s repeat (%s); treating as no repeat", task_id, kind.value, e)
    return NoRepeat()


def _parse_date(raw: Any) -> date:
    # Accept "2024-03-01" as well as legacy "2024-03-01T10:20:30.123+03:00".
    return date.fromisoformat(str(raw)[:10])


def task_to_json(task: Task) -> dict[str, Any]:
    out: dict[str, Any] = {"id": task.id, "text": task.text, "date": task.date.isoformat()}
    out.update(_recurrence_to_json(task.recurrence))
    return out


def task_from_json(raw: dict[str, Any]) -> Task:
    task_id = int(raw["id"])
    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"Task {task_id} has no text")
    return Task(
        id=task_id,
        text=text,
        date=_parse_date(raw["date"]),
        recurrence=_recurrence_from_json(raw, task_id),
    )


def snapshot_to_json(snapshot: StoreSnapshot) -> dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "next_id": snapshot.next_id,
        "users": {
            user_id: {"user_id": user_id, "todos": [task_to_json(t) for t in tasks]}
            for user_id, tasks in snapshot.users.items()
        },
    }


def snapshot_from_json(data: Any) -> StoreSnapshot:
    """
    Build a snapshot from a decoded JSON document.

    Raises ValueError/KeyError/TypeError on a structurally broken document.
    """
    if not isinstance(data, dict):
        raise ValueError("Expected JSON object")

    if "users" in data and isinstance(data.get("users"), dict):
        users_raw = data["users"]
        stored_next = data.get("next_id")
    else:
        # Legacy: top-level mapping is the users mapping itself.
        users_raw = data
        stored_next = None

    users: dict[str, list[Task]] = {}
    max_id = 0
    for key, entry in users_raw.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Malformed entry for user {key!r}")
        user_id = str(entry.get("user_id", key))
        todos = entry.get("todos") or []
        if not isinstance(todos, list):
            raise ValueError(f"Malformed todos for user {user_id!r}")
        tasks = [task_from_json(t) for t in todos]
        for t in tasks:
            max_id = max(max_id, t.id)
        users[user_id] = tasks

    next_id = max_id + 1
    if stored_next is not None:
        next_id = max(next_id, int(stored_next))
    return StoreSnapshot(users=users, next_id=next_id)


class JsonTaskFile:
    """TaskPersistence backed by a single JSON file (atomic full overwrite)."""

    def __init__(self, path: str | Path = "todos.json") -> None:
        self._path = Path(path)

    def load(self) -> StoreSnapshot:
        if not self._path.exists():
            logger.info("No task file at %s; starting empty", self._path)
            return StoreSnapshot()
        try:
            data = json.loads(self._path.read_text("utf-8"))
            return snapshot_from_json(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise PersistenceError(f"Failed to load tasks from {self._path}: {e}") from e

    def save(self, snapshot: StoreSnapshot) -> None:
        payload = json.dumps(snapshot_to_json(snapshot), ensure_ascii=False, indent=2)
        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Task texts are private to their owners: the file is never world-readable.
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            with contextlib.suppress(OSError):
                os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise PersistenceError(f"Failed to write tasks to {self._path}: {e}") from e
