# src/todo_companion/tasks/task_store.py

from __future__ import annotations

import copy
import logging
import threading
from datetime import date

from ..core.errors import PersistenceError, TaskNotFoundError, ValidationError
from ..core.ports import TaskPersistence
from .recurrence import is_due_on
from .task_models import NoRepeat, Recurrence, StoreSnapshot, Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory per-user task lists, flushed to a persistence port on every mutation.

    Invariants:
    - task ids come from one global counter (unique across all users, never reused);
    - a user's list keeps insertion order, including across deletes;
    - every mutation re-persists the whole store before returning.

    Thread-safety:
    - one coarse lock spans each read, or each mutate-then-persist sequence,
      so a save never writes a torn snapshot.

    Persistence is best-effort: a failed save is logged and the in-memory change stands.
    """

    def __init__(self, persistence: TaskPersistence) -> None:
        self._persistence = persistence
        self._lock = threading.RLock()
        self._users: dict[str, list[Task]] = {}
        self._next_id = 1
        self._load()
        logger.info(
            "TaskStore ready users=%d total=%d next_id=%d",
            len(self._users),
            self.count_tasks(),
            self._next_id,
        )

    # ---- persistence ----

    def _load(self) -> None:
        try:
            snap = self._persistence.load()
        except PersistenceError:
            logger.exception("Failed to load tasks; starting with an empty store")
            return
        self._users = {uid: list(tasks) for uid, tasks in snap.users.items()}
        self._next_id = max(1, snap.next_id)

    def _flush(self) -> None:
        # Caller holds the lock.
        try:
            self._persistence.save(self._snapshot_locked())
        except PersistenceError:
            logger.exception("Failed to persist tasks (in-memory state kept)")

    def _snapshot_locked(self) -> StoreSnapshot:
        return StoreSnapshot(users=copy.deepcopy(self._users), next_id=self._next_id)

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._snapshot_locked()

    # ---- lookup helpers ----

    def _find_index(self, user_id: str, task_id: int) -> int:
        tasks = self._users.get(user_id)
        if tasks is None:
            raise TaskNotFoundError(user_id, task_id)
        for i, task in enumerate(tasks):
            if task.id == task_id:
                return i
        raise TaskNotFoundError(user_id, task_id)

    # ---- queries ----

    def list_all(self, user_id: str) -> list[Task]:
        with self._lock:
            return copy.deepcopy(self._users.get(user_id, []))

    def list_due(self, user_id: str, ref_date: date) -> list[Task]:
        with self._lock:
            tasks = self._users.get(user_id, [])
            due = [t for t in tasks if t.date == ref_date or is_due_on(t, ref_date)]
            return copy.deepcopy(due)

    def get_task(self, user_id: str, task_id: int) -> Task:
        with self._lock:
            idx = self._find_index(user_id, task_id)
            return copy.deepcopy(self._users[user_id][idx])

    def count_tasks(self) -> int:
        with self._lock:
            return sum(len(tasks) for tasks in self._users.values())

    def users(self) -> list[str]:
        with self._lock:
            return list(self._users)

    # ---- mutations ----

    def add_task(self, user_id: str, day: date, text: str) -> Task:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please provide task text")

        with self._lock:
            task = Task(id=self._next_id, text=text, date=day, recurrence=NoRepeat())
            self._next_id += 1
            self._users.setdefault(user_id, []).append(task)
            self._flush()
            logger.info("Task %s added user=%s date=%s", task.id, user_id, day.isoformat())
            return copy.deepcopy(task)

    def delete_task(self, user_id: str, task_id: int) -> Task:
        with self._lock:
            idx = self._find_index(user_id, task_id)
            removed = self._users[user_id].pop(idx)
            self._flush()
            logger.info("Task %s deleted user=%s", task_id, user_id)
            return removed

    def clear_tasks(self, user_id: str) -> int:
        with self._lock:
            tasks = self._users.get(user_id)
            removed = len(tasks) if tasks else 0
            if tasks is not None:
                tasks.clear()
            self._flush()
            logger.info("Cleared %d task(s) user=%s", removed, user_id)
            return removed

    def set_recurrence(self, user_id: str, task_id: int, rule: Recurrence) -> Task:
        with self._lock:
            idx = self._find_index(user_id, task_id)
            task = self._users[user_id][idx]
            task.recurrence = rule
            self._flush()
            logger.info("Task %s repeat=%s user=%s", task_id, rule.kind.value, user_id)
            return copy.deepcopy(task)
