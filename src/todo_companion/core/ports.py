# src/todo_companion/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage swappable and makes testing easier.
"""

from datetime import date
from typing import Protocol

from ..tasks.task_models import Recurrence, StoreSnapshot, Task


class TaskPersistence(Protocol):
    """
    Durable storage for the whole task store.

    load(): missing storage -> empty snapshot; unreadable storage may raise PersistenceError.
    save(): full overwrite; failures raise PersistenceError.
    """

    def load(self) -> StoreSnapshot: ...
    def save(self, snapshot: StoreSnapshot) -> None: ...


class TaskRepo(Protocol):
    """Task store API used by command handlers."""

    def add_task(self, user_id: str, day: date, text: str) -> Task: ...
    def list_due(self, user_id: str, ref_date: date) -> list[Task]: ...
    def list_all(self, user_id: str) -> list[Task]: ...
    def get_task(self, user_id: str, task_id: int) -> Task: ...
    def delete_task(self, user_id: str, task_id: int) -> Task: ...
    def clear_tasks(self, user_id: str) -> int: ...
    def set_recurrence(self, user_id: str, task_id: int, rule: Recurrence) -> Task: ...
    def count_tasks(self) -> int: ...
