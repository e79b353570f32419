# src/todo_companion/core/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for expected, user-reportable failures."""


class ValidationError(TodoError):
    """
    Malformed command arguments (bad date, non-numeric id, bad interval, bad weekday, ...).

    The message is user-facing: handlers send str(exc) back as the reply.
    """


class TaskNotFoundError(TodoError):
    def __init__(self, user_id: str, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found for user {user_id}")
        self.user_id = user_id
        self.task_id = task_id


class PersistenceError(TodoError):
    """Durable read/write failure. Logged by the store; never fatal."""
