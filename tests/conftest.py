# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_companion.core.state import AppState
from todo_companion.tasks.task_persistence import JsonTaskFile
from todo_companion.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the connectors.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="todo-test",
        data_dir=tmp_path,
        todos_path=tmp_path / "todos.json",
        help_path=tmp_path / "help.txt",
        matrix_store_path=tmp_path / "matrix_store",
        console_user_id="console",
        matrix_enabled=False,
        matrix_rooms=[],
    )


@pytest.fixture()
def today() -> date:
    # A Friday.
    return date(2024, 3, 1)


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    """Real JSON-file-backed store: persistence is part of what we test."""
    return TaskStore(JsonTaskFile(settings.todos_path))


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, today: date) -> AppState:
    return AppState(settings=settings, task_store=store, today=lambda: today)
