# src/todo_companion/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .ports import TaskRepo


@dataclass
class AppState:
    """
    Everything a command handler needs, built once by the composition root.

    `today` is injectable so "today" can be pinned in tests.
    """

    settings: Any
    task_store: TaskRepo
    today: Callable[[], date] = field(default=date.today)
