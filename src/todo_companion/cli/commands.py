# src/todo_companion/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..core.errors import TaskNotFoundError, ValidationError
from ..core.state import AppState
from ..tasks.recurrence import describe_recurrence
from ..tasks.task_api import parse_add_args, parse_custom, parse_task_id, parse_weekly
from ..tasks.task_format import EMPTY_LIST, NOTHING_TODAY, render_added, render_tasks
from ..tasks.task_models import Daily, Recurrence

CommandHandler = Callable[[AppState, list[str], str], str]

logger = logging.getLogger(__name__)

NOT_FOUND = "Task with specified ID not found"


class CommandRegistry:
    """
    Text-command registry used by connectors (help, list, add, ...).

    Command names may be one or two words ("full list"); matching is case-insensitive
    and a leading "/" is optional. Argument tokens keep their original case.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def resolve(self, line: str) -> tuple[CommandHandler, list[str]] | None:
        text = line.strip()
        if text.startswith("/"):
            text = text[1:]
        tokens = text.split()
        if not tokens:
            return None

        if len(tokens) >= 2:
            two = f"{tokens[0]} {tokens[1]}".lower()
            if two in self._handlers:
                return self._handlers[two], tokens[2:]

        handler = self._handlers.get(tokens[0].lower())
        if handler is None:
            return None
        return handler, tokens[1:]

    def handle(self, state: AppState, line: str, user_id: str) -> str | None:
        """
        Handle a line like "add 25.12.2024 Buy gifts" or "/repeat_daily 3".

        Returns a reply string, or None if the line is not a command
        (plain chat text without a leading "/").
        """
        found = self.resolve(line)
        if found is None:
            if line.strip().startswith("/"):
                name = line.strip()[1:].split(maxsplit=1)
                shown = name[0] if name else ""
                return f"Unknown command: /{shown}. Use help to list available commands."
            return None

        handler, args = found
        try:
            return handler(state, args, user_id)
        except ValidationError as e:
            return f"Error: {e}"
        except TaskNotFoundError as e:
            logger.debug("Not found: %s", e)
            return NOT_FOUND

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _no_args(args: list[str], usage: str) -> None:
    if args:
        raise ValidationError(f"Usage: {usage}")


def _load_help_file(path: Path | None) -> str | None:
    if path is None or not path.exists():
        return None
    try:
        text = path.read_text("utf-8").strip()
    except OSError:
        logger.exception("Failed to read help file %s", path)
        return None
    return text or None


def cmd_help(state: AppState, args: list[str], user_id: str) -> str:
    path = getattr(state.settings, "help_path", None)
    return _load_help_file(Path(path) if path else None) or registry.build_help()


def cmd_list(state: AppState, args: list[str], user_id: str) -> str:
    _no_args(args, "list")
    if not state.task_store.list_all(user_id):
        return EMPTY_LIST
    due = state.task_store.list_due(user_id, state.today())
    if not due:
        return NOTHING_TODAY
    return render_tasks("Your todo list for today:", due)


def cmd_full_list(state: AppState, args: list[str], user_id: str) -> str:
    _no_args(args, "full list")
    tasks = state.task_store.list_all(user_id)
    if not tasks:
        return EMPTY_LIST
    return render_tasks("Your full todo list:", tasks)


def cmd_add(state: AppState, args: list[str], user_id: str) -> str:
    req = parse_add_args(args, state.today())
    task = state.task_store.add_task(user_id, req.day, req.text)
    return render_added(task)


def cmd_delete(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 1:
        raise ValidationError("Usage: delete [ID]\nExample: delete 1")
    state.task_store.delete_task(user_id, parse_task_id(args[0]))
    return "Task deleted"


def cmd_clear(state: AppState, args: list[str], user_id: str) -> str:
    _no_args(args, "clear")
    state.task_store.clear_tasks(user_id)
    return "All tasks deleted"


def _set_repeat(state: AppState, user_id: str, task_id: int, rule: Recurrence) -> str:
    task = state.task_store.set_recurrence(user_id, task_id, rule)
    return f"Task is now repeating: {describe_recurrence(task)}"


def cmd_repeat_daily(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 1:
        raise ValidationError("Usage: repeat_daily [ID]")
    return _set_repeat(state, user_id, parse_task_id(args[0]), Daily())


def cmd_repeat_weekly(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) < 2:
        raise ValidationError(
            "Usage: repeat_weekly [ID] [week days]\nExample: repeat_weekly 1 monday wednesday friday"
        )
    task_id = parse_task_id(args[0])
    return _set_repeat(state, user_id, task_id, parse_weekly(args[1:]))


def cmd_repeat_custom(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 2:
        raise ValidationError("Usage: repeat_custom [ID] [interval in days]\nExample: repeat_custom 1 5")
    task_id = parse_task_id(args[0])
    return _set_repeat(state, user_id, task_id, parse_custom(args[1]))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["хелп", "h", "?"])
registry.register("list", cmd_list, help_text="Tasks due today.", aliases=["список"])
registry.register("full list", cmd_full_list, help_text="All your tasks.", aliases=["полный список"])
registry.register(
    "add", cmd_add, help_text="Add a task: add [dd.mm.yyyy] text.", aliases=["добавить"]
)
registry.register("delete", cmd_delete, help_text="Delete a task: delete [ID].", aliases=["удалить"])
registry.register("clear", cmd_clear, help_text="Delete all your tasks.", aliases=["очистить"])
registry.register("repeat_daily", cmd_repeat_daily, help_text="Repeat every day: repeat_daily [ID].")
registry.register(
    "repeat_weekly",
    cmd_repeat_weekly,
    help_text="Repeat on week days: repeat_weekly [ID] monday friday.",
)
registry.register(
    "repeat_custom",
    cmd_repeat_custom,
    help_text="Repeat every N days: repeat_custom [ID] [N].",
)
