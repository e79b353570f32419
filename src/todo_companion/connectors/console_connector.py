# src/todo_companion/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("/exit", "/quit", "exit", "quit")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def handle_console_line(
    state: AppState,
    line: str,
    *,
    user_id: str,
    registry: CommandRegistry = command_registry,
) -> str:
    """One REPL turn: always returns something to print (plain text is not a chat here)."""
    try:
        reply = registry.handle(state, line, user_id)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if reply is None:
        return "Unknown command. Type help to list available commands."
    return reply


def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    user_id = str(getattr(state.settings, "console_user_id", "console"))
    logger.info("Console connector started (user_id=%s).", user_id)
    write(f"[{_ts_local()}] [CONSOLE] Type a command (help for the list). Use /exit to quit.\n")

    while True:
        try:
            line = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if not line:
            continue

        if line.lower() in EXIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        write(f"[{_ts_local()}] {handle_console_line(state, line, user_id=user_id)}")

    logger.info("Console connector finished.")
