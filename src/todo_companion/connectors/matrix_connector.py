# src/todo_companion/connectors/matrix_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nio import MatrixRoom, RoomMessageText

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)

MessageCallback = Callable[[MatrixRoom, RoomMessageText], Awaitable[None]]


def _ms_now() -> int:
    return int(time.time() * 1000)


def room_allowlist(rooms: list[str] | None) -> set[str] | None:
    cleaned = {str(r).strip() for r in (rooms or []) if str(r).strip()}
    return cleaned or None


async def send_text(client, *, room_id: str, text: str) -> None:
    await client.room_send(
        room_id=room_id,
        message_type="m.room.message",
        content={"msgtype": "m.text", "body": text},
    )


def make_message_callback(
    state: AppState,
    client,
    *,
    startup_ts: int,
    allowed_rooms: set[str] | None = None,
    registry: CommandRegistry = command_registry,
) -> MessageCallback:
    """
    Build the RoomMessageText callback.

    The task owner is the message sender (Matrix user id), so the same user sees the
    same list from any room. Non-command text is ignored.
    """

    async def on_message(room: MatrixRoom, event: RoomMessageText) -> None:
        # Skip history replayed by the first sync.
        ts = getattr(event, "server_timestamp", None)
        if ts is not None and ts <= startup_ts:
            return

        if event.sender == client.user_id:
            return

        if allowed_rooms is not None and room.room_id not in allowed_rooms:
            return

        body = (event.body or "").strip()
        if not body:
            return

        try:
            reply = registry.handle(state, body, event.sender)
        except Exception:
            logger.exception("Command handler crashed (room=%s sender=%s).", room.room_id, event.sender)
            reply = "Internal error while handling a command."

        if not reply:
            return

        logger.info("Matrix <%s> %s: %r", room.display_name, event.sender, body)
        try:
            await send_text(client, room_id=room.room_id, text=reply)
        except Exception:
            logger.exception("Failed to send reply to room %s.", room.room_id)

    return on_message


async def _run_matrix_bot(state: AppState, stop_event: asyncio.Event) -> None:
    """
    Matrix connector: login -> callbacks -> sync loop until stop_event is set.

    The main thread sets stop_event via loop.call_soon_threadsafe(stop_event.set);
    the manual sync loop lets us exit promptly.
    """
    settings = state.settings
    allowed_rooms = room_allowlist(getattr(settings, "matrix_rooms", None))
    logger.info("Matrix allowed_rooms=%s", allowed_rooms if allowed_rooms is not None else "ALL")

    client = await create_matrix_client(settings)
    if client is None:
        logger.error("Matrix client creation failed; connector will stop.")
        return

    client.add_event_callback(
        make_message_callback(state, client, startup_ts=_ms_now(), allowed_rooms=allowed_rooms),
        RoomMessageText,
    )

    try:
        logger.info("Matrix initial sync...")
        await client.sync(timeout=30000, full_state=True)
        logger.info("Matrix initial sync done. Joined rooms: %d", len(client.rooms))

        while not stop_event.is_set():
            await client.sync(timeout=30000, full_state=False)
    except asyncio.CancelledError:
        logger.info("Matrix connector cancelled.")
    except Exception:
        logger.exception("Matrix connector crashed.")
    finally:
        with contextlib.suppress(Exception):
            await client.close()
        logger.info("Matrix connector stopped.")


@dataclass
class MatrixBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            # Loop already closed: the connector has exited on its own.
            logger.debug("Matrix loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_matrix_in_background(state: AppState) -> MatrixBackgroundRunner | None:
    """
    Start the Matrix connector in a daemon thread with its own event loop,
    so the blocking console REPL can run in parallel.
    """
    settings = state.settings
    if not settings.matrix_homeserver or not settings.matrix_user_id:
        logger.error("Matrix is enabled but not configured (homeserver/user_id).")
        return None

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_matrix_bot(state, stop_event))
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="matrix-connector", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Matrix thread did not initialize properly.")
        return None

    logger.info("Matrix background thread started.")
    return MatrixBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
