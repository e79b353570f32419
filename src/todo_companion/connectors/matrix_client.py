# src/todo_companion/connectors/matrix_client.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"
SESSION_KEYS = ("access_token", "user_id", "device_id")


def read_session(store_dir: Path) -> dict[str, str] | None:
    """Saved login (access token + device) or None if absent/incomplete."""
    path = store_dir / SESSION_FILE
    if not path.exists():
        return None
    try:
        data: Any = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError):
        logger.warning("Unreadable Matrix session file %s; ignoring it", path, exc_info=True)
        return None
    if not isinstance(data, dict) or not all(data.get(k) for k in SESSION_KEYS):
        logger.warning("Matrix session file %s is missing fields; ignoring it", path)
        return None
    return {k: str(data[k]) for k in SESSION_KEYS}


def write_session(store_dir: Path, session: dict[str, str]) -> None:
    store_dir.mkdir(parents=True, exist_ok=True)
    path = store_dir / SESSION_FILE
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(session, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(Exception):
        # Access token: keep it private.
        os.chmod(path, 0o600)


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Log the bot into Matrix.

    A saved session (<matrix_store_path>/session.json) is reused across restarts; the
    password is only needed once to bootstrap it. Rooms are unencrypted (no E2EE store).
    """
    homeserver = (settings.matrix_homeserver or "").strip()
    user_id = (settings.matrix_user_id or "").strip()
    password = (settings.matrix_password or "").strip()
    store_dir = Path(settings.matrix_store_path)

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set TODO_MATRIX_HOMESERVER and TODO_MATRIX_USER_ID")
        return None

    client = AsyncClient(
        homeserver,
        user_id,
        config=AsyncClientConfig(encryption_enabled=False, store_sync_tokens=False),
    )

    session = read_session(store_dir)
    if session is not None:
        client.access_token = session["access_token"]
        client.user_id = session["user_id"]
        client.device_id = session["device_id"]
        logger.info("Matrix session restored for %s", client.user_id)
        return client

    if not password:
        logger.error(
            "No saved Matrix session and TODO_MATRIX_PASSWORD is not set; cannot log in."
        )
        await client.close()
        return None

    device_name = f"{settings.app_name} (Python)"
    logger.info("Logging in to Matrix (device_name=%r)...", device_name)
    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    try:
        write_session(
            store_dir,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
        logger.info("Matrix session saved to %s (user=%s)", store_dir / SESSION_FILE, resp.user_id)
    except OSError:
        # Still usable for this run; the next start will log in again.
        logger.exception("Failed to save Matrix session to %s", store_dir)

    return client
