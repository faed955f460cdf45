# src/content_desk/connectors/matrix_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Optional, Set

from nio import AsyncClient, MatrixRoom, RoomMessageText, RoomSendResponse

from ..cli.commands import registry as command_registry
from ..core.errors import TransportError
from ..core.state import AppState
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)


def _ms_now() -> int:
    return int(time.time() * 1000)


def _room_allowlist(settings_rooms: list[str]) -> Optional[Set[str]]:
    rooms = [r.strip() for r in (settings_rooms or []) if str(r).strip()]
    return set(rooms) if rooms else None


class MatrixMessenger:
    """
    OutboundMessenger over a Matrix client.

    room_id is a Matrix room id; when missing, the configured default room is used.
    Any failure surfaces as TransportError.
    """

    def __init__(self, client: AsyncClient, default_room_id: str | None = None) -> None:
        self._client = client
        self._default_room_id = default_room_id

    async def send_text(
        self,
        *,
        text: str,
        room_id: str | None = None,
        to_user_id: str | None = None,
    ) -> None:
        target = str(room_id or self._default_room_id or "").strip()
        if not target:
            raise TransportError(detail="no Matrix room to send to")

        try:
            resp = await self._client.room_send(
                room_id=target,
                message_type="m.room.message",
                content={"msgtype": "m.text", "body": text},
                ignore_unverified_devices=True,
            )
        except Exception as e:
            raise TransportError(detail=f"room_send to {target} failed: {e!r}") from e

        if not isinstance(resp, RoomSendResponse):
            raise TransportError(detail=f"room_send to {target} rejected: {resp!r}")
        logger.debug("Matrix message sent room=%s chars=%d", target, len(text))


@dataclass
class MatrixConnector:
    client: AsyncClient
    sync_task: asyncio.Task

    async def stop(self) -> None:
        self.sync_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self.sync_task
        await self.client.close()
        logger.info("Matrix connector stopped.")


async def _sync_forever(client: AsyncClient) -> None:
    try:
        logger.info("Matrix sync loop started.")
        await client.sync_forever(timeout=30000, full_state=True)
    except asyncio.CancelledError:
        logger.info("Matrix connector cancelled.")
        raise
    except Exception:
        logger.exception("Matrix sync loop crashed.")


async def start_matrix(state: AppState) -> MatrixConnector | None:
    """
    Log in, install MatrixMessenger on the state and start listening for commands.

    Only messages starting with "/" are treated as commands; everything else in
    a room is conversation and is ignored.
    """
    settings = state.settings
    if not getattr(settings, "matrix_enabled", False):
        logger.info("Matrix connector disabled, not starting.")
        return None

    client = await create_matrix_client(settings)
    if client is None:
        logger.error("Matrix client creation failed; connector will not start.")
        return None

    allowed_rooms = _room_allowlist(getattr(settings, "matrix_rooms", []) or [])
    default_room = next(iter(getattr(settings, "matrix_rooms", []) or []), None)
    messenger = MatrixMessenger(client, default_room_id=default_room)
    state.messenger = messenger

    startup_ts = _ms_now()
    logger.info("Matrix allowed_rooms=%s", allowed_rooms if allowed_rooms is not None else "ALL")

    async def message_callback(room: MatrixRoom, event: RoomMessageText) -> None:
        # Ignore history replayed by the first sync.
        ts = getattr(event, "server_timestamp", None)
        if ts is not None and ts <= startup_ts:
            return

        if event.sender == client.user_id:
            return

        if allowed_rooms is not None and room.room_id not in allowed_rooms:
            return

        body = (event.body or "").strip()
        if not body.startswith("/"):
            return

        logger.info("Matrix command <%s> %s: %r", room.display_name, event.sender, body)

        try:
            reply = command_registry.handle(state, body, chat_id=room.room_id)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        try:
            await messenger.send_text(text=reply, room_id=room.room_id)
        except TransportError:
            logger.exception("Failed to send command reply to %s.", room.room_id)

    client.add_event_callback(message_callback, RoomMessageText)

    sync_task = asyncio.create_task(_sync_forever(client))
    logger.info("Matrix client started (user=%s).", client.user_id)
    return MatrixConnector(client=client, sync_task=sync_task)
