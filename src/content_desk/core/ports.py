# src/content_desk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps connectors swappable and makes testing easier.
"""

from datetime import date
from typing import Any, Awaitable, Protocol


class OutboundMessenger(Protocol):
    """
    Connector-side port: how services (digest, command replies) send text outward.

    The connector decides how to interpret:
    - room_id (a Matrix room, a chat id, ...; can be None)
    - to_user_id (can be None)
    E.g. the Matrix connector picks its default room if room_id is missing.
    """

    def send_text(
            self,
            *,
            text: str,
            room_id: str | None = None,
            to_user_id: str | None = None,
    ) -> Awaitable[None]: ...


class DueTaskSource(Protocol):
    """Read side used by the digest: open tasks due on a given day."""

    def list_due(self, day: date) -> list[Any]: ...
