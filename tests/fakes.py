# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from content_desk.core.errors import TransportError
from content_desk.tasks.task_models import DigestRow


@dataclass(slots=True)
class SentMessage:
    text: str
    room_id: str | None
    to_user_id: str | None


@dataclass(slots=True)
class FakeMessenger:
    """OutboundMessenger that records what would have been sent."""

    sent: list[SentMessage] = field(default_factory=list)

    async def send_text(
        self,
        *,
        text: str,
        room_id: str | None = None,
        to_user_id: str | None = None,
    ) -> None:
        self.sent.append(SentMessage(text=text, room_id=room_id, to_user_id=to_user_id))


@dataclass(slots=True)
class FailingMessenger:
    attempts: int = 0

    async def send_text(
        self,
        *,
        text: str,
        room_id: str | None = None,
        to_user_id: str | None = None,
    ) -> None:
        self.attempts += 1
        raise TransportError(detail="transport is down")


class FakeDueSource:
    """DueTaskSource returning fixed rows, recording the days it was asked for."""

    def __init__(self, rows: list[DigestRow] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.days: list[date] = []

    def list_due(self, day: date) -> list[DigestRow]:
        self.days.append(day)
        if self.error is not None:
            raise self.error
        return list(self.rows)
