# src/content_desk/digest/digest.py

from __future__ import annotations

"""
Daily digest.

Selects open tasks due today, renders one line per task and hands the text to
the outbound messenger. The digest never writes to the database; sending it
twice sends two messages.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from ..core.ports import DueTaskSource, OutboundMessenger
from ..tasks.task_models import DigestRow

logger = logging.getLogger(__name__)

DIGEST_HEADER = "🗓 Today's report:"
NOTHING_DUE_LINE = "No tasks due today."


@dataclass(slots=True, frozen=True)
class DigestResult:
    sent: bool
    count: int
    text: str
    lines: list[str]


def render_line(row: DigestRow) -> str:
    return f"• [{row.assignee}] {row.title} ({row.due})"


def render_digest(rows: Sequence[DigestRow]) -> tuple[str, list[str]]:
    """Return (full message, body lines). An empty day still yields one line."""
    lines = [render_line(r) for r in rows] if rows else [NOTHING_DUE_LINE]
    return DIGEST_HEADER + "\n" + "\n".join(lines), lines


async def send_digest(
        source: DueTaskSource,
        messenger: OutboundMessenger | None,
        *,
        destination_id: str | None,
        today: date | None = None,
) -> DigestResult:
    """
    Build today's digest and send it to destination_id.

    - storage errors propagate (the caller answers with a failure)
    - transport errors are logged here and do not change the result:
      `sent` means "delivery was attempted"
    - nothing is sent when no destination is configured
    """
    day = today or date.today()
    rows = source.list_due(day)
    text, lines = render_digest(rows)

    sent = False
    if destination_id and messenger is not None:
        sent = True
        try:
            await messenger.send_text(text=text, room_id=destination_id)
            logger.info("Digest for %s sent to %s (%d tasks)", day, destination_id, len(rows))
        except Exception:
            logger.exception("Digest dispatch failed destination=%s", destination_id)
    else:
        logger.info("Digest for %s built (%d tasks); no destination configured", day, len(rows))

    return DigestResult(sent=sent, count=len(rows), text=text, lines=lines)
