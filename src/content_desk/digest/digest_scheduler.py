# src/content_desk/digest/digest_scheduler.py

from __future__ import annotations

"""
Digest scheduler.

A small polling loop that sends the digest once per calendar day, as soon as
the local clock passes the configured time. A failed run is logged and the day
is still considered done: there is no automatic retry.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, time

from ..core.ports import DueTaskSource, OutboundMessenger
from .digest import send_digest

logger = logging.getLogger(__name__)


def is_due(now: datetime, at: time, last_sent: date | None) -> bool:
    return now.time() >= at and last_sent != now.date()


async def run_digest_scheduler(
        source: DueTaskSource,
        messenger: OutboundMessenger,
        *,
        destination_id: str | None,
        at: time,
        interval_seconds: float = 30.0,
        clock: Callable[[], datetime] = datetime.now,
) -> None:
    """
    Every interval_seconds:
    - if today's digest was not sent yet and the clock is past `at`, send it
    - remember the day whatever the outcome

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    last_sent: date | None = None

    logger.info("Digest scheduler started at=%s destination=%s", at.strftime("%H:%M"), destination_id)

    while True:
        now = clock()
        if is_due(now, at, last_sent):
            last_sent = now.date()
            try:
                result = await send_digest(
                    source,
                    messenger,
                    destination_id=destination_id,
                    today=now.date(),
                )
                logger.info("Scheduled digest done sent=%s count=%d", result.sent, result.count)
            except Exception:
                logger.exception("Scheduled digest failed for %s", now.date())

        await asyncio.sleep(sleep_s)
