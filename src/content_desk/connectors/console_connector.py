# src/content_desk/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

CONSOLE_CHAT_ID = "console"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleMessenger:
    """
    OutboundMessenger that prints to stdout.

    Used whenever no remote transport is connected, so digests and replies stay visible.
    """

    async def send_text(
        self,
        *,
        text: str,
        room_id: str | None = None,
        to_user_id: str | None = None,
    ) -> None:
        target = room_id or to_user_id or "-"
        _print_ts(f"<<< [{target}] {text}")


def run_console_loop(state: AppState) -> None:
    """Local chat client: every line goes through the same command registry as the webhook."""
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type chat commands (/newcontent <title>, /id). Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input, chat_id=CONSOLE_CHAT_ID)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        _print_ts(reply)

    logger.info("Console connector finished.")
