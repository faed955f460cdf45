# src/content_desk/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one of:
- serve   : HTTP API (+ Matrix connector and digest scheduler when configured)
- console : local REPL for chat commands
- digest  : build and send today's digest once
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.errors import DeskError
from ..core.state import AppState
from ..digest.digest import send_digest
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _serve(state: AppState, host: str, port: int) -> int:
    import uvicorn

    from ..api.app import create_app

    settings = state.settings
    logger.info(
        "App listening on %s:%s (%s)",
        host,
        port,
        getattr(settings, "public_app_url", "") or "no-domain",
    )
    uvicorn.run(create_app(state), host=host, port=port, log_config=None)
    return 0


def _digest_once(state: AppState) -> int:
    try:
        result = asyncio.run(
            send_digest(
                state.queries,
                state.messenger,
                destination_id=getattr(state.settings, "digest_chat_id", None),
            )
        )
    except DeskError:
        logger.exception("Digest failed.")
        return 1
    # A sent digest already went through the messenger (the console one prints it).
    if not result.sent:
        print(result.text)
    return 0


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="content-desk", description="Content task desk")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    sub.add_parser("console", help="Type chat commands locally")
    sub.add_parser("digest", help="Send today's digest once and print it")
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("nio").setLevel(max(console_level, logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except DeskError:
        logger.exception("Cannot open the database.")
        return 1

    try:
        if args.command == "console":
            run_console_loop(state)
            return 0
        if args.command == "digest":
            return _digest_once(state)
        host = getattr(args, "host", settings.host)
        port = getattr(args, "port", settings.port)
        return _serve(state, host, port)
    finally:
        state.db.close()
        logger.info("Bye.")


if __name__ == "__main__":
    sys.exit(main())
