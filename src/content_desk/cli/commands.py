# src/content_desk/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..content.content_store import DEFAULT_CONTENT_TITLE
from ..core.state import AppState

# (state, text after the command token, chat id) -> reply
CommandHandler = Callable[[AppState, str, str | None], str]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Command:
    name: str
    handler: CommandHandler
    exact: bool


class CommandRegistry:
    """
    Chat command registry shared by every chat client (webhook, Matrix, console).

    Prefix commands match any text starting with "/name" and receive the rest
    of the text; exact commands match only the bare "/name". Text matching no
    command gets the help reply.
    """

    def __init__(self) -> None:
        self._commands: list[_Command] = []

    def register(self, name: str, handler: CommandHandler, *, exact: bool = False) -> None:
        self._commands.append(_Command(name=name.lower(), handler=handler, exact=exact))

    def match(self, text: str) -> tuple[_Command, str] | None:
        for cmd in self._commands:
            token = f"/{cmd.name}"
            if cmd.exact:
                if text == token:
                    return cmd, ""
            elif text.startswith(token):
                return cmd, text[len(token):].strip()
        return None

    def handle(self, state: AppState, line: str, chat_id: str | None = None) -> str:
        """
        Handle one inbound message and return the reply text.

        Store errors propagate; the connector decides how to report them.
        """
        text = (line or "").strip()
        found = self.match(text)
        if found is None:
            return self.build_help()
        cmd, rest = found
        logger.debug("Command /%s chat_id=%s", cmd.name, chat_id)
        return cmd.handler(state, rest, chat_id)

    def build_help(self) -> str:
        names = " or ".join(f"/{c.name}" for c in self._commands)
        return f"Command received ✅ ( {names} )"


registry = CommandRegistry()


def cmd_newcontent(state: AppState, rest: str, chat_id: str | None) -> str:
    """/newcontent <title> -> store a content item (empty title -> "Untitled")."""
    title = rest.strip() or DEFAULT_CONTENT_TITLE
    state.content.add_item(title)
    return f"✅ Content saved: {title}"


def cmd_id(state: AppState, rest: str, chat_id: str | None) -> str:
    return f"Chat ID: {chat_id}"


registry.register("newcontent", cmd_newcontent)
registry.register("id", cmd_id, exact=True)
