# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from content_desk.cli.bootstrap import build_state
from content_desk.core.state import AppState
from content_desk.storage.db import Database

from .fakes import FakeMessenger


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the API.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="content-desk-test",
        data_dir=tmp_path,
        db_path=tmp_path / "desk.sqlite3",
        digest_chat_id="room-digest",
        digest_time=None,
        matrix_enabled=False,
        matrix_rooms=[],
    )


@pytest.fixture()
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture()
def state(settings: SimpleNamespace, messenger: FakeMessenger) -> AppState:
    """
    AppState over a real SQLite file in tmp_path, with a recording messenger.

    The stores are real because their SQL is what we want to test.
    """
    st = build_state(settings, Database(settings.db_path))
    st.messenger = messenger
    return st


@pytest.fixture()
def people(state: AppState) -> dict[str, int]:
    return {
        "alice": state.people.add_person(name="alice", handle="alice", role="writer"),
        "bob": state.people.add_person(name="bob", handle="@bob", role="editor", chat_id="42"),
    }


def raw_task_row(state: AppState, task_id: int) -> tuple | None:
    with state.db.transaction() as conn:
        row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
    return tuple(row) if row else None
