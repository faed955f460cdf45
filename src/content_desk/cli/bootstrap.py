# src/content_desk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the database, stores and the default messenger into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.console_connector import ConsoleMessenger
from ..content.content_store import ContentStore
from ..core.state import AppState
from ..people.person_store import PersonDirectory
from ..storage.db import Database
from ..tasks.task_deps import DependencyGraph
from ..tasks.task_queries import TaskQueries
from ..tasks.task_refs import TaskReferences
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    if getattr(settings, "matrix_enabled", False):
        settings.matrix_store_path.mkdir(parents=True, exist_ok=True)


def build_state(settings, db: Database) -> AppState:
    """Wire all stores over one Database. Used by the CLI and by tests."""
    people = PersonDirectory(db)
    refs = TaskReferences(db)
    deps = DependencyGraph(db)
    return AppState(
        settings=settings,
        db=db,
        people=people,
        content=ContentStore(db),
        tasks=TaskStore(db, people, refs, deps),
        refs=refs,
        deps=deps,
        queries=TaskQueries(db, refs, deps),
        messenger=ConsoleMessenger(),
    )


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = build_state(settings, Database(settings.db_path))
    logger.info("State ready db=%s tasks=%d", settings.db_path, state.tasks.count_tasks())
    return state
