# src/content_desk/storage/db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import StorageError
from ..tasks.task_models import TaskStatus

logger = logging.getLogger(__name__)

_STATUS_CHECK = ", ".join(f"'{s.value}'" for s in TaskStatus)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS people (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    role TEXT,
    chat_id TEXT,
    username TEXT UNIQUE,
    created_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS content_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    created_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL CHECK (title <> ''),
    content_id INTEGER REFERENCES content_items(id) ON DELETE SET NULL,
    assignee_id INTEGER REFERENCES people(id) ON DELETE SET NULL,
    due TEXT,
    status TEXT NOT NULL DEFAULT 'todo' CHECK (status IN ({_STATUS_CHECK})),
    description TEXT,
    instructions TEXT,
    created_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due);
CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);

CREATE TABLE IF NOT EXISTS task_refs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
    url TEXT NOT NULL,
    caption TEXT,
    created_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_task_refs_task ON task_refs(task_id);

CREATE TABLE IF NOT EXISTS task_deps (
    task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
    requires_task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
    created_at REAL NOT NULL,
    PRIMARY KEY (task_id, requires_task_id),
    CHECK (task_id <> requires_task_id)
);
"""


class Database:
    """
    SQLite database shared by all stores.

    - schema is provisioned idempotently on construction (safe on every start)
    - each logical operation opens its own connection and closes it
    - foreign keys are enforced on every connection
    - transaction() is the only write path: commit on success, rollback on any error
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("Database ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(detail=f"cannot open {self._db_path}: {e}") from e
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(detail=f"schema provisioning failed: {e}") from e
        finally:
            conn.close()

    @contextlib.contextmanager
    def transaction(self, conn: sqlite3.Connection | None = None) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection inside a transaction.

        When `conn` is given the caller already owns a transaction: it is yielded
        as-is and commit/rollback stay with the outer block.
        """
        if conn is not None:
            yield conn
            return

        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            logger.exception("SQLite connect failed db=%s", self._db_path)
            raise StorageError(detail=str(e)) from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("SQLite statement failed db=%s", self._db_path)
            raise StorageError(detail=str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
