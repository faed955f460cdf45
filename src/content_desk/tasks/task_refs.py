# src/content_desk/tasks/task_refs.py

from __future__ import annotations

import logging
import sqlite3
import time

from ..core.errors import NotFoundError, ValidationError
from ..storage.db import Database
from .task_models import Reference

logger = logging.getLogger(__name__)


def _task_exists(conn: sqlite3.Connection, task_id: int) -> bool:
    return conn.execute("SELECT 1 FROM tasks WHERE id = ?", (int(task_id),)).fetchone() is not None


def clean_url(url: str | None) -> str:
    s = (url or "").strip()
    if not s:
        raise ValidationError("url_required")
    return s


class TaskReferences:
    """URL references attached to a task. Duplicates are allowed; rows are never edited."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def add_reference(
        self,
        task_id: int,
        url: str | None,
        caption: str | None = None,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        url = clean_url(url)

        with self._db.transaction(conn) as c:
            if not _task_exists(c, task_id):
                raise NotFoundError(detail=f"task {task_id} not found")
            cur = c.execute(
                "INSERT INTO task_refs(task_id, url, caption, created_at) VALUES (?, ?, ?, ?)",
                (int(task_id), url, caption, time.time()),
            )
            ref_id = int(cur.lastrowid or 0)

        logger.debug("Reference added id=%s task_id=%s url=%s", ref_id, task_id, url)
        return ref_id

    def list_references(self, task_id: int, *, conn: sqlite3.Connection | None = None) -> list[Reference]:
        with self._db.transaction(conn) as c:
            rows = c.execute(
                "SELECT * FROM task_refs WHERE task_id = ? ORDER BY id ASC",
                (int(task_id),),
            ).fetchall()
        return [
            Reference(
                id=int(r["id"]),
                task_id=int(r["task_id"]),
                url=str(r["url"]),
                caption=r["caption"],
                created_at=float(r["created_at"] or 0.0),
            )
            for r in rows
        ]
