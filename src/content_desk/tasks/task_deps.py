# src/content_desk/tasks/task_deps.py

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Any

from ..core.errors import NotFoundError, ValidationError
from ..storage.db import Database
from .task_models import Prerequisite

logger = logging.getLogger(__name__)


def clean_prereq_id(task_id: int, requires_task_id: Any) -> int:
    """
    Validate one edge before it is written.

    Ids are positive ints or their decimal string form; floats and bools are
    rejected rather than truncated. Only self-loops are rejected; longer cycles
    (A -> B -> A) are accepted.
    """
    raw = requires_task_id
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValidationError("requires_task_id_required", f"bad id {requires_task_id!r}")
    req = raw
    if req <= 0:
        raise ValidationError("requires_task_id_required")
    if req == int(task_id):
        raise ValidationError("self_dependency", f"task {task_id} cannot require itself")
    return req


class DependencyGraph:
    """
    Directed prerequisite edges between tasks (task_id requires requires_task_id).

    - no self-loops (validated here, also a CHECK in the schema)
    - one row per ordered pair; inserting an existing edge is a no-op
    - edges disappear with either endpoint (ON DELETE CASCADE)
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def add_prerequisite(
        self,
        task_id: int,
        requires_task_id: Any,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        req = clean_prereq_id(task_id, requires_task_id)

        with self._db.transaction(conn) as c:
            found = {
                int(r["id"])
                for r in c.execute(
                    "SELECT id FROM tasks WHERE id IN (?, ?)", (int(task_id), req)
                ).fetchall()
            }
            for tid in (int(task_id), req):
                if tid not in found:
                    raise NotFoundError(detail=f"task {tid} not found")

            try:
                cur = c.execute(
                    """
                    INSERT INTO task_deps(task_id, requires_task_id, created_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(task_id, requires_task_id) DO NOTHING
                    """,
                    (int(task_id), req, time.time()),
                )
            except sqlite3.IntegrityError as e:
                if "CHECK" in str(e).upper():
                    raise ValidationError("self_dependency", str(e)) from e
                raise

        if cur.rowcount == 0:
            logger.debug("Prerequisite %s -> %s already present", task_id, req)
        else:
            logger.debug("Prerequisite added %s -> %s", task_id, req)

    def list_prerequisites(self, task_id: int, *, conn: sqlite3.Connection | None = None) -> list[Prerequisite]:
        with self._db.transaction(conn) as c:
            rows = c.execute(
                """
                SELECT t.id, t.title
                FROM task_deps d
                JOIN tasks t ON t.id = d.requires_task_id
                WHERE d.task_id = ?
                ORDER BY t.id ASC
                """,
                (int(task_id),),
            ).fetchall()
        return [Prerequisite(id=int(r["id"]), title=str(r["title"])) for r in rows]
