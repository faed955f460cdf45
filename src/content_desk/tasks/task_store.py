# src/content_desk/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Iterable
from typing import Any

from ..core.errors import NotFoundError, ValidationError
from ..people.person_store import PersonDirectory
from ..storage.db import Database
from .task_deps import DependencyGraph, clean_prereq_id
from .task_models import NewReference, TaskStatus, parse_due
from .task_refs import TaskReferences, clean_url

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _clean_title(title: str | None) -> str:
    if title is None or not str(title).strip():
        raise ValidationError("title_required")
    return str(title).strip()


class TaskStore:
    """
    Task records and their write paths.

    Validation runs before any statement is issued. A task is created together
    with its references and prerequisites in one transaction, so a failing
    sub-insert leaves nothing behind.
    """

    def __init__(
        self,
        db: Database,
        people: PersonDirectory,
        refs: TaskReferences,
        deps: DependencyGraph,
    ) -> None:
        self._db = db
        self._people = people
        self._refs = refs
        self._deps = deps

    def _assignee_or_unassigned(self, conn: sqlite3.Connection, handle: str | None) -> int | None:
        """Unknown handles leave the task unassigned instead of failing the request."""
        if handle is None:
            return None
        person = self._people.resolve_handle(handle, conn=conn)
        if person is None:
            if str(handle).strip():
                logger.info("Assignee handle %r not found; task left unassigned", handle)
            return None
        return person.id

    def count_tasks(self) -> int:
        with self._db.transaction() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
        return int(n)

    def create_task(
        self,
        *,
        title: str | None,
        due: Any = None,
        assignee_handle: str | None = None,
        description: str | None = None,
        instructions: str | None = None,
        refs: Iterable[NewReference] = (),
        prereq_ids: Iterable[Any] = (),
        content_id: int | None = None,
    ) -> int:
        title = _clean_title(title)
        due_s = parse_due(due)
        new_refs = [NewReference(url=clean_url(r.url), caption=r.caption) for r in refs]
        # Self-loops are impossible for a fresh id; only the shape is checked here.
        prereqs = [clean_prereq_id(0, p) for p in prereq_ids]

        with self._db.transaction() as conn:
            assignee_id = self._assignee_or_unassigned(conn, assignee_handle)
            cur = conn.execute(
                """
                INSERT INTO tasks(
                    title, content_id, assignee_id, due, status,
                    description, instructions, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    content_id,
                    assignee_id,
                    due_s,
                    TaskStatus.TODO.value,
                    description,
                    instructions,
                    time.time(),
                ),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)

            for ref in new_refs:
                self._refs.add_reference(task_id, ref.url, ref.caption, conn=conn)
            for req in prereqs:
                self._deps.add_prerequisite(task_id, req, conn=conn)

        logger.info(
            "Task created id=%s due=%s assignee_id=%s refs=%d prereqs=%d",
            task_id,
            due_s,
            assignee_id,
            len(new_refs),
            len(prereqs),
        )
        return task_id

    def partial_update(
        self,
        task_id: int,
        *,
        title: Any = _UNSET,
        due: Any = _UNSET,
        assignee_handle: Any = _UNSET,
        status: Any = _UNSET,
        description: Any = _UNSET,
        instructions: Any = _UNSET,
    ) -> None:
        """
        Write only the fields that were passed.

        Passing a field with None clears it (where the column allows it). Passing
        `assignee_handle` always rewrites the assignee, to nobody if it does not resolve.
        Nothing passed -> nothing written, still a success.
        """
        fields: list[str] = []
        params: list[Any] = []

        if title is not _UNSET:
            fields.append("title = ?")
            params.append(_clean_title(title))

        if due is not _UNSET:
            fields.append("due = ?")
            params.append(parse_due(due))

        if status is not _UNSET:
            fields.append("status = ?")
            params.append(TaskStatus.parse(status).value)

        if description is not _UNSET:
            fields.append("description = ?")
            params.append(description)

        if instructions is not _UNSET:
            fields.append("instructions = ?")
            params.append(instructions)

        if not fields and assignee_handle is _UNSET:
            return

        with self._db.transaction() as conn:
            if assignee_handle is not _UNSET:
                fields.append("assignee_id = ?")
                params.append(self._assignee_or_unassigned(conn, assignee_handle))

            sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"
            cur = conn.execute(sql, (*params, int(task_id)))
            if cur.rowcount == 0:
                raise NotFoundError(detail=f"task {task_id} not found")

        logger.debug("Task %s updated fields=%s", task_id, [f.split(" ")[0] for f in fields])
