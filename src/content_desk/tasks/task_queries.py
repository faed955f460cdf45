# src/content_desk/tasks/task_queries.py

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..storage.db import Database
from .task_deps import DependencyGraph
from .task_models import (
    OPEN_STATUSES,
    UNASSIGNED_LABEL,
    DigestRow,
    TaskStatus,
    TaskSummary,
    TaskView,
    normalize_handle,
    parse_due,
)
from .task_refs import TaskReferences

logger = logging.getLogger(__name__)


class TaskQueries:
    """Read side: listings, single-task views and the digest selection."""

    def __init__(self, db: Database, refs: TaskReferences, deps: DependencyGraph) -> None:
        self._db = db
        self._refs = refs
        self._deps = deps

    def list_tasks(
        self,
        *,
        status: Any = None,
        due: Any = None,
        assignee: str | None = None,
    ) -> list[TaskSummary]:
        """
        List tasks, optionally filtered (filters are ANDed).

        Order: due ascending with undated tasks last, then newest id first.
        """
        where: list[str] = []
        params: list[Any] = []

        if status is not None and str(status).strip():
            where.append("t.status = ?")
            params.append(TaskStatus.parse(status).value)

        due_s = parse_due(due)
        if due_s is not None:
            where.append("t.due = ?")
            params.append(due_s)

        handle = normalize_handle(assignee)
        if handle:
            where.append("p.username = ?")
            params.append(handle)

        sql = """
            SELECT t.id, t.title, t.due, t.status, COALESCE(p.username, '') AS assignee
            FROM tasks t
            LEFT JOIN people p ON p.id = t.assignee_id
        """
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY t.due IS NULL, t.due ASC, t.id DESC"

        with self._db.transaction() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [
            TaskSummary(
                id=int(r["id"]),
                title=str(r["title"]),
                due=r["due"],
                status=TaskStatus(r["status"]),
                assignee=str(r["assignee"]),
            )
            for r in rows
        ]

    def get_task(self, task_id: int) -> TaskView | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                """
                SELECT t.*, COALESCE(p.username, '') AS assignee
                FROM tasks t
                LEFT JOIN people p ON p.id = t.assignee_id
                WHERE t.id = ?
                """,
                (int(task_id),),
            ).fetchone()
            if row is None:
                return None
            refs = self._refs.list_references(task_id, conn=conn)
            prereqs = self._deps.list_prerequisites(task_id, conn=conn)

        return TaskView(
            id=int(row["id"]),
            title=str(row["title"]),
            content_id=row["content_id"],
            due=row["due"],
            status=TaskStatus(row["status"]),
            description=row["description"],
            instructions=row["instructions"],
            created_at=float(row["created_at"] or 0.0),
            assignee_id=row["assignee_id"],
            assignee=str(row["assignee"]),
            refs=refs,
            prereqs=prereqs,
        )

    def list_due(self, day: date) -> list[DigestRow]:
        """Open tasks due on `day`, ordered by assignee label then id."""
        placeholders = ",".join("?" for _ in OPEN_STATUSES)
        with self._db.transaction() as conn:
            rows = conn.execute(
                f"""
                SELECT t.id, t.title, t.due, COALESCE(p.name, ?) AS assignee
                FROM tasks t
                LEFT JOIN people p ON p.id = t.assignee_id
                WHERE t.status IN ({placeholders}) AND t.due = ?
                ORDER BY assignee, t.id
                """,
                (UNASSIGNED_LABEL, *(s.value for s in OPEN_STATUSES), day.isoformat()),
            ).fetchall()
        return [
            DigestRow(id=int(r["id"]), title=str(r["title"]), due=str(r["due"]), assignee=str(r["assignee"]))
            for r in rows
        ]
