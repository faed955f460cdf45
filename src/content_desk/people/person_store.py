# src/content_desk/people/person_store.py

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass

from ..core.errors import ValidationError
from ..storage.db import Database
from ..tasks.task_models import normalize_handle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Person:
    id: int
    name: str
    role: str | None
    chat_id: str | None
    username: str | None
    created_at: float


class PersonDirectory:
    """
    People known to the desk, addressed by a unique handle (`username`).

    Handles are compared with SQLite's default BINARY collation, i.e. case-sensitively.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        return Person(
            id=int(row["id"]),
            name=str(row["name"]),
            role=row["role"],
            chat_id=row["chat_id"],
            username=row["username"],
            created_at=float(row["created_at"] or 0.0),
        )

    def add_person(
        self,
        *,
        name: str,
        handle: str,
        role: str | None = None,
        chat_id: str | None = None,
    ) -> int:
        if not name or not name.strip():
            raise ValidationError("name_required")
        username = normalize_handle(handle)
        if not username:
            raise ValidationError("handle_required")

        with self._db.transaction() as conn:
            taken = conn.execute("SELECT 1 FROM people WHERE username = ?", (username,)).fetchone()
            if taken:
                raise ValidationError("handle_taken", f"handle {username!r} already exists")
            cur = conn.execute(
                "INSERT INTO people(name, role, chat_id, username, created_at) VALUES (?, ?, ?, ?, ?)",
                (name.strip(), role, chat_id, username, time.time()),
            )
            person_id = int(cur.lastrowid or 0)

        logger.debug("Person added id=%s handle=%s", person_id, username)
        return person_id

    def get_person(self, person_id: int) -> Person | None:
        with self._db.transaction() as conn:
            row = conn.execute("SELECT * FROM people WHERE id = ?", (int(person_id),)).fetchone()
        return self._row_to_person(row) if row else None

    def resolve_handle(self, handle: str | None, *, conn: sqlite3.Connection | None = None) -> Person | None:
        """
        Look a person up by handle ("@bob" and "bob" are the same).

        A miss is not an error: callers decide what an unknown handle means.
        """
        username = normalize_handle(handle)
        if not username:
            return None
        with self._db.transaction(conn) as c:
            row = c.execute("SELECT * FROM people WHERE username = ?", (username,)).fetchone()
        return self._row_to_person(row) if row else None
