# src/content_desk/content/content_store.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ..core.errors import ValidationError
from ..storage.db import Database

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TITLE = "Untitled"


@dataclass(frozen=True, slots=True)
class ContentItem:
    id: int
    title: str
    created_at: float


class ContentStore:
    """Content items: the pieces of work tasks are grouped under."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def add_item(self, title: str) -> int:
        if not title or not title.strip():
            raise ValidationError("title_required")
        with self._db.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO content_items(title, created_at) VALUES (?, ?)",
                (title.strip(), time.time()),
            )
            item_id = int(cur.lastrowid or 0)
        logger.info("Content item added id=%s title=%r", item_id, title)
        return item_id

    def get_item(self, item_id: int) -> ContentItem | None:
        with self._db.transaction() as conn:
            row = conn.execute("SELECT * FROM content_items WHERE id = ?", (int(item_id),)).fetchone()
        if not row:
            return None
        return ContentItem(id=int(row["id"]), title=str(row["title"]), created_at=float(row["created_at"]))

    def count_items(self) -> int:
        with self._db.transaction() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM content_items").fetchone()
        return int(n)
