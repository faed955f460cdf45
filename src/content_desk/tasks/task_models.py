# src/content_desk/tasks/task_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError

UNASSIGNED_LABEL = "Unassigned"


class TaskStatus(StrEnum):
    """Task workflow status. Stored as TEXT guarded by a CHECK constraint."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus:
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except (TypeError, ValueError):
            raise ValidationError("status_invalid", f"unknown status {raw!r}") from None


# Digest picks only these.
OPEN_STATUSES: tuple[TaskStatus, ...] = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


def parse_due(raw: Any) -> str | None:
    """
    Normalize a due date to ISO "YYYY-MM-DD".

    None and blank strings clear the date. Anything unparsable is a ValidationError.
    """
    if raw is None:
        return None
    if isinstance(raw, date):
        return raw.isoformat()
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s).isoformat()
    except ValueError:
        raise ValidationError("due_invalid", f"bad due date {raw!r}") from None


def normalize_handle(raw: str | None) -> str:
    """'  @bob ' -> 'bob'. Only one leading '@' is dropped."""
    s = (raw or "").strip()
    if s.startswith("@"):
        s = s[1:].strip()
    return s


@dataclass(frozen=True, slots=True)
class NewReference:
    url: str
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class Reference:
    id: int
    task_id: int
    url: str
    caption: str | None
    created_at: float


@dataclass(frozen=True, slots=True)
class Prerequisite:
    id: int
    title: str


@dataclass(frozen=True, slots=True)
class TaskSummary:
    """Listing projection."""

    id: int
    title: str
    due: str | None
    status: TaskStatus
    assignee: str  # handle, "" when unassigned

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d


@dataclass(frozen=True, slots=True)
class TaskView:
    """Single-task projection with references and prerequisites."""

    id: int
    title: str
    content_id: int | None
    due: str | None
    status: TaskStatus
    description: str | None
    instructions: str | None
    created_at: float
    assignee_id: int | None
    assignee: str
    refs: list[Reference] = field(default_factory=list)
    prereqs: list[Prerequisite] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d


@dataclass(frozen=True, slots=True)
class DigestRow:
    id: int
    title: str
    due: str
    assignee: str  # display name or UNASSIGNED_LABEL
