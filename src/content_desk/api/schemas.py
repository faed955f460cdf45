# src/content_desk/api/schemas.py

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..tasks.task_models import NewReference


class RefIn(BaseModel):
    url: Optional[str] = None
    caption: Optional[str] = None

    def to_new_reference(self) -> NewReference:
        return NewReference(url=self.url or "", caption=self.caption)


class TaskCreate(BaseModel):
    # Optional here so a missing title reaches the store and becomes "title_required".
    title: Optional[str] = None
    due: Optional[str] = None
    assignee_username: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    refs: list[RefIn] = Field(default_factory=list)
    prereq_ids: list[Any] = Field(default_factory=list)


# body field -> TaskStore.partial_update keyword
_PATCH_FIELDS = {
    "title": "title",
    "due": "due",
    "assignee_username": "assignee_handle",
    "status": "status",
    "description": "description",
    "instructions": "instructions",
}


class TaskPatch(BaseModel):
    title: Optional[str] = None
    due: Optional[str] = None
    assignee_username: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent; an explicit null counts as sent."""
        return {_PATCH_FIELDS[name]: getattr(self, name) for name in self.model_fields_set if name in _PATCH_FIELDS}


class PrereqIn(BaseModel):
    requires_task_id: Optional[Any] = None
