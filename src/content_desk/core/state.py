# src/content_desk/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..content.content_store import ContentStore
from ..people.person_store import PersonDirectory
from ..storage.db import Database
from ..tasks.task_deps import DependencyGraph
from ..tasks.task_queries import TaskQueries
from ..tasks.task_refs import TaskReferences
from ..tasks.task_store import TaskStore
from .ports import OutboundMessenger


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    db: Database
    people: PersonDirectory
    content: ContentStore
    tasks: TaskStore
    refs: TaskReferences
    deps: DependencyGraph
    queries: TaskQueries

    # Replaced by the Matrix connector once it is logged in.
    messenger: OutboundMessenger | None = None

    background: list[Any] = field(default_factory=list)
