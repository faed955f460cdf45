# tests/test_person_store.py

from __future__ import annotations

import pytest

from content_desk.core.errors import ValidationError


def test_resolve_handle_with_and_without_at(state, people) -> None:
    a = state.people.resolve_handle("@bob")
    b = state.people.resolve_handle("bob")
    c = state.people.resolve_handle("  @bob  ")
    assert a is not None
    assert a == b == c
    assert a.id == people["bob"]
    assert a.chat_id == "42"


def test_resolve_handle_miss_is_none(state, people) -> None:
    assert state.people.resolve_handle("carol") is None
    assert state.people.resolve_handle("") is None
    assert state.people.resolve_handle("@") is None
    assert state.people.resolve_handle(None) is None


def test_resolve_handle_is_case_sensitive(state, people) -> None:
    assert state.people.resolve_handle("Alice") is None


def test_add_person_rejects_duplicate_and_blank(state, people) -> None:
    with pytest.raises(ValidationError) as ei:
        state.people.add_person(name="Alice Again", handle="@alice")
    assert ei.value.code == "handle_taken"

    with pytest.raises(ValidationError):
        state.people.add_person(name="  ", handle="zed")
    with pytest.raises(ValidationError):
        state.people.add_person(name="Zed", handle="@ ")


def test_deleting_person_unassigns_tasks(state, people) -> None:
    task_id = state.tasks.create_task(title="Draft", assignee_handle="alice")
    assert state.queries.get_task(task_id).assignee == "alice"

    with state.db.transaction() as conn:
        conn.execute("DELETE FROM people WHERE id = ?", (people["alice"],))

    view = state.queries.get_task(task_id)
    assert view.assignee == ""
    assert view.assignee_id is None


def test_get_person(state, people) -> None:
    bob = state.people.get_person(people["bob"])
    assert bob is not None
    assert (bob.name, bob.username, bob.role) == ("bob", "bob", "editor")
    assert state.people.get_person(9999) is None
