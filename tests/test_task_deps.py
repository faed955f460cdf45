# tests/test_task_deps.py

from __future__ import annotations

import pytest

from content_desk.core.errors import NotFoundError, ValidationError


def _edge_count(state, task_id: int) -> int:
    with state.db.transaction() as conn:
        return conn.execute("SELECT COUNT(*) FROM task_deps WHERE task_id = ?", (task_id,)).fetchone()[0]


def test_duplicate_edge_is_a_noop(state) -> None:
    a = state.tasks.create_task(title="A")
    b = state.tasks.create_task(title="B")

    state.deps.add_prerequisite(a, b)
    state.deps.add_prerequisite(a, b)

    assert _edge_count(state, a) == 1
    assert [p.id for p in state.deps.list_prerequisites(a)] == [b]


def test_self_dependency_rejected(state) -> None:
    a = state.tasks.create_task(title="A")
    with pytest.raises(ValidationError) as ei:
        state.deps.add_prerequisite(a, a)
    assert ei.value.code == "self_dependency"
    assert _edge_count(state, a) == 0


@pytest.mark.parametrize("req", [None, 0, "", "abc", -3, "1.7", 1.7, 1.0, True, [1]])
def test_missing_prerequisite_id(state, req) -> None:
    a = state.tasks.create_task(title="A")
    with pytest.raises(ValidationError) as ei:
        state.deps.add_prerequisite(a, req)
    assert ei.value.code == "requires_task_id_required"


def test_unknown_endpoints(state) -> None:
    a = state.tasks.create_task(title="A")
    with pytest.raises(NotFoundError):
        state.deps.add_prerequisite(a, 999)
    with pytest.raises(NotFoundError):
        state.deps.add_prerequisite(999, a)


def test_two_task_cycle_is_accepted(state) -> None:
    a = state.tasks.create_task(title="A")
    b = state.tasks.create_task(title="B")
    state.deps.add_prerequisite(a, b)
    state.deps.add_prerequisite(b, a)
    assert [p.id for p in state.deps.list_prerequisites(b)] == [a]


def test_edges_cascade_with_task(state) -> None:
    a = state.tasks.create_task(title="A")
    b = state.tasks.create_task(title="B")
    state.deps.add_prerequisite(a, b)
    state.refs.add_reference(b, "https://ref")

    with state.db.transaction() as conn:
        conn.execute("DELETE FROM tasks WHERE id = ?", (b,))

    assert _edge_count(state, a) == 0
    assert state.refs.list_references(b) == []


def test_add_reference_validation(state) -> None:
    a = state.tasks.create_task(title="A")
    with pytest.raises(ValidationError) as ei:
        state.refs.add_reference(a, "")
    assert ei.value.code == "url_required"
    with pytest.raises(NotFoundError):
        state.refs.add_reference(999, "https://x")

    state.refs.add_reference(a, "https://x", "one")
    state.refs.add_reference(a, "https://x")
    refs = state.refs.list_references(a)
    assert [(r.url, r.caption) for r in refs] == [("https://x", "one"), ("https://x", None)]


def test_fractional_id_does_not_link_a_task(state) -> None:
    a = state.tasks.create_task(title="a")
    b = state.tasks.create_task(title="b")
    with pytest.raises(ValidationError):
        state.deps.add_prerequisite(b, float(a) + 0.7)
    assert state.deps.list_prerequisites(b) == []


def test_decimal_string_id_is_accepted(state) -> None:
    a = state.tasks.create_task(title="a")
    b = state.tasks.create_task(title="b")
    state.deps.add_prerequisite(b, f" {a} ")
    assert [p.id for p in state.deps.list_prerequisites(b)] == [a]
