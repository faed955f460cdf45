# tests/test_api.py

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from content_desk.api.app import create_app
from content_desk.core.errors import StorageError


@pytest.fixture()
def client(state):
    with TestClient(create_app(state)) as c:
        yield c


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"ok": True}


def test_create_and_read_task(client, people) -> None:
    pre = client.post("/api/task", json={"title": "Research"}).json()["id"]
    resp = client.post(
        "/api/task",
        json={
            "title": "Draft",
            "due": "2026-10-19",
            "assignee_username": "@alice",
            "description": "first pass",
            "refs": [{"url": "https://docs.example/brief", "caption": "brief"}],
            "prereq_ids": [pre],
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True

    view = client.get(f"/api/task/{body['id']}").json()
    assert view["title"] == "Draft"
    assert view["assignee"] == "alice"
    assert view["status"] == "todo"
    assert view["refs"][0]["url"] == "https://docs.example/brief"
    assert view["prereqs"] == [{"id": pre, "title": "Research"}]


def test_create_requires_title(client, state) -> None:
    resp = client.post("/api/task", json={"due": "2026-10-19"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "title_required"}
    assert state.tasks.count_tasks() == 0


def test_get_missing_task_is_404(client) -> None:
    resp = client.get("/api/task/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "not_found"}


def test_patch_distinguishes_absent_from_null(client, people) -> None:
    task_id = client.post(
        "/api/task", json={"title": "Draft", "assignee_username": "bob", "description": "keep me"}
    ).json()["id"]

    resp = client.patch(f"/api/task/{task_id}", json={"status": "blocked", "due": None})
    assert resp.json() == {"ok": True, "id": task_id}
    view = client.get(f"/api/task/{task_id}").json()
    assert view["status"] == "blocked"
    assert view["description"] == "keep me"
    assert view["assignee"] == "bob"

    client.patch(f"/api/task/{task_id}", json={"assignee_username": "nobody"})
    assert client.get(f"/api/task/{task_id}").json()["assignee"] == ""

    assert client.patch(f"/api/task/{task_id}", json={}).json() == {"ok": True, "id": task_id}


def test_patch_errors(client) -> None:
    task_id = client.post("/api/task", json={"title": "Draft"}).json()["id"]
    resp = client.patch(f"/api/task/{task_id}", json={"status": "shipped"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "status_invalid"}

    resp = client.patch("/api/task/999", json={"title": "x"})
    assert resp.status_code == 404


def test_refs_and_prereqs_routes(client) -> None:
    a = client.post("/api/task", json={"title": "A"}).json()["id"]
    b = client.post("/api/task", json={"title": "B"}).json()["id"]

    assert client.post(f"/api/task/{a}/ref", json={"url": "https://x"}).json() == {"ok": True}
    resp = client.post(f"/api/task/{a}/ref", json={"caption": "no url"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "url_required"}

    assert client.post(f"/api/task/{a}/prereq", json={"requires_task_id": b}).json() == {"ok": True}
    assert client.post(f"/api/task/{a}/prereq", json={"requires_task_id": b}).status_code == 200
    resp = client.post(f"/api/task/{a}/prereq", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "requires_task_id_required"}
    resp = client.post(f"/api/task/{a}/prereq", json={"requires_task_id": a})
    assert resp.json() == {"error": "self_dependency"}

    view = client.get(f"/api/task/{a}").json()
    assert len(view["refs"]) == 1
    assert view["prereqs"] == [{"id": b, "title": "B"}]


def test_list_tasks_with_filters(client, people) -> None:
    client.post("/api/task", json={"title": "late", "due": "2026-12-01", "assignee_username": "alice"})
    client.post("/api/task", json={"title": "undated", "assignee_username": "alice"})
    client.post("/api/task", json={"title": "early", "due": "2026-01-01", "assignee_username": "bob"})

    rows = client.get("/api/tasks").json()
    assert [r["title"] for r in rows] == ["early", "late", "undated"]

    rows = client.get("/api/tasks", params={"assignee": "@alice"}).json()
    assert [r["title"] for r in rows] == ["late", "undated"]

    assert client.get("/api/tasks", params={"status": "nope"}).status_code == 400


def test_digest_route(client, state, people, messenger) -> None:
    today = date.today().isoformat()
    client.post("/api/task", json={"title": "Intro", "due": today, "assignee_username": "alice"})

    assert client.get("/api/digest").json() == {"sent": True, "count": 1}
    assert messenger.sent[-1].room_id == "room-digest"
    assert "• [alice] Intro" in messenger.sent[-1].text


def test_digest_route_storage_failure(client, state, monkeypatch) -> None:
    def boom(day):
        raise StorageError(detail="database is locked")

    monkeypatch.setattr(state.queries, "list_due", boom)
    resp = client.get("/api/digest")
    assert resp.status_code == 500
    assert resp.json() == {"error": "digest_failed"}


def test_webhook_commands(client, state, messenger) -> None:
    resp = client.post("/api/webhook", json={"message": {"chat": {"id": 55}, "text": "/newcontent Podcast ep. 3"}})
    assert resp.status_code == 200
    assert messenger.sent[-1].text == "✅ Content saved: Podcast ep. 3"
    assert messenger.sent[-1].room_id == "55"
    assert state.content.count_items() == 1

    client.post("/api/webhook", json={"chat": {"id": 55}, "text": "/id"})
    assert messenger.sent[-1].text == "Chat ID: 55"

    client.post("/api/webhook", json={"message": {"chat": {"id": 55}, "text": "hi"}})
    assert messenger.sent[-1].text.startswith("Command received")


def test_webhook_always_acknowledges(client, state, messenger, monkeypatch) -> None:
    assert client.post("/api/webhook", json={"update_id": 1}).status_code == 200
    assert client.post("/api/webhook", content=b"not json").status_code == 200

    def broken(title):
        raise StorageError(detail="disk full")

    monkeypatch.setattr(state.content, "add_item", broken)
    resp = client.post("/api/webhook", json={"message": {"chat": {"id": 1}, "text": "/newcontent x"}})
    assert resp.status_code == 200
    assert messenger.sent == []


def test_malformed_body_is_invalid_body(client, state) -> None:
    resp = client.post("/api/task", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_body"}

    task_id = client.post("/api/task", json={"title": "Draft"}).json()["id"]
    resp = client.patch(f"/api/task/{task_id}", content=b"[1,", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_body"}
    assert state.tasks.count_tasks() == 1


def test_create_without_body_reports_missing_title(client, state) -> None:
    resp = client.post("/api/task")
    assert resp.status_code == 400
    assert resp.json() == {"error": "title_required"}
    assert state.tasks.count_tasks() == 0


@pytest.mark.parametrize("bad", [1.7, True])
def test_non_integer_prereq_ids_are_rejected(client, state, bad) -> None:
    a = client.post("/api/task", json={"title": "A"}).json()["id"]

    resp = client.post("/api/task", json={"title": "B", "prereq_ids": [bad]})
    assert resp.status_code == 400
    assert resp.json() == {"error": "requires_task_id_required"}

    resp = client.post(f"/api/task/{a}/prereq", json={"requires_task_id": bad})
    assert resp.status_code == 400
    assert resp.json() == {"error": "requires_task_id_required"}
    assert state.tasks.count_tasks() == 1
    assert state.deps.list_prerequisites(a) == []


@pytest.mark.parametrize("chat", [{"id": None}, {}, {"id": "  "}])
def test_webhook_without_chat_id_is_ignored(client, state, messenger, chat) -> None:
    resp = client.post("/api/webhook", json={"message": {"chat": chat, "text": "/id"}})
    assert resp.status_code == 200
    assert messenger.sent == []
