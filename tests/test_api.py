"""Tests for ui/app.py — the JSON API over a Tracker."""

import pytest
from fastapi.testclient import TestClient

from taskstreak.storage import MemoryStore
from taskstreak.tracker import Tracker
from ui.app import create_app


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store, clock, ids, monkeypatch):
    monkeypatch.delenv("TASKSTREAK_USERNAME", raising=False)
    monkeypatch.delenv("TASKSTREAK_PASSWORD", raising=False)
    tracker = Tracker(store, clock=clock, make_id=ids, fallback_theme="light")
    return TestClient(create_app(tracker))


def _create(client, **payload):
    payload.setdefault("title", "Task")
    r = client.post("/api/tasks", json=payload)
    assert r.status_code == 200, r.text
    return r.json()["task"]


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_initial_state(client):
    data = client.get("/api/state").json()
    assert data["tasks"] == []
    assert data["streak"]["current"] == 0
    assert data["settings"] == {"theme": "light"}
    assert data["reviews"] == []


def test_create_task(client, store):
    task = _create(client, title="Write tests", priority="High", deadline="2024-01-04", tags=["dev"])
    assert task["id"] == "task-1"
    assert task["title"] == "Write tests"
    assert task["tags"] == ["dev"]
    assert task["done"] is False
    assert store.writes == 1


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"title": "   "},
        {"title": 5},
        {"title": "x", "priority": "Urgent"},
        {"title": "x", "deadline": "2024-02-30"},
        {"title": "x", "tags": "dev"},
        {"title": "x", "tags": ["ok", 3]},
        {"title": "x", "description": ["no"]},
    ],
)
def test_create_task_rejects_invalid_payload(client, store, payload):
    r = client.post("/api/tasks", json=payload)
    assert r.status_code == 400
    assert store.writes == 0


def test_list_tasks_filters_and_sorts(client):
    _create(client, title="Pay rent", priority="High")
    _create(client, title="Plan trip", deadline="2024-01-02")
    _create(client, title="Read", deadline="2024-01-09")
    client.post("/api/tasks/task-3/toggle")

    tasks = client.get("/api/tasks").json()["tasks"]
    assert [t["id"] for t in tasks] == ["task-2", "task-3", "task-1"]
    overdue = tasks[0]
    assert overdue["overdue"] is True
    assert overdue["deadlineLabel"] == "Overdue by 1 day"

    active = client.get("/api/tasks", params={"status": "active", "q": "p"}).json()["tasks"]
    assert [t["id"] for t in active] == ["task-2", "task-1"]

    by_priority = client.get("/api/tasks", params={"sort": "priority"}).json()["tasks"]
    assert by_priority[0]["id"] == "task-1"


@pytest.mark.parametrize("params", [{"status": "archived"}, {"sort": "title"}])
def test_list_tasks_rejects_unknown_options(client, params):
    assert client.get("/api/tasks", params=params).status_code == 400


def test_update_task(client):
    _create(client, title="Draft")
    r = client.put("/api/tasks/task-1", json={"title": "Final", "description": "ship it"})
    assert r.status_code == 200
    assert r.json()["task"]["title"] == "Final"
    assert r.json()["task"]["description"] == "ship it"


def test_unknown_task_is_404(client, store):
    assert client.put("/api/tasks/nope", json={"title": "x"}).status_code == 404
    assert client.delete("/api/tasks/nope").status_code == 404
    assert client.post("/api/tasks/nope/toggle").status_code == 404
    assert store.writes == 0


def test_delete_task(client):
    _create(client)
    r = client.delete("/api/tasks/task-1")
    assert r.json() == {"ok": True, "task_id": "task-1", "saved": True}
    assert client.get("/api/state").json()["tasks"] == []


def test_toggle_updates_streak_and_stats(client, clock):
    _create(client, title="Habit")
    r = client.post("/api/tasks/task-1/toggle").json()
    assert r["task"]["done"] is True
    assert r["streak"]["current"] == 1
    assert r["streak"]["dailyCompletions"] == {"2024-01-03": 1}

    r = client.post("/api/tasks/task-1/toggle").json()
    assert r["task"]["done"] is False
    assert r["streak"]["dailyCompletions"] == {"2024-01-03": 1}

    clock.set("2024-01-04")
    client.post("/api/tasks/task-1/toggle")
    stats = client.get("/api/stats").json()
    assert stats["completedToday"] == 1
    assert stats["completedLast7Days"] == 2
    assert stats["currentStreak"] == 2
    assert stats["bestStreak"] == 2
    assert stats["doneCount"] == 1
    assert stats["activeCount"] == 0


def test_history(client, clock):
    _create(client, title="One")
    _create(client, title="Two")
    client.post("/api/tasks/task-1/toggle")
    clock.set("2024-01-04")
    client.post("/api/tasks/task-2/toggle")

    days = client.get("/api/history").json()["days"]
    assert [d["date"] for d in days] == ["2024-01-04", "2024-01-03"]
    assert [t["id"] for t in days[0]["tasks"]] == ["task-2"]


def test_set_theme(client):
    r = client.put("/api/settings/theme", json={"theme": "dark"})
    assert r.json() == {"ok": True, "settings": {"theme": "dark"}}
    assert client.put("/api/settings/theme", json={"theme": "neon"}).status_code == 400


def test_save_review(client):
    r = client.put("/api/reviews/2024-01-03", json={"wins": "shipped", "nextFocus": "docs"})
    review = r.json()["review"]
    assert review["date"] == "2024-01-03"
    assert review["wins"] == "shipped"
    assert review["nextFocus"] == "docs"
    assert review["blockers"] == ""

    assert client.put("/api/reviews/someday", json={}).status_code == 400
    assert client.put("/api/reviews/2024-01-03", json={"wins": 3}).status_code == 400


def test_save_failure_is_reported_not_raised(clock, ids, monkeypatch):
    monkeypatch.delenv("TASKSTREAK_USERNAME", raising=False)
    monkeypatch.delenv("TASKSTREAK_PASSWORD", raising=False)
    tracker = Tracker(MemoryStore(fail_writes=True), clock=clock, make_id=ids)
    client = TestClient(create_app(tracker))
    r = client.post("/api/tasks", json={"title": "Still works"})
    assert r.status_code == 200
    assert r.json()["saved"] is False
    assert client.get("/api/state").json()["tasks"][0]["title"] == "Still works"


def test_basic_auth(client, monkeypatch):
    monkeypatch.setenv("TASKSTREAK_USERNAME", "me")
    monkeypatch.setenv("TASKSTREAK_PASSWORD", "secret")
    assert client.get("/api/state").status_code == 401
    assert client.get("/api/state", auth=("me", "wrong")).status_code == 401
    assert client.get("/api/state", auth=("me", "secret")).status_code == 200
    assert client.get("/healthz").status_code == 200
