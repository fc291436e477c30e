"""Tests for the player HTTP routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from player.api.routes.player import router
from player.engine import PlayerContext, question_from_dict, set_player


@pytest.fixture
def client():
    ctx = PlayerContext(default_command={"command": "app::noop"})
    ctx.start(
        question_from_dict(
            {
                "id": "api-q",
                "state": {"score": 10},
                "functions": {"mark": {"action": {"type": "set", "property": "marked", "value": "{{score}}"}}},
            }
        )
    )
    set_player(ctx)
    app = FastAPI()
    app.include_router(router)
    yield TestClient(app)
    set_player(None)


def test_status(client):
    body = client.get("/api/player/status").json()
    assert body["ready"] is True
    assert body["question"] == "api-q"
    assert body["error"] is None
    assert body["actions"] == ["condition", "dispatch", "exec", "invoke", "log", "set"]
    assert body["commands"] == ["app::clear", "app::noop", "app::reset"]


def test_scope_lifecycle(client):
    resp = client.post("/api/player/scopes", json={"scope_id": "slide1", "state": {"page": 1}})
    assert resp.status_code == 200
    assert resp.json()["parent"] == "app"

    ids = [s["id"] for s in client.get("/api/player/scopes").json()]
    assert ids == ["app", "slide1"]

    assert client.delete("/api/player/scopes/slide1").status_code == 200
    assert [s["id"] for s in client.get("/api/player/scopes").json()] == ["app"]


def test_scope_errors(client):
    assert client.post("/api/player/scopes", json={"parent": "nope"}).status_code == 404
    client.post("/api/player/scopes", json={"scope_id": "x"})
    assert client.post("/api/player/scopes", json={"scope_id": "x"}).status_code == 409
    assert client.delete("/api/player/scopes/app").status_code == 400
    assert client.post("/api/player/invoke", json={"scope": "ghost", "name": "mark"}).status_code == 404


def test_invoke_and_session(client):
    client.post("/api/player/scopes", json={"scope_id": "w"})
    assert client.post("/api/player/invoke", json={"scope": "w", "name": "mark"}).status_code == 200
    assert client.get("/api/player/session").json()["marked"] == "10"


def test_dispatch(client):
    client.post("/api/player/dispatch", json={"event": "click", "widget": {"events": {"click": "mark"}}})
    assert client.get("/api/player/session").json()["marked"] == "10"


def test_condition(client):
    body = client.post(
        "/api/player/condition",
        json={"conditions": [{"property": "score", "gt": 5, "action": {"type": "set", "property": "ok", "value": 1}}]},
    ).json()
    assert body == {"fired": True}
    assert client.post("/api/player/condition", json={"conditions": []}).json() == {"fired": False}


def test_reset_and_journal(client):
    client.post("/api/player/invoke", json={"name": "mark"})
    assert client.post("/api/player/reset").json() == {"ok": True}
    assert "marked" not in client.get("/api/player/session").json()

    journal = client.get("/api/player/journal", params={"limit": 5}).json()
    assert journal[0]["type"] == "set"
    assert journal[0]["status"] == "success"


def test_not_initialized():
    set_player(None)
    app = FastAPI()
    app.include_router(router)
    assert TestClient(app).get("/api/player/status").status_code == 500


def test_journal_filters_and_stats(client):
    client.post("/api/player/invoke", json={"name": "mark"})
    client.post("/api/player/condition", json={"conditions": {"expression": "true", "action": {"type": "nope"}}})

    skipped = client.get("/api/player/journal", params={"status": "skipped"}).json()
    assert [e["type"] for e in skipped] == ["nope"]
    only_set = client.get("/api/player/journal", params={"type": "set"}).json()
    assert [e["status"] for e in only_set] == ["success"]
    assert client.get("/api/player/journal", params={"status": "weird"}).status_code == 400

    stats = client.get("/api/player/journal/stats").json()
    assert stats["size"] == 2
    assert stats["max_entries"] == 1000
    assert stats["counts"] == {"success": 1, "failed": 0, "skipped": 1}
