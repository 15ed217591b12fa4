from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.helpers.store_helpers import DummyLogger, make_deadline, make_event, make_lecture


@pytest.fixture
def client(store):
    from companion.web.api import create_app

    return TestClient(create_app(store, logger=DummyLogger()))


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_dashboard_reflects_telemetry(client, store):
    store.record_event(make_event("video-editor", "video.digest-ready"))
    r = client.get("/api/dashboard")
    assert r.status_code == 200
    body = r.json()
    assert body["events"][0]["event_type"] == "video.digest-ready"
    assert body["summary"]["digest_ready"] is True
    assert len(body["agent_states"]) == 7


def test_context_round_trip(client):
    assert client.get("/api/context").json() == {"context": {"stress_level": "medium", "energy_level": "medium", "mode": "balanced"}}
    r = client.post("/api/context", json={"mode": "focus"})
    assert r.status_code == 200
    assert r.json()["context"]["mode"] == "focus"
    assert client.get("/api/dashboard").json()["summary"]["today_focus"] == "Deep work + assignment completion"


def test_bad_context_is_400(client):
    r = client.post("/api/context", json={"stress_level": "extreme"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request."
    assert r.json()["issues"]

    r = client.post("/api/context", json={"mode": ""})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_preferences_put_merges(client):
    r = client.put("/api/notification-preferences", json={"quiet_hours": {"enabled": True}})
    assert r.status_code == 200
    prefs = r.json()["preferences"]
    assert prefs["quiet_hours"] == {"enabled": True, "start_hour": 22, "end_hour": 7}
    assert client.get("/api/notification-preferences").json()["preferences"] == prefs

    r = client.put("/api/notification-preferences", json={"quiet_hours": {"start_hour": 30}})
    assert r.status_code == 400


def test_journal_routes(client):
    for text in ("one", "two", "three"):
        r = client.post("/api/journal", json={"content": text, "tags": ["t"]})
        assert r.status_code == 200
        assert r.json()["entry"]["content"] == text
    assert [e["content"] for e in client.get("/api/journal").json()["entries"]] == ["three", "two", "one"]
    assert [e["content"] for e in client.get("/api/journal", params={"limit": 1}).json()["entries"]] == ["three"]
    assert client.get("/api/journal", params={"limit": 0}).status_code == 400
    assert client.post("/api/journal", json={"content": ""}).status_code == 400
    assert client.post("/api/journal", json={"content": "   "}).status_code == 400
    assert client.post("/api/journal", json={"content": "ok", "tags": "study"}).status_code == 400
    assert [e["content"] for e in client.get("/api/journal").json()["entries"]] == ["three", "two", "one"]


def test_schedule_routes(client):
    r = client.post("/api/schedule", json=make_lecture())
    assert r.status_code == 201
    lec = r.json()["lecture"]

    assert client.get("/api/schedule").json() == {"schedule": [lec]}
    assert client.get(f"/api/schedule/{lec['id']}").json() == {"lecture": lec}

    r = client.patch(f"/api/schedule/{lec['id']}", json={"title": "Data Structures"})
    assert r.status_code == 200
    assert r.json()["lecture"]["title"] == "Data Structures"
    assert client.patch(f"/api/schedule/{lec['id']}", json={}).status_code == 400

    assert client.delete(f"/api/schedule/{lec['id']}").status_code == 204
    assert client.get(f"/api/schedule/{lec['id']}").status_code == 404
    assert client.delete(f"/api/schedule/{lec['id']}").status_code == 404
    assert client.patch(f"/api/schedule/{lec['id']}", json={"title": "x"}).status_code == 404


def test_deadline_routes(client):
    r = client.post("/api/deadlines", json=make_deadline())
    assert r.status_code == 201
    dl = r.json()["deadline"]
    assert dl["completed"] is False

    assert client.get("/api/deadlines").json() == {"deadlines": [dl]}
    r = client.patch(f"/api/deadlines/{dl['id']}", json={"completed": True})
    assert r.json()["deadline"]["completed"] is True

    assert client.delete(f"/api/deadlines/{dl['id']}").status_code == 204
    r = client.get(f"/api/deadlines/{dl['id']}")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_invalid_create_bodies_are_400(client):
    assert client.post("/api/schedule", json=make_lecture(duration_minutes=0)).status_code == 400
    assert client.post("/api/deadlines", json=make_deadline(priority="someday")).status_code == 400
    assert client.post("/api/deadlines", json={"course": "x"}).status_code == 400


def test_storage_failure_is_500():
    from companion.core.runtime_store import RuntimeStore
    from companion.web.api import create_app

    store = RuntimeStore()
    logger = DummyLogger()
    client = TestClient(create_app(store, logger=logger))
    store.close()
    r = client.get("/api/deadlines")
    assert r.status_code == 500
    assert r.json()["code"] == "persistence_failure"
    assert any(level == "error" for level, _ in logger.records)


def test_wildcard_cors_is_rejected(store):
    from companion.web.api import create_app

    with pytest.raises(ValueError):
        create_app(store, allowed_origins=["*"])
    create_app(store, allowed_origins=["http://localhost:5173"])
