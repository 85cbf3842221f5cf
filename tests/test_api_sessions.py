from studymate.realtime import hub

SESSION = {
    "subject": "Chemistry",
    "topic": "Stoichiometry",
    "date": "2026-07-01",
    "start_time": "14:00",
    "duration": "2 hours",
    "notes": "",
}


def _create(client, **kw):
    r = client.post("/sessions", json={**SESSION, **kw})
    assert r.status_code == 201
    return r.json()["session"]


def test_requires_user_header(client):
    r = client.get("/sessions", headers={"X-User-Id": ""})
    assert r.status_code == 401


def test_create_and_list_sessions(client):
    s = _create(client)
    assert s["progress"] == 0
    assert s["completed"] is False
    assert s["notes"] is None

    r = client.get("/sessions")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [x["id"] for x in body["sessions"]] == [s["id"]]

    other = client.get("/sessions", headers={"X-User-Id": "someone-else"})
    assert other.json()["sessions"] == []


def test_create_session_validation(client):
    r = client.post("/sessions", json={**SESSION, "topic": "  "})
    assert r.status_code == 422


def test_create_is_idempotent_with_request_id(client):
    a = _create(client, request_id="req-42")
    b = _create(client, request_id="req-42")
    assert a["id"] == b["id"]
    assert len(client.get("/sessions").json()["sessions"]) == 1


def test_progress_complete_delete_restore(client):
    s = _create(client, notes="lab report")

    r = client.patch(f"/sessions/{s['id']}/progress", json={"progress": 60})
    assert r.status_code == 200
    assert r.json()["session"]["progress"] == 60
    assert r.json()["session"]["completed"] is False

    assert client.patch(f"/sessions/{s['id']}/progress", json={"progress": 120}).status_code == 422

    r = client.post(f"/sessions/{s['id']}/complete")
    assert r.json()["session"]["progress"] == 100
    assert r.json()["session"]["completed"] is True

    r = client.delete(f"/sessions/{s['id']}")
    assert r.status_code == 200
    deleted = r.json()["deleted"]
    assert client.get(f"/sessions/{s['id']}").status_code == 404

    restore = {k: deleted[k] for k in ("subject", "topic", "date", "start_time", "duration", "notes", "progress")}
    r = client.post("/sessions/restore", json={**restore, "previous_session_id": s["id"]})
    assert r.status_code == 201
    restored = r.json()["session"]
    assert restored["id"] != s["id"]
    assert restored["notes"] == "lab report"
    assert restored["completed"] is True

    again = client.post("/sessions/restore", json={**restore, "previous_session_id": s["id"]})
    assert again.json()["session"]["id"] == restored["id"]


def test_missing_session_is_404(client):
    assert client.patch("/sessions/nope/progress", json={"progress": 10}).status_code == 404
    assert client.post("/sessions/nope/complete").status_code == 404
    assert client.delete("/sessions/nope").status_code == 404


def test_mutations_publish_dashboard_events(client, monkeypatch):
    published = []
    real_publish = hub.publish

    def spy(topic, kind, payload):
        event = real_publish(topic, kind, payload)
        published.append((topic, kind, event.wire()["payload"]))
        return event

    monkeypatch.setattr(hub, "publish", spy)

    s = _create(client)
    client.patch(f"/sessions/{s['id']}/progress", json={"progress": 30})
    client.post(f"/sessions/{s['id']}/complete")
    client.delete(f"/sessions/{s['id']}")

    assert [k for _, k, _ in published] == [
        "session-created",
        "session-updated",
        "session-completed",
        "session-deleted",
    ]
    assert {t for t, _, _ in published} == {"dashboard-updates:user-1"}
    assert published[1][2] == {"sessionId": s["id"], "progress": 30, "completed": False, "subject": "Chemistry"}
    assert published[2][2] == {"sessionId": s["id"], "subject": "Chemistry"}
