import pytest
from starlette.websockets import WebSocketDisconnect

SESSION = {
    "subject": "Physics",
    "topic": "Optics",
    "date": "2026-09-01",
    "start_time": "09:00",
    "duration": "1 hour",
}


def test_client_event_is_broadcast_back(client):
    with client.websocket_connect("/realtime/dashboard-updates") as ws:
        ws.send_json({"event": "doubt-updated", "payload": {"doubtId": "d-1", "solved": True}})
        assert ws.receive_json() == {"event": "doubt-updated", "payload": {"doubtId": "d-1", "solved": True}}


def test_invalid_messages_get_an_error_reply(client):
    with client.websocket_connect("/realtime/dashboard-updates") as ws:
        ws.send_text("not json")
        assert "error" in ws.receive_json()

        ws.send_json(["event"])
        assert "error" in ws.receive_json()

        ws.send_json({"event": "session-updated", "payload": {"progress": 10}})
        assert "Invalid payload" in ws.receive_json()["error"]

        ws.send_json({"event": "no-such-event", "payload": {}})
        assert "Unknown event kind" in ws.receive_json()["error"]


def test_rest_mutations_reach_websocket_subscribers(client):
    with client.websocket_connect("/realtime/dashboard-updates") as ws:
        created = client.post("/sessions", json=SESSION).json()["session"]
        msg = ws.receive_json()
        assert msg["event"] == "session-created"
        assert msg["payload"]["session"]["id"] == created["id"]
        assert msg["payload"]["session"]["startTime"] == "09:00"

        client.post(f"/sessions/{created['id']}/complete")
        msg = ws.receive_json()
        assert msg == {"event": "session-completed", "payload": {"sessionId": created["id"], "subject": "Physics"}}


def test_topics_are_isolated(client):
    with client.websocket_connect("/realtime/other-topic") as other, client.websocket_connect(
        "/realtime/dashboard-updates"
    ) as ws:
        ws.send_json({"event": "doubt-updated", "payload": {"doubtId": "d-2", "solved": False}})
        assert ws.receive_json()["payload"]["doubtId"] == "d-2"

        other.send_json({"event": "doubt-updated", "payload": {"doubtId": "d-3", "solved": False}})
        assert other.receive_json()["payload"]["doubtId"] == "d-3"


def test_events_stay_with_their_owner(client):
    with client.websocket_connect("/realtime/dashboard-updates", headers={"X-User-Id": "user-2"}) as other:
        client.post("/sessions", json=SESSION)

        other.send_json({"event": "doubt-updated", "payload": {"doubtId": "mine", "solved": True}})
        # user-1's session-created never reaches user-2's socket
        assert other.receive_json()["payload"] == {"doubtId": "mine", "solved": True}


def test_query_parameter_identifies_the_caller(client):
    with client.websocket_connect("/realtime/dashboard-updates?user_id=user-1", headers={"X-User-Id": ""}) as ws:
        created = client.post("/sessions", json=SESSION).json()["session"]
        assert ws.receive_json()["payload"]["session"]["id"] == created["id"]


def test_connection_without_a_user_is_refused(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/realtime/dashboard-updates", headers={"X-User-Id": ""}):
            pass
