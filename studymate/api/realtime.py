from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from studymate.realtime import DashboardEvent, hub, owner_topic

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _caller(websocket: WebSocket) -> str:
    # browsers cannot set headers on a websocket handshake, so a query parameter is accepted too
    user_id = websocket.headers.get("x-user-id") or websocket.query_params.get("user_id") or ""
    return user_id.strip()


@router.websocket("/realtime/{topic}")
async def realtime(websocket: WebSocket, topic: str) -> None:
    """
    Bridge one client to the caller's own copy of a hub topic. Every event on
    it is forwarded as {"event", "payload"}; messages the client sends in that
    shape are published there (the sender receives its own event back).
    """
    user_id = _caller(websocket)
    if not user_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    scoped = owner_topic(user_id, topic)
    await websocket.accept()

    async def forward(event: DashboardEvent) -> None:
        await websocket.send_json(event.wire())

    unsubscribe = hub.subscribe(scoped, forward)
    try:
        while True:
            try:
                msg = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"error": "Messages must be JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"error": "Messages must be objects with event and payload"})
                continue
            try:
                hub.publish(scoped, str(msg.get("event") or ""), msg.get("payload") or {})
            except ValueError as e:
                await websocket.send_json({"error": str(e)})
    except WebSocketDisconnect:
        logger.debug("Realtime client left %s", scoped)
    finally:
        unsubscribe()
