from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from studymate.api.deps import get_hub, get_store, get_topic, http_error
from studymate.core.errors import StoreError
from studymate.realtime import BroadcastHub
from studymate.realtime import events as ev
from studymate.schemas import SessionForm, SessionRecord
from studymate.services.records import RecordStore

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionCreateRequest(SessionForm):
    request_id: str | None = None


class SessionRestoreRequest(SessionForm):
    previous_session_id: str


class ProgressRequest(BaseModel):
    progress: int = Field(ge=0, le=100)


class SessionResponse(BaseModel):
    ok: bool
    session: SessionRecord


def _form(req: SessionForm) -> SessionForm:
    return SessionForm.model_validate(req.model_dump(include=set(SessionForm.model_fields)))


@router.get("")
def list_sessions(
    subject: str | None = Query(default=None),
    store: RecordStore = Depends(get_store),
):
    try:
        sessions = store.list_sessions(subject)
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "sessions": sessions}


@router.post("", response_model=SessionResponse, status_code=201)
def create_session(
    req: SessionCreateRequest,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> SessionResponse:
    try:
        record = store.create_session(_form(req), req.request_id)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(topic, ev.EVENT_SESSION_CREATED, ev.SessionCreated(session=ev.SessionSnapshot.of(record)))
    return SessionResponse(ok=True, session=record)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, store: RecordStore = Depends(get_store)) -> SessionResponse:
    try:
        return SessionResponse(ok=True, session=store.get_session(session_id))
    except StoreError as e:
        raise http_error(e) from e


@router.patch("/{session_id}/progress", response_model=SessionResponse)
def update_progress(
    session_id: str,
    req: ProgressRequest,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> SessionResponse:
    try:
        record = store.update_session_progress(session_id, req.progress)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(
        topic,
        ev.EVENT_SESSION_UPDATED,
        ev.SessionUpdated(
            session_id=record.id,
            progress=record.progress,
            completed=record.completed,
            subject=record.subject,
        ),
    )
    return SessionResponse(ok=True, session=record)


@router.post("/{session_id}/complete", response_model=SessionResponse)
def complete_session(
    session_id: str,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> SessionResponse:
    try:
        record = store.update_session_progress(session_id, 100)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(topic, ev.EVENT_SESSION_COMPLETED, ev.SessionCompleted(session_id=record.id, subject=record.subject))
    return SessionResponse(ok=True, session=record)


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
):
    try:
        existing = store.get_session(session_id)
        store.delete_session(session_id)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(topic, ev.EVENT_SESSION_DELETED, ev.SessionDeleted(session_id=session_id, subject=existing.subject))
    return {"ok": True, "session_id": session_id, "deleted": existing}


@router.post("/restore", response_model=SessionResponse, status_code=201)
def restore_session(
    req: SessionRestoreRequest,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> SessionResponse:
    """
    Re-create a deleted session. The restored record has a new id; repeating
    the call for the same previous_session_id returns the same record.
    """
    if not req.previous_session_id.strip():
        raise HTTPException(status_code=400, detail="previous_session_id is required")
    try:
        record = store.create_session(_form(req), f"restore:{req.previous_session_id}")
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(
        topic,
        ev.EVENT_SESSION_RESTORED,
        ev.SessionRestored(session=ev.SessionSnapshot.of(record), previous_session_id=req.previous_session_id),
    )
    return SessionResponse(ok=True, session=record)
