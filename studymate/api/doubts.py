from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from studymate.api.deps import get_hub, get_store, get_topic, http_error
from studymate.core.errors import StoreError
from studymate.realtime import BroadcastHub
from studymate.realtime import events as ev
from studymate.schemas import DoubtRecord, MessageRecord, Sender
from studymate.services.records import RecordStore

router = APIRouter(prefix="/doubts", tags=["doubts"])


class DoubtCreateRequest(BaseModel):
    question: str = Field(min_length=1)
    subject: str = "General"
    request_id: str | None = None


class MessageRequest(BaseModel):
    sender: Sender = "user"
    content: str = Field(min_length=1)


class DoubtResponse(BaseModel):
    ok: bool
    doubt: DoubtRecord


@router.get("")
def list_doubts(
    limit: int | None = Query(default=None, ge=1, le=100),
    solved: bool | None = Query(default=None),
    store: RecordStore = Depends(get_store),
):
    try:
        doubts = store.list_doubts(limit)
    except StoreError as e:
        raise http_error(e) from e
    if solved is not None:
        doubts = [d for d in doubts if d.solved == solved]
    return {"ok": True, "doubts": doubts}


@router.post("", response_model=DoubtResponse, status_code=201)
def create_doubt(
    req: DoubtCreateRequest,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> DoubtResponse:
    question = req.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question is required")
    try:
        doubt = store.create_doubt(question, req.subject.strip() or "General", req.request_id)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(topic, ev.EVENT_DOUBT_CREATED, ev.DoubtCreated(doubt=ev.DoubtSummary.of(doubt)))
    return DoubtResponse(ok=True, doubt=doubt)


@router.get("/{doubt_id}", response_model=DoubtResponse)
def get_doubt(doubt_id: str, store: RecordStore = Depends(get_store)) -> DoubtResponse:
    try:
        return DoubtResponse(ok=True, doubt=store.get_doubt(doubt_id))
    except StoreError as e:
        raise http_error(e) from e


@router.post("/{doubt_id}/messages", status_code=201)
def append_message(doubt_id: str, req: MessageRequest, store: RecordStore = Depends(get_store)):
    content = req.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message content is required")
    try:
        message: MessageRecord = store.append_message(doubt_id, req.sender, content)
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "message": message}


@router.post("/{doubt_id}/solve", response_model=DoubtResponse)
def solve_doubt(
    doubt_id: str,
    store: RecordStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
    topic: str = Depends(get_topic),
) -> DoubtResponse:
    try:
        doubt = store.mark_doubt_solved(doubt_id)
    except StoreError as e:
        raise http_error(e) from e

    hub.publish(topic, ev.EVENT_DOUBT_UPDATED, ev.DoubtUpdated(doubt_id=doubt.id, solved=True))
    return DoubtResponse(ok=True, doubt=doubt)
