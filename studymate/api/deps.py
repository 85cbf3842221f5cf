from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from studymate.core.errors import RecordNotFound, StoreError
from studymate.realtime import BroadcastHub, hub, owner_topic
from studymate.services.generation import GenerationProxy
from studymate.services.records import RecordStore


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


def get_store(user_id: str = Depends(get_user_id)) -> RecordStore:
    return RecordStore(user_id)


def get_proxy() -> GenerationProxy:
    return GenerationProxy()


def get_hub() -> BroadcastHub:
    return hub


def get_topic(user_id: str = Depends(get_user_id)) -> str:
    return owner_topic(user_id)


def http_error(e: StoreError) -> HTTPException:
    if isinstance(e, RecordNotFound):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=400, detail=e.message)
