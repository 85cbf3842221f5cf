from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends

from studymate.api.deps import get_store, http_error
from studymate.core.errors import StoreError
from studymate.realtime.events import DoubtSummary
from studymate.services.progress import (
    RECENT_DOUBTS_LOADED,
    RECENT_DOUBTS_SHOWN,
    aggregate_subject_progress,
    select_upcoming,
)
from studymate.services.records import RecordStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def get_dashboard(store: RecordStore = Depends(get_store)):
    try:
        sessions = store.list_sessions()
        doubts = store.list_doubts(RECENT_DOUBTS_LOADED)
    except StoreError as e:
        raise http_error(e) from e

    return {
        "ok": True,
        "upcoming_sessions": select_upcoming(sessions, date.today()),
        "recent_doubts": [DoubtSummary.of(d).wire() for d in doubts[:RECENT_DOUBTS_SHOWN]],
        "subject_progress": aggregate_subject_progress(sessions),
    }
