from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from studymate.realtime import events as ev
from studymate.schemas import SessionRecord, SubjectProgress
from studymate.services.progress import (
    RECENT_DOUBTS_LOADED,
    RECENT_DOUBTS_SHOWN,
    UPCOMING_LIMIT,
    aggregate_subject_progress,
    compute_subject_progress,
    rank_subject_progress,
    select_upcoming,
)
from studymate.views.base import EventHandler, ViewController

logger = logging.getLogger(__name__)


class DashboardView(ViewController):
    """
    Upcoming sessions, recent doubts and per-subject progress.

    Reconciliation: every session event re-derives the affected subject's
    aggregate from a store read; the upcoming list is patched from the payload.
    An event without a subject re-derives every aggregate.
    """

    load_error_title = "Error loading dashboard"

    def __init__(self, *args, today: Callable[[], dt.date] = dt.date.today, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._today = today
        self.upcoming_sessions: list[SessionRecord] = []
        self._doubts: list[ev.DoubtSummary] = []
        self._progress: dict[str, SubjectProgress] = {}

    # -----------------------
    # Derived state
    # -----------------------
    @property
    def recent_doubts(self) -> list[ev.DoubtSummary]:
        return self._doubts[:RECENT_DOUBTS_SHOWN]

    @property
    def subject_progress(self) -> list[SubjectProgress]:
        return rank_subject_progress(self._progress.values())

    def progress_for(self, subject: str) -> SubjectProgress | None:
        return self._progress.get(subject)

    # -----------------------
    # Loading
    # -----------------------
    async def load(self) -> None:
        sessions = await self._call(self.store.list_sessions)
        doubts = await self._call(self.store.list_doubts, RECENT_DOUBTS_LOADED)

        self.upcoming_sessions = select_upcoming(sessions, self._today())
        self._doubts = [ev.DoubtSummary.of(d) for d in doubts]
        self._set_all_progress(sessions)

    def _set_all_progress(self, sessions: list[SessionRecord]) -> None:
        # keep every subject; ranking and the top-N cut happen on read
        self._progress = {p.subject: p for p in aggregate_subject_progress(sessions, limit=len(sessions))}

    async def _refresh_subject(self, subject: str | None) -> None:
        if subject is None:
            sessions = await self._call(self.store.list_sessions)
            self._set_all_progress(sessions)
            return
        sessions = await self._call(self.store.list_sessions, subject)
        if sessions:
            self._progress[subject] = compute_subject_progress(subject, sessions)
        else:
            self._progress.pop(subject, None)

    # -----------------------
    # Upcoming list patches
    # -----------------------
    def _drop_upcoming(self, session_id: str) -> None:
        self.upcoming_sessions = [s for s in self.upcoming_sessions if s.id != session_id]

    def _insert_upcoming(self, snapshot: ev.SessionSnapshot) -> None:
        self._drop_upcoming(snapshot.id)
        record = snapshot.to_record(self.store.user_id)
        self.upcoming_sessions = select_upcoming(
            [*self.upcoming_sessions, record], self._today(), limit=UPCOMING_LIMIT
        )

    def _subject_of(self, session_id: str) -> str | None:
        for s in self.upcoming_sessions:
            if s.id == session_id:
                return s.subject
        return None

    # -----------------------
    # Event handlers
    # -----------------------
    def event_handlers(self) -> dict[str, EventHandler]:
        return {
            ev.EVENT_SESSION_CREATED: self.on_session_created,
            ev.EVENT_SESSION_UPDATED: self.on_session_updated,
            ev.EVENT_SESSION_COMPLETED: self.on_session_completed,
            ev.EVENT_SESSION_DELETED: self.on_session_deleted,
            ev.EVENT_SESSION_RESTORED: self.on_session_restored,
            ev.EVENT_DOUBT_CREATED: self.on_doubt_created,
            ev.EVENT_DOUBT_UPDATED: self.on_doubt_updated,
        }

    async def on_session_created(self, payload: ev.SessionCreated) -> None:
        self._insert_upcoming(payload.session)
        await self._refresh_subject(payload.session.subject)
        self.notify("Dashboard updated", "New study session has been added to your schedule.")

    async def on_session_updated(self, payload: ev.SessionUpdated) -> None:
        subject = payload.subject or self._subject_of(payload.session_id)
        if payload.completed:
            self._drop_upcoming(payload.session_id)
        else:
            self.upcoming_sessions = [
                s.model_copy(update={"progress": payload.progress}) if s.id == payload.session_id else s
                for s in self.upcoming_sessions
            ]
        await self._refresh_subject(subject)

    async def on_session_completed(self, payload: ev.SessionCompleted) -> None:
        subject = payload.subject or self._subject_of(payload.session_id)
        self._drop_upcoming(payload.session_id)
        await self._refresh_subject(subject)
        self.notify("Session completed", "Great job! Your progress has been updated.")

    async def on_session_deleted(self, payload: ev.SessionDeleted) -> None:
        subject = payload.subject or self._subject_of(payload.session_id)
        self._drop_upcoming(payload.session_id)
        await self._refresh_subject(subject)

    async def on_session_restored(self, payload: ev.SessionRestored) -> None:
        # the restored session is a new record; the old identity is gone
        if payload.previous_session_id:
            self._drop_upcoming(payload.previous_session_id)
        if not payload.session.completed:
            self._insert_upcoming(payload.session)
        await self._refresh_subject(payload.session.subject)

    async def on_doubt_created(self, payload: ev.DoubtCreated) -> None:
        self._doubts = [payload.doubt, *[d for d in self._doubts if d.id != payload.doubt.id]]
        self._doubts = self._doubts[:RECENT_DOUBTS_LOADED]
        self.notify("New doubt added", "Your question has been added to the list.")

    async def on_doubt_updated(self, payload: ev.DoubtUpdated) -> None:
        self._doubts = [
            d.model_copy(update={"answered": payload.solved}) if d.id == payload.doubt_id else d
            for d in self._doubts
        ]
        if payload.solved:
            self.notify("Doubt solved", "Your question has been marked as answered.")
