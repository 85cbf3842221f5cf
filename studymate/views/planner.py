from __future__ import annotations

import datetime as dt
import logging
import uuid
from typing import Any, Optional

from pydantic import ValidationError

from studymate.realtime import events as ev
from studymate.schemas import SessionForm, SessionRecord
from studymate.services.progress import parse_duration_minutes
from studymate.views.base import ViewController, action

logger = logging.getLogger(__name__)


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err.get('msg')}" if field else str(err.get("msg"))


class StudyPlannerView(ViewController):
    load_error_title = "Error fetching study sessions"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.sessions: list[SessionRecord] = []
        self.selected_date: dt.date = dt.date.today()
        # single-shot undo slot for the last deletion
        self._last_deleted: SessionRecord | None = None

    async def load(self) -> None:
        self.sessions = await self._call(self.store.list_sessions)

    # -----------------------
    # Queries
    # -----------------------
    def select_date(self, day: dt.date) -> None:
        self.selected_date = day

    def sessions_for_date(self, day: dt.date | None = None) -> list[SessionRecord]:
        day = day or self.selected_date
        return [s for s in self.sessions if s.date == day]

    def planned_minutes(self, day: dt.date | None = None) -> int:
        return sum(parse_duration_minutes(s.duration) for s in self.sessions_for_date(day))

    def get(self, session_id: str) -> SessionRecord | None:
        for s in self.sessions:
            if s.id == session_id:
                return s
        return None

    @property
    def can_undo(self) -> bool:
        return self._last_deleted is not None

    def _replace(self, record: SessionRecord) -> None:
        self.sessions = [record if s.id == record.id else s for s in self.sessions]

    # -----------------------
    # Actions
    # -----------------------
    @action("Error creating study session")
    async def create_session(self, form: SessionForm | dict[str, Any], request_id: str | None = None) -> Optional[SessionRecord]:
        if not isinstance(form, SessionForm):
            try:
                form = SessionForm.model_validate(form)
            except ValidationError as e:
                # nothing reaches the store
                self.notify("Missing information", _first_error(e), variant="destructive")
                return None

        record = await self._call(self.store.create_session, form, request_id or uuid.uuid4().hex)
        if self.get(record.id) is None:
            self.sessions = [*self.sessions, record]
        self.notify("Study session created", "Your study session has been scheduled.")
        self.publish(ev.EVENT_SESSION_CREATED, ev.SessionCreated(session=ev.SessionSnapshot.of(record)))
        return record

    @action("Error updating progress")
    async def update_progress(self, session_id: str, progress: int) -> Optional[SessionRecord]:
        progress = max(0, min(100, int(progress)))
        record = await self._call(self.store.update_session_progress, session_id, progress)
        self._replace(record)
        if record.completed:
            self.notify("Study session completed", "Great job! You've completed this study session.")
        self.publish(
            ev.EVENT_SESSION_UPDATED,
            ev.SessionUpdated(
                session_id=record.id,
                progress=record.progress,
                completed=record.completed,
                subject=record.subject,
            ),
        )
        return record

    @action("Error updating session")
    async def mark_complete(self, session_id: str) -> Optional[SessionRecord]:
        record = await self._call(self.store.update_session_progress, session_id, 100)
        self._replace(record)
        self.notify("Study session completed", "Great job! You've completed this study session.")
        self.publish(
            ev.EVENT_SESSION_COMPLETED,
            ev.SessionCompleted(session_id=record.id, subject=record.subject),
        )
        return record

    @action("Error deleting study session")
    async def delete_session(self, session_id: str) -> Optional[bool]:
        # the stored values, not our copy: another view may have changed progress
        existing = await self._call(self.store.get_session, session_id)
        await self._call(self.store.delete_session, session_id)

        self.sessions = [s for s in self.sessions if s.id != session_id]
        self._last_deleted = existing
        self.notify("Study session deleted", "The study session has been removed.")
        self.publish(
            ev.EVENT_SESSION_DELETED,
            ev.SessionDeleted(session_id=session_id, subject=existing.subject),
        )
        return True

    @action("Error restoring study session")
    async def undo_delete(self) -> Optional[SessionRecord]:
        """Re-create the last deleted session. The copy gets a new identity."""
        deleted = self._last_deleted
        if deleted is None:
            return None

        # already validated once; an empty legacy start time is kept as is
        form = SessionForm.model_construct(
            subject=deleted.subject,
            topic=deleted.topic,
            date=deleted.date,
            start_time=deleted.start_time,
            duration=deleted.duration,
            notes=deleted.notes,
            progress=deleted.progress,
        )
        # keyed on the deleted identity so a repeated undo cannot duplicate
        record = await self._call(self.store.create_session, form, f"restore:{deleted.id}")
        self._last_deleted = None

        if self.get(record.id) is None:
            self.sessions = [*self.sessions, record]
        self.notify("Study session restored", "The study session has been restored.")
        self.publish(
            ev.EVENT_SESSION_RESTORED,
            ev.SessionRestored(session=ev.SessionSnapshot.of(record), previous_session_id=deleted.id),
        )
        return record
