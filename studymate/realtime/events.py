"""
Dashboard event kinds and their payload schemas.

Payloads carry only what subscribers need to patch their derived view state.
Field names go over the wire in camelCase (sessionId, previousSessionId, ...).
"""
from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from studymate.schemas import DoubtRecord, SessionRecord

EVENT_SESSION_CREATED = "session-created"
EVENT_SESSION_UPDATED = "session-updated"
EVENT_SESSION_COMPLETED = "session-completed"
EVENT_SESSION_DELETED = "session-deleted"
EVENT_SESSION_RESTORED = "session-restored"
EVENT_DOUBT_CREATED = "doubt-created"
EVENT_DOUBT_UPDATED = "doubt-updated"


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SessionSnapshot(_Payload):
    id: str
    subject: str
    topic: str
    date: dt.date
    start_time: str = ""
    duration: str = ""
    progress: int = 0
    completed: bool = False

    @classmethod
    def of(cls, s: SessionRecord) -> "SessionSnapshot":
        return cls(
            id=s.id,
            subject=s.subject,
            topic=s.topic,
            date=s.date,
            start_time=s.start_time,
            duration=s.duration,
            progress=s.progress,
            completed=s.completed,
        )

    def to_record(self, user_id: str) -> SessionRecord:
        # completed is derived from progress on the record side
        return SessionRecord(
            id=self.id,
            user_id=user_id,
            subject=self.subject,
            topic=self.topic,
            date=self.date,
            start_time=self.start_time,
            duration=self.duration,
            progress=100 if self.completed else self.progress,
        )


class SessionCreated(_Payload):
    session: SessionSnapshot


class SessionUpdated(_Payload):
    session_id: str
    progress: int
    completed: bool
    subject: str | None = None


class SessionCompleted(_Payload):
    session_id: str
    subject: str | None = None


class SessionDeleted(_Payload):
    session_id: str
    subject: str | None = None


class SessionRestored(_Payload):
    # a restore is a new record; previous_session_id is gone for good
    session: SessionSnapshot
    previous_session_id: str | None = None


class DoubtSummary(_Payload):
    id: str
    question: str
    answered: bool = False
    datetime: dt.datetime

    @classmethod
    def of(cls, d: DoubtRecord) -> "DoubtSummary":
        return cls(id=d.id, question=d.question, answered=d.solved, datetime=d.timestamp)


class DoubtCreated(_Payload):
    doubt: DoubtSummary


class DoubtUpdated(_Payload):
    doubt_id: str
    solved: bool


EVENT_SCHEMAS: dict[str, type[_Payload]] = {
    EVENT_SESSION_CREATED: SessionCreated,
    EVENT_SESSION_UPDATED: SessionUpdated,
    EVENT_SESSION_COMPLETED: SessionCompleted,
    EVENT_SESSION_DELETED: SessionDeleted,
    EVENT_SESSION_RESTORED: SessionRestored,
    EVENT_DOUBT_CREATED: DoubtCreated,
    EVENT_DOUBT_UPDATED: DoubtUpdated,
}


def parse_payload(kind: str, payload: Any) -> _Payload:
    """Validate a payload against the schema declared for `kind`. Raises ValueError."""
    schema = EVENT_SCHEMAS.get(kind)
    if schema is None:
        raise ValueError(f"Unknown event kind: {kind}")
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Invalid payload for {kind}: {e}") from e


@dataclass(frozen=True)
class DashboardEvent:
    topic: str
    kind: str
    payload: Any
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    published_at: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))

    def wire(self) -> dict[str, Any]:
        return {"event": self.kind, "payload": self.payload.wire()}
