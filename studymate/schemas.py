from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

Sender = Literal["user", "ai"]
SummaryType = Literal["concise", "detailed", "bullet"]


class SessionRecord(BaseModel):
    id: str
    user_id: str
    subject: str
    topic: str
    date: dt.date
    start_time: str = ""
    duration: str
    notes: str | None = None
    progress: int = 0
    created_at: dt.datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed(self) -> bool:
        return self.progress == 100


class SessionForm(BaseModel):
    """Planner form input. All fields but notes are required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    subject: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    date: dt.date
    start_time: str = Field(min_length=1)
    duration: str = Field(min_length=1)
    notes: str | None = None
    progress: int = Field(default=0, ge=0, le=100)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, v: str | None) -> str | None:
        return v or None


class MessageRecord(BaseModel):
    id: str
    doubt_id: str
    sender: Sender
    content: str
    timestamp: dt.datetime


class DoubtRecord(BaseModel):
    id: str
    user_id: str
    question: str
    subject: str
    solved: bool = False
    timestamp: dt.datetime
    messages: list[MessageRecord] = Field(default_factory=list)


class CardDraft(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)


class CardRecord(BaseModel):
    id: str
    deck_id: str
    front: str
    back: str


class DeckRecord(BaseModel):
    id: str
    user_id: str
    name: str
    subject: str
    created_at: dt.datetime | None = None
    flashcards: list[CardRecord] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_cards(self) -> int:
        return len(self.flashcards)


class PDFRecord(BaseModel):
    id: str
    user_id: str
    title: str
    pdf_data: str
    created_at: dt.datetime


class SubjectProgress(BaseModel):
    subject: str
    progress: int
    total_sessions: int
    completed_sessions: int
