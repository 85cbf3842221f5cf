"""
Owner-scoped record store.

Every operation runs in its own unit of work and is scoped to the user the
store was built for. Failures of any kind surface as a single StoreError with
a human-readable message; nothing is retried.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from studymate.core.errors import CodecError, RecordNotFound, StoreError
from studymate.db.session import SessionLocal
from studymate.models import Doubt, DoubtMessage, Flashcard, FlashcardDeck, SavedPDF, StudySession
from studymate.schemas import (
    CardDraft,
    CardRecord,
    DeckRecord,
    DoubtRecord,
    MessageRecord,
    PDFRecord,
    SessionForm,
    SessionRecord,
)
from studymate.services.codec import (
    decode_bool,
    decode_date,
    decode_progress,
    decode_timestamp,
    encode_bool,
    encode_date,
    encode_progress,
    encode_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

SENDERS = ("user", "ai")


# ----------------------------
# Row -> record conversion
# ----------------------------

def session_record(row: StudySession) -> SessionRecord:
    progress = decode_progress(row.progress)
    # legacy rows could be flagged complete without progress; completion wins
    if decode_bool(row.completed) and progress != 100:
        progress = 100
    return SessionRecord(
        id=row.id,
        user_id=row.user_id,
        subject=row.subject,
        topic=row.topic,
        date=decode_date(row.date),
        start_time=row.start_time or "",
        duration=row.duration,
        notes=row.notes or None,
        progress=progress,
        created_at=decode_timestamp(row.created_at),
    )


def message_record(row: DoubtMessage) -> MessageRecord:
    return MessageRecord(
        id=row.id,
        doubt_id=row.doubt_id,
        sender=row.sender,
        content=row.content,
        timestamp=decode_timestamp(row.timestamp),
    )


def doubt_record(row: Doubt) -> DoubtRecord:
    return DoubtRecord(
        id=row.id,
        user_id=row.user_id,
        question=row.question,
        subject=row.subject,
        solved=bool(row.solved),
        timestamp=decode_timestamp(row.timestamp),
        messages=[message_record(m) for m in row.messages],
    )


def card_record(row: Flashcard) -> CardRecord:
    return CardRecord(id=row.id, deck_id=row.deck_id, front=row.front, back=row.back)


def deck_record(row: FlashcardDeck) -> DeckRecord:
    return DeckRecord(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        subject=row.subject,
        created_at=decode_timestamp(row.created_at),
        flashcards=[card_record(c) for c in row.cards],
    )


def pdf_record(row: SavedPDF) -> PDFRecord:
    return PDFRecord(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        pdf_data=row.pdf_data,
        created_at=decode_timestamp(row.created_at),
    )


class RecordStore:
    def __init__(self, user_id: str, session_factory: Callable[[], Session] = SessionLocal) -> None:
        if not user_id:
            raise ValueError("user_id is required")
        self.user_id = user_id
        self._session_factory = session_factory

    @contextmanager
    def _unit_of_work(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except StoreError:
            db.rollback()
            raise
        except CodecError as e:
            db.rollback()
            logger.warning("Unreadable record while trying to %s: %s", action, e)
            raise StoreError(str(e)) from e
        except SQLAlchemyError as e:
            db.rollback()
            detail = getattr(e, "orig", None) or e
            logger.warning("Store failure while trying to %s: %s", action, detail)
            raise StoreError(f"Failed to {action}: {detail}") from e
        finally:
            db.close()

    def _owned(self, db: Session, model: Any, record_id: str, kind: str, *options: Any) -> Any:
        q = db.query(model)
        if options:
            q = q.options(*options)
        row = q.filter(model.id == record_id, model.user_id == self.user_id).first()
        if not row:
            raise RecordNotFound(kind, record_id)
        return row

    def _by_request(self, db: Session, model: Any, request_id: str | None, *options: Any) -> Any:
        if not request_id:
            return None
        q = db.query(model)
        if options:
            q = q.options(*options)
        return q.filter(model.user_id == self.user_id, model.client_request_id == request_id).first()

    # -----------------------
    # Study sessions
    # -----------------------
    def create_session(self, form: SessionForm, request_id: str | None = None) -> SessionRecord:
        with self._unit_of_work("create study session") as db:
            row = self._by_request(db, StudySession, request_id)
            if row is None:
                row = StudySession(
                    user_id=self.user_id,
                    subject=form.subject,
                    topic=form.topic,
                    date=encode_date(form.date),
                    start_time=form.start_time,
                    duration=form.duration,
                    notes=form.notes,
                    progress=encode_progress(form.progress),
                    completed=encode_bool(form.progress == 100),
                    client_request_id=request_id,
                    created_at=encode_timestamp(utc_now()),
                )
                db.add(row)
                db.flush()
            return session_record(row)

    def list_sessions(self, subject: str | None = None) -> list[SessionRecord]:
        with self._unit_of_work("load study sessions") as db:
            q = db.query(StudySession).filter(StudySession.user_id == self.user_id)
            if subject is not None:
                q = q.filter(StudySession.subject == subject)
            rows = q.order_by(StudySession.date.asc(), StudySession.start_time.asc()).all()
            return [session_record(r) for r in rows]

    def get_session(self, session_id: str) -> SessionRecord:
        with self._unit_of_work("load study session") as db:
            return session_record(self._owned(db, StudySession, session_id, "Study session"))

    def update_session_progress(self, session_id: str, progress: int) -> SessionRecord:
        """Completion is derived: it is written as progress == 100, never set on its own."""
        with self._unit_of_work("update study session") as db:
            row = self._owned(db, StudySession, session_id, "Study session")
            row.progress = encode_progress(progress)
            row.completed = encode_bool(progress == 100)
            db.flush()
            return session_record(row)

    def delete_session(self, session_id: str) -> None:
        with self._unit_of_work("delete study session") as db:
            row = self._owned(db, StudySession, session_id, "Study session")
            db.delete(row)

    # -----------------------
    # Doubts
    # -----------------------
    def create_doubt(self, question: str, subject: str = "General", request_id: str | None = None) -> DoubtRecord:
        """Doubt row and its first (user) message are written in one transaction."""
        with self._unit_of_work("create doubt") as db:
            row = self._by_request(db, Doubt, request_id, selectinload(Doubt.messages))
            if row is None:
                ts = encode_timestamp(utc_now())
                row = Doubt(
                    user_id=self.user_id,
                    question=question,
                    subject=subject or "General",
                    solved=False,
                    client_request_id=request_id,
                    timestamp=ts,
                )
                row.messages.append(DoubtMessage(sender="user", content=question, timestamp=ts))
                db.add(row)
                db.flush()
            return doubt_record(row)

    def list_doubts(self, limit: int | None = None) -> list[DoubtRecord]:
        with self._unit_of_work("load doubts") as db:
            q = (
                db.query(Doubt)
                .options(selectinload(Doubt.messages))
                .filter(Doubt.user_id == self.user_id)
                .order_by(Doubt.timestamp.desc())
            )
            if limit is not None:
                q = q.limit(limit)
            return [doubt_record(r) for r in q.all()]

    def get_doubt(self, doubt_id: str) -> DoubtRecord:
        with self._unit_of_work("load doubt") as db:
            return doubt_record(self._owned(db, Doubt, doubt_id, "Doubt", selectinload(Doubt.messages)))

    def append_message(self, doubt_id: str, sender: str, content: str) -> MessageRecord:
        if sender not in SENDERS:
            raise StoreError(f"Invalid message sender: {sender!r}")
        with self._unit_of_work("save message") as db:
            self._owned(db, Doubt, doubt_id, "Doubt")
            last = (
                db.query(DoubtMessage.timestamp)
                .filter(DoubtMessage.doubt_id == doubt_id)
                .order_by(DoubtMessage.timestamp.desc())
                .first()
            )
            now = utc_now()
            if last is not None:
                last_ts = decode_timestamp(last[0])
                if now <= last_ts:
                    now = last_ts + timedelta(microseconds=1)
            msg = DoubtMessage(doubt_id=doubt_id, sender=sender, content=content, timestamp=encode_timestamp(now))
            db.add(msg)
            db.flush()
            return message_record(msg)

    def mark_doubt_solved(self, doubt_id: str) -> DoubtRecord:
        with self._unit_of_work("update doubt") as db:
            row = self._owned(db, Doubt, doubt_id, "Doubt", selectinload(Doubt.messages))
            row.solved = True
            db.flush()
            return doubt_record(row)

    # -----------------------
    # Flashcard decks
    # -----------------------
    def create_deck(self, name: str, subject: str, request_id: str | None = None) -> DeckRecord:
        with self._unit_of_work("create deck") as db:
            row = self._by_request(db, FlashcardDeck, request_id, selectinload(FlashcardDeck.cards))
            if row is None:
                row = FlashcardDeck(
                    user_id=self.user_id,
                    name=name,
                    subject=subject,
                    client_request_id=request_id,
                    created_at=encode_timestamp(utc_now()),
                )
                db.add(row)
                db.flush()
            return deck_record(row)

    def list_decks(self) -> list[DeckRecord]:
        with self._unit_of_work("load flashcard decks") as db:
            rows = (
                db.query(FlashcardDeck)
                .options(selectinload(FlashcardDeck.cards))
                .filter(FlashcardDeck.user_id == self.user_id)
                .order_by(FlashcardDeck.created_at.desc())
                .all()
            )
            return [deck_record(r) for r in rows]

    def get_deck(self, deck_id: str) -> DeckRecord:
        with self._unit_of_work("load flashcard deck") as db:
            return deck_record(
                self._owned(db, FlashcardDeck, deck_id, "Deck", selectinload(FlashcardDeck.cards))
            )

    def add_cards(self, deck_id: str, cards: Iterable[CardDraft]) -> list[CardRecord]:
        with self._unit_of_work("add flashcards") as db:
            self._owned(db, FlashcardDeck, deck_id, "Deck")
            base = utc_now()
            rows = [
                Flashcard(
                    deck_id=deck_id,
                    front=c.front,
                    back=c.back,
                    # keeps insertion order stable for bulk adds
                    created_at=encode_timestamp(base + timedelta(microseconds=i)),
                )
                for i, c in enumerate(cards)
            ]
            db.add_all(rows)
            db.flush()
            return [card_record(r) for r in rows]

    def _owned_card(self, db: Session, card_id: str) -> Flashcard:
        row = (
            db.query(Flashcard)
            .join(FlashcardDeck, Flashcard.deck_id == FlashcardDeck.id)
            .filter(Flashcard.id == card_id, FlashcardDeck.user_id == self.user_id)
            .first()
        )
        if not row:
            raise RecordNotFound("Flashcard", card_id)
        return row

    def update_card(self, card_id: str, front: str, back: str) -> CardRecord:
        with self._unit_of_work("update flashcard") as db:
            row = self._owned_card(db, card_id)
            row.front = front
            row.back = back
            db.flush()
            return card_record(row)

    def delete_card(self, card_id: str) -> None:
        with self._unit_of_work("delete flashcard") as db:
            db.delete(self._owned_card(db, card_id))

    # -----------------------
    # Saved PDFs
    # -----------------------
    def create_pdf(self, title: str, pdf_data: str, request_id: str | None = None) -> PDFRecord:
        with self._unit_of_work("save PDF") as db:
            row = self._by_request(db, SavedPDF, request_id)
            if row is None:
                row = SavedPDF(
                    user_id=self.user_id,
                    title=title,
                    pdf_data=pdf_data,
                    client_request_id=request_id,
                    created_at=encode_timestamp(utc_now()),
                )
                db.add(row)
                db.flush()
            return pdf_record(row)

    def list_pdfs(self) -> list[PDFRecord]:
        with self._unit_of_work("load saved PDFs") as db:
            rows = (
                db.query(SavedPDF)
                .filter(SavedPDF.user_id == self.user_id)
                .order_by(SavedPDF.created_at.desc())
                .all()
            )
            return [pdf_record(r) for r in rows]

    def get_pdf(self, pdf_id: str) -> PDFRecord:
        with self._unit_of_work("load saved PDF") as db:
            return pdf_record(self._owned(db, SavedPDF, pdf_id, "Saved PDF"))

    def delete_pdf(self, pdf_id: str) -> None:
        with self._unit_of_work("delete PDF") as db:
            db.delete(self._owned(db, SavedPDF, pdf_id, "Saved PDF"))
