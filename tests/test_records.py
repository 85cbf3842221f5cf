from datetime import date

import pytest
from sqlalchemy import text

from studymate.core.errors import RecordNotFound, StoreError
from studymate.db.session import engine
from studymate.schemas import CardDraft, SessionForm


def _form(**kw):
    base = dict(
        subject="Math",
        topic="Integrals",
        date=date(2026, 6, 1),
        start_time="10:00",
        duration="1.5 hours",
        notes="chapter 3",
    )
    base.update(kw)
    return SessionForm(**base)


def test_create_and_list_sessions_are_owner_scoped(store, other_store):
    s = store.create_session(_form())
    other_store.create_session(_form(subject="Physics"))

    mine = store.list_sessions()
    assert [x.id for x in mine] == [s.id]
    assert s.progress == 0
    assert s.completed is False
    assert s.created_at is not None

    with pytest.raises(RecordNotFound):
        other_store.get_session(s.id)


def test_progress_and_completed_are_persisted_as_strings(store):
    s = store.create_session(_form())
    store.update_session_progress(s.id, 100)

    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT progress, completed FROM study_sessions WHERE id = :id"), {"id": s.id}
        ).one()
    assert row.progress == "100"
    assert row.completed == "true"


def test_completed_is_derived_from_progress(store):
    s = store.create_session(_form())
    assert store.update_session_progress(s.id, 100).completed is True
    back = store.update_session_progress(s.id, 40)
    assert back.completed is False
    assert back.progress == 40


def test_legacy_completed_flag_reads_as_full_progress(store):
    s = store.create_session(_form())
    with engine.begin() as conn:
        conn.execute(
            text("UPDATE study_sessions SET progress = '30', completed = 'true' WHERE id = :id"), {"id": s.id}
        )
    loaded = store.get_session(s.id)
    assert loaded.progress == 100
    assert loaded.completed is True


def test_unrecognized_stored_value_fails_loudly(store):
    s = store.create_session(_form())
    with engine.begin() as conn:
        conn.execute(text("UPDATE study_sessions SET completed = 'maybe' WHERE id = :id"), {"id": s.id})
    with pytest.raises(StoreError) as exc:
        store.list_sessions()
    assert "maybe" in exc.value.message


def test_create_session_is_idempotent_per_request_id(store):
    a = store.create_session(_form(), request_id="req-1")
    b = store.create_session(_form(topic="Other"), request_id="req-1")
    assert a.id == b.id
    assert len(store.list_sessions()) == 1


def test_list_sessions_by_subject_ordered_by_schedule(store):
    store.create_session(_form(date=date(2026, 6, 2), start_time="08:00"))
    store.create_session(_form(date=date(2026, 6, 1), start_time="11:00"))
    store.create_session(_form(subject="Physics"))
    math = store.list_sessions("Math")
    assert [(s.date, s.start_time) for s in math] == [(date(2026, 6, 1), "11:00"), (date(2026, 6, 2), "08:00")]


def test_delete_session(store):
    s = store.create_session(_form())
    store.delete_session(s.id)
    assert store.list_sessions() == []
    with pytest.raises(RecordNotFound):
        store.delete_session(s.id)


def test_create_doubt_writes_first_user_message(store):
    d = store.create_doubt("What is entropy?", "Physics")
    assert d.subject == "Physics"
    assert d.solved is False
    assert len(d.messages) == 1
    assert d.messages[0].sender == "user"
    assert d.messages[0].content == "What is entropy?"
    assert d.messages[0].timestamp == d.timestamp


def test_message_timestamps_never_decrease(store):
    d = store.create_doubt("Q", "General")
    for i in range(5):
        store.append_message(d.id, "ai" if i % 2 else "user", f"m{i}")
    msgs = store.get_doubt(d.id).messages
    assert len(msgs) == 6
    stamps = [m.timestamp for m in msgs]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


def test_append_message_rejects_unknown_sender_and_foreign_doubt(store, other_store):
    d = store.create_doubt("Q")
    with pytest.raises(StoreError):
        store.append_message(d.id, "bot", "hi")
    with pytest.raises(RecordNotFound):
        other_store.append_message(d.id, "user", "hi")


def test_list_doubts_newest_first_with_limit(store):
    first = store.create_doubt("first")
    second = store.create_doubt("second")
    listed = store.list_doubts(limit=1)
    assert [d.id for d in listed] == [second.id]
    assert {d.id for d in store.list_doubts()} == {first.id, second.id}


def test_mark_doubt_solved(store):
    d = store.create_doubt("Q")
    assert store.mark_doubt_solved(d.id).solved is True


def test_empty_deck_then_bulk_add_counts_cards(store):
    deck = store.create_deck("Bio basics", "Biology")
    assert deck.total_cards == 0
    assert deck.flashcards == []

    drafts = [CardDraft(front=f"Q{i}", back=f"A{i}") for i in range(4)]
    added = store.add_cards(deck.id, drafts)
    assert len(added) == 4

    loaded = store.get_deck(deck.id)
    assert loaded.total_cards == 4
    assert [c.front for c in loaded.flashcards] == ["Q0", "Q1", "Q2", "Q3"]


def test_card_update_and_delete_are_owner_scoped(store, other_store):
    deck = store.create_deck("Deck", "History")
    card = store.add_cards(deck.id, [CardDraft(front="When?", back="1066")])[0]

    with pytest.raises(RecordNotFound):
        other_store.update_card(card.id, "x", "y")

    updated = store.update_card(card.id, "When was Hastings?", "1066")
    assert updated.front == "When was Hastings?"

    store.delete_card(card.id)
    assert store.get_deck(deck.id).total_cards == 0


def test_pdf_crud(store):
    p = store.create_pdf("Notes", "data:application/pdf;base64,AAAA", request_id="pdf-1")
    again = store.create_pdf("Notes", "data:application/pdf;base64,AAAA", request_id="pdf-1")
    assert p.id == again.id
    assert [x.id for x in store.list_pdfs()] == [p.id]
    store.delete_pdf(p.id)
    assert store.list_pdfs() == []


def test_store_requires_user_id():
    from studymate.services.records import RecordStore

    with pytest.raises(ValueError):
        RecordStore("")
