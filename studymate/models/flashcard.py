from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from studymate.db.base_class import Base
from studymate.models._ids import new_id


class FlashcardDeck(Base):
    __tablename__ = "flashcard_decks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(64), nullable=False, index=True)

    name = Column(String(256), nullable=False)
    subject = Column(String(128), nullable=False)

    client_request_id = Column(String(64), nullable=True)
    created_at = Column(String(40), nullable=False)

    # no stored card counter: the count is len(cards)
    cards = relationship(
        "Flashcard",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="Flashcard.created_at",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "client_request_id", name="uq_flashcard_deck_request"),
    )


class Flashcard(Base):
    __tablename__ = "flashcards"

    id = Column(String(36), primary_key=True, default=new_id)
    deck_id = Column(String(36), ForeignKey("flashcard_decks.id", ondelete="CASCADE"), nullable=False, index=True)

    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)
    created_at = Column(String(40), nullable=False)

    deck = relationship("FlashcardDeck", back_populates="cards")
