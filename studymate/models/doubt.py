from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from studymate.db.base_class import Base
from studymate.models._ids import new_id


class Doubt(Base):
    __tablename__ = "doubts"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(64), nullable=False, index=True)

    question = Column(Text, nullable=False)
    subject = Column(String(128), nullable=False, default="General")
    solved = Column(Boolean, nullable=False, default=False)

    client_request_id = Column(String(64), nullable=True)
    timestamp = Column(String(40), nullable=False)  # ISO-8601

    messages = relationship(
        "DoubtMessage",
        back_populates="doubt",
        cascade="all, delete-orphan",
        order_by="DoubtMessage.timestamp",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "client_request_id", name="uq_doubt_request"),
    )


class DoubtMessage(Base):
    __tablename__ = "doubt_messages"

    id = Column(String(36), primary_key=True, default=new_id)
    doubt_id = Column(String(36), ForeignKey("doubts.id", ondelete="CASCADE"), nullable=False, index=True)

    sender = Column(String(8), nullable=False)  # user | ai
    content = Column(Text, nullable=False)
    timestamp = Column(String(40), nullable=False)

    doubt = relationship("Doubt", back_populates="messages")
