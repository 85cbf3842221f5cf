from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studymate.db.base_class import Base
from studymate.models._ids import new_id


class StudySession(Base):
    __tablename__ = "study_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    subject: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    topic: Mapped[str] = mapped_column(String(256), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)         # YYYY-MM-DD
    start_time: Mapped[str] = mapped_column(String(8), nullable=False, default="")  # HH:MM
    duration: Mapped[str] = mapped_column(String(64), nullable=False)     # free text, "1.5 hours"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # persisted as strings: "0".."100" and "true"/"false" (see services.codec)
    progress: Mapped[str] = mapped_column(String(8), nullable=False, default="0")
    completed: Mapped[str] = mapped_column(String(8), nullable=False, default="false")

    client_request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)   # ISO-8601

    __table_args__ = (
        UniqueConstraint("user_id", "client_request_id", name="uq_study_session_request"),
    )
