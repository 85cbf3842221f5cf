from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studymate.db.base_class import Base
from studymate.models._ids import new_id


class SavedPDF(Base):
    __tablename__ = "saved_pdfs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    pdf_data: Mapped[str] = mapped_column(Text, nullable=False)  # data:application/pdf;...;base64,...

    client_request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "client_request_id", name="uq_saved_pdf_request"),
    )
