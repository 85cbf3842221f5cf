"""initial schema: study sessions, doubts, flashcard decks, saved pdfs

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 10:12:40.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "study_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("subject", sa.String(length=128), nullable=False),
        sa.Column("topic", sa.String(length=256), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False, server_default=""),
        sa.Column("duration", sa.String(length=64), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        # string-encoded on purpose, see services/codec.py
        sa.Column("progress", sa.String(length=8), nullable=False, server_default="0"),
        sa.Column("completed", sa.String(length=8), nullable=False, server_default="false"),
        sa.Column("client_request_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.String(length=40), nullable=False),
        sa.UniqueConstraint("user_id", "client_request_id", name="uq_study_session_request"),
    )
    op.create_index("ix_study_sessions_user_id", "study_sessions", ["user_id"])
    op.create_index("ix_study_sessions_subject", "study_sessions", ["subject"])

    op.create_table(
        "doubts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("subject", sa.String(length=128), nullable=False, server_default="General"),
        sa.Column("solved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("client_request_id", sa.String(length=64), nullable=True),
        sa.Column("timestamp", sa.String(length=40), nullable=False),
        sa.UniqueConstraint("user_id", "client_request_id", name="uq_doubt_request"),
    )
    op.create_index("ix_doubts_user_id", "doubts", ["user_id"])

    op.create_table(
        "doubt_messages",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "doubt_id",
            sa.String(length=36),
            sa.ForeignKey("doubts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sender", sa.String(length=8), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.String(length=40), nullable=False),
    )
    op.create_index("ix_doubt_messages_doubt_id", "doubt_messages", ["doubt_id"])

    op.create_table(
        "flashcard_decks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("subject", sa.String(length=128), nullable=False),
        sa.Column("client_request_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.String(length=40), nullable=False),
        sa.UniqueConstraint("user_id", "client_request_id", name="uq_flashcard_deck_request"),
    )
    op.create_index("ix_flashcard_decks_user_id", "flashcard_decks", ["user_id"])

    op.create_table(
        "flashcards",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "deck_id",
            sa.String(length=36),
            sa.ForeignKey("flashcard_decks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("front", sa.Text(), nullable=False),
        sa.Column("back", sa.Text(), nullable=False),
        sa.Column("created_at", sa.String(length=40), nullable=False),
    )
    op.create_index("ix_flashcards_deck_id", "flashcards", ["deck_id"])

    op.create_table(
        "saved_pdfs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("pdf_data", sa.Text(), nullable=False),
        sa.Column("client_request_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.String(length=40), nullable=False),
        sa.UniqueConstraint("user_id", "client_request_id", name="uq_saved_pdf_request"),
    )
    op.create_index("ix_saved_pdfs_user_id", "saved_pdfs", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_saved_pdfs_user_id", table_name="saved_pdfs")
    op.drop_table("saved_pdfs")
    op.drop_index("ix_flashcards_deck_id", table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index("ix_flashcard_decks_user_id", table_name="flashcard_decks")
    op.drop_table("flashcard_decks")
    op.drop_index("ix_doubt_messages_doubt_id", table_name="doubt_messages")
    op.drop_table("doubt_messages")
    op.drop_index("ix_doubts_user_id", table_name="doubts")
    op.drop_table("doubts")
    op.drop_index("ix_study_sessions_subject", table_name="study_sessions")
    op.drop_index("ix_study_sessions_user_id", table_name="study_sessions")
    op.drop_table("study_sessions")
