from studymate.db.base_class import Base  # noqa: F401

# Import all the models here so that Base has them registered (alembic, create_all).
# This file should NOT be imported by models.
from studymate.models.study_session import StudySession  # noqa: F401
from studymate.models.doubt import Doubt, DoubtMessage  # noqa: F401
from studymate.models.flashcard import Flashcard, FlashcardDeck  # noqa: F401
from studymate.models.saved_pdf import SavedPDF  # noqa: F401
