from studymate.models.study_session import StudySession
from studymate.models.doubt import Doubt, DoubtMessage
from studymate.models.flashcard import Flashcard, FlashcardDeck
from studymate.models.saved_pdf import SavedPDF

__all__ = ["StudySession", "Doubt", "DoubtMessage", "FlashcardDeck", "Flashcard", "SavedPDF"]
