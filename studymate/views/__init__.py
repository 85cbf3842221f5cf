from studymate.views.base import Notification, ViewController, ViewDetached, ViewState
from studymate.views.dashboard import DashboardView
from studymate.views.doubts import APOLOGY_MESSAGE, DoubtSolverView
from studymate.views.flashcards import FlashcardGeneratorView, StudyMode
from studymate.views.notes import NotesSummarizerView
from studymate.views.planner import StudyPlannerView
from studymate.views.saved_pdfs import SavedPDFsView

__all__ = [
    "APOLOGY_MESSAGE",
    "DashboardView",
    "DoubtSolverView",
    "FlashcardGeneratorView",
    "NotesSummarizerView",
    "Notification",
    "SavedPDFsView",
    "StudyMode",
    "StudyPlannerView",
    "ViewController",
    "ViewDetached",
    "ViewState",
]
