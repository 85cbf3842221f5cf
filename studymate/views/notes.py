from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from studymate.schemas import PDFRecord
from studymate.services.generation import MAX_SUMMARY_LENGTH, MIN_SUMMARY_LENGTH, SUMMARY_TYPES, GenerationProxy
from studymate.services.pdf_export import build_summary_pdf, to_data_uri
from studymate.views.base import ViewController, action

logger = logging.getLogger(__name__)


class NotesSummarizerView(ViewController):
    """Summarize pasted notes and keep the result as a saved PDF."""

    def __init__(self, *args, proxy: GenerationProxy | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.proxy = proxy or GenerationProxy()
        self.summary: str = ""
        self.summary_type = "concise"
        self.summary_length = 50
        self.generating = False

    @action("Error generating summary")
    async def summarize(self, text: str, summary_type: str = "concise", summary_length: int = 50) -> Optional[str]:
        if not (text or "").strip():
            self.notify("Text required", "Please enter some text to summarize.", variant="destructive")
            return None
        if summary_type not in SUMMARY_TYPES or not (MIN_SUMMARY_LENGTH <= summary_length <= MAX_SUMMARY_LENGTH):
            self.notify(
                "Invalid options",
                f"Choose one of {', '.join(SUMMARY_TYPES)} and a length between "
                f"{MIN_SUMMARY_LENGTH}% and {MAX_SUMMARY_LENGTH}%.",
                variant="destructive",
            )
            return None

        self.generating = True
        try:
            summary = await self._call(self.proxy.summarize, text, summary_type, summary_length)
        finally:
            self.generating = False
        self.summary = summary
        self.summary_type = summary_type
        self.summary_length = summary_length
        self.notify("Summary generated", "Your notes have been summarized.")
        return summary

    @action("Error saving PDF")
    async def save_as_pdf(self, title: str, request_id: str | None = None) -> Optional[PDFRecord]:
        title = (title or "").strip()
        if not self.summary:
            self.notify("Nothing to save", "Generate a summary first.", variant="destructive")
            return None
        if not title:
            self.notify("Title required", "Please enter a title for the PDF.", variant="destructive")
            return None

        pdf_bytes = await self._call(
            build_summary_pdf, title, self.summary_type, self.summary_length, self.summary, datetime.now()
        )
        record = await self._call(self.store.create_pdf, title, to_data_uri(pdf_bytes), request_id or uuid.uuid4().hex)
        self.notify("PDF saved", f'"{title}" has been saved to your PDFs.')
        return record
