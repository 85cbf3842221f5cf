from __future__ import annotations

from typing import Optional

from studymate.schemas import PDFRecord
from studymate.services.pdf_export import decode_data_uri, pdf_filename
from studymate.views.base import ViewController, action


class SavedPDFsView(ViewController):
    load_error_title = "Error loading PDFs"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.pdfs: list[PDFRecord] = []

    async def load(self) -> None:
        self.pdfs = await self._call(self.store.list_pdfs)

    def get(self, pdf_id: str) -> PDFRecord | None:
        for p in self.pdfs:
            if p.id == pdf_id:
                return p
        return None

    @action("Error downloading PDF")
    async def download(self, pdf_id: str) -> Optional[tuple[str, bytes]]:
        record = self.get(pdf_id) or await self._call(self.store.get_pdf, pdf_id)
        try:
            content = decode_data_uri(record.pdf_data)
        except ValueError as e:
            self.notify_error("Error downloading PDF", e)
            return None
        return pdf_filename(record.title), content

    @action("Error deleting PDF")
    async def delete(self, pdf_id: str) -> Optional[bool]:
        await self._call(self.store.delete_pdf, pdf_id)
        self.pdfs = [p for p in self.pdfs if p.id != pdf_id]
        self.notify("PDF deleted", "The PDF has been removed.")
        return True
