from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from studymate.api.deps import get_store, http_error
from studymate.core.errors import StoreError
from studymate.schemas import SummaryType
from studymate.services.generation import MAX_SUMMARY_LENGTH, MIN_SUMMARY_LENGTH
from studymate.services.pdf_export import build_summary_pdf, decode_data_uri, pdf_filename, to_data_uri
from studymate.services.records import RecordStore

router = APIRouter(prefix="/pdfs", tags=["pdfs"])


class SavePDFRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    summary_type: SummaryType = "concise"
    summary_length: int = Field(default=50, ge=MIN_SUMMARY_LENGTH, le=MAX_SUMMARY_LENGTH)
    request_id: str | None = None


def _listing(p) -> dict:
    # payloads can be large; listings carry metadata only
    return {"id": p.id, "title": p.title, "created_at": p.created_at}


@router.get("")
def list_pdfs(store: RecordStore = Depends(get_store)):
    try:
        pdfs = store.list_pdfs()
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "pdfs": [_listing(p) for p in pdfs]}


@router.post("", status_code=201)
def save_pdf(req: SavePDFRequest, store: RecordStore = Depends(get_store)):
    title = req.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    pdf_bytes = build_summary_pdf(title, req.summary_type, req.summary_length, req.summary, datetime.now())
    try:
        record = store.create_pdf(title, to_data_uri(pdf_bytes), req.request_id)
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "pdf": _listing(record)}


@router.get("/{pdf_id}/download")
def download_pdf(pdf_id: str, store: RecordStore = Depends(get_store)) -> Response:
    try:
        record = store.get_pdf(pdf_id)
    except StoreError as e:
        raise http_error(e) from e
    try:
        content = decode_data_uri(record.pdf_data)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(record.title)}"'},
    )


@router.delete("/{pdf_id}")
def delete_pdf(pdf_id: str, store: RecordStore = Depends(get_store)):
    try:
        store.delete_pdf(pdf_id)
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "pdf_id": pdf_id}
