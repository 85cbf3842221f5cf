"""
HTTP surface of the generation proxy.

Each endpoint answers with its result key or with {"error": ...} and the
status code of the failure.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from studymate.api.deps import get_proxy
from studymate.core.errors import GenerationError
from studymate.services.generation import GenerationProxy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateFlashcardsRequest(_Request):
    text: str = ""
    subject: str | None = None
    count: int = 10


class SummarizeRequest(_Request):
    text: str = ""
    summary_type: str = "concise"
    summary_length: int = 50


class DoubtSolverRequest(_Request):
    question: str = ""
    context: str | None = None


def _error(e: GenerationError) -> JSONResponse:
    return JSONResponse(status_code=e.status_code, content={"error": e.message})


@router.post("/generate-flashcards")
def generate_flashcards(req: GenerateFlashcardsRequest, proxy: GenerationProxy = Depends(get_proxy)):
    try:
        cards = proxy.generate_flashcards(req.text, req.subject, req.count)
    except GenerationError as e:
        return _error(e)
    return {"flashcards": [c.model_dump() for c in cards]}


@router.post("/summarize-notes")
def summarize_notes(req: SummarizeRequest, proxy: GenerationProxy = Depends(get_proxy)):
    try:
        summary = proxy.summarize(req.text, req.summary_type, req.summary_length)
    except GenerationError as e:
        return _error(e)
    return {"summary": summary}


@router.post("/doubt-solver")
def doubt_solver(req: DoubtSolverRequest, proxy: GenerationProxy = Depends(get_proxy)):
    try:
        answer = proxy.answer_doubt(req.question, req.context)
    except GenerationError as e:
        return _error(e)
    return {"answer": answer}
