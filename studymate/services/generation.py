"""
Generation proxy: builds prompts, forwards them to the configured LLM
provider and turns the semi-structured answers into records.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from studymate.core.errors import GenerationError
from studymate.schemas import CardDraft, MessageRecord
from studymate.services.llm import LLMClient, build_llm_client
from studymate.services.llm.prompts import (
    BULLET_SUMMARY_TEMPLATE,
    DOUBT_TEMPLATE,
    FLASHCARDS_TEMPLATE,
    FOLLOW_UP_CONTEXT_TEMPLATE,
    SUMMARY_TEMPLATE,
)

logger = logging.getLogger(__name__)

FLASHCARD_TEMPERATURE = 0.2
SUMMARY_TEMPERATURE = 0.2
DOUBT_TEMPERATURE = 0.3

SUMMARY_TYPES = ("concise", "detailed", "bullet")
MIN_SUMMARY_LENGTH = 10
MAX_SUMMARY_LENGTH = 90

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_FLASHCARD_SPLIT_RE = re.compile(r"Flashcard\s+\d+\s*:", re.IGNORECASE)
_FRONT_BACK_SPLIT_RE = re.compile(r"Front\s*:|Back\s*:", re.IGNORECASE)


# ----------------------------
# Flashcard parsing
# ----------------------------

def _extract_json_array(text: str) -> list[Any] | None:
    """
    Best-effort JSON array extraction if the model wraps it in prose or fences.
    """
    m = _JSON_ARRAY_RE.search(text or "")
    if not m:
        return None
    try:
        data = json.loads(m.group(0))
    except ValueError:
        return None
    return data if isinstance(data, list) else None


def _structured_cards(text: str) -> list[CardDraft]:
    items = _extract_json_array(text)
    if not items:
        return []
    cards: list[CardDraft] = []
    for it in items:
        if not isinstance(it, dict):
            return []
        try:
            cards.append(CardDraft(front=str(it.get("front") or "").strip(), back=str(it.get("back") or "").strip()))
        except ValidationError:
            # one malformed item invalidates the structured answer
            return []
    return cards


def _fallback_cards(text: str) -> list[CardDraft]:
    cards: list[CardDraft] = []
    for section in _FLASHCARD_SPLIT_RE.split(text or ""):
        parts = [p.strip() for p in _FRONT_BACK_SPLIT_RE.split(section)]
        parts = [p for p in parts if p]
        if len(parts) >= 2:
            cards.append(CardDraft(front=parts[0], back=parts[1]))
    return cards


def parse_flashcards(text: str) -> list[CardDraft]:
    """
    Structured parse first (a JSON array of {front, back}), then the
    "Flashcard N: / Front: / Back:" layout. Raises GenerationError(422) if
    neither yields a card.
    """
    cards = _structured_cards(text)
    if not cards:
        logger.info("Structured flashcard parse failed; trying text layout")
        cards = _fallback_cards(text)
    if not cards:
        logger.error("Failed to parse flashcards from AI response: %r", (text or "")[:200])
        raise GenerationError("Failed to parse flashcards from AI response", status_code=422)
    return cards


# ----------------------------
# Doubt context
# ----------------------------

def build_follow_up_context(messages: list[MessageRecord]) -> str:
    conversation = "\n\n".join(f"{m.sender.upper()}: {m.content}" for m in messages)
    return FOLLOW_UP_CONTEXT_TEMPLATE.format(conversation=conversation)


class GenerationProxy:
    def __init__(self, client: Optional[LLMClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> LLMClient:
        # built lazily so a missing key only fails the call that needs it
        if self._client is None:
            self._client = build_llm_client()
        return self._client

    def _generate(self, operation: str, prompt: str, temperature: float) -> str:
        logger.info("Generation request: %s (prompt length=%d)", operation, len(prompt))
        try:
            return self.client.generate(prompt, temperature=temperature)
        except GenerationError as e:
            logger.error("Generation failed for %s: %s", operation, e.message)
            raise

    def generate_flashcards(self, text: str, subject: str | None = None, count: int = 10) -> list[CardDraft]:
        text = (text or "").strip()
        if not text:
            raise GenerationError("Text is required", status_code=400)
        if count < 1:
            raise GenerationError("Count must be at least 1", status_code=400)

        prompt = FLASHCARDS_TEMPLATE.format(count=count, subject=subject or "this topic", text=text)
        raw = self._generate("flashcards", prompt, FLASHCARD_TEMPERATURE)
        return parse_flashcards(raw)

    def summarize(self, text: str, summary_type: str = "concise", summary_length: int = 50) -> str:
        text = (text or "").strip()
        if not text:
            raise GenerationError("Text is required", status_code=400)
        if summary_type not in SUMMARY_TYPES:
            raise GenerationError(f"Unsupported summary type: {summary_type}", status_code=400)
        if not (MIN_SUMMARY_LENGTH <= summary_length <= MAX_SUMMARY_LENGTH):
            raise GenerationError(
                f"Summary length must be between {MIN_SUMMARY_LENGTH} and {MAX_SUMMARY_LENGTH}",
                status_code=400,
            )

        template = BULLET_SUMMARY_TEMPLATE if summary_type == "bullet" else SUMMARY_TEMPLATE
        prompt = template.format(summary_type=summary_type, summary_length=summary_length, text=text)
        return self._generate("summary", prompt, SUMMARY_TEMPERATURE)

    def answer_doubt(self, question: str, context: str | None = None) -> str:
        question = (question or "").strip()
        if not question:
            raise GenerationError("Question is required", status_code=400)

        extra = f"Additional context: {context}" if context else ""
        prompt = DOUBT_TEMPLATE.format(question=question, context=extra).strip()
        return self._generate("doubt", prompt, DOUBT_TEMPERATURE)
