from __future__ import annotations

import logging
import uuid
from typing import Optional

from studymate.core.errors import GenerationError, StoreError
from studymate.realtime import events as ev
from studymate.schemas import DoubtRecord, MessageRecord
from studymate.services.generation import GenerationProxy, build_follow_up_context
from studymate.views.base import ViewController, action

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = (
    "I'm sorry, I encountered an error while processing your question. "
    "Please try again or rephrase your question."
)


class DoubtSolverView(ViewController):
    """
    Question threads with AI answers.

    The question is persisted (doubt row + first user message) before any
    answer is requested. A failed answer leaves the question in place and
    appends an apology from the assistant so the thread explains itself.
    """

    load_error_title = "Error loading doubts"

    def __init__(self, *args, proxy: GenerationProxy | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.proxy = proxy or GenerationProxy()
        self.doubts: list[DoubtRecord] = []
        self.selected_id: str | None = None
        self.generating = False

    async def load(self) -> None:
        self.doubts = await self._call(self.store.list_doubts)

    # -----------------------
    # Queries
    # -----------------------
    @property
    def selected(self) -> DoubtRecord | None:
        return self.get(self.selected_id) if self.selected_id else None

    def get(self, doubt_id: str) -> DoubtRecord | None:
        for d in self.doubts:
            if d.id == doubt_id:
                return d
        return None

    def select(self, doubt_id: str) -> DoubtRecord | None:
        found = self.get(doubt_id)
        if found is not None:
            self.selected_id = found.id
        return found

    def search(self, query: str) -> list[DoubtRecord]:
        q = (query or "").strip().lower()
        if not q:
            return list(self.doubts)
        return [d for d in self.doubts if q in d.question.lower() or q in d.subject.lower()]

    def solved(self) -> list[DoubtRecord]:
        return [d for d in self.doubts if d.solved]

    def unsolved(self) -> list[DoubtRecord]:
        return [d for d in self.doubts if not d.solved]

    def _put(self, doubt: DoubtRecord) -> None:
        if self.get(doubt.id) is None:
            self.doubts = [doubt, *self.doubts]
        else:
            self.doubts = [doubt if d.id == doubt.id else d for d in self.doubts]

    def _append(self, doubt_id: str, message: MessageRecord) -> None:
        doubt = self.get(doubt_id)
        if doubt is not None:
            self._put(doubt.model_copy(update={"messages": [*doubt.messages, message]}))

    # -----------------------
    # Answering
    # -----------------------
    async def _answer(self, doubt_id: str, question: str, context: str | None) -> Optional[MessageRecord]:
        """Ask the proxy and store its answer; on failure store the apology instead."""
        self.generating = True
        try:
            answer = await self._call(self.proxy.answer_doubt, question, context)
            message = await self._call(self.store.append_message, doubt_id, "ai", answer)
        except (GenerationError, StoreError) as e:
            logger.error("Error generating answer for doubt %s: %s", doubt_id, getattr(e, "message", e))
            apology = await self._call(self.store.append_message, doubt_id, "ai", APOLOGY_MESSAGE)
            self._append(doubt_id, apology)
            self.notify_error("Error generating answer", e)
            return None
        finally:
            self.generating = False
        self._append(doubt_id, message)
        return message

    # -----------------------
    # Actions
    # -----------------------
    @action("Error creating doubt")
    async def submit_question(
        self,
        question: str,
        subject: str = "General",
        request_id: str | None = None,
    ) -> Optional[DoubtRecord]:
        question = (question or "").strip()
        if not question:
            self.notify("Question required", "Please enter your question first.", variant="destructive")
            return None

        doubt = await self._call(
            self.store.create_doubt,
            question,
            (subject or "").strip() or "General",
            request_id or uuid.uuid4().hex,
        )
        self._put(doubt)
        self.selected_id = doubt.id
        self.publish(ev.EVENT_DOUBT_CREATED, ev.DoubtCreated(doubt=ev.DoubtSummary.of(doubt)))

        answered = await self._answer(doubt.id, question, None)
        if answered is not None:
            self.notify("Answer generated", "AI has answered your question.")
        return self.get(doubt.id)

    @action("Error sending message")
    async def send_message(self, content: str) -> Optional[DoubtRecord]:
        content = (content or "").strip()
        doubt = self.selected
        if not content or doubt is None:
            return None

        message = await self._call(self.store.append_message, doubt.id, "user", content)
        self._append(doubt.id, message)

        thread = self.get(doubt.id)
        context = build_follow_up_context(thread.messages if thread else [message])
        await self._answer(doubt.id, content, context)
        return self.get(doubt.id)

    @action("Error updating doubt")
    async def mark_solved(self, doubt_id: str) -> Optional[DoubtRecord]:
        doubt = await self._call(self.store.mark_doubt_solved, doubt_id)
        self._put(doubt)
        self.publish(ev.EVENT_DOUBT_UPDATED, ev.DoubtUpdated(doubt_id=doubt.id, solved=True))
        self.notify("Doubt marked as solved", "This question has been marked as solved.")
        return doubt

