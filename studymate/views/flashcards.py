from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from typing import Any, Optional

from pydantic import ValidationError

from studymate.schemas import CardDraft, CardRecord, DeckRecord
from studymate.services.generation import GenerationProxy
from studymate.views.base import ViewController, action

logger = logging.getLogger(__name__)


class StudyMode:
    """Walk a deck's cards one at a time; next/previous wrap around."""

    def __init__(self, deck: DeckRecord) -> None:
        self.deck = deck
        self.index = 0
        self.flipped = False

    @property
    def current(self) -> CardRecord | None:
        if self.index < len(self.deck.flashcards):
            return self.deck.flashcards[self.index]
        return None

    @property
    def position(self) -> str:
        return f"Card {self.index + 1} of {len(self.deck.flashcards)}"

    def flip(self) -> None:
        self.flipped = not self.flipped

    def next(self) -> CardRecord | None:
        self.flipped = False
        total = len(self.deck.flashcards)
        self.index = self.index + 1 if self.index < total - 1 else 0
        return self.current

    def previous(self) -> CardRecord | None:
        self.flipped = False
        total = len(self.deck.flashcards)
        self.index = self.index - 1 if self.index > 0 else max(total - 1, 0)
        return self.current


class FlashcardGeneratorView(ViewController):
    load_error_title = "Error loading flashcards"

    def __init__(self, *args, proxy: GenerationProxy | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.proxy = proxy or GenerationProxy()
        self.decks: list[DeckRecord] = []
        self.selected_id: str | None = None
        self.generated: list[CardDraft] = []
        self.generating = False

    async def load(self) -> None:
        self.decks = await self._call(self.store.list_decks)

    # -----------------------
    # Queries
    # -----------------------
    def get(self, deck_id: str) -> DeckRecord | None:
        for d in self.decks:
            if d.id == deck_id:
                return d
        return None

    @property
    def selected(self) -> DeckRecord | None:
        return self.get(self.selected_id) if self.selected_id else None

    def select_deck(self, deck_id: str | None) -> DeckRecord | None:
        if deck_id is None:
            self.selected_id = None
            return None
        found = self.get(deck_id)
        if found is not None:
            self.selected_id = found.id
        return found

    def study(self, deck_id: str | None = None) -> StudyMode | None:
        deck = self.get(deck_id) if deck_id else self.selected
        if deck is None or not deck.flashcards:
            return None
        return StudyMode(deck)

    def _put(self, deck: DeckRecord) -> None:
        if self.get(deck.id) is None:
            self.decks = [deck, *self.decks]
        else:
            self.decks = [deck if d.id == deck.id else d for d in self.decks]

    def _with_cards(self, deck_id: str, cards: list[CardRecord]) -> DeckRecord | None:
        deck = self.get(deck_id)
        if deck is None:
            return None
        updated = deck.model_copy(update={"flashcards": cards})
        self._put(updated)
        return updated

    # -----------------------
    # Actions
    # -----------------------
    @action("Error creating deck")
    async def create_deck(self, name: str, subject: str, request_id: str | None = None) -> Optional[DeckRecord]:
        name = (name or "").strip()
        subject = (subject or "").strip()
        if not name or not subject:
            self.notify("Missing information", "Deck name and subject are required.", variant="destructive")
            return None

        deck = await self._call(self.store.create_deck, name, subject, request_id or uuid.uuid4().hex)
        self._put(deck)
        self.selected_id = deck.id
        self.notify("Deck created", f'Deck "{name}" has been created.')
        return deck

    @action("Error generating flashcards")
    async def generate(self, text: str, count: int = 10, subject: str | None = None) -> Optional[list[CardDraft]]:
        text = (text or "").strip()
        if not text:
            self.notify("Text required", "Please enter some text to generate flashcards from.", variant="destructive")
            return None

        if subject is None and self.selected is not None:
            subject = self.selected.subject

        self.generating = True
        try:
            cards = await self._call(self.proxy.generate_flashcards, text, subject, count)
        finally:
            self.generating = False
        self.generated = cards
        self.notify("Flashcards generated", f"{len(cards)} flashcards have been generated.")
        return cards

    @action("Error adding flashcards")
    async def add_generated_flashcards(
        self,
        cards: Iterable[CardDraft | dict[str, Any]] | None = None,
    ) -> Optional[DeckRecord]:
        deck = self.selected
        source = list(cards) if cards is not None else self.generated
        try:
            drafts = [c if isinstance(c, CardDraft) else CardDraft.model_validate(c) for c in source]
        except ValidationError:
            self.notify("Invalid flashcards", "Every card needs a front and a back.", variant="destructive")
            return None
        if deck is None or not drafts:
            return None

        added = await self._call(self.store.add_cards, deck.id, drafts)
        updated = self._with_cards(deck.id, [*deck.flashcards, *added])
        if cards is None:
            self.generated = []
        self.notify("Flashcards added", f'{len(added)} flashcards have been added to "{deck.name}".')
        return updated

    @action("Error updating deck")
    async def add_card(self, front: str, back: str) -> Optional[CardRecord]:
        deck = self.selected
        if deck is None:
            return None
        try:
            draft = CardDraft(front=(front or "").strip(), back=(back or "").strip())
        except ValidationError:
            self.notify("Missing information", "Both sides of the card are required.", variant="destructive")
            return None

        added = await self._call(self.store.add_cards, deck.id, [draft])
        self._with_cards(deck.id, [*deck.flashcards, *added])
        self.notify("Deck updated", f'Deck "{deck.name}" has been updated.')
        return added[0]

    @action("Error updating deck")
    async def update_card(self, card_id: str, front: str, back: str) -> Optional[CardRecord]:
        deck = self._deck_of(card_id)
        front, back = (front or "").strip(), (back or "").strip()
        if not front or not back:
            self.notify("Missing information", "Both sides of the card are required.", variant="destructive")
            return None

        card = await self._call(self.store.update_card, card_id, front, back)
        if deck is not None:
            self._with_cards(deck.id, [card if c.id == card_id else c for c in deck.flashcards])
            self.notify("Deck updated", f'Deck "{deck.name}" has been updated.')
        return card

    @action("Error updating deck")
    async def delete_card(self, card_id: str) -> Optional[bool]:
        deck = self._deck_of(card_id)
        await self._call(self.store.delete_card, card_id)
        if deck is not None:
            self._with_cards(deck.id, [c for c in deck.flashcards if c.id != card_id])
            self.notify("Deck updated", f'Deck "{deck.name}" has been updated.')
        return True

    def _deck_of(self, card_id: str) -> DeckRecord | None:
        for d in self.decks:
            if any(c.id == card_id for c in d.flashcards):
                return d
        return None
