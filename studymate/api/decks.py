from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from studymate.api.deps import get_store, http_error
from studymate.core.errors import RecordNotFound, StoreError
from studymate.schemas import CardDraft, DeckRecord
from studymate.services.records import RecordStore

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    request_id: str | None = None


class AddCardsRequest(BaseModel):
    cards: list[CardDraft] = Field(min_length=1)


class CardUpdateRequest(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)


class DeckResponse(BaseModel):
    ok: bool
    deck: DeckRecord


def _require_card_in_deck(store: RecordStore, deck_id: str, card_id: str) -> None:
    deck = store.get_deck(deck_id)
    if not any(c.id == card_id for c in deck.flashcards):
        raise RecordNotFound("Flashcard", card_id)


@router.get("")
def list_decks(store: RecordStore = Depends(get_store)):
    try:
        decks = store.list_decks()
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "decks": decks}


@router.post("", response_model=DeckResponse, status_code=201)
def create_deck(req: DeckCreateRequest, store: RecordStore = Depends(get_store)) -> DeckResponse:
    name, subject = req.name.strip(), req.subject.strip()
    if not name or not subject:
        raise HTTPException(status_code=400, detail="Deck name and subject are required")
    try:
        return DeckResponse(ok=True, deck=store.create_deck(name, subject, req.request_id))
    except StoreError as e:
        raise http_error(e) from e


@router.get("/{deck_id}", response_model=DeckResponse)
def get_deck(deck_id: str, store: RecordStore = Depends(get_store)) -> DeckResponse:
    try:
        return DeckResponse(ok=True, deck=store.get_deck(deck_id))
    except StoreError as e:
        raise http_error(e) from e


@router.post("/{deck_id}/cards", response_model=DeckResponse, status_code=201)
def add_cards(deck_id: str, req: AddCardsRequest, store: RecordStore = Depends(get_store)) -> DeckResponse:
    try:
        store.add_cards(deck_id, req.cards)
        return DeckResponse(ok=True, deck=store.get_deck(deck_id))
    except StoreError as e:
        raise http_error(e) from e


@router.patch("/{deck_id}/cards/{card_id}")
def update_card(deck_id: str, card_id: str, req: CardUpdateRequest, store: RecordStore = Depends(get_store)):
    try:
        _require_card_in_deck(store, deck_id, card_id)
        card = store.update_card(card_id, req.front.strip(), req.back.strip())
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "card": card}


@router.delete("/{deck_id}/cards/{card_id}")
def delete_card(deck_id: str, card_id: str, store: RecordStore = Depends(get_store)):
    try:
        _require_card_in_deck(store, deck_id, card_id)
        store.delete_card(card_id)
    except StoreError as e:
        raise http_error(e) from e
    return {"ok": True, "card_id": card_id}
