import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from flashdeck.db.sqlite import (
    create_card,
    create_deck,
    delete_deck,
    get_current_deck,
    get_db,
    get_deck,
    list_cards_for_deck,
    list_decks,
    rename_deck,
    set_current_deck,
)
from flashdeck.dependencies import get_deck_or_404
from flashdeck.models.card import Card, CardCreate, CardList
from flashdeck.models.deck import Deck, DeckCreate, DeckList, DeckSelect, DeckUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=Deck, status_code=201)
async def create(body: DeckCreate, db: aiosqlite.Connection = Depends(get_db)):
    """Create a deck and make it the current one."""
    deck = await create_deck(db, body.name)
    await set_current_deck(db, deck.id)
    logger.info("Deck %r created (%s)", deck.name, deck.id)
    return deck


@router.get("/", response_model=DeckList)
async def list_all(db: aiosqlite.Connection = Depends(get_db)):
    items = await list_decks(db)
    return DeckList(items=items, total=len(items))


@router.get("/current", response_model=Deck)
async def current(db: aiosqlite.Connection = Depends(get_db)):
    deck = await get_current_deck(db)
    if not deck:
        raise HTTPException(status_code=404, detail="No deck selected")
    return deck


@router.put("/current", response_model=Deck)
async def select(body: DeckSelect, db: aiosqlite.Connection = Depends(get_db)):
    deck = await get_deck(db, body.deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    await set_current_deck(db, deck.id)
    return deck


@router.get("/{deck_id}", response_model=Deck)
async def get_one(deck: Deck = Depends(get_deck_or_404)):
    return deck


@router.patch("/{deck_id}", response_model=Deck)
async def rename(
    deck_id: str, body: DeckUpdate, db: aiosqlite.Connection = Depends(get_db)
):
    deck = await rename_deck(db, deck_id, body.name)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


@router.delete("/{deck_id}", status_code=204)
async def remove(deck_id: str, db: aiosqlite.Connection = Depends(get_db)) -> None:
    deleted = await delete_deck(db, deck_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Deck not found")
    logger.info("Deck %s deleted", deck_id)


# --- Cards within a deck ---


@router.post("/{deck_id}/cards", response_model=Card, status_code=201)
async def add_card(
    body: CardCreate,
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
):
    return await create_card(db, deck.id, body)


@router.get("/{deck_id}/cards", response_model=CardList)
async def list_cards(
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
):
    """All cards of the deck in insertion order."""
    items = await list_cards_for_deck(db, deck.id)
    return CardList(items=items, total=len(items))
