"""
Study router: due-card selection for a deck.

Endpoints:
  GET /decks/{id}/study/due    cards due now, deck order
  GET /decks/{id}/study/next   index of the next card to show after ?current_index
  GET /decks/{id}/study/stats  totals, due count, per-status breakdown
"""
from __future__ import annotations

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from flashdeck.db.sqlite import get_db, list_cards_for_deck
from flashdeck.dependencies import Clock, get_clock, get_deck_or_404
from flashdeck.models.card import CardList, NextCard, StudyStats
from flashdeck.models.deck import Deck
from flashdeck.services.due_selector import due_cards, first_due, is_due, pick_next
from flashdeck.services.review_service import deck_study_stats

router = APIRouter()


@router.get("/{deck_id}/study/due", response_model=CardList)
async def get_due(
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CardList:
    items = due_cards(await list_cards_for_deck(db, deck.id), clock())
    return CardList(items=items, total=len(items))


@router.get("/{deck_id}/study/next", response_model=NextCard)
async def get_next(
    current_index: int | None = Query(default=None),
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> NextCard:
    """
    Nearest due card after current_index, or the plain next card if none is due.

    Without current_index, opens the session on the first due card.
    """
    cards = await list_cards_for_deck(db, deck.id)
    if not cards:
        raise HTTPException(status_code=404, detail="Deck has no cards")
    now = clock()
    if current_index is None:
        index = first_due(cards, now)
    else:
        index = pick_next(cards, current_index, now)
    card = cards[index]
    return NextCard(index=index, due=is_due(card.review, now), card=card)


@router.get("/{deck_id}/study/stats", response_model=StudyStats)
async def get_stats(
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> StudyStats:
    return deck_study_stats(await list_cards_for_deck(db, deck.id), clock())
