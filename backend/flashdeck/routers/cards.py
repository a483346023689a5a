"""
Card router.

Endpoints:
  GET    /cards/{id}           single card
  PATCH  /cards/{id}           edit question / answer / tags
  DELETE /cards/{id}           delete card
  POST   /cards/{id}/review    submit a rating, run the scheduler, persist the new state
  GET    /cards/{id}/reviews   review history, newest first
"""
from __future__ import annotations

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from flashdeck.db.sqlite import (
    delete_card,
    get_card,
    get_db,
    list_review_log,
    update_card_content,
)
from flashdeck.dependencies import Clock, get_clock
from flashdeck.models.card import (
    Card,
    CardUpdate,
    ReviewLogEntry,
    ReviewRequest,
    ReviewResult,
)
from flashdeck.services.review_service import CardNotFoundError, submit_review
from flashdeck.services.scheduler import InvalidRatingError, InvariantViolationError

router = APIRouter()


@router.get("/{card_id}", response_model=Card)
async def get_one(card_id: str, db: aiosqlite.Connection = Depends(get_db)) -> Card:
    card = await get_card(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.patch("/{card_id}", response_model=Card)
async def edit(
    card_id: str,
    body: CardUpdate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Card:
    updated = await update_card_content(db, card_id, body)
    if not updated:
        raise HTTPException(status_code=404, detail="Card not found")
    return updated


@router.delete("/{card_id}", status_code=204)
async def remove(card_id: str, db: aiosqlite.Connection = Depends(get_db)) -> None:
    deleted = await delete_card(db, card_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Card not found")


@router.post("/{card_id}/review", response_model=ReviewResult)
async def review(
    card_id: str,
    body: ReviewRequest,
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReviewResult:
    try:
        card, previous = await submit_review(db, card_id, body.rating, clock())
    except CardNotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except InvalidRatingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvariantViolationError as e:
        raise HTTPException(status_code=409, detail=f"Stored review state is invalid: {e}")
    return ReviewResult(card=card, previous=previous)


@router.get("/{card_id}/reviews", response_model=list[ReviewLogEntry])
async def history(
    card_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    db: aiosqlite.Connection = Depends(get_db),
) -> list[ReviewLogEntry]:
    if not await get_card(db, card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    return await list_review_log(db, card_id, limit=limit)
