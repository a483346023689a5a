from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import aiosqlite
from fastapi import Depends, HTTPException

from flashdeck.db.sqlite import get_db, get_deck
from flashdeck.models.deck import Deck

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """Clock used for scheduling; tests override this dependency."""
    return utc_now


async def get_deck_or_404(
    deck_id: str,
    db: aiosqlite.Connection = Depends(get_db),
) -> Deck:
    deck = await get_deck(db, deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck
