"""
Review workflow: load a card, run the scheduler, persist the result.

Read-modify-write of a card's review state is serialised per card; reviews of
different cards never wait on each other.
"""
from __future__ import annotations

import asyncio
import logging
import weakref
from collections import Counter
from collections.abc import Sequence
from datetime import datetime

import aiosqlite

from flashdeck.config import settings
from flashdeck.db.sqlite import get_card, record_review
from flashdeck.models.card import Card, StudyStats
from flashdeck.models.review import Rating, ReviewState, ReviewStatus
from flashdeck.services.due_selector import due_cards
from flashdeck.services.scheduler import SchedulerPolicy, schedule

logger = logging.getLogger(__name__)

_card_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


class CardNotFoundError(LookupError):
    """Raised when a review targets a card that does not exist."""


def default_policy() -> SchedulerPolicy:
    return SchedulerPolicy(max_interval_minutes=settings.max_interval_minutes)


def _lock_for(card_id: str) -> asyncio.Lock:
    lock = _card_locks.get(card_id)
    if lock is None:
        lock = asyncio.Lock()
        _card_locks[card_id] = lock
    return lock


async def submit_review(
    db: aiosqlite.Connection,
    card_id: str,
    rating: Rating | str,
    now: datetime,
    policy: SchedulerPolicy | None = None,
) -> tuple[Card, ReviewState]:
    """
    Apply *rating* to the card and persist the new state.

    Returns (updated card, review state before the call).
    Raises CardNotFoundError, or the scheduler's SchedulingError subclasses.
    """
    async with _lock_for(card_id):
        card = await get_card(db, card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        before = card.review
        after = schedule(before, rating, now, policy or default_policy())
        await record_review(db, card_id, before, after, now)
        updated = await get_card(db, card_id)

    logger.info(
        "Card %s rated %s: %s -> %s, next in %.1f min",
        card_id,
        after.last_rating.value if after.last_rating else rating,
        before.status.value,
        after.status.value,
        after.interval_minutes,
    )
    return updated or card.model_copy(update={"review": after}), before


def deck_study_stats(cards: Sequence[Card], now: datetime) -> StudyStats:
    counts = Counter(card.review.status for card in cards)
    return StudyStats(
        total_cards=len(cards),
        due_now=len(due_cards(cards, now)),
        by_status={status: counts.get(status, 0) for status in ReviewStatus},
    )
