"""
Due-card selection on top of the scheduler.

A card is due when it is NEW, has never been scheduled, or its next review
time has passed. Selection keeps deck order; priority ordering is left to callers.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from flashdeck.models.card import Card
from flashdeck.models.review import ReviewState, ReviewStatus


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_due(state: ReviewState, now: datetime) -> bool:
    if state.status is ReviewStatus.NEW or state.next_review_at is None:
        return True
    return _as_utc(state.next_review_at) <= _as_utc(now)


def due_cards(cards: Sequence[Card], now: datetime) -> list[Card]:
    return [card for card in cards if is_due(card.review, now)]


def pick_next(cards: Sequence[Card], current_index: int, now: datetime) -> int:
    """
    Return the index of the nearest due card after *current_index*, wrapping around.

    Falls back to the plain next index when no other card is due, so a deck
    with nothing due can still be paged through.
    Raises ValueError for an empty sequence.
    """
    count = len(cards)
    if count == 0:
        raise ValueError("pick_next requires at least one card")
    if count == 1:
        return 0

    current = current_index % count
    for offset in range(1, count):
        index = (current + offset) % count
        if is_due(cards[index].review, now):
            return index
    return (current + 1) % count


def first_due(cards: Sequence[Card], now: datetime) -> int:
    """Index to open a study session on: the first due card, else 0."""
    if not cards:
        raise ValueError("first_due requires at least one card")
    return next((i for i, card in enumerate(cards) if is_due(card.review, now)), 0)
