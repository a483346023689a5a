"""
Spaced-repetition scheduling engine.

A simplified SM-2 variant:
  NEW / LEARNING  fixed minute-scale steps to build short-term memory
  REVIEW          interval grows by a multiplier scaled by the card's ease
  RELEARNING      uses the REVIEW rules; AGAIN at REVIEW demotes here

Usage:
    new_state = schedule(card.review, Rating.GOOD, now)

The engine is pure: it never reads the clock, touches storage or mutates its input.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from flashdeck.models.review import (
    MAX_EASE,
    MAX_INTERVAL_MINUTES,
    MIN_EASE,
    Rating,
    ReviewState,
    ReviewStatus,
)

# (current interval minutes, current ease) -> new interval minutes
IntervalRule = Callable[[float, float], float]


class SchedulingError(ValueError):
    """Base class for errors reported by the scheduling engine."""


class InvalidRatingError(SchedulingError):
    """Raised when a rating is not one of AGAIN / HARD / GOOD / EASY."""


class InvariantViolationError(SchedulingError):
    """Raised when the incoming review state is already out of bounds."""


@dataclass(frozen=True)
class Transition:
    status: ReviewStatus
    interval: IntervalRule
    ease_delta: float = 0.0


def _fixed(minutes: float) -> IntervalRule:
    return lambda interval, ease: minutes


_REVIEW_RULES: dict[Rating, Transition] = {
    Rating.AGAIN: Transition(
        ReviewStatus.RELEARNING, lambda i, e: max(1.0, i * 0.1), -0.2
    ),
    Rating.HARD: Transition(ReviewStatus.REVIEW, lambda i, e: max(i * 0.6, 5.0), -0.15),
    Rating.GOOD: Transition(ReviewStatus.REVIEW, lambda i, e: max(i * 1.0 * e, 10.0)),
    Rating.EASY: Transition(
        ReviewStatus.REVIEW, lambda i, e: max(i * 1.5 * e, 15.0), 0.15
    ),
}

DEFAULT_RULES: dict[tuple[ReviewStatus, Rating], Transition] = {
    (ReviewStatus.NEW, Rating.AGAIN): Transition(ReviewStatus.LEARNING, _fixed(1)),
    (ReviewStatus.NEW, Rating.HARD): Transition(ReviewStatus.LEARNING, _fixed(5)),
    (ReviewStatus.NEW, Rating.GOOD): Transition(ReviewStatus.REVIEW, _fixed(10)),
    (ReviewStatus.NEW, Rating.EASY): Transition(ReviewStatus.REVIEW, _fixed(15), 0.15),
    (ReviewStatus.LEARNING, Rating.AGAIN): Transition(
        ReviewStatus.LEARNING, _fixed(1), -0.2
    ),
    (ReviewStatus.LEARNING, Rating.HARD): Transition(
        ReviewStatus.LEARNING, _fixed(5), -0.15
    ),
    (ReviewStatus.LEARNING, Rating.GOOD): Transition(ReviewStatus.REVIEW, _fixed(10)),
    (ReviewStatus.LEARNING, Rating.EASY): Transition(
        ReviewStatus.REVIEW, _fixed(30), 0.15
    ),
    **{(ReviewStatus.REVIEW, r): t for r, t in _REVIEW_RULES.items()},
    **{(ReviewStatus.RELEARNING, r): t for r, t in _REVIEW_RULES.items()},
}


@dataclass(frozen=True)
class SchedulerPolicy:
    rules: Mapping[tuple[ReviewStatus, Rating], Transition] = field(
        default_factory=lambda: dict(DEFAULT_RULES)
    )
    min_ease: float = MIN_EASE
    max_ease: float = MAX_EASE
    max_interval_minutes: float = MAX_INTERVAL_MINUTES


DEFAULT_POLICY = SchedulerPolicy()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _ensure_utc(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise TypeError("now must be a datetime instance")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalise_rating(rating: Any) -> Rating:
    if isinstance(rating, Rating):
        return rating
    if isinstance(rating, str):
        try:
            return Rating(rating)
        except ValueError:
            pass
    raise InvalidRatingError(f"Unsupported rating: {rating!r}")


def check_invariants(state: ReviewState, policy: SchedulerPolicy = DEFAULT_POLICY) -> None:
    """Raise InvariantViolationError if *state* is outside the documented bounds."""
    if not math.isfinite(state.ease) or not policy.min_ease <= state.ease <= policy.max_ease:
        raise InvariantViolationError(
            f"ease {state.ease} outside [{policy.min_ease}, {policy.max_ease}]"
        )
    interval = state.interval_minutes
    if not math.isfinite(interval) or not 0 <= interval <= policy.max_interval_minutes:
        raise InvariantViolationError(
            f"interval_minutes {interval} outside [0, {policy.max_interval_minutes}]"
        )
    if state.review_count < 0:
        raise InvariantViolationError(f"review_count {state.review_count} is negative")
    if state.streak < 0:
        raise InvariantViolationError(f"streak {state.streak} is negative")


def schedule(
    state: ReviewState,
    rating: Rating | str,
    now: datetime,
    policy: SchedulerPolicy = DEFAULT_POLICY,
) -> ReviewState:
    """Apply *rating* to *state* at *now* and return the next review state."""
    grade = _normalise_rating(rating)
    moment = _ensure_utc(now)
    check_invariants(state, policy)

    transition = policy.rules[(state.status, grade)]

    interval = transition.interval(state.interval_minutes, state.ease)
    interval = _clamp(interval, 0.0, policy.max_interval_minutes)
    ease = state.ease
    if transition.ease_delta:
        # round away float noise from the delta, e.g. 2.5 - 0.15
        ease = round(ease + transition.ease_delta, 2)
    ease = _clamp(ease, policy.min_ease, policy.max_ease)

    return state.model_copy(
        update={
            "status": transition.status,
            "interval_minutes": interval,
            "ease": ease,
            "next_review_at": moment + timedelta(minutes=interval),
            "review_count": state.review_count + 1,
            "last_rating": grade,
            "streak": 0 if grade is Rating.AGAIN else state.streak + 1,
        }
    )


__all__ = [
    "DEFAULT_POLICY",
    "DEFAULT_RULES",
    "InvalidRatingError",
    "InvariantViolationError",
    "SchedulerPolicy",
    "SchedulingError",
    "Transition",
    "check_invariants",
    "schedule",
]
