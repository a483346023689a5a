from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

INITIAL_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.0
MAX_INTERVAL_MINUTES = 30 * 24 * 60


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReviewStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class Rating(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def from_shortcut(cls, key: str) -> Rating:
        """Map a study-screen key ("1".."4") to its rating."""
        try:
            return _SHORTCUTS[key.strip()]
        except KeyError:
            raise ValueError(f"Unknown rating shortcut: {key!r}") from None


_SHORTCUTS = {
    "1": Rating.AGAIN,
    "2": Rating.HARD,
    "3": Rating.GOOD,
    "4": Rating.EASY,
}


class ReviewState(BaseModel):
    """Per-card scheduling record. Only the scheduler produces new values."""

    model_config = ConfigDict(frozen=True)

    status: ReviewStatus = ReviewStatus.NEW
    interval_minutes: float = 0.0
    ease: float = INITIAL_EASE
    next_review_at: datetime | None = None  # None = due immediately
    review_count: int = 0
    last_rating: Rating | None = None
    streak: int = 0  # consecutive non-AGAIN ratings
    created_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def new(cls, created_at: datetime | None = None) -> ReviewState:
        return cls(created_at=created_at or _utc_now())
