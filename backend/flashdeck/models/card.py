from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator

from flashdeck.models.review import Rating, ReviewState, ReviewStatus


class Card(BaseModel):
    id: str
    deck_id: str
    question: str
    answer: str
    tags: list[str]
    review: ReviewState
    created_at: datetime
    updated_at: datetime


class CardList(BaseModel):
    items: list[Card]
    total: int


class CardCreate(BaseModel):
    question: str
    answer: str
    tags: list[str] | None = None  # None = ["Manual"]

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question and answer are both required")
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [t.strip() for t in value if t.strip()] or None


class CardUpdate(BaseModel):
    question: str | None = None
    answer: str | None = None
    tags: list[str] | None = None

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("question and answer cannot be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [t.strip() for t in value if t.strip()]


class ReviewRequest(BaseModel):
    rating: Rating | None = None
    shortcut: str | None = None  # "1".."4", as bound to the study-screen keys

    @model_validator(mode="after")
    def _resolve_shortcut(self) -> ReviewRequest:
        if self.shortcut is None:
            if self.rating is None:
                raise ValueError("rating or shortcut is required")
            return self
        from_key = Rating.from_shortcut(self.shortcut)
        if self.rating is not None and self.rating is not from_key:
            raise ValueError(
                f"shortcut {self.shortcut!r} means {from_key.value}, not {self.rating.value}"
            )
        self.rating = from_key
        return self


class ReviewResult(BaseModel):
    card: Card
    previous: ReviewState


class ReviewLogEntry(BaseModel):
    id: str
    card_id: str
    rating: Rating
    status_before: ReviewStatus
    status_after: ReviewStatus
    interval_minutes: float
    ease: float
    reviewed_at: datetime


class NextCard(BaseModel):
    index: int
    due: bool
    card: Card


class StudyStats(BaseModel):
    total_cards: int
    due_now: int
    by_status: dict[ReviewStatus, int]
