from datetime import datetime

from pydantic import BaseModel, field_validator


class DeckCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("deck name is required")
        return value


class DeckUpdate(DeckCreate):
    pass


class DeckSelect(BaseModel):
    deck_id: str


class Deck(BaseModel):
    id: str
    name: str
    card_count: int = 0
    created_at: datetime
    updated_at: datetime


class DeckList(BaseModel):
    items: list[Deck]
    total: int
