from enum import Enum

from pydantic import BaseModel, field_validator

from flashdeck.models.card import Card


class GenerationStatus(str, Enum):
    GENERATED = "generated"  # parsed Q/A pairs from the model
    FALLBACK = "fallback"  # model answered but nothing parsed; raw text kept
    FAILED = "failed"  # no model answered; placeholder card added


class GenerateRequest(BaseModel):
    topic: str

    @field_validator("topic")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic is required")
        return value


class GenerationResult(BaseModel):
    status: GenerationStatus
    model: str | None = None
    cards: list[Card]
    message: str
