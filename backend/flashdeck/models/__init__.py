from flashdeck.models.card import (
    Card,
    CardCreate,
    CardList,
    CardUpdate,
    NextCard,
    ReviewLogEntry,
    ReviewRequest,
    ReviewResult,
    StudyStats,
)
from flashdeck.models.deck import Deck, DeckCreate, DeckList, DeckSelect, DeckUpdate
from flashdeck.models.generation import (
    GenerateRequest,
    GenerationResult,
    GenerationStatus,
)
from flashdeck.models.review import Rating, ReviewState, ReviewStatus

__all__ = [
    "Card",
    "CardCreate",
    "CardList",
    "CardUpdate",
    "Deck",
    "DeckCreate",
    "DeckList",
    "DeckSelect",
    "DeckUpdate",
    "GenerateRequest",
    "GenerationResult",
    "GenerationStatus",
    "NextCard",
    "Rating",
    "ReviewLogEntry",
    "ReviewRequest",
    "ReviewResult",
    "ReviewState",
    "ReviewStatus",
    "StudyStats",
]
