import aiosqlite
from fastapi import APIRouter, Depends

from flashdeck.db.sqlite import get_db
from flashdeck.dependencies import get_deck_or_404
from flashdeck.models.deck import Deck
from flashdeck.models.generation import GenerateRequest, GenerationResult
from flashdeck.services.flashcard_generator import generate_cards_for_deck

router = APIRouter()


@router.post("/{deck_id}/generate", response_model=GenerationResult, status_code=201)
async def generate(
    body: GenerateRequest,
    deck: Deck = Depends(get_deck_or_404),
    db: aiosqlite.Connection = Depends(get_db),
) -> GenerationResult:
    """Ask the local LLM for cards about a topic. Always adds at least one card."""
    return await generate_cards_for_deck(db, deck.id, body.topic)
