"""
Flashcard generation service.

For a topic typed by the user:
  1. Calls the LLM via llm_service.generate_text()
  2. Parses "Q: / A:" pairs with card_parser.parse_ai_cards()
  3. Inserts the pairs into the deck, tagged "AI Generated"

Soft failures: if nothing parses, one card keeps the raw reply; if no model
answers, a placeholder card tells the user to start Ollama.
"""
from __future__ import annotations

import logging

import aiosqlite

from flashdeck.db.sqlite import create_card
from flashdeck.models.card import Card, CardCreate
from flashdeck.models.generation import GenerationResult, GenerationStatus
from flashdeck.services.card_parser import FALLBACK_ANSWER_CHARS, parse_ai_cards
from flashdeck.services.llm_service import LLMUnavailableError, generate_text

logger = logging.getLogger(__name__)

AI_TAGS = ["AI Generated"]
FAILED_TAGS = ["Manual"]
FAILED_ANSWER = (
    "AI generation failed. Please check if Ollama is running with: ollama serve"
)

PROMPT_TEMPLATE = (
    "Create 2-3 educational flashcards about: {topic}.\n"
    "Format EXACTLY like this:\n"
    "Q: What is photosynthesis?\n"
    "A: The process plants use to convert sunlight into energy.\n"
    "\n"
    "Q: Another question?\n"
    "A: Another answer."
)


def build_prompt(topic: str) -> str:
    return PROMPT_TEMPLATE.format(topic=topic)


async def generate_cards_for_deck(
    db: aiosqlite.Connection,
    deck_id: str,
    topic: str,
) -> GenerationResult:
    """
    Generate cards about *topic* and add them to *deck_id*.

    Always adds at least one card. Does not raise on LLM failure.
    """
    try:
        model, text = await generate_text(build_prompt(topic))
    except LLMUnavailableError as e:
        logger.warning("AI generation failed for %r: %s", topic, e)
        model, text = None, ""

    if not text.strip():
        card = await create_card(
            db,
            deck_id,
            CardCreate(
                question=f"Tell me about {topic}",
                answer=FAILED_ANSWER,
                tags=FAILED_TAGS,
            ),
        )
        return GenerationResult(
            status=GenerationStatus.FAILED,
            model=model,
            cards=[card],
            message="AI failed - added manual card",
        )

    parsed_cards = parse_ai_cards(text, topic)
    created: list[Card] = []
    for parsed in parsed_cards:
        question, answer = parsed.question.strip(), parsed.answer.strip()
        if not question or not answer:
            continue
        created.append(
            await create_card(
                db,
                deck_id,
                CardCreate(question=question, answer=answer, tags=AI_TAGS),
            )
        )

    if created:
        parsed_pairs = not any(p.fallback for p in parsed_cards)
        return GenerationResult(
            status=GenerationStatus.GENERATED if parsed_pairs else GenerationStatus.FALLBACK,
            model=model,
            cards=created,
            message=f"Generated {len(created)} flashcard{'s' if len(created) != 1 else ''}",
        )

    logger.info("No Q/A pairs parsed from %s output, keeping raw text", model)
    card = await create_card(
        db,
        deck_id,
        CardCreate(
            question=f"About: {topic}",
            answer=text.strip()[:FALLBACK_ANSWER_CHARS],
            tags=AI_TAGS,
        ),
    )
    return GenerationResult(
        status=GenerationStatus.FALLBACK,
        model=model,
        cards=[card],
        message="Generated 1 flashcard",
    )
