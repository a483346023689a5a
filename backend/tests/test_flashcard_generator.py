from unittest.mock import AsyncMock, patch

import pytest

from flashdeck.db.sqlite import create_deck, list_cards_for_deck
from flashdeck.models.generation import GenerationStatus
from flashdeck.services.flashcard_generator import build_prompt, generate_cards_for_deck
from flashdeck.services.llm_service import LLMUnavailableError

GENERATE_TEXT = "flashdeck.services.flashcard_generator.generate_text"


@pytest.fixture
async def deck(db):
    return await create_deck(db, "Biology")


def test_prompt_names_topic_and_format():
    prompt = build_prompt("mitosis")
    assert "about: mitosis" in prompt
    assert "Q: " in prompt and "A: " in prompt


async def test_parsed_pairs_become_ai_cards(db, deck):
    reply = "Q: What is DNA?\nA: Genetic material.\n\nQ: What is RNA?\nA: A messenger."
    with patch(GENERATE_TEXT, AsyncMock(return_value=("phi4-mini", reply))) as mock:
        result = await generate_cards_for_deck(db, deck.id, "genetics")

    mock.assert_awaited_once_with(build_prompt("genetics"))
    assert result.status is GenerationStatus.GENERATED
    assert result.model == "phi4-mini"
    assert result.message == "Generated 2 flashcards"
    assert [c.question for c in result.cards] == ["What is DNA?", "What is RNA?"]
    assert all(c.tags == ["AI Generated"] for c in result.cards)

    stored = await list_cards_for_deck(db, deck.id)
    assert [c.id for c in stored] == [c.id for c in result.cards]


async def test_single_card_message_is_singular(db, deck):
    with patch(GENERATE_TEXT, AsyncMock(return_value=("phi", "Q: One?\nA: Yes."))):
        result = await generate_cards_for_deck(db, deck.id, "one")

    assert result.message == "Generated 1 flashcard"


async def test_unparseable_reply_is_kept_as_one_card(db, deck):
    reply = "Cells divide in several phases."
    with patch(GENERATE_TEXT, AsyncMock(return_value=("mistral", reply))):
        result = await generate_cards_for_deck(db, deck.id, "mitosis")

    assert result.status is GenerationStatus.FALLBACK
    assert len(result.cards) == 1
    assert result.cards[0].question == "Explain: mitosis"
    assert result.cards[0].answer == reply
    assert result.cards[0].tags == ["AI Generated"]


async def test_no_model_available_adds_placeholder(db, deck):
    with patch(GENERATE_TEXT, AsyncMock(side_effect=LLMUnavailableError("down"))):
        result = await generate_cards_for_deck(db, deck.id, "volcanoes")

    assert result.status is GenerationStatus.FAILED
    assert result.model is None
    assert result.message == "AI failed - added manual card"
    [card] = result.cards
    assert card.question == "Tell me about volcanoes"
    assert "ollama serve" in card.answer
    assert card.tags == ["Manual"]


async def test_blank_reply_counts_as_failure(db, deck):
    with patch(GENERATE_TEXT, AsyncMock(return_value=("phi", "   \n"))):
        result = await generate_cards_for_deck(db, deck.id, "tides")

    assert result.status is GenerationStatus.FAILED
    assert result.model == "phi"
    assert len(await list_cards_for_deck(db, deck.id)) == 1
