"""Extract question/answer pairs from free-form model output."""
from __future__ import annotations

from dataclasses import dataclass

FALLBACK_ANSWER_CHARS = 200


@dataclass(frozen=True)
class ParsedCard:
    question: str
    answer: str
    fallback: bool = False  # true for the "Explain: <topic>" stand-in


def parse_ai_cards(text: str, topic: str) -> list[ParsedCard]:
    """
    Parse "Q: ... / A: ..." blocks.

    A non-prefixed line directly after a question is taken as its answer.
    When nothing parses, a single "Explain: <topic>" card holding the start of
    the text is returned, so the result is never empty.
    """
    cards: list[ParsedCard] = []
    question = ""
    answer = ""

    for line in text.splitlines():
        stripped = line.strip()
        prefix = stripped[:2].lower()

        if prefix == "q:":
            if question and answer:
                cards.append(ParsedCard(question, answer))
            question = stripped[2:].strip()
            answer = ""
        elif prefix == "a:":
            answer = stripped[2:].strip()
        elif stripped and question and not answer:
            answer = stripped

    if question and answer:
        cards.append(ParsedCard(question, answer))

    if not cards:
        cards.append(
            ParsedCard(f"Explain: {topic}", text[:FALLBACK_ANSWER_CHARS], fallback=True)
        )
    return cards
