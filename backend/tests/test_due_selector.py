from datetime import datetime, timedelta

import pytest

from conftest import T0
from flashdeck.models.card import Card
from flashdeck.models.review import ReviewState, ReviewStatus
from flashdeck.services.due_selector import due_cards, first_due, is_due, pick_next

DUE = ReviewState(
    status=ReviewStatus.REVIEW,
    interval_minutes=10,
    next_review_at=T0 - timedelta(minutes=1),
    created_at=T0 - timedelta(days=1),
)
LATER = ReviewState(
    status=ReviewStatus.REVIEW,
    interval_minutes=1440,
    next_review_at=T0 + timedelta(days=1),
    created_at=T0 - timedelta(days=1),
)


def make_cards(*states: ReviewState) -> list[Card]:
    return [
        Card(
            id=f"card-{i}",
            deck_id="deck-1",
            question=f"Q{i}",
            answer=f"A{i}",
            tags=[],
            review=state,
            created_at=T0,
            updated_at=T0,
        )
        for i, state in enumerate(states)
    ]


class TestIsDue:
    def test_new_cards_are_always_due(self):
        state = ReviewState(next_review_at=T0 + timedelta(days=5), created_at=T0)
        assert is_due(state, T0)

    def test_unscheduled_card_is_due(self):
        state = ReviewState(status=ReviewStatus.LEARNING, created_at=T0)
        assert is_due(state, T0)

    def test_due_exactly_at_next_review(self):
        state = LATER.model_copy(update={"next_review_at": T0})
        assert is_due(state, T0)

    def test_future_review_is_not_due(self):
        assert not is_due(LATER, T0)
        assert is_due(LATER, T0 + timedelta(days=1, seconds=1))

    def test_naive_now_is_compared_as_utc(self):
        assert is_due(DUE, datetime(2026, 1, 5, 9, 0))
        assert not is_due(LATER, datetime(2026, 1, 5, 9, 0))


class TestDueCards:
    def test_keeps_input_order(self):
        cards = make_cards(DUE, LATER, ReviewState(created_at=T0), LATER, DUE)
        assert [c.id for c in due_cards(cards, T0)] == ["card-0", "card-2", "card-4"]

    def test_nothing_due(self):
        assert due_cards(make_cards(LATER, LATER), T0) == []

    def test_empty_input(self):
        assert due_cards([], T0) == []


class TestPickNext:
    def test_jumps_to_the_only_due_card(self):
        assert pick_next(make_cards(LATER, LATER, DUE), 0, T0) == 2

    def test_falls_back_to_next_index_when_nothing_due(self):
        assert pick_next(make_cards(LATER, LATER, LATER), 1, T0) == 2

    def test_fallback_wraps_around(self):
        assert pick_next(make_cards(LATER, LATER, LATER), 2, T0) == 0

    def test_search_wraps_around(self):
        assert pick_next(make_cards(DUE, LATER, LATER), 1, T0) == 0

    def test_picks_nearest_due_card_forward(self):
        assert pick_next(make_cards(DUE, LATER, LATER, DUE, DUE), 1, T0) == 3

    def test_does_not_repeat_current_card_when_others_due(self):
        cards = make_cards(DUE, DUE, LATER)
        assert pick_next(cards, 0, T0) == 1
        assert pick_next(cards, 1, T0) == 0

    def test_current_card_alone_due_moves_on(self):
        assert pick_next(make_cards(LATER, DUE, LATER), 1, T0) == 2

    def test_single_card(self):
        assert pick_next(make_cards(LATER), 0, T0) == 0
        assert pick_next(make_cards(DUE), 0, T0) == 0

    def test_stale_index_is_wrapped(self):
        assert pick_next(make_cards(LATER, DUE, LATER), 3, T0) == 1

    def test_empty_sequence_is_rejected(self):
        with pytest.raises(ValueError):
            pick_next([], 0, T0)


class TestFirstDue:
    def test_opens_on_first_due_card(self):
        assert first_due(make_cards(LATER, LATER, DUE), T0) == 2

    def test_defaults_to_first_card(self):
        assert first_due(make_cards(LATER, LATER), T0) == 0
