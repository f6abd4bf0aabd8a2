"""Tests for helpfulness voting: add, retract, switch, self-vote guard."""

import pytest
from protean.exceptions import ValidationError

from product_reviews.errors import ForbiddenError
from product_reviews.review.events import HelpfulVoteRecorded
from product_reviews.review.review import Review, VoteOutcome, VoteType


def _make_review(**overrides):
    defaults = {
        "product_id": "prod-001",
        "customer_id": "cust-001",
        "rating": 4,
        "title": "Great product",
        "body": "I really enjoyed this product, it exceeded expectations.",
    }
    defaults.update(overrides)
    review = Review.submit(**defaults)
    review._events.clear()
    return review


def _assert_counts_match_votes(review):
    helpful = sum(1 for v in review.votes if v.vote_type == VoteType.HELPFUL.value)
    not_helpful = sum(1 for v in review.votes if v.vote_type == VoteType.NOT_HELPFUL.value)
    assert review.helpful_count == helpful
    assert review.unhelpful_count == not_helpful


class TestAddVote:
    def test_first_helpful_vote_is_added(self):
        review = _make_review()
        outcome = review.vote("cust-002", VoteType.HELPFUL.value)
        assert outcome == VoteOutcome.ADDED
        assert review.helpful_count == 1
        assert review.unhelpful_count == 0
        assert str(review.votes[0].customer_id) == "cust-002"

    def test_first_not_helpful_vote_is_added(self):
        review = _make_review()
        review.vote("cust-002", VoteType.NOT_HELPFUL.value)
        assert review.helpful_count == 0
        assert review.unhelpful_count == 1

    def test_one_entry_per_voter(self):
        review = _make_review()
        review.vote("cust-002", "Helpful")
        review.vote("cust-003", "Helpful")
        review.vote("cust-004", "NotHelpful")
        assert len(review.votes) == 3
        assert review.helpful_count == 2
        assert review.unhelpful_count == 1


class TestRetractVote:
    def test_same_vote_twice_retracts(self):
        review = _make_review()
        review.vote("cust-002", "Helpful")
        outcome = review.vote("cust-002", "Helpful")
        assert outcome == VoteOutcome.RETRACTED
        assert review.helpful_count == 0
        assert len(review.votes) == 0

    def test_retract_restores_previous_state(self):
        review = _make_review()
        review.vote("cust-003", "NotHelpful")
        before = (review.helpful_count, review.unhelpful_count, len(review.votes))

        review.vote("cust-002", "Helpful")
        review.vote("cust-002", "Helpful")

        assert (review.helpful_count, review.unhelpful_count, len(review.votes)) == before


class TestSwitchVote:
    def test_opposite_vote_switches(self):
        review = _make_review()
        review.vote("cust-002", "Helpful")
        outcome = review.vote("cust-002", "NotHelpful")
        assert outcome == VoteOutcome.SWITCHED
        assert review.helpful_count == 0
        assert review.unhelpful_count == 1
        assert len(review.votes) == 1
        assert review.vote_of("cust-002").vote_type == "NotHelpful"


class TestVoteTallyInvariant:
    def test_counts_always_match_vote_list(self):
        review = _make_review()
        sequence = [
            ("cust-002", "Helpful"),
            ("cust-003", "NotHelpful"),
            ("cust-002", "NotHelpful"),
            ("cust-004", "Helpful"),
            ("cust-003", "NotHelpful"),
            ("cust-004", "Helpful"),
            ("cust-005", "Helpful"),
        ]
        for voter, kind in sequence:
            review.vote(voter, kind)
            _assert_counts_match_votes(review)

        assert review.helpful_count == 1
        assert review.unhelpful_count == 1


class TestVoteGuards:
    def test_cannot_vote_on_own_review(self):
        review = _make_review()
        with pytest.raises(ForbiddenError) as exc:
            review.vote("cust-001", "Helpful")
        assert "Cannot vote on your own review" in str(exc.value)
        assert review.helpful_count == 0

    def test_self_vote_checked_before_vote_kind(self):
        review = _make_review()
        with pytest.raises(ForbiddenError):
            review.vote("cust-001", "Love")

    def test_unknown_vote_kind_rejected(self):
        review = _make_review()
        with pytest.raises(ValidationError) as exc:
            review.vote("cust-002", "Love")
        assert "vote_type" in exc.value.messages
        assert len(review.votes) == 0


class TestVoteEvent:
    def test_vote_raises_event_with_tallies(self):
        review = _make_review()
        review.vote("cust-002", "Helpful", correlation_id="corr-1")

        assert len(review._events) == 1
        event = review._events[0]
        assert isinstance(event, HelpfulVoteRecorded)
        assert str(event.voter_id) == "cust-002"
        assert event.outcome == VoteOutcome.ADDED.value
        assert event.helpful_count == 1
        assert event.unhelpful_count == 0
        assert event.correlation_id == "corr-1"


class TestHelpfulScore:
    def test_zero_when_nobody_voted(self):
        review = _make_review()
        assert review.helpful_score == 0
        assert review.total_votes == 0

    def test_rounds_half_up(self):
        review = _make_review()
        for i in range(5):
            review.vote(f"helpful-{i}", "Helpful")
        for i in range(3):
            review.vote(f"not-{i}", "NotHelpful")
        # 5 / 8 = 62.5%
        assert review.helpful_score == 63
        assert review.total_votes == 8
