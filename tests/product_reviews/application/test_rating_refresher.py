"""Application tests for the fire-and-forget rating refresher."""

from datetime import UTC, datetime
from unittest.mock import patch

from protean import current_domain

from product_reviews.rating.product_rating import ProductRating
from product_reviews.rating.refresher import ProductRatingRefresher
from product_reviews.review.events import ReviewDeleted, ReviewHidden
from product_reviews.review.moderation import ModerateReview
from product_reviews.review.review import Review, ReviewStatus
from product_reviews.review.submission import SubmitReview


def _submit_review(**overrides):
    defaults = {
        "product_id": "prod-rf",
        "customer_id": "cust-rf",
        "rating": 3,
        "title": "Okay",
    }
    defaults.update(overrides)
    return current_domain.process(SubmitReview(**defaults), asynchronous=False)


class TestProductRatingRefresher:
    def test_submission_refreshes_rating(self, auto_approve):
        _submit_review()
        rating = current_domain.repository_for(ProductRating).get("prod-rf")
        assert (rating.total_reviews, rating.average_rating) == (1, 3.0)

    def test_recompute_failure_does_not_fail_the_write(self, auto_approve):
        with patch(
            "product_reviews.rating.refresher.recompute_product_rating",
            side_effect=RuntimeError("store unavailable"),
        ) as recompute:
            review_id = _submit_review()

        assert recompute.called
        review = current_domain.repository_for(Review).get(review_id)
        assert review.status == ReviewStatus.APPROVED.value

    def test_rating_heals_on_next_change(self, auto_approve):
        with patch(
            "product_reviews.rating.refresher.recompute_product_rating",
            side_effect=RuntimeError("store unavailable"),
        ):
            _submit_review(customer_id="cust-1", rating=5)

        _submit_review(customer_id="cust-2", rating=3)

        rating = current_domain.repository_for(ProductRating).get("prod-rf")
        assert (rating.total_reviews, rating.average_rating) == (2, 4.0)

    def test_moderation_triggers_refresh(self):
        review_id = _submit_review()
        with patch("product_reviews.rating.refresher.recompute_product_rating") as recompute:
            current_domain.process(
                ModerateReview(review_id=review_id, moderator_id="mod-1", action="Approve"),
                asynchronous=False,
            )
        recompute.assert_called_once()
        assert recompute.call_args.args[0] == "prod-rf"

    def test_moderator_hide_refreshes_whoever_the_moderator_is(self, auto_approve):
        review_id = _submit_review()
        with patch("product_reviews.rating.refresher.recompute_product_rating") as recompute:
            current_domain.process(
                ModerateReview(review_id=review_id, moderator_id="System", action="Hide"),
                asynchronous=False,
            )
        recompute.assert_called_once()

    def test_cascade_hide_is_left_to_the_lifecycle_handler(self):
        event = ReviewHidden(
            review_id="rev-1",
            product_id="prod-rf",
            hidden_by="System",
            reason="Product deleted",
            cascade=True,
            hidden_at=datetime.now(UTC),
        )
        with patch("product_reviews.rating.refresher.recompute_product_rating") as recompute:
            ProductRatingRefresher().on_hidden(event)
        recompute.assert_not_called()

    def test_cascade_delete_is_left_to_the_lifecycle_handler(self):
        event = ReviewDeleted(
            review_id="rev-1",
            product_id="prod-rf",
            rating=4,
            deleted_by="System",
            cascade=True,
            deleted_at=datetime.now(UTC),
        )
        with patch("product_reviews.rating.refresher.recompute_product_rating") as recompute:
            ProductRatingRefresher().on_deleted(event)
        recompute.assert_not_called()
