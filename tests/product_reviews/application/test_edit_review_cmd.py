"""Application tests for the EditReview command handler."""

import pytest
from protean import current_domain

from product_reviews.errors import ForbiddenError
from product_reviews.review.editing import EditReview
from product_reviews.review.review import Review, ReviewStatus
from product_reviews.review.submission import SubmitReview


def _submit_review(**overrides):
    defaults = {
        "product_id": "prod-edit",
        "customer_id": "cust-edit",
        "rating": 4,
        "title": "First take",
        "body": "Initial impressions are good.",
    }
    defaults.update(overrides)
    return current_domain.process(SubmitReview(**defaults), asynchronous=False)


def _edit(review_id, **kwargs):
    return current_domain.process(EditReview(review_id=review_id, **kwargs), asynchronous=False)


class TestEditReviewCommand:
    def test_author_can_edit(self):
        review_id = _submit_review()
        _edit(review_id, customer_id="cust-edit", title="Second take")
        review = current_domain.repository_for(Review).get(review_id)
        assert review.title == "Second take"
        assert review.is_edited is True

    def test_other_customer_is_forbidden(self):
        review_id = _submit_review()
        with pytest.raises(ForbiddenError) as exc:
            _edit(review_id, customer_id="cust-other", title="Hijacked")
        assert "Only the review author" in str(exc.value)

    def test_admin_can_edit_any_review(self):
        review_id = _submit_review()
        _edit(review_id, customer_id="admin-1", is_admin=True, body="Moderated wording.")
        assert current_domain.repository_for(Review).get(review_id).body == "Moderated wording."

    def test_rating_change_goes_back_to_moderation(self, auto_approve):
        review_id = _submit_review()
        auto_approve["MODERATION_REQUIRED"] = True
        _edit(review_id, customer_id="cust-edit", rating=1)
        assert current_domain.repository_for(Review).get(review_id).status == ReviewStatus.PENDING.value

    def test_rating_change_stays_published_without_moderation(self, auto_approve):
        review_id = _submit_review()
        _edit(review_id, customer_id="cust-edit", rating=1)
        review = current_domain.repository_for(Review).get(review_id)
        assert review.status == ReviewStatus.APPROVED.value
        assert review.rating.score == 1

    def test_returns_changed_fields(self):
        review_id = _submit_review()
        changed = _edit(review_id, customer_id="cust-edit", title="First take", rating=5)
        assert changed == ["rating"]
