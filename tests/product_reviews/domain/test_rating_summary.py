"""Tests for the pure rating rollup."""

from datetime import UTC, datetime, timedelta

from product_reviews.rating.summary import RatingSummary, summarize_reviews
from product_reviews.review.review import Review


def _review(rating, customer, verified=False, body="Body text", helpful=0, images=None):
    review = Review.submit(
        product_id="prod-sum",
        customer_id=customer,
        rating=rating,
        title="Title",
        body=body,
        order_id="order-1" if verified else None,
        verified_purchase=verified,
        images=images,
    )
    review.helpful_count = helpful
    return review


class TestSummarizeReviews:
    def test_three_reviews_example(self):
        reviews = [_review(5, "c1"), _review(4, "c2"), _review(3, "c3")]
        summary = summarize_reviews(reviews)
        assert summary.total_reviews == 3
        assert summary.average_rating == 4.0
        assert summary.rating_distribution == [0, 0, 1, 1, 1]

    def test_empty_set_yields_empty_rollup(self):
        summary = summarize_reviews([])
        assert summary == RatingSummary()
        assert summary.total_reviews == 0
        assert summary.average_rating == 0.0
        assert summary.rating_distribution == [0, 0, 0, 0, 0]
        assert summary.verified_average_rating is None

    def test_average_rounds_half_up(self):
        reviews = [_review(5, f"five-{i}") for i in range(11)] + [_review(4, f"four-{i}") for i in range(9)]
        # 91 / 20 = 4.55
        assert summarize_reviews(reviews).average_rating == 4.6

    def test_average_of_thirds(self):
        reviews = [_review(5, "c1"), _review(5, "c2"), _review(4, "c3")]
        assert summarize_reviews(reviews).average_rating == 4.7

    def test_verified_subset(self):
        reviews = [_review(5, "c1", verified=True), _review(2, "c2", verified=True), _review(1, "c3")]
        summary = summarize_reviews(reviews)
        assert summary.verified_review_count == 2
        assert summary.verified_average_rating == 3.5

    def test_no_verified_reviews_means_no_verified_average(self):
        summary = summarize_reviews([_review(4, "c1")])
        assert summary.verified_review_count == 0
        assert summary.verified_average_rating is None

    def test_trend_windows_use_given_subsets(self):
        week = [_review(5, "c1")]
        month = week + [_review(3, "c2")]
        everything = month + [_review(1, "c3")]
        summary = summarize_reviews(everything, recent_7=week, recent_30=month)
        assert summary.last_7_days_count == 1
        assert summary.last_7_days_average == 5.0
        assert summary.last_30_days_count == 2
        assert summary.last_30_days_average == 4.0

    def test_quality_metrics(self):
        reviews = [
            _review(5, "c1", body="abcd", helpful=3, images=["https://cdn.example.com/x.jpg"]),
            _review(4, "c2", body="abcdefg", helpful=1),
        ]
        summary = summarize_reviews(reviews)
        assert summary.total_helpful_votes == 4
        # 4 helpful votes over 2 reviews
        assert summary.average_helpful_score == 200
        assert summary.reviews_with_media == 1
        # (4 + 7) / 2 = 5.5
        assert summary.average_review_length == 6

    def test_average_helpful_score_rounds_half_up(self):
        reviews = [_review(5, "c1", helpful=1)] + [_review(4, f"c{i}") for i in range(2, 9)]
        # 1 / 8 = 12.5%
        assert summarize_reviews(reviews).average_helpful_score == 13

    def test_no_helpful_votes_scores_zero(self):
        assert summarize_reviews([_review(4, "c1")]).average_helpful_score == 0

    def test_first_and_last_review_dates(self):
        older, newer = _review(4, "c1"), _review(5, "c2")
        older.created_at = datetime.now(UTC) - timedelta(days=3)
        summary = summarize_reviews([newer, older])
        assert summary.first_review_at == older.created_at
        assert summary.last_review_at == newer.created_at
