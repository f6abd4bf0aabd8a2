"""ProductRating aggregate: the denormalized rating rollup of one product.

Every field is derived from the product's approved reviews. The record is
created on the first recompute and overwritten wholesale by each later one,
so a lost or out-of-order update heals on the next recompute.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, Integer, Text

from product_reviews.domain import reviews
from product_reviews.rating.events import ProductRatingRemoved, ProductRatingUpdated
from product_reviews.rating.summary import RatingSummary


@reviews.aggregate
class ProductRating:
    product_id = Identifier(identifier=True, required=True)

    total_reviews = Integer(default=0)
    average_rating = Float(default=0.0)
    rating_distribution = Text(default="[0, 0, 0, 0, 0]")  # JSON list, index 0 = 1 star
    verified_review_count = Integer(default=0)
    verified_average_rating = Float()

    # Trends
    last_7_days_count = Integer(default=0)
    last_7_days_average = Float(default=0.0)
    last_30_days_count = Integer(default=0)
    last_30_days_average = Float(default=0.0)

    # Quality
    total_helpful_votes = Integer(default=0)
    average_helpful_score = Integer(default=0)  # helpful votes per review, as a percentage
    reviews_with_media = Integer(default=0)
    average_review_length = Integer(default=0)

    first_review_at = DateTime()
    last_review_at = DateTime()
    updated_at = DateTime()

    @property
    def distribution(self) -> list[int]:
        return json.loads(self.rating_distribution or "[0, 0, 0, 0, 0]")

    @classmethod
    def empty(cls, product_id):
        return cls(product_id=str(product_id))

    def refresh(self, summary: RatingSummary, correlation_id=None) -> None:
        """Overwrite every derived field with ``summary``."""
        now = datetime.now(UTC)

        self.total_reviews = summary.total_reviews
        self.average_rating = summary.average_rating
        self.rating_distribution = json.dumps(summary.rating_distribution)
        self.verified_review_count = summary.verified_review_count
        self.verified_average_rating = summary.verified_average_rating
        self.last_7_days_count = summary.last_7_days_count
        self.last_7_days_average = summary.last_7_days_average
        self.last_30_days_count = summary.last_30_days_count
        self.last_30_days_average = summary.last_30_days_average
        self.total_helpful_votes = summary.total_helpful_votes
        self.average_helpful_score = summary.average_helpful_score
        self.reviews_with_media = summary.reviews_with_media
        self.average_review_length = summary.average_review_length
        self.first_review_at = summary.first_review_at
        self.last_review_at = summary.last_review_at
        self.updated_at = now

        self.raise_(
            ProductRatingUpdated(
                product_id=str(self.product_id),
                average_rating=summary.average_rating,
                total_reviews=summary.total_reviews,
                rating_distribution=self.rating_distribution,
                verified_review_count=summary.verified_review_count,
                correlation_id=correlation_id,
                updated_at=now,
            )
        )

    def retire(self, correlation_id=None) -> None:
        """Announce that the rollup is going away with its product."""
        self.raise_(
            ProductRatingRemoved(
                product_id=str(self.product_id),
                correlation_id=correlation_id,
                removed_at=datetime.now(UTC),
            )
        )

    def as_summary(self) -> RatingSummary:
        return RatingSummary(
            total_reviews=self.total_reviews,
            average_rating=self.average_rating,
            rating_distribution=self.distribution,
            verified_review_count=self.verified_review_count,
            verified_average_rating=self.verified_average_rating,
            last_7_days_count=self.last_7_days_count,
            last_7_days_average=self.last_7_days_average,
            last_30_days_count=self.last_30_days_count,
            last_30_days_average=self.last_30_days_average,
            total_helpful_votes=self.total_helpful_votes,
            average_helpful_score=self.average_helpful_score,
            reviews_with_media=self.reviews_with_media,
            average_review_length=self.average_review_length,
            first_review_at=self.first_review_at,
            last_review_at=self.last_review_at,
        )
