"""Post-commit cache invalidation for review changes.

Handlers only run once the unit of work that raised the event has committed,
so a concurrent read can never re-cache the state being replaced.

Every review event evicts the cached review lists of the product and of the
author. Rating events evict the product's rating and review lists.
"""

from protean.utils.mixins import handle

from product_reviews.cache.coordinator import CacheScope, invalidate, invalidate_product
from product_reviews.domain import reviews
from product_reviews.rating.events import ProductRatingRemoved, ProductRatingUpdated
from product_reviews.rating.product_rating import ProductRating
from product_reviews.review.events import (
    HelpfulVoteRecorded,
    ReviewAnonymized,
    ReviewApproved,
    ReviewDeleted,
    ReviewEdited,
    ReviewFlagged,
    ReviewHidden,
    ReviewRejected,
    ReviewReported,
    ReviewSubmitted,
    ReviewVerified,
)
from product_reviews.review.review import Review


def _evict(product_id, customer_id, correlation_id=None) -> None:
    invalidate(CacheScope.PRODUCT_REVIEWS, product_id, correlation_id)
    if customer_id:
        invalidate(CacheScope.USER_REVIEWS, customer_id, correlation_id)


@reviews.event_handler(part_of=Review)
class ReviewCacheInvalidator:
    @handle(ReviewSubmitted)
    def on_submitted(self, event: ReviewSubmitted) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewEdited)
    def on_edited(self, event: ReviewEdited) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewApproved)
    def on_approved(self, event: ReviewApproved) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewRejected)
    def on_rejected(self, event: ReviewRejected) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewFlagged)
    def on_flagged(self, event: ReviewFlagged) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewHidden)
    def on_hidden(self, event: ReviewHidden) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewDeleted)
    def on_deleted(self, event: ReviewDeleted) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(HelpfulVoteRecorded)
    def on_vote_recorded(self, event: HelpfulVoteRecorded) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewReported)
    def on_reported(self, event: ReviewReported) -> None:
        _evict(event.product_id, None, event.correlation_id)

    @handle(ReviewVerified)
    def on_verified(self, event: ReviewVerified) -> None:
        _evict(event.product_id, event.customer_id, event.correlation_id)

    @handle(ReviewAnonymized)
    def on_anonymized(self, event: ReviewAnonymized) -> None:
        _evict(event.product_id, event.former_customer_id, event.correlation_id)


@reviews.event_handler(part_of=ProductRating)
class RatingCacheInvalidator:
    @handle(ProductRatingUpdated)
    def on_rating_updated(self, event: ProductRatingUpdated) -> None:
        invalidate_product(event.product_id, event.correlation_id)

    @handle(ProductRatingRemoved)
    def on_rating_removed(self, event: ProductRatingRemoved) -> None:
        invalidate_product(event.product_id, event.correlation_id)
