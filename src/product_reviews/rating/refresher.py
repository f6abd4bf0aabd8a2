"""Fire-and-forget rating refresh after review changes.

Runs after every review event that can move a review in or out of the
approved set. A failed recompute is logged and dropped; the rollup catches up
on the next change to the product.

Lifecycle handlers recompute on their own, once per product, so reviews
they hide or remove in bulk (``cascade`` events) are left to them.
"""

import structlog
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.rating.aggregation import recompute_product_rating
from product_reviews.review.events import (
    ReviewApproved,
    ReviewDeleted,
    ReviewEdited,
    ReviewFlagged,
    ReviewHidden,
    ReviewRejected,
    ReviewSubmitted,
)
from product_reviews.review.review import Review

logger = structlog.get_logger(__name__)


def refresh_quietly(product_id, correlation_id=None, trigger=None) -> None:
    try:
        recompute_product_rating(product_id, correlation_id=correlation_id)
    except Exception as exc:
        logger.error(
            "Product rating refresh failed",
            product_id=str(product_id),
            trigger=trigger,
            correlation_id=correlation_id,
            error=str(exc),
        )


@reviews.event_handler(part_of=Review)
class ProductRatingRefresher:
    @handle(ReviewSubmitted)
    def on_submitted(self, event: ReviewSubmitted) -> None:
        refresh_quietly(event.product_id, event.correlation_id, "ReviewSubmitted")

    @handle(ReviewEdited)
    def on_edited(self, event: ReviewEdited) -> None:
        refresh_quietly(event.product_id, event.correlation_id, "ReviewEdited")

    @handle(ReviewApproved)
    def on_approved(self, event: ReviewApproved) -> None:
        refresh_quietly(event.product_id, event.correlation_id, "ReviewApproved")

    @handle(ReviewRejected)
    def on_rejected(self, event: ReviewRejected) -> None:
        refresh_quietly(event.product_id, event.correlation_id, "ReviewRejected")

    @handle(ReviewFlagged)
    def on_flagged(self, event: ReviewFlagged) -> None:
        refresh_quietly(event.product_id, event.correlation_id, "ReviewFlagged")

    @handle(ReviewHidden)
    def on_hidden(self, event: ReviewHidden) -> None:
        if event.cascade:
            return
        refresh_quietly(event.product_id, event.correlation_id, "ReviewHidden")

    @handle(ReviewDeleted)
    def on_deleted(self, event: ReviewDeleted) -> None:
        if event.cascade:
            return
        refresh_quietly(event.product_id, event.correlation_id, "ReviewDeleted")
