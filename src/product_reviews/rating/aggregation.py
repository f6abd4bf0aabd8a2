"""Aggregation engine: rebuilds a product's rating rollup from its reviews.

A recompute always starts from the authoritative review set instead of
applying deltas, so concurrent writers and redelivered events can at worst
cause an extra recompute, never a drifting rollup.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from product_reviews.rating.product_rating import ProductRating
from product_reviews.rating.summary import RatingSummary, summarize_reviews
from product_reviews.review.review import Review, ReviewStatus
from product_reviews.utils.queries import fetch_all

logger = structlog.get_logger(__name__)

__all__ = [
    "RatingSummary",
    "approved_reviews",
    "recompute_product_rating",
    "remove_product_rating",
    "summarize_reviews",
]


def approved_reviews(product_id, since: datetime | None = None) -> list:
    filters = {"product_id": str(product_id), "status": ReviewStatus.APPROVED.value}
    if since is not None:
        filters["created_at__gte"] = since
    return fetch_all(Review, **filters)


def recompute_product_rating(product_id, correlation_id: str | None = None) -> ProductRating:
    """Recompute and persist the rating rollup of one product.

    Zero approved reviews still writes a record (the empty rollup). Store
    errors propagate to the caller. Cached reads of the product are evicted
    by the ProductRatingUpdated handler once the write commits.
    """
    now = datetime.now(UTC)
    summary = summarize_reviews(
        approved_reviews(product_id),
        recent_7=approved_reviews(product_id, since=now - timedelta(days=7)),
        recent_30=approved_reviews(product_id, since=now - timedelta(days=30)),
    )

    repo = current_domain.repository_for(ProductRating)
    try:
        rating = repo.get(str(product_id))
    except ObjectNotFoundError:
        rating = ProductRating.empty(product_id)

    rating.refresh(summary, correlation_id=correlation_id)
    repo.add(rating)

    logger.info(
        "Product rating recomputed",
        product_id=str(product_id),
        total_reviews=summary.total_reviews,
        average_rating=summary.average_rating,
        correlation_id=correlation_id,
    )
    return rating


def remove_product_rating(product_id, correlation_id: str | None = None) -> bool:
    """Delete the rollup of a purged product. False if there was none."""
    repo = current_domain.repository_for(ProductRating)
    try:
        rating = repo.get(str(product_id))
    except ObjectNotFoundError:
        return False

    # Persist first so ProductRatingRemoved is published, then drop the record
    rating.retire(correlation_id=correlation_id)
    repo.add(rating)
    repo._dao.delete(rating)
    logger.info("Product rating removed", product_id=str(product_id), correlation_id=correlation_id)
    return True
