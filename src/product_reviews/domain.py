"""Product Reviews bounded context: reviews, helpfulness votes, and rating rollups.

Handles the review lifecycle (CQRS), voting, moderation, and flagging, and
keeps one ``ProductRating`` per product recomputed from the approved review
set. Reacts to Ordering, Identity, and Catalogue lifecycle events that
retroactively change reviews.
"""

from protean.domain import Domain

from product_reviews.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

reviews = Domain(name="product_reviews")
