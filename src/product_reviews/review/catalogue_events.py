"""Inbound cross-domain event handler: Product Reviews reacts to Catalogue events.

Listens for ProductDeleted. A hard delete (the default) purges the product's reviews,
flags and rating; a soft delete hides its reviews and recomputes the rating
when anything was hidden.

Cross-domain events are imported from shared.events.catalogue and registered
as external events via reviews.register_external_event().
"""

import structlog
from protean.utils.mixins import handle
from shared.events.catalogue import ProductDeleted

from product_reviews.cache.coordinator import invalidate_product
from product_reviews.domain import reviews
from product_reviews.rating.aggregation import remove_product_rating
from product_reviews.rating.refresher import refresh_quietly
from product_reviews.review.cascades import delete_product_content, hide_product_reviews
from product_reviews.review.review import Review

logger = structlog.get_logger(__name__)

# Register external event so Protean can deserialize it
reviews.register_external_event(ProductDeleted, "Catalogue.ProductDeleted.v1")


@reviews.event_handler(part_of=Review, stream_category="catalogue::product")
class CatalogueEventsHandler:
    """Reacts to Catalogue domain events to retire a product's reviews."""

    @handle(ProductDeleted)
    def on_product_deleted(self, event: ProductDeleted) -> None:
        if not event.product_id:
            logger.warning("ProductDeleted missing product_id, skipping")
            return

        product_id = str(event.product_id)
        correlation_id = event.correlation_id

        if event.hard_delete:
            deleted = delete_product_content(product_id, correlation_id=correlation_id)
            removed = remove_product_rating(product_id, correlation_id=correlation_id)
            logger.info(
                "Product reviews deleted",
                product_id=product_id,
                reviews=deleted,
                correlation_id=correlation_id,
            )
            changed = deleted or removed
        else:
            hidden = hide_product_reviews(product_id, correlation_id=correlation_id)
            logger.info(
                "Product reviews hidden",
                product_id=product_id,
                reviews=hidden,
                correlation_id=correlation_id,
            )
            if hidden:
                refresh_quietly(product_id, correlation_id, "ProductDeleted")
            changed = hidden

        # Changed reviews and ratings evict their caches after commit. With
        # nothing written there is nothing to wait for.
        if not changed:
            invalidate_product(product_id, correlation_id)
