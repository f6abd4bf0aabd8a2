"""Inbound cross-domain event handler: Product Reviews reacts to Identity events.

Listens for CustomerDeleted. A hard delete (the default) removes the
customer's reviews and flags and recomputes every affected product; a soft
delete anonymizes them, which leaves ratings untouched.

Cross-domain events are imported from shared.events.identity and registered
as external events via reviews.register_external_event().
"""

import structlog
from protean.utils.mixins import handle
from shared.events.identity import CustomerDeleted

from product_reviews.cache.coordinator import CacheScope, invalidate
from product_reviews.domain import reviews
from product_reviews.rating.refresher import refresh_quietly
from product_reviews.review.cascades import anonymize_customer_content, delete_customer_content
from product_reviews.review.review import Review

logger = structlog.get_logger(__name__)

# Register external event so Protean can deserialize it
reviews.register_external_event(CustomerDeleted, "Identity.CustomerDeleted.v1")


@reviews.event_handler(part_of=Review, stream_category="identity::customer")
class IdentityEventsHandler:
    """Reacts to Identity domain events to retire a customer's content."""

    @handle(CustomerDeleted)
    def on_customer_deleted(self, event: CustomerDeleted) -> None:
        if not event.customer_id:
            logger.warning("CustomerDeleted missing customer_id, skipping")
            return

        customer_id = str(event.customer_id)
        correlation_id = event.correlation_id

        if event.hard_delete:
            products = delete_customer_content(customer_id, correlation_id=correlation_id)
            logger.info(
                "Customer reviews deleted",
                customer_id=customer_id,
                products=len(products),
                correlation_id=correlation_id,
            )
            for product_id in sorted(products):
                refresh_quietly(product_id, correlation_id, "CustomerDeleted")
        else:
            products = anonymize_customer_content(customer_id, correlation_id=correlation_id)
            logger.info(
                "Customer reviews anonymized",
                customer_id=customer_id,
                products=len(products),
                correlation_id=correlation_id,
            )

        # Changed reviews evict their caches after commit. With nothing
        # written there is nothing to wait for.
        if not products:
            invalidate(CacheScope.USER_REVIEWS, customer_id, correlation_id)
