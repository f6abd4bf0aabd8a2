"""Inbound cross-domain event handler: Product Reviews reacts to Ordering events.

Listens for OrderCompleted to mark the buyer's existing reviews of the
purchased products as verified purchases.

Cross-domain events are imported from shared.events.ordering and registered
as external events via reviews.register_external_event().
"""

import json

import structlog
from protean.utils.mixins import handle
from shared.events.ordering import OrderCompleted

from product_reviews.domain import reviews
from product_reviews.rating.refresher import refresh_quietly
from product_reviews.review.cascades import verify_purchases
from product_reviews.review.review import Review

logger = structlog.get_logger(__name__)

# Register external event so Protean can deserialize it
reviews.register_external_event(OrderCompleted, "Ordering.OrderCompleted.v1")


def _product_ids(raw) -> list[str]:
    ids = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(ids, list):
        raise ValueError("product_ids must be a list")
    # Keep order, drop blanks and repeats
    return list(dict.fromkeys(str(pid) for pid in ids if pid))


@reviews.event_handler(part_of=Review, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to verify purchases."""

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        if not event.order_id or not event.customer_id:
            logger.warning("OrderCompleted missing ids, skipping", order_id=event.order_id)
            return

        try:
            product_ids = _product_ids(event.product_ids)
        except ValueError:
            logger.warning(
                "OrderCompleted carries unreadable product_ids, skipping",
                order_id=str(event.order_id),
                product_ids=event.product_ids,
            )
            return

        for product_id in product_ids:
            changed = verify_purchases(
                event.customer_id,
                product_id,
                event.order_id,
                correlation_id=event.correlation_id,
            )
            if changed:
                logger.info(
                    "Reviews verified by completed order",
                    order_id=str(event.order_id),
                    product_id=product_id,
                    reviews=changed,
                    correlation_id=event.correlation_id,
                )
                refresh_quietly(product_id, event.correlation_id, "OrderCompleted")
