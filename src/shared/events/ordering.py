"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape for consumption by the Product Reviews
service (to mark reviews as verified purchases once an order completes).
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String, Text


class OrderCompleted(BaseEvent):
    """An order reached its final, successful state.

    Consumed by Product Reviews to verify the customer's existing reviews of
    the purchased products.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_ids = Text(required=True)  # JSON list of product ids
    correlation_id = String()
    completed_at = DateTime()
