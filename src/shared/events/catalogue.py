"""Cross-domain event contracts for Catalogue domain events.

These classes define the event shape for consumption by other domains.
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Identifier, String


class ProductDeleted(BaseEvent):
    """A product was removed from the catalogue.

    A hard delete, the default, purges the product; a soft delete only takes
    it off sale.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    hard_delete = Boolean(default=True)
    correlation_id = String()
    deleted_at = DateTime()
