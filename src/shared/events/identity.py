"""Cross-domain event contracts for Identity domain events.

These classes define the event shape for consumption by other domains.
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Identifier, String


class CustomerDeleted(BaseEvent):
    """A customer account was closed.

    A hard delete, the default, removes everything the customer authored; a
    soft delete keeps their content but strips their identity from it.
    """

    __version__ = 1

    customer_id = Identifier(required=True)
    hard_delete = Boolean(default=True)
    correlation_id = String()
    deleted_at = DateTime()
