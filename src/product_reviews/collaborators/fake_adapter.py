"""Configurable fake collaborators for development and testing.

Every product exists and no purchase is verified unless configured
otherwise. Calls are recorded for assertions.
"""

from product_reviews.collaborators.port import (
    ProductDirectory,
    ProductExistence,
    PurchaseVerifier,
    VerificationOutcome,
)


class FakePurchaseVerifier(PurchaseVerifier):
    def __init__(self) -> None:
        self.outcome = VerificationOutcome.INVALID
        self.valid_orders: set[tuple[str, str, str]] = set()
        self.calls: list[dict] = []

    def configure(self, outcome: VerificationOutcome) -> None:
        self.outcome = outcome

    def allow(self, customer_id: str, product_id: str, order_id: str) -> None:
        self.valid_orders.add((str(customer_id), str(product_id), str(order_id)))

    def verify(self, customer_id, product_id, order_id, correlation_id=None) -> VerificationOutcome:
        self.calls.append(
            {
                "customer_id": customer_id,
                "product_id": product_id,
                "order_id": order_id,
                "correlation_id": correlation_id,
            }
        )
        if (str(customer_id), str(product_id), str(order_id)) in self.valid_orders:
            return VerificationOutcome.VALID
        return self.outcome


class FakeProductDirectory(ProductDirectory):
    def __init__(self) -> None:
        self.outcome = ProductExistence.EXISTS
        self.missing: set[str] = set()
        self.calls: list[str] = []

    def configure(self, outcome: ProductExistence) -> None:
        self.outcome = outcome

    def mark_missing(self, product_id: str) -> None:
        self.missing.add(str(product_id))

    def check(self, product_id, correlation_id=None) -> ProductExistence:
        self.calls.append(product_id)
        if str(product_id) in self.missing:
            return ProductExistence.MISSING
        return self.outcome
