"""Collaborator ports (abstract interfaces) for the review submission path.

Both checks are best-effort. Their results are three-valued so "the other
service could not tell us" stays distinct from "the other service said no".
"""

from abc import ABC, abstractmethod
from enum import Enum


class VerificationOutcome(Enum):
    VALID = "Valid"
    INVALID = "Invalid"
    UNKNOWN = "Unknown"


class ProductExistence(Enum):
    EXISTS = "Exists"
    MISSING = "Missing"
    UNKNOWN = "Unknown"


class PurchaseVerifier(ABC):
    """Answers whether a customer bought a product in a given order."""

    @abstractmethod
    def verify(
        self,
        customer_id: str,
        product_id: str,
        order_id: str,
        correlation_id: str | None = None,
    ) -> VerificationOutcome: ...


class ProductDirectory(ABC):
    """Answers whether a product id refers to a real product."""

    @abstractmethod
    def check(self, product_id: str, correlation_id: str | None = None) -> ProductExistence: ...
