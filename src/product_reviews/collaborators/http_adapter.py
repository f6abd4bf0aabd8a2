"""HTTP adapters for the Order and Product services.

Transport problems (timeouts, connection errors, 5xx, unreadable bodies) are
raised as ``UpstreamUnavailableError`` by ``_call`` and turned into UNKNOWN,
so an outage never blocks a review. A 404 from the product service is an
explicit answer and maps to MISSING.
"""

import httpx
import structlog

from product_reviews.collaborators.port import (
    ProductDirectory,
    ProductExistence,
    PurchaseVerifier,
    VerificationOutcome,
)
from product_reviews.errors import UpstreamUnavailableError

logger = structlog.get_logger(__name__)


def _headers(correlation_id: str | None) -> dict:
    return {"X-Correlation-ID": correlation_id} if correlation_id else {}


def _call(service: str, request) -> httpx.Response:
    try:
        response = request()
    except httpx.HTTPError as exc:
        raise UpstreamUnavailableError(service, str(exc)) from exc
    if response.status_code >= 500:
        raise UpstreamUnavailableError(service, f"HTTP {response.status_code}")
    return response


class HttpPurchaseVerifier(PurchaseVerifier):
    def __init__(self, base_url: str, timeout: float = 5.0, transport: httpx.BaseTransport | None = None) -> None:
        self.client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def verify(self, customer_id, product_id, order_id, correlation_id=None) -> VerificationOutcome:
        try:
            response = _call(
                "order-service",
                lambda: self.client.post(
                    "/api/v1/internal/orders/validate-purchase",
                    json={"userId": customer_id, "productId": product_id, "orderReference": order_id},
                    headers=_headers(correlation_id),
                ),
            )
            if response.status_code != 200:
                return VerificationOutcome.INVALID
            return VerificationOutcome.VALID if response.json().get("isValid") else VerificationOutcome.INVALID
        except (UpstreamUnavailableError, ValueError) as exc:
            logger.warning(
                "Purchase verification unavailable",
                customer_id=customer_id,
                product_id=product_id,
                order_id=order_id,
                error=str(exc),
            )
            return VerificationOutcome.UNKNOWN


class HttpProductDirectory(ProductDirectory):
    def __init__(self, base_url: str, timeout: float = 5.0, transport: httpx.BaseTransport | None = None) -> None:
        self.client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def check(self, product_id, correlation_id=None) -> ProductExistence:
        try:
            response = _call(
                "product-service",
                lambda: self.client.get(
                    f"/api/products/internal/{product_id}/exists",
                    headers=_headers(correlation_id),
                ),
            )
            if response.status_code == 404:
                return ProductExistence.MISSING
            response.raise_for_status()
            return ProductExistence.EXISTS if response.json().get("exists") else ProductExistence.MISSING
        except (UpstreamUnavailableError, httpx.HTTPStatusError, ValueError) as exc:
            logger.warning("Product check unavailable", product_id=product_id, error=str(exc))
            return ProductExistence.UNKNOWN
