"""Collaborator factory.

Provides get/set helpers to swap implementations:
- Fake adapters for development and testing (no service URLs configured)
- HTTP adapters when ORDER_SERVICE_URL / PRODUCT_SERVICE_URL are set
"""

from product_reviews.collaborators.fake_adapter import FakeProductDirectory, FakePurchaseVerifier
from product_reviews.collaborators.http_adapter import HttpProductDirectory, HttpPurchaseVerifier
from product_reviews.collaborators.port import ProductDirectory, PurchaseVerifier
from product_reviews.utils.settings import setting

_purchase_verifier: PurchaseVerifier | None = None
_product_directory: ProductDirectory | None = None


def get_purchase_verifier() -> PurchaseVerifier:
    global _purchase_verifier
    if _purchase_verifier is None:
        url = setting("ORDER_SERVICE_URL")
        if url:
            _purchase_verifier = HttpPurchaseVerifier(url, timeout=float(setting("COLLABORATOR_TIMEOUT_SECONDS", 5.0)))
        else:
            _purchase_verifier = FakePurchaseVerifier()
    return _purchase_verifier


def get_product_directory() -> ProductDirectory:
    global _product_directory
    if _product_directory is None:
        url = setting("PRODUCT_SERVICE_URL")
        if url:
            _product_directory = HttpProductDirectory(url, timeout=float(setting("COLLABORATOR_TIMEOUT_SECONDS", 5.0)))
        else:
            _product_directory = FakeProductDirectory()
    return _product_directory


def set_purchase_verifier(verifier: PurchaseVerifier) -> None:
    """Override the active verifier (useful for tests)."""
    global _purchase_verifier
    _purchase_verifier = verifier


def set_product_directory(directory: ProductDirectory) -> None:
    """Override the active product directory (useful for tests)."""
    global _product_directory
    _product_directory = directory


def reset_collaborators() -> None:
    global _purchase_verifier, _product_directory
    _purchase_verifier = None
    _product_directory = None
