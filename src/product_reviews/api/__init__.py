"""Product Reviews API package."""

from product_reviews.api.errors import register_error_handlers
from product_reviews.api.routes import review_router

__all__ = ["review_router", "register_error_handlers"]
