"""Moderation gate: which status a new or re-edited review starts in."""

from product_reviews.review.review import ReviewStatus
from product_reviews.utils.settings import setting


def initial_status(verified_purchase: bool) -> str:
    if verified_purchase and setting("AUTO_APPROVE_VERIFIED", False):
        return ReviewStatus.APPROVED.value
    if setting("MODERATION_REQUIRED", True):
        return ReviewStatus.PENDING.value
    return ReviewStatus.APPROVED.value
