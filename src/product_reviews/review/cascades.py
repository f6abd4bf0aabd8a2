"""Bulk review changes driven by other services' lifecycle events.

Each operation filters on the state it is about to change, so running it a
second time for the same event finds nothing left to do. They return what
they touched and leave recomputing ratings to the caller.

Removed and hidden reviews raise their events with ``cascade`` set. Cache
eviction follows those events after commit; the rating refresher skips them.
"""

from protean.utils.globals import current_domain

from product_reviews.review.flag import ReviewFlag
from product_reviews.review.review import ANONYMOUS_AUTHOR, Review, ReviewStatus
from product_reviews.utils.queries import fetch_all

SYSTEM_ACTOR = "System"
PRODUCT_DELETED_REASON = "Product deleted"


def _remove(repo, review, correlation_id):
    # Persist first so ReviewDeleted is published, then drop the record
    review.mark_deleted(SYSTEM_ACTOR, correlation_id=correlation_id, cascade=True)
    repo.add(review)
    repo._dao.delete(review)


def verify_purchases(customer_id, product_id, order_id, correlation_id=None) -> int:
    """Mark the customer's unverified reviews of a product as verified."""
    repo = current_domain.repository_for(Review)
    changed = 0
    for review in fetch_all(
        Review,
        customer_id=str(customer_id),
        product_id=str(product_id),
        verified_purchase=False,
    ):
        if review.mark_verified(order_id, correlation_id=correlation_id):
            repo.add(review)
            changed += 1
    return changed


def delete_customer_content(customer_id, correlation_id=None) -> set[str]:
    """Delete every review the customer wrote and every flag they filed.

    Returns the products whose reviews were deleted.
    """
    review_repo = current_domain.repository_for(Review)
    flag_repo = current_domain.repository_for(ReviewFlag)

    products = set()
    for review in fetch_all(Review, customer_id=str(customer_id)):
        for flag in fetch_all(ReviewFlag, review_id=str(review.id)):
            flag_repo._dao.delete(flag)
        _remove(review_repo, review, correlation_id)
        products.add(str(review.product_id))

    for flag in fetch_all(ReviewFlag, flagged_by=str(customer_id)):
        flag_repo._dao.delete(flag)

    return products


def anonymize_customer_content(customer_id, correlation_id=None) -> set[str]:
    """Strip the customer's identity from their reviews and flags.

    Returns the products whose reviews were anonymized.
    """
    review_repo = current_domain.repository_for(Review)
    flag_repo = current_domain.repository_for(ReviewFlag)

    products = set()
    for review in fetch_all(Review, customer_id=str(customer_id)):
        if review.anonymize(correlation_id=correlation_id):
            review_repo.add(review)
            products.add(str(review.product_id))

    for flag in fetch_all(ReviewFlag, flagged_by=str(customer_id)):
        flag.anonymize(ANONYMOUS_AUTHOR)
        flag_repo.add(flag)

    return products


def delete_product_content(product_id, correlation_id=None) -> int:
    """Delete every review of the product and the flags filed against them."""
    review_repo = current_domain.repository_for(Review)
    flag_repo = current_domain.repository_for(ReviewFlag)

    for flag in fetch_all(ReviewFlag, product_id=str(product_id)):
        flag_repo._dao.delete(flag)

    deleted = 0
    for review in fetch_all(Review, product_id=str(product_id)):
        _remove(review_repo, review, correlation_id)
        deleted += 1
    return deleted


def hide_product_reviews(product_id, correlation_id=None) -> int:
    """Hide every review of the product that is not hidden yet."""
    repo = current_domain.repository_for(Review)
    hidden = 0
    for review in fetch_all(Review, product_id=str(product_id)):
        if review.status == ReviewStatus.HIDDEN.value:
            continue
        review.hide(
            SYSTEM_ACTOR,
            reason=PRODUCT_DELETED_REASON,
            correlation_id=correlation_id,
            cascade=True,
        )
        repo.add(review)
        hidden += 1
    return hidden
