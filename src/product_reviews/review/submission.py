"""SubmitReview: submit a new product review.

Enforces one-review-per-customer-per-product at handler level (cross-instance
check requires repository query). Asks the product service whether the
product exists and, when an order id is given, the order service whether the
purchase is real. Neither check blocks on an outage: only an explicit
"missing product" stops the submission.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.collaborators import get_product_directory, get_purchase_verifier
from product_reviews.collaborators.port import ProductExistence, VerificationOutcome
from product_reviews.domain import reviews
from product_reviews.errors import DuplicateReviewError
from product_reviews.review.policy import initial_status
from product_reviews.review.review import Review

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    author_name = String(max_length=50)
    rating = Integer(required=True)
    title = String(max_length=200)
    body = Text()
    order_id = Identifier()
    images = Text()  # JSON array of image URLs
    correlation_id = String()


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        existing = repo._dao.query.filter(
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
        ).all()
        if existing.items:
            raise DuplicateReviewError({"review": ["You have already reviewed this product"]})

        existence = get_product_directory().check(str(command.product_id), command.correlation_id)
        if existence == ProductExistence.MISSING:
            raise ObjectNotFoundError(f"Product {command.product_id} does not exist")

        verified = False
        if command.order_id:
            outcome = get_purchase_verifier().verify(
                str(command.customer_id),
                str(command.product_id),
                str(command.order_id),
                command.correlation_id,
            )
            verified = outcome == VerificationOutcome.VALID
            if outcome == VerificationOutcome.UNKNOWN:
                logger.info(
                    "Purchase could not be verified, accepting review as unverified",
                    customer_id=str(command.customer_id),
                    product_id=str(command.product_id),
                    order_id=str(command.order_id),
                    correlation_id=command.correlation_id,
                )

        try:
            images = json.loads(command.images) if command.images else []
        except ValueError:
            raise ValidationError({"images": ["Images must be a JSON array of URLs"]}) from None

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            rating=command.rating,
            title=command.title,
            body=command.body,
            author_name=command.author_name,
            order_id=command.order_id,
            verified_purchase=verified,
            status=initial_status(verified),
            images=images,
            correlation_id=command.correlation_id,
        )

        repo.add(review)
        return str(review.id)
