"""EditReview: edit an existing review.

Only the author or an admin can edit. A change to the rating or body sends
the review back through the moderation gate.
"""

import json

from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.errors import ForbiddenError
from product_reviews.review.policy import initial_status
from product_reviews.review.review import Review


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)  # Must match the author unless is_admin
    is_admin = Boolean(default=False)
    rating = Integer()
    title = String(max_length=200)
    body = Text()
    images = Text()  # JSON array of image URLs
    correlation_id = String()


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if not command.is_admin and not review.is_authored_by(command.customer_id):
            raise ForbiddenError({"customer_id": ["Only the review author can edit this review"]})

        # Build kwargs with sentinel for unset fields
        kwargs = {}
        if command.title is not None:
            kwargs["title"] = command.title
        if command.body is not None:
            kwargs["body"] = command.body
        if command.rating is not None:
            kwargs["rating"] = command.rating
        if command.images is not None:
            try:
                kwargs["images"] = json.loads(command.images)
            except ValueError:
                raise ValidationError({"images": ["Images must be a JSON array of URLs"]}) from None

        changed = review.edit(
            resubmission_status=initial_status(review.verified_purchase),
            correlation_id=command.correlation_id,
            **kwargs,
        )
        repo.add(review)
        return changed
