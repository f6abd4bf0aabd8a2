"""DeleteReview: permanently delete a review and the flags filed against it.

Only the author or an admin can delete.
"""

from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.errors import ForbiddenError
from product_reviews.review.flag import ReviewFlag
from product_reviews.review.review import Review


@reviews.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    correlation_id = String()


@reviews.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if not command.is_admin and not review.is_authored_by(command.customer_id):
            raise ForbiddenError({"customer_id": ["Only the review author can delete this review"]})

        flag_repo = current_domain.repository_for(ReviewFlag)
        for flag in flag_repo._dao.query.filter(review_id=str(review.id)).all().items:
            flag_repo._dao.delete(flag)

        # Persist first so ReviewDeleted is published, then drop the record
        review.mark_deleted(deleted_by=command.customer_id, correlation_id=command.correlation_id)
        repo.add(review)
        repo._dao.delete(review)
