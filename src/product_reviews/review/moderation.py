"""ModerateReview: approve, reject, flag or hide a review.

Rejection requires a reason. Transitions follow the review state machine;
hidden reviews stay hidden.
"""

from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.review.review import ModerationAction, Review


@reviews.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    action = String(required=True)  # ModerationAction value
    notes = String(max_length=500)  # Required for rejection
    correlation_id = String()


@reviews.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        try:
            action = ModerationAction(command.action)
        except ValueError:
            allowed = ", ".join(a.value for a in ModerationAction)
            raise ValidationError({"action": [f"Action must be one of: {allowed}"]}) from None

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        moderator_id = command.moderator_id
        if action == ModerationAction.APPROVE:
            review.approve(moderator_id, notes=command.notes, correlation_id=command.correlation_id)
        elif action == ModerationAction.REJECT:
            review.reject(moderator_id, reason=command.notes, correlation_id=command.correlation_id)
        elif action == ModerationAction.FLAG:
            review.flag(moderator_id, notes=command.notes, correlation_id=command.correlation_id)
        else:
            review.hide(moderator_id, reason=command.notes, correlation_id=command.correlation_id)

        repo.add(review)
        return review.status
