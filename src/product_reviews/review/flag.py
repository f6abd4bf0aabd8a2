"""ReviewFlag aggregate and the FlagReview command.

A flag is one customer's complaint about one review. Flags live in their own
collection so moderation can work through them; the review itself only keeps
the running ``flag_count`` and ``spam_count``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.errors import ConflictError
from product_reviews.review.events import FlagRaised
from product_reviews.review.review import FlagReason, Review


class FlagStatus(Enum):
    PENDING = "Pending"
    RESOLVED = "Resolved"
    DISMISSED = "Dismissed"


@reviews.aggregate
class ReviewFlag:
    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    flagged_by = Identifier()  # cleared when the flagger's account is anonymized
    flagged_by_name = String(max_length=50)
    reason = String(choices=FlagReason, required=True)
    description = String(max_length=500)
    status = String(choices=FlagStatus, default=FlagStatus.PENDING.value)
    flagged_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def raise_flag(
        cls,
        review_id,
        product_id,
        flagged_by,
        reason,
        flagged_by_name=None,
        description=None,
        correlation_id=None,
    ):
        now = datetime.now(UTC)
        flag = cls(
            review_id=review_id,
            product_id=product_id,
            flagged_by=flagged_by,
            flagged_by_name=flagged_by_name,
            reason=reason,
            description=description,
            status=FlagStatus.PENDING.value,
            flagged_at=now,
            updated_at=now,
        )
        flag.raise_(
            FlagRaised(
                flag_id=str(flag.id),
                review_id=str(review_id),
                flagged_by=str(flagged_by),
                reason=reason,
                description=description,
                correlation_id=correlation_id,
                flagged_at=now,
            )
        )
        return flag

    def anonymize(self, display_name):
        self.flagged_by = None
        self.flagged_by_name = display_name
        self.updated_at = datetime.now(UTC)


@reviews.command(part_of="ReviewFlag")
class FlagReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=50)
    reason = String(required=True)  # FlagReason value
    description = String(max_length=500)
    correlation_id = String()


@reviews.command_handler(part_of=ReviewFlag)
class FlagReviewHandler:
    @handle(FlagReview)
    def flag_review(self, command):
        if command.reason not in {r.value for r in FlagReason}:
            raise ValidationError({"reason": [f"Unknown flag reason: {command.reason}"]})

        review_repo = current_domain.repository_for(Review)
        review = review_repo.get(command.review_id)

        flag_repo = current_domain.repository_for(ReviewFlag)
        existing = flag_repo._dao.query.filter(
            review_id=str(command.review_id),
            flagged_by=str(command.customer_id),
        ).all()
        if existing.items:
            raise ConflictError({"flag": ["You have already flagged this review"]})

        review.record_flag(
            reporter_id=command.customer_id,
            reason=command.reason,
            correlation_id=command.correlation_id,
        )

        flag = ReviewFlag.raise_flag(
            review_id=str(review.id),
            product_id=str(review.product_id),
            flagged_by=command.customer_id,
            flagged_by_name=command.customer_name,
            reason=command.reason,
            description=command.description,
            correlation_id=command.correlation_id,
        )

        review_repo.add(review)
        flag_repo.add(flag)
        return str(flag.id)
