"""Review aggregate, the source of truth for product ratings.

The Review aggregate manages a customer's review of a product: submission,
editing, helpfulness voting, moderation, flagging, verification, and the
retroactive changes driven by other services (anonymization, hiding).

Only APPROVED reviews count toward a product's ``ProductRating``; every
transition that moves a review in or out of APPROVED raises an event the
rating refresher listens to.

State Machine (5 states):
    PENDING  → APPROVED | REJECTED | FLAGGED | HIDDEN
    APPROVED → FLAGGED | REJECTED | HIDDEN
    FLAGGED  → APPROVED | REJECTED | HIDDEN
    REJECTED → APPROVED | HIDDEN
    HIDDEN   → (terminal)
    Content edits re-enter moderation from any non-hidden state.
"""

import json
import re
from collections import Counter
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from product_reviews.domain import reviews
from product_reviews.errors import ForbiddenError
from product_reviews.review.events import (
    HelpfulVoteRecorded,
    ReviewAnonymized,
    ReviewApproved,
    ReviewDeleted,
    ReviewEdited,
    ReviewFlagged,
    ReviewHidden,
    ReviewRejected,
    ReviewReported,
    ReviewSubmitted,
    ReviewVerified,
)
from product_reviews.utils.numbers import percentage

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

ANONYMOUS_AUTHOR = "Anonymous User"
MAX_IMAGES = 5
MAX_BODY_LENGTH = 2000

_IMAGE_URL = re.compile(r"^https?://.+\.(jpg|jpeg|png|webp)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FLAGGED = "Flagged"
    HIDDEN = "Hidden"


class VoteType(Enum):
    HELPFUL = "Helpful"
    NOT_HELPFUL = "NotHelpful"


class VoteOutcome(Enum):
    ADDED = "Added"
    RETRACTED = "Retracted"
    SWITCHED = "Switched"


class ModerationAction(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"
    FLAG = "Flag"
    HIDE = "Hide"


class FlagReason(Enum):
    SPAM = "Spam"
    INAPPROPRIATE = "Inappropriate"
    FAKE = "Fake"
    OFFENSIVE = "Offensive"
    COPYRIGHT = "Copyright"
    MISLEADING = "Misleading"
    OTHER = "Other"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {
        ReviewStatus.APPROVED,
        ReviewStatus.REJECTED,
        ReviewStatus.FLAGGED,
        ReviewStatus.HIDDEN,
    },
    ReviewStatus.APPROVED: {ReviewStatus.FLAGGED, ReviewStatus.REJECTED, ReviewStatus.HIDDEN},
    ReviewStatus.FLAGGED: {ReviewStatus.APPROVED, ReviewStatus.REJECTED, ReviewStatus.HIDDEN},
    ReviewStatus.REJECTED: {ReviewStatus.APPROVED, ReviewStatus.HIDDEN},
    ReviewStatus.HIDDEN: set(),  # Terminal state
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class ReviewImage:
    """A photo attached to a review."""

    url = String(required=True, max_length=500)
    display_order = Integer(default=0)


@reviews.entity(part_of="Review")
class HelpfulVote:
    """One voter's current helpfulness opinion of the review."""

    customer_id = Identifier(required=True)
    vote_type = String(choices=VoteType, required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A customer's review of a product.

    ``helpful_count`` and ``unhelpful_count`` are a cache of the ``votes``
    list and are only ever re-derived from it.
    """

    # Identity (customer_id is cleared only by anonymization)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    author_name = String(max_length=50)
    is_anonymized = Boolean(default=False)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(max_length=200)
    body = Text()
    images = HasMany(ReviewImage)

    # Verification
    verified_purchase = Boolean(default=False)
    order_id = Identifier()

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    moderation_notes = String(max_length=500)
    moderated_by = Identifier()
    moderated_at = DateTime()

    # Voting
    votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0)
    unhelpful_count = Integer(default=0)

    # Flagging
    flag_count = Integer(default=0)
    spam_count = Integer(default=0)

    # Editing
    is_edited = Boolean(default=False)
    edited_at = DateTime()

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def must_have_title_or_body(self):
        if not (self.title or "").strip() and not (self.body or "").strip():
            raise ValidationError({"review": ["Review must have either a title or a body"]})

    @invariant.post
    def body_cannot_exceed_maximum(self):
        if self.body and len(self.body) > MAX_BODY_LENGTH:
            raise ValidationError({"body": [f"Review body cannot exceed {MAX_BODY_LENGTH} characters"]})

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @invariant.post
    def images_must_be_image_urls(self):
        for image in self.images:
            if not _IMAGE_URL.match(image.url or ""):
                raise ValidationError({"images": [f"Invalid image URL: {image.url}"]})

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total_votes(self) -> int:
        return self.helpful_count + self.unhelpful_count

    @property
    def helpful_score(self) -> int:
        """Share of helpful votes as a whole percentage, 0 when nobody voted."""
        return percentage(self.helpful_count, self.total_votes)

    @property
    def has_media(self) -> bool:
        return len(self.images) > 0

    @property
    def is_approved(self) -> bool:
        return self.status == ReviewStatus.APPROVED.value

    def vote_of(self, customer_id):
        """The voter's current HelpfulVote, or None."""
        return next(
            (v for v in self.votes if str(v.customer_id) == str(customer_id)),
            None,
        )

    def is_authored_by(self, customer_id) -> bool:
        return self.customer_id is not None and str(self.customer_id) == str(customer_id)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        customer_id,
        rating,
        title=None,
        body=None,
        author_name=None,
        order_id=None,
        verified_purchase=False,
        status=ReviewStatus.PENDING.value,
        images=None,
        correlation_id=None,
    ):
        """Submit a new review in the status the moderation policy chose."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            author_name=author_name,
            rating=Rating(score=rating),
            title=title,
            body=body,
            verified_purchase=verified_purchase,
            order_id=order_id if verified_purchase else None,
            status=status,
            helpful_count=0,
            unhelpful_count=0,
            flag_count=0,
            spam_count=0,
            is_edited=False,
            created_at=now,
            updated_at=now,
        )

        if images:
            for i, url in enumerate(images):
                review.add_images(ReviewImage(url=url, display_order=i))

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                order_id=str(review.order_id) if review.order_id else None,
                rating=rating,
                title=title,
                body=body,
                status=status,
                verified_purchase=str(verified_purchase),
                image_count=len(images) if images else 0,
                correlation_id=correlation_id,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(
        self,
        rating=_UNSET,
        title=_UNSET,
        body=_UNSET,
        images=_UNSET,
        resubmission_status=ReviewStatus.PENDING.value,
        correlation_id=None,
    ):
        """Edit review content.

        A changed rating or body sends the review back through moderation;
        ``resubmission_status`` is what the moderation policy decided for it.
        Returns the list of fields that actually changed.
        """
        current = ReviewStatus(self.status)
        if current == ReviewStatus.HIDDEN:
            raise ValidationError({"status": ["Hidden reviews cannot be edited"]})

        previous_rating = self.rating.score
        changed = []
        now = datetime.now(UTC)

        with atomic_change(self):
            if rating is not _UNSET and rating != previous_rating:
                self.rating = Rating(score=rating)
                changed.append("rating")
            if title is not _UNSET and title != self.title:
                self.title = title
                changed.append("title")
            if body is not _UNSET and body != self.body:
                self.body = body
                changed.append("body")
            if images is not _UNSET:
                current_urls = [img.url for img in sorted(self.images, key=lambda i: i.display_order)]
                if list(images or []) != current_urls:
                    for image in list(self.images):
                        self.remove_images(image)
                    if images:
                        for i, url in enumerate(images):
                            self.add_images(ReviewImage(url=url, display_order=i))
                    changed.append("images")

            if not changed:
                return changed

            if "rating" in changed or "body" in changed:
                self.status = resubmission_status

            self.is_edited = True
            self.edited_at = now
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                rating=self.rating.score,
                previous_rating=previous_rating,
                status=self.status,
                previous_status=current.value,
                changed_fields=json.dumps(changed),
                correlation_id=correlation_id,
                edited_at=now,
            )
        )
        return changed

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, customer_id, vote_type, correlation_id=None):
        """Cast, switch, or retract a helpfulness vote.

        Voting the same way twice retracts the vote; voting the other way
        switches it. The counters are re-derived from the vote list.
        """
        if self.is_authored_by(customer_id):
            raise ForbiddenError({"vote": ["Cannot vote on your own review"]})

        try:
            kind = VoteType(vote_type)
        except ValueError:
            allowed = ", ".join(v.value for v in VoteType)
            raise ValidationError({"vote_type": [f"Vote must be one of: {allowed}"]}) from None

        now = datetime.now(UTC)
        existing = self.vote_of(customer_id)

        if existing is None:
            self.add_votes(HelpfulVote(customer_id=customer_id, vote_type=kind.value, voted_at=now))
            outcome = VoteOutcome.ADDED
        elif existing.vote_type == kind.value:
            self.remove_votes(existing)
            outcome = VoteOutcome.RETRACTED
        else:
            self.remove_votes(existing)
            self.add_votes(HelpfulVote(customer_id=customer_id, vote_type=kind.value, voted_at=now))
            outcome = VoteOutcome.SWITCHED

        with atomic_change(self):
            self._sync_vote_counts()
            self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                voter_id=str(customer_id),
                vote_type=kind.value,
                outcome=outcome.value,
                helpful_count=self.helpful_count,
                unhelpful_count=self.unhelpful_count,
                correlation_id=correlation_id,
                voted_at=now,
            )
        )
        return outcome

    def _sync_vote_counts(self):
        tally = Counter(v.vote_type for v in self.votes)
        self.helpful_count = tally[VoteType.HELPFUL.value]
        self.unhelpful_count = tally[VoteType.NOT_HELPFUL.value]

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def _transition(self, target, moderator_id, notes):
        current = ReviewStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.moderation_notes = notes
            self.moderated_by = moderator_id
            self.moderated_at = now
            self.updated_at = now
        return now

    def approve(self, moderator_id, notes=None, correlation_id=None):
        now = self._transition(ReviewStatus.APPROVED, moderator_id, notes)
        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                rating=self.rating.score,
                moderator_id=str(moderator_id),
                correlation_id=correlation_id,
                approved_at=now,
            )
        )

    def reject(self, moderator_id, reason, correlation_id=None):
        if not reason:
            raise ValidationError({"reason": ["Reason is required when rejecting a review"]})
        now = self._transition(ReviewStatus.REJECTED, moderator_id, reason)
        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                moderator_id=str(moderator_id),
                reason=reason,
                correlation_id=correlation_id,
                rejected_at=now,
            )
        )

    def flag(self, moderator_id, notes=None, correlation_id=None):
        now = self._transition(ReviewStatus.FLAGGED, moderator_id, notes)
        self.raise_(
            ReviewFlagged(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                moderator_id=str(moderator_id),
                notes=notes,
                correlation_id=correlation_id,
                flagged_at=now,
            )
        )

    def hide(self, hidden_by, reason=None, correlation_id=None, cascade=False):
        now = self._transition(ReviewStatus.HIDDEN, hidden_by, reason)
        self.raise_(
            ReviewHidden(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                hidden_by=str(hidden_by),
                reason=reason,
                cascade=cascade,
                correlation_id=correlation_id,
                hidden_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Flagging
    # -------------------------------------------------------------------
    def record_flag(self, reporter_id, reason, correlation_id=None):
        """Count a customer flag. Spam flags feed the separate spam counter."""
        if self.is_authored_by(reporter_id):
            raise ForbiddenError({"flag": ["Cannot flag your own review"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.flag_count = self.flag_count + 1
            if reason == FlagReason.SPAM.value:
                self.spam_count = self.spam_count + 1
            self.updated_at = now

        self.raise_(
            ReviewReported(
                review_id=str(self.id),
                product_id=str(self.product_id),
                reporter_id=str(reporter_id),
                reason=reason,
                flag_count=self.flag_count,
                spam_count=self.spam_count,
                correlation_id=correlation_id,
                reported_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle changes driven by other services
    # -------------------------------------------------------------------
    def mark_verified(self, order_id, correlation_id=None) -> bool:
        """Flag the review as a verified purchase. False if it already was."""
        if self.verified_purchase:
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.verified_purchase = True
            self.order_id = order_id
            self.updated_at = now

        self.raise_(
            ReviewVerified(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                order_id=str(order_id),
                correlation_id=correlation_id,
                verified_at=now,
            )
        )
        return True

    def anonymize(self, correlation_id=None) -> bool:
        """Drop the author's identity. False if already anonymous."""
        if self.is_anonymized or self.customer_id is None:
            return False

        former_customer_id = str(self.customer_id)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.customer_id = None
            self.author_name = ANONYMOUS_AUTHOR
            self.is_anonymized = True
            self.updated_at = now

        self.raise_(
            ReviewAnonymized(
                review_id=str(self.id),
                product_id=str(self.product_id),
                former_customer_id=former_customer_id,
                correlation_id=correlation_id,
                anonymized_at=now,
            )
        )
        return True

    def mark_deleted(self, deleted_by, correlation_id=None, cascade=False):
        """Record the deletion; the handler removes the record afterwards."""
        self.raise_(
            ReviewDeleted(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                rating=self.rating.score,
                deleted_by=str(deleted_by),
                cascade=cascade,
                correlation_id=correlation_id,
                deleted_at=datetime.now(UTC),
            )
        )
