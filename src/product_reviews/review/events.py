"""Domain events for the Review and ReviewFlag aggregates.

All events are versioned, immutable facts representing state changes.
Events are used for:
- Refreshing the ProductRating rollup of the affected product
- Invalidating cached review lists and ratings
- Cross-domain communication via the outbox and broker

Every event names the product so downstream handlers never need to reload
a review that may already be gone.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from product_reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a new product review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    rating = Integer(required=True)
    title = String()
    body = Text()
    status = String(required=True)
    verified_purchase = String(required=True)  # "True"/"False"
    image_count = Integer(default=0)
    correlation_id = String()
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    """The author (or an admin) changed the review content."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    rating = Integer(required=True)
    previous_rating = Integer(required=True)
    status = String(required=True)
    previous_status = String(required=True)
    changed_fields = Text()  # JSON list of field names
    correlation_id = String()
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewApproved:
    """A moderator approved the review; it now counts toward the product rating."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    rating = Integer(required=True)
    moderator_id = Identifier(required=True)
    correlation_id = String()
    approved_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewRejected:
    """A moderator rejected the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    moderator_id = Identifier(required=True)
    reason = String(required=True)
    correlation_id = String()
    rejected_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewFlagged:
    """A moderator pulled the review aside for a closer look."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    moderator_id = Identifier(required=True)
    notes = String()
    correlation_id = String()
    flagged_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewHidden:
    """The review was hidden by a moderator or because its product went away."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    hidden_by = String(required=True)
    reason = String()
    cascade = Boolean(default=False)  # hidden because its product went away
    correlation_id = String()
    hidden_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewDeleted:
    """The review was deleted by its author or an admin."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    rating = Integer(required=True)
    deleted_by = Identifier(required=True)
    cascade = Boolean(default=False)  # removed with its customer or product
    correlation_id = String()
    deleted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRecorded:
    """A customer cast, switched, or retracted a helpfulness vote."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    voter_id = Identifier(required=True)
    vote_type = String(required=True)
    outcome = String(required=True)  # VoteOutcome value
    helpful_count = Integer(required=True)
    unhelpful_count = Integer(required=True)
    correlation_id = String()
    voted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewReported:
    """A customer flagged the review for moderation."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String(required=True)
    flag_count = Integer(required=True)
    spam_count = Integer(required=True)
    correlation_id = String()
    reported_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewVerified:
    """A completed order proved the author bought the product."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier()
    order_id = Identifier(required=True)
    correlation_id = String()
    verified_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewAnonymized:
    """The author's account was closed and their identity removed from the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    former_customer_id = Identifier(required=True)
    correlation_id = String()
    anonymized_at = DateTime(required=True)


@reviews.event(part_of="ReviewFlag")
class FlagRaised:
    """A flag was filed against a review."""

    __version__ = 1

    flag_id = Identifier(required=True)
    review_id = Identifier(required=True)
    flagged_by = Identifier(required=True)
    reason = String(required=True)
    description = String()
    correlation_id = String()
    flagged_at = DateTime(required=True)
