"""Pure rating rollup over a set of approved reviews."""

from dataclasses import asdict, dataclass, field
from datetime import datetime

from product_reviews.utils.numbers import mean, percentage, round_half_up


@dataclass(frozen=True)
class RatingSummary:
    total_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: list[int] = field(default_factory=lambda: [0, 0, 0, 0, 0])
    verified_review_count: int = 0
    verified_average_rating: float | None = None
    last_7_days_count: int = 0
    last_7_days_average: float = 0.0
    last_30_days_count: int = 0
    last_30_days_average: float = 0.0
    total_helpful_votes: int = 0
    average_helpful_score: int = 0
    reviews_with_media: int = 0
    average_review_length: int = 0
    first_review_at: datetime | None = None
    last_review_at: datetime | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def _scores(reviews) -> list[int]:
    return [r.rating.score for r in reviews]


def summarize_reviews(approved, recent_7=(), recent_30=()) -> RatingSummary:
    """Roll up approved reviews into a ``RatingSummary``.

    ``recent_7`` and ``recent_30`` are the approved reviews created inside
    each trend window; they are scanned separately by the caller.
    """
    approved = list(approved)
    if not approved:
        return RatingSummary()

    scores = _scores(approved)
    distribution = [0, 0, 0, 0, 0]
    for score in scores:
        distribution[score - 1] += 1

    verified = _scores(r for r in approved if r.verified_purchase)
    week = _scores(recent_7)
    month = _scores(recent_30)
    helpful_votes = sum(r.helpful_count or 0 for r in approved)
    body_length = sum(len(r.body or "") for r in approved)
    created = [r.created_at for r in approved if r.created_at is not None]

    return RatingSummary(
        total_reviews=len(scores),
        average_rating=mean(sum(scores), len(scores)),
        rating_distribution=distribution,
        verified_review_count=len(verified),
        verified_average_rating=mean(sum(verified), len(verified)) if verified else None,
        last_7_days_count=len(week),
        last_7_days_average=mean(sum(week), len(week)),
        last_30_days_count=len(month),
        last_30_days_average=mean(sum(month), len(month)),
        total_helpful_votes=helpful_votes,
        average_helpful_score=percentage(helpful_votes, len(approved)),
        reviews_with_media=sum(1 for r in approved if r.has_media),
        average_review_length=int(round_half_up(body_length / len(approved))),
        first_review_at=min(created) if created else None,
        last_review_at=max(created) if created else None,
    )
