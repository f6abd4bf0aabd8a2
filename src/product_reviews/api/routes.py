"""FastAPI routes for the Product Reviews service.

Each write route translates a Pydantic request into a Protean command.
Read routes serve review lists and ratings through the read-through cache.
"""

import json
import math
import uuid

from fastapi import APIRouter, Header, Query, Request
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from product_reviews.api.schemas import (
    DeleteReviewRequest,
    EditReviewRequest,
    FlagIdResponse,
    FlagReviewRequest,
    ModerateReviewRequest,
    ModerationResponse,
    PaginationResponse,
    RatingResponse,
    ReviewIdResponse,
    ReviewListResponse,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
    VoteOnReviewRequest,
    VoteResponse,
)
from product_reviews.cache.coordinator import CacheScope, read_through
from product_reviews.rating.aggregation import approved_reviews, recompute_product_rating
from product_reviews.rating.product_rating import ProductRating
from product_reviews.review.deletion import DeleteReview
from product_reviews.review.editing import EditReview
from product_reviews.review.flag import FlagReview
from product_reviews.review.moderation import ModerateReview
from product_reviews.review.review import Review
from product_reviews.review.submission import SubmitReview
from product_reviews.review.voting import VoteOnReview
from product_reviews.utils.logging import bind_correlation_id
from product_reviews.utils.queries import fetch_all

review_router = APIRouter(prefix="/reviews", tags=["reviews"])

_SORT_KEYS = {
    "created_at": lambda r: r.created_at,
    "rating": lambda r: r.rating.score,
    "helpfulness": lambda r: r.helpful_count,
}


def _correlation_id(request: Request, header_value: str | None) -> str:
    correlation_id = getattr(request.state, "correlation_id", None) or header_value or str(uuid.uuid4())
    bind_correlation_id(correlation_id)
    return correlation_id


def _review_response(review, viewer_id: str | None = None) -> ReviewResponse:
    vote = review.vote_of(viewer_id) if viewer_id else None
    return ReviewResponse(
        review_id=str(review.id),
        product_id=str(review.product_id),
        customer_id=str(review.customer_id) if review.customer_id else None,
        author_name=review.author_name,
        rating=review.rating.score,
        title=review.title,
        body=review.body,
        images=[img.url for img in sorted(review.images, key=lambda i: i.display_order)],
        status=review.status,
        verified_purchase=bool(review.verified_purchase),
        helpful_count=review.helpful_count,
        unhelpful_count=review.unhelpful_count,
        total_votes=review.total_votes,
        helpful_score=review.helpful_score,
        is_edited=bool(review.is_edited),
        created_at=review.created_at,
        updated_at=review.updated_at,
        user_vote=vote.vote_type if vote else None,
    )


def _paginate(reviews, page: int, limit: int) -> dict:
    total = len(reviews)
    start = (page - 1) * limit
    return ReviewListResponse(
        reviews=[_review_response(r) for r in reviews[start : start + limit]],
        pagination=PaginationResponse(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    ).model_dump(mode="json")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(
    request: Request,
    body: SubmitReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> ReviewIdResponse:
    """Submit a new product review."""
    command = SubmitReview(
        product_id=body.product_id,
        customer_id=body.customer_id,
        author_name=body.author_name,
        rating=body.rating,
        title=body.title,
        body=body.body,
        order_id=body.order_id,
        images=json.dumps(body.images) if body.images else None,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=review_id)


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(
    request: Request,
    review_id: str,
    body: EditReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> StatusResponse:
    """Edit an existing review (author or admin)."""
    command = EditReview(
        review_id=review_id,
        customer_id=body.customer_id,
        is_admin=body.is_admin,
        rating=body.rating,
        title=body.title,
        body=body.body,
        images=json.dumps(body.images) if body.images is not None else None,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(
    request: Request,
    review_id: str,
    body: DeleteReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> StatusResponse:
    """Delete a review (author or admin)."""
    command = DeleteReview(
        review_id=review_id,
        customer_id=body.customer_id,
        is_admin=body.is_admin,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/votes", status_code=201, response_model=VoteResponse)
async def vote_on_review(
    request: Request,
    review_id: str,
    body: VoteOnReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> VoteResponse:
    """Cast, switch or retract a helpfulness vote."""
    command = VoteOnReview(
        review_id=review_id,
        customer_id=body.customer_id,
        vote_type=body.vote_type,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    outcome = current_domain.process(command, asynchronous=False)
    return VoteResponse(outcome=outcome)


@review_router.put("/{review_id}/moderate", response_model=ModerationResponse)
async def moderate_review(
    request: Request,
    review_id: str,
    body: ModerateReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> ModerationResponse:
    """Approve, reject, flag or hide a review."""
    command = ModerateReview(
        review_id=review_id,
        moderator_id=body.moderator_id,
        action=body.action,
        notes=body.notes,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    status = current_domain.process(command, asynchronous=False)
    return ModerationResponse(review_status=status)


@review_router.post("/{review_id}/flags", status_code=201, response_model=FlagIdResponse)
async def flag_review(
    request: Request,
    review_id: str,
    body: FlagReviewRequest,
    x_correlation_id: str | None = Header(default=None),
) -> FlagIdResponse:
    """Flag a review for moderation."""
    command = FlagReview(
        review_id=review_id,
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        reason=body.reason,
        description=body.description,
        correlation_id=_correlation_id(request, x_correlation_id),
    )
    flag_id = current_domain.process(command, asynchronous=False)
    return FlagIdResponse(flag_id=flag_id)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
@review_router.get("/products/{product_id}/rating", response_model=RatingResponse)
async def get_product_rating(product_id: str) -> dict:
    """Rating rollup of a product, computed on first request."""

    def load() -> dict:
        try:
            rating = current_domain.repository_for(ProductRating).get(product_id)
        except ObjectNotFoundError:
            rating = recompute_product_rating(product_id)
        return RatingResponse(product_id=product_id, **rating.as_summary().to_dict()).model_dump(mode="json")

    return read_through(CacheScope.RATING, product_id, load)


@review_router.get("/products/{product_id}", response_model=ReviewListResponse)
async def list_product_reviews(
    product_id: str,
    rating: int | None = Query(default=None, ge=1, le=5),
    verified_only: bool = False,
    sort_by: str = Query(default="created_at", pattern="^(created_at|rating|helpfulness)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    """Approved reviews of a product."""
    params = {
        "rating": rating,
        "verified_only": verified_only,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "page": page,
        "limit": limit,
    }

    def load() -> dict:
        reviews = approved_reviews(product_id)
        if rating is not None:
            reviews = [r for r in reviews if r.rating.score == rating]
        if verified_only:
            reviews = [r for r in reviews if r.verified_purchase]
        reviews.sort(key=_SORT_KEYS[sort_by], reverse=sort_order == "desc")
        return _paginate(reviews, page, limit)

    return read_through(CacheScope.PRODUCT_REVIEWS, product_id, load, params=params)


@review_router.get("/customers/{customer_id}", response_model=ReviewListResponse)
async def list_customer_reviews(
    customer_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    """Every review a customer wrote, newest first, whatever its status."""

    def load() -> dict:
        reviews = fetch_all(Review, customer_id=customer_id)
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return _paginate(reviews, page, limit)

    return read_through(CacheScope.USER_REVIEWS, customer_id, load, params={"page": page, "limit": limit})


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: str, customer_id: str | None = None) -> ReviewResponse:
    """A single review; ``customer_id`` adds the caller's own vote."""
    review = current_domain.repository_for(Review).get(review_id)
    return _review_response(review, viewer_id=customer_id)
