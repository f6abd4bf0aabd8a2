"""Pydantic request/response schemas for the Product Reviews API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str
    customer_id: str
    author_name: str | None = Field(default=None, max_length=50)
    rating: int = Field(ge=1, le=5)
    title: str | None = Field(default=None, max_length=200)
    body: str | None = Field(default=None, max_length=2000)
    order_id: str | None = None
    images: list[str] | None = Field(default=None, max_length=5)


class EditReviewRequest(BaseModel):
    customer_id: str
    is_admin: bool = False
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, max_length=200)
    body: str | None = Field(default=None, max_length=2000)
    images: list[str] | None = Field(default=None, max_length=5)


class DeleteReviewRequest(BaseModel):
    customer_id: str
    is_admin: bool = False


class VoteOnReviewRequest(BaseModel):
    customer_id: str
    vote_type: str  # "Helpful" or "NotHelpful"


class ModerateReviewRequest(BaseModel):
    moderator_id: str
    action: str  # "Approve", "Reject", "Flag" or "Hide"
    notes: str | None = Field(default=None, max_length=500)


class FlagReviewRequest(BaseModel):
    customer_id: str
    customer_name: str | None = Field(default=None, max_length=50)
    reason: str
    description: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewIdResponse(BaseModel):
    review_id: str


class FlagIdResponse(BaseModel):
    flag_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class VoteResponse(BaseModel):
    outcome: str


class ModerationResponse(BaseModel):
    review_status: str


class ReviewResponse(BaseModel):
    review_id: str
    product_id: str
    customer_id: str | None = None
    author_name: str | None = None
    rating: int
    title: str | None = None
    body: str | None = None
    images: list[str] = []
    status: str
    verified_purchase: bool = False
    helpful_count: int = 0
    unhelpful_count: int = 0
    total_votes: int = 0
    helpful_score: int = 0
    is_edited: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user_vote: str | None = None


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    pagination: PaginationResponse


class RatingResponse(BaseModel):
    product_id: str
    total_reviews: int
    average_rating: float
    rating_distribution: list[int]
    verified_review_count: int
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
