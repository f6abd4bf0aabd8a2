"""Shared BDD fixtures and step definitions for the Product Reviews service."""

import pytest
from pytest_bdd import given, parsers

from product_reviews.review.review import Review


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given(
    parsers.cfparse('a review by customer "{customer_id}"'),
    target_fixture="review",
)
def review_by_customer(customer_id):
    review = Review.submit(
        product_id="prod-bdd",
        customer_id=customer_id,
        rating=4,
        title="BDD review",
        body="Written for a scenario.",
    )
    review._events.clear()
    return review
