"""Integration tests for the Product Reviews API via TestClient."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from product_reviews.api import register_error_handlers, review_router
from product_reviews.review.flag import ReviewFlag


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(review_router)
    register_error_handlers(app)
    return TestClient(app)


def _submit_review(client, **overrides):
    defaults = {
        "product_id": "prod-api-001",
        "customer_id": "cust-api-001",
        "rating": 4,
        "title": "API Test Review",
        "body": "Submitted through the API.",
    }
    defaults.update(overrides)
    response = client.post("/reviews", json=defaults)
    assert response.status_code == 201, response.text
    return response.json()["review_id"]


def _approve(client, review_id):
    response = client.put(
        f"/reviews/{review_id}/moderate",
        json={"moderator_id": "mod-001", "action": "Approve"},
    )
    assert response.status_code == 200
    return response


class TestSubmitReviewAPI:
    def test_submit_returns_201(self, client):
        review_id = _submit_review(client)
        response = client.get(f"/reviews/{review_id}")
        assert response.status_code == 200
        assert response.json()["status"] == "Pending"

    def test_duplicate_returns_409(self, client):
        _submit_review(client, product_id="prod-dup", customer_id="cust-dup")
        response = client.post(
            "/reviews",
            json={"product_id": "prod-dup", "customer_id": "cust-dup", "rating": 3, "title": "Again"},
        )
        assert response.status_code == 409

    def test_missing_product_returns_404(self, client, product_directory):
        product_directory.mark_missing("prod-gone")
        response = client.post(
            "/reviews",
            json={"product_id": "prod-gone", "customer_id": "cust-1", "rating": 3, "title": "Hmm"},
        )
        assert response.status_code == 404

    def test_rule_violation_returns_400(self, client):
        response = client.post(
            "/reviews",
            json={"product_id": "prod-1", "customer_id": "cust-1", "rating": 3, "title": " "},
        )
        assert response.status_code == 400

    def test_out_of_range_rating_is_rejected_by_schema(self, client):
        response = client.post(
            "/reviews",
            json={"product_id": "prod-1", "customer_id": "cust-1", "rating": 9, "title": "Wow"},
        )
        assert response.status_code == 422


class TestWriteAPI:
    def test_edit_by_other_customer_returns_403(self, client):
        review_id = _submit_review(client)
        response = client.put(f"/reviews/{review_id}", json={"customer_id": "cust-other", "title": "Mine now"})
        assert response.status_code == 403

    def test_edit_by_author(self, client):
        review_id = _submit_review(client)
        response = client.put(f"/reviews/{review_id}", json={"customer_id": "cust-api-001", "title": "Updated"})
        assert response.status_code == 200
        assert client.get(f"/reviews/{review_id}").json()["title"] == "Updated"

    def test_vote_toggle(self, client):
        review_id = _submit_review(client)
        first = client.post(f"/reviews/{review_id}/votes", json={"customer_id": "cust-v", "vote_type": "Helpful"})
        second = client.post(f"/reviews/{review_id}/votes", json={"customer_id": "cust-v", "vote_type": "Helpful"})
        assert first.json()["outcome"] == "Added"
        assert second.json()["outcome"] == "Retracted"

    def test_self_vote_returns_403(self, client):
        review_id = _submit_review(client)
        response = client.post(
            f"/reviews/{review_id}/votes",
            json={"customer_id": "cust-api-001", "vote_type": "Helpful"},
        )
        assert response.status_code == 403

    def test_caller_vote_is_reported(self, client):
        review_id = _submit_review(client)
        client.post(f"/reviews/{review_id}/votes", json={"customer_id": "cust-v", "vote_type": "NotHelpful"})
        body = client.get(f"/reviews/{review_id}", params={"customer_id": "cust-v"}).json()
        assert body["user_vote"] == "NotHelpful"
        assert body["total_votes"] == 1
        assert body["helpful_score"] == 0

    def test_flag_twice_returns_409(self, client):
        review_id = _submit_review(client)
        payload = {"customer_id": "cust-f", "reason": "Spam"}
        assert client.post(f"/reviews/{review_id}/flags", json=payload).status_code == 201
        assert client.post(f"/reviews/{review_id}/flags", json=payload).status_code == 409

    def test_flag_carries_correlation_id(self, client):
        review_id = _submit_review(client)
        with patch.object(ReviewFlag, "raise_flag", wraps=ReviewFlag.raise_flag) as raise_flag:
            response = client.post(
                f"/reviews/{review_id}/flags",
                json={"customer_id": "cust-f", "reason": "Fake"},
                headers={"X-Correlation-ID": "corr-flag-api"},
            )
        assert response.status_code == 201
        assert raise_flag.call_args.kwargs["correlation_id"] == "corr-flag-api"

    def test_delete(self, client):
        review_id = _submit_review(client)
        response = client.request("DELETE", f"/reviews/{review_id}", json={"customer_id": "cust-api-001"})
        assert response.status_code == 200
        assert client.get(f"/reviews/{review_id}").status_code == 404

    def test_invalid_transition_returns_400(self, client):
        review_id = _submit_review(client)
        client.put(f"/reviews/{review_id}/moderate", json={"moderator_id": "mod-1", "action": "Hide"})
        response = client.put(f"/reviews/{review_id}/moderate", json={"moderator_id": "mod-1", "action": "Approve"})
        assert response.status_code == 400


class TestReadAPI:
    def test_product_reviews_only_lists_approved(self, client):
        approved = _submit_review(client, customer_id="cust-1", rating=5)
        _submit_review(client, customer_id="cust-2", rating=1)
        _approve(client, approved)

        body = client.get("/reviews/products/prod-api-001").json()

        assert [r["review_id"] for r in body["reviews"]] == [approved]
        assert body["pagination"]["total"] == 1

    def test_product_reviews_filter_and_sort(self, client):
        for customer, rating in (("cust-1", 2), ("cust-2", 5), ("cust-3", 4)):
            _approve(client, _submit_review(client, customer_id=customer, rating=rating))

        by_rating = client.get("/reviews/products/prod-api-001", params={"sort_by": "rating", "sort_order": "asc"})
        assert [r["rating"] for r in by_rating.json()["reviews"]] == [2, 4, 5]

        only_fives = client.get("/reviews/products/prod-api-001", params={"rating": 5})
        assert [r["rating"] for r in only_fives.json()["reviews"]] == [5]

        paged = client.get("/reviews/products/prod-api-001", params={"limit": 2, "page": 2}).json()
        assert len(paged["reviews"]) == 1
        assert paged["pagination"]["pages"] == 2

    def test_product_list_is_refreshed_after_approval(self, client):
        review_id = _submit_review(client)
        assert client.get("/reviews/products/prod-api-001").json()["reviews"] == []

        _approve(client, review_id)

        assert len(client.get("/reviews/products/prod-api-001").json()["reviews"]) == 1

    def test_rating_is_computed_lazily(self, client):
        response = client.get("/reviews/products/prod-never-reviewed/rating")
        assert response.status_code == 200
        body = response.json()
        assert body["total_reviews"] == 0
        assert body["rating_distribution"] == [0, 0, 0, 0, 0]
        assert body["verified_average_rating"] is None

    def test_rating_reflects_approved_reviews(self, client):
        _approve(client, _submit_review(client, customer_id="cust-1", rating=5))
        _approve(client, _submit_review(client, customer_id="cust-2", rating=2))

        body = client.get("/reviews/products/prod-api-001/rating").json()

        assert body["total_reviews"] == 2
        assert body["average_rating"] == 3.5
        assert body["rating_distribution"] == [0, 1, 0, 0, 1]

    def test_cached_rating_is_refreshed_after_approval(self, client):
        first = _submit_review(client, customer_id="cust-1", rating=5)
        _approve(client, first)
        assert client.get("/reviews/products/prod-api-001/rating").json()["total_reviews"] == 1

        client.post(f"/reviews/{first}/votes", json={"customer_id": "cust-3", "vote_type": "Helpful"})
        _approve(client, _submit_review(client, customer_id="cust-2", rating=1))

        body = client.get("/reviews/products/prod-api-001/rating").json()
        assert (body["total_reviews"], body["average_rating"]) == (2, 3.0)
        assert body["total_helpful_votes"] == 1
        assert body["average_helpful_score"] == 50

    def test_customer_reviews_include_every_status(self, client):
        _submit_review(client, product_id="prod-1", customer_id="cust-c")
        _approve(client, _submit_review(client, product_id="prod-2", customer_id="cust-c"))

        body = client.get("/reviews/customers/cust-c").json()

        assert {r["status"] for r in body["reviews"]} == {"Pending", "Approved"}

    def test_unknown_review_returns_404(self, client):
        assert client.get("/reviews/does-not-exist").status_code == 404
