"""
Test cases for the reviews service.
"""
import pytest

from carshop.reviews.service import REVIEWS_COLLECTION


@pytest.mark.asyncio
async def test_post_review(client, store):
    response = await client.post("/api/reviews", json={"rating": 4.5, "comment": "Smooth ride"})

    assert response.status_code == 201
    ack = response.json()["data"]
    assert ack["acknowledged"] is True
    assert ack["inserted_id"]

    stored = await store.collection(REVIEWS_COLLECTION).find_one({"id": ack["inserted_id"]})
    assert stored == {"id": ack["inserted_id"], "rating": 4.5, "comment": "Smooth ride"}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"rating": 6, "comment": "Too good"},
    {"rating": -1, "comment": "Too bad"},
    {"comment": "No rating"},
])
async def test_post_review_rejects_invalid_payload(client, store, payload):
    response = await client.post("/api/reviews", json=payload)
    assert response.status_code == 422
    assert await store.collection(REVIEWS_COLLECTION).find() == []


@pytest.mark.asyncio
async def test_list_reviews(client):
    for rating in [5, 3, 1]:
        await client.post("/api/reviews", json={"rating": rating, "comment": f"{rating} stars"})

    response = await client.get("/api/reviews")
    assert response.status_code == 200
    assert response.json()["message"] == "Reviews retrieved successfully"
    assert sorted(r["rating"] for r in response.json()["data"]) == [1, 3, 5]

    response = await client.get("/api/reviews", params={"limit": 1})
    assert len(response.json()["data"]) == 1


@pytest.mark.asyncio
async def test_list_reviews_rejects_negative_limit(client):
    response = await client.get("/api/reviews", params={"limit": -1})
    assert response.status_code == 422
