"""
Test cases for the products service.
"""
import pytest

from conftest import CUSTOMER_EMAIL, STRANGER_EMAIL
from carshop.products.service import PRODUCTS_COLLECTION

PRODUCT = {"name": "X", "price": 10, "description": "d", "image": "i"}


async def create_product(client, headers, **overrides):
    response = await client.post("/api/products", json={**PRODUCT, **overrides}, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_then_get_product(client, auth_headers):
    response = await client.post("/api/products", json=PRODUCT, headers=auth_headers(STRANGER_EMAIL))

    assert response.status_code == 201
    assert response.json()["status"] == "ok"
    created = response.json()["data"]
    assert created["id"]
    assert created["status"] == "pending"

    response = await client.get(f"/api/products/{created['id']}")
    assert response.status_code == 200
    product = response.json()["data"]
    assert product == {
        "id": created["id"],
        "name": "X",
        "price": 10,
        "description": "d",
        "image": "i",
        "status": "pending",
    }


@pytest.mark.asyncio
async def test_create_product_requires_token(client, store):
    response = await client.post("/api/products", json=PRODUCT)
    assert response.status_code == 401
    assert response.json()["message"] == "You are not authorized to access this resource"

    response = await client.post(
        "/api/products", json=PRODUCT, headers={"Authorization": "Bearer invalid.token.here"}
    )
    assert response.status_code == 401

    assert await store.collection(PRODUCTS_COLLECTION).find() == []


@pytest.mark.asyncio
async def test_create_product_rejects_incomplete_payload(client, auth_headers):
    response = await client.post(
        "/api/products", json={"name": "No price"}, headers=auth_headers(CUSTOMER_EMAIL)
    )
    assert response.status_code == 422
    assert response.json()["status"] == "error"
    assert response.json()["message"] == "Invalid request"


@pytest.mark.asyncio
async def test_list_products_with_limit(client, auth_headers):
    headers = auth_headers(CUSTOMER_EMAIL)
    for name in ["Roadster", "Pickup", "Minivan"]:
        await create_product(client, headers, name=name)

    response = await client.get("/api/products")
    assert response.status_code == 200
    assert sorted(p["name"] for p in response.json()["data"]) == ["Minivan", "Pickup", "Roadster"]

    response = await client.get("/api/products", params={"limit": 2})
    assert len(response.json()["data"]) == 2

    # limit=0 means no limit
    response = await client.get("/api/products", params={"limit": 0})
    assert len(response.json()["data"]) == 3


@pytest.mark.asyncio
async def test_get_unknown_product(client):
    response = await client.get("/api/products/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Product not found", "data": None}


@pytest.mark.asyncio
async def test_delete_product(client, auth_headers):
    headers = auth_headers(CUSTOMER_EMAIL)
    doomed = await create_product(client, headers, name="Doomed")
    kept = await create_product(client, headers, name="Kept")

    response = await client.delete(f"/api/products/{doomed['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Doomed"

    response = await client.get(f"/api/products/{doomed['id']}")
    assert response.status_code == 404

    # Deleting again is a 404, not a 500, and leaves other products alone
    response = await client.delete(f"/api/products/{doomed['id']}", headers=headers)
    assert response.status_code == 404
    response = await client.delete("/api/products/never-existed", headers=headers)
    assert response.status_code == 404

    response = await client.get("/api/products")
    assert [p["id"] for p in response.json()["data"]] == [kept["id"]]


@pytest.mark.asyncio
async def test_delete_product_requires_token(client, auth_headers):
    product = await create_product(client, auth_headers(CUSTOMER_EMAIL))

    response = await client.delete(f"/api/products/{product['id']}")
    assert response.status_code == 401

    response = await client.get(f"/api/products/{product['id']}")
    assert response.status_code == 200
