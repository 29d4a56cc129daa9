"""
Test cases for the orders service.
"""
import pytest

from conftest import ADMIN_EMAIL, CUSTOMER_EMAIL, STRANGER_EMAIL
from carshop.orders.service import ORDERS_COLLECTION

OTHER_EMAIL = "other@example.com"


def order_payload(email, name="Roadster", price=25000):
    return {
        "email": email,
        "name": name,
        "price": price,
        "description": "Two seats, soft top",
        "image_url": "https://example.com/roadster.png",
    }


async def place(client, email, **kwargs):
    response = await client.post("/api/orders", json=order_payload(email, **kwargs))
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
async def test_place_and_get_order(client):
    order = await place(client, CUSTOMER_EMAIL)
    assert order["status"] == "placed"
    assert order["email"] == CUSTOMER_EMAIL

    response = await client.get(f"/api/orders/{order['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == order


@pytest.mark.asyncio
async def test_get_unknown_order(client):
    response = await client.get("/api/orders/nope")
    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


@pytest.mark.asyncio
async def test_ship_order(client):
    order = await place(client, CUSTOMER_EMAIL)

    response = await client.put(f"/api/orders/{order['id']}")
    assert response.status_code == 200
    shipped = response.json()["data"]
    assert shipped["status"] == "shipped"
    assert shipped["name"] == order["name"]

    response = await client.get(f"/api/orders/{order['id']}")
    assert response.json()["data"]["status"] == "shipped"


@pytest.mark.asyncio
async def test_ship_unknown_order(client):
    response = await client.put("/api/orders/nope")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_order(client, store):
    order = await place(client, CUSTOMER_EMAIL)
    other = await place(client, OTHER_EMAIL)

    response = await client.delete(f"/api/orders/{order['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == order["id"]

    response = await client.delete(f"/api/orders/{order['id']}")
    assert response.status_code == 404

    remaining = await store.collection(ORDERS_COLLECTION).find()
    assert [o["id"] for o in remaining] == [other["id"]]


@pytest.mark.asyncio
async def test_list_orders_is_self_scoped(client, accounts, auth_headers):
    mine = [await place(client, CUSTOMER_EMAIL, name="Sedan"), await place(client, CUSTOMER_EMAIL, name="Coupe")]
    await place(client, OTHER_EMAIL, name="Truck")

    response = await client.get("/api/orders", headers=auth_headers(CUSTOMER_EMAIL))
    assert response.status_code == 200
    orders = response.json()["data"]
    assert sorted(o["id"] for o in orders) == sorted(o["id"] for o in mine)
    assert all(o["email"] == CUSTOMER_EMAIL for o in orders)


@pytest.mark.asyncio
async def test_admin_lists_every_order(client, accounts, auth_headers):
    placed = [
        await place(client, CUSTOMER_EMAIL),
        await place(client, OTHER_EMAIL),
        await place(client, ADMIN_EMAIL),
    ]

    response = await client.get("/api/orders", headers=auth_headers(ADMIN_EMAIL))
    assert response.status_code == 200
    assert sorted(o["id"] for o in response.json()["data"]) == sorted(o["id"] for o in placed)

    response = await client.get("/api/orders", params={"limit": 2}, headers=auth_headers(ADMIN_EMAIL))
    assert len(response.json()["data"]) == 2


@pytest.mark.asyncio
async def test_list_orders_requires_token(client):
    await place(client, CUSTOMER_EMAIL)

    response = await client.get("/api/orders")
    assert response.status_code == 401
    assert response.json()["data"] is None


@pytest.mark.asyncio
async def test_list_orders_without_account(client, accounts, auth_headers):
    await place(client, STRANGER_EMAIL)

    response = await client.get("/api/orders", headers=auth_headers(STRANGER_EMAIL))
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_mixed_case_owner_sees_own_orders(client, auth_headers):
    await client.post("/api/users", json={"name": "Nina", "email": "Nina@Example.COM"})
    order = await place(client, "NINA@example.com")
    assert order["email"] == "nina@example.com"

    response = await client.get("/api/orders", headers=auth_headers("Nina@Example.COM"))
    assert response.status_code == 200
    assert [o["id"] for o in response.json()["data"]] == [order["id"]]
