"""
Orders router.

Listing orders is self-scoped: callers see their own orders, admins see all of
them. The remaining order endpoints are open.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from carshop.auth.middleware import AccessPolicy
from carshop.base_microservice import BaseMicroservice
from carshop.database.deps import get_collection
from carshop.database.store import Collection
from carshop.exceptions import NotFound, ServiceError, StoreFailure
from carshop.orders.service import ORDERS_COLLECTION, OrderCreate, OrderService

router = APIRouter(tags=["orders"])
order_service = BaseMicroservice("orders")

get_orders = get_collection(ORDERS_COLLECTION)


@router.get("")
async def list_orders(
    limit: Optional[int] = Query(None, ge=0),
    scope: Dict[str, Any] = Depends(AccessPolicy.owner_scope("email")),
    orders: Collection = Depends(get_orders),
):
    """
    Get the caller's orders, or every order for an admin.

    Args:
        limit: Maximum number of orders
        scope: Ownership filter chosen by the access policy
        orders: Orders collection
    """
    try:
        items = await OrderService.list_orders(orders, scope=scope, limit=limit)
        return order_service.mcp_response(
            message="Orders retrieved successfully",
            data=items
        )
    except ServiceError:
        raise
    except Exception as e:
        order_service.log_error(e, context="List orders")
        raise StoreFailure("Failed to retrieve orders: " + str(e))


@router.get("/{order_id}")
async def get_order(order_id: str, orders: Collection = Depends(get_orders)):
    """Get a single order."""
    try:
        order = await OrderService.get_order(order_id, orders)

        if order is None:
            raise NotFound("Order not found")

        return order_service.mcp_response(
            message="Order retrieved successfully",
            data=order
        )
    except ServiceError:
        raise
    except Exception as e:
        order_service.log_error(e, context="Get order")
        raise StoreFailure("Failed to retrieve order: " + str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(order_data: OrderCreate, orders: Collection = Depends(get_orders)):
    """Place a new order."""
    try:
        order = await OrderService.place_order(order_data, orders)

        order_service.log_event("order.placed", {"id": order.id, "email": order.email})

        return order_service.mcp_response(
            message="Order placed successfully",
            data=order,
            status_code=status.HTTP_201_CREATED
        )
    except ServiceError:
        raise
    except Exception as e:
        order_service.log_error(e, context="Place order")
        raise StoreFailure("Failed to place order: " + str(e))


@router.put("/{order_id}")
async def ship_order(order_id: str, orders: Collection = Depends(get_orders)):
    """Mark an order as shipped."""
    try:
        order = await OrderService.ship_order(order_id, orders)

        if order is None:
            raise NotFound("Order not found")

        order_service.log_event("order.shipped", {"id": order_id})

        return order_service.mcp_response(
            message="Order updated successfully",
            data=order
        )
    except ServiceError:
        raise
    except Exception as e:
        order_service.log_error(e, context="Ship order")
        raise StoreFailure("Failed to update order: " + str(e))


@router.delete("/{order_id}")
async def delete_order(order_id: str, orders: Collection = Depends(get_orders)):
    """Delete an order."""
    try:
        order = await OrderService.delete_order(order_id, orders)

        if order is None:
            raise NotFound("Order not found")

        order_service.log_event("order.deleted", {"id": order_id})

        return order_service.mcp_response(
            message="Order deleted successfully",
            data=order
        )
    except ServiceError:
        raise
    except Exception as e:
        order_service.log_error(e, context="Delete order")
        raise StoreFailure("Failed to delete order: " + str(e))
