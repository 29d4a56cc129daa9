"""
Order operations.

Orders belong to the email they were placed under. Status moves from
``placed`` to ``shipped`` through an explicit update.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from carshop.auth.models import normalize_email
from carshop.database.store import Collection

ORDERS_COLLECTION = "orders"


class OrderStatus(str, Enum):
    PLACED = "placed"
    SHIPPED = "shipped"


class OrderCreate(BaseModel):
    """Model for placing an order."""
    email: EmailStr  # owner
    name: str
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


class OrderOut(BaseModel):
    """Model for order information returned to clients."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: str = OrderStatus.PLACED.value


class OrderService:
    """
    Service for order operations.
    """
    @staticmethod
    async def list_orders(
        orders: Collection,
        scope: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None
    ) -> List[OrderOut]:
        """
        List orders matching ``scope``.

        Args:
            orders: Orders collection
            scope: Ownership filter from the access policy, empty for all orders
            limit: Maximum number of orders
        """
        documents = await orders.find(scope or {}, limit=limit)
        return [OrderOut.model_validate(d) for d in documents]

    @staticmethod
    async def get_order(order_id: str, orders: Collection) -> Optional[OrderOut]:
        document = await orders.find_one({"id": order_id})
        if document is None:
            return None
        return OrderOut.model_validate(document)

    @staticmethod
    async def place_order(order_data: OrderCreate, orders: Collection) -> OrderOut:
        document = {**order_data.model_dump(), "status": OrderStatus.PLACED.value}
        order_id = await orders.insert_one(document)
        return OrderOut(id=order_id, **document)

    @staticmethod
    async def ship_order(order_id: str, orders: Collection) -> Optional[OrderOut]:
        """
        Mark an order as shipped.

        Returns:
            Updated order or None if not found
        """
        document = await orders.find_one_and_update(
            {"id": order_id}, {"status": OrderStatus.SHIPPED.value}
        )
        if document is None:
            return None
        return OrderOut.model_validate(document)

    @staticmethod
    async def delete_order(order_id: str, orders: Collection) -> Optional[OrderOut]:
        document = await orders.find_one_and_delete({"id": order_id})
        if document is None:
            return None
        return OrderOut.model_validate(document)
