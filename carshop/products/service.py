"""
Product catalogue operations.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from carshop.database.store import Collection

PRODUCTS_COLLECTION = "products"
DEFAULT_STATUS = "pending"


class ProductCreate(BaseModel):
    """Model for adding a product."""
    name: str
    price: float = Field(..., ge=0)
    description: str
    image: str


class ProductOut(BaseModel):
    """Model for product information returned to clients."""
    id: str
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None
    status: str = DEFAULT_STATUS


class ProductService:
    """
    Service for product operations.
    """
    @staticmethod
    async def list_products(products: Collection, limit: Optional[int] = None) -> List[ProductOut]:
        documents = await products.find(limit=limit)
        return [ProductOut.model_validate(d) for d in documents]

    @staticmethod
    async def get_product(product_id: str, products: Collection) -> Optional[ProductOut]:
        """
        Get product by ID.

        Returns:
            Product information or None if not found
        """
        document = await products.find_one({"id": product_id})
        if document is None:
            return None
        return ProductOut.model_validate(document)

    @staticmethod
    async def create_product(product_data: ProductCreate, products: Collection) -> ProductOut:
        """
        Add a new product. New products always start out as pending.
        """
        document = {**product_data.model_dump(), "status": DEFAULT_STATUS}
        product_id = await products.insert_one(document)
        return ProductOut(id=product_id, **document)

    @staticmethod
    async def delete_product(product_id: str, products: Collection) -> Optional[ProductOut]:
        """
        Delete a product.

        Returns:
            The deleted product or None if there was no such product
        """
        document = await products.find_one_and_delete({"id": product_id})
        if document is None:
            return None
        return ProductOut.model_validate(document)
