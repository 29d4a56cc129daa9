"""
Products router.

Reads are public. Adding and deleting products requires a valid identity but
no particular role.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from carshop.auth.middleware import AccessPolicy
from carshop.auth.tokens import TokenData
from carshop.base_microservice import BaseMicroservice
from carshop.database.deps import get_collection
from carshop.database.store import Collection
from carshop.exceptions import NotFound, ServiceError, StoreFailure
from carshop.products.service import PRODUCTS_COLLECTION, ProductCreate, ProductService

# Create router
router = APIRouter(tags=["products"])

# Create service instance
product_service = BaseMicroservice("products")

get_products = get_collection(PRODUCTS_COLLECTION)


@router.get("")
async def list_products(
    limit: Optional[int] = Query(None, ge=0),
    products: Collection = Depends(get_products),
):
    """
    Get all products, or the first ``limit`` of them.
    """
    try:
        items = await ProductService.list_products(products, limit=limit)
        return product_service.mcp_response(
            message="Products retrieved successfully",
            data=items
        )
    except ServiceError:
        raise
    except Exception as e:
        product_service.log_error(e, context="List products")
        raise StoreFailure("Failed to retrieve products: " + str(e))


@router.get("/{product_id}")
async def get_product(product_id: str, products: Collection = Depends(get_products)):
    """Get a single product."""
    try:
        product = await ProductService.get_product(product_id, products)

        if product is None:
            raise NotFound("Product not found")

        return product_service.mcp_response(
            message="Product retrieved successfully",
            data=product
        )
    except ServiceError:
        raise
    except Exception as e:
        product_service.log_error(e, context="Get product")
        raise StoreFailure("Failed to retrieve product: " + str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    identity: TokenData = Depends(AccessPolicy.authenticated()),
    products: Collection = Depends(get_products),
):
    """
    Add a new product. The product starts out as pending.

    Args:
        product_data: Product fields
        identity: Verified caller
        products: Products collection

    Returns:
        Envelope with the created product
    """
    try:
        product = await ProductService.create_product(product_data, products)

        # Log event
        product_service.log_event("product.created", {
            "id": product.id,
            "created_by": identity.email
        })

        return product_service.mcp_response(
            message="Product created successfully",
            data=product,
            status_code=status.HTTP_201_CREATED
        )
    except ServiceError:
        raise
    except Exception as e:
        product_service.log_error(e, context="Create product")
        raise StoreFailure("Failed to create product: " + str(e))


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    identity: TokenData = Depends(AccessPolicy.authenticated()),
    products: Collection = Depends(get_products),
):
    """Delete a product."""
    try:
        product = await ProductService.delete_product(product_id, products)

        if product is None:
            raise NotFound("Product not found")

        # Log event
        product_service.log_event("product.deleted", {
            "id": product_id,
            "deleted_by": identity.email
        })

        return product_service.mcp_response(
            message="Product deleted successfully",
            data=product
        )
    except ServiceError:
        raise
    except Exception as e:
        product_service.log_error(e, context="Delete product")
        raise StoreFailure("Failed to delete product: " + str(e))
