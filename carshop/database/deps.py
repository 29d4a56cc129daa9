from fastapi import Request

from carshop.database.store import Collection, DocumentStore


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened by the application."""
    return request.app.state.store


def get_collection(name: str):
    """
    Dependency factory for a single collection.

    Usage in route functions:
        products: Collection = Depends(get_collection("products"))
    """
    def collection(request: Request) -> Collection:
        return get_store(request).collection(name)

    return collection
