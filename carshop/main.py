from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from carshop.auth.tokens import TokenVerifier, build_token_verifier
from carshop.base_microservice import BaseMicroservice
from carshop.config import Settings, get_settings
from carshop.database.store import DocumentStore
from carshop.exceptions import ServiceError, Timeout
from carshop.orders.router import router as orders_router
from carshop.products.router import router as products_router
from carshop.reviews.router import router as reviews_router
from carshop.users.router import router as users_router

# Create shared base microservice instance
base_service = BaseMicroservice()

SERVICES = ["products", "orders", "users", "reviews"]


def create_app(
    settings: Settings = None,
    store: DocumentStore = None,
    token_verifier: TokenVerifier = None,
) -> FastAPI:
    """
    Build the CarShop API.

    Args:
        settings: Configuration, defaults to ``get_settings()``
        store: Document store, defaults to one on ``settings.database_url``
        token_verifier: Token verifier, defaults to the configured provider

    The store and verifier live on ``app.state``; handlers reach them through
    dependencies.
    """
    settings = settings or get_settings()
    if store is None:
        store = DocumentStore(settings.database_url, timeout=settings.store_timeout_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for FastAPI.
        Opens the document store on startup and closes it on shutdown.
        """
        base_service.log_event("service.startup", {"service": "main"})
        await store.open()
        if app.state.token_verifier is None:
            app.state.token_verifier = build_token_verifier(settings)
        try:
            yield
        finally:
            await store.close()
            base_service.log_event("service.shutdown", {"service": "main"})

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="CarShop backend: products, orders, users and reviews",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.token_verifier = token_verifier

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if isinstance(exc, Timeout):
            base_service.log_error(exc, context=f"{request.method} {request.url.path}: {exc.reason}")
        return base_service.error_response(exc.message, exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return base_service.mcp_response(
            data=exc.errors(),
            message="Invalid request",
            status="error",
            status_code=422,
        )

    # Include routers with prefixes
    prefix = settings.api_prefix.rstrip("/")
    app.include_router(products_router, prefix=f"{prefix}/products")
    app.include_router(orders_router, prefix=f"{prefix}/orders")
    app.include_router(users_router, prefix=f"{prefix}/users")
    app.include_router(reviews_router, prefix=f"{prefix}/reviews")

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint returning API information."""
        return base_service.mcp_response(
            message="All Right",
            data={
                "name": settings.project_name,
                "version": settings.version,
                "services": SERVICES,
            }
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Overall system health check."""
        try:
            await store.ping()
        except ServiceError as e:
            base_service.log_error(e, context="Health check failed")
            return base_service.mcp_response(
                message="Document store unavailable",
                status="error",
                data={"database": "offline"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return base_service.mcp_response(
            message="System health",
            data={"database": "online", "services": {name: "online" for name in SERVICES}}
        )

    return app


app = create_app()

# For running directly with uvicorn
if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("carshop.main:app", host=settings.host, port=settings.port)
