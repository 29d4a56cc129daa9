"""
Shared fixtures: an app built by the factory over a temporary SQLite store,
with tokens verified by the local JWT provider.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from carshop.auth.models import USERS_COLLECTION, Role
from carshop.auth.tokens import JWTIdentityProvider, TokenVerifier, create_access_token
from carshop.config import Settings
from carshop.database.store import DocumentStore
from carshop.main import create_app

SECRET_KEY = "pytest-secret-key"
ADMIN_EMAIL = "admin@example.com"
CUSTOMER_EMAIL = "customer@example.com"
STRANGER_EMAIL = "stranger@example.com"  # valid token, no account


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'carshop.db'}",
        auth_provider="jwt",
        jwt_secret_key=SECRET_KEY,
        api_prefix="/api",
        store_timeout_seconds=5,
        identity_timeout_seconds=5,
    )


@pytest_asyncio.fixture
async def store(settings):
    store = DocumentStore(settings.database_url, timeout=settings.store_timeout_seconds)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def verifier(settings):
    return TokenVerifier(
        JWTIdentityProvider(settings.jwt_secret_key, settings.jwt_algorithm),
        timeout=settings.identity_timeout_seconds,
    )


@pytest.fixture
def app(settings, store, verifier):
    return create_app(settings=settings, store=store, token_verifier=verifier)


@pytest_asyncio.fixture
async def client(app):
    # ASGITransport does not run the lifespan; the store fixture opens the store
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://test", transport=transport) as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Build an Authorization header carrying a token for ``email``."""
    def make(email, secret=SECRET_KEY, **kwargs):
        token = create_access_token(email, secret, **kwargs)
        return {"Authorization": f"Bearer {token}"}
    return make


@pytest_asyncio.fixture
async def accounts(store):
    """An admin and a regular customer account."""
    users = store.collection(USERS_COLLECTION)
    await users.insert_one({"name": "Ada Admin", "email": ADMIN_EMAIL, "role": Role.ADMIN.value})
    await users.insert_one({"name": "Carl Customer", "email": CUSTOMER_EMAIL, "role": Role.USER.value})
    return users
