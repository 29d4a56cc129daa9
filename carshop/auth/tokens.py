"""
Bearer token handling for authentication.

This module provides functionality for:
- Extracting bearer tokens from the Authorization header
- Verifying tokens against an identity provider (Firebase or local JWT)
- Creating JWT tokens for the local provider
"""
import asyncio
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import firebase_admin
import jwt
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from pydantic import BaseModel, field_validator

from carshop.auth.models import normalize_email
from carshop.config import Settings
from carshop.exceptions import InvalidToken, MissingAuthorization, Timeout

logger = logging.getLogger("carshop.auth")

FIREBASE_APP_NAME = "carshop"


class TokenData(BaseModel):
    """Verified identity extracted from a token."""
    email: str
    uid: Optional[str] = None
    exp: Optional[int] = None  # Expiration time

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


def create_access_token(
    email: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a JWT access token accepted by ``JWTIdentityProvider``.

    Args:
        email: Identity claim carried by the token
        secret_key: Shared signing secret
        algorithm: Signing algorithm
        expires_delta: Lifetime of the token, defaults to one hour
        extra_claims: Additional payload data

    Returns:
        Encoded JWT token string
    """
    to_encode = dict(extra_claims or {})
    expires = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"sub": email, "email": email, "exp": expires})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


class JWTIdentityProvider:
    """Verifies tokens signed with a shared secret."""
    errors = (jwt.PyJWTError,)

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    async def verify(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])


class FirebaseIdentityProvider:
    """
    Verifies Firebase ID tokens with the Firebase Admin SDK.

    The SDK call blocks (it may fetch Google's public certificates), so it is
    run in a worker thread.
    """
    errors = (ValueError, FirebaseError)

    def __init__(self, service_account: Optional[str] = None, check_revoked: bool = False):
        self.check_revoked = check_revoked
        try:
            self.app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            if service_account:
                credential = credentials.Certificate(json.loads(service_account))
            else:
                credential = credentials.ApplicationDefault()
            self.app = firebase_admin.initialize_app(credential, name=FIREBASE_APP_NAME)

    async def verify(self, token: str) -> Dict[str, Any]:
        return await asyncio.to_thread(
            firebase_auth.verify_id_token,
            token,
            app=self.app,
            check_revoked=self.check_revoked,
        )


class TokenVerifier:
    """
    Turns an Authorization header into a verified identity.

    Every provider failure (expired, malformed, revoked, no email claim) comes
    out as ``InvalidToken``. There are no retries: an invalid token stays
    invalid.
    """

    def __init__(self, provider, timeout: float = 5.0):
        self.provider = provider
        self.timeout = timeout

    @staticmethod
    def extract_token(authorization: Optional[str]) -> str:
        """
        Get the token from an ``Authorization: Bearer <token>`` header value.

        Raises:
            MissingAuthorization: If the header is absent or malformed
        """
        if not authorization:
            raise MissingAuthorization(reason="no Authorization header")
        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise MissingAuthorization(reason="malformed Authorization header")
        return token

    async def verify(self, token: str) -> TokenData:
        """
        Verify a raw token with the identity provider.

        Raises:
            InvalidToken: If the provider rejects the token
            Timeout: If the provider does not answer in time
        """
        try:
            claims = await asyncio.wait_for(self.provider.verify(token), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise Timeout(reason="identity provider timed out") from e
        except self.provider.errors as e:
            raise InvalidToken(reason=f"{e.__class__.__name__}: {e}") from e

        email = claims.get("email")
        if not email:
            raise InvalidToken(reason="token has no email claim")
        return TokenData(email=email, uid=claims.get("uid") or claims.get("sub"), exp=claims.get("exp"))

    async def verify_header(self, authorization: Optional[str]) -> TokenData:
        return await self.verify(self.extract_token(authorization))


def build_token_verifier(settings: Settings) -> TokenVerifier:
    """Create the verifier for the configured identity provider."""
    if settings.auth_provider == "jwt":
        provider = JWTIdentityProvider(settings.jwt_secret_key, settings.jwt_algorithm)
    else:
        provider = FirebaseIdentityProvider(
            service_account=settings.firebase_service_account,
            check_revoked=settings.firebase_check_revoked,
        )
    logger.info(f"Token verification uses the '{settings.auth_provider}' identity provider")
    return TokenVerifier(provider, timeout=settings.identity_timeout_seconds)
