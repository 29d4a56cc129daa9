"""
Authentication and authorization middleware.

This module provides FastAPI dependencies for:
- The access gate validating bearer tokens
- Role resolution from the users collection
- Role-based access policy applied in front of handlers

Dependencies run in a fixed order for every protected request: the access
gate, then the role resolver, then the policy check, then the handler.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from pydantic import ValidationError

from carshop.auth.models import USERS_COLLECTION, Principal, Role, UserRecord, normalize_email
from carshop.auth.tokens import TokenData, TokenVerifier
from carshop.database.store import Collection
from carshop.exceptions import InvalidToken, MissingAuthorization, StoreFailure, Unauthorized, UserNotFound

logger = logging.getLogger("carshop.auth")


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


async def require_identity(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> TokenData:
    """
    Access gate. Rejects the request unless it carries a valid bearer token.

    The caller gets the same 401 whatever went wrong; the cause is only
    logged. On success the identity is attached to ``request.state``.

    Raises:
        MissingAuthorization: If there is no usable Authorization header
        InvalidToken: If the identity provider rejects the token
    """
    try:
        identity = await verifier.verify_header(request.headers.get("Authorization"))
    except (MissingAuthorization, InvalidToken) as e:
        logger.warning(f"Unauthorized access attempt on {request.method} {request.url.path}: {e.reason}")
        raise
    request.state.identity = identity
    return identity


class RoleResolver:
    """
    Looks up the role of a verified caller.

    Only performs the lookup; deciding what the role allows is left to
    ``AccessPolicy``.
    """

    def __init__(self, users: Collection):
        self.users = users

    async def lookup(self, email: str) -> Optional[UserRecord]:
        """
        Get the user record for ``email``, or None if there is none.

        Raises:
            StoreFailure: If the stored record is malformed (e.g. an unknown role)
        """
        document = await self.users.find_one({"email": normalize_email(email)})
        if document is None:
            return None
        try:
            return UserRecord.model_validate(document)
        except ValidationError as e:
            logger.error(f"ERROR: malformed user record {document.get('id')}: {e}")
            raise StoreFailure("Malformed user record") from e

    async def resolve(self, email: str) -> Role:
        """
        Get the role of the user registered under ``email``.

        Raises:
            UserNotFound: If the identity has no application account
        """
        user = await self.lookup(email)
        if user is None:
            raise UserNotFound(reason=f"no user record for {email}")
        return user.role


def get_role_resolver(request: Request) -> RoleResolver:
    return RoleResolver(request.app.state.store.collection(USERS_COLLECTION))


async def require_principal(
    request: Request,
    identity: TokenData = Depends(require_identity),
    resolver: RoleResolver = Depends(get_role_resolver),
) -> Principal:
    """Authenticate the caller, then resolve their role."""
    role = await resolver.resolve(identity.email)
    principal = Principal(email=identity.email, role=role)
    request.state.principal = principal
    return principal


class AccessPolicy:
    """
    Role-based access policy.

    Creates FastAPI dependencies for protecting routes based on:
    - Authentication only
    - A minimum role
    - Ownership, lifted for admins
    """

    @staticmethod
    def authenticated():
        """
        Dependency requiring a valid identity and nothing more.

        Returns:
            Dependency function
        """
        return require_identity

    @staticmethod
    def has_role(role: Role):
        """
        Dependency requiring the caller's role to be at least ``role``.

        Args:
            role: Minimum role

        Returns:
            Dependency function
        """
        async def verify_role(principal: Principal = Depends(require_principal)) -> Principal:
            if not principal.role.satisfies(role):
                raise Unauthorized(reason=f"{principal.email} has role '{principal.role.value}', needs '{role.value}'")
            return principal

        return verify_role

    @staticmethod
    def owner_scope(owner_field: str = "email"):
        """
        Dependency yielding the store filter for a self-scoped read.

        Admins get an empty filter (every record); anyone else gets records
        whose ``owner_field`` equals their verified email.

        Args:
            owner_field: Document field holding the owner's email

        Returns:
            Dependency function
        """
        async def scope(principal: Principal = Depends(require_principal)) -> Dict[str, Any]:
            if principal.is_admin:
                return {}
            return {owner_field: principal.email}

        return scope
