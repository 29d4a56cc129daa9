"""
Users router.

This module provides FastAPI router for user endpoints:
- Self-registration
- Admin status of the current user
- Promotion to admin, restricted to admins
"""
from fastapi import APIRouter, Depends, status

from carshop.auth.middleware import AccessPolicy, RoleResolver, get_role_resolver
from carshop.auth.models import Principal, Role
from carshop.auth.tokens import TokenData
from carshop.base_microservice import BaseMicroservice
from carshop.database.deps import get_collection
from carshop.database.store import Collection
from carshop.exceptions import ServiceError, StoreFailure, UserNotFound
from carshop.users.service import (
    USERS_COLLECTION, AdminStatus, MakeAdminRequest, UserCreate, UserService
)

# Create router
router = APIRouter(tags=["users"])

# Create service instance
user_service = BaseMicroservice("users")

get_users = get_collection(USERS_COLLECTION)


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, users: Collection = Depends(get_users)):
    """
    Register a new user account with the ``user`` role.

    Args:
        user_data: User registration data
        users: Users collection

    Returns:
        Envelope with the created user
    """
    try:
        user = await UserService.register_user(user_data, users)

        # Log event
        user_service.log_event("user.registered", {
            "id": user.id,
            "email": user.email
        })

        return user_service.mcp_response(
            message="User registered successfully",
            data=user,
            status_code=status.HTTP_201_CREATED
        )
    except ServiceError:
        raise
    except Exception as e:
        user_service.log_error(e, context="User registration")
        raise StoreFailure("Registration failed: " + str(e))


@router.post("/me")
async def get_admin_status(
    identity: TokenData = Depends(AccessPolicy.authenticated()),
    resolver: RoleResolver = Depends(get_role_resolver),
):
    """
    Tell the current caller whether they are an admin.

    A verified caller without an account is not an admin.
    """
    try:
        user = await resolver.lookup(identity.email)
        is_admin = user is not None and user.role == Role.ADMIN

        return user_service.mcp_response(
            message="Admin status retrieved successfully",
            data=AdminStatus(admin=is_admin)
        )
    except ServiceError:
        raise
    except Exception as e:
        user_service.log_error(e, context="Get admin status")
        raise StoreFailure("Failed to get admin status: " + str(e))


@router.put("/make-admin")
async def make_admin(
    request_data: MakeAdminRequest,
    principal: Principal = Depends(AccessPolicy.has_role(Role.ADMIN)),
    users: Collection = Depends(get_users),
):
    """
    Promote a user to admin. Only admins may do this.

    Args:
        request_data: Email of the user to promote
        principal: Calling admin
        users: Users collection

    Returns:
        Envelope with the updated user
    """
    try:
        user = await UserService.make_admin(request_data.email, users)

        if user is None:
            raise UserNotFound()

        # Log event
        user_service.log_event("user.role.added", {
            "admin": principal.email,
            "email": user.email,
            "role_name": Role.ADMIN.value
        })

        return user_service.mcp_response(
            message="User promoted to admin successfully",
            data=user
        )
    except ServiceError:
        raise
    except Exception as e:
        user_service.log_error(e, context="Make admin")
        raise StoreFailure("Failed to update user: " + str(e))
