"""
User management service.

This module provides functionality for:
- User registration
- Admin status of the current user
- Promotion of users to admin
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from carshop.auth.models import USERS_COLLECTION, Role, normalize_email
from carshop.database.store import Collection
from carshop.exceptions import Conflict


# Pydantic models for request validation
class UserCreate(BaseModel):
    """Model for user registration."""
    name: str
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


class UserOut(BaseModel):
    """Model for user information returned to clients."""
    id: str
    name: str
    email: str
    role: Role = Role.USER


class MakeAdminRequest(BaseModel):
    """Model for promoting a user to admin."""
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


class AdminStatus(BaseModel):
    """Whether the current caller is an admin."""
    admin: bool


class UserService:
    """
    Service for user management operations.
    """
    @staticmethod
    async def register_user(user_data: UserCreate, users: Collection) -> UserOut:
        """
        Register a new user with the default role.

        Args:
            user_data: User registration data
            users: Users collection

        Returns:
            Created user information

        Raises:
            Conflict: If the email is already registered
        """
        existing_user = await users.find_one({"email": user_data.email})
        if existing_user is not None:
            raise Conflict("Email already registered")

        document = {**user_data.model_dump(), "role": Role.USER.value}
        try:
            # the unique key catches registrations racing past the check above
            user_id = await users.insert_one(document, unique_key=document["email"])
        except Conflict:
            raise Conflict("Email already registered")
        return UserOut(id=user_id, **document)

    @staticmethod
    async def make_admin(email: str, users: Collection) -> Optional[UserOut]:
        """
        Give the user registered under ``email`` the admin role.

        Returns:
            Updated user information or None if not found
        """
        document = await users.find_one_and_update(
            {"email": normalize_email(email)}, {"role": Role.ADMIN.value}
        )
        if document is None:
            return None
        return UserOut.model_validate(document)
