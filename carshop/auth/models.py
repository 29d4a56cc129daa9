"""
Authorization models for CarShop.

This module defines:
- Roles and their ordering
- The stored user record as seen by the role resolver
- The authenticated principal handed to route handlers
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

USERS_COLLECTION = "users"


def normalize_email(email: str) -> str:
    """Canonical form of an email address, used wherever emails are stored or compared."""
    return email.strip().lower()


class Role(str, Enum):
    """Coarse permission tier stored on a user record."""
    USER = "user"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]

    def satisfies(self, required: "Role") -> bool:
        """Check if this role is at least as privileged as ``required``."""
        return self.rank >= required.rank


ROLE_RANK = {Role.USER: 0, Role.ADMIN: 1}


class UserRecord(BaseModel):
    """User document as stored in the users collection."""
    id: str
    name: Optional[str] = None
    email: str
    # Accounts created before roles existed carry no role field
    role: Role = Role.USER


class Principal(BaseModel):
    """A verified caller together with their resolved role."""
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
