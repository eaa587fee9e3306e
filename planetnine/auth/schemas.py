"""Pydantic schemas for authentication."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from planetnine.auth.permissions import UserRole


if TYPE_CHECKING:
    from planetnine.auth.models import User


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class TokenResponse(BaseModel):
    """Access token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Lifetime in seconds")


class UserSummary(BaseModel):
    """Minimal user projection returned by workflows."""

    id: UUID
    email: str
    name: str


class UserResponse(BaseModel):
    """User profile response (also the authenticated principal)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str = ""
    phone: str | None = None
    role: UserRole
    is_active: bool = True
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: "User") -> "UserResponse":
        """Create response from User entity."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            role=UserRole(user.role),
            is_active=user.is_active,
            created_at=user.created_at,
        )
