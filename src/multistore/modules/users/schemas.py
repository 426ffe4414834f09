"""Pydantic schemas for user and authentication operations."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from multistore.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_SLUG_LENGTH,
    MIN_PASSWORD_LENGTH,
    MIN_SLUG_LENGTH,
)
from multistore.modules.users.models import Role


# ============================================================
# Password Validation
# ============================================================

# Password complexity rules: (regex pattern, human-readable name)
PASSWORD_COMPLEXITY_RULES: list[tuple[str, str]] = [
    (r"[A-Za-z]", "letter"),
    (r"\d", "digit"),
]


def validate_password_complexity(password: str) -> str:
    """Validate password meets complexity requirements.

    Requirements:
    - At least one letter
    - At least one digit

    Raises:
        ValueError: If password doesn't meet requirements
    """
    missing = [
        name
        for pattern, name in PASSWORD_COMPLEXITY_RULES
        if not re.search(pattern, password)
    ]

    if missing:
        if len(missing) == 1:
            raise ValueError(f"Password must contain at least one {missing[0]}")
        raise ValueError(f"Password must contain at least one: {', '.join(missing)}")

    return password


# ============================================================
# User Schemas
# ============================================================


class UserResponse(BaseModel):
    """Schema for user response data."""

    id: UUID
    email: EmailStr
    full_name: str
    role: Role
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================
# Authentication Schemas
# ============================================================


class LoginRequest(BaseModel):
    """Schema for email/password login.

    ``subdomain`` picks which of the user's stores the handoff URL
    points at; the first owned store is used when omitted.
    """

    email: EmailStr
    password: str
    subdomain: str | None = None


class RegisterRequest(BaseModel):
    """Schema for registration.

    Creates a new user and their first store in one request.
    """

    email: EmailStr
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    full_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    store_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    subdomain: str = Field(..., min_length=MIN_SLUG_LENGTH, max_length=MAX_SLUG_LENGTH)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Validate password complexity."""
        return validate_password_complexity(v)


class StoreSummary(BaseModel):
    """Store the session was issued for."""

    id: UUID
    name: str
    subdomain: str
    custom_domain: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Schema for login and registration responses.

    ``handoff_url`` carries the credential to the store origin in the
    URL fragment (``#token=`` or ``#code=``). It is None when the user
    owns no store yet.
    """

    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration in seconds")
    store: StoreSummary | None = None
    handoff_url: str | None = None


class HandoffRedeemRequest(BaseModel):
    """Schema for redeeming a one-time handoff code."""

    code: str = Field(..., min_length=1)


class HandoffRedeemResponse(BaseModel):
    """Access token released by a handoff code."""

    access_token: str
    token_type: str = "bearer"
    subdomain: str


class MeResponse(BaseModel):
    """Current user with every store they own, active or not."""

    user: UserResponse
    stores: list[StoreSummary]
