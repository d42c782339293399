"""Authentication schemas."""
from typing import Optional

from pydantic import EmailStr, Field

from .common import BaseSchema


class RegisterRequest(BaseSchema):
    """Self-service registration."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="User password")


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., description="User password")


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class OAuthProfile(BaseSchema):
    """Identity returned by an OAuth provider."""

    email: EmailStr = Field(..., description="Verified email from the provider")
    display_name: Optional[str] = Field(None, description="Provider display name")
