"""Pydantic schemas module."""
from .auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    OAuthProfile,
)
from .user import (
    Role,
    SortField,
    SortOrder,
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListFilters,
    InactiveUsersEvent,
)
from .common import (
    ErrorResponse,
    SuccessResponse,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "OAuthProfile",
    # User
    "Role",
    "SortField",
    "SortOrder",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListFilters",
    "InactiveUsersEvent",
    # Common
    "ErrorResponse",
    "SuccessResponse",
]
