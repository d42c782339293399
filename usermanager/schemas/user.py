"""User schemas."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import EmailStr, Field

from .common import BaseSchema


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class SortField(str, Enum):
    NAME = "name"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class UserCreate(BaseSchema):
    """User creation schema (admin)."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: Optional[str] = Field(None, min_length=6, description="Plain password, hashed before storage")
    role: Role = Field(default=Role.USER, description="User role")


class UserUpdate(BaseSchema):
    """Fields a user may change on their own record.

    Email and role are not updatable through this path.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    password: Optional[str] = Field(None, min_length=6, description="New password")


class UserResponse(BaseSchema):
    """Outward user shape. Never carries the password hash."""

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="User email address")
    role: Role = Field(..., description="User role")
    created_at: datetime = Field(..., description="Account creation time")
    updated_at: datetime = Field(..., description="Account last update time")
    last_login: Optional[datetime] = Field(None, description="Last login time")


class UserListFilters(BaseSchema):
    """Filters for the user list."""

    role: Optional[Role] = None
    sort_by: Optional[SortField] = None
    order: Optional[SortOrder] = None

    @property
    def cache_key(self) -> str:
        role = self.role.value if self.role else "all"
        sort_by = self.sort_by.value if self.sort_by else SortField.NAME.value
        order = self.order.value if self.order else SortOrder.ASC.value
        return f"users_list:{role}:{sort_by}:{order}"


class InactiveUsersEvent(BaseSchema):
    """Payload published when inactive users are found."""

    users: List[UserResponse]
    threshold_days: int
    detected_at: datetime
