"""User management routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...core.security import (
    can_create_users,
    can_delete_users,
    can_list_inactive,
    can_list_users,
    get_current_user,
    get_user_service,
)
from ...models.user import User
from ...schemas.common import SuccessResponse
from ...schemas.user import (
    Role,
    SortField,
    SortOrder,
    UserCreate,
    UserListFilters,
    UserResponse,
    UserUpdate,
)
from ...services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_create: UserCreate,
    current_user: User = Depends(can_create_users),
    user_service: UserService = Depends(get_user_service)
):
    """Create a new user (admin only)."""
    return await user_service.create(user_create)


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[Role] = None,
    sort_by: Optional[SortField] = None,
    order: Optional[SortOrder] = None,
    current_user: User = Depends(can_list_users),
    user_service: UserService = Depends(get_user_service)
):
    """List users with optional role filter and ordering (admin only)."""
    filters = UserListFilters(role=role, sort_by=sort_by, order=order)
    return await user_service.list(filters)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Get the authenticated user."""
    return await user_service.get_by_id(current_user.id, current_user)


@router.get("/inactive", response_model=List[UserResponse])
async def list_inactive_users(
    current_user: User = Depends(can_list_inactive),
    user_service: UserService = Depends(get_user_service)
):
    """List users inactive for 30 days or more (admin only)."""
    return await user_service.list_inactive()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Get a user by ID (owner or admin)."""
    return await user_service.get_by_id(user_id, current_user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Update name or password (owner or admin)."""
    return await user_service.update(user_id, user_update, current_user)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    current_user: User = Depends(can_delete_users),
    user_service: UserService = Depends(get_user_service)
):
    """Delete a user (admin only)."""
    await user_service.remove(user_id)
    return SuccessResponse(message="User deleted successfully")
