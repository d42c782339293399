"""User management service.

Coordinates authorization, sanitization, list caching and inactivity events
around the user repository. Collaborators are passed in by the caller; the
service itself holds no process-wide state.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..core.auth import PasswordHasher
from ..core.cache import CacheStore
from ..core.events import USERS_INACTIVE, EventBus
from ..core.exceptions import NotFoundError
from ..core.logging import BusinessLogger
from ..core.policy import Capability, Identity, authorize
from ..core.sanitize import strip_markup
from ..database.repository import UserRepository
from ..models.user import User
from ..schemas.user import (
    InactiveUsersEvent,
    UserCreate,
    UserListFilters,
    UserResponse,
    UserUpdate,
)

logger = BusinessLogger()

USERS_LIST_CACHE_PREFIX = "users_list"
INACTIVE_AFTER_DAYS = 30


def sanitize_user(user: User) -> UserResponse:
    """Outward shape of a user with markup stripped from name and email."""
    response = UserResponse.model_validate(user)
    return response.model_copy(update={
        "name": strip_markup(response.name),
        "email": strip_markup(response.email),
    })


def parse_user_id(user_id: Any) -> int:
    """Coerce a path or payload id to int; malformed ids are not found."""
    if isinstance(user_id, bool):
        raise NotFoundError("Invalid user ID")
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise NotFoundError("Invalid user ID")


class UserService:
    """User CRUD with ownership checks and a cached list view."""

    def __init__(
        self,
        repository: UserRepository,
        cache: CacheStore,
        events: EventBus,
        hasher: PasswordHasher,
        cache_ttl: Optional[int] = None,
        inactive_after_days: int = INACTIVE_AFTER_DAYS
    ):
        self.repository = repository
        self.cache = cache
        self.events = events
        self.hasher = hasher
        self.cache_ttl = cache_ttl
        self.inactive_after_days = inactive_after_days

    async def invalidate_list_cache(self) -> None:
        """Drop every cached list variant, filtered or not."""
        await self.cache.delete_prefix(USERS_LIST_CACHE_PREFIX)

    async def create(self, user_create: UserCreate) -> UserResponse:
        """Create a user; duplicate emails raise ConflictError."""
        return sanitize_user(await self.create_record(user_create))

    async def create_record(self, user_create: UserCreate) -> User:
        """Create a user and return the stored record, not the outward shape."""
        password = None
        if user_create.password:
            password = await self.hasher.hash(user_create.password)

        user = await self.repository.create(
            name=strip_markup(user_create.name),
            email=user_create.email,
            password=password,
            role=user_create.role.value,
        )
        await self.invalidate_list_cache()

        logger.log_user_created(user_id=user.id, email=user.email, role=user.role)
        return user

    async def list(self, filters: Optional[UserListFilters] = None) -> List[UserResponse]:
        """List users, served from cache when the same filters were seen."""
        filters = filters or UserListFilters()
        cache_key = filters.cache_key

        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.log_user_list(cache_key=cache_key, cache_hit=True, count=len(cached))
            return [UserResponse.model_validate(item) for item in cached]

        users = await self.repository.find_all_filtered(
            role=filters.role.value if filters.role else None,
            sort_by=filters.sort_by.value if filters.sort_by else None,
            order=filters.order.value if filters.order else None,
        )
        sanitized = [sanitize_user(user) for user in users]
        await self.cache.set(
            cache_key,
            [item.model_dump(mode="json") for item in sanitized],
            ttl=self.cache_ttl,
        )

        logger.log_user_list(cache_key=cache_key, cache_hit=False, count=len(sanitized))
        return sanitized

    async def get_by_id(self, user_id: Any, requester: Identity) -> UserResponse:
        """Fetch one user; callers other than the owner need the admin role."""
        target_id = parse_user_id(user_id)
        authorize(Capability.READ_USER, requester, target_id)

        user = await self.repository.find_by_id(target_id)
        if user is None:
            raise NotFoundError("User not found")
        return sanitize_user(user)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Raw record lookup for authentication. Not for outward responses."""
        return await self.repository.find_by_email(email)

    async def update(
        self,
        user_id: Any,
        user_update: UserUpdate,
        requester: Identity
    ) -> UserResponse:
        """Apply a name and/or password change."""
        target_id = parse_user_id(user_id)
        authorize(Capability.UPDATE_USER, requester, target_id)

        user = await self.repository.find_by_id(target_id)
        if user is None:
            raise NotFoundError("User not found")

        changes: Dict[str, Any] = {}
        if user_update.name is not None:
            changes["name"] = strip_markup(user_update.name)
        if user_update.password is not None:
            changes["password"] = await self.hasher.hash(user_update.password)

        if changes:
            user = await self.repository.update(user, changes)
            await self.invalidate_list_cache()
            logger.log_user_updated(
                user_id=user.id,
                updated_by=requester.id,
                fields=sorted(changes),
            )
        return sanitize_user(user)

    async def remove(self, user_id: Any) -> None:
        """Hard-delete a user."""
        target_id = parse_user_id(user_id)
        user = await self.repository.find_by_id(target_id)
        if user is None:
            raise NotFoundError("User not found")

        email = user.email
        await self.repository.delete(user)
        await self.invalidate_list_cache()
        logger.log_user_deleted(user_id=target_id, email=email)

    async def list_inactive(self) -> List[UserResponse]:
        """Users that never logged in or not within the inactivity window.

        A non-empty result is published once on the event bus. Publishing
        problems are logged and do not affect the result.
        """
        now = datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.inactive_after_days)
        users = await self.repository.find_inactive_since(cutoff)
        sanitized = [sanitize_user(user) for user in users]

        if sanitized:
            logger.log_inactive_users_detected(
                count=len(sanitized),
                threshold_days=self.inactive_after_days,
            )
            event = InactiveUsersEvent(
                users=sanitized,
                threshold_days=self.inactive_after_days,
                detected_at=now,
            )
            try:
                await self.events.publish(USERS_INACTIVE, event)
            except Exception:
                logger.log_event_publish_failed(USERS_INACTIVE)

        return sanitized

    async def touch_last_login(self, user_id: int) -> None:
        """Record a successful authentication."""
        await self.repository.touch_last_login(user_id)
