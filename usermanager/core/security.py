"""Request-scoped wiring: services, the current identity and role guards.

Process-wide collaborators (cache, event bus, hasher, token service, OAuth
client) are created once in the application lifespan and kept on
`app.state`; the providers below hand them to per-request services.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import UserRepository, get_db
from ..models.user import User
from ..services.auth import AuthService
from ..services.oauth import GoogleOAuthClient
from ..services.users import UserService
from .auth import TokenService
from .exceptions import AuthenticationError
from .policy import Capability, authorize

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_user_service(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> UserService:
    """User service bound to this request's session."""
    state = request.app.state
    return UserService(
        repository=UserRepository(db),
        cache=state.cache,
        events=state.event_bus,
        hasher=state.hasher,
        cache_ttl=settings.cache.ttl_seconds,
        inactive_after_days=settings.notifications.inactive_after_days,
    )


async def get_auth_service(
    request: Request,
    users: UserService = Depends(get_user_service)
) -> AuthService:
    """Auth service bound to this request's session."""
    state = request.app.state
    return AuthService(users=users, hasher=state.hasher, tokens=state.tokens)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_oauth_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.oauth_client


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Get current authenticated user."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = tokens.verify(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid token")

    return await auth_service.resolve_identity(payload)


class CapabilityChecker:
    """Route guard that runs the authorization policy for a capability."""

    def __init__(self, capability: Capability):
        self.capability = capability

    async def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        authorize(self.capability, current_user)
        return current_user


# Admin-only route guards
can_create_users = CapabilityChecker(Capability.CREATE_USER)
can_list_users = CapabilityChecker(Capability.LIST_USERS)
can_delete_users = CapabilityChecker(Capability.DELETE_USER)
can_list_inactive = CapabilityChecker(Capability.LIST_INACTIVE)
