"""Authorization policy for user operations.

Every user operation is gated by a single call to :func:`authorize`. Static
role requirements (admin-only operations) and resource ownership (a user
may read or update their own record) are both decided here, so route guards
and the user service share one source of truth.
"""
from enum import Enum
from typing import Optional, Protocol

from .exceptions import AuthorizationError
from .logging import SecurityLogger


class Capability(str, Enum):
    """Operations a caller may request."""

    CREATE_USER = "users:create"
    LIST_USERS = "users:list"
    READ_USER = "users:read"
    UPDATE_USER = "users:update"
    DELETE_USER = "users:delete"
    LIST_INACTIVE = "users:list_inactive"


class Identity(Protocol):
    """What the policy needs to know about the caller."""

    id: int
    role: str


ADMIN_ROLE = "admin"

ADMIN_ONLY = frozenset({
    Capability.CREATE_USER,
    Capability.LIST_USERS,
    Capability.DELETE_USER,
    Capability.LIST_INACTIVE,
})

OWNER_OR_ADMIN = frozenset({
    Capability.READ_USER,
    Capability.UPDATE_USER,
})

DENIAL_MESSAGES = {
    Capability.READ_USER: "You can only view your own profile",
    Capability.UPDATE_USER: "You can only update your own profile",
}


def is_allowed(
    capability: Capability,
    identity: Identity,
    target_id: Optional[int] = None
) -> bool:
    """Decide whether `identity` may perform `capability` on `target_id`."""
    if identity.role == ADMIN_ROLE:
        return True
    if capability in OWNER_OR_ADMIN:
        return target_id is not None and identity.id == target_id
    # Admin-only and unknown capabilities
    return False


def authorize(
    capability: Capability,
    identity: Identity,
    target_id: Optional[int] = None
) -> None:
    """Raise AuthorizationError unless the policy allows the request."""
    if is_allowed(capability, identity, target_id):
        return

    message = DENIAL_MESSAGES.get(capability, "Admin role required")
    SecurityLogger.log_access_denied(
        capability=capability.value,
        user_id=identity.id,
        target_id=target_id,
        reason=message,
    )
    raise AuthorizationError(message)
