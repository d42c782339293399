"""Tests for the authorization policy."""
from types import SimpleNamespace

import pytest

from usermanager.core.exceptions import AuthorizationError
from usermanager.core.policy import ADMIN_ONLY, Capability, authorize, is_allowed

admin = SimpleNamespace(id=1, role="admin")
member = SimpleNamespace(id=2, role="user")


@pytest.mark.parametrize("capability", sorted(ADMIN_ONLY, key=lambda c: c.value))
def test_admin_only_capabilities(capability):
    assert is_allowed(capability, admin)
    assert not is_allowed(capability, member)
    # Owning the target does not help for admin-only operations
    assert not is_allowed(capability, member, target_id=member.id)


@pytest.mark.parametrize("capability", [Capability.READ_USER, Capability.UPDATE_USER])
def test_owner_or_admin_capabilities(capability):
    assert is_allowed(capability, member, target_id=member.id)
    assert not is_allowed(capability, member, target_id=admin.id)
    assert not is_allowed(capability, member, target_id=None)
    assert is_allowed(capability, admin, target_id=member.id)


def test_authorize_raises_with_capability_message():
    with pytest.raises(AuthorizationError, match="You can only view your own profile"):
        authorize(Capability.READ_USER, member, target_id=admin.id)

    with pytest.raises(AuthorizationError, match="Admin role required") as exc_info:
        authorize(Capability.LIST_USERS, member)
    assert exc_info.value.status_code == 403


def test_authorize_allows_silently():
    assert authorize(Capability.DELETE_USER, admin) is None
