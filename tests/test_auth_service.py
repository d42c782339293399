"""Tests for the authentication service."""
import pytest
from sqlalchemy import func, select
from structlog.testing import capture_logs

from usermanager.config.settings import SeedSettings
from usermanager.core.exceptions import AuthenticationError, ConflictError, ValidationError
from usermanager.models.user import User
from usermanager.schemas.auth import OAuthProfile
from usermanager.services.seed import seed_admin


async def _count_users(session) -> int:
    return await session.scalar(select(func.count(User.id)))


async def test_register_creates_plain_user(auth_service, user_service, token_service, hasher):
    response = await auth_service.register("A", "a@example.com", "secret1")

    payload = token_service.verify(response.access_token)
    assert payload["email"] == "a@example.com"
    assert payload["role"] == "user"

    stored = await user_service.get_by_email("a@example.com")
    assert payload["sub"] == str(stored.id)
    assert stored.role == "user"
    assert stored.password != "secret1"
    assert hasher.verify_password("secret1", stored.password)
    assert stored.last_login is None


async def test_register_duplicate_email(auth_service, async_session, test_user):
    before = await _count_users(async_session)

    with pytest.raises(ConflictError, match="User already exists"):
        await auth_service.register("Other", test_user.email, "password123")

    assert await _count_users(async_session) == before


async def test_login_success_updates_last_login(auth_service, user_service, token_service, test_user):
    first = await auth_service.login("test@example.com", "testpassword123")
    first_login = (await user_service.get_by_email("test@example.com")).last_login
    assert first_login is not None

    second = await auth_service.login("test@example.com", "testpassword123")
    stored = await user_service.get_by_email("test@example.com")
    assert stored.last_login >= first_login

    for response in (first, second):
        payload = token_service.verify(response.access_token)
        assert payload["role"] == stored.role
        assert payload["sub"] == str(stored.id)


async def test_login_wrong_password(auth_service, user_service, test_user):
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        await auth_service.login("test@example.com", "wrongpassword")

    stored = await user_service.get_by_email("test@example.com")
    assert stored.last_login is None


async def test_login_unknown_email(auth_service):
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        await auth_service.login("nobody@example.com", "whatever")


async def test_login_account_without_password(auth_service, repository):
    await repository.create(name="OAuth Only", email="oauth@example.com", role="user")

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        await auth_service.login("oauth@example.com", "anything")


async def test_login_token_reflects_current_role(auth_service, repository, token_service, test_user):
    await repository.update(test_user, {"role": "admin"})

    response = await auth_service.login("test@example.com", "testpassword123")

    assert token_service.verify(response.access_token)["role"] == "admin"


async def test_oauth_login_creates_account(auth_service, user_service, token_service):
    profile = OAuthProfile(email="new@example.com", display_name="New Person")

    response = await auth_service.login_with_oauth_profile(profile)

    stored = await user_service.get_by_email("new@example.com")
    assert stored.name == "New Person"
    assert stored.role == "user"
    assert stored.password is None
    assert stored.last_login is not None
    assert token_service.verify(response.access_token)["sub"] == str(stored.id)


async def test_oauth_login_reuses_account(auth_service, user_service, async_session, test_user):
    before = await _count_users(async_session)
    profile = OAuthProfile(email="test@example.com", display_name="Someone Else")

    await auth_service.login_with_oauth_profile(profile)
    await auth_service.login_with_oauth_profile(profile)

    assert await _count_users(async_session) == before
    stored = await user_service.get_by_email("test@example.com")
    assert stored.name == "Test User"
    assert stored.last_login is not None
    # An existing password is left alone
    assert stored.password


async def test_oauth_login_without_display_name(auth_service, user_service):
    await auth_service.login_with_oauth_profile(OAuthProfile(email="anon@example.com"))

    stored = await user_service.get_by_email("anon@example.com")
    assert stored.name == "Unknown"


async def test_resolve_identity_returns_current_record(auth_service, repository, token_service, test_user):
    response = await auth_service.login("test@example.com", "testpassword123")
    payload = token_service.verify(response.access_token)

    await repository.update(test_user, {"role": "admin"})
    identity = await auth_service.resolve_identity(payload)

    assert identity.id == test_user.id
    assert identity.role == "admin"


async def test_resolve_identity_for_deleted_user(auth_service, user_service, token_service, test_user):
    response = await auth_service.login("test@example.com", "testpassword123")
    payload = token_service.verify(response.access_token)

    await user_service.remove(test_user.id)

    with pytest.raises(AuthenticationError, match="Invalid token"):
        await auth_service.resolve_identity(payload)


async def test_resolve_identity_without_email(auth_service):
    with pytest.raises(AuthenticationError):
        await auth_service.resolve_identity({"sub": "1"})


async def test_seed_admin_is_idempotent(user_service, async_session):
    config = SeedSettings(
        enabled=True,
        admin_email="root@example.com",
        admin_password="rootpass123",
        admin_name="Root",
    )

    assert await seed_admin(user_service, config) is True
    assert await seed_admin(user_service, config) is False

    stored = await user_service.get_by_email("root@example.com")
    assert stored.role == "admin"
    assert await _count_users(async_session) == 1


async def test_seed_admin_disabled(user_service, async_session):
    config = SeedSettings(enabled=False)

    assert await seed_admin(user_service, config) is False
    assert await _count_users(async_session) == 0


async def test_register_email_with_entity_characters(auth_service, user_service, token_service):
    response = await auth_service.register("Amp", "a&b@example.com", "secret1")

    payload = token_service.verify(response.access_token)
    stored = await user_service.get_by_email("a&b@example.com")
    assert stored is not None
    assert payload["sub"] == str(stored.id)
    assert payload["email"] == "a&b@example.com"

    login = await auth_service.login("a&b@example.com", "secret1")
    assert token_service.verify(login.access_token)["sub"] == str(stored.id)


async def test_oauth_login_email_with_entity_characters(auth_service, user_service, token_service):
    profile = OAuthProfile(email="a&lt@example.com", display_name="Lt")

    response = await auth_service.login_with_oauth_profile(profile)

    stored = await user_service.get_by_email("a&lt@example.com")
    assert token_service.verify(response.access_token)["sub"] == str(stored.id)


async def test_register_overlong_password(auth_service, async_session):
    with pytest.raises(ValidationError):
        await auth_service.register("A", "long@example.com", "p" * 100)

    assert await _count_users(async_session) == 0


async def test_seed_admin_logs_outcome(user_service):
    config = SeedSettings(enabled=True, admin_email="root@example.com", admin_password="rootpass123")

    with capture_logs() as logs:
        await seed_admin(user_service, config)
        await seed_admin(user_service, config)

    seeded = [entry for entry in logs if entry.get("event_type") == "admin_seeded"]
    assert [entry["created"] for entry in seeded] == [True, False]
