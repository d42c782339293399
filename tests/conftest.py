"""Test configuration and fixtures."""
import os

# Must be set before the settings module is imported
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("AUTH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from usermanager.config import settings
from usermanager.core.auth import PasswordHasher, TokenService
from usermanager.core.cache import MemoryCache
from usermanager.core.events import USERS_INACTIVE, EventBus
from usermanager.database.repository import UserRepository
from usermanager.main import app
from usermanager.models.base import Base
from usermanager.schemas.user import Role, UserCreate
from usermanager.services.auth import AuthService
from usermanager.services.users import UserService


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Create async engine for tests."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """Create async session for tests."""
    session_factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service():
    return TokenService(secret_key="test-secret-key", access_token_expire_minutes=5)


@pytest.fixture
def cache():
    return MemoryCache(default_ttl=300)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def published_events(event_bus):
    """Payloads delivered on the inactivity topic."""
    received = []

    async def record(payload):
        received.append(payload)

    event_bus.subscribe(USERS_INACTIVE, record)
    return received


@pytest.fixture
def repository(async_session):
    return UserRepository(async_session)


@pytest.fixture
def user_service(repository, cache, event_bus, hasher):
    return UserService(
        repository=repository,
        cache=cache,
        events=event_bus,
        hasher=hasher,
    )


@pytest.fixture
def auth_service(user_service, hasher, token_service):
    return AuthService(users=user_service, hasher=hasher, tokens=token_service)


@pytest_asyncio.fixture
async def test_user(user_service):
    """Create test user."""
    await user_service.create(
        UserCreate(
            name="Test User",
            email="test@example.com",
            password="testpassword123",
            role=Role.USER,
        )
    )
    return await user_service.get_by_email("test@example.com")


@pytest_asyncio.fixture
async def admin_user(user_service):
    """Create admin user."""
    await user_service.create(
        UserCreate(
            name="Admin User",
            email="admin@example.com",
            password="adminpassword123",
            role=Role.ADMIN,
        )
    )
    return await user_service.get_by_email("admin@example.com")


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Point the application at a throwaway database and notification file."""
    monkeypatch.setattr(settings.database, "url", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setattr(settings.notifications, "file_path", str(tmp_path / "notifications.json"))
    monkeypatch.setattr(settings.cache, "backend", "memory")
    monkeypatch.setattr(settings.auth, "bcrypt_rounds", 4)
    return settings


@pytest.fixture
def client(app_settings):
    """Test client running the full application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client, app_settings):
    """Authorization headers for the seeded admin."""
    response = client.post(
        "/api/v1/auth/login",
        json={
            "email": app_settings.seed.admin_email,
            "password": app_settings.seed.admin_password,
        }
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Authorization headers for a freshly registered user."""
    response = client.post(
        "/api/v1/auth/register",
        json={
            "name": "Test User",
            "email": "test@example.com",
            "password": "testpassword123",
        }
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
