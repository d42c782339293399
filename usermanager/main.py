"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .core.auth import PasswordHasher, TokenService
from .core.cache import build_cache
from .core.events import USERS_INACTIVE, EventBus
from .core.logging import configure_logging
from .database import UserRepository, close_db, get_session_factory, init_db
from .api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from .api.routes import auth, users
from .services.notifications import NotificationListener
from .services.oauth import GoogleOAuthClient
from .services.seed import seed_admin
from .services.users import UserService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    await init_db()

    state = app.state
    state.cache = build_cache(settings.cache)
    state.event_bus = EventBus(max_pending=settings.notifications.max_pending_events)
    state.hasher = PasswordHasher(rounds=settings.auth.bcrypt_rounds)
    state.tokens = TokenService(
        secret_key=settings.auth.secret_key,
        algorithm=settings.auth.algorithm,
        access_token_expire_minutes=settings.auth.access_token_expire_minutes,
    )
    state.oauth_client = GoogleOAuthClient(settings.google)
    state.notifications = NotificationListener(settings.notifications.file_path)
    state.event_bus.subscribe(USERS_INACTIVE, state.notifications.handle_inactive_users)

    async with get_session_factory()() as session:
        await seed_admin(
            UserService(
                repository=UserRepository(session),
                cache=state.cache,
                events=state.event_bus,
                hasher=state.hasher,
            ),
            settings.seed,
        )

    yield

    # Shutdown
    await state.event_bus.drain()
    await state.cache.close()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")

    # Health check endpoint
    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": settings.api.version}

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "usermanager.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
