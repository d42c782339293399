"""Startup seeding of the administrator account."""
from ..config.settings import SeedSettings
from ..core.logging import BusinessLogger
from ..schemas.user import Role, UserCreate
from .users import UserService

logger = BusinessLogger()


async def seed_admin(users: UserService, config: SeedSettings) -> bool:
    """Create the configured admin unless it already exists.

    Returns True when an account was created.
    """
    if not config.enabled:
        return False

    if await users.get_by_email(config.admin_email) is not None:
        logger.log_admin_seeded(config.admin_email, created=False)
        return False

    await users.create(
        UserCreate(
            name=config.admin_name,
            email=config.admin_email,
            password=config.admin_password,
            role=Role.ADMIN,
        )
    )
    logger.log_admin_seeded(config.admin_email, created=True)
    return True
