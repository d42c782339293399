"""Services module."""
from .auth import AuthService
from .notifications import NotificationListener
from .oauth import GoogleOAuthClient
from .seed import seed_admin
from .users import UserService

__all__ = [
    "AuthService",
    "GoogleOAuthClient",
    "NotificationListener",
    "UserService",
    "seed_admin",
]
