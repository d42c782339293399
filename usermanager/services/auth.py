"""Authentication service: registration, logins and identity resolution."""
from typing import Any, Dict

from ..core.auth import PasswordHasher, TokenService
from ..core.exceptions import AuthenticationError, ConflictError
from ..core.logging import SecurityLogger
from ..models.user import User
from ..schemas.auth import OAuthProfile, TokenResponse
from ..schemas.user import Role, UserCreate
from .users import UserService

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Authentication service."""

    def __init__(
        self,
        users: UserService,
        hasher: PasswordHasher,
        tokens: TokenService
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def create_token_response(self, user: User) -> TokenResponse:
        """Sign a credential asserting the user's current id, email and role."""
        token_data = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
        }
        return TokenResponse(access_token=self.tokens.sign(token_data))

    async def register(self, name: str, email: str, password: str) -> TokenResponse:
        """Create a `user`-role account and sign it in."""
        if await self.users.get_by_email(email) is not None:
            raise ConflictError("User already exists")

        user = await self.users.create_record(
            UserCreate(name=name, email=email, password=password, role=Role.USER)
        )
        return self.create_token_response(user)

    async def login(self, email: str, password: str) -> TokenResponse:
        """Password login. Every failure carries the same message."""
        user = await self.users.get_by_email(email)
        if user is None or not user.password:
            SecurityLogger.log_login_attempt(
                email=email, success=False, failure_reason="unknown account or no password"
            )
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await self.hasher.verify(password, user.password):
            SecurityLogger.log_login_attempt(
                email=email, success=False, failure_reason="password mismatch"
            )
            raise AuthenticationError(INVALID_CREDENTIALS)

        await self.users.touch_last_login(user.id)
        SecurityLogger.log_login_attempt(email=email, success=True)
        return self.create_token_response(user)

    async def login_with_oauth_profile(self, profile: OAuthProfile) -> TokenResponse:
        """Sign in with a provider profile, creating the account on first use.

        OAuth-created accounts never get a password.
        """
        user = await self.users.get_by_email(profile.email)
        if user is None:
            user = await self.users.create_record(
                UserCreate(
                    name=profile.display_name or "Unknown",
                    email=profile.email,
                    role=Role.USER,
                )
            )

        await self.users.touch_last_login(user.id)
        SecurityLogger.log_login_attempt(email=profile.email, success=True, method="oauth")
        return self.create_token_response(user)

    async def resolve_identity(self, payload: Dict[str, Any]) -> User:
        """Current user behind a verified token payload.

        The user is looked up again by email, so role changes and deletions
        take effect on the next request.
        """
        email = payload.get("email")
        user = await self.users.get_by_email(email) if email else None
        if user is None:
            raise AuthenticationError("Invalid token")
        return user
