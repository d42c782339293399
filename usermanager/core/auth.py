"""Password hashing and access token primitives."""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from .exceptions import ValidationError

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted one-way password hashing with bcrypt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt.

        Passwords longer than bcrypt can use are rejected rather than truncated.
        """
        encoded = password.encode('utf-8')
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                details={"field": "password", "max_bytes": MAX_PASSWORD_BYTES}
            )

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash."""
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError:
            # Not a bcrypt digest
            return False

    async def hash(self, password: str) -> str:
        """Hash off the event loop; bcrypt is CPU bound."""
        return await asyncio.to_thread(self.hash_password, password)

    async def verify(self, plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(
            self.verify_password, plain_password, hashed_password
        )


class TokenService:
    """Signs and validates bearer access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def sign(
        self,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT access token."""
        to_encode = data.copy()

        if expires_delta is None:
            expires_delta = timedelta(minutes=self.access_token_expire_minutes)
        expire = datetime.now(timezone.utc) + expires_delta

        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Verify and decode JWT token.

        Returns None for malformed, expired or foreign-signed tokens and for
        tokens that are not access tokens.
        """
        try:
            payload = jwt.decode(
                token, self.secret_key, algorithms=[self.algorithm]
            )
        except JWTError:
            return None

        if payload.get("type") != "access":
            return None
        return payload
