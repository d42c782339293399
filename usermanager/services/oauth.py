"""Google OAuth 2.0 authorization-code client."""
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from ..config.settings import GoogleOAuthSettings
from ..core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ExternalServiceError,
)
from ..schemas.auth import OAuthProfile

SCOPES = ["openid", "email", "profile"]


class GoogleOAuthClient:
    """Builds the consent URL and turns a callback code into a profile."""

    def __init__(
        self,
        config: GoogleOAuthSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config
        self._transport = transport

    def _require_credentials(self) -> None:
        if not self.config.client_id or not self.config.client_secret:
            raise ConfigurationError(
                "Google OAuth is not configured (GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET)"
            )

    def get_authorization_url(self, state: Optional[str] = None) -> str:
        """URL of Google's consent page for this application."""
        self._require_credentials()
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.callback_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
        }
        if state:
            params["state"] = state
        return f"{self.config.authorize_url}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        """Exchange an authorization code and read the user's profile."""
        self._require_credentials()

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.timeout_seconds
        ) as client:
            token = await self._exchange_code(client, code)
            userinfo = await self._get_userinfo(client, token["access_token"])

        email = userinfo.get("email")
        if not email:
            raise AuthenticationError("No email found in Google profile")

        return OAuthProfile(email=email, display_name=userinfo.get("name"))

    async def _exchange_code(self, client: httpx.AsyncClient, code: str) -> Dict[str, Any]:
        try:
            response = await client.post(
                self.config.token_url,
                data={
                    "code": code,
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "redirect_uri": self.config.callback_url,
                    "grant_type": "authorization_code",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (400, 401):
                raise AuthenticationError("Invalid authorization code")
            raise ExternalServiceError(
                "Google token exchange failed",
                details={"status_code": e.response.status_code}
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Google token exchange failed: {e}")

        token = response.json()
        if "access_token" not in token:
            raise ExternalServiceError("Google token response missing access_token")
        return token

    async def _get_userinfo(self, client: httpx.AsyncClient, access_token: str) -> Dict[str, Any]:
        try:
            response = await client.get(
                self.config.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Google userinfo request failed: {e}")
        return response.json()
