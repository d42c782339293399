"""Authentication routes."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from ...schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from ...core.security import get_auth_service, get_oauth_client
from ...services.auth import AuthService
from ...services.oauth import GoogleOAuthClient

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    register_request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new user."""
    return await auth_service.register(
        name=register_request.name,
        email=register_request.email,
        password=register_request.password,
    )


@router.post("/login", response_model=TokenResponse)
async def login_user(
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Login user and return an access token."""
    return await auth_service.login(login_request.email, login_request.password)


@router.get("/google")
async def google_login(
    state: Optional[str] = None,
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client)
):
    """Redirect to Google's consent page."""
    return RedirectResponse(oauth_client.get_authorization_url(state=state))


@router.get("/google/callback", response_model=TokenResponse)
async def google_callback(
    code: str,
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Complete Google sign-in and return an access token."""
    profile = await oauth_client.fetch_profile(code)
    return await auth_service.login_with_oauth_profile(profile)
