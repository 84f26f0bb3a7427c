"""Authentication endpoints for the Freestealer API."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from freestealer.api.v1.dependencies import CurrentUserDep, SessionDep
from freestealer.core import security
from freestealer.core.settings import settings
from freestealer.models import User
from freestealer.schemas.common import MessageResponse
from freestealer.schemas.user import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
)
from freestealer.services import user_service
from freestealer.services.github_oauth import GitHubOAuthClient, OAuthError, get_github_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

OAUTH_STATE_COOKIE = "oauth-state"
OAUTH_STATE_MAX_AGE = 10 * 60

GitHubClientDep = Annotated[GitHubOAuthClient | None, Depends(get_github_client)]


def _auth_response(message: str, user: User) -> AuthResponse:
    tokens = security.create_token_pair(user.id, user.username, user.email)
    return AuthResponse(
        message=message,
        user=UserResponse.model_validate(user),
        tokens=TokenPair(**tokens),
    )


def _set_session_cookie(response: Response, user: User) -> None:
    token = security.create_token(
        user.id, "session", {"username": user.username, "email": user.email}
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: SessionDep) -> AuthResponse:
    """Create a password account and return its first token pair."""
    try:
        user = user_service.create_user(
            db,
            username=payload.username,
            email=payload.email,
            password=payload.password,
        )
    except user_service.DuplicateUserError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    return _auth_response("User registered successfully", user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: SessionDep) -> AuthResponse:
    """Log in by email, username or GitHub id plus password."""
    try:
        user = user_service.find_login_user(
            db,
            email=payload.email,
            username=payload.username,
            github_id=payload.github_id,
        )
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    if user is None:
        logger.warning("Login failed: unknown account")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    if not user.has_password:
        # GitHub-only accounts have nothing to check a password against.
        logger.warning("Login refused for password-less account user_id=%s", user.id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="This account signs in with GitHub",
        )
    if not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Password is required"
        )
    if not security.verify_password(payload.password, user.password_hash or ""):
        logger.warning("Login failed: bad password for user_id=%s", user.id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    logger.info("User logged in: user_id=%s", user.id)
    return _auth_response("Login successful", user)


@router.post("/refresh", response_model=TokenPair)
def refresh(payload: RefreshRequest, db: SessionDep) -> TokenPair:
    """Exchange a refresh token for a new token pair."""
    try:
        user_id = security.decode_token(payload.refresh_token, "refresh")
    except security.JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
        ) from err

    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return TokenPair(**security.create_token_pair(user.id, user.username, user.email))


@router.get("/github", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def github_login(client: GitHubClientDep) -> RedirectResponse:
    """Redirect to GitHub's consent page."""
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="GitHub login is not configured",
        )
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(url=client.authorize_url(state))
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/github/callback", response_model=AuthResponse)
async def github_callback(
    request: Request,
    response: Response,
    db: SessionDep,
    client: GitHubClientDep,
    code: str | None = None,
    state: str | None = None,
) -> AuthResponse:
    """Finish the GitHub OAuth flow and sign the user in."""
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="GitHub login is not configured",
        )
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(
        state, expected_state
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth state"
        )

    try:
        identity = await client.authenticate(code)
    except OAuthError as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err)) from err

    try:
        user, created = user_service.upsert_github_user(db, identity)
    except user_service.DuplicateUserError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err

    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    _set_session_cookie(response, user)
    return _auth_response("Account created" if created else "Login successful", user)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.delete_cookie(settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
def read_me(current_user: CurrentUserDep) -> User:
    """Return the authenticated user."""
    return current_user
