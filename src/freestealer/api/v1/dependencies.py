"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from freestealer.core import security
from freestealer.core.settings import settings
from freestealer.db.session import SessionLocal, get_db
from freestealer.models import User
from freestealer.services import user_service
from freestealer.services.counters import (
    CounterError,
    CounterService,
    InvalidArgumentError,
    NotFoundError,
    StorageFailureError,
)

# Bearer is optional so the session cookie can be tried next.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Resolve the caller from a bearer access token or the session cookie.

    The ``Authorization`` header wins when present; a bad bearer token is
    rejected even if a valid cookie is also sent.

    Raises:
        HTTPException: 401 if no valid credentials are supplied or the user
            no longer exists.
    """
    if credentials is not None:
        token, token_type = credentials.credentials, "access"
    else:
        cookie = request.cookies.get(settings.session_cookie_name)
        if not cookie:
            raise _credentials_error("Not authenticated")
        token, token_type = cookie, "session"

    try:
        user_id = security.decode_token(token, token_type)
    except security.JWTError as err:
        raise _credentials_error() from err

    user = user_service.get_user(db, user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_counter_service() -> CounterService:
    """Return the vote/comment engine bound to the application database."""
    return CounterService(
        SessionLocal,
        cascade_on_delete=settings.cascade_on_delete,
        conflict_retries=settings.vote_conflict_retries,
    )


CounterServiceDep = Annotated[CounterService, Depends(get_counter_service)]


def counter_http_error(err: CounterError) -> HTTPException:
    """Translate an engine error into the matching HTTP error."""
    if isinstance(err, InvalidArgumentError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
    if isinstance(err, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err))
    if isinstance(err, StorageFailureError) and err.conflict:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Conflicting concurrent update, please retry",
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to save changes",
    )
