"""User account endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, HTTPException, Query, status

from freestealer.api.v1.dependencies import CurrentUserDep, SessionDep
from freestealer.models import User
from freestealer.schemas.user import UserCreate, UserResponse
from freestealer.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(
    db: SessionDep,
    current_user: CurrentUserDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
) -> Sequence[User]:
    """List live accounts."""
    return user_service.get_users(db, skip=skip, limit=limit)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: SessionDep, current_user: CurrentUserDep) -> User:
    """Create an account without a password."""
    try:
        return user_service.create_user(db, username=payload.username, email=payload.email)
    except user_service.DuplicateUserError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: SessionDep, current_user: CurrentUserDep) -> User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
