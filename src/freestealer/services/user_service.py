"""CRUD-style helpers for managing users."""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from freestealer.core import security
from freestealer.models.user import User

logger = logging.getLogger(__name__)

__all__ = [
    "DuplicateUserError",
    "GitHubIdentity",
    "create_user",
    "find_login_user",
    "get_user",
    "get_users",
    "upsert_github_user",
]


class DuplicateUserError(Exception):
    """Username or email is already taken by a live account."""


@dataclass(frozen=True)
class GitHubIdentity:
    """Profile fields returned by GitHub after a successful OAuth exchange."""

    github_id: str
    login: str
    name: str | None
    email: str | None
    avatar_url: str | None
    access_token: str
    refresh_token: str | None = None


def _live(db: Session) -> Query[User]:
    return db.query(User).filter(User.deleted_at.is_(None))


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single live user by primary key."""
    return _live(db).filter(User.id == user_id).first()


def get_users(db: Session, skip: int = 0, limit: int = 100) -> Sequence[User]:
    """Return live users with simple offset-based pagination."""
    return _live(db).order_by(User.id).offset(skip).limit(limit).all()


def create_user(
    db: Session,
    *,
    username: str,
    email: str,
    password: str | None = None,
) -> User:
    """Persist a new account, hashing ``password`` when one is given.

    Raises:
        DuplicateUserError: Username or email already belongs to a live user.
    """
    taken = _live(db).filter(or_(User.email == email, User.username == username)).first()
    if taken is not None:
        raise DuplicateUserError("User with this email or username already exists")

    db_user = User(
        username=username,
        email=email,
        password_hash=security.hash_password(password) if password else None,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as err:
        # Lost a race with a concurrent registration for the same name.
        db.rollback()
        raise DuplicateUserError("User with this email or username already exists") from err
    db.refresh(db_user)
    logger.info("User created: user_id=%s username=%s", db_user.id, db_user.username)
    return db_user


# First non-empty identifier wins, in this order.
_LOGIN_LOOKUPS: tuple[tuple[str, Callable[[str], object]], ...] = (
    ("email", lambda value: User.email == value),
    ("username", lambda value: User.username == value),
    ("github_id", lambda value: User.github_id == value),
)


def find_login_user(db: Session, **identifiers: str | None) -> User | None:
    """Resolve the account named by the first non-empty login identifier.

    Raises:
        ValueError: None of ``email``, ``username`` or ``github_id`` was given.
    """
    for field, predicate in _LOGIN_LOOKUPS:
        value = identifiers.get(field)
        if value:
            return _live(db).filter(predicate(value)).first()
    raise ValueError("Email, username, or github_id is required")


def upsert_github_user(db: Session, identity: GitHubIdentity) -> tuple[User, bool]:
    """Create the account for a GitHub identity or refresh its tokens.

    Returns:
        ``(user, created)``.
    """
    user = _live(db).filter(User.github_id == identity.github_id).first()
    created = False
    if user is None:
        user = User(
            username=identity.login or identity.name or f"github-{identity.github_id}",
            email=identity.email or f"{identity.login}@users.noreply.github.com",
            github_id=identity.github_id,
            github_login=identity.login,
            avatar_url=identity.avatar_url,
            access_token=identity.access_token,
            refresh_token=identity.refresh_token,
        )
        db.add(user)
        created = True
    else:
        user.access_token = identity.access_token
        user.refresh_token = identity.refresh_token
        user.avatar_url = identity.avatar_url

    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise DuplicateUserError(
            "A different account already uses this GitHub username or email"
        ) from err
    db.refresh(user)
    logger.info(
        "%s user via GitHub: user_id=%s github_id=%s",
        "Created" if created else "Refreshed",
        user.id,
        identity.github_id,
    )
    return user, created
