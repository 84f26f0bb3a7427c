"""SQLAlchemy model for user identities."""

from __future__ import annotations

from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from freestealer.db.session import Base
from freestealer.models.mixins import TimestampMixin

_LIVE = text("deleted_at IS NULL")
_LIVE_GITHUB = text("github_id IS NOT NULL AND deleted_at IS NULL")


class User(TimestampMixin, Base):
    """Account that owns tiers, votes and comments.

    Accounts are created by password registration or on the first GitHub
    login. Uniqueness only applies to live (non soft-deleted) rows, and the
    GitHub id is only unique when present so password-only accounts never
    collide with each other.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("uq_users_username", "username", unique=True,
              sqlite_where=_LIVE, postgresql_where=_LIVE),
        Index("uq_users_email", "email", unique=True,
              sqlite_where=_LIVE, postgresql_where=_LIVE),
        Index("uq_users_github_id", "github_id", unique=True,
              sqlite_where=_LIVE_GITHUB, postgresql_where=_LIVE_GITHUB),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    # bcrypt hash; NULL for accounts created through GitHub.
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    github_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    github_login: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    access_token: Mapped[str | None] = mapped_column(String(500), nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def has_password(self) -> bool:
        """Return True if the account can log in with a password."""
        return bool(self.password_hash)
