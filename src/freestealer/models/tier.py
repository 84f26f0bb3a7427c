"""SQLAlchemy model for free-tier hosting listings."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from freestealer.db.session import Base
from freestealer.models.mixins import TimestampMixin
from freestealer.models.user import User

_LIVE = text("deleted_at IS NULL")

# Names of the denormalized counter columns, keyed by what they count.
UPVOTE_COUNTER = "upvote_count"
DOWNVOTE_COUNTER = "downvote_count"
COMMENT_COUNTER = "comment_count"


class Tier(TimestampMixin, Base):
    """A hosting platform's free-tier offering submitted by a user.

    The three ``*_count`` columns mirror the number of live child votes and
    comments. They are only ever changed by ``CounterService``.
    """

    __tablename__ = "tiers"
    __table_args__ = (
        Index("ix_tiers_public_votes", "is_public", "upvote_count",
              sqlite_where=_LIVE, postgresql_where=_LIVE),
        Index("ix_tiers_platform_public", "platform", "is_public",
              sqlite_where=_LIVE, postgresql_where=_LIVE),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    # e.g. Railway, Koyeb, Vercel
    platform: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    cpu_limit: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    memory_limit: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    storage_limit: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    bandwidth_limit: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    monthly_hours: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    url: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    downvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    owner: Mapped[User] = relationship("User", lazy="joined", innerjoin=True)
