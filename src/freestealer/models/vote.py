"""Models capturing voting interactions on tiers."""

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from freestealer.db.session import Base
from freestealer.models.mixins import TimestampMixin

VOTE_UP = 1
VOTE_DOWN = -1

_LIVE = text("deleted_at IS NULL")


class Vote(TimestampMixin, Base):
    """Per-user vote on a tier.

    A user holds at most one live vote per tier; repeating the same vote
    removes it and casting the opposite one flips it.
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("vote_type IN (1, -1)", name="ck_votes_vote_type"),
        # Only one live vote per (user, tier); soft-deleted rows are exempt.
        Index("uq_votes_user_tier", "user_id", "tier_id", unique=True,
              sqlite_where=_LIVE, postgresql_where=_LIVE),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    tier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tiers.id"), nullable=False, index=True
    )

    # 1 = upvote, -1 = downvote.
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
