"""SQLAlchemy model for comments left on tiers."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from freestealer.db.session import Base
from freestealer.models.mixins import TimestampMixin
from freestealer.models.user import User

COMMENT_MAX_LENGTH = 100


class Comment(TimestampMixin, Base):
    """Short remark attached to a tier by a user."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    tier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tiers.id"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(String(COMMENT_MAX_LENGTH), nullable=False)

    author: Mapped[User] = relationship("User", lazy="joined", innerjoin=True)
