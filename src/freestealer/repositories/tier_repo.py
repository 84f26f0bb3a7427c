"""Data access helpers for working with tiers."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from freestealer.models.comment import Comment
from freestealer.models.tier import Tier

__all__ = ["SORT_RECENT", "SORT_VOTES", "TierRepository"]

SORT_VOTES = "votes"
SORT_RECENT = "recent"

# Columns a tier owner may edit; counters stay with CounterService.
EDITABLE_FIELDS = frozenset(
    {
        "platform",
        "name",
        "description",
        "is_public",
        "cpu_limit",
        "memory_limit",
        "storage_limit",
        "bandwidth_limit",
        "monthly_hours",
        "url",
    }
)


class TierRepository:
    """Thin wrapper around database access for tier entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_live(self, tier_id: int) -> Tier | None:
        """Return a tier that has not been deleted."""
        return self.session.scalars(
            select(Tier).where(Tier.id == tier_id, Tier.deleted_at.is_(None))
        ).first()

    def get_visible(self, tier_id: int, viewer_id: int) -> Tier | None:
        """Return a live tier if it is public or owned by ``viewer_id``."""
        tier = self.get_live(tier_id)
        if tier is None or (not tier.is_public and tier.user_id != viewer_id):
            return None
        return tier

    def list_tiers(
        self,
        *,
        viewer_id: int,
        page: int,
        page_size: int,
        platform: str | None = None,
        user_id: int | None = None,
        sort: str = SORT_VOTES,
    ) -> list[Tier]:
        """Return one page of tiers visible to ``viewer_id``.

        Without ``user_id`` only public tiers are listed. With ``user_id`` the
        owner's private tiers are included when the viewer is that owner.
        """
        stmt = select(Tier).where(Tier.deleted_at.is_(None))
        if platform:
            stmt = stmt.where(Tier.platform == platform)
        if user_id is None:
            stmt = stmt.where(Tier.is_public.is_(True))
        else:
            stmt = stmt.where(Tier.user_id == user_id)
            if user_id != viewer_id:
                stmt = stmt.where(Tier.is_public.is_(True))

        if sort == SORT_RECENT:
            stmt = stmt.order_by(Tier.created_at.desc(), Tier.id.desc())
        else:
            stmt = stmt.order_by(
                Tier.upvote_count.desc(), Tier.created_at.desc(), Tier.id.desc()
            )

        offset = (page - 1) * page_size
        return list(self.session.scalars(stmt.offset(offset).limit(page_size)))

    def create(self, *, owner_id: int, fields: Mapping[str, Any]) -> Tier:
        """Insert a new tier owned by ``owner_id`` with zeroed counters."""
        tier = Tier(user_id=owner_id, **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
        self.session.add(tier)
        self.session.commit()
        self.session.refresh(tier)
        return tier

    def update(self, tier: Tier, changes: Mapping[str, Any]) -> Tier:
        """Apply a partial update of editable fields."""
        for field, value in changes.items():
            if field in EDITABLE_FIELDS:
                setattr(tier, field, value)
        self.session.commit()
        self.session.refresh(tier)
        return tier

    def live_comments(self, tier_id: int) -> list[Comment]:
        """Return a tier's live comments, newest first."""
        return list(
            self.session.scalars(
                select(Comment)
                .where(Comment.tier_id == tier_id, Comment.deleted_at.is_(None))
                .order_by(Comment.created_at.desc(), Comment.id.desc())
            )
        )
