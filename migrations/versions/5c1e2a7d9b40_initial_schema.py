"""initial schema

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2025-11-02 09:14:52.318406

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a7d9b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE = sa.text("deleted_at IS NULL")
LIVE_GITHUB = sa.text("github_id IS NOT NULL AND deleted_at IS NULL")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _partial_index(name: str, table: str, columns: list[str], where, unique: bool = False) -> None:
    op.create_index(
        name,
        table,
        columns,
        unique=unique,
        sqlite_where=where,
        postgresql_where=where,
    )


def upgrade() -> None:
    """Create users, tiers, votes and comments."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("github_id", sa.String(length=50), nullable=True),
        sa.Column("github_login", sa.String(length=100), nullable=True),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("access_token", sa.String(length=500), nullable=True),
        sa.Column("refresh_token", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])
    _partial_index("uq_users_username", "users", ["username"], LIVE, unique=True)
    _partial_index("uq_users_email", "users", ["email"], LIVE, unique=True)
    _partial_index("uq_users_github_id", "users", ["github_id"], LIVE_GITHUB, unique=True)

    op.create_table(
        "tiers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("platform", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("cpu_limit", sa.String(length=50), nullable=False),
        sa.Column("memory_limit", sa.String(length=50), nullable=False),
        sa.Column("storage_limit", sa.String(length=50), nullable=False),
        sa.Column("bandwidth_limit", sa.String(length=50), nullable=False),
        sa.Column("monthly_hours", sa.String(length=50), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.Column("upvote_count", sa.Integer(), nullable=False),
        sa.Column("downvote_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tiers_user_id", "tiers", ["user_id"])
    op.create_index("ix_tiers_platform", "tiers", ["platform"])
    op.create_index("ix_tiers_is_public", "tiers", ["is_public"])
    op.create_index("ix_tiers_upvote_count", "tiers", ["upvote_count"])
    op.create_index("ix_tiers_deleted_at", "tiers", ["deleted_at"])
    _partial_index("ix_tiers_public_votes", "tiers", ["is_public", "upvote_count"], LIVE)
    _partial_index("ix_tiers_platform_public", "tiers", ["platform", "is_public"], LIVE)

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("tier_id", sa.Integer(), nullable=False),
        sa.Column("vote_type", sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("vote_type IN (1, -1)", name="ck_votes_vote_type"),
        sa.ForeignKeyConstraint(["tier_id"], ["tiers.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_votes_tier_id", "votes", ["tier_id"])
    op.create_index("ix_votes_deleted_at", "votes", ["deleted_at"])
    _partial_index("uq_votes_user_tier", "votes", ["user_id", "tier_id"], LIVE, unique=True)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("tier_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tier_id"], ["tiers.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index("ix_comments_tier_id", "comments", ["tier_id"])
    op.create_index("ix_comments_deleted_at", "comments", ["deleted_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("comments")
    op.drop_table("votes")
    op.drop_table("tiers")
    op.drop_table("users")
