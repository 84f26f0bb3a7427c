"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    comments_router,
    tiers_router,
    users_router,
    votes_router,
)

__all__ = [
    "auth_router",
    "comments_router",
    "tiers_router",
    "users_router",
    "votes_router",
]
