"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .comments import router as comments_router
from .tiers import router as tiers_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "comments_router",
    "tiers_router",
    "users_router",
    "votes_router",
]
