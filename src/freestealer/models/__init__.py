# src/freestealer/models/__init__.py
"""SQLAlchemy models for the Freestealer application."""

from .comment import Comment
from .tier import Tier
from .user import User
from .vote import Vote

__all__ = [
    "Comment",
    "Tier",
    "User",
    "Vote",
]
