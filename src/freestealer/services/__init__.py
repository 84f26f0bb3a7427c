"""Business logic services for the Freestealer application."""

from .counters import (
    CounterError,
    CounterService,
    InvalidArgumentError,
    NotFoundError,
    StorageFailureError,
    VoteOutcome,
    VoteStatus,
)
from .github_oauth import GitHubOAuthClient, OAuthError
from .user_service import DuplicateUserError

__all__ = [
    "CounterError",
    "CounterService",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageFailureError",
    "VoteOutcome",
    "VoteStatus",
    "GitHubOAuthClient",
    "OAuthError",
    "DuplicateUserError",
]
