"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .common import MessageResponse
from .tier import TierCreate, TierDetailResponse, TierPage, TierResponse, TierUpdate
from .user import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserCreate,
    UserResponse,
)
from .vote import MyVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "MessageResponse",
    "TierCreate", "TierDetailResponse", "TierPage", "TierResponse", "TierUpdate",
    "AuthResponse", "LoginRequest", "RefreshRequest", "RegisterRequest", "TokenPair",
    "UserCreate", "UserResponse",
    "MyVoteResponse", "VoteCreate", "VoteResponse",
]
