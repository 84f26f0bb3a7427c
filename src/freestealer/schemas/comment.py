"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import UserResponse


class CommentCreate(BaseModel):
    """Schema for posting a comment.

    Length is enforced after whitespace is stripped, so it is not checked here.
    """

    tier_id: int
    content: str


class CommentResponse(BaseModel):
    """Comment as returned by the API."""

    id: int
    tier_id: int
    user_id: int
    content: str
    created_at: datetime
    author: UserResponse | None = Field(None, description="Omitted right after creation")

    model_config = ConfigDict(from_attributes=True)
