"""Vote-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VoteCreate(BaseModel):
    """Schema for casting, switching or withdrawing a vote."""

    tier_id: int
    vote_type: int = Field(..., description="1 for upvote, -1 for downvote")


class VoteResponse(BaseModel):
    """Live vote returned after it is created or switched."""

    id: int
    user_id: int
    tier_id: int
    vote_type: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MyVoteResponse(BaseModel):
    """The caller's current vote on a tier; 0 when there is none."""

    vote_type: int = Field(..., description="1, -1, or 0 for no vote")
