"""Tier-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .comment import CommentResponse
from .user import UserResponse


class TierBase(BaseModel):
    """Fields shared by tier creation and responses."""

    platform: str = Field(..., min_length=1, max_length=100, description="e.g. Railway, Koyeb")
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    is_public: bool = True
    cpu_limit: str = Field("", max_length=50)
    memory_limit: str = Field("", max_length=50)
    storage_limit: str = Field("", max_length=50)
    bandwidth_limit: str = Field("", max_length=50)
    monthly_hours: str = Field("", max_length=50)
    url: str = Field("", max_length=500)


class TierCreate(TierBase):
    """Schema for submitting a new tier."""


class TierUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    platform: str | None = Field(None, min_length=1, max_length=100)
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    is_public: bool | None = None
    cpu_limit: str | None = Field(None, max_length=50)
    memory_limit: str | None = Field(None, max_length=50)
    storage_limit: str | None = Field(None, max_length=50)
    bandwidth_limit: str | None = Field(None, max_length=50)
    monthly_hours: str | None = Field(None, max_length=50)
    url: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "TierUpdate":
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class TierResponse(TierBase):
    """Tier as returned by the API, including its counters."""

    id: int
    user_id: int
    upvote_count: int
    downvote_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime
    owner: UserResponse

    model_config = ConfigDict(from_attributes=True)


class TierDetailResponse(TierResponse):
    """Single tier with its live comments."""

    comments: list[CommentResponse] = Field(default_factory=list)


class TierPage(BaseModel):
    """One page of tier listings."""

    data: list[TierResponse]
    page: int
    page_size: int
