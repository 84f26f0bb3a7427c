"""User and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """Schema for creating a user without credentials."""

    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr


class UserResponse(BaseModel):
    """Public view of an account; tokens and hashes are never exposed."""

    id: int
    username: str
    email: str
    github_login: str | None = None
    avatar_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
    """Schema for password registration."""

    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")


class LoginRequest(BaseModel):
    """Login submission; the first non-empty identifier selects the account."""

    email: str | None = None
    username: str | None = None
    github_id: str | None = None
    password: str | None = None


class RefreshRequest(BaseModel):
    """Schema for exchanging a refresh token."""

    refresh_token: str


class TokenPair(BaseModel):
    """Access/refresh tokens issued after authentication."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(..., description="Token type (always 'bearer')")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class AuthResponse(BaseModel):
    """Response returned after registration or login."""

    message: str
    user: UserResponse
    tokens: TokenPair
