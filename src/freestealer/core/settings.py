"""Application settings and configuration.

This module defines all configuration options for the Freestealer API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SESSION_SECRET = "default-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Freestealer API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./freestealer.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Session and JWT authentication
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET, alias="SESSION_SECRET")
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_issuer: str = Field(default="freestealer", alias="JWT_ISSUER")
    access_token_expire_minutes: int = Field(default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="REFRESH_TOKEN_EXPIRE_MINUTES",
    )
    session_cookie_name: str = Field(default="auth-session", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")

    # GitHub OAuth
    github_client_id: str | None = Field(default=None, alias="GITHUB_CLIENT_ID")
    github_client_secret: str | None = Field(default=None, alias="GITHUB_CLIENT_SECRET")
    github_callback_url: str = Field(
        default="http://localhost:5050/api/v1/auth/github/callback",
        alias="GITHUB_CALLBACK_URL",
    )
    github_authorize_url: str = Field(
        default="https://github.com/login/oauth/authorize",
        alias="GITHUB_AUTHORIZE_URL",
    )
    github_token_url: str = Field(
        default="https://github.com/login/oauth/access_token",
        alias="GITHUB_TOKEN_URL",
    )
    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    github_http_timeout_seconds: float = Field(default=10.0, alias="GITHUB_HTTP_TIMEOUT_SECONDS")

    # Vote/comment counter maintenance
    cascade_on_delete: bool = Field(default=False, alias="CASCADE_ON_DELETE")
    vote_conflict_retries: int = Field(default=1, ge=0, alias="VOTE_CONFLICT_RETRIES")

    # Listing
    tiers_page_size: int = Field(default=20, ge=1, alias="TIERS_PAGE_SIZE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_jwt_secret(self) -> str:
        """Return the secret used to sign JWTs.

        Falls back to the session secret when no dedicated JWT secret is set.
        """
        return self.jwt_secret or self.session_secret

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def github_oauth_configured(self) -> bool:
        """Return True when GitHub OAuth credentials are present."""
        return bool(self.github_client_id and self.github_client_secret)


settings = Settings()
