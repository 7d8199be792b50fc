import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so the token secrets can be
    provided from `backend/.env` (convenience). **SECRET_KEY and
    REFRESH_TOKEN_SECRET remain required** and must be set in production via
    environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI (so tests
    that validate missing secrets continue to fail fast).
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/civiclens.db"

    # Token settings
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="Access token signing secret - must be set via SECRET_KEY environment variable",
    )
    REFRESH_TOKEN_SECRET: str = Field(
        ...,  # Required, no default
        description="Refresh token signing secret - must be set via REFRESH_TOKEN_SECRET",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    TOKEN_CLOCK_TOLERANCE_SECONDS: int = Field(
        default=30,
        description="Leeway applied to exp/iat checks to absorb clock skew",
    )
    REFRESH_COOKIE_NAME: str = "refreshToken"

    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Optional admin account seeded by init_db.py
    ADMIN_EMAIL: str = Field(
        default="",
        description="Admin email used by init_db.py (skipped when empty)",
    )
    ADMIN_PASSWORD: str = Field(
        default="",
        description="Admin password used by init_db.py (skipped when empty)",
    )

    # Store connection lifecycle
    DB_CONNECT_RETRIES: int = Field(
        default=5,
        description="Connection attempts made at startup before giving up",
    )
    DB_CONNECT_BACKOFF_SECONDS: float = Field(
        default=2.0,
        description="Seconds to wait between startup connection attempts",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    # Safety: avoid creating DB schema automatically unless explicitly enabled.
    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Uploads
    UPLOAD_DIR: str = Field(
        default="uploads",
        description="Directory where post images and avatars are stored",
    )
    MAX_UPLOAD_SIZE_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted size for an uploaded image",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Apply per-IP rate limits on auth endpoints",
    )

    # Search configuration
    SEARCH_FAN_OUT_WORKERS: int = Field(
        default=4,
        description="Thread pool size used to run category searches concurrently",
    )

    # Development helpers
    ENABLE_TEST_NOTIFICATIONS: bool = Field(
        default=True,
        description="Expose POST /notifications/test (disable in production)",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Rely on pydantic BaseSettings to load `.env` and validate required fields.
# Instantiating Settings() raises pydantic.ValidationError if a token secret isn't set.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
