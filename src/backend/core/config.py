"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "PolitiRate"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Database - PostgreSQL (hosted)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""  # Required - loaded from environment
    POSTGRES_DB: str = "politirate"
    POSTGRES_SSL: bool = True
    DATABASE_ECHO: bool = False

    # Authentication - tokens are issued by the hosted auth service,
    # this API only verifies them.
    AUTH_JWT_SECRET: str = ""  # Required - loaded from environment
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str = "authenticated"
    AUTH_JWT_ISSUER: str | None = None

    @field_validator("AUTH_JWT_SECRET", "POSTGRES_PASSWORD")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    @property
    def POSTGRES_URL(self) -> str:
        """Construct PostgreSQL connection URL."""
        url = (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )
        return f"{url}?ssl=require" if self.POSTGRES_SSL else url

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_RATINGS_PER_MINUTE: int = 20
    RATE_LIMIT_TICKETS_PER_MINUTE: int = 5
    # limits storage URI, e.g. async+redis://host:6379 to share windows across workers
    RATE_LIMIT_STORAGE_URI: str = "async+memory://"

    # Maintenance jobs (expire polls/notifications, lift expired blocks)
    ENABLE_MAINTENANCE_JOBS: bool = True
    MAINTENANCE_INTERVAL_MINUTES: int = 5


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
