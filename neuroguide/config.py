"""
Centralized Configuration for the NeuroGuide backend.

All environment variables are managed here using Pydantic Settings.
A .env file next to the project root (or in the working directory) is loaded
first, so local development needs no exported variables.

Usage:
    from neuroguide.config import settings

    db_url = settings.database_url
"""

import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_COMPRESSION_LEVEL, DEFAULT_TOKEN_EXPIRE_MINUTES

# Project root first, then the working directory; existing env vars win.
for _env_path in (Path(__file__).resolve().parent.parent / ".env", Path.cwd() / ".env"):
    if _env_path.exists():
        load_dotenv(_env_path, override=False)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Variables are prefixed with NEUROGUIDE_ where applicable.
    See .env.example for all available options.
    """

    # =============================================================================
    # Application Environment
    # =============================================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
        validation_alias="NEUROGUIDE_ENVIRONMENT"
    )

    testing: bool = Field(
        default=False,
        description="Enable testing mode (disables rate limiting)",
        validation_alias="TESTING"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validation_alias="NEUROGUIDE_LOG_LEVEL"
    )

    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:5000",
        description="CORS allowed origins (comma-separated or '*')",
        validation_alias="NEUROGUIDE_ALLOWED_ORIGINS"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to",
        validation_alias="HOST"
    )

    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on",
        validation_alias="PORT"
    )

    request_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-request timeout before a 504 is returned",
        validation_alias="NEUROGUIDE_REQUEST_TIMEOUT_SECONDS"
    )

    # =============================================================================
    # Database
    # =============================================================================

    database_url: str = Field(
        default="sqlite:///./neuroguide.db",
        description="Database connection URL (PostgreSQL or SQLite)",
        validation_alias="DATABASE_URL"
    )

    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement",
        validation_alias="NEUROGUIDE_DATABASE_ECHO"
    )

    # =============================================================================
    # Authentication & Security
    # =============================================================================

    secret_key: str = Field(
        ...,  # Required field
        min_length=8,
        description="Secret key for JWT token signing (generate with: openssl rand -hex 32)",
        validation_alias="NEUROGUIDE_SECRET_KEY"
    )

    token_expire_minutes: int = Field(
        default=DEFAULT_TOKEN_EXPIRE_MINUTES,
        gt=0,
        description="JWT token expiration time in minutes",
        validation_alias="NEUROGUIDE_TOKEN_EXPIRE_MINUTES"
    )

    auth_rate_limit: str = Field(
        default="10/minute",
        description="Rate limit applied to register and login",
        validation_alias="NEUROGUIDE_AUTH_RATE_LIMIT"
    )

    # =============================================================================
    # Storage & Files
    # =============================================================================

    compression_level: int = Field(
        default=DEFAULT_COMPRESSION_LEVEL,
        ge=1,
        le=9,
        description="gzip level used for stored PDFs",
        validation_alias="NEUROGUIDE_COMPRESSION_LEVEL"
    )

    legacy_upload_dir: str = Field(
        default="uploads",
        description="Directory holding PDFs uploaded before inline storage",
        validation_alias="NEUROGUIDE_LEGACY_UPLOAD_DIR"
    )

    static_dir: Optional[str] = Field(
        default=None,
        description="Built frontend to serve at / (unset to serve the API only)",
        validation_alias="NEUROGUIDE_STATIC_DIR"
    )

    # =============================================================================
    # Computed Properties
    # =============================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.testing

    @property
    def cors_origins(self) -> List[str]:
        """Allowed origins as a list; ['*'] allows all."""
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # =============================================================================
    # Pydantic Model Configuration
    # =============================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # =============================================================================
    # Field Validators
    # =============================================================================

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Convert postgres:// to postgresql:// for SQLAlchemy compatibility."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is uppercase and valid."""
        v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is lowercase."""
        return v.lower() if isinstance(v, str) else v


# =============================================================================
# Global Settings Instance
# =============================================================================

try:
    settings = Settings()
except Exception as e:
    if os.getenv("TESTING", "").lower() == "true":
        os.environ.setdefault("NEUROGUIDE_SECRET_KEY", "test-secret-key-for-testing-only")
        settings = Settings()
    else:
        raise RuntimeError(
            f"Failed to load application settings: {e}\n\n"
            "Required environment variables:\n"
            "- NEUROGUIDE_SECRET_KEY (generate with: openssl rand -hex 32)\n\n"
            "See .env.example for all available configuration options."
        ) from e


def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return settings


__all__ = ["settings", "get_settings", "Settings"]
