"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- ADMIN_KEY is a SecretStr so it never shows up in reprs or logs
- Defaults to SQLite (file-based) as the key-value store
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )

    # Key-value store
    # For SQLite: sqlite+aiosqlite:///./shortbox.db (default)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./shortbox.db",
        description="Database connection string for the links table"
    )
    CREATE_TABLES: bool = Field(
        default=True,
        description="Create the links table on startup (disable when using alembic)"
    )

    # Application Configuration
    BASE_URL: Optional[str] = Field(
        default=None,
        description="Base URL for generating short URLs (request origin when unset)"
    )

    # Admin authentication
    ADMIN_KEY: Optional[SecretStr] = Field(
        default=None,
        description="Shared bearer secret for admin routes; at least 16 characters or admin is disabled"
    )
    AUTH_REALM: str = Field(
        default="shortbox",
        description="Realm advertised in WWW-Authenticate on 401 responses"
    )

    # Request limits
    MAX_BODY_BYTES: int = Field(
        default=8192,
        gt=0,
        description="Maximum accepted JSON request body size in bytes"
    )
    BATCH_LIMIT: int = Field(
        default=50,
        gt=0,
        description="Maximum number of slugs in one batch lookup"
    )

    # Slug generation
    SHORT_CODE_LENGTH: int = Field(
        default=4,
        ge=2,
        le=30,
        description="Length of generated slugs (grows by one after repeated collisions)"
    )
    MAX_SLUG_RETRIES: int = Field(
        default=8,
        ge=1,
        description="Collision-checked attempts before falling back to a longer slug"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    def admin_secret(self) -> Optional[str]:
        """Plain admin secret, for the comparator only."""
        if self.ADMIN_KEY is None:
            return None
        return self.ADMIN_KEY.get_secret_value()


settings = Settings()
