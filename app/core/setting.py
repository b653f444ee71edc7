"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- The link table lives in a GitHub Gist; GIST_ID may be left empty on first
  start, in which case a new private Gist is created on startup
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]

BASE_DIR = Path(__file__).resolve().parent.parent.parent


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

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Application Configuration
    PORT: int = Field(
        default=5480,
        description="Port the HTTP server listens on"
    )
    APP_DOMAIN: Optional[str] = Field(
        default=None,
        description="Public base URL used to build short URLs (defaults to http://localhost:PORT)"
    )
    ADMIN_KEY: Optional[str] = Field(
        default=None,
        description="Shared secret for /linkdata and /clear-cache; admin endpoints are closed when unset"
    )

    # Remote Store Configuration (GitHub Gist)
    GITHUB_API_URL: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    GITHUB_TOKEN: Optional[str] = Field(
        default=None,
        description="Personal access token with the 'gist' scope"
    )
    GIST_ID: Optional[str] = Field(
        default=None,
        description="Existing Gist holding the link table; created on startup when empty"
    )
    GIST_NAME: str = Field(
        default="links.json",
        description="File name inside the Gist that holds the link table"
    )
    STORE_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for every request to the remote store"
    )

    # Cache Configuration
    HANDLER_CACHE_TTL_SECONDS: int = Field(
        default=300,
        description="TTL of the request-handler link cache"
    )
    STORE_CACHE_TTL_SECONDS: int = Field(
        default=120,
        description="TTL of the store-client link cache"
    )

    # Rate Limit Configuration
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable per-IP fixed-window rate limiting"
    )
    MAX_REQUESTS_PER_HOUR: int = Field(
        default=35,
        description="Requests per hour per IP on read/status endpoints"
    )
    CREATE_LINK_LIMIT: str = Field(
        default="10/15 minutes",
        description="Link creation limit per IP (slowapi limit string)"
    )

    @property
    def domain(self) -> str:
        """Base URL for generated short links, without trailing slash."""
        if self.APP_DOMAIN:
            return self.APP_DOMAIN.rstrip("/")
        return f"http://localhost:{self.PORT}"


settings = Settings()
