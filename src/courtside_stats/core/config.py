"""
Configuration management for Courtside Stats.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables,
    e.g. RECENT_GAMES_LIMIT=5 or DATABASE_URL=postgresql://...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "Courtside Stats"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", description="development, staging, production")
    log_level: str = Field(default="INFO", description="Root log level used by the CLI")

    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string",
    )
    neon_database_url: Optional[str] = Field(
        default=None,
        description="Alternative Neon-specific database URL",
    )
    database_pool_size: int = Field(default=10, ge=1, le=50)
    database_min_pool_size: int = Field(default=2, ge=1, le=50)

    @computed_field
    @property
    def db_url(self) -> str:
        """Get the effective database URL."""
        return self.database_url or self.neon_database_url or ""

    # ==========================================================================
    # Stats Presentation
    # ==========================================================================
    recent_games_limit: int = Field(
        default=10,
        ge=1,
        description="Number of most recent finished games listed in team season stats",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
