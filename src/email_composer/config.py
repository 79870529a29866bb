"""Configuration management for Email Composer.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
The composition core never reads these settings on its own; they are
consulted by the command-line layer only.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the EMAIL_COMPOSER_ prefix (e.g., EMAIL_COMPOSER_LOG_LEVEL).
    """

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_COMPOSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rendering Configuration
    header_fold_width: int = Field(
        default=78,
        ge=0,
        description="Column at which long header lines are folded (0 disables folding)",
    )
    default_sender: str | None = Field(
        default=None,
        description="From address used by the CLI when --from is not given",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
