"""Process settings for pts-cli."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.pts/.env
    """
    if os.path.exists(".env"):
        return ".env"

    user_env = Path.home() / ".pts" / ".env"
    if user_env.exists():
        return str(user_env)

    return None


class Settings(BaseSettings):
    """Application settings loaded from PTS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PTS_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level for diagnostics written to stderr"
    )
    max_workers: int = Field(
        default=8,
        ge=1,
        description="Maximum number of tables enriched concurrently"
    )
    connect_timeout: int = Field(
        default=10,
        ge=1,
        description="Database connect timeout in seconds"
    )


# Global settings instance
settings = Settings()
