"""Configuration settings for the reaction role bot."""

import logging
import sys
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger("config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Discord Bot Configuration
    token: Optional[str] = None
    client_id: Optional[str] = None
    test_guild_id: Optional[int] = None
    prefix: str = "!"
    owner: Optional[int] = None

    # Wizard prompt timeouts
    prompt_timeout_seconds: float = 60
    pair_timeout_seconds: float = 120

    # Health server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_ignore_empty=True, extra="ignore"
    )


def load_settings(**kwargs) -> Settings:
    """Build settings, exiting the process when the bot token is missing."""
    loaded = Settings(**kwargs)

    if not loaded.token:
        # Fatal: bot cannot run without token
        logger.error("[config] ERROR: Missing required environment variable: TOKEN")
        sys.exit(1)

    if not loaded.client_id:
        logger.warning("[config] WARNING: CLIENT_ID is not set. Some API calls may fail.")

    return loaded


# Global settings instance
settings = load_settings()
