"""
Configuration module for SPSMonday.
Handles environment variables and library defaults.
"""

import logging
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    # monday.com API Configuration
    MONDAY_API_KEY: Optional[str] = None
    MONDAY_API_URL: str = "https://api.monday.com/v2"
    MONDAY_API_VERSION: str = "2024-10"

    # Profile storage
    MONDAY_CONFIG_DIR: Path = Path.home() / ".spsmonday"
    MONDAY_PROFILE: Optional[str] = None

    # Request behaviour (no timeout unless set)
    MONDAY_TIMEOUT: Optional[float] = None

    # Pagination Settings
    MONDAY_PAGE_SIZE: int = 100

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach the standard SPSMonday log format to the root logger."""
    level = level or get_settings().LOG_LEVEL
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
