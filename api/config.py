"""
Application configuration using Pydantic Settings.

This module manages all configuration from environment variables.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API Configuration
    API_TITLE: str = "Data File Parser API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "REST API for parsing spreadsheet uploads into typed columns"
    API_PREFIX: str = "/api"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    RELOAD: bool = False

    # Upload Configuration
    MAX_FILE_SIZE_MB: int = 100

    # Parser Settings
    SHEET_INDEX: int = 0
    HEADER_ROW_INDEX: int = 0

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "api.log"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Create global settings instance
settings = get_settings()
