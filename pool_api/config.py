"""Configuration management for the pool API service."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pool behaviour (servers, probe timing, thresholds) is configured through
    ``media_pool.config.PoolConfig``; these settings cover the HTTP service.
    """

    # Application
    app_name: str = "Media Server Pool API"
    app_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    debug: bool = False
    environment: str = "production"

    # Security; unset disables bearer auth (local development only)
    api_token: Optional[str] = None

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Server
    host: str = "0.0.0.0"
    port: int = 9002

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
