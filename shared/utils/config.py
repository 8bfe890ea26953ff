"""
Configuration management using pydantic-settings.
Loads configuration from environment variables and .env file.
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Redis Configuration (for distributed caching, loop guard and rate limiting)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None
    REDIS_DB: int = 0
    REDIS_URL: str | None = None  # Optional: full Redis URL overrides individual settings

    @property
    def redis_connection_url(self) -> str:
        """Construct Redis URL from settings."""
        if self.REDIS_URL:
            return self.REDIS_URL

        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Validation cache / loop guard
    CACHE_BACKEND: Literal["memory", "redis", "none"] = "memory"
    CACHE_TTL_SECONDS: int = 3600  # 1 hour
    CACHE_MAX_ENTRIES: int = 10000  # In-process backend only
    LOOP_GUARD_MAX_ATTEMPTS: int = 5
    LOOP_GUARD_TTL_SECONDS: int = 60
    BACKING_STORE_TIMEOUT_MS: int = 50  # Bound on every cache/loop-guard call

    @property
    def backing_store_timeout_seconds(self) -> float:
        """Backing store timeout in seconds."""
        return self.BACKING_STORE_TIMEOUT_MS / 1000.0

    # Validator spec table (defaults to the bundled YAML)
    VALIDATOR_SPEC_PATH: str | None = None

    # Application Configuration
    APP_NAME: str = "Validator Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_TO_FILE: bool = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
