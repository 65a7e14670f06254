"""Configuration management using Pydantic v2 settings.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="BOSHEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Boshen Prediction Lines", description="Application name")
    environment: str = Field(
        default="development", description="Environment (development, test, production)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    # Calculation
    default_strategy: str = Field(
        default="boshen", description="Line strategy: 'boshen' or 'fibonacci'"
    )
    nearby_tolerance_percent: float = Field(
        default=0.1,
        description="Default percentage distance for matching lines near a price",
    )

    # Cache
    cache_max_size: int = Field(
        default=1024, ge=1, description="Maximum number of intervals kept in the line cache"
    )
    cache_key_precision: int = Field(
        default=6, ge=0, description="Decimal places used to quantize cache keys"
    )
    cache_ttl_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional time-to-live for cached entries (None keeps entries until evicted)",
    )

    # Batch
    batch_concurrency: int = Field(
        default=8, ge=1, description="Number of intervals resolved concurrently in a batch"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Engine settings
    """
    return Settings()
