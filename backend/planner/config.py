"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote store
    database_url: str = "sqlite+aiosqlite:///:memory:"

    # Local cache (in-memory when unset)
    redis_url: str | None = None
    cache_key_prefix: str = "planner"

    # Day limits
    max_days_user: int = 7
    max_days_admin: int = 14
    default_total_days: int = 3

    # Users expected to tick every checklist item
    known_users: list[str] = []

    # Background refresh (seconds)
    trips_refresh_interval_seconds: float = 30.0

    # Cache max ages (seconds)
    settings_cache_max_age_seconds: int = 60
    trips_cache_max_age_seconds: int = 60
    checklist_cache_max_age_seconds: int = 300
    wishlist_cache_max_age_seconds: int = 300


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
