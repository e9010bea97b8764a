"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates TTLs, limits and endpoint templates and provides typed access
to settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All values have defaults tuned against the Hacker News Firebase API.

    Optional:
        HN_API_BASE_URL: Base URL of the remote JSON API
        HN_LISTING_PATH: Path of the top listing endpoint
        HN_ENTITY_PATH: Path template of the entity endpoint ({id} placeholder)
        LISTING_TTL_SECONDS: Cache lifetime of the listing
        ENTITY_TTL_SECONDS: Cache lifetime of one entity
        SWEEP_INTERVAL_SECONDS: Interval of the expired-entry sweeper
        BATCH_CONCURRENCY: Default number of concurrent fetches in a batch
        FETCH_TIMEOUT_SECONDS: Time bound of one remote read
        USER_AGENT: User-Agent header sent upstream
        LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote API
    HN_API_BASE_URL: str = Field(
        default="https://hacker-news.firebaseio.com/v0",
        description="Base URL of the remote read API",
    )
    HN_LISTING_PATH: str = Field(
        default="topstories.json", description="Listing endpoint path"
    )
    HN_ENTITY_PATH: str = Field(
        default="item/{id}.json", description="Entity endpoint path template"
    )
    USER_AGENT: str = Field(
        default="hn-cache/0.1 (+https://github.com/HackerNews/API)",
        description="User-Agent header for upstream requests",
    )

    # Cache lifetimes
    LISTING_TTL_SECONDS: float = Field(
        default=120.0, gt=0.0, description="Listing cache TTL in seconds"
    )
    ENTITY_TTL_SECONDS: float = Field(
        default=600.0, gt=0.0, description="Entity cache TTL in seconds"
    )
    SWEEP_INTERVAL_SECONDS: float = Field(
        default=60.0, gt=0.0, description="Expired-entry sweep interval in seconds"
    )

    # Limits
    BATCH_CONCURRENCY: int = Field(
        default=12, ge=1, le=64, description="Default concurrent fetches per batch"
    )
    FETCH_TIMEOUT_SECONDS: float = Field(
        default=8.0, gt=0.0, description="Time bound of one remote read"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @field_validator("HN_API_BASE_URL")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("HN_API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("HN_LISTING_PATH", "HN_ENTITY_PATH")
    @classmethod
    def strip_leading_slash(cls, v: str) -> str:
        return v.strip().lstrip("/")

    @field_validator("HN_ENTITY_PATH")
    @classmethod
    def validate_entity_path(cls, v: str) -> str:
        """Entity path must carry an {id} placeholder."""
        if "{id}" not in v:
            raise ValueError("HN_ENTITY_PATH must contain an {id} placeholder")
        return v

    @model_validator(mode="after")
    def validate_ttl_ordering(self) -> Settings:
        """Listings change faster than published entities."""
        if self.LISTING_TTL_SECONDS > self.ENTITY_TTL_SECONDS:
            raise ValueError(
                "LISTING_TTL_SECONDS must not exceed ENTITY_TTL_SECONDS"
            )
        return self

    def display(self) -> dict[str, str | int | float]:
        """Return settings as a flat dict for logging."""
        return {
            "HN_API_BASE_URL": self.HN_API_BASE_URL,
            "HN_LISTING_PATH": self.HN_LISTING_PATH,
            "HN_ENTITY_PATH": self.HN_ENTITY_PATH,
            "LISTING_TTL_SECONDS": self.LISTING_TTL_SECONDS,
            "ENTITY_TTL_SECONDS": self.ENTITY_TTL_SECONDS,
            "SWEEP_INTERVAL_SECONDS": self.SWEEP_INTERVAL_SECONDS,
            "BATCH_CONCURRENCY": self.BATCH_CONCURRENCY,
            "FETCH_TIMEOUT_SECONDS": self.FETCH_TIMEOUT_SECONDS,
            "LOG_LEVEL": self.LOG_LEVEL,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
