"""Application settings loaded from the environment (and `.env`)."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "text"]


class Settings(BaseSettings):
    """
    Service settings.

    Every field maps to the upper-cased environment variable of the same
    name, e.g. `rate_limit_max_requests` <- RATE_LIMIT_MAX_REQUESTS.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Stockscore API"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Expose docs and internal error messages")
    environment: str = Field(default="production", description="Deployment label for logs")

    # Comma-separated in the environment; credentials are allowed so no wildcards
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    # Perplexity (OpenAI-compatible chat completions)
    perplexity_api_key: str = Field(default="", description="Empty disables upstream calls")
    perplexity_model: str = "sonar-pro"
    perplexity_base_url: str = "https://api.perplexity.ai"
    external_api_timeout: int = Field(
        default=30, ge=5, le=120, description="Upstream request timeout in seconds"
    )

    # Fixed-window rate limiting per client address
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = Field(default=30, ge=1)
    rate_limit_window_ms: int = Field(default=60_000, ge=1000)

    # Response cache TTLs in seconds, per data area
    cache_ttl_overview: int = Field(default=300, ge=1)
    cache_ttl_financials: int = Field(default=3600, ge=1)
    cache_ttl_historical: int = Field(default=300, ge=1)
    cache_ttl_ai_score: int = Field(default=1800, ge=1)
    cache_ttl_search: int = Field(default=60, ge=1)
    cache_max_entries: int = Field(default=1000, ge=1)

    log_level: LogLevel = "INFO"
    log_format: LogFormat = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("perplexity_api_key", mode="before")
    @classmethod
    def strip_api_key(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_format", mode="before")
    @classmethod
    def lower_log_format(cls, v):
        return v.lower() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()


settings = get_settings()
