"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docgap.constants import (
    DEFAULT_STORAGE_BUCKET,
    EMBEDDING_PAGE_DELAY_SECONDS,
    HEALTH_PROBE_CONCURRENCY,
    HEALTH_PROBE_TIMEOUT_SECONDS,
    MAX_CONTINUATION_ATTEMPTS,
    PAGE_FETCH_TIMEOUT_SECONDS,
    RECOMMENDATION_MAX_TOKENS,
    RECOMMENDATION_TEMPERATURE,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase Configuration (object storage for caches and reports)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")
    storage_bucket: str = Field(
        default=DEFAULT_STORAGE_BUCKET,
        description="Storage bucket holding embedding caches, health caches and reports",
    )

    # PydanticAI Gateway Configuration
    pydantic_ai_gateway_api_key: str = Field(
        ..., description="PydanticAI Gateway API key (paig_xxx)"
    )
    default_model: str = Field(
        default="gateway/anthropic:claude-sonnet-4-5",
        description="Model used to write documentation recommendations",
    )
    embedding_model: str = Field(
        default="gateway/openai:text-embedding-3-small",
        description="Embedding model via PAIG (e.g. gateway/openai:text-embedding-3-small)",
    )

    # ==========================================================================
    # Recommendation Generation
    # ==========================================================================

    recommendation_max_tokens: int = Field(
        default=RECOMMENDATION_MAX_TOKENS,
        description="Output token cap for each generation call",
    )
    recommendation_temperature: float = Field(
        default=RECOMMENDATION_TEMPERATURE,
        description="Sampling temperature for recommendations",
    )
    max_continuation_attempts: int = Field(
        default=MAX_CONTINUATION_ATTEMPTS,
        ge=1,
        description="Maximum generation calls when output is truncated",
    )

    # ==========================================================================
    # Timeout / Throttle Configuration
    # ==========================================================================
    # Defaults are sourced from docgap/constants.py.

    page_fetch_timeout_seconds: float = Field(
        default=PAGE_FETCH_TIMEOUT_SECONDS,
        description="HTTP timeout for documentation page and sitemap fetches (seconds)",
    )
    embedding_page_delay_seconds: float = Field(
        default=EMBEDDING_PAGE_DELAY_SECONDS,
        description="Delay between page fetches while building embeddings (seconds)",
    )
    health_probe_timeout_seconds: float = Field(
        default=HEALTH_PROBE_TIMEOUT_SECONDS,
        description="Timeout for a single sitemap URL health probe (seconds)",
    )
    health_probe_concurrency: int = Field(
        default=HEALTH_PROBE_CONCURRENCY,
        ge=1,
        description="Number of sitemap URLs probed concurrently",
    )

    # Page content extraction strategy
    content_extractor: Literal["regex", "soup"] = Field(
        default="regex", description="HTML content extractor implementation"
    )

    # Optional HTTP sink for progress notifications
    progress_webhook_url: str | None = Field(
        default=None, description="URL receiving progress events as JSON POSTs"
    )

    # Environment
    env: Literal["local", "staging", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
