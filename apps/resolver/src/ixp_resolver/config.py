"""Resolver configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ResolverSettings(BaseSettings):
    """Settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(env_prefix="IXP_", env_file=".env", extra="ignore")

    # Definition files
    intents_path: Path | None = None
    components_path: Path | None = None

    log_level: str = "INFO"

    # Descriptor TTLs in seconds
    base_ttl_seconds: int = 300  # 5 min
    deprecated_ttl_seconds: int = 60  # ceiling for deprecated intents/components
    crawlable_ttl_seconds: int = 600  # floor for crawlable intents
    large_bundle_ttl_seconds: int = 900  # floor for heavy components
    large_bundle_threshold: str = "50KB"

    # Performance budgets (warn only)
    max_bundle_size: str = "200KB"
    max_time_to_interactive: str = "1500ms"

    # Cached render results kept by ComponentRenderer
    render_cache_size: int = 256


settings = ResolverSettings()
