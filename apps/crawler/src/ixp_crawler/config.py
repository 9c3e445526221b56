"""Crawler configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CrawlerSettings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IXP_CRAWLER_", env_file=".env", extra="ignore"
    )

    # Page sizes when neither the request nor the source sets one
    default_limit: int = 100
    max_source_limit: int = 1000

    # Upper bound on cached source pages across all sources
    cache_max_entries: int = 1024


settings = CrawlerSettings()
