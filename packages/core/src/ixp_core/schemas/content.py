"""Crawler source, request and feed schemas."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)

from .base import CamelModel, DefinitionModel, NonEmptyStr
from .json_schema import ObjectSchema

MAX_REQUEST_LIMIT = 1000


class PaginationConfig(CamelModel):
    default_limit: int | None = Field(default=None, ge=1)
    max_limit: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationConfig:
        if (
            self.default_limit is not None
            and self.max_limit is not None
            and self.default_limit > self.max_limit
        ):
            msg = "Pagination defaultLimit cannot exceed maxLimit"
            raise ValueError(msg)
        return self


class CacheConfig(CamelModel):
    enabled: StrictBool = False
    ttl_seconds: float | None = None

    @model_validator(mode="after")
    def _ttl_when_enabled(self) -> CacheConfig:
        if self.enabled and (self.ttl_seconds is None or self.ttl_seconds <= 0):
            msg = "Cache ttlSeconds must be a positive number when caching is enabled"
            raise ValueError(msg)
        return self


class RateLimitConfig(CamelModel):
    requests: int = Field(ge=1)
    window_ms: int = Field(ge=1000)


class SourceConfig(CamelModel):
    """Per-source pagination, cache and rate-limit policy."""

    enabled: StrictBool = True
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig | None = None
    auth_required: StrictBool = False


class SourceOptions(CamelModel):
    """Options handed to a source handler for one fetch."""

    limit: int
    cursor: str | None = None
    fields: list[str] | None = None
    last_updated: str | None = None


class PagePagination(CamelModel):
    next_cursor: str | None = None
    has_more: bool = False
    total: int | None = None


class SourcePage(CamelModel):
    """One page of raw items returned by a source handler."""

    data: list[dict[str, Any]]
    pagination: PagePagination = Field(default_factory=PagePagination)


SourceHandler = Callable[[SourceOptions], Awaitable[SourcePage | dict[str, Any]]]


class CrawlerSource(DefinitionModel):
    """A pluggable content adapter plus its declared item schema."""

    name: NonEmptyStr
    version: NonEmptyStr
    item_schema: ObjectSchema = Field(alias="schema")
    handler: Callable[..., Any]
    description: str | None = None
    config: SourceConfig = Field(default_factory=SourceConfig)


class ContentRequest(CamelModel):
    """Query for the aggregated crawler feed."""

    source: str | None = None
    sources: list[str] | None = None
    cursor: str | None = None
    limit: int | None = Field(default=None, ge=1, le=MAX_REQUEST_LIMIT)
    fields: list[str] | None = None
    last_updated: str | None = None
    include_metadata: bool = False

    @field_validator("last_updated")
    @classmethod
    def _iso_timestamp(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                datetime.fromisoformat(value)
            except ValueError as exc:
                msg = f"lastUpdated must be an ISO-8601 timestamp, got {value!r}"
                raise ValueError(msg) from exc
        return value


class ContentItem(CamelModel):
    """One normalized item, whatever source it came from."""

    model_config = ConfigDict(extra="allow")

    type: str
    id: str
    title: str
    description: str
    last_updated: str
    source: str
    url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class FeedPagination(CamelModel):
    next_cursor: str | None = None
    has_more: bool = False
    total: int = 0


class FeedMetadata(CamelModel):
    sources: list[str]
    total_sources: int
    combined_schema: dict[str, Any] = Field(alias="schema")


class ContentFeed(CamelModel):
    """Aggregated, sorted and truncated crawler content."""

    contents: list[ContentItem]
    pagination: FeedPagination
    last_updated: str
    metadata: FeedMetadata | None = None


class SourceStats(BaseModel):
    total: int
    enabled: int
    with_auth: int
    with_cache: int
    with_rate_limit: int
