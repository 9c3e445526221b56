"""Registry of crawler content sources and the aggregated feed."""

from __future__ import annotations

import inspect
import logging
import threading
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from ixp_core.errors import (
    ConfigurationError,
    SourceError,
    ValidationError,
    field_errors_from_pydantic,
)
from ixp_core.schemas import (
    CamelModel,
    ContentFeed,
    ContentRequest,
    CrawlerSource,
    FeedMetadata,
    SourceOptions,
    SourcePage,
    SourceStats,
)

from .base import BaseContentSource
from .cache import SourceCache, content_key
from .config import settings as default_settings
from .normalizer import check_items, to_content_items, utc_now_iso
from .pipeline.merger import SourceContribution, combine_schemas, merge_contributions
from .rate_limiter import RateLimiter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ixp_core.schemas import ContentItem

    from .config import CrawlerSettings

logger = logging.getLogger(__name__)

# Schema mismatches logged per page before the rest are summarised.
_MAX_LOGGED_PROBLEMS = 5

SourceLike = CrawlerSource | BaseContentSource | Mapping[str, Any]


class SourceSchemaInfo(CamelModel):
    item_schema: dict[str, Any] = Field(alias="schema")
    version: str
    required_fields: list[str]
    optional_fields: list[str]
    field_types: dict[str, str | None]


class CrawlerSourceRegistry:
    """Pluggable content sources aggregated into one paginated feed.

    Sources are fetched one after another.  Each one goes through its rate
    limit, then its page cache, then its handler; a failing source is logged
    and left out of the feed instead of failing the request.
    """

    def __init__(
        self,
        sources: Iterable[SourceLike] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        settings: CrawlerSettings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._sources: dict[str, CrawlerSource] = {}
        self._lock = threading.RLock()
        self._cache = SourceCache(clock, max_entries=self.settings.cache_max_entries)
        self._limiter = RateLimiter(clock)
        for source in sources or ():
            self.register(source)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _parse(self, source: SourceLike) -> CrawlerSource:
        if isinstance(source, CrawlerSource):
            parsed = source
        else:
            if isinstance(source, BaseContentSource):
                name = getattr(source, "name", None)
            elif isinstance(source, Mapping):
                name = source.get("name")
            else:
                msg = f"Cannot register {type(source).__name__} as a crawler source"
                raise ConfigurationError(msg)
            try:
                if isinstance(source, BaseContentSource):
                    parsed = source.to_source()
                else:
                    parsed = CrawlerSource.model_validate(source)
            except PydanticValidationError as exc:
                errors = [str(e) for e in field_errors_from_pydantic(exc)]
                label = repr(name) if isinstance(name, str) and name else "(unnamed)"
                msg = f"Invalid crawler source {label}: {'; '.join(errors)}"
                raise ConfigurationError(
                    msg, details={"name": name, "errors": errors}
                ) from exc

        unknown = parsed.item_schema.unrecognized_fields()
        if unknown:
            types = parsed.item_schema.field_types()
            errors = [
                f"schema.properties.{field}: unsupported type {types[field]!r}"
                for field in unknown
            ]
            msg = f"Invalid crawler source {parsed.name!r}: {'; '.join(errors)}"
            raise ConfigurationError(msg, details={"name": parsed.name, "errors": errors})
        return parsed

    def register(self, source: SourceLike) -> CrawlerSource:
        """Validate and add *source*; duplicate names are rejected."""
        parsed = self._parse(source)
        with self._lock:
            if parsed.name in self._sources:
                msg = f"Crawler source {parsed.name!r} is already registered"
                raise ConfigurationError(msg, details={"name": parsed.name})
            self._sources[parsed.name] = parsed
        logger.info("Registered crawler source %r (v%s)", parsed.name, parsed.version)
        return parsed

    def unregister(self, name: str) -> bool:
        """Remove a source along with its cached pages and rate counter."""
        with self._lock:
            if self._sources.pop(name, None) is None:
                return False
            purged = self._cache.purge(name)
            self._limiter.reset(name)
        logger.info("Unregistered crawler source %r (%d cached pages dropped)", name, purged)
        return True

    def validate_configuration(self, source: SourceLike) -> tuple[bool, list[str]]:
        """Check *source* without registering it."""
        try:
            self._parse(source)
        except ConfigurationError as exc:
            return False, list(exc.details.get("errors") or [exc.message])
        return True, []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, name: str) -> CrawlerSource | None:
        with self._lock:
            return self._sources.get(name)

    def get_all(self) -> list[CrawlerSource]:
        with self._lock:
            return list(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def find_by_criteria(
        self, *, enabled: bool | None = None, auth_required: bool | None = None
    ) -> list[CrawlerSource]:
        return [
            source
            for source in self.get_all()
            if (enabled is None or source.config.enabled == enabled)
            and (auth_required is None or source.config.auth_required == auth_required)
        ]

    def get_stats(self) -> SourceStats:
        sources = self.get_all()
        return SourceStats(
            total=len(sources),
            enabled=sum(1 for s in sources if s.config.enabled),
            with_auth=sum(1 for s in sources if s.config.auth_required),
            with_cache=sum(1 for s in sources if s.config.cache.enabled),
            with_rate_limit=sum(1 for s in sources if s.config.rate_limit is not None),
        )

    def get_schema_info(self) -> dict[str, SourceSchemaInfo]:
        info: dict[str, SourceSchemaInfo] = {}
        for source in self.get_all():
            schema = source.item_schema
            declared = list(schema.properties or {})
            info[source.name] = SourceSchemaInfo(
                item_schema=schema.to_json(),
                version=source.version,
                required_fields=list(schema.required),
                optional_fields=[f for f in declared if f not in schema.required],
                field_types=schema.field_types(),
            )
        return info

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    async def get_content(
        self, request: ContentRequest | Mapping[str, Any] | None = None
    ) -> ContentFeed:
        """Fetch, merge and paginate content from the selected sources."""
        request = self._parse_request(request)
        selected = self._select(request)
        limit = request.limit or self.settings.default_limit

        contributions: list[SourceContribution] = []
        for source in selected:
            try:
                contribution = await self._collect(source, request)
            except SourceError:
                logger.exception("Skipping crawler source %r", source.name)
                continue
            if contribution is not None:
                contributions.append(contribution)

        contents, pagination = merge_contributions(contributions, limit)
        metadata = None
        if request.include_metadata:
            metadata = FeedMetadata(
                sources=[c.source for c in contributions],
                total_sources=len(selected),
                combined_schema=combine_schemas(selected),
            )
        return ContentFeed(
            contents=contents,
            pagination=pagination,
            last_updated=utc_now_iso(),
            metadata=metadata,
        )

    @staticmethod
    def _parse_request(
        request: ContentRequest | Mapping[str, Any] | None,
    ) -> ContentRequest:
        if isinstance(request, ContentRequest):
            return request
        try:
            return ContentRequest.model_validate(request or {})
        except PydanticValidationError as exc:
            raise ValidationError(field_errors_from_pydantic(exc)) from exc

    def _select(self, request: ContentRequest) -> list[CrawlerSource]:
        if request.sources:
            names = list(dict.fromkeys(request.sources))
        elif request.source:
            names = [request.source]
        else:
            return [s for s in self.get_all() if s.config.enabled]

        selected = []
        for name in names:
            source = self.get(name)
            if source is None:
                logger.warning("Unknown crawler source %r requested, skipping", name)
                continue
            selected.append(source)
        return selected

    def _source_limit(self, source: CrawlerSource, request: ContentRequest) -> int:
        pagination = source.config.pagination
        wanted = request.limit or pagination.default_limit or self.settings.default_limit
        ceiling = pagination.max_limit or self.settings.max_source_limit
        return min(wanted, ceiling)

    async def _collect(
        self, source: CrawlerSource, request: ContentRequest
    ) -> SourceContribution | None:
        cfg = source.config
        if cfg.rate_limit is not None and not self._limiter.acquire(
            source.name, cfg.rate_limit.requests, cfg.rate_limit.window_ms
        ):
            logger.warning("Rate limit exceeded for crawler source %r, skipping", source.name)
            return None

        key = content_key(source.name, request)
        page: SourcePage | None = None
        cached = False
        if cfg.cache.enabled:
            page = self._cache.get(key)
            if page is not None:
                cached = True
                logger.debug("Cache hit for crawler source %r", source.name)

        if page is None:
            options = SourceOptions(
                limit=self._source_limit(source, request),
                cursor=request.cursor,
                fields=request.fields,
                last_updated=request.last_updated,
            )
            page = await self._fetch(source, options)
            self._warn_on_mismatch(source, page)
            if cfg.cache.enabled and cfg.cache.ttl_seconds:
                self._cache.set(key, page, cfg.cache.ttl_seconds)

        return SourceContribution(
            source=source.name,
            items=self._normalize(source, page),
            has_more=page.pagination.has_more,
            next_cursor=page.pagination.next_cursor,
            total=page.pagination.total,
            cached=cached,
        )

    @staticmethod
    def _normalize(source: CrawlerSource, page: SourcePage) -> list[ContentItem]:
        try:
            return to_content_items(page.data, source)
        except Exception as exc:
            msg = f"cannot normalize items: {exc}"
            raise SourceError(source.name, msg) from exc

    async def _fetch(self, source: CrawlerSource, options: SourceOptions) -> SourcePage:
        try:
            result = source.handler(options)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise SourceError(source.name, str(exc) or type(exc).__name__) from exc

        if isinstance(result, SourcePage):
            return result
        try:
            return SourcePage.model_validate(result)
        except PydanticValidationError as exc:
            summary = "; ".join(str(e) for e in field_errors_from_pydantic(exc))
            raise SourceError(source.name, f"malformed page: {summary}") from exc

    @staticmethod
    def _warn_on_mismatch(source: CrawlerSource, page: SourcePage) -> None:
        problems = check_items(page.data, source.item_schema)
        if not problems:
            return
        shown = "; ".join(problems[:_MAX_LOGGED_PROBLEMS])
        more = len(problems) - _MAX_LOGGED_PROBLEMS
        if more > 0:
            shown += f" (+{more} more)"
        logger.warning(
            "Crawler source %r returned items not matching its schema: %s",
            source.name,
            shown,
        )
