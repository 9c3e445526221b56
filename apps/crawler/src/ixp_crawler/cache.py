"""Per-source TTL cache for raw source pages."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import TYPE_CHECKING, Any, TypedDict

if TYPE_CHECKING:
    from collections.abc import Callable

    from ixp_core.schemas import ContentRequest

logger = logging.getLogger(__name__)


class CacheEntry(TypedDict):
    """Cached page plus the monotonic time it expires at."""

    data: Any
    expires_at: float


def source_prefix(source: str) -> str:
    return f"crawler:{source}:"


def content_key(source: str, request: ContentRequest) -> str:
    """Build cache key for one source's slice of a content request."""
    payload = json.dumps(
        {
            "cursor": request.cursor,
            "limit": request.limit,
            "fields": request.fields,
            "lastUpdated": request.last_updated,
        },
        sort_keys=True,
    )
    digest = hashlib.md5(payload.encode()).hexdigest()
    return f"{source_prefix(source)}{digest}"


class SourceCache:
    """Dictionary cache whose entries expire after a per-entry TTL.

    Expired entries are swept on every write, and once ``max_entries`` live
    entries are held the oldest written one is evicted.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        *,
        max_entries: int = 1024,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry["expires_at"]:
            del self._entries[key]
            return None
        return entry["data"]

    def set(self, key: str, data: Any, ttl_seconds: float) -> None:
        now = self._clock()
        self._sweep(now)
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted crawler cache entry %s", oldest)
        self._entries[key] = CacheEntry(data=data, expires_at=now + ttl_seconds)

    def _sweep(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now >= e["expires_at"]]
        for key in expired:
            del self._entries[key]

    def purge(self, source: str) -> int:
        """Drop every entry belonging to *source*. Returns the count removed."""
        prefix = source_prefix(source)
        stale = [key for key in self._entries if key.rpartition(":")[0] + ":" == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Crawler source cache cleared")

    def __len__(self) -> int:
        return len(self._entries)
