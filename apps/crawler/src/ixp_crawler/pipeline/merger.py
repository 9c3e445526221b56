"""Merge normalized items from several sources into one feed page."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ixp_core.schemas import FeedPagination

from ..normalizer import parse_timestamp

if TYPE_CHECKING:
    from ixp_core.schemas import ContentItem, CrawlerSource

logger = logging.getLogger(__name__)

# Unparseable timestamps sort after every real one.
_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class SourceContribution:
    """What one source added to a feed request."""

    source: str
    items: list[ContentItem] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
    total: int | None = None
    cached: bool = False


def _sort_key(item: ContentItem) -> tuple[bool, datetime]:
    parsed = parse_timestamp(item.last_updated)
    return (parsed is not None, parsed or _OLDEST)


def merge_contributions(
    contributions: list[SourceContribution], limit: int
) -> tuple[list[ContentItem], FeedPagination]:
    """Combine per-source items, newest first, truncated to *limit*.

    * ``has_more`` is set when any source reported more pages or the
      combined items overflowed *limit*.
    * ``total`` sums the totals sources reported; when none did it is the
      number of items returned.
    * ``next_cursor`` is the cursor of the last source that has more.
    """
    merged = [item for c in contributions for item in c.items]
    merged.sort(key=_sort_key, reverse=True)
    contents = merged[:limit]

    next_cursor = None
    for contribution in contributions:
        if contribution.has_more and contribution.next_cursor is not None:
            next_cursor = contribution.next_cursor

    reported = [c.total for c in contributions if c.total is not None]
    pagination = FeedPagination(
        next_cursor=next_cursor,
        has_more=any(c.has_more for c in contributions) or len(merged) > limit,
        total=sum(reported) if reported else len(contents),
    )

    logger.info(
        "Merged %d items from %d sources into %d",
        len(merged),
        len(contributions),
        len(contents),
    )
    return contents, pagination


def combine_schemas(sources: list[CrawlerSource]) -> dict[str, Any]:
    """Union of the sources' item schemas (later sources win per property)."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    for source in sources:
        schema = source.item_schema.to_json()
        properties.update(schema.get("properties") or {})
        for name in schema.get("required") or []:
            if name not in required:
                required.append(name)
    return {"type": "object", "properties": properties, "required": required}
