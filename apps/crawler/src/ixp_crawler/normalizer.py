"""Turn raw source items into ContentItems and check them against the schema."""

from __future__ import annotations

import math
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic.alias_generators import to_camel

from ixp_core.schemas import ContentItem

if TYPE_CHECKING:
    from ixp_core.schemas import CrawlerSource, ObjectSchema

# Raw keys that would collide with derived ContentItem fields.
_RESERVED_KEYS = frozenset(
    name for field in ContentItem.model_fields for name in (field, to_camel(field))
)


def utc_now_iso() -> str:
    """Current time as ``2024-05-01T12:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string; naive values are read as UTC.

    Returns ``None`` for anything unparseable.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _matches_type(value: Any, expected: str | None) -> bool:
    match expected:
        case "string":
            return isinstance(value, str)
        case "number":
            return (
                isinstance(value, (int, float))
                and not isinstance(value, bool)
                and not (isinstance(value, float) and math.isnan(value))
            )
        case "integer":
            if isinstance(value, bool):
                return False
            return isinstance(value, int) or (
                isinstance(value, float) and value.is_integer()
            )
        case "boolean":
            return isinstance(value, bool)
        case "array":
            return isinstance(value, (list, tuple))
        case "object":
            return isinstance(value, dict)
    return True


def check_items(data: list[dict[str, Any]], schema: ObjectSchema) -> list[str]:
    """Lenient item check: missing required fields and top-level type mismatches.

    ``None`` values are accepted for any declared type.
    """
    problems: list[str] = []
    field_types = schema.field_types()
    for index, item in enumerate(data):
        for name in schema.required:
            if name not in item:
                problems.append(f"Item {index}: missing required field '{name}'")
        for name, expected in field_types.items():
            value = item.get(name)
            if value is not None and not _matches_type(value, expected):
                problems.append(
                    f"Item {index}: field '{name}' expected {expected}, "
                    f"got {type(value).__name__}"
                )
    return problems


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def to_content_item(item: dict[str, Any], source: CrawlerSource) -> ContentItem:
    """Derive the common fields; other raw keys ride along as extras."""
    extras = {k: v for k, v in item.items() if k not in _RESERVED_KEYS}
    item_id = _first(item, "id", "_id")
    url = _first(item, "url", "link")
    return ContentItem.model_validate(
        {
            **extras,
            "type": source.name,
            "id": str(item_id) if item_id is not None else f"{source.name}-{uuid.uuid4()}",
            "title": str(_first(item, "title", "name") or "Untitled"),
            "description": str(_first(item, "description", "summary") or ""),
            "lastUpdated": str(_first(item, "lastUpdated", "updatedAt") or utc_now_iso()),
            "source": source.name,
            "url": str(url) if url is not None else None,
            "metadata": {
                "version": source.version,
                "schema": source.item_schema.to_json(),
            },
        }
    )


def to_content_items(
    data: list[dict[str, Any]], source: CrawlerSource
) -> list[ContentItem]:
    return [to_content_item(item, source) for item in data]
