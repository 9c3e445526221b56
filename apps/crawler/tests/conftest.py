"""Shared fixtures for crawler source tests."""

from __future__ import annotations

from typing import Any

import pytest

ARTICLE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "lastUpdated": {"type": "string"},
        "views": {"type": "integer"},
        "tags": {"type": "array"},
    },
    "required": ["id", "title"],
}


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_items():
    """Factory fixture for raw article items, newest first by day."""

    def _make(prefix: str, count: int, *, day: int = 20) -> list[dict[str, Any]]:
        return [
            {
                "id": f"{prefix}-{i}",
                "title": f"{prefix} article {i}",
                "lastUpdated": f"2024-05-{day - i:02d}T12:00:00Z",
                "views": i * 10,
            }
            for i in range(count)
        ]

    return _make


@pytest.fixture
def make_source():
    """Factory fixture for crawler source mappings backed by a recording handler.

    The handler's received options are appended to ``source["calls"]``.
    """

    def _make(
        name: str,
        items: list[dict[str, Any]] | None = None,
        *,
        has_more: bool = False,
        next_cursor: str | None = None,
        total: int | None = None,
        error: Exception | None = None,
        **config: Any,
    ) -> dict[str, Any]:
        calls: list[Any] = []

        async def handler(options):
            calls.append(options)
            if error is not None:
                raise error
            return {
                "data": list(items or []),
                "pagination": {
                    "nextCursor": next_cursor,
                    "hasMore": has_more,
                    "total": total,
                },
            }

        return {
            "name": name,
            "version": "1.0.0",
            "schema": ARTICLE_SCHEMA,
            "handler": handler,
            "config": config,
            "calls": calls,
        }

    return _make
