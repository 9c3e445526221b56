"""Tests for the per-source TTL cache and its keys."""

from __future__ import annotations

from ixp_core.schemas import ContentRequest
from ixp_crawler import SourceCache, content_key


def test_entries_expire_after_ttl(clock):
    cache = SourceCache(clock)
    cache.set("crawler:news:k", {"data": []}, 10)

    clock.advance(9)
    assert cache.get("crawler:news:k") == {"data": []}
    clock.advance(1)
    assert cache.get("crawler:news:k") is None
    assert len(cache) == 0


def test_purge_only_touches_one_source(clock):
    cache = SourceCache(clock)
    cache.set(content_key("news", ContentRequest()), 1, 60)
    cache.set(content_key("news", ContentRequest(limit=5)), 2, 60)
    cache.set(content_key("news:eu", ContentRequest()), 3, 60)
    cache.set(content_key("blog", ContentRequest()), 4, 60)

    assert cache.purge("news") == 2
    assert len(cache) == 2
    assert cache.get(content_key("news:eu", ContentRequest())) == 3


def test_key_depends_on_request_options():
    base = content_key("news", ContentRequest())
    assert base.startswith("crawler:news:")
    assert content_key("news", ContentRequest()) == base
    assert content_key("news", ContentRequest(cursor="c1")) != base
    assert content_key("news", ContentRequest(limit=10)) != base
    assert content_key("news", ContentRequest(fields=["title"])) != base
    assert content_key("news", ContentRequest(last_updated="2024-01-01T00:00:00")) != base
    assert content_key("blog", ContentRequest()) != base


def test_key_ignores_source_selection():
    assert content_key("news", ContentRequest(source="news")) == content_key(
        "news", ContentRequest(sources=["news", "blog"], include_metadata=True)
    )


def test_writes_sweep_expired_entries_for_other_keys(clock):
    cache = SourceCache(clock)
    for cursor in ("c1", "c2", "c3"):
        cache.set(content_key("news", ContentRequest(cursor=cursor)), cursor, 10)
    clock.advance(10)

    cache.set(content_key("news", ContentRequest(cursor="c4")), "c4", 10)

    assert len(cache) == 1
    assert cache.get(content_key("news", ContentRequest(cursor="c4"))) == "c4"


def test_oldest_entry_is_evicted_at_capacity(clock):
    cache = SourceCache(clock, max_entries=2)
    cache.set("crawler:news:a", 1, 60)
    cache.set("crawler:news:b", 2, 60)
    cache.set("crawler:news:a", 3, 60)
    cache.set("crawler:news:c", 4, 60)

    assert len(cache) == 2
    assert cache.get("crawler:news:b") is None
    assert cache.get("crawler:news:a") == 3
    assert cache.get("crawler:news:c") == 4
