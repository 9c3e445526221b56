"""IXP crawler - pluggable content sources aggregated into one feed."""

from ixp_crawler.base import BaseContentSource
from ixp_crawler.cache import SourceCache, content_key
from ixp_crawler.rate_limiter import RateLimiter
from ixp_crawler.registry import CrawlerSourceRegistry, SourceSchemaInfo

__all__ = [
    "BaseContentSource",
    "CrawlerSourceRegistry",
    "RateLimiter",
    "SourceCache",
    "SourceSchemaInfo",
    "content_key",
]
