"""Abstract base class for content sources."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, ClassVar

from ixp_core.schemas import CrawlerSource, SourceConfig

if TYPE_CHECKING:
    from ixp_core.schemas import SourceOptions, SourcePage


class BaseContentSource(abc.ABC):
    """Base class for sources written as classes rather than bare handlers.

    Subclasses declare ``name``, ``version`` and ``schema`` and implement
    :meth:`fetch`; :meth:`to_source` wraps the instance for registration.
    """

    name: ClassVar[str]
    version: ClassVar[str] = "1.0.0"
    description: ClassVar[str | None] = None
    schema: ClassVar[dict[str, Any]]

    def config(self) -> SourceConfig | dict[str, Any]:
        """Pagination, cache and rate-limit policy for this source."""
        return SourceConfig()

    @abc.abstractmethod
    async def fetch(self, options: SourceOptions) -> SourcePage | dict[str, Any]:
        """Return one page of raw items for *options*."""

    def to_source(self) -> CrawlerSource:
        return CrawlerSource.model_validate(
            {
                "name": self.name,
                "version": self.version,
                "description": self.description,
                "schema": self.schema,
                "handler": self.fetch,
                "config": self.config(),
            }
        )
