"""Registry of component definitions."""

from __future__ import annotations

import logging
from collections import Counter

from pydantic import Field

from ixp_core.schemas import CamelModel, ComponentDefinition
from ixp_core.units import format_size, parse_duration_ms, parse_size

from ..config import settings
from .base import DefinitionRegistry

logger = logging.getLogger(__name__)


class ComponentRegistryStats(CamelModel):
    total: int
    by_framework: dict[str, int] = Field(default_factory=dict)
    deprecated: int
    sandboxed: int
    average_bundle_size: str


class ComponentRegistry(DefinitionRegistry[ComponentDefinition]):
    """Components keyed by name, loaded from ``{"components": {...}}``."""

    model = ComponentDefinition
    kind = "component"
    container_key = "components"

    def _check(self, definition: ComponentDefinition) -> None:
        # Budget overruns are reported, never rejected.
        perf = definition.performance
        if perf is not None:
            gzipped = perf.gzipped_bytes
            if gzipped is not None and gzipped > parse_size(settings.max_bundle_size):
                logger.warning(
                    "Component %r gzipped bundle %s exceeds budget %s",
                    definition.name,
                    perf.bundle_size_gzipped,
                    settings.max_bundle_size,
                )
            tti = perf.tti_ms
            if tti is not None and tti > parse_duration_ms(
                settings.max_time_to_interactive
            ):
                logger.warning(
                    "Component %r time to interactive %s exceeds budget %s",
                    definition.name,
                    perf.time_to_interactive,
                    settings.max_time_to_interactive,
                )
        size = definition.bundle_bytes
        policy = definition.security_policy
        if size is not None and size > policy.max_bundle_bytes:
            logger.warning(
                "Component %r bundle %s exceeds its maxBundleSize %s",
                definition.name,
                definition.bundle_size,
                policy.max_bundle_size,
            )

    def find_by_criteria(
        self,
        *,
        framework: str | None = None,
        deprecated: bool | None = None,
        sandboxed: bool | None = None,
    ) -> list[ComponentDefinition]:
        return [
            component
            for component in self.get_all()
            if (framework is None or component.framework == framework)
            and (deprecated is None or component.deprecated == deprecated)
            and (
                sandboxed is None
                or component.security_policy.sandboxed == sandboxed
            )
        ]

    def is_origin_allowed(self, name: str, origin: str) -> bool:
        """True if *origin* may embed component *name* (exact match or ``*``)."""
        component = self.get(name)
        if component is None:
            return False
        return "*" in component.allowed_origins or origin in component.allowed_origins

    def get_stats(self) -> ComponentRegistryStats:
        components = self.get_all()
        sizes = [c.bundle_bytes for c in components if c.bundle_bytes is not None]
        average = sum(sizes) / len(sizes) if sizes else 0
        return ComponentRegistryStats(
            total=len(components),
            by_framework=dict(Counter(c.framework for c in components)),
            deprecated=sum(1 for c in components if c.deprecated),
            sandboxed=sum(1 for c in components if c.security_policy.sandboxed),
            average_bundle_size=format_size(average),
        )
