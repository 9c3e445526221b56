"""Registry of intent definitions."""

from __future__ import annotations

from collections import Counter

from pydantic import Field

from ixp_core.schemas import CamelModel, IntentDefinition

from .base import DefinitionRegistry


class IntentRegistryStats(CamelModel):
    total: int
    crawlable: int
    deprecated: int
    by_component: dict[str, int] = Field(default_factory=dict)


class IntentRegistry(DefinitionRegistry[IntentDefinition]):
    """Intents keyed by name, loaded from ``{"intents": [...]}``."""

    model = IntentDefinition
    kind = "intent"
    container_key = "intents"

    def find_by_criteria(
        self,
        *,
        crawlable: bool | None = None,
        deprecated: bool | None = None,
        component: str | None = None,
    ) -> list[IntentDefinition]:
        """Intents matching every criterion given; ``None`` means any."""
        return [
            intent
            for intent in self.get_all()
            if (crawlable is None or intent.crawlable == crawlable)
            and (deprecated is None or intent.deprecated == deprecated)
            and (component is None or intent.component == component)
        ]

    def get_stats(self) -> IntentRegistryStats:
        intents = self.get_all()
        return IntentRegistryStats(
            total=len(intents),
            crawlable=sum(1 for i in intents if i.crawlable),
            deprecated=sum(1 for i in intents if i.deprecated),
            by_component=dict(Counter(i.component for i in intents)),
        )
