from .base import DefinitionRegistry, DefinitionSource
from .components import ComponentRegistry, ComponentRegistryStats
from .intents import IntentRegistry, IntentRegistryStats

__all__ = [
    "ComponentRegistry",
    "ComponentRegistryStats",
    "DefinitionRegistry",
    "DefinitionSource",
    "IntentRegistry",
    "IntentRegistryStats",
]
