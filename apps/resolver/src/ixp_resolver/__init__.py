"""IXP resolver - definition registries, intent resolution and rendering."""

from ixp_resolver.registry import ComponentRegistry, IntentRegistry
from ixp_resolver.renderer import ComponentRenderer, RenderOptions, RenderResult
from ixp_resolver.resolver import (
    IntentResolver,
    ResolutionStats,
    find_unresolved_components,
)

__all__ = [
    "ComponentRegistry",
    "ComponentRenderer",
    "IntentRegistry",
    "IntentResolver",
    "RenderOptions",
    "RenderResult",
    "ResolutionStats",
    "find_unresolved_components",
]
