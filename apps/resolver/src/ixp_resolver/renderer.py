"""Client-side placeholder rendering with a per-props result cache."""

from __future__ import annotations

import html
import json
import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import TYPE_CHECKING, Any

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from ixp_core.errors import (
    ComponentNotFoundError,
    ValidationError,
    field_errors_from_pydantic,
)
from ixp_core.schemas import CamelModel
from ixp_core.units import format_size
from ixp_core.validation import validate_props

from .config import settings as default_settings

if TYPE_CHECKING:
    from ixp_core.schemas import ComponentDefinition

    from .registry import ComponentRegistry

logger = logging.getLogger(__name__)


class RenderContext(CamelModel):
    component_id: str = ""
    intent_id: str | None = None
    theme: str = "light"
    api_base: str = "/api"


class RenderOptions(CamelModel):
    component: str
    props: dict[str, Any] = Field(default_factory=dict)
    context: RenderContext = Field(default_factory=RenderContext)
    ssr: bool = False


class RenderPerformance(CamelModel):
    render_time_ms: float
    bundle_size: str


class RenderResult(CamelModel):
    html: str
    css: str | None = None
    bundle_url: str
    props: dict[str, Any]
    context: RenderContext
    performance: RenderPerformance
    errors: list[str] = Field(default_factory=list)


class CacheStats(CamelModel):
    size: int
    keys: list[str]


def _placeholder(component: ComponentDefinition, component_id: str) -> str:
    name = html.escape(component.name, quote=True)
    framework = html.escape(component.framework, quote=True)
    cid = html.escape(component_id, quote=True)
    return (
        f'<div id="{cid}" class="ixp-component" '
        f'data-component="{name}" data-framework="{framework}">'
        f'<div class="ixp-loading">Loading {name}...</div>'
        "</div>"
    )


class ComponentRenderer:
    """Builds render payloads for components the client hydrates itself.

    Results are cached per (component, props, intent id), least recently
    used first out once ``max_entries`` is reached, and the cache is dropped
    whenever the component registry changes.
    """

    def __init__(
        self, components: ComponentRegistry, *, max_entries: int | None = None
    ) -> None:
        self.components = components
        self.max_entries = max_entries or default_settings.render_cache_size
        self._cache: OrderedDict[str, RenderResult] = OrderedDict()
        self._lock = threading.Lock()
        self._unsubscribe = components.on_change(self.clear_cache)

    def render(self, options: RenderOptions | dict[str, Any]) -> RenderResult:
        if not isinstance(options, RenderOptions):
            try:
                options = RenderOptions.model_validate(options)
            except PydanticValidationError as exc:
                raise ValidationError(field_errors_from_pydantic(exc)) from exc
        started = time.perf_counter()

        component = self.components.get(options.component)
        if component is None:
            raise ComponentNotFoundError(options.component)
        props = validate_props(component.props_schema, options.props)

        key = self._cache_key(component.name, props, options.context.intent_id)
        if not options.ssr:
            with self._lock:
                cached = self._cache.get(key)
                if cached is not None:
                    self._cache.move_to_end(key)
            if cached is not None:
                logger.debug("Render cache hit for %s", component.name)
                context = cached.context.model_copy(
                    update={"component_id": self._new_id(component.name)}
                )
                return cached.model_copy(
                    deep=True,
                    update={
                        "context": context,
                        "html": _placeholder(component, context.component_id),
                    }
                )

        errors: list[str] = []
        if options.ssr:
            errors.append(
                f"Server-side rendering is not available for {component.framework}; "
                "falling back to client-side rendering"
            )

        component_id = self._new_id(component.name)
        context = options.context.model_copy(update={"component_id": component_id})
        result = RenderResult(
            html=_placeholder(component, component_id),
            bundle_url=component.remote_url,
            props=props,
            context=context,
            performance=RenderPerformance(
                render_time_ms=round((time.perf_counter() - started) * 1000, 3),
                bundle_size=component.bundle_size
                or format_size(component.bundle_bytes or 0),
            ),
            errors=errors,
        )
        if not options.ssr:
            with self._lock:
                self._cache[key] = result.model_copy(deep=True)
                self._cache.move_to_end(key)
                while len(self._cache) > self.max_entries:
                    self._cache.popitem(last=False)
        return result

    @staticmethod
    def _cache_key(name: str, props: dict[str, Any], intent_id: str | None) -> str:
        encoded = json.dumps(props, sort_keys=True, default=str)
        return f"{name}:{encoded}:{intent_id or ''}"

    @staticmethod
    def _new_id(name: str) -> str:
        return f"ixp-{name}-{uuid.uuid4().hex[:12]}"

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.debug("Render cache cleared")

    def cache_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._cache), keys=list(self._cache))

    def close(self) -> None:
        self._unsubscribe()
        self.clear_cache()
