"""Intent resolution: lookup, validation, data merge and TTL calculation."""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from ixp_core.errors import (
    ComponentNotFoundError,
    IntentNotFoundError,
    ValidationError,
    field_errors_from_pydantic,
)
from ixp_core.schemas import CamelModel, ComponentDescriptor, IntentRequest
from ixp_core.units import parse_size
from ixp_core.validation import validate_parameters, validate_props

from .config import settings as default_settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ixp_core.schemas import ComponentDefinition, IntentDefinition

    from .config import ResolverSettings
    from .registry import ComponentRegistry, IntentRegistry

    DataProvider = Callable[
        [IntentRequest, dict[str, Any] | None],
        Awaitable[Mapping[str, Any]] | Mapping[str, Any],
    ]

logger = logging.getLogger(__name__)


class ResolutionStats(CamelModel):
    total_resolutions: int = 0
    successful_resolutions: int = 0
    failed_resolutions: int = 0
    average_resolution_ms: float = 0.0


def _parse_request(request: IntentRequest | Mapping[str, Any]) -> IntentRequest:
    if isinstance(request, IntentRequest):
        return request
    try:
        return IntentRequest.model_validate(request)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors_from_pydantic(exc)) from exc


class IntentResolver:
    """Turns an intent request into a :class:`ComponentDescriptor`.

    An optional *data_provider* is awaited with the request and render
    options; the mapping it returns is merged over the validated parameters.
    Provider failures never fail the resolution.
    """

    def __init__(
        self,
        intents: IntentRegistry,
        components: ComponentRegistry,
        data_provider: DataProvider | None = None,
        settings: ResolverSettings | None = None,
    ) -> None:
        self.intents = intents
        self.components = components
        self.data_provider = data_provider
        self.settings = settings or default_settings
        self._total = 0
        self._succeeded = 0
        self._elapsed_ms = 0.0

    async def resolve_intent(
        self,
        request: IntentRequest | Mapping[str, Any],
        render_options: dict[str, Any] | None = None,
    ) -> ComponentDescriptor:
        started = time.perf_counter()
        self._total += 1
        try:
            descriptor = await self._resolve(_parse_request(request), render_options)
        finally:
            self._elapsed_ms += (time.perf_counter() - started) * 1000
        self._succeeded += 1
        return descriptor

    async def _resolve(
        self, request: IntentRequest, render_options: dict[str, Any] | None
    ) -> ComponentDescriptor:
        intent = self.intents.get(request.name)
        if intent is None:
            raise IntentNotFoundError(request.name)
        if intent.deprecated:
            logger.warning("Intent %r is deprecated", intent.name)

        parameters = self.validate_parameters(intent, request.parameters)

        component = self.components.get(intent.component)
        if component is None:
            raise ComponentNotFoundError(intent.component)
        if component.deprecated:
            logger.warning("Component %r is deprecated", component.name)

        resolved = dict(parameters)
        if self.data_provider is not None:
            extra = await self._fetch_data(self.data_provider, request, render_options)
            if extra:
                resolved.update(extra)

        ttl = self.calculate_ttl(intent, component)
        logger.info(
            "Resolved intent %r -> component %r (ttl=%ds)",
            intent.name,
            component.name,
            ttl,
        )
        return ComponentDescriptor(
            module_url=component.remote_url,
            export_name=component.export_name,
            props={**resolved, **(render_options or {})},
            component_definition=component,
            ttl_seconds=ttl,
        )

    async def _fetch_data(
        self,
        provider: DataProvider,
        request: IntentRequest,
        render_options: dict[str, Any] | None,
    ) -> dict[str, Any] | None:
        try:
            result = provider(request, render_options)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.warning(
                "Data provider failed for intent %r", request.name, exc_info=True
            )
            return None
        if not isinstance(result, Mapping):
            logger.warning(
                "Data provider for intent %r returned %s, expected a mapping",
                request.name,
                type(result).__name__,
            )
            return None
        return dict(result)

    def validate_parameters(
        self, intent: IntentDefinition, parameters: Any
    ) -> dict[str, Any]:
        return validate_parameters(intent.parameters, parameters)

    def validate_component_props(
        self, component: ComponentDefinition, props: Any
    ) -> dict[str, Any]:
        return validate_props(component.props_schema, props)

    def calculate_ttl(
        self, intent: IntentDefinition, component: ComponentDefinition
    ) -> int:
        """Descriptor cache lifetime in seconds.

        Deprecation caps the TTL and nothing raises it afterwards; otherwise
        crawlable intents and heavy bundles each impose a floor.
        """
        cfg = self.settings
        ttl = cfg.base_ttl_seconds
        if intent.deprecated or component.deprecated:
            return min(ttl, cfg.deprecated_ttl_seconds)
        if intent.crawlable:
            ttl = max(ttl, cfg.crawlable_ttl_seconds)
        gzipped = component.performance.gzipped_bytes if component.performance else None
        if gzipped is not None and gzipped > parse_size(cfg.large_bundle_threshold):
            ttl = max(ttl, cfg.large_bundle_ttl_seconds)
        return ttl

    def get_stats(self) -> ResolutionStats:
        average = self._elapsed_ms / self._total if self._total else 0.0
        return ResolutionStats(
            total_resolutions=self._total,
            successful_resolutions=self._succeeded,
            failed_resolutions=self._total - self._succeeded,
            average_resolution_ms=round(average, 3),
        )


def find_unresolved_components(
    intents: IntentRegistry, components: ComponentRegistry
) -> list[IntentDefinition]:
    """Intents whose target component is not registered."""
    return [intent for intent in intents.get_all() if intent.component not in components]
