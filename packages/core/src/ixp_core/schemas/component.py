"""Component definition, policy and descriptor schemas."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, StrictBool, StrictStr, field_validator

from ixp_core.units import parse_duration_ms, parse_size

from .base import CamelModel, DefinitionModel, NonEmptyStr
from .json_schema import ObjectSchema

CSP_DIRECTIVES = frozenset(
    {
        "default-src",
        "script-src",
        "style-src",
        "img-src",
        "connect-src",
        "font-src",
        "object-src",
        "media-src",
        "frame-src",
        "worker-src",
        "child-src",
        "manifest-src",
        "base-uri",
        "form-action",
        "frame-ancestors",
    }
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def canonical_directive(name: str) -> str:
    """``scriptSrc`` -> ``script-src``; kebab-case names pass through."""
    return _CAMEL_BOUNDARY.sub("-", name).lower()


class SecurityPolicy(DefinitionModel):
    """Sandboxing policy applied when the component is instantiated."""

    allow_eval: StrictBool = False
    sandboxed: StrictBool = True
    max_bundle_size: str = "200KB"
    csp: dict[str, list[str]] | None = None

    @field_validator("max_bundle_size")
    @classmethod
    def _parse_max_size(cls, value: str) -> str:
        parse_size(value)
        return value

    @field_validator("csp")
    @classmethod
    def _check_directives(
        cls, value: dict[str, list[str]] | None
    ) -> dict[str, list[str]] | None:
        if value is None:
            return value
        for directive, sources in value.items():
            canonical = canonical_directive(directive)
            if canonical not in CSP_DIRECTIVES:
                msg = f"Unsupported CSP directive {directive!r}"
                raise ValueError(msg)
            if canonical == "script-src" and any(
                source.strip("'\"").lower() == "unsafe-eval" for source in sources
            ):
                msg = "CSP script-src must not allow 'unsafe-eval'"
                raise ValueError(msg)
        return value

    @property
    def max_bundle_bytes(self) -> int:
        return parse_size(self.max_bundle_size)


class PerformanceBudget(DefinitionModel):
    """Declared bundle-size / time-to-interactive metadata from the build."""

    bundle_size_gzipped: str | None = None
    time_to_interactive: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "timeToInteractive", "tti", "time_to_interactive"
        ),
    )

    @field_validator("bundle_size_gzipped")
    @classmethod
    def _parse_size(cls, value: str | None) -> str | None:
        if value is not None:
            parse_size(value)
        return value

    @field_validator("time_to_interactive")
    @classmethod
    def _parse_duration(cls, value: str | None) -> str | None:
        if value is not None:
            parse_duration_ms(value)
        return value

    @property
    def gzipped_bytes(self) -> int | None:
        if self.bundle_size_gzipped is None:
            return None
        return parse_size(self.bundle_size_gzipped)

    @property
    def tti_ms(self) -> float | None:
        if self.time_to_interactive is None:
            return None
        return parse_duration_ms(self.time_to_interactive)


class ComponentDefinition(DefinitionModel):
    """A remote UI module: where to load it, how to call it, what it accepts."""

    name: NonEmptyStr
    framework: NonEmptyStr
    remote_url: NonEmptyStr
    export_name: NonEmptyStr
    props_schema: ObjectSchema
    version: NonEmptyStr
    allowed_origins: list[StrictStr] = Field(default_factory=list)
    security_policy: SecurityPolicy = Field(default_factory=SecurityPolicy)
    performance: PerformanceBudget | None = None
    bundle_size: str | None = None
    deprecated: StrictBool = False

    @field_validator("remote_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            msg = f"remoteUrl must be an absolute URL, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("bundle_size")
    @classmethod
    def _parse_bundle_size(cls, value: str | None) -> str | None:
        if value is not None:
            parse_size(value)
        return value

    @property
    def bundle_bytes(self) -> int | None:
        return parse_size(self.bundle_size) if self.bundle_size else None


class ComponentDescriptor(CamelModel):
    """Everything a client needs to fetch and instantiate a component."""

    module_url: str
    export_name: str
    props: dict[str, Any]
    component_definition: ComponentDefinition
    ttl_seconds: int
