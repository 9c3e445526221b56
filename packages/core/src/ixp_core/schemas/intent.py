"""Intent definition and request schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field, StrictBool

from .base import CamelModel, DefinitionModel, NonEmptyStr
from .json_schema import ObjectSchema


class IntentDefinition(DefinitionModel):
    """A named, versioned request type bound to a target component."""

    name: NonEmptyStr
    description: NonEmptyStr
    parameters: ObjectSchema
    component: NonEmptyStr
    version: NonEmptyStr
    crawlable: StrictBool = False
    deprecated: StrictBool = False


class IntentRequest(CamelModel):
    """An intent name plus caller-supplied parameters."""

    name: NonEmptyStr
    parameters: dict[str, Any] = Field(default_factory=dict)
