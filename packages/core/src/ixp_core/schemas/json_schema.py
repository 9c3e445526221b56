"""Tagged property-schema tree shared by intents, components and sources.

Each declared property is parsed into one variant keyed by its ``type``:
String, Number, Integer, Boolean, Array, Object or Unknown.  Anything whose
``type`` is missing or unrecognised lands in :class:`UnknownSchema` instead
of failing, so the validator can treat it as an explicit pass-through.
Keys the variants do not model (``description``, ``format``, ``default``...)
are kept as extras and survive a dump.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)

from .enums import SchemaType

_KNOWN_TYPES = frozenset(t.value for t in SchemaType)


class _SchemaNode(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Dump back to the camelCase form the node was declared in."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class StringSchema(_SchemaNode):
    type: Literal["string"]
    enum: list[str] | None = None
    min_length: int | None = Field(default=None, ge=0, alias="minLength")
    max_length: int | None = Field(default=None, ge=0, alias="maxLength")
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                msg = f"Invalid pattern {value!r}: {exc}"
                raise ValueError(msg) from exc
        return value


class NumberSchema(_SchemaNode):
    type: Literal["number"]
    minimum: int | float | None = None
    maximum: int | float | None = None


class IntegerSchema(_SchemaNode):
    type: Literal["integer"]
    minimum: int | float | None = None
    maximum: int | float | None = None


class BooleanSchema(_SchemaNode):
    type: Literal["boolean"]


class ArraySchema(_SchemaNode):
    type: Literal["array"]
    items: Any = None
    min_items: int | None = Field(default=None, ge=0, alias="minItems")
    max_items: int | None = Field(default=None, ge=0, alias="maxItems")


class ObjectSchema(_SchemaNode):
    type: Literal["object"]
    properties: dict[str, PropertySchema] | None = None
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> ObjectSchema:
        declared = self.properties or {}
        missing = [name for name in self.required if name not in declared]
        if missing:
            msg = f"Required field(s) not declared in properties: {', '.join(missing)}"
            raise ValueError(msg)
        return self

    def field_types(self) -> dict[str, str | None]:
        """Map each declared property to its declared ``type`` value."""
        return {
            name: node.type if isinstance(node.type, str) else None
            for name, node in (self.properties or {}).items()
        }

    def unrecognized_fields(self) -> list[str]:
        """Names of top-level properties whose type is not understood."""
        return [
            name
            for name, node in (self.properties or {}).items()
            if isinstance(node, UnknownSchema)
        ]


class UnknownSchema(_SchemaNode):
    """A property with a missing or unrecognised ``type``."""

    type: Any = None


def _schema_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if isinstance(kind, str) and kind in _KNOWN_TYPES else "unknown"


PropertySchema = Annotated[
    Union[
        Annotated[StringSchema, Tag("string")],
        Annotated[NumberSchema, Tag("number")],
        Annotated[IntegerSchema, Tag("integer")],
        Annotated[BooleanSchema, Tag("boolean")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[ObjectSchema, Tag("object")],
        Annotated[UnknownSchema, Tag("unknown")],
    ],
    Discriminator(_schema_tag),
]

ObjectSchema.model_rebuild()
