"""Compile declarative property schemas into reusable validators.

Every object level of a schema tree (see :mod:`ixp_core.schemas.json_schema`)
becomes a pydantic model built with :func:`pydantic.create_model`; nested
objects that declare ``properties`` become nested models, open objects become
``dict[str, Any]``.  Property names travel as aliases so any key is allowed,
including ones that are not Python identifiers.

Unknown property types compile to ``Any`` and log a warning.  Definitions
written for a richer schema dialect keep loading; the unknown fields are
simply left unchecked.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    ConfigurationError,
    FieldError,
    ParameterValidationError,
    PropsValidationError,
    field_errors_from_pydantic,
)
from .schemas.json_schema import (
    ArraySchema,
    BooleanSchema,
    IntegerSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    UnknownSchema,
)

logger = logging.getLogger(__name__)

# Patterns are checked with ``re.compile`` at parse time and matched with
# ``re.search`` here.
_MODEL_CONFIG = ConfigDict(extra="ignore", regex_engine="python-re")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of running a compiled validator."""

    value: Any
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _whole_float_to_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# ---------------------------------------------------------------------------
# Schema node -> annotation
# ---------------------------------------------------------------------------


def _string_type(node: StringSchema) -> Any:
    if node.enum:
        return Literal[tuple(node.enum)]
    return Annotated[
        str,
        Field(
            strict=True,
            min_length=node.min_length,
            max_length=node.max_length,
            pattern=node.pattern,
        ),
    ]


def _number_type(node: NumberSchema) -> Any:
    return Annotated[
        float,
        Field(strict=True, allow_inf_nan=False, ge=node.minimum, le=node.maximum),
    ]


def _integer_type(node: IntegerSchema) -> Any:
    return Annotated[
        int,
        Field(strict=True, ge=node.minimum, le=node.maximum),
        BeforeValidator(_whole_float_to_int),
    ]


def _array_type(node: ArraySchema) -> Any:
    return Annotated[
        list[Any], Field(min_length=node.min_items, max_length=node.max_items)
    ]


def _annotation(node: Any, name: str) -> Any:
    match node:
        case StringSchema():
            return _string_type(node)
        case NumberSchema():
            return _number_type(node)
        case IntegerSchema():
            return _integer_type(node)
        case BooleanSchema():
            return StrictBool
        case ArraySchema():
            return _array_type(node)
        case ObjectSchema() if node.properties is None:
            return dict[str, Any]
        case ObjectSchema():
            return _build_model(node, name)
        case UnknownSchema():
            logger.warning(
                "Unknown schema type %r for field %r, accepting any value",
                node.type,
                name,
            )
            return Any
    msg = f"Cannot compile schema node {node!r}"
    raise TypeError(msg)


def _build_model(schema: ObjectSchema, name: str) -> type[BaseModel]:
    """One model per object level; required-ness comes from this level only."""
    required = set(schema.required)
    fields: dict[str, Any] = {}
    for index, (prop, node) in enumerate((schema.properties or {}).items()):
        # Optional fields default to None without widening the type, so an
        # explicit null is still rejected and an omitted one stays unset.
        default = ... if prop in required else None
        fields[f"field_{index}"] = (
            _annotation(node, prop),
            Field(default=default, alias=prop),
        )
    return create_model(name, __config__=_MODEL_CONFIG, **fields)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class SchemaValidator:
    """A compiled object schema; call it with the input to validate."""

    def __init__(self, schema: ObjectSchema):
        self.schema = schema
        self.model = _build_model(schema, "Input")

    def __call__(self, data: Any) -> ValidationResult:
        try:
            instance = self.model.model_validate(data)
        except PydanticValidationError as exc:
            return ValidationResult(value=None, errors=field_errors_from_pydantic(exc))
        return ValidationResult(
            value=instance.model_dump(by_alias=True, exclude_unset=True)
        )


def _as_object_schema(schema: ObjectSchema | Mapping[str, Any]) -> ObjectSchema:
    if isinstance(schema, ObjectSchema):
        return schema
    try:
        return ObjectSchema.model_validate(schema)
    except PydanticValidationError as exc:
        details = ", ".join(str(e) for e in field_errors_from_pydantic(exc))
        msg = f"Invalid object schema: {details}"
        raise ConfigurationError(msg) from exc


@functools.lru_cache(maxsize=256)
def _compile_cached(canonical: str) -> SchemaValidator:
    return SchemaValidator(ObjectSchema.model_validate(json.loads(canonical)))


def compile_schema(schema: ObjectSchema | Mapping[str, Any]) -> SchemaValidator:
    """Compile (or fetch from cache) the validator for an object schema."""
    node = _as_object_schema(schema)
    canonical = json.dumps(node.to_json(), sort_keys=True, default=str)
    return _compile_cached(canonical)


def validate_parameters(
    schema: ObjectSchema | Mapping[str, Any], data: Any
) -> dict[str, Any]:
    """Validate intent parameters, raising with every field error."""
    result = compile_schema(schema)(data)
    if not result.ok:
        raise ParameterValidationError(result.errors)
    return result.value


def validate_props(
    schema: ObjectSchema | Mapping[str, Any], data: Any
) -> dict[str, Any]:
    """Validate component props, raising with every field error."""
    result = compile_schema(schema)(data)
    if not result.ok:
        raise PropsValidationError(result.errors)
    return result.value
