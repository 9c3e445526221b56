"""Pydantic-compatible enums for definition schemas."""

from enum import StrEnum


class SchemaType(StrEnum):
    """Property types understood by the schema validator."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
