"""Shared model base and field types."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, StrictStr
from pydantic.alias_generators import to_camel


def _require_text(value: str) -> str:
    if not value.strip():
        msg = "must be a non-empty string"
        raise ValueError(msg)
    return value


NonEmptyStr = Annotated[StrictStr, AfterValidator(_require_text)]


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Dump to the camelCase JSON form, omitting fields never set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class DefinitionModel(CamelModel):
    """Registry definitions keep any extra keys they were declared with."""

    model_config = ConfigDict(extra="allow")
