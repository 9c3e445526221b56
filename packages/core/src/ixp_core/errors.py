"""Error hierarchy shared by the resolver and crawler apps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pydantic import ValidationError as PydanticValidationError


class FieldError(NamedTuple):
    """A single schema violation at a dotted path (``""`` is the root)."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class ErrorResponse(BaseModel):
    """Standard error payload."""

    detail: str
    code: str
    errors: list[str] | None = None


class IxpError(Exception):
    """Base class for every error raised by the IXP core."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> ErrorResponse:
        """Render the error as a transport-neutral payload."""
        return ErrorResponse(detail=self.message, code=self.code)


class ConfigurationError(IxpError):
    """A definition file or definition failed to load or validate."""

    code = "CONFIGURATION_ERROR"


class NotFoundError(IxpError):
    """An intent or component name is not registered."""

    code = "NOT_FOUND"
    status_code = 404


class IntentNotFoundError(NotFoundError):
    code = "INTENT_NOT_SUPPORTED"

    def __init__(self, name: str):
        super().__init__(f"Intent '{name}' not found", details={"intent": name})
        self.name = name


class ComponentNotFoundError(NotFoundError):
    code = "COMPONENT_NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(
            f"Component '{name}' not found", details={"component": name}
        )
        self.name = name


class ValidationError(IxpError):
    """Input violated a schema; carries every field error in order."""

    code = "INVALID_REQUEST"
    status_code = 400
    summary = "Validation failed"

    def __init__(self, errors: Iterable[FieldError], message: str | None = None):
        self.errors = list(errors)
        if message is None:
            message = f"{self.summary}: " + ", ".join(str(e) for e in self.errors)
        super().__init__(message, details={"errors": [e._asdict() for e in self.errors]})

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.errors]

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            detail=self.message,
            code=self.code,
            errors=[str(e) for e in self.errors],
        )


class ParameterValidationError(ValidationError):
    code = "PARAMETER_VALIDATION_FAILED"
    summary = "Parameter validation failed"


class PropsValidationError(ValidationError):
    code = "INVALID_COMPONENT_PROPS"
    summary = "Component props validation failed"


class SourceError(IxpError):
    """A crawler source handler failed; never surfaced past the registry."""

    code = "SOURCE_ERROR"
    status_code = 502

    def __init__(self, source: str, message: str):
        super().__init__(
            f"Source '{source}' failed: {message}", details={"source": source}
        )
        self.source = source


def field_errors_from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    """Flatten a pydantic error into dotted-path :class:`FieldError` items."""
    return [
        FieldError(".".join(str(part) for part in err["loc"]), err["msg"])
        for err in exc.errors()
    ]
