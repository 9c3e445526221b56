"""IXP core - shared schemas, errors and the schema validator."""

from ixp_core.errors import (
    ComponentNotFoundError,
    ConfigurationError,
    ErrorResponse,
    FieldError,
    IntentNotFoundError,
    IxpError,
    NotFoundError,
    ParameterValidationError,
    PropsValidationError,
    SourceError,
    ValidationError,
)
from ixp_core.validation import (
    SchemaValidator,
    ValidationResult,
    compile_schema,
    validate_parameters,
    validate_props,
)

__all__ = [
    "ComponentNotFoundError",
    "ConfigurationError",
    "ErrorResponse",
    "FieldError",
    "IntentNotFoundError",
    "IxpError",
    "NotFoundError",
    "ParameterValidationError",
    "PropsValidationError",
    "SchemaValidator",
    "SourceError",
    "ValidationError",
    "ValidationResult",
    "compile_schema",
    "validate_parameters",
    "validate_props",
]
