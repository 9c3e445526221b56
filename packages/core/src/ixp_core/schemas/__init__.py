"""Core schemas for IXP."""

from .base import CamelModel, DefinitionModel, NonEmptyStr
from .component import (
    CSP_DIRECTIVES,
    ComponentDefinition,
    ComponentDescriptor,
    PerformanceBudget,
    SecurityPolicy,
)
from .content import (
    CacheConfig,
    ContentFeed,
    ContentItem,
    ContentRequest,
    CrawlerSource,
    FeedMetadata,
    FeedPagination,
    PagePagination,
    PaginationConfig,
    RateLimitConfig,
    SourceConfig,
    SourceHandler,
    SourceOptions,
    SourcePage,
    SourceStats,
)
from .enums import SchemaType
from .intent import IntentDefinition, IntentRequest
from .json_schema import (
    ArraySchema,
    BooleanSchema,
    IntegerSchema,
    NumberSchema,
    ObjectSchema,
    PropertySchema,
    StringSchema,
    UnknownSchema,
)

__all__ = [
    "CSP_DIRECTIVES",
    "ArraySchema",
    "BooleanSchema",
    "CacheConfig",
    "CamelModel",
    "ComponentDefinition",
    "ComponentDescriptor",
    "ContentFeed",
    "ContentItem",
    "ContentRequest",
    "CrawlerSource",
    "DefinitionModel",
    "FeedMetadata",
    "FeedPagination",
    "IntegerSchema",
    "IntentDefinition",
    "IntentRequest",
    "NonEmptyStr",
    "NumberSchema",
    "ObjectSchema",
    "PagePagination",
    "PaginationConfig",
    "PerformanceBudget",
    "PropertySchema",
    "RateLimitConfig",
    "SchemaType",
    "SecurityPolicy",
    "SourceConfig",
    "SourceHandler",
    "SourceOptions",
    "SourcePage",
    "SourceStats",
    "StringSchema",
    "UnknownSchema",
]
