"""Property schema discovery: models, wire payloads, transport and cache."""

from .schema_cache import GENERIC_FETCH_ERROR, Schema, SchemaCache
from .schema_models import (
    AllowedValue,
    ChoiceRules,
    DataType,
    NoRules,
    NumberRules,
    PropertySchemaEntry,
    ResourceConfiguration,
    Scalar,
    SchemaContext,
    SchemaFetchKey,
    TextRules,
    sort_by_display_order,
)
from .schema_payloads import parse_schema_response
from .schema_transport import HttpSchemaTransport, SchemaTransport, schema_route

__all__ = [
    "AllowedValue",
    "ChoiceRules",
    "DataType",
    "GENERIC_FETCH_ERROR",
    "HttpSchemaTransport",
    "NoRules",
    "NumberRules",
    "PropertySchemaEntry",
    "ResourceConfiguration",
    "Scalar",
    "Schema",
    "SchemaCache",
    "SchemaContext",
    "SchemaFetchKey",
    "SchemaTransport",
    "TextRules",
    "parse_schema_response",
    "schema_route",
    "sort_by_display_order",
]
