"""Pydantic models for the resource-schema endpoint payloads."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import FetchError
from .schema_models import (
    AllowedValue,
    ChoiceRules,
    DataType,
    NoRules,
    NumberRules,
    PropertySchemaEntry,
    Scalar,
    TextRules,
    ValidationRules,
    sort_by_display_order,
)
from .values import decode_value, parse_number

logger = logging.getLogger(__name__)


class AllowedValuePayload(BaseModel):
    """Option of a LIST property as sent by the API."""

    model_config = ConfigDict(extra="ignore")

    value: str = Field(..., description="Stored value")
    label: Optional[str] = Field(default=None, description="Human readable label")


class ValidationRulesPayload(BaseModel):
    """Union of every rule key the API may send."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    min: Optional[Union[float, str]] = Field(default=None)
    max: Optional[Union[float, str]] = Field(default=None)
    allowed_values: Optional[List[AllowedValuePayload]] = Field(
        default=None, alias="allowedValues"
    )
    min_length: Optional[int] = Field(default=None, alias="minLength", ge=0)
    max_length: Optional[int] = Field(default=None, alias="maxLength", ge=0)
    pattern: Optional[str] = Field(default=None)


class PropertySchemaPayload(BaseModel):
    """Single property definition of the resource-schema response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Property schema identifier")
    mapping_id: str = Field(..., alias="mappingId")
    property_name: str = Field(..., alias="propertyName", min_length=1)
    display_name: str = Field(..., alias="displayName")
    description: Optional[str] = Field(default=None)
    data_type: DataType = Field(..., alias="dataType")
    required: bool = Field(default=False)
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")
    validation_rules: Optional[ValidationRulesPayload] = Field(
        default=None, alias="validationRules"
    )
    display_order: Optional[int] = Field(default=None, alias="displayOrder")


class PropertySchemaResponse(BaseModel):
    """Body of ``GET /{blueprints|stacks}/resource-schema/{type}/{provider}``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    resource_type_id: Optional[str] = Field(default=None, alias="resourceTypeId")
    resource_type_name: Optional[str] = Field(default=None, alias="resourceTypeName")
    cloud_provider_id: Optional[str] = Field(default=None, alias="cloudProviderId")
    cloud_provider_name: Optional[str] = Field(default=None, alias="cloudProviderName")
    properties: List[PropertySchemaPayload] = Field(default_factory=list)


def _bound(property_name: str, rule: str, raw: float | str | None) -> int | float | None:
    if raw is None:
        return None
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    try:
        return parse_number(raw)
    except ValueError:
        logger.warning(
            "schema.rule.undecodable",
            extra={"property_name": property_name, "rule": rule, "raw": repr(raw)},
        )
        return None


def _rules_for(payload: PropertySchemaPayload) -> ValidationRules:
    rules = payload.validation_rules
    if rules is None:
        return NoRules()
    if payload.data_type is DataType.NUMBER:
        low = _bound(payload.property_name, "min", rules.min)
        high = _bound(payload.property_name, "max", rules.max)
        if low is None and high is None:
            return NoRules()
        return NumberRules(min=low, max=high)
    if payload.data_type is DataType.LIST:
        options = tuple(
            AllowedValue(value=option.value, label=option.label or option.value)
            for option in rules.allowed_values or []
        )
        return ChoiceRules(allowed_values=options) if options else NoRules()
    if payload.data_type is DataType.STRING:
        if rules.min_length is None and rules.max_length is None and not rules.pattern:
            return NoRules()
        return TextRules(
            min_length=rules.min_length,
            max_length=rules.max_length,
            pattern=rules.pattern or None,
        )
    return NoRules()


def _default_for(payload: PropertySchemaPayload) -> Scalar | None:
    try:
        value = decode_value(payload.data_type, payload.default_value)
    except ValueError:
        logger.warning(
            "schema.default.undecodable",
            extra={
                "property_name": payload.property_name,
                "data_type": payload.data_type.value,
                "default_value": repr(payload.default_value),
            },
        )
        return None
    return None if value is None else value.value


def to_entry(payload: PropertySchemaPayload) -> PropertySchemaEntry:
    """Convert a wire property into a domain entry."""

    return PropertySchemaEntry(
        id=payload.id,
        mapping_id=payload.mapping_id,
        property_name=payload.property_name,
        display_name=payload.display_name,
        data_type=payload.data_type,
        required=payload.required,
        description=payload.description or None,
        default_value=_default_for(payload),
        validation_rules=_rules_for(payload),
        display_order=payload.display_order,
    )


def parse_schema_response(body: Any) -> tuple[PropertySchemaEntry, ...]:
    """Parse a response body into ordered entries.

    Raises :class:`FetchError` when the body is malformed or repeats a
    ``propertyName``.
    """

    if isinstance(body, list):
        body = {"properties": body}
    if body is None:
        body = {}
    try:
        response = PropertySchemaResponse.model_validate(body)
        entries = [to_entry(item) for item in response.properties]
    except (ValidationError, ValueError, TypeError) as exc:
        raise FetchError(f"Malformed property schema response: {exc}") from exc

    seen: set[str] = set()
    for entry in entries:
        if entry.property_name in seen:
            raise FetchError(
                f"Malformed property schema response: duplicate property "
                f"'{entry.property_name}'"
            )
        seen.add(entry.property_name)
    return sort_by_display_order(entries)


__all__ = [
    "AllowedValuePayload",
    "PropertySchemaPayload",
    "PropertySchemaResponse",
    "ValidationRulesPayload",
    "parse_schema_response",
    "to_entry",
]
