"""Per-field validation of property values against their schema entry.

Checks run short-circuit in a fixed order: required, number range, allowed
options, boolean encoding, string length/pattern. Only single fields are
validated; relations between properties are not checked here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from ..schema.schema_models import (
    ChoiceRules,
    DataType,
    NumberRules,
    PropertySchemaEntry,
    TextRules,
)
from ..schema.values import is_empty, parse_boolean, parse_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one value."""

    valid: bool
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, error_message=message)


def format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _check_number(entry: PropertySchemaEntry, value: object) -> ValidationResult:
    try:
        number = parse_number(value)
    except ValueError:
        return ValidationResult.fail(f"{entry.display_name} must be a valid number")

    rules = entry.validation_rules
    if not isinstance(rules, NumberRules):
        return ValidationResult.ok()
    low, high = rules.min, rules.max
    if low is not None and high is not None:
        if not low <= number <= high:
            return ValidationResult.fail(
                f"{entry.display_name} must be between "
                f"{format_number(low)} and {format_number(high)}"
            )
    elif low is not None and number < low:
        return ValidationResult.fail(
            f"{entry.display_name} must be at least {format_number(low)}"
        )
    elif high is not None and number > high:
        return ValidationResult.fail(
            f"{entry.display_name} must be at most {format_number(high)}"
        )
    return ValidationResult.ok()


def _check_choice(entry: PropertySchemaEntry, value: object) -> ValidationResult:
    rules = entry.validation_rules
    if not isinstance(rules, ChoiceRules) or not rules.allowed_values:
        return ValidationResult.ok()
    allowed = rules.values()
    if _as_text(value) not in allowed:
        return ValidationResult.fail(
            f"{entry.display_name} must be one of: {', '.join(allowed)}"
        )
    return ValidationResult.ok()


def _check_boolean(entry: PropertySchemaEntry, value: object) -> ValidationResult:
    try:
        parse_boolean(value)
    except ValueError:
        return ValidationResult.fail(f"{entry.display_name} must be true or false")
    return ValidationResult.ok()


def _check_text(entry: PropertySchemaEntry, value: object) -> ValidationResult:
    rules = entry.validation_rules
    if not isinstance(rules, TextRules):
        return ValidationResult.ok()
    text = _as_text(value)
    if rules.min_length is not None and len(text) < rules.min_length:
        return ValidationResult.fail(
            f"{entry.display_name} must be at least {rules.min_length} characters"
        )
    if rules.max_length is not None and len(text) > rules.max_length:
        return ValidationResult.fail(
            f"{entry.display_name} must be at most {rules.max_length} characters"
        )
    if rules.pattern:
        try:
            matched = re.search(rules.pattern, text) is not None
        except re.error as exc:
            logger.warning(
                "validation.pattern.invalid",
                extra={"property_name": entry.property_name, "error": str(exc)},
            )
            return ValidationResult.ok()
        if not matched:
            return ValidationResult.fail(f"{entry.display_name} format is invalid")
    return ValidationResult.ok()


def validate(entry: PropertySchemaEntry, raw_value: object) -> ValidationResult:
    """Validate ``raw_value`` against ``entry``."""

    if is_empty(raw_value):
        if entry.required:
            return ValidationResult.fail(f"{entry.display_name} is required")
        return ValidationResult.ok()

    if entry.data_type is DataType.NUMBER:
        return _check_number(entry, raw_value)
    if entry.data_type is DataType.LIST:
        return _check_choice(entry, raw_value)
    if entry.data_type is DataType.BOOLEAN:
        return _check_boolean(entry, raw_value)
    return _check_text(entry, raw_value)


def validate_configuration(
    entries: Iterable[PropertySchemaEntry],
    configuration: Mapping[str, object],
) -> dict[str, str]:
    """Return ``{property_name: message}`` for every invalid property."""

    errors: dict[str, str] = {}
    for entry in entries:
        result = validate(entry, configuration.get(entry.property_name))
        if not result.valid and result.error_message:
            errors[entry.property_name] = result.error_message
    return errors


__all__ = [
    "ValidationResult",
    "format_number",
    "validate",
    "validate_configuration",
]
