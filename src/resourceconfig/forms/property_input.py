"""Map schema entries to concrete input widgets.

Every :class:`DataType` maps to one widget kind:

* ``STRING`` → text box
* ``NUMBER`` → text box accepting numeric text only
* ``BOOLEAN`` → checkbox
* ``LIST`` → dropdown when allowed values exist, otherwise a text box
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import InputRejected
from ..schema.schema_models import (
    DataType,
    NumberRules,
    PropertySchemaEntry,
    Scalar,
    TextRules,
)
from ..schema.values import parse_boolean, parse_number
from ..validation.validation_engine import format_number

_NUMERIC_TEXT_RE = re.compile(r"^-?\d*\.?\d*$")
_PARTIAL_NUMBERS = frozenset({"-", ".", "-."})


class WidgetKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    SELECT = "select"


@dataclass(frozen=True, slots=True)
class InputOption:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class PropertyInput:
    """Render description of one property input."""

    property_name: str
    input_id: str
    widget: WidgetKind
    label: str
    required: bool
    raw_value: str
    placeholder: str
    help_text: str | None = None
    options: tuple[InputOption, ...] = ()
    checked: bool | None = None
    error: str | None = None
    disabled: bool = False

    @property
    def required_marker(self) -> str:
        return "*" if self.required else ""

    @property
    def has_error(self) -> bool:
        return self.error is not None


def widget_for(entry: PropertySchemaEntry) -> WidgetKind:
    if entry.data_type is DataType.NUMBER:
        return WidgetKind.NUMBER
    if entry.data_type is DataType.BOOLEAN:
        return WidgetKind.CHECKBOX
    if entry.data_type is DataType.LIST and entry.allowed_values:
        return WidgetKind.SELECT
    return WidgetKind.TEXT


def display_text(value: object) -> str:
    """Return the text shown in a widget for ``value``."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _range_hint(low: object, high: object, unit: str = "") -> str:
    suffix = f" {unit}" if unit else ""
    if low is not None and high is not None:
        return f" ({display_text(low)}-{display_text(high)}{suffix})"
    if low is not None:
        return f" (min: {display_text(low)}{suffix})"
    if high is not None:
        return f" (max: {display_text(high)}{suffix})"
    return ""


def _placeholder(entry: PropertySchemaEntry, widget: WidgetKind) -> str:
    rules = entry.validation_rules
    if widget is WidgetKind.SELECT:
        return f"Select {entry.display_name}"
    if widget is WidgetKind.NUMBER and isinstance(rules, NumberRules):
        return entry.display_name + _range_hint(rules.min, rules.max)
    if isinstance(rules, TextRules):
        return entry.display_name + _range_hint(rules.min_length, rules.max_length, "chars")
    if entry.data_type is DataType.LIST:
        return "Enter comma-separated values"
    return entry.display_name


def _checked(entry: PropertySchemaEntry, value: object) -> bool:
    # an unset checkbox reflects the default without writing it back
    source = value if value is not None else entry.default_value
    if source is None:
        return False
    try:
        return parse_boolean(source)
    except ValueError:
        return bool(source)


def build_property_input(
    entry: PropertySchemaEntry,
    value: object,
    *,
    error: str | None = None,
    disabled: bool = False,
) -> PropertyInput:
    widget = widget_for(entry)
    return PropertyInput(
        property_name=entry.property_name,
        input_id=f"property-{entry.property_name}",
        widget=widget,
        label=entry.display_name,
        required=entry.required,
        raw_value=display_text(value),
        placeholder=_placeholder(entry, widget),
        help_text=entry.description,
        options=tuple(
            InputOption(value=option.value, label=option.label)
            for option in entry.allowed_values
        ),
        checked=_checked(entry, value) if widget is WidgetKind.CHECKBOX else None,
        error=error,
        disabled=disabled,
    )


def parse_raw_input(entry: PropertySchemaEntry, raw: str | bool | None) -> Scalar | None:
    """Convert widget input into the scalar stored in the configuration.

    Empty input clears the value. Numeric widgets keep incomplete input such
    as ``"-"`` as text and reject anything that is not numeric.
    """

    if raw is None:
        return None
    if entry.data_type is DataType.BOOLEAN:
        try:
            return parse_boolean(raw.strip().lower() if isinstance(raw, str) else raw)
        except ValueError as exc:
            raise InputRejected(f"{entry.display_name} expects true or false") from exc
    text = display_text(raw)
    if text == "":
        return None
    if entry.data_type is DataType.NUMBER:
        if not _NUMERIC_TEXT_RE.match(text):
            raise InputRejected(f"{entry.display_name} accepts numbers only")
        if text in _PARTIAL_NUMBERS:
            return text
        return parse_number(text)
    return text


__all__ = [
    "InputOption",
    "PropertyInput",
    "WidgetKind",
    "build_property_input",
    "display_text",
    "parse_raw_input",
    "widget_for",
]
