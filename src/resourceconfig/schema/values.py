"""Typed property values and their (de)serialisation.

Configurations travel as plain scalars; inside the engine each value can be
lifted into a tagged value matching the entry's :class:`DataType`.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Union

from .schema_models import DataType, PropertySchemaEntry, ResourceConfiguration, Scalar

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str
    data_type = DataType.STRING


@dataclass(frozen=True, slots=True)
class NumberValue:
    value: int | float
    data_type = DataType.NUMBER


@dataclass(frozen=True, slots=True)
class BooleanValue:
    value: bool
    data_type = DataType.BOOLEAN


@dataclass(frozen=True, slots=True)
class ChoiceValue:
    value: str
    data_type = DataType.LIST


PropertyValue = Union[StringValue, NumberValue, BooleanValue, ChoiceValue]


def is_empty(value: object) -> bool:
    """Return ``True`` when ``value`` counts as "no value supplied"."""

    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def parse_number(raw: object) -> int | float:
    """Parse ``raw`` into a finite number or raise :class:`ValueError`."""

    if isinstance(raw, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise ValueError("number must be finite")
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"cannot parse {type(raw).__name__} as number")
    text = raw.strip()
    if _INT_RE.match(text):
        return int(text)
    number = float(text)
    if not math.isfinite(number):
        raise ValueError("number must be finite")
    return number


def parse_boolean(raw: object) -> bool:
    """Accept native booleans or the exact strings ``"true"``/``"false"``."""

    if isinstance(raw, bool):
        return raw
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise ValueError(f"{raw!r} is not a boolean")


def decode_value(data_type: DataType, raw: object) -> PropertyValue | None:
    """Lift a raw scalar into a tagged value; empty input decodes to ``None``."""

    if is_empty(raw):
        return None
    if data_type is DataType.NUMBER:
        return NumberValue(parse_number(raw))
    if data_type is DataType.BOOLEAN:
        if isinstance(raw, str):
            raw = raw.strip().lower()
        return BooleanValue(parse_boolean(raw))
    if isinstance(raw, bool):
        raw = "true" if raw else "false"
    if data_type is DataType.LIST:
        return ChoiceValue(str(raw))
    return StringValue(str(raw))


def encode_value(value: PropertyValue) -> Scalar:
    return value.value


def encode_configuration(
    entries: Iterable[PropertySchemaEntry],
    configuration: Mapping[str, Scalar],
) -> ResourceConfiguration:
    """Flatten ``configuration`` into transport scalars typed per entry.

    Keys without a matching entry and values that cannot be decoded are kept
    unchanged; empty values are dropped.
    """

    by_name = {entry.property_name: entry for entry in entries}
    encoded: ResourceConfiguration = {}
    for name, raw in configuration.items():
        entry = by_name.get(name)
        if entry is None:
            encoded[name] = raw
            continue
        try:
            value = decode_value(entry.data_type, raw)
        except ValueError:
            encoded[name] = raw
            continue
        if value is not None:
            encoded[name] = encode_value(value)
    return encoded


__all__ = [
    "BooleanValue",
    "ChoiceValue",
    "NumberValue",
    "PropertyValue",
    "StringValue",
    "decode_value",
    "encode_configuration",
    "encode_value",
    "is_empty",
    "parse_boolean",
    "parse_number",
]
