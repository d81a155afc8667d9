"""Domain models describing cloud-specific property schemas.

A schema is the ordered set of :class:`PropertySchemaEntry` objects that apply
to one resource type on one cloud provider. Entries are produced by the
transport layer and never mutated afterwards; configurations refer to them by
``property_name`` only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Union


class DataType(str, Enum):
    """Declared data type of a property."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    LIST = "LIST"


class SchemaContext(str, Enum):
    """Artefact whose resource list is being configured."""

    BLUEPRINT = "blueprint"
    STACK = "stack"

    @property
    def route_prefix(self) -> str:
        return "blueprints" if self is SchemaContext.BLUEPRINT else "stacks"


Scalar = Union[str, int, float, bool]
ResourceConfiguration = dict[str, Scalar]


@dataclass(frozen=True, slots=True)
class AllowedValue:
    """Option of a LIST property."""

    value: str
    label: str


@dataclass(frozen=True, slots=True)
class NoRules:
    """Rules of STRING/BOOLEAN properties without constraints."""


@dataclass(frozen=True, slots=True)
class NumberRules:
    """Inclusive bounds of a NUMBER property."""

    min: int | float | None = None
    max: int | float | None = None


@dataclass(frozen=True, slots=True)
class ChoiceRules:
    """Allowed options of a LIST property."""

    allowed_values: tuple[AllowedValue, ...] = ()

    def values(self) -> list[str]:
        return [option.value for option in self.allowed_values]


@dataclass(frozen=True, slots=True)
class TextRules:
    """Length and pattern constraints of a STRING property."""

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None


ValidationRules = Union[NoRules, NumberRules, ChoiceRules, TextRules]


@dataclass(frozen=True, slots=True)
class PropertySchemaEntry:
    """One declarative property definition."""

    id: str
    mapping_id: str
    property_name: str
    display_name: str
    data_type: DataType
    required: bool = False
    description: str | None = None
    default_value: Scalar | None = None
    validation_rules: ValidationRules = field(default_factory=NoRules)
    display_order: int | None = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def allowed_values(self) -> tuple[AllowedValue, ...]:
        if isinstance(self.validation_rules, ChoiceRules):
            return self.validation_rules.allowed_values
        return ()


@dataclass(frozen=True, slots=True)
class SchemaFetchKey:
    """Composite cache key and refetch trigger of a schema."""

    resource_type_id: str
    cloud_provider_id: str
    context: SchemaContext = SchemaContext.BLUEPRINT
    actor: str | None = None

    @classmethod
    def build(
        cls,
        resource_type_id: str | None,
        cloud_provider_id: str | None,
        context: SchemaContext | str = SchemaContext.BLUEPRINT,
        actor: str | None = None,
    ) -> "SchemaFetchKey":
        return cls(
            resource_type_id=resource_type_id or "",
            cloud_provider_id=cloud_provider_id or "",
            context=SchemaContext(context),
            actor=actor,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.resource_type_id.strip()) and bool(
            self.cloud_provider_id.strip()
        )

    def describe(self) -> Mapping[str, str | None]:
        return {
            "resource_type_id": self.resource_type_id,
            "cloud_provider_id": self.cloud_provider_id,
            "context": self.context.value,
            "actor": self.actor,
        }


def sort_by_display_order(
    entries: Iterable[PropertySchemaEntry],
) -> tuple[PropertySchemaEntry, ...]:
    """Return entries in render order; ties keep their fetch order."""

    def order_key(entry: PropertySchemaEntry) -> tuple[int, int]:
        if entry.display_order is None:
            return (1, 0)
        return (0, entry.display_order)

    return tuple(sorted(entries, key=order_key))


__all__ = [
    "AllowedValue",
    "ChoiceRules",
    "DataType",
    "NoRules",
    "NumberRules",
    "PropertySchemaEntry",
    "ResourceConfiguration",
    "Scalar",
    "SchemaContext",
    "SchemaFetchKey",
    "TextRules",
    "ValidationRules",
    "sort_by_display_order",
]
