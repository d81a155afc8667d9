"""Unit tests for per-field property validation."""

from __future__ import annotations

import pytest

from src.resourceconfig.schema.schema_models import (
    AllowedValue,
    ChoiceRules,
    DataType,
    NumberRules,
    PropertySchemaEntry,
    TextRules,
)
from src.resourceconfig.validation.validation_engine import (
    ValidationResult,
    validate,
    validate_configuration,
)

pytestmark = pytest.mark.unit


def make_entry(
    data_type: DataType,
    *,
    name: str = "prop",
    display_name: str = "Prop",
    required: bool = False,
    rules=None,
) -> PropertySchemaEntry:
    extra = {} if rules is None else {"validation_rules": rules}
    return PropertySchemaEntry(
        id=f"id-{name}",
        mapping_id="mapping",
        property_name=name,
        display_name=display_name,
        data_type=data_type,
        required=required,
        **extra,
    )


CAPACITY = make_entry(
    DataType.LIST,
    display_name="Capacity Provider",
    required=True,
    rules=ChoiceRules(
        allowed_values=(
            AllowedValue("FARGATE", "Fargate"),
            AllowedValue("FARGATE_SPOT", "Fargate Spot"),
            AllowedValue("EC2", "EC2"),
        )
    ),
)
COUNT = make_entry(DataType.NUMBER, display_name="Desired Count", rules=NumberRules(1, 10))


@pytest.mark.parametrize("value", [None, "", "   "])
def test_required_field_rejects_empty_values(value) -> None:
    result = validate(CAPACITY, value)

    assert result == ValidationResult(False, "Capacity Provider is required")


@pytest.mark.parametrize("value", [None, ""])
def test_optional_empty_field_is_valid(value) -> None:
    assert validate(COUNT, value).valid


def test_required_check_runs_before_type_checks() -> None:
    entry = make_entry(DataType.NUMBER, display_name="Port", required=True, rules=NumberRules(1, 65535))

    assert validate(entry, "").error_message == "Port is required"


@pytest.mark.parametrize("value", [1, 10, 5.5, "7", "1.0"])
def test_number_inside_bounds_is_valid(value) -> None:
    assert validate(COUNT, value).valid


@pytest.mark.parametrize("value", [0, 11, "-3", 10.5])
def test_number_outside_bounds(value) -> None:
    assert validate(COUNT, value).error_message == "Desired Count must be between 1 and 10"


def test_one_sided_number_bounds() -> None:
    at_least = make_entry(DataType.NUMBER, display_name="Size", rules=NumberRules(min=20))
    at_most = make_entry(DataType.NUMBER, display_name="Size", rules=NumberRules(max=2.5))

    assert validate(at_least, 19).error_message == "Size must be at least 20"
    assert validate(at_least, 10_000).valid
    assert validate(at_most, 3).error_message == "Size must be at most 2.5"


@pytest.mark.parametrize("value", ["abc", "1e", True, "nan"])
def test_non_numeric_values_are_rejected(value) -> None:
    assert validate(COUNT, value).error_message == "Desired Count must be a valid number"


def test_number_without_rules_accepts_any_number() -> None:
    entry = make_entry(DataType.NUMBER, display_name="Anything")

    assert validate(entry, -1_000_000).valid
    assert not validate(entry, "x").valid


def test_list_value_must_be_an_allowed_option() -> None:
    assert validate(CAPACITY, "EC2").valid
    assert (
        validate(CAPACITY, "SPOT").error_message
        == "Capacity Provider must be one of: FARGATE, FARGATE_SPOT, EC2"
    )


def test_list_comparison_is_case_sensitive() -> None:
    assert not validate(CAPACITY, "fargate").valid


def test_list_without_options_accepts_free_text() -> None:
    entry = make_entry(DataType.LIST, display_name="Tags")

    assert validate(entry, "a,b,c").valid


def test_boolean_accepts_only_true_or_false() -> None:
    entry = make_entry(DataType.BOOLEAN, display_name="Enable Logging")

    assert validate(entry, True).valid
    assert validate(entry, "false").valid
    assert validate(entry, "yes").error_message == "Enable Logging must be true or false"
    assert not validate(entry, 1).valid


def test_string_length_and_pattern_rules() -> None:
    entry = make_entry(
        DataType.STRING,
        display_name="Bucket",
        rules=TextRules(min_length=3, max_length=8, pattern=r"^[a-z-]+$"),
    )

    assert validate(entry, "logs").valid
    assert validate(entry, "ab").error_message == "Bucket must be at least 3 characters"
    assert validate(entry, "abcdefghij").error_message == "Bucket must be at most 8 characters"
    assert validate(entry, "Logs").error_message == "Bucket format is invalid"


def test_invalid_pattern_does_not_block_input() -> None:
    entry = make_entry(DataType.STRING, rules=TextRules(pattern="(["))

    assert validate(entry, "anything").valid


def test_validate_configuration_collects_messages_per_property() -> None:
    entries = [
        CAPACITY,
        make_entry(
            DataType.NUMBER,
            name="count",
            display_name="Desired Count",
            rules=NumberRules(1, 10),
        ),
    ]

    errors = validate_configuration(entries, {"count": 42, "unknown": "kept"})

    assert errors == {
        "prop": "Capacity Provider is required",
        "count": "Desired Count must be between 1 and 10",
    }
    assert validate_configuration(entries, {"prop": "EC2", "count": 3}) == {}
