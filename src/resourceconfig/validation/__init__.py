from .validation_engine import (
    ValidationResult,
    format_number,
    validate,
    validate_configuration,
)

__all__ = ["ValidationResult", "format_number", "validate", "validate_configuration"]
