"""Schema-driven property forms."""

from .dynamic_form import DynamicResourceForm, OnChange
from .form_models import (
    EMPTY_MESSAGE,
    LOADING_MESSAGE,
    MISSING_KEY_MESSAGE,
    FormState,
    FormView,
)
from .property_input import (
    InputOption,
    PropertyInput,
    WidgetKind,
    build_property_input,
    parse_raw_input,
)

__all__ = [
    "DynamicResourceForm",
    "EMPTY_MESSAGE",
    "FormState",
    "FormView",
    "InputOption",
    "LOADING_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "OnChange",
    "PropertyInput",
    "WidgetKind",
    "build_property_input",
    "parse_raw_input",
]
