"""View models produced by :class:`DynamicResourceForm`."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from .property_input import PropertyInput

LOADING_MESSAGE = "Loading properties..."
EMPTY_MESSAGE = (
    "No cloud-specific properties are configured for this resource type and "
    "cloud provider combination. Contact your administrator to add properties."
)
MISSING_KEY_MESSAGE = "Resource type and cloud provider must be selected"
RETRY_LABEL = "Retry"


class FormState(str, Enum):
    """Lifecycle states of a dynamic form."""

    LOADING = "loading"
    SUCCESS_EMPTY = "success_empty"
    SUCCESS_POPULATED = "success_populated"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class FormView:
    """Everything a renderer needs to draw the form in its current state."""

    state: FormState
    fields: tuple[PropertyInput, ...] = ()
    message: str | None = None
    role: Literal["status", "alert"] | None = None
    show_retry: bool = False
    retry_enabled: bool = False
    retry_label: str = RETRY_LABEL


__all__ = [
    "EMPTY_MESSAGE",
    "FormState",
    "FormView",
    "LOADING_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "RETRY_LABEL",
]
