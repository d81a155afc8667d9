"""Domain level exceptions for the resource configuration engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

__all__ = [
    "AppError",
    "FetchError",
    "SchemaNotFound",
    "InputRejected",
    "BindingError",
    "SaveBlockedError",
    "ResourceIssue",
    "ensure_selected",
]


class AppError(Exception):
    """Base class for application specific errors."""


class FetchError(AppError):
    """Raised when a property schema cannot be fetched or parsed."""


class SchemaNotFound(FetchError):
    """Raised by transports when no schema exists for the requested mapping."""


class InputRejected(AppError):
    """Raised when raw widget text cannot be represented as a property value."""


class BindingError(AppError):
    """Raised for invalid resource list operations."""


@dataclass(frozen=True, slots=True)
class ResourceIssue:
    """One reason why the resource list cannot be saved yet."""

    message: str
    index: int | None = None
    property_name: str | None = None

    def format(self) -> str:
        if self.index is None:
            return self.message
        return f"resource #{self.index + 1}: {self.message}"


class SaveBlockedError(AppError):
    """Raised when the resource list still has validation issues."""

    def __init__(self, issues: Sequence[ResourceIssue]) -> None:
        self.issues = tuple(issues)
        summary = "; ".join(issue.format() for issue in self.issues)
        super().__init__(f"cannot save resources: {summary}")


def ensure_selected(value: str | None, *, message: str) -> str:
    """Ensure an identifier was chosen, otherwise raise :class:`BindingError`."""

    if value is None or not str(value).strip():
        raise BindingError(message)
    return value
