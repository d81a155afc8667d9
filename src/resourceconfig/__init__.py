"""Schema-driven configuration engine for blueprint and stack resources.

The engine resolves which properties a resource exposes from the triple
(resource type, cloud provider, context), caches those schemas, validates
edited values and keeps every resource's configuration consistent when the
governing dimensions change.
"""

from .bindings import ResourceBinding, ResourceBindingController
from .exceptions import AppError, FetchError, SaveBlockedError
from .forms import DynamicResourceForm, FormState, FormView
from .schema import PropertySchemaEntry, SchemaCache, SchemaContext, SchemaFetchKey
from .services import ServiceContainer, build_container
from .validation import ValidationResult, validate, validate_configuration

__all__ = [
    "AppError",
    "DynamicResourceForm",
    "FetchError",
    "FormState",
    "FormView",
    "PropertySchemaEntry",
    "ResourceBinding",
    "ResourceBindingController",
    "SaveBlockedError",
    "SchemaCache",
    "SchemaContext",
    "SchemaFetchKey",
    "ServiceContainer",
    "ValidationResult",
    "build_container",
    "validate",
    "validate_configuration",
]
