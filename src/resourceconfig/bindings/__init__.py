from .binding_controller import ResourceBindingController
from .binding_models import (
    AffectedResource,
    CloudProviderOption,
    ProviderChangeImpact,
    ResourceBinding,
    ResourceTypeOption,
)

__all__ = [
    "AffectedResource",
    "CloudProviderOption",
    "ProviderChangeImpact",
    "ResourceBinding",
    "ResourceBindingController",
    "ResourceTypeOption",
]
