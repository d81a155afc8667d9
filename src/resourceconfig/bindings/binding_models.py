"""Resource list entries managed by :class:`ResourceBindingController`."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping
from uuid import uuid4

from ..schema.schema_models import ResourceConfiguration

DEFAULT_RESOURCE_NAME = "New Resource"


@dataclass(slots=True)
class ResourceBinding:
    """One resource of a blueprint or stack together with its configuration."""

    resource_type_id: str
    cloud_provider_id: str
    name: str
    configuration: ResourceConfiguration = field(default_factory=dict)
    id: str | None = None
    uid: str = field(default_factory=lambda: uuid4().hex)

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def snapshot(self) -> "ResourceBinding":
        return replace(self, configuration=dict(self.configuration))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ResourceBinding":
        """Build a binding from a saved resource (camelCase API keys)."""

        return cls(
            resource_type_id=str(payload.get("resourceTypeId") or ""),
            cloud_provider_id=str(payload.get("cloudProviderId") or ""),
            name=str(payload.get("name") or DEFAULT_RESOURCE_NAME),
            configuration=dict(payload.get("configuration") or {}),
            id=payload.get("id"),
        )


@dataclass(frozen=True, slots=True)
class ResourceTypeOption:
    id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class CloudProviderOption:
    id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class AffectedResource:
    name: str
    cloud_provider_name: str


@dataclass(frozen=True, slots=True)
class ProviderChangeImpact:
    """Result of requesting a new set of supported cloud providers."""

    requested: tuple[str, ...]
    affected: tuple[AffectedResource, ...] = ()

    @property
    def needs_confirmation(self) -> bool:
        return bool(self.affected)


__all__ = [
    "AffectedResource",
    "CloudProviderOption",
    "DEFAULT_RESOURCE_NAME",
    "ProviderChangeImpact",
    "ResourceBinding",
    "ResourceTypeOption",
]
