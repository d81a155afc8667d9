"""Resource list of a blueprint or stack and its per-resource forms."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Sequence

from ..exceptions import BindingError, ResourceIssue, SaveBlockedError, ensure_selected
from ..forms.dynamic_form import DynamicResourceForm
from ..forms.form_models import FormState
from ..schema.schema_cache import SchemaCache
from ..schema.schema_models import ResourceConfiguration, Scalar, SchemaContext
from ..schema.values import encode_configuration
from ..validation.validation_engine import validate_configuration
from .binding_models import (
    DEFAULT_RESOURCE_NAME,
    AffectedResource,
    CloudProviderOption,
    ProviderChangeImpact,
    ResourceBinding,
    ResourceTypeOption,
)


class ResourceBindingController:
    """Own the resources of one artefact and the form of every resource.

    The controller is the single source of truth for save: forms only report
    configuration changes through their ``on_change`` callback, and the save
    payload is composed from the controller's own bindings.
    """

    def __init__(
        self,
        cache: SchemaCache,
        *,
        context: SchemaContext | str = SchemaContext.BLUEPRINT,
        actor: str | None = None,
        is_edit_mode: bool = False,
        resource_types: Iterable[ResourceTypeOption] = (),
        cloud_providers: Iterable[CloudProviderOption] = (),
        supported_cloud_provider_ids: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._cache = cache
        self.context = SchemaContext(context)
        self.actor = actor
        self.is_edit_mode = is_edit_mode
        self._resource_types = {option.id: option for option in resource_types}
        self._cloud_providers = {option.id: option for option in cloud_providers}
        self._supported: list[str] = list(supported_cloud_provider_ids)
        self._pending_supported: list[str] | None = None
        self._resources: list[ResourceBinding] = []
        self._forms: dict[str, DynamicResourceForm] = {}
        self._disabled = False
        self._logger = logger or logging.getLogger(__name__)

    @property
    def resources(self) -> list[ResourceBinding]:
        return [binding.snapshot() for binding in self._resources]

    @property
    def supported_cloud_provider_ids(self) -> list[str]:
        return list(self._supported)

    @property
    def pending_supported_cloud_provider_ids(self) -> list[str] | None:
        return None if self._pending_supported is None else list(self._pending_supported)

    def form_for(self, index: int) -> DynamicResourceForm:
        return self._forms[self._binding(index).uid]

    def _binding(self, index: int) -> ResourceBinding:
        if not 0 <= index < len(self._resources):
            raise IndexError(f"resource index {index} out of range")
        return self._resources[index]

    def _find(self, uid: str) -> ResourceBinding | None:
        for binding in self._resources:
            if binding.uid == uid:
                return binding
        return None

    def _mount(self, binding: ResourceBinding) -> DynamicResourceForm:
        def on_change(configuration: ResourceConfiguration) -> None:
            if self._forms.get(binding.uid) is not form:
                self._logger.debug(
                    "bindings.change.ignored_unmounted", extra={"uid": binding.uid}
                )
                return
            self.apply_configuration(binding.uid, configuration)

        form = DynamicResourceForm(
            self._cache,
            resource_type_id=binding.resource_type_id,
            cloud_provider_id=binding.cloud_provider_id,
            configuration=binding.configuration,
            on_change=on_change,
            context=self.context,
            actor=self.actor,
            is_edit_mode=self.is_edit_mode and binding.persisted,
            disabled=self._disabled,
        )
        self._forms[binding.uid] = form
        return form

    def _unmount(self, uid: str) -> None:
        form = self._forms.pop(uid, None)
        if form is not None:
            form.unmount()

    def apply_configuration(self, uid: str, configuration: Mapping[str, Scalar]) -> None:
        """Store the configuration reported by the form of resource ``uid``."""

        binding = self._find(uid)
        if binding is None:
            self._logger.debug("bindings.change.ignored_removed", extra={"uid": uid})
            return
        binding.configuration = dict(configuration)

    async def add_resource(
        self, resource_type_id: str, cloud_provider_id: str
    ) -> ResourceBinding:
        """Append a resource with an empty configuration and load its form."""

        ensure_selected(
            cloud_provider_id, message="Please select a cloud provider for this resource"
        )
        ensure_selected(resource_type_id, message="Please select a resource type")
        option = self._resource_types.get(resource_type_id)
        binding = ResourceBinding(
            resource_type_id=resource_type_id,
            cloud_provider_id=cloud_provider_id,
            name=option.display_name if option else DEFAULT_RESOURCE_NAME,
        )
        self._resources.append(binding)
        self._logger.info(
            "bindings.resource.added",
            extra={
                "uid": binding.uid,
                "resource_type_id": resource_type_id,
                "cloud_provider_id": cloud_provider_id,
            },
        )
        await self._mount(binding).load()
        return binding.snapshot()

    async def load_existing(
        self, resources: Iterable[ResourceBinding | Mapping[str, Any]]
    ) -> None:
        """Replace the resource list with saved resources and load their forms."""

        for uid in list(self._forms):
            self._unmount(uid)
        self._resources = [
            item.snapshot() if isinstance(item, ResourceBinding) else ResourceBinding.from_payload(item)
            for item in resources
        ]
        forms = [self._mount(binding) for binding in self._resources]
        await asyncio.gather(*(form.load() for form in forms))

    def remove_resource(self, index: int) -> ResourceBinding:
        binding = self._binding(index)
        del self._resources[index]
        self._unmount(binding.uid)
        self._logger.info("bindings.resource.removed", extra={"uid": binding.uid})
        return binding

    def rename_resource(self, index: int, name: str) -> None:
        self._binding(index).name = name

    async def change_cloud_provider(self, index: int, cloud_provider_id: str) -> None:
        """Move a resource to another cloud provider.

        The configuration is replaced with an empty one before the form for
        the new provider is mounted; nothing from the previous provider is
        carried over.
        """

        binding = self._binding(index)
        ensure_selected(
            cloud_provider_id, message="Please select a cloud provider for this resource"
        )
        if cloud_provider_id == binding.cloud_provider_id:
            return
        previous = binding.cloud_provider_id
        self._unmount(binding.uid)
        binding.cloud_provider_id = cloud_provider_id
        binding.configuration = {}
        self._logger.info(
            "bindings.resource.provider_changed",
            extra={"uid": binding.uid, "from": previous, "to": cloud_provider_id},
        )
        await self._mount(binding).load()

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled
        for form in self._forms.values():
            form.disabled = disabled

    def _provider_name(self, provider_id: str) -> str:
        option = self._cloud_providers.get(provider_id)
        return option.display_name if option else "Unknown"

    def request_supported_providers(self, provider_ids: Sequence[str]) -> ProviderChangeImpact:
        """Change the supported providers, holding removals that affect resources."""

        requested = list(dict.fromkeys(provider_ids))
        removed = {pid for pid in self._supported if pid not in requested}
        affected = tuple(
            AffectedResource(
                name=binding.name,
                cloud_provider_name=self._provider_name(binding.cloud_provider_id),
            )
            for binding in self._resources
            if binding.cloud_provider_id in removed
        )
        if affected:
            self._pending_supported = requested
        else:
            self._supported = requested
            self._pending_supported = None
        return ProviderChangeImpact(requested=tuple(requested), affected=affected)

    def confirm_supported_providers(self) -> list[ResourceBinding]:
        """Apply the pending change and drop resources of removed providers."""

        if self._pending_supported is None:
            raise BindingError("no supported provider change is pending")
        self._supported = self._pending_supported
        self._pending_supported = None
        kept: list[ResourceBinding] = []
        dropped: list[ResourceBinding] = []
        for binding in self._resources:
            (kept if binding.cloud_provider_id in self._supported else dropped).append(binding)
        for binding in dropped:
            self._unmount(binding.uid)
        self._resources = kept
        return dropped

    def cancel_supported_providers(self) -> None:
        self._pending_supported = None

    def validate(self) -> list[ResourceIssue]:
        """Return every reason that currently blocks saving."""

        issues: list[ResourceIssue] = []
        if self.context is SchemaContext.BLUEPRINT and not self._supported:
            issues.append(ResourceIssue("Please select at least one cloud provider"))
        for index, binding in enumerate(self._resources):
            if not binding.name.strip():
                issues.append(ResourceIssue("Display name is required", index=index))
            form = self._forms[binding.uid]
            if form.state is FormState.LOADING:
                issues.append(ResourceIssue("Properties are still loading", index=index))
            elif form.state is FormState.ERROR:
                issues.append(
                    ResourceIssue(
                        f"Properties could not be loaded: {form.error_message}",
                        index=index,
                    )
                )
            elif form.state is FormState.SUCCESS_POPULATED:
                errors = validate_configuration(form.entries, binding.configuration)
                issues.extend(
                    ResourceIssue(message, index=index, property_name=name)
                    for name, message in errors.items()
                )
        return issues

    def compose_save_payload(self) -> list[dict[str, Any]]:
        """Build the outbound resource list or raise :class:`SaveBlockedError`."""

        issues = self.validate()
        if issues:
            self._logger.info("bindings.save.blocked", extra={"issue_count": len(issues)})
            raise SaveBlockedError(issues)
        payload: list[dict[str, Any]] = []
        for binding in self._resources:
            entries = self._forms[binding.uid].entries
            item: dict[str, Any] = {
                "name": binding.name,
                "resourceTypeId": binding.resource_type_id,
                "cloudProviderId": binding.cloud_provider_id,
                "configuration": encode_configuration(entries, binding.configuration),
            }
            if binding.id is not None:
                item["id"] = binding.id
            payload.append(item)
        return payload


__all__ = ["ResourceBindingController"]
