"""Application root: builds and owns the shared engine components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import httpx

from ..bindings.binding_controller import ResourceBindingController
from ..bindings.binding_models import CloudProviderOption, ResourceTypeOption
from ..core.config import AppConfig
from ..forms.dynamic_form import DynamicResourceForm, OnChange
from ..logging import configure_logging
from ..schema.schema_cache import SchemaCache
from ..schema.schema_models import Scalar, SchemaContext
from ..schema.schema_transport import HttpSchemaTransport, SchemaTransport

logger = logging.getLogger(__name__)


def _coerce_app_config(config: Mapping[str, Any] | AppConfig | None) -> AppConfig:
    if isinstance(config, AppConfig):
        return config
    if isinstance(config, Mapping):
        return AppConfig(**dict(config))
    return AppConfig.build_default()


@dataclass(slots=True)
class ServiceContainer:
    """Holds the schema cache and its transport for the application lifetime.

    Consumers receive the cache by reference through the factory methods;
    :meth:`aclose` releases the HTTP client when the container created it.
    """

    config: AppConfig
    cache: SchemaCache
    http_client: httpx.AsyncClient | None = None
    _owns_client: bool = field(default=False, repr=False)

    @property
    def default_context(self) -> SchemaContext:
        return SchemaContext(self.config.default_context)

    def create_form(
        self,
        *,
        resource_type_id: str | None,
        cloud_provider_id: str | None,
        configuration: Mapping[str, Scalar] | None,
        on_change: OnChange,
        context: SchemaContext | str | None = None,
        actor: str | None = None,
        is_edit_mode: bool = False,
        disabled: bool = False,
    ) -> DynamicResourceForm:
        return DynamicResourceForm(
            self.cache,
            resource_type_id=resource_type_id,
            cloud_provider_id=cloud_provider_id,
            configuration=configuration,
            on_change=on_change,
            context=context or self.default_context,
            actor=actor,
            is_edit_mode=is_edit_mode,
            disabled=disabled,
        )

    def create_controller(
        self,
        *,
        context: SchemaContext | str | None = None,
        actor: str | None = None,
        is_edit_mode: bool = False,
        resource_types: Iterable[ResourceTypeOption] = (),
        cloud_providers: Iterable[CloudProviderOption] = (),
        supported_cloud_provider_ids: Iterable[str] = (),
    ) -> ResourceBindingController:
        return ResourceBindingController(
            self.cache,
            context=context or self.default_context,
            actor=actor,
            is_edit_mode=is_edit_mode,
            resource_types=resource_types,
            cloud_providers=cloud_providers,
            supported_cloud_provider_ids=supported_cloud_provider_ids,
        )

    async def aclose(self) -> None:
        self.cache.clear_cache()
        if self._owns_client and self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None


def build_container(
    config: Mapping[str, Any] | AppConfig | None = None,
    *,
    transport: SchemaTransport | None = None,
    http_client: httpx.AsyncClient | None = None,
    setup_logging: bool = False,
) -> ServiceContainer:
    """Construct a :class:`ServiceContainer`.

    A custom ``transport`` replaces HTTP entirely; otherwise ``http_client``
    (or a client built from ``config``) backs an :class:`HttpSchemaTransport`.
    """

    app_config = _coerce_app_config(config)
    if setup_logging:
        configure_logging(app_config.log_level, json=app_config.log_json)

    owns_client = False
    if transport is None:
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=app_config.api_base_url,
                timeout=app_config.request_timeout_seconds,
            )
            owns_client = True
        transport = HttpSchemaTransport(client=http_client, api_key=app_config.api_key)

    logger.info(
        "container.built",
        extra={
            "api_base_url": app_config.api_base_url,
            "custom_transport": not isinstance(transport, HttpSchemaTransport),
        },
    )
    return ServiceContainer(
        config=app_config,
        cache=SchemaCache(transport),
        http_client=http_client,
        _owns_client=owns_client,
    )


__all__ = ["ServiceContainer", "build_container"]
