"""Schema-driven form for the cloud-specific configuration of one resource.

The form is a controlled component: the configuration it edits belongs to the
caller and every change leaves through ``on_change``. The form only owns the
load state of the schema governing that configuration.

State machine::

    LOADING ──> SUCCESS_EMPTY
            ──> SUCCESS_POPULATED
            ──> ERROR ──(retry)──> LOADING

Any change of the fetch key re-enters ``LOADING``. Each load is tagged with a
generation number; a result whose generation is no longer current is dropped,
so only the response for the latest key is ever applied.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ..exceptions import InputRejected
from ..schema.schema_cache import GENERIC_FETCH_ERROR, Schema, SchemaCache
from ..schema.schema_models import (
    PropertySchemaEntry,
    ResourceConfiguration,
    Scalar,
    SchemaContext,
    SchemaFetchKey,
)
from ..validation.validation_engine import (
    ValidationResult,
    validate,
    validate_configuration,
)
from .form_models import (
    EMPTY_MESSAGE,
    LOADING_MESSAGE,
    MISSING_KEY_MESSAGE,
    FormState,
    FormView,
)
from .property_input import build_property_input, parse_raw_input

OnChange = Callable[[ResourceConfiguration], None]

_UNSET: Any = object()


def _error_message(exc: BaseException) -> str:
    return str(exc).strip() or GENERIC_FETCH_ERROR


class DynamicResourceForm:
    """Load, render and edit the properties of one resource."""

    def __init__(
        self,
        cache: SchemaCache,
        *,
        resource_type_id: str | None,
        cloud_provider_id: str | None,
        configuration: Mapping[str, Scalar] | None,
        on_change: OnChange,
        context: SchemaContext | str = SchemaContext.BLUEPRINT,
        actor: str | None = None,
        is_edit_mode: bool = False,
        disabled: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._cache = cache
        self._key = SchemaFetchKey.build(
            resource_type_id, cloud_provider_id, context, actor
        )
        self._configuration: ResourceConfiguration = dict(configuration or {})
        self._on_change = on_change
        self.is_edit_mode = is_edit_mode
        self.disabled = disabled
        self._logger = logger or logging.getLogger(__name__)

        self._state = FormState.LOADING
        self._entries: Schema = ()
        self._error: str | None = None
        self._field_errors: dict[str, str] = {}
        self._generation = 0
        self._seeded_for: SchemaFetchKey | None = None
        self._mounted = True

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def key(self) -> SchemaFetchKey:
        return self._key

    @property
    def entries(self) -> Schema:
        return self._entries

    @property
    def configuration(self) -> ResourceConfiguration:
        return dict(self._configuration)

    @property
    def error_message(self) -> str | None:
        return self._error

    @property
    def field_errors(self) -> dict[str, str]:
        return dict(self._field_errors)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def load(self) -> FormState:
        """Fetch the schema for the current key (mount)."""

        return await self._load(refresh=False)

    async def retry(self) -> bool:
        """Reload after a failure, bypassing the cached schema.

        Returns ``False`` without doing anything while the form is disabled.
        """

        if self.disabled:
            self._logger.info("forms.retry.ignored_disabled", extra=self._log_extra())
            return False
        await self._load(refresh=True)
        return True

    async def update(
        self,
        *,
        resource_type_id: str | None = _UNSET,
        cloud_provider_id: str | None = _UNSET,
        context: SchemaContext | str = _UNSET,
        actor: str | None = _UNSET,
        configuration: Mapping[str, Scalar] | None = _UNSET,
        is_edit_mode: bool = _UNSET,
        disabled: bool = _UNSET,
    ) -> FormState:
        """Apply new inputs; a changed fetch key triggers a reload."""

        if configuration is not _UNSET:
            self._configuration = dict(configuration or {})
        if is_edit_mode is not _UNSET:
            self.is_edit_mode = is_edit_mode
        if disabled is not _UNSET:
            self.disabled = disabled

        current = self._key
        key = SchemaFetchKey.build(
            current.resource_type_id if resource_type_id is _UNSET else resource_type_id,
            current.cloud_provider_id if cloud_provider_id is _UNSET else cloud_provider_id,
            current.context if context is _UNSET else context,
            current.actor if actor is _UNSET else actor,
        )
        if key == current:
            return self._state
        self._key = key
        return await self._load(refresh=False)

    def unmount(self) -> None:
        """Detach the form; results of pending loads are dropped."""

        self._mounted = False
        self._generation += 1

    async def _load(self, *, refresh: bool) -> FormState:
        self._generation += 1
        token = self._generation
        key = self._key
        self._state = FormState.LOADING
        self._entries = ()
        self._error = None
        self._field_errors = {}

        if not key.is_complete:
            self._fail(MISSING_KEY_MESSAGE)
            return self._state

        try:
            entries = await self._cache.get(key, refresh=refresh)
        except Exception as exc:
            if token != self._generation:
                self._logger.debug(
                    "forms.load.stale_failure_dropped", extra=self._log_extra(key)
                )
                return self._state
            self._fail(_error_message(exc))
            return self._state

        if token != self._generation:
            self._logger.info(
                "forms.load.stale_result_dropped",
                extra={**self._log_extra(key), "generation": token},
            )
            return self._state
        self._apply(key, entries)
        return self._state

    def _fail(self, message: str) -> None:
        self._state = FormState.ERROR
        self._error = message
        self._logger.warning(
            "forms.load.failed", extra={**self._log_extra(), "error": message}
        )

    def _apply(self, key: SchemaFetchKey, entries: Schema) -> None:
        self._entries = entries
        if not entries:
            self._state = FormState.SUCCESS_EMPTY
            return
        self._state = FormState.SUCCESS_POPULATED
        if not self.is_edit_mode and self._seeded_for != key:
            self._seeded_for = key
            self._seed_defaults()

    def _seed_defaults(self) -> None:
        merged = dict(self._configuration)
        seeded: list[str] = []
        for entry in self._entries:
            if entry.has_default and merged.get(entry.property_name) is None:
                merged[entry.property_name] = entry.default_value  # type: ignore[assignment]
                seeded.append(entry.property_name)
        if seeded:
            self._logger.info(
                "forms.defaults.seeded",
                extra={**self._log_extra(), "properties": seeded},
            )
            self._emit(merged)

    def _emit(self, configuration: ResourceConfiguration) -> None:
        self._configuration = dict(configuration)
        self._on_change(dict(configuration))

    def entry(self, property_name: str) -> PropertySchemaEntry:
        for entry in self._entries:
            if entry.property_name == property_name:
                return entry
        raise KeyError(property_name)

    def set_value(self, property_name: str, value: Scalar | None) -> ValidationResult:
        """Store an edited value and notify the caller when it changed.

        The value is kept even when invalid; the error is shown next to the
        field until it is corrected.
        """

        if self.disabled:
            raise InputRejected("form is disabled")
        entry = self.entry(property_name)
        result = validate(entry, value)
        if result.valid:
            self._field_errors.pop(property_name, None)
        else:
            self._field_errors[property_name] = result.error_message or ""

        updated = dict(self._configuration)
        if value is None:
            updated.pop(property_name, None)
        else:
            updated[property_name] = value
        if updated != self._configuration:
            self._emit(updated)
        return result

    def set_raw_input(self, property_name: str, raw: str | bool | None) -> ValidationResult:
        """Parse widget input, then behave like :meth:`set_value`."""

        return self.set_value(property_name, parse_raw_input(self.entry(property_name), raw))

    def validate_all(self) -> dict[str, str]:
        """Validate the whole configuration against the loaded schema."""

        if self._state is not FormState.SUCCESS_POPULATED:
            return {}
        self._field_errors = validate_configuration(self._entries, self._configuration)
        return dict(self._field_errors)

    def render(self) -> FormView:
        state = self._state
        if state is FormState.LOADING:
            return FormView(state=state, message=LOADING_MESSAGE)
        if state is FormState.SUCCESS_EMPTY:
            return FormView(state=state, message=EMPTY_MESSAGE, role="status")
        if state is FormState.ERROR:
            return FormView(
                state=state,
                message=self._error,
                role="alert",
                show_retry=True,
                retry_enabled=not self.disabled,
            )
        fields = tuple(
            build_property_input(
                entry,
                self._configuration.get(entry.property_name),
                error=self._field_errors.get(entry.property_name),
                disabled=self.disabled,
            )
            for entry in self._entries
        )
        return FormView(state=state, fields=fields)

    def _log_extra(self, key: SchemaFetchKey | None = None) -> dict[str, Any]:
        return dict((key or self._key).describe())


__all__ = ["DynamicResourceForm", "OnChange"]
