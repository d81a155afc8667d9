"""Process-wide property schema cache with request coalescing."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from ..exceptions import FetchError, SchemaNotFound
from .schema_models import PropertySchemaEntry, SchemaContext, SchemaFetchKey
from .schema_payloads import parse_schema_response
from .schema_transport import SchemaTransport

Schema = tuple[PropertySchemaEntry, ...]

GENERIC_FETCH_ERROR = "Failed to load property configuration"


class SchemaCache:
    """Resolve and memoise schemas per :class:`SchemaFetchKey`.

    Results stay cached until :meth:`clear_cache` (or the per-key
    :meth:`clear_schema_cache`) is called. Concurrent requests for one key
    share a single transport call; failures are not cached.

    The cache is owned by the application root and handed to consumers; it
    holds no module level state.
    """

    def __init__(
        self,
        transport: SchemaTransport,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._entries: Dict[SchemaFetchKey, Schema] = {}
        self._in_flight: Dict[SchemaFetchKey, tuple[int, asyncio.Task[Schema]]] = {}
        self._epoch = 0
        self._logger = logger or logging.getLogger(__name__)

    async def get_schema(
        self,
        resource_type_id: str,
        cloud_provider_id: str,
        context: SchemaContext | str = SchemaContext.BLUEPRINT,
        actor: str | None = None,
        *,
        refresh: bool = False,
    ) -> Schema:
        """Return entries for the mapping sorted by display order."""

        key = SchemaFetchKey.build(resource_type_id, cloud_provider_id, context, actor)
        return await self.get(key, refresh=refresh)

    async def get(self, key: SchemaFetchKey, *, refresh: bool = False) -> Schema:
        if not key.is_complete:
            raise FetchError(
                "Resource type and cloud provider are required to load a property schema"
            )
        while True:
            if not refresh:
                cached = self._entries.get(key)
                if cached is not None:
                    self._logger.debug("schema.cache.hit", extra=dict(key.describe()))
                    return cached

            flight = self._in_flight.get(key)
            if flight is None:
                task = asyncio.create_task(self._fetch(key, self._epoch))
                self._in_flight[key] = (self._epoch, task)
                task.add_done_callback(lambda done, key=key: self._forget(key, done))
                break
            epoch, task = flight
            if epoch == self._epoch:
                self._logger.debug("schema.cache.coalesced", extra=dict(key.describe()))
                break
            # fetch started before clear_cache; one request per key at a time
            self._logger.debug(
                "schema.cache.awaiting_stale_fetch", extra=dict(key.describe())
            )
            await asyncio.wait({task})
            self._forget(key, task)
            refresh = False
        return await asyncio.shield(task)

    def peek(self, key: SchemaFetchKey) -> Schema | None:
        """Return the cached schema for ``key`` without fetching."""

        return self._entries.get(key)

    def clear_cache(self) -> None:
        """Drop every cached schema."""

        self._entries.clear()
        self._epoch += 1
        self._logger.info("schema.cache.cleared")

    def clear_schema_cache(
        self,
        resource_type_id: str,
        cloud_provider_id: str,
        context: SchemaContext | str = SchemaContext.BLUEPRINT,
        actor: str | None = None,
    ) -> None:
        """Drop the cached schema of one mapping."""

        key = SchemaFetchKey.build(resource_type_id, cloud_provider_id, context, actor)
        self._entries.pop(key, None)
        self._logger.info("schema.cache.key_cleared", extra=dict(key.describe()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def _fetch(self, key: SchemaFetchKey, epoch: int) -> Schema:
        self._logger.info("schema.fetch.started", extra=dict(key.describe()))
        try:
            body = await self._transport.fetch_schema(key)
        except SchemaNotFound:
            entries: Schema = ()
        except FetchError as exc:
            self._logger.warning(
                "schema.fetch.failed", extra={**key.describe(), "error": str(exc)}
            )
            raise
        except Exception as exc:
            self._logger.warning(
                "schema.fetch.failed", extra={**key.describe(), "error": repr(exc)}
            )
            raise FetchError(str(exc) or GENERIC_FETCH_ERROR) from exc
        else:
            entries = parse_schema_response(body)

        if epoch == self._epoch:
            self._entries[key] = entries
        self._logger.info(
            "schema.fetch.completed",
            extra={**key.describe(), "property_count": len(entries)},
        )
        return entries

    def _forget(self, key: SchemaFetchKey, task: asyncio.Task[Schema]) -> None:
        flight = self._in_flight.get(key)
        if flight is not None and flight[1] is task:
            del self._in_flight[key]


__all__ = ["GENERIC_FETCH_ERROR", "Schema", "SchemaCache"]
