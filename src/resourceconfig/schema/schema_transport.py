"""Transports that load property schemas from the platform API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ..exceptions import FetchError, SchemaNotFound
from .schema_models import SchemaFetchKey

logger = logging.getLogger(__name__)


class SchemaTransport(Protocol):
    """Anything able to return the raw schema body for a key."""

    async def fetch_schema(self, key: SchemaFetchKey) -> Any:
        """Return the decoded JSON body or raise :class:`FetchError`."""


def schema_route(key: SchemaFetchKey) -> str:
    """Return the API path serving the schema for ``key``."""

    return (
        f"/{key.context.route_prefix}/resource-schema/"
        f"{quote(key.resource_type_id, safe='')}/{quote(key.cloud_provider_id, safe='')}"
    )


@dataclass(slots=True)
class HttpSchemaTransport:
    """Fetch schemas over HTTP using a shared :class:`httpx.AsyncClient`."""

    client: httpx.AsyncClient
    api_key: str | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    def _headers(self, key: SchemaFetchKey) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        elif key.actor:
            headers["X-Auth-Request-Email"] = key.actor
            headers["X-Auth-Request-User"] = key.actor
        return headers

    async def fetch_schema(self, key: SchemaFetchKey) -> Any:
        route = schema_route(key)
        try:
            response = await self.client.get(route, headers=self._headers(key))
        except httpx.TimeoutException as exc:
            self.log.warning("schema.transport.timeout", extra={"route": route})
            raise FetchError("Request timed out while loading property schema") from exc
        except httpx.HTTPError as exc:
            self.log.warning(
                "schema.transport.failed", extra={"route": route, "error": str(exc)}
            )
            raise FetchError(f"Network error: {exc}") from exc

        if response.status_code == 404:
            raise SchemaNotFound(
                "No property schema is defined for this resource type and cloud "
                "provider combination"
            )
        if response.status_code >= 500:
            raise FetchError(
                f"Server error while loading property schema (status {response.status_code})"
            )
        if response.status_code != 200:
            raise FetchError(
                f"Failed to load property schema (status {response.status_code})"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError("Malformed property schema response: body is not JSON") from exc


__all__ = ["HttpSchemaTransport", "SchemaTransport", "schema_route"]
