"""Application configuration for the resource configuration engine.

Values come from environment variables prefixed with ``RESOURCECONFIG_``.
The schema endpoint itself lives in the platform API; only its base URL and
the transport timeout are configured here.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Pydantic settings container for the configuration engine."""

    model_config = SettingsConfigDict(env_prefix="RESOURCECONFIG_")

    api_base_url: str = Field(
        default="http://localhost:8082/api/v1",
        description="Base URL of the platform API serving resource schemas.",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        ge=0.1,
        description="Timeout applied to schema requests in seconds.",
    )
    api_key: str | None = Field(
        default=None,
        description="Optional API key sent as a bearer token.",
    )
    default_context: Literal["blueprint", "stack"] = Field(
        default="blueprint",
        description="Context used when callers do not specify one.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
    )
    log_json: bool = Field(
        default=True,
        description="Render structured log lines as JSON.",
    )

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


def load_config() -> AppConfig:
    """Load configuration from environment."""

    return AppConfig.build_default()


__all__ = ["AppConfig", "load_config"]
