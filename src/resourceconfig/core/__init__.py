"""Base infrastructure for the engine (configuration)."""

from .config import AppConfig, load_config

__all__ = ["AppConfig", "load_config"]
