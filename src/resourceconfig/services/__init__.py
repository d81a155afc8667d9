"""Composition of the engine components."""

from .container import ServiceContainer, build_container

__all__ = ["ServiceContainer", "build_container"]
