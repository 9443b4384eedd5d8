"""Dependency container."""

from prioritylib.core.container.container import ServiceContainer, create_memory_container

__all__ = ["ServiceContainer", "create_memory_container"]
