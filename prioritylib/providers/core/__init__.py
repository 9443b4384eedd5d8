"""Provider base classes."""

from prioritylib.providers.core.base import Provider, ProviderSettings

__all__ = ["Provider", "ProviderSettings"]
