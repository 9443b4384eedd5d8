"""Identity collaborator."""

from prioritylib.providers.identity.base import IdentityProvider, StaticIdentityProvider

__all__ = ["IdentityProvider", "StaticIdentityProvider"]
