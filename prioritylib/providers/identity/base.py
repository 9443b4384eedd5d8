"""Identity collaborator: who is acting right now."""

import logging
from typing import Optional, Protocol, runtime_checkable

from prioritylib.providers.core.base import Provider, ProviderSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class IdentityProvider(Protocol):
    """Anything that can name the authenticated user."""

    async def current_user_id(self) -> Optional[str]:
        """Return the acting user's id, or None when nobody is signed in."""
        ...


class StaticIdentityProvider(Provider[ProviderSettings]):
    """Identity provider that always reports the same user.

    Used by tests and single-user deployments. ``sign_in`` and ``sign_out``
    switch the reported user.
    """

    def __init__(self, user_id: Optional[str] = None, name: str = "static-identity"):
        super().__init__(name=name, provider_type="identity", settings=ProviderSettings())
        self._user_id = user_id

    async def _initialize(self) -> None:
        pass

    async def current_user_id(self) -> Optional[str]:
        return self._user_id

    def sign_in(self, user_id: str) -> None:
        logger.debug(f"Identity '{self.name}' now reports user {user_id}")
        self._user_id = user_id

    def sign_out(self) -> None:
        self._user_id = None
