"""Dependency container wiring collaborators into use-cases.

The container is built explicitly and passed to whoever needs it; there is
no process-wide instance. It owns the lifecycle of the providers it holds.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from prioritylib.core.settings.settings import PrioritySettings, configure_logging
from prioritylib.providers.identity.base import IdentityProvider, StaticIdentityProvider
from prioritylib.providers.storage.base import TaskStorageProvider
from prioritylib.providers.storage.memory.provider import MemoryTaskStorageProvider
from prioritylib.sync.coordinator import MutationCallback, OptimisticSyncCoordinator
from prioritylib.usecases.tasks import TaskUseCases

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Holds storage, identity, settings and the clock for one application."""

    def __init__(
        self,
        storage: TaskStorageProvider,
        identity: IdentityProvider,
        settings: Optional[PrioritySettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.identity = identity
        self.settings = settings or PrioritySettings()
        self.clock = clock
        self._task_use_cases: Optional[TaskUseCases] = None

    @property
    def task_use_cases(self) -> TaskUseCases:
        """Use-cases bound to this container, created on first access."""
        if self._task_use_cases is None:
            self._task_use_cases = TaskUseCases(self.storage, self.settings, self.clock)
        return self._task_use_cases

    def create_coordinator(
        self,
        on_success: Optional[MutationCallback] = None,
        on_error: Optional[MutationCallback] = None,
    ) -> OptimisticSyncCoordinator:
        """A fresh coordinator for one dashboard session."""
        return OptimisticSyncCoordinator(
            self.task_use_cases,
            self.identity,
            on_success=on_success,
            on_error=on_error,
            clock=self.clock,
        )

    async def initialize(self) -> None:
        configure_logging(self.settings)
        await self.storage.initialize()
        initialize_identity = getattr(self.identity, "initialize", None)
        if initialize_identity is not None:
            await initialize_identity()
        logger.info(f"Service container initialized ({self.settings.environment})")

    async def shutdown(self) -> None:
        shutdown_identity = getattr(self.identity, "shutdown", None)
        if shutdown_identity is not None:
            await shutdown_identity()
        await self.storage.shutdown()
        logger.info("Service container shut down")

    async def __aenter__(self) -> "ServiceContainer":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


def create_memory_container(
    user_id: Optional[str] = None,
    settings: Optional[PrioritySettings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> ServiceContainer:
    """Container backed by in-memory storage and a static identity."""
    return ServiceContainer(
        storage=MemoryTaskStorageProvider(clock=clock),
        identity=StaticIdentityProvider(user_id),
        settings=settings,
        clock=clock,
    )
