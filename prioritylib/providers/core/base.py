"""Lifecycle base for collaborator adapters.

Storage and identity adapters derive from ``Provider``. Each one has a name,
a type and a frozen settings model, and is started with ``initialize`` and
stopped with ``shutdown``. Starting twice is harmless; a failed start
surfaces as ``ProviderError``.
"""

import asyncio
import logging
from typing import Any, Generic, Optional, TypeVar

from pydantic import Field

from prioritylib.core.errors.errors import ErrorContext, ProviderError
from prioritylib.core.errors.models import ProviderErrorContext
from prioritylib.core.models import StrictBaseModel

logger = logging.getLogger(__name__)


class ProviderSettings(StrictBaseModel):
    """Settings every provider understands."""

    verbose: bool = Field(default=False, description="Log every provider call at debug level")

    def with_overrides(self, **kwargs: Any) -> 'ProviderSettings':
        """Validated copy with ``kwargs`` applied. Unknown keys are rejected."""
        return type(self).model_validate({**self.model_dump(), **kwargs})


T = TypeVar('T', bound=ProviderSettings)


class Provider(Generic[T]):
    """Named adapter with a one-shot start and an idempotent stop."""

    def __init__(self, name: str, provider_type: str, settings: T):
        if not name:
            raise ValueError("Provider name must not be empty")
        self.name = name
        self.provider_type = provider_type
        self.settings = settings
        self._initialized = False
        self._setup_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _start_failure(self, error: Exception) -> ProviderError:
        return ProviderError(
            message=f"Could not start {self.provider_type} provider '{self.name}': {error}",
            context=ErrorContext.create(
                error_type="provider_start",
                error_location=f"{type(self).__name__}.initialize",
                component=self.name,
                operation="initialize",
            ),
            provider_context=ProviderErrorContext(
                provider_name=self.name,
                provider_type=self.provider_type,
                operation="initialize",
            ),
            cause=error,
        )

    async def initialize(self) -> None:
        """Start the provider. Concurrent callers wait for the first start."""
        if self._initialized:
            return
        async with self._setup_lock:
            if self._initialized:
                return  # type: ignore[unreachable]
            try:
                await self._initialize()
            except Exception as e:
                logger.error(f"Starting {self.provider_type} provider '{self.name}' failed: {e}")
                raise self._start_failure(e) from e
            self._initialized = True
            logger.info(f"Started {self.provider_type} provider '{self.name}'")

    async def shutdown(self) -> None:
        """Stop the provider. Failures are logged and the provider stays up."""
        if not self._initialized:
            return
        try:
            await self._shutdown()
        except Exception as e:
            logger.error(f"Stopping {self.provider_type} provider '{self.name}' failed: {e}")
            return
        self._initialized = False
        logger.info(f"Stopped {self.provider_type} provider '{self.name}'")

    async def _initialize(self) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement _initialize()")

    async def _shutdown(self) -> None:
        pass

    def update_settings(self, new_settings: Optional[dict[str, Any]]) -> None:
        """Swap in settings with ``new_settings`` applied.

        Raises:
            ValueError: If the merged settings do not validate
        """
        if not new_settings:
            return
        try:
            self.settings = self.settings.with_overrides(**new_settings)
        except Exception as e:
            raise ValueError(f"Invalid settings for provider '{self.name}': {e}") from e
        logger.debug(f"Provider '{self.name}' settings now {self.settings}")

    def __repr__(self) -> str:
        state = "initialized" if self._initialized else "idle"
        return f"{type(self).__name__}(name={self.name!r}, state={state})"
