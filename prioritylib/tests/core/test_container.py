"""Tests for the service container."""

import logging

import pytest

from prioritylib.core.container.container import ServiceContainer, create_memory_container
from prioritylib.core.settings.settings import PrioritySettings
from prioritylib.providers.identity.base import StaticIdentityProvider
from prioritylib.providers.storage.memory.provider import MemoryTaskStorageProvider
from prioritylib.usecases.models import CreateTaskRequest
from prioritylib.tests.test_utils import NOW, USER_ID


class TestServiceContainer:
    """Test wiring and lifecycle."""

    def test_memory_container_wiring(self, clock):
        container = create_memory_container(USER_ID, clock=clock)

        assert isinstance(container.storage, MemoryTaskStorageProvider)
        assert isinstance(container.identity, StaticIdentityProvider)
        assert container.task_use_cases is container.task_use_cases
        assert container.task_use_cases.now() == NOW

    def test_settings_reach_use_cases(self):
        settings = PrioritySettings(default_importance_score=1500.0, rating_k_factor=16.0)
        container = create_memory_container(USER_ID, settings=settings)

        assert container.task_use_cases.settings is settings
        assert container.task_use_cases.settings.rating_k_factor == 16.0

    @pytest.mark.asyncio
    async def test_context_manager_runs_provider_lifecycle(self):
        container = create_memory_container(USER_ID)

        async with container:
            assert container.storage.initialized
            assert container.identity.initialized

        assert not container.storage.initialized
        assert not container.identity.initialized

    @pytest.mark.asyncio
    async def test_initialize_configures_logging(self):
        container = create_memory_container(USER_ID, settings=PrioritySettings(log_level="DEBUG"))

        await container.initialize()
        try:
            assert logging.getLogger("prioritylib").level == logging.DEBUG
        finally:
            await container.shutdown()
            logging.getLogger("prioritylib").setLevel(logging.NOTSET)

    @pytest.mark.asyncio
    async def test_identity_without_lifecycle(self, clock):
        class BareIdentity:
            async def current_user_id(self):
                return USER_ID

        container = ServiceContainer(MemoryTaskStorageProvider(clock=clock), BareIdentity(), clock=clock)

        async with container:
            result = await container.task_use_cases.create_task(
                CreateTaskRequest(user_id=USER_ID, body="Plan the offsite")
            )
            assert result.success

    @pytest.mark.asyncio
    async def test_coordinators_share_use_cases(self, clock):
        seen = []
        async with create_memory_container(USER_ID, settings=PrioritySettings(), clock=clock) as container:
            first = container.create_coordinator(on_success=seen.append)
            second = container.create_coordinator()

            outcome = await first.create_task(body="Book flights", deadline="2025-08-15")
            await second.refresh()

        assert first.use_cases is second.use_cases
        assert seen == [outcome]
        assert [t.id for t in second.tasks] == [outcome.task.id]
