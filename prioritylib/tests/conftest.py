"""Shared fixtures: a frozen clock, in-memory storage and wired use-cases."""

from datetime import datetime

import pytest
import pytest_asyncio

from prioritylib.core.settings.settings import PrioritySettings
from prioritylib.providers.identity.base import StaticIdentityProvider
from prioritylib.providers.storage.memory.provider import MemoryTaskStorageProvider
from prioritylib.usecases.tasks import TaskUseCases

from .test_utils import NOW, OTHER_USER_ID, USER_ID, make_task


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def settings() -> PrioritySettings:
    return PrioritySettings()


@pytest_asyncio.fixture
async def storage(clock):
    provider = MemoryTaskStorageProvider(clock=clock)
    await provider.initialize()
    yield provider
    await provider.shutdown()


@pytest.fixture
def use_cases(storage, settings, clock) -> TaskUseCases:
    return TaskUseCases(storage, settings, clock)


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return StaticIdentityProvider(USER_ID)


@pytest_asyncio.fixture
async def seeded(storage):
    """Store tasks for both users and return them keyed by name."""
    tasks = {
        "report": make_task(body="Write the quarterly report", importance_score=1300.0),
        "groceries": make_task(body="Buy groceries", deadline="2025-07-31T11:00:00+00:00"),
        "taxes": make_task(body="File taxes", deadline="2025-07-28", importance_score=1250.0),
        "someday": make_task(body="Learn the cello"),
        "foreign": make_task(body="Someone else's task", user_id=OTHER_USER_ID),
    }
    for task in tasks.values():
        result = await storage.create(task)
        assert result.success
    return tasks
