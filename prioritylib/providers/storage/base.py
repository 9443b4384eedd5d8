"""Storage provider contract for tasks, comparisons and completions.

The storage collaborator is the only owner of persistent state. Every
operation is asynchronous and reports its outcome as a ``StorageResult``
rather than raising: a failed write is an ordinary answer from a remote
store, not a programming error.
"""

import logging
from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from prioritylib.domain.task.models import (
    ComparisonRecord,
    CompletionRecord,
    Quadrant,
    TaskRecord,
    TaskStatus,
)
from prioritylib.providers.core.base import Provider, ProviderSettings

logger = logging.getLogger(__name__)

DataT = TypeVar('DataT')
SettingsT = TypeVar('SettingsT', bound='StorageProviderSettings')


class StorageProviderSettings(ProviderSettings):
    """Base settings for task storage providers."""


class StorageResult(BaseModel, Generic[DataT]):
    """Outcome of one storage operation.

    Attributes:
        success: Whether the operation was applied
        data: Payload on success
        error: Collaborator-supplied reason on failure, may be empty
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    data: Optional[DataT] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[DataT] = None) -> "StorageResult[DataT]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Optional[str] = None) -> "StorageResult[DataT]":
        return cls(success=False, error=error)


class TaskFilters(BaseModel):
    """Filters understood by ``find_tasks``."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Optional[TaskStatus] = Field(default=None, description="Only tasks with this status")
    overdue: bool = Field(default=False, description="Only tasks whose deadline date is before today")


class ScoreUpdate(BaseModel):
    """New importance score for one task."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    task_id: str
    importance_score: float = Field(..., allow_inf_nan=False)


class TaskStats(BaseModel):
    """Per-user task counters."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = 0
    completed: int = 0
    active: int = 0
    overdue: int = 0

    @classmethod
    def empty(cls) -> "TaskStats":
        return cls()


class ComparisonScores(BaseModel):
    """A stored comparison together with the participants' current scores."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    comparison: ComparisonRecord
    winner_score: float
    loser_score: float


class TaskStorageProvider(Provider[SettingsT], Generic[SettingsT]):
    """Base class for task storage providers.

    Ownership is part of every user-scoped call: a task owned by another
    user behaves exactly like a task that does not exist.
    """

    def __init__(self, name: str = "task-storage", settings: Optional[SettingsT] = None):
        super().__init__(
            name=name,
            provider_type="storage",
            settings=settings or StorageProviderSettings(),
        )

    async def find_tasks(
        self, user_id: str, filters: Optional[TaskFilters] = None
    ) -> StorageResult[list[TaskRecord]]:
        """Return the user's tasks matching ``filters``."""
        raise NotImplementedError("Subclasses must implement find_tasks()")

    async def find_by_id(self, task_id: str, user_id: str) -> StorageResult[Optional[TaskRecord]]:
        """Return the task, or a successful result with no data when it is not visible."""
        raise NotImplementedError("Subclasses must implement find_by_id()")

    async def create(self, task: TaskRecord) -> StorageResult[TaskRecord]:
        raise NotImplementedError("Subclasses must implement create()")

    async def update(
        self, task_id: str, user_id: str, changes: dict
    ) -> StorageResult[TaskRecord]:
        """Merge ``changes`` into the stored task. Fields not named are kept."""
        raise NotImplementedError("Subclasses must implement update()")

    async def delete(self, task_id: str, user_id: str) -> StorageResult[None]:
        """Delete the task together with its comparisons and completion record."""
        raise NotImplementedError("Subclasses must implement delete()")

    async def complete(
        self, task_id: str, user_id: str, quadrant: Quadrant
    ) -> StorageResult[TaskRecord]:
        """Mark the task completed and record a completion in ``quadrant``."""
        raise NotImplementedError("Subclasses must implement complete()")

    async def reopen(self, task_id: str, user_id: str) -> StorageResult[TaskRecord]:
        """Mark the task open again and drop its completion record."""
        raise NotImplementedError("Subclasses must implement reopen()")

    async def update_importance_scores(
        self, user_id: str, updates: list[ScoreUpdate]
    ) -> StorageResult[list[TaskRecord]]:
        """Write several scores as one batch."""
        raise NotImplementedError("Subclasses must implement update_importance_scores()")

    async def get_task_stats(self, user_id: str) -> StorageResult[TaskStats]:
        raise NotImplementedError("Subclasses must implement get_task_stats()")

    async def is_owned_by_user(self, task_id: str, user_id: str) -> bool:
        raise NotImplementedError("Subclasses must implement is_owned_by_user()")

    async def exists(self, task_id: str) -> bool:
        raise NotImplementedError("Subclasses must implement exists()")

    async def create_comparison(
        self, user_id: str, winner_id: str, loser_id: str
    ) -> StorageResult[ComparisonScores]:
        """Store a comparison and return both participants' current scores."""
        raise NotImplementedError("Subclasses must implement create_comparison()")

    async def get_completion_report(
        self, user_id: str, start: datetime, end: datetime
    ) -> StorageResult[list[CompletionRecord]]:
        """Completion records with ``start <= completed_at <= end``."""
        raise NotImplementedError("Subclasses must implement get_completion_report()")

    async def find_active_tasks(self, user_id: str) -> StorageResult[list[TaskRecord]]:
        return await self.find_tasks(user_id, TaskFilters(status=TaskStatus.OPEN))

    async def find_overdue_tasks(self, user_id: str) -> StorageResult[list[TaskRecord]]:
        return await self.find_tasks(user_id, TaskFilters(status=TaskStatus.OPEN, overdue=True))
