"""In-memory implementation of the TaskStorageProvider.

This provider keeps tasks, comparisons and completion records in
dictionaries guarded by a single asyncio lock. It is the reference adapter
used by tests and by the in-memory service container.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from pydantic import Field

from prioritylib.domain.classifier.classifier import is_overdue
from prioritylib.domain.task.models import (
    ComparisonRecord,
    CompletionRecord,
    Quadrant,
    TaskRecord,
    TaskStatus,
    as_utc,
    is_valid_score,
    utcnow,
)
from prioritylib.providers.storage.base import (
    ComparisonScores,
    ScoreUpdate,
    StorageProviderSettings,
    StorageResult,
    TaskFilters,
    TaskStats,
    TaskStorageProvider,
)

logger = logging.getLogger(__name__)

NOT_FOUND = "Todo not found"


class MemoryStorageSettings(StorageProviderSettings):
    """In-memory storage settings.

    No host/port/connection needed - purely in-memory.
    """

    simulated_latency: float = Field(
        default=0.0, description="Seconds to sleep before each operation, to expose interleavings"
    )


class MemoryTaskStorageProvider(TaskStorageProvider[MemoryStorageSettings]):
    """Dictionary-backed task storage."""

    def __init__(
        self,
        name: str = "memory-storage",
        settings: Optional[MemoryStorageSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(name=name, settings=settings or MemoryStorageSettings())
        self._clock = clock or utcnow
        self._lock = asyncio.Lock()
        self._tasks: dict[str, TaskRecord] = {}
        self._comparisons: dict[str, ComparisonRecord] = {}
        self._completions: dict[str, CompletionRecord] = {}

    async def _initialize(self) -> None:
        logger.debug(f"Memory storage '{self.name}' ready")

    async def _shutdown(self) -> None:
        async with self._lock:
            self._tasks.clear()
            self._comparisons.clear()
            self._completions.clear()

    @property
    def comparisons(self) -> list[ComparisonRecord]:
        return list(self._comparisons.values())

    @property
    def completions(self) -> list[CompletionRecord]:
        return list(self._completions.values())

    async def _pause(self) -> None:
        if self.settings.simulated_latency > 0:
            await asyncio.sleep(self.settings.simulated_latency)

    def _owned(self, task_id: str, user_id: str) -> Optional[TaskRecord]:
        task = self._tasks.get(task_id)
        if task is None or task.user_id != user_id:
            return None
        return task

    async def find_tasks(
        self, user_id: str, filters: Optional[TaskFilters] = None
    ) -> StorageResult[list[TaskRecord]]:
        filters = filters or TaskFilters()
        await self._pause()
        now = self._clock()
        async with self._lock:
            tasks = [t for t in self._tasks.values() if t.user_id == user_id]
        if filters.status is not None:
            tasks = [t for t in tasks if t.status is filters.status]
        if filters.overdue:
            tasks = [t for t in tasks if is_overdue(t, now)]
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        return StorageResult.ok(tasks)

    async def find_by_id(self, task_id: str, user_id: str) -> StorageResult[Optional[TaskRecord]]:
        await self._pause()
        async with self._lock:
            return StorageResult.ok(self._owned(task_id, user_id))

    async def create(self, task: TaskRecord) -> StorageResult[TaskRecord]:
        await self._pause()
        async with self._lock:
            if task.id in self._tasks:
                return StorageResult.fail(f"Todo {task.id} already exists")
            self._tasks[task.id] = task
        logger.debug(f"Stored task {task.id} for user {task.user_id}")
        return StorageResult.ok(task)

    async def update(self, task_id: str, user_id: str, changes: dict) -> StorageResult[TaskRecord]:
        await self._pause()
        async with self._lock:
            task = self._owned(task_id, user_id)
            if task is None:
                return StorageResult.fail(NOT_FOUND)
            try:
                updated = task.update(changes, self._clock())
            except ValueError as e:
                return StorageResult.fail(str(e))
            self._tasks[task_id] = updated
        return StorageResult.ok(updated)

    async def delete(self, task_id: str, user_id: str) -> StorageResult[None]:
        await self._pause()
        async with self._lock:
            if self._owned(task_id, user_id) is None:
                return StorageResult.fail(NOT_FOUND)
            # Dependents go first: comparisons, then the completion record
            doomed = [c.id for c in self._comparisons.values() if c.references(task_id)]
            for comparison_id in doomed:
                del self._comparisons[comparison_id]
            self._completions.pop(task_id, None)
            del self._tasks[task_id]
        logger.debug(f"Deleted task {task_id} and {len(doomed)} comparison(s)")
        return StorageResult.ok()

    async def complete(
        self, task_id: str, user_id: str, quadrant: Quadrant
    ) -> StorageResult[TaskRecord]:
        await self._pause()
        now = self._clock()
        async with self._lock:
            task = self._owned(task_id, user_id)
            if task is None:
                return StorageResult.fail(NOT_FOUND)
            completed = task.complete(now)
            self._tasks[task_id] = completed
            self._completions[task_id] = CompletionRecord(
                task_id=task_id,
                user_id=user_id,
                quadrant=quadrant,
                completed_at=completed.updated_at,
            )
        return StorageResult.ok(completed)

    async def reopen(self, task_id: str, user_id: str) -> StorageResult[TaskRecord]:
        await self._pause()
        async with self._lock:
            task = self._owned(task_id, user_id)
            if task is None:
                return StorageResult.fail(NOT_FOUND)
            reopened = task.reopen(self._clock())
            self._tasks[task_id] = reopened
            self._completions.pop(task_id, None)
        return StorageResult.ok(reopened)

    async def update_importance_scores(
        self, user_id: str, updates: list[ScoreUpdate]
    ) -> StorageResult[list[TaskRecord]]:
        """Apply every update or none of them."""
        await self._pause()
        now = self._clock()
        async with self._lock:
            staged: dict[str, TaskRecord] = {}
            for update in updates:
                task = staged.get(update.task_id) or self._owned(update.task_id, user_id)
                if task is None:
                    return StorageResult.fail(f"Todo {update.task_id} not found")
                if not is_valid_score(update.importance_score):
                    return StorageResult.fail("Importance score must be non-negative")
                staged[update.task_id] = task.update(
                    {"importance_score": float(update.importance_score)}, now
                )
            self._tasks.update(staged)
        return StorageResult.ok(list(staged.values()))

    async def get_task_stats(self, user_id: str) -> StorageResult[TaskStats]:
        await self._pause()
        now = self._clock()
        async with self._lock:
            tasks = [t for t in self._tasks.values() if t.user_id == user_id]
        completed = sum(1 for t in tasks if t.status is TaskStatus.COMPLETED)
        overdue = sum(1 for t in tasks if t.is_active and is_overdue(t, now))
        return StorageResult.ok(
            TaskStats(
                total=len(tasks),
                completed=completed,
                active=len(tasks) - completed,
                overdue=overdue,
            )
        )

    async def is_owned_by_user(self, task_id: str, user_id: str) -> bool:
        await self._pause()
        async with self._lock:
            return self._owned(task_id, user_id) is not None

    async def exists(self, task_id: str) -> bool:
        async with self._lock:
            return task_id in self._tasks

    async def create_comparison(
        self, user_id: str, winner_id: str, loser_id: str
    ) -> StorageResult[ComparisonScores]:
        await self._pause()
        async with self._lock:
            winner = self._owned(winner_id, user_id)
            loser = self._owned(loser_id, user_id)
            if winner is None or loser is None:
                return StorageResult.fail(NOT_FOUND)
            comparison = ComparisonRecord(
                user_id=user_id,
                winner_id=winner_id,
                loser_id=loser_id,
                created_at=self._clock(),
            )
            self._comparisons[comparison.id] = comparison
        return StorageResult.ok(
            ComparisonScores(
                comparison=comparison,
                winner_score=winner.importance_score,
                loser_score=loser.importance_score,
            )
        )

    async def get_completion_report(
        self, user_id: str, start: datetime, end: datetime
    ) -> StorageResult[list[CompletionRecord]]:
        await self._pause()
        start, end = as_utc(start), as_utc(end)
        async with self._lock:
            records = [
                c for c in self._completions.values()
                if c.user_id == user_id and start <= c.completed_at <= end
            ]
        records.sort(key=lambda c: c.completed_at)
        return StorageResult.ok(records)
