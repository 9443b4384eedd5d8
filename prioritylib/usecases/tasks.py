"""Prioritization use-cases.

``TaskUseCases`` is the only entry point that changes tasks. Each method
checks ownership before touching anything, validates what it is about to
write, and reports its outcome as a ``UseCaseResult``; nothing raises past
the ``use_case`` boundary.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, Optional, Union

from prioritylib.core.errors.errors import (
    ConsistencyError,
    ErrorContext,
    OwnershipError,
    StorageError,
)
from prioritylib.core.errors.models import (
    ConsistencyErrorContext,
    OwnershipErrorContext,
    StorageErrorContext,
)
from prioritylib.core.settings.settings import PrioritySettings
from prioritylib.core.validation.validation import validate_data, validate_task
from prioritylib.domain.classifier.classifier import QuadrantClassifier
from prioritylib.domain.rating.rating import RatingOutcome, rate_scores
from prioritylib.domain.task.collections import empty_quadrants, group_by_quadrant, sort_tasks
from prioritylib.domain.task.models import TaskRecord, TaskStatus, TaskUpdates, as_utc, is_valid_score
from prioritylib.providers.storage.base import (
    ScoreUpdate,
    TaskFilters,
    TaskStats,
    TaskStorageProvider,
)
from prioritylib.usecases.boundary import use_case
from prioritylib.usecases.models import (
    BulkScoreReport,
    CompletionReport,
    CreateTaskRequest,
    DashboardData,
    TaskQuery,
    UseCaseResult,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Todo not found or access denied"
PAIR_NOT_FOUND_MESSAGE = "One or both todos not found or access denied"
SELF_COMPARISON_MESSAGE = "A todo cannot be compared with itself"
INVALID_REPORT_RANGE_MESSAGE = "Report start must not be after report end"
RATING_NOT_STORED_MESSAGE = "Comparison saved but importance scores were not updated"


class TaskUseCases:
    """Application operations over one user's tasks."""

    def __init__(
        self,
        storage: TaskStorageProvider,
        settings: Optional[PrioritySettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.settings = settings or PrioritySettings()
        self.classifier = QuadrantClassifier(
            important_threshold=self.settings.important_score_threshold,
            urgent_hours=self.settings.urgent_threshold_hours,
            clock=clock,
        )

    def now(self) -> datetime:
        return self.classifier.now()

    def _ownership_error(
        self, task_id: str, user_id: str, operation: str, task_exists: bool = False
    ) -> OwnershipError:
        return OwnershipError(
            message=NOT_FOUND_MESSAGE,
            context=ErrorContext.create(
                error_type="ownership",
                error_location=f"TaskUseCases.{operation}",
                component="task_use_cases",
                operation=operation,
            ),
            ownership_context=OwnershipErrorContext(
                task_id=task_id, user_id=user_id, task_exists=task_exists
            ),
        )

    def _storage_error(self, message: str, operation: str) -> StorageError:
        return StorageError(
            message=message,
            context=ErrorContext.create(
                error_type="storage",
                error_location=f"TaskUseCases.{operation}",
                component="task_use_cases",
                operation=operation,
            ),
            storage_context=StorageErrorContext(provider_name=self.storage.name, operation=operation),
        )

    async def _owned_task(self, task_id: str, user_id: str, operation: str) -> TaskRecord:
        """Fetch a task the user owns.

        Raises:
            OwnershipError: Missing or foreign task; ``task_exists`` tells them apart in logs
            StorageError: The store failed to load a task the user owns
        """
        if not await self.storage.is_owned_by_user(task_id, user_id):
            task_exists = await self.storage.exists(task_id)
            logger.debug(
                f"{operation}: task {task_id} "
                f"{'belongs to another user' if task_exists else 'does not exist'}"
            )
            raise self._ownership_error(task_id, user_id, operation, task_exists)
        result = await self.storage.find_by_id(task_id, user_id)
        if not result.success:
            raise self._storage_error(result.error or "Failed to fetch todo", operation)
        if result.data is None:
            raise self._ownership_error(task_id, user_id, operation)
        return result.data

    # Queries

    @use_case("get_tasks")
    async def get_tasks(
        self, user_id: str, query: Optional[Union[TaskQuery, Mapping[str, Any]]] = None
    ) -> UseCaseResult[list[TaskRecord]]:
        """Fetch the user's tasks, optionally filtered and sorted."""
        query = validate_data(query or {}, TaskQuery, location="query")
        result = await self.storage.find_tasks(
            user_id, TaskFilters(status=query.status, overdue=query.overdue)
        )
        if not result.success:
            raise self._storage_error(result.error or "Failed to fetch todos", "get_tasks")

        tasks = result.data or []
        if query.quadrant is not None:
            now = self.now()
            tasks = [t for t in tasks if self.classifier.classify(t, now) is query.quadrant]
        if query.sort_by is not None:
            tasks = sort_tasks(tasks, query.sort_by, query.sort_order)
        return UseCaseResult.ok(tasks)

    @use_case("get_task")
    async def get_task(self, task_id: str, user_id: str) -> UseCaseResult[TaskRecord]:
        return UseCaseResult.ok(await self._owned_task(task_id, user_id, "get_task"))

    @use_case("get_active_tasks")
    async def get_active_tasks(self, user_id: str) -> UseCaseResult[list[TaskRecord]]:
        result = await self.storage.find_active_tasks(user_id)
        if not result.success:
            raise self._storage_error(result.error or "Failed to fetch todos", "get_active_tasks")
        return UseCaseResult.ok(result.data or [])

    @use_case("get_overdue_tasks")
    async def get_overdue_tasks(self, user_id: str) -> UseCaseResult[list[TaskRecord]]:
        result = await self.storage.find_overdue_tasks(user_id)
        if not result.success:
            raise self._storage_error(result.error or "Failed to fetch todos", "get_overdue_tasks")
        return UseCaseResult.ok(result.data or [])

    @use_case("get_dashboard")
    async def get_dashboard(
        self,
        user_id: str,
        include_completed: bool = False,
        overdue_only: bool = False,
    ) -> UseCaseResult[DashboardData]:
        """Tasks grouped by quadrant plus the user's counters.

        Counters fall back to zeros when the stats call fails.
        """
        filters = TaskFilters(
            status=None if include_completed else TaskStatus.OPEN,
            overdue=overdue_only,
        )
        result = await self.storage.find_tasks(user_id, filters)
        if not result.success:
            raise self._storage_error(result.error or "Failed to fetch todos", "get_dashboard")
        tasks = result.data or []

        quadrants = group_by_quadrant(
            tasks,
            self.now(),
            important_threshold=self.settings.important_score_threshold,
            urgent_hours=self.settings.urgent_threshold_hours,
        )

        stats_result = await self.storage.get_task_stats(user_id)
        if stats_result.success and stats_result.data is not None:
            stats = stats_result.data
        else:
            logger.warning(f"Task stats unavailable for user {user_id}: {stats_result.error}")
            stats = TaskStats.empty()

        return UseCaseResult.ok(DashboardData(tasks=tasks, quadrants=quadrants, stats=stats))

    @use_case("get_completion_report")
    async def get_completion_report(
        self, user_id: str, start: datetime, end: datetime
    ) -> UseCaseResult[CompletionReport]:
        """Completions between ``start`` and ``end``, inclusive. Naive bounds are read as UTC."""
        start, end = as_utc(start), as_utc(end)
        if start > end:
            return UseCaseResult.fail(INVALID_REPORT_RANGE_MESSAGE)
        result = await self.storage.get_completion_report(user_id, start, end)
        if not result.success:
            raise self._storage_error(
                result.error or "Failed to fetch completion report", "get_completion_report"
            )

        grouped = empty_quadrants()
        for record in result.data or []:
            grouped[record.quadrant].append(record)
        return UseCaseResult.ok(CompletionReport(start=start, end=end, completions=grouped))

    # Commands

    @use_case("create_task")
    async def create_task(
        self, request: Union[CreateTaskRequest, Mapping[str, Any]]
    ) -> UseCaseResult[TaskRecord]:
        request = validate_data(request, CreateTaskRequest, location="request")
        task = TaskRecord.create(
            user_id=request.user_id,
            body=request.body,
            title=request.title,
            deadline=request.deadline,
            created_via=request.created_via,
            importance_score=self.settings.default_importance_score,
            now=self.now(),
        )

        validation = validate_task(task)
        if not validation.valid:
            return UseCaseResult.fail(validation.message)

        result = await self.storage.create(task)
        if not result.success:
            raise self._storage_error(result.error or "Failed to create todo", "create_task")
        logger.info(f"Created task {task.id} for user {task.user_id}")
        return UseCaseResult.ok(result.data)

    @use_case("update_task")
    async def update_task(
        self,
        task_id: str,
        user_id: str,
        updates: Union[TaskUpdates, Mapping[str, Any]],
    ) -> UseCaseResult[TaskRecord]:
        current = await self._owned_task(task_id, user_id, "update_task")
        updates = validate_data(updates, TaskUpdates, location="updates")
        if updates.is_empty:
            return UseCaseResult.ok(current)

        merged = current.update(updates, self.now())
        validation = validate_task(merged)
        if not validation.valid:
            return UseCaseResult.fail(validation.message)

        result = await self.storage.update(task_id, user_id, updates.changes())
        if not result.success:
            raise self._storage_error(result.error or "Failed to update todo", "update_task")
        return UseCaseResult.ok(result.data)

    @use_case("complete_task")
    async def complete_task(self, task_id: str, user_id: str) -> UseCaseResult[TaskRecord]:
        task = await self._owned_task(task_id, user_id, "complete_task")
        quadrant = self.classifier.classify(task)

        result = await self.storage.complete(task_id, user_id, quadrant)
        if not result.success:
            raise self._storage_error(result.error or "Failed to complete todo", "complete_task")
        logger.debug(f"Completed task {task_id} in {quadrant.value}")
        return UseCaseResult.ok(result.data)

    @use_case("reopen_task")
    async def reopen_task(self, task_id: str, user_id: str) -> UseCaseResult[TaskRecord]:
        await self._owned_task(task_id, user_id, "reopen_task")

        result = await self.storage.reopen(task_id, user_id)
        if not result.success:
            raise self._storage_error(result.error or "Failed to reopen todo", "reopen_task")
        return UseCaseResult.ok(result.data)

    @use_case("delete_task")
    async def delete_task(self, task_id: str, user_id: str) -> UseCaseResult[None]:
        """Delete a task. Storage removes its comparisons and completion first."""
        await self._owned_task(task_id, user_id, "delete_task")

        result = await self.storage.delete(task_id, user_id)
        if not result.success:
            raise self._storage_error(result.error or "Failed to delete todo", "delete_task")
        logger.info(f"Deleted task {task_id} for user {user_id}")
        return UseCaseResult.ok()

    @use_case("update_importance_scores")
    async def update_importance_scores(
        self,
        user_id: str,
        updates: Sequence[Union[ScoreUpdate, Mapping[str, Any]]],
    ) -> UseCaseResult[BulkScoreReport]:
        """Write several scores at once.

        Every update is checked before anything is written. Rejected updates
        are never written; the accepted ones go to storage as one batch.
        """
        parsed = [validate_data(u, ScoreUpdate, location="updates") for u in updates]

        accepted: list[ScoreUpdate] = []
        failed_ids: list[str] = []
        for update in parsed:
            owned = await self.storage.is_owned_by_user(update.task_id, user_id)
            if not owned or not is_valid_score(update.importance_score):
                failed_ids.append(update.task_id)
            else:
                accepted.append(update)

        if accepted:
            result = await self.storage.update_importance_scores(user_id, accepted)
            if not result.success:
                raise self._storage_error(
                    result.error or "Failed to update importance scores", "update_importance_scores"
                )

        report = BulkScoreReport(applied=len(accepted), failed=len(failed_ids), failed_ids=failed_ids)
        if failed_ids:
            logger.warning(f"Rejected score updates for user {user_id}: {failed_ids}")
            return UseCaseResult.fail(
                f"{report.failed} of {report.total} importance score updates failed", report
            )
        return UseCaseResult.ok(report)

    @use_case("create_comparison")
    async def create_comparison(
        self, user_id: str, winner_id: str, loser_id: str
    ) -> UseCaseResult[RatingOutcome]:
        """Record that ``winner_id`` beat ``loser_id`` and re-rate both tasks."""
        if winner_id == loser_id:
            return UseCaseResult.fail(SELF_COMPARISON_MESSAGE)

        winner_owned = await self.storage.is_owned_by_user(winner_id, user_id)
        loser_owned = await self.storage.is_owned_by_user(loser_id, user_id)
        if not (winner_owned and loser_owned):
            return UseCaseResult.fail(PAIR_NOT_FOUND_MESSAGE)

        stored = await self.storage.create_comparison(user_id, winner_id, loser_id)
        if not stored.success or stored.data is None:
            raise self._storage_error(
                stored.error or "Failed to create comparison", "create_comparison"
            )
        comparison_id = stored.data.comparison.id

        # The comparison is stored from here on; any failure leaves it without its scores.
        try:
            outcome = rate_scores(
                winner_id,
                loser_id,
                stored.data.winner_score,
                stored.data.loser_score,
                k_factor=self.settings.rating_k_factor,
                scale=self.settings.rating_scale,
            )
            written = await self.storage.update_importance_scores(
                user_id,
                [
                    ScoreUpdate(task_id=winner_id, importance_score=outcome.winner_score_after),
                    ScoreUpdate(task_id=loser_id, importance_score=outcome.loser_score_after),
                ],
            )
        except Exception as e:
            raise self._rating_inconsistency(
                RATING_NOT_STORED_MESSAGE, comparison_id, winner_id, loser_id, cause=e
            ) from e
        if not written.success:
            raise self._rating_inconsistency(
                written.error or RATING_NOT_STORED_MESSAGE, comparison_id, winner_id, loser_id
            )

        logger.debug(
            f"Comparison {comparison_id}: {winner_id} {outcome.winner_delta:+.2f}, "
            f"{loser_id} {outcome.loser_delta:+.2f}"
        )
        return UseCaseResult.ok(outcome)

    def _rating_inconsistency(
        self,
        message: str,
        comparison_id: str,
        winner_id: str,
        loser_id: str,
        cause: Optional[Exception] = None,
    ) -> ConsistencyError:
        return ConsistencyError(
            message=message,
            context=ErrorContext.create(
                error_type="rating_inconsistency",
                error_location="TaskUseCases.create_comparison",
                component="task_use_cases",
                operation="create_comparison",
            ),
            consistency_context=ConsistencyErrorContext(
                operation="update_importance_scores",
                record_ids=[comparison_id, winner_id, loser_id],
            ),
            cause=cause,
        )
