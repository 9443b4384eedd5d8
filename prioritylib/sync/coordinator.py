"""Optimistic synchronisation of a client-side task collection.

The coordinator owns the dashboard's local copy of the user's open tasks.
Complete, delete and update change that copy first and only then ask the
use-cases to persist the change. A successful call leaves the optimistic
state in place. A failed call (or one that raises) restores canonical
state with exactly one refetch and records the reason.

There is no per-task lock: two in-flight mutations of the same task race,
and the last optimistic write is what the collection shows until the next
refetch.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any, Optional, Union

from prioritylib.core.errors.errors import ValidationError, error_message
from prioritylib.core.validation.validation import ValidationResult, validate_data, validate_task_input
from prioritylib.domain.task.collections import (
    SortField,
    SortOrder,
    filter_active,
    filter_overdue,
    group_by_quadrant,
    sort_tasks,
)
from prioritylib.domain.task.models import CreatedVia, TaskRecord, TaskUpdates
from prioritylib.providers.identity.base import IdentityProvider
from prioritylib.providers.storage.base import TaskStats
from prioritylib.sync.models import (
    DashboardFilters,
    DashboardSnapshot,
    MutationAction,
    MutationOutcome,
    SyncPhase,
    ViewMode,
)
from prioritylib.usecases.models import CreateTaskRequest, UseCaseResult
from prioritylib.usecases.tasks import TaskUseCases

logger = logging.getLogger(__name__)

MutationCallback = Callable[[MutationOutcome], Union[None, Awaitable[None]]]

FALLBACK_MESSAGES = {
    MutationAction.CREATE: "Failed to create todo",
    MutationAction.UPDATE: "Failed to update todo",
    MutationAction.COMPLETE: "Failed to complete todo",
    MutationAction.REOPEN: "Failed to reopen todo",
    MutationAction.DELETE: "Failed to delete todo",
}


class OptimisticSyncCoordinator:
    """Client-side task state with optimistic mutations."""

    def __init__(
        self,
        use_cases: TaskUseCases,
        identity: IdentityProvider,
        on_success: Optional[MutationCallback] = None,
        on_error: Optional[MutationCallback] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.use_cases = use_cases
        self.identity = identity
        self.on_success = on_success
        self.on_error = on_error
        self._clock = clock or use_cases.now
        self._tasks: list[TaskRecord] = []
        self._stats = TaskStats.empty()
        self._error: Optional[str] = None
        self._loading = False
        self._phase = SyncPhase.STABLE
        self._pending = 0
        self._filters = DashboardFilters()

    @property
    def tasks(self) -> list[TaskRecord]:
        return list(self._tasks)

    @property
    def stats(self) -> TaskStats:
        return self._stats

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def filters(self) -> DashboardFilters:
        return self._filters

    # View state

    def set_show_overdue_only(self, show: bool) -> None:
        self._filters = self._filters.model_copy(update={"show_overdue_only": show})

    def set_view_mode(self, mode: Union[ViewMode, str]) -> None:
        self._filters = self._filters.model_copy(update={"view_mode": ViewMode(mode)})

    def snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        """Visible tasks, their quadrants and status flags for rendering."""
        now = now or self._clock()
        settings = self.use_cases.settings

        visible = filter_active(self._tasks)
        if self._filters.show_overdue_only:
            visible = filter_overdue(visible, now)

        quadrants = group_by_quadrant(
            visible,
            now,
            important_threshold=settings.important_score_threshold,
            urgent_hours=settings.urgent_threshold_hours,
        )
        if self._filters.view_mode is ViewMode.LIST:
            visible = sort_tasks(visible, SortField.IMPORTANCE, SortOrder.DESC)

        return DashboardSnapshot(
            tasks=visible,
            quadrants=quadrants,
            stats=self._stats,
            filters=self._filters,
            loading=self._loading,
            error=self._error,
            phase=self._phase,
        )

    def validate(
        self,
        *,
        body: str,
        title: Optional[str] = None,
        deadline: Optional[str] = None,
        user_id: str = "",
        created_via: Union[CreatedVia, str] = CreatedVia.MANUAL,
    ) -> ValidationResult:
        """Check form input without submitting it."""
        return validate_task_input(
            user_id=user_id or "pending-user",
            body=body,
            title=title,
            deadline=deadline,
            created_via=created_via,
        )

    # Canonical state

    async def refresh(self) -> bool:
        """Replace local state with the store's open tasks and counters."""
        user_id = await self.identity.current_user_id()
        if not user_id:
            return False

        self._loading = True
        self._error = None
        try:
            result = await self.use_cases.get_dashboard(user_id, include_completed=False)
            if result.success and result.data is not None:
                self._tasks = list(result.data.tasks)
                self._stats = result.data.stats
                return True
            self._error = result.error or "Failed to fetch todos"
            return False
        except Exception as e:
            logger.exception(f"Refreshing tasks failed: {e}")
            self._error = error_message(e)
            return False
        finally:
            self._loading = False

    # Mutations

    async def complete_task(self, task_id: str) -> Optional[MutationOutcome]:
        user_id = await self.identity.current_user_id()
        if not user_id:
            return None
        self._tasks = [t for t in self._tasks if t.id != task_id]
        return await self._resolve(
            MutationAction.COMPLETE, task_id, self.use_cases.complete_task(task_id, user_id)
        )

    async def delete_task(self, task_id: str) -> Optional[MutationOutcome]:
        user_id = await self.identity.current_user_id()
        if not user_id:
            return None
        self._tasks = [t for t in self._tasks if t.id != task_id]
        return await self._resolve(
            MutationAction.DELETE, task_id, self.use_cases.delete_task(task_id, user_id)
        )

    async def update_task(
        self, task_id: str, updates: Union[TaskUpdates, Mapping[str, Any]]
    ) -> Optional[MutationOutcome]:
        user_id = await self.identity.current_user_id()
        if not user_id:
            return None
        try:
            parsed = validate_data(updates, TaskUpdates, location="updates")
        except ValidationError as e:
            outcome = MutationOutcome(
                action=MutationAction.UPDATE, task_id=task_id, success=False, error=e.message
            )
            self._error = e.message
            await self._notify(outcome)
            return outcome

        now = self._clock()
        self._tasks = [t.update(parsed, now) if t.id == task_id else t for t in self._tasks]
        return await self._resolve(
            MutationAction.UPDATE, task_id, self.use_cases.update_task(task_id, user_id, parsed)
        )

    async def reopen_task(self, task_id: str) -> Optional[MutationOutcome]:
        """Reopen a task. Not optimistic: the collection only holds open tasks."""
        user_id = await self.identity.current_user_id()
        if not user_id:
            return None
        return await self._resolve(
            MutationAction.REOPEN,
            task_id,
            self.use_cases.reopen_task(task_id, user_id),
            refetch_on_success=True,
            refetch_on_failure=False,
        )

    async def create_task(
        self,
        *,
        body: str,
        title: Optional[str] = None,
        deadline: Optional[str] = None,
        created_via: Union[CreatedVia, str] = CreatedVia.MANUAL,
    ) -> Optional[MutationOutcome]:
        """Create a task and add the stored record to the collection."""
        user_id = await self.identity.current_user_id()
        if not user_id:
            return None
        request = CreateTaskRequest(
            user_id=user_id,
            body=body,
            title=title,
            deadline=deadline,
            created_via=CreatedVia(created_via),
        )
        return await self._resolve(
            MutationAction.CREATE,
            None,
            self.use_cases.create_task(request),
            refetch_on_failure=False,
        )

    async def _resolve(
        self,
        action: MutationAction,
        task_id: Optional[str],
        call: Awaitable[UseCaseResult[Any]],
        refetch_on_success: bool = False,
        refetch_on_failure: bool = True,
    ) -> MutationOutcome:
        self._pending += 1
        self._phase = SyncPhase.PENDING
        result: Optional[UseCaseResult[Any]] = None
        try:
            result = await call
            error = None if result.success else (result.error or FALLBACK_MESSAGES[action])
        except Exception as e:
            logger.exception(f"{action.value} of task {task_id} raised: {e}")
            error = error_message(e)
        finally:
            self._pending -= 1

        if error is None:
            task = result.data if result is not None and isinstance(result.data, TaskRecord) else None
            if action is MutationAction.CREATE and task is not None:
                self._tasks = [task] + [t for t in self._tasks if t.id != task.id]
            if refetch_on_success:
                await self.refresh()
            if self._pending == 0 and self._phase is SyncPhase.PENDING:
                self._phase = SyncPhase.STABLE
            outcome = MutationOutcome(
                action=action,
                task_id=task_id or (task.id if task else None),
                success=True,
                task=task,
            )
        else:
            logger.warning(f"{action.value} of task {task_id} failed: {error}")
            if refetch_on_failure:
                await self.refresh()
                self._phase = SyncPhase.ROLLED_BACK
            elif self._pending == 0:
                self._phase = SyncPhase.STABLE
            self._error = error
            outcome = MutationOutcome(action=action, task_id=task_id, success=False, error=error)

        await self._notify(outcome)
        return outcome

    async def _notify(self, outcome: MutationOutcome) -> None:
        callback = self.on_success if outcome.success else self.on_error
        if callback is None:
            return
        try:
            maybe_awaitable = callback(outcome)
            if inspect.isawaitable(maybe_awaitable):
                await maybe_awaitable
        except Exception as e:
            logger.error(f"Mutation callback failed for {outcome.action.value}: {e}")
