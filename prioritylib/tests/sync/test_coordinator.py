"""Tests for the optimistic sync coordinator."""

import asyncio
import logging
from unittest.mock import AsyncMock, Mock, patch

import pytest
import pytest_asyncio

from prioritylib.core.errors.errors import UNKNOWN_ERROR_MESSAGE
from prioritylib.domain.task.models import Quadrant
from prioritylib.providers.identity.base import StaticIdentityProvider
from prioritylib.providers.storage.base import StorageResult
from prioritylib.providers.storage.memory.provider import MemoryStorageSettings, MemoryTaskStorageProvider
from prioritylib.sync.coordinator import OptimisticSyncCoordinator
from prioritylib.sync.models import MutationAction, SyncPhase, ViewMode
from prioritylib.usecases.models import UseCaseResult
from prioritylib.usecases.tasks import TaskUseCases
from prioritylib.tests.test_utils import USER_ID, make_task


@pytest_asyncio.fixture
async def coordinator(use_cases, identity, seeded):
    coordinator = OptimisticSyncCoordinator(use_cases, identity)
    assert await coordinator.refresh()
    return coordinator


def _ids(tasks):
    return {t.id for t in tasks}


class TestRefresh:
    """Test loading canonical state."""

    @pytest.mark.asyncio
    async def test_refresh_loads_open_tasks_and_stats(self, coordinator, seeded):
        assert _ids(coordinator.tasks) == {
            seeded[name].id for name in ("report", "groceries", "taxes", "someday")
        }
        assert coordinator.stats.total == 4
        assert coordinator.phase is SyncPhase.STABLE
        assert not coordinator.loading

    @pytest.mark.asyncio
    async def test_refresh_failure_sets_error(self, coordinator, use_cases):
        with patch.object(use_cases, "get_dashboard", AsyncMock(return_value=UseCaseResult.fail("offline"))):
            assert not await coordinator.refresh()

        assert coordinator.error == "offline"

    @pytest.mark.asyncio
    async def test_refresh_without_user_is_noop(self, use_cases):
        coordinator = OptimisticSyncCoordinator(use_cases, StaticIdentityProvider())

        assert not await coordinator.refresh()
        assert coordinator.tasks == []


class TestOptimisticMutations:
    """Test complete/delete/update with optimistic local state."""

    @pytest.mark.asyncio
    async def test_local_change_is_visible_before_the_call_resolves(self, coordinator, use_cases, seeded):
        gate = asyncio.Event()
        original = use_cases.complete_task

        async def slow_complete(task_id, user_id):
            await gate.wait()
            return await original(task_id, user_id)

        with patch.object(use_cases, "complete_task", slow_complete):
            pending = asyncio.create_task(coordinator.complete_task(seeded["report"].id))
            await asyncio.sleep(0)
            await asyncio.sleep(0)

            assert seeded["report"].id not in _ids(coordinator.tasks)
            assert coordinator.phase is SyncPhase.PENDING

            gate.set()
            outcome = await pending

        assert outcome.success
        assert coordinator.phase is SyncPhase.STABLE

    @pytest.mark.asyncio
    async def test_success_does_not_refetch(self, coordinator, use_cases, seeded):
        refetch = AsyncMock(wraps=use_cases.get_dashboard)
        with patch.object(use_cases, "get_dashboard", refetch):
            await coordinator.complete_task(seeded["report"].id)
            await coordinator.delete_task(seeded["someday"].id)

        refetch.assert_not_awaited()
        assert _ids(coordinator.tasks) == {seeded["groceries"].id, seeded["taxes"].id}

    @pytest.mark.asyncio
    async def test_failure_rolls_back_with_one_refetch(self, coordinator, use_cases, storage, seeded):
        refetch = AsyncMock(wraps=use_cases.get_dashboard)
        with patch.object(storage, "complete", AsyncMock(return_value=StorageResult.fail())), \
                patch.object(use_cases, "get_dashboard", refetch):
            outcome = await coordinator.complete_task(seeded["report"].id)

        assert not outcome.success
        assert refetch.await_count == 1
        assert seeded["report"].id in _ids(coordinator.tasks)
        assert coordinator.error == "Failed to complete todo"
        assert coordinator.phase is SyncPhase.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_exception_rolls_back_with_one_refetch(self, coordinator, use_cases, seeded):
        refetch = AsyncMock(wraps=use_cases.get_dashboard)
        with patch.object(use_cases, "delete_task", AsyncMock(side_effect=RuntimeError("boom"))), \
                patch.object(use_cases, "get_dashboard", refetch):
            outcome = await coordinator.delete_task(seeded["taxes"].id)

        assert outcome.error == UNKNOWN_ERROR_MESSAGE
        assert refetch.await_count == 1
        assert seeded["taxes"].id in _ids(coordinator.tasks)

    @pytest.mark.asyncio
    async def test_update_applies_fields_locally(self, coordinator, storage, seeded):
        outcome = await coordinator.update_task(
            seeded["someday"].id, {"title": "Cello lessons", "importance_score": 1250.0}
        )

        local = next(t for t in coordinator.tasks if t.id == seeded["someday"].id)
        stored = (await storage.find_by_id(seeded["someday"].id, USER_ID)).data
        assert outcome.success
        assert local.title == stored.title == "Cello lessons"
        assert local.importance_score == stored.importance_score == 1250.0

    @pytest.mark.asyncio
    async def test_rejected_update_is_restored(self, coordinator, seeded):
        outcome = await coordinator.update_task(seeded["someday"].id, {"body": ""})

        local = next(t for t in coordinator.tasks if t.id == seeded["someday"].id)
        assert outcome.error == "Body is required"
        assert local.body == seeded["someday"].body
        assert coordinator.phase is SyncPhase.ROLLED_BACK

    @pytest.mark.asyncio
    async def test_malformed_update_never_reaches_storage(self, coordinator, use_cases, seeded):
        with patch.object(use_cases, "update_task", AsyncMock()) as update:
            outcome = await coordinator.update_task(seeded["someday"].id, {"priority": "high"})

        assert not outcome.success
        update.assert_not_called()
        assert coordinator.error == outcome.error

    @pytest.mark.asyncio
    async def test_concurrent_mutations_on_different_tasks(self, clock, identity):
        storage = MemoryTaskStorageProvider(
            settings=MemoryStorageSettings(simulated_latency=0.01), clock=clock
        )
        a, b, c = make_task(body="a"), make_task(body="b"), make_task(body="c")
        for task in (a, b, c):
            await storage.create(task)
        use_cases = TaskUseCases(storage, clock=clock)
        coordinator = OptimisticSyncCoordinator(use_cases, identity)
        await coordinator.refresh()

        outcomes = await asyncio.gather(
            coordinator.complete_task(a.id),
            coordinator.delete_task(b.id),
            coordinator.update_task(c.id, {"title": "renamed"}),
        )

        assert all(o.success for o in outcomes)
        assert [(t.id, t.title) for t in coordinator.tasks] == [(c.id, "renamed")]
        assert coordinator.phase is SyncPhase.STABLE

    @pytest.mark.asyncio
    async def test_same_task_race_keeps_last_optimistic_write(self, clock, identity):
        """Known race: no per-task lock, the last optimistic write shows until a refetch."""
        storage = MemoryTaskStorageProvider(
            settings=MemoryStorageSettings(simulated_latency=0.01), clock=clock
        )
        task = make_task(body="shared")
        await storage.create(task)
        coordinator = OptimisticSyncCoordinator(TaskUseCases(storage, clock=clock), identity)
        await coordinator.refresh()

        await asyncio.gather(
            coordinator.update_task(task.id, {"title": "first"}),
            coordinator.update_task(task.id, {"title": "second"}),
        )

        assert coordinator.tasks[0].title == "second"
        stored = (await storage.find_by_id(task.id, USER_ID)).data
        assert stored.title in {"first", "second"}


class TestNonOptimisticMutations:
    """Test reopen and create."""

    @pytest.mark.asyncio
    async def test_reopen_refetches_after_success(self, coordinator, use_cases, seeded):
        await coordinator.complete_task(seeded["report"].id)
        assert seeded["report"].id not in _ids(coordinator.tasks)

        outcome = await coordinator.reopen_task(seeded["report"].id)

        assert outcome.success
        assert seeded["report"].id in _ids(coordinator.tasks)

    @pytest.mark.asyncio
    async def test_reopen_failure_sets_error_without_refetch(self, coordinator, use_cases, seeded):
        refetch = AsyncMock(wraps=use_cases.get_dashboard)
        with patch.object(use_cases, "get_dashboard", refetch):
            outcome = await coordinator.reopen_task(seeded["foreign"].id)

        assert outcome.error == "Todo not found or access denied"
        refetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_inserts_stored_record(self, coordinator):
        outcome = await coordinator.create_task(body="Renew passport", deadline="2025-09-01")

        assert outcome.success
        assert outcome.task_id == outcome.task.id
        assert coordinator.tasks[0].id == outcome.task.id

    @pytest.mark.asyncio
    async def test_actions_without_user_are_noops(self, use_cases, seeded):
        coordinator = OptimisticSyncCoordinator(use_cases, StaticIdentityProvider())

        assert await coordinator.complete_task(seeded["report"].id) is None
        assert await coordinator.delete_task(seeded["report"].id) is None
        assert await coordinator.update_task(seeded["report"].id, {"title": "x"}) is None
        assert await coordinator.reopen_task(seeded["report"].id) is None
        assert await coordinator.create_task(body="x") is None


class TestSnapshotAndCallbacks:
    """Test the dashboard view, validation and callbacks."""

    @pytest.mark.asyncio
    async def test_snapshot_matrix_view(self, coordinator, seeded):
        snapshot = coordinator.snapshot()

        assert snapshot.quadrants[Quadrant.URGENT_IMPORTANT] == [seeded["taxes"]]
        assert len(snapshot.tasks) == 4
        assert snapshot.phase is SyncPhase.STABLE

    @pytest.mark.asyncio
    async def test_snapshot_overdue_filter(self, coordinator, seeded):
        coordinator.set_show_overdue_only(True)

        assert coordinator.snapshot().tasks == [seeded["taxes"]]

    @pytest.mark.asyncio
    async def test_snapshot_list_mode_sorts_by_importance(self, coordinator, seeded):
        coordinator.set_view_mode("list")

        snapshot = coordinator.snapshot()

        assert snapshot.filters.view_mode is ViewMode.LIST
        scores = [t.importance_score for t in snapshot.tasks]
        assert scores == sorted(scores, reverse=True)
        assert snapshot.tasks[0] == seeded["report"]

    def test_validate_without_submitting(self, use_cases, identity):
        coordinator = OptimisticSyncCoordinator(use_cases, identity)

        assert coordinator.validate(body="ok").valid
        assert coordinator.validate(body="", title="t" * 201).errors == [
            "Body is required",
            "Title must be 200 characters or less",
        ]

    @pytest.mark.asyncio
    async def test_callbacks_sync_and_async(self, use_cases, identity, seeded):
        on_success = Mock()
        on_error = AsyncMock()
        coordinator = OptimisticSyncCoordinator(use_cases, identity, on_success=on_success, on_error=on_error)
        await coordinator.refresh()

        await coordinator.complete_task(seeded["report"].id)
        await coordinator.complete_task(seeded["foreign"].id)

        assert on_success.call_args.args[0].action is MutationAction.COMPLETE
        on_error.assert_awaited_once()
        assert on_error.await_args.args[0].error == "Todo not found or access denied"

    @pytest.mark.asyncio
    async def test_failing_callback_is_logged(self, use_cases, identity, seeded, caplog):
        coordinator = OptimisticSyncCoordinator(
            use_cases, identity, on_success=Mock(side_effect=RuntimeError("render failed"))
        )
        await coordinator.refresh()

        with caplog.at_level(logging.ERROR, logger="prioritylib.sync.coordinator"):
            outcome = await coordinator.complete_task(seeded["report"].id)

        assert outcome.success
        assert any("render failed" in r.getMessage() for r in caplog.records)
