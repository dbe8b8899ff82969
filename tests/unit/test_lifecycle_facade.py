"""
Unit tests for LifecycleFacade.

The orchestrator is mocked; request validation, failure wrapping and
reporting are what is under test here.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskcycle.core.exceptions import NotFoundError, ProcessingError, ValidationError
from taskcycle.models.enums import HealthStatus, LifecycleOperation
from taskcycle.models.lifecycle import (
    CompletionResult,
    RecurringTaskStats,
    WindowReconciliation,
)
from taskcycle.services.lifecycle_facade import LifecycleFacade


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.notify = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def mock_orchestrator(mock_notifier):
    """Mock occurrence orchestrator."""
    orchestrator = MagicMock()
    orchestrator.notifier = mock_notifier
    orchestrator.on_create = AsyncMock(return_value=[])
    orchestrator.on_complete = AsyncMock(return_value=CompletionResult())
    orchestrator.on_delete = AsyncMock(return_value=3)
    orchestrator.sweep_orphans = AsyncMock(return_value=2)
    orchestrator.reconcile_windows = AsyncMock(
        return_value=WindowReconciliation(parents_checked=4, instances_generated=1)
    )
    orchestrator.stats = AsyncMock(
        return_value=RecurringTaskStats(total_tasks=10, recurring_parents=2)
    )
    return orchestrator


@pytest.fixture
def mock_facade(mock_orchestrator):
    return LifecycleFacade(mock_orchestrator)


class TestDispatchValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("task_id", ["", "   ", None, 42, "abc", "0", "-3"])
    async def test_invalid_task_id(self, mock_facade, mock_orchestrator, task_id):
        with pytest.raises(ValidationError):
            await mock_facade.dispatch(task_id, "create")
        mock_orchestrator.on_create.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["", None, "archive", "CREATE"])
    async def test_invalid_operation(self, mock_facade, mock_orchestrator, operation):
        with pytest.raises(ValidationError):
            await mock_facade.dispatch("12", operation)
        mock_orchestrator.on_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_requires_user(self, mock_facade, mock_orchestrator):
        with pytest.raises(ValidationError, match="userId"):
            await mock_facade.dispatch("12", "delete")
        mock_orchestrator.on_delete.assert_not_called()


class TestDispatchRouting:
    @pytest.mark.asyncio
    async def test_create(self, mock_facade, mock_orchestrator):
        result = await mock_facade.dispatch("12", "create")

        mock_orchestrator.on_create.assert_awaited_once_with(12)
        assert result.success is True
        assert result.operation == LifecycleOperation.CREATE
        assert result.task_id == "12"
        assert result.result == []

    @pytest.mark.asyncio
    async def test_complete(self, mock_facade, mock_orchestrator):
        result = await mock_facade.dispatch("7", LifecycleOperation.COMPLETE)

        mock_orchestrator.on_complete.assert_awaited_once_with(7)
        assert isinstance(result.result, CompletionResult)

    @pytest.mark.asyncio
    async def test_delete(self, mock_facade, mock_orchestrator):
        result = await mock_facade.dispatch("7", "delete", "user_A")

        mock_orchestrator.on_delete.assert_awaited_once_with(7, "user_A")
        assert result.result == 3


class TestDispatchFailures:
    @pytest.mark.asyncio
    async def test_failure_wrapped_and_recorded(
        self, mock_facade, mock_orchestrator, mock_notifier
    ):
        cause = NotFoundError("Task 7 not found")
        mock_orchestrator.on_complete.side_effect = cause

        with pytest.raises(ProcessingError) as exc_info:
            await mock_facade.dispatch("7", "complete", "user_A")

        assert exc_info.value.operation == "complete"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        mock_notifier.notify.assert_awaited_once_with(
            "user_A", "COMPLETE_FAILED", "7", "Task 7 not found"
        )

    @pytest.mark.asyncio
    async def test_failure_without_user_not_recorded(
        self, mock_facade, mock_orchestrator, mock_notifier
    ):
        mock_orchestrator.on_create.side_effect = RuntimeError("boom")

        with pytest.raises(ProcessingError):
            await mock_facade.dispatch("7", "create")

        mock_notifier.notify.assert_not_called()


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, mock_facade):
        report = await mock_facade.health()

        assert report.status == HealthStatus.HEALTHY
        assert report.services == {"orchestrator": "operational", "calculator": "operational"}
        assert report.stats.total_tasks == 10
        assert report.error is None

    @pytest.mark.asyncio
    async def test_degraded_on_storage_failure(self, mock_facade, mock_orchestrator):
        mock_orchestrator.stats.side_effect = RuntimeError("database unavailable")

        report = await mock_facade.health()

        assert report.status == HealthStatus.DEGRADED
        assert report.error == "database unavailable"
        assert report.services["orchestrator"] == "error"
        assert report.stats is None


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_report(self, mock_facade, mock_orchestrator):
        report = await mock_facade.maintenance()

        mock_orchestrator.sweep_orphans.assert_awaited_once()
        mock_orchestrator.reconcile_windows.assert_awaited_once()
        assert report.success is True
        assert report.orphans_removed == 2
        assert report.windows.instances_generated == 1
        assert report.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_window_errors_mark_unsuccessful(self, mock_facade, mock_orchestrator):
        mock_orchestrator.reconcile_windows.return_value = WindowReconciliation(
            parents_checked=1, errors=[{"parent_task_id": 1, "error": "x"}]
        )

        report = await mock_facade.maintenance()

        assert report.success is False

    @pytest.mark.asyncio
    async def test_sweep_failure_wrapped(self, mock_facade, mock_orchestrator):
        mock_orchestrator.sweep_orphans.side_effect = RuntimeError("scan failed")

        with pytest.raises(ProcessingError) as exc_info:
            await mock_facade.maintenance()

        assert exc_info.value.operation == "maintenance"
        mock_orchestrator.reconcile_windows.assert_not_called()


@pytest.mark.asyncio
async def test_detailed_stats(mock_facade, mock_orchestrator):
    stats = await mock_facade.detailed_stats("user_A")

    mock_orchestrator.stats.assert_awaited_once_with("user_A")
    assert stats.user_id == "user_A"
    assert stats.recurring_tasks.recurring_parents == 2

    overall = await mock_facade.detailed_stats()
    assert overall.user_id == "all_users"
