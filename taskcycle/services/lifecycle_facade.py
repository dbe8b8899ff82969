"""
Lifecycle facade.

Single entry point for the request layer: validates the shape of a
lifecycle event, forwards it to the orchestrator and wraps failures.
Also reports engine health and runs the maintenance pass.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Union

from taskcycle.core.exceptions import ProcessingError, ValidationError
from taskcycle.core.logger import setup_logger
from taskcycle.models.enums import HealthStatus, LifecycleOperation, RepeatType
from taskcycle.models.lifecycle import (
    DetailedStats,
    DispatchResult,
    HealthReport,
    MaintenanceReport,
)
from taskcycle.services import recurrence_calculator
from taskcycle.services.activity_notifier import ActivityNotifier
from taskcycle.services.occurrence_orchestrator import OccurrenceOrchestrator
from taskcycle.utils.datetime_utils import now_utc

logger = setup_logger(__name__)

OPERATIONAL = "operational"


class LifecycleFacade:
    """Dispatch and reporting layer over OccurrenceOrchestrator."""

    def __init__(
        self,
        orchestrator: OccurrenceOrchestrator,
        notifier: Optional[ActivityNotifier] = None,
    ):
        self.orchestrator = orchestrator
        self.notifier = notifier or orchestrator.notifier

    @staticmethod
    def _parse_operation(operation: Union[LifecycleOperation, str]) -> LifecycleOperation:
        if not operation or not isinstance(operation, str):
            raise ValidationError("Valid operation is required")
        try:
            return LifecycleOperation(operation)
        except ValueError:
            valid = ", ".join(op.value for op in LifecycleOperation)
            raise ValidationError(f"Invalid operation. Must be one of: {valid}")

    @staticmethod
    def _parse_task_id(task_id: str) -> int:
        if not task_id or not isinstance(task_id, str) or not task_id.strip():
            raise ValidationError("Valid taskId is required")
        try:
            parsed = int(task_id.strip())
        except ValueError:
            raise ValidationError(f"taskId must be an integer identifier, got '{task_id}'")
        if parsed < 1:
            raise ValidationError("taskId must be a positive integer")
        return parsed

    async def dispatch(
        self,
        task_id: str,
        operation: Union[LifecycleOperation, str],
        user_id: Optional[str] = None,
    ) -> DispatchResult:
        """
        Route a lifecycle event to the orchestrator.

        Args:
            task_id: Application-level task ID (as received from the request layer)
            operation: create, complete or delete
            user_id: Owner ID, required for delete

        Returns:
            DispatchResult carrying the orchestrator's result

        Raises:
            ValidationError: malformed request, before any orchestration
            ProcessingError: orchestration failed
        """
        op = self._parse_operation(operation)
        numeric_id = self._parse_task_id(task_id)
        if op == LifecycleOperation.DELETE and not user_id:
            raise ValidationError("userId is required for delete operation")

        try:
            result: Any
            if op == LifecycleOperation.CREATE:
                result = await self.orchestrator.on_create(numeric_id)
            elif op == LifecycleOperation.COMPLETE:
                result = await self.orchestrator.on_complete(numeric_id)
            else:
                result = await self.orchestrator.on_delete(numeric_id, user_id)
        except Exception as e:
            logger.error(f"Failed to process {op.value} for task {task_id}: {e}")
            if user_id:
                await self.notifier.notify(
                    user_id, f"{op.value.upper()}_FAILED", task_id, str(e)
                )
            raise ProcessingError(op.value, e) from e

        logger.info(f"Successfully processed {op.value} for task {task_id}")
        return DispatchResult(success=True, operation=op, task_id=task_id, result=result)

    async def health(self) -> HealthReport:
        """Report component reachability and aggregate stats."""
        try:
            # Calculator self-check on a fixed month-end date
            probe = recurrence_calculator.next_occurrence(
                now_utc().replace(month=1, day=31), RepeatType.MONTHLY
            )
            if probe.month != 2:
                raise RuntimeError("Recurrence calculator self-check failed")
            stats = await self.orchestrator.stats()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return HealthReport(
                status=HealthStatus.DEGRADED,
                timestamp=now_utc(),
                error=str(e),
                services={"orchestrator": "error", "calculator": "unknown"},
            )

        return HealthReport(
            status=HealthStatus.HEALTHY,
            timestamp=now_utc(),
            services={"orchestrator": OPERATIONAL, "calculator": OPERATIONAL},
            stats=stats,
        )

    async def maintenance(self) -> MaintenanceReport:
        """
        Run the orphan sweep and window reconciliation.

        Raises:
            ProcessingError: the pass could not run
        """
        started_at = now_utc()
        started = time.monotonic()
        logger.info("Starting maintenance operations...")
        try:
            orphans_removed = await self.orchestrator.sweep_orphans()
            windows = await self.orchestrator.reconcile_windows()
        except Exception as e:
            logger.error(f"Maintenance operations failed: {e}")
            raise ProcessingError("maintenance", e) from e

        report = MaintenanceReport(
            success=not windows.errors,
            timestamp=started_at,
            duration_ms=int((time.monotonic() - started) * 1000),
            orphans_removed=orphans_removed,
            windows=windows,
        )
        logger.info(
            f"Maintenance completed: {orphans_removed} orphans removed, "
            f"{windows.instances_generated} generated, {windows.instances_trimmed} trimmed"
        )
        return report

    async def detailed_stats(self, user_id: Optional[str] = None) -> DetailedStats:
        """Stats for one owner (or all) plus component status."""
        try:
            stats = await self.orchestrator.stats(user_id)
        except Exception as e:
            raise ProcessingError("stats", e) from e
        return DetailedStats(
            timestamp=now_utc(),
            user_id=user_id or "all_users",
            recurring_tasks=stats,
            services={"orchestrator": OPERATIONAL, "calculator": OPERATIONAL},
        )
