"""
Occurrence orchestration service.

Keeps the forward window of recurring task instances in storage: generates
it when a recurring parent is created, advances it when an instance is
completed, tears the chain down on deletion and removes orphans whose
recurring parent no longer exists.

None of these operations are transactional across storage calls. Concurrent
completions may overshoot the window and a completion racing a deletion may
leave an orphan; reconcile_windows() and sweep_orphans() repair both.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from taskcycle.core.config import get_settings
from taskcycle.core.exceptions import NotFoundError, ValidationError
from taskcycle.core.logger import setup_logger
from taskcycle.interfaces.task_repository import ITaskRepository
from taskcycle.models.enums import ActivityAction, RepeatType, SortOrder
from taskcycle.models.lifecycle import (
    CompletionResult,
    RecurringTaskStats,
    RegenerationResult,
    WindowReconciliation,
)
from taskcycle.models.task import Task, TaskCreate, TaskQuery, TaskUpdate
from taskcycle.services import recurrence_calculator
from taskcycle.services.activity_notifier import ActivityNotifier
from taskcycle.utils.datetime_utils import coerce_utc, now_utc

logger = setup_logger(__name__)


class OccurrenceOrchestrator:
    """Service owning the recurring-chain invariants of the task store."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        notifier: Optional[ActivityNotifier] = None,
        window_size: Optional[int] = None,
        past_due_tolerance: Optional[timedelta] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        settings = get_settings()
        self.task_repo = task_repo
        self.notifier = notifier or ActivityNotifier()
        self.window_size = window_size or settings.RECURRENCE_WINDOW_SIZE
        self.past_due_tolerance = past_due_tolerance or timedelta(
            hours=settings.PAST_DUE_TOLERANCE_HOURS
        )
        self._clock = clock or now_utc

    # ===========================================
    # Helpers
    # ===========================================

    async def _load(self, task_id: int, user_id: Optional[str] = None) -> Task:
        task = await self.task_repo.get(task_id, user_id=user_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def _validate(self, task: Task) -> None:
        recurrence_calculator.validate_recurrence_rules(
            task, now=self._clock(), tolerance=self.past_due_tolerance
        )

    @staticmethod
    def _instance_data(template: Task, due_date: datetime, root_id: int) -> TaskCreate:
        """Copy the attributes every instance of a chain shares."""
        return TaskCreate(
            title=template.title,
            description=template.description,
            due_date=due_date,
            priority=template.priority,
            category=template.category,
            links=list(template.links),
            additional_notes=template.additional_notes,
            repeat_type=template.repeat_type,
            is_completed=False,
            recurring_parent_id=root_id,
        )

    async def _create_instance(
        self, template: Task, due_date: datetime, root_id: int
    ) -> Task:
        instance = await self.task_repo.create(
            template.user_id, self._instance_data(template, due_date, root_id)
        )
        await self.notifier.notify(
            template.user_id, ActivityAction.RECURRING_TASK_CREATED, instance.task_id
        )
        return instance

    async def _generate_window(self, parent: Task) -> list[Task]:
        self._validate(parent)
        dates = recurrence_calculator.generate_occurrences(
            parent.due_date, parent.repeat_type, self.window_size
        )
        created = []
        for occurrence in dates:
            created.append(await self._create_instance(parent, occurrence, parent.task_id))
        return created

    # ===========================================
    # Lifecycle events
    # ===========================================

    async def on_create(self, task_id: int) -> list[Task]:
        """
        Generate the initial forward window for a newly created task.

        Returns:
            Created instances (empty for non-recurring tasks)

        Raises:
            NotFoundError: task does not exist
            ValidationError: task breaks a recurrence rule
        """
        parent = await self._load(task_id)
        if parent.repeat_type == RepeatType.NONE:
            return []
        if parent.recurring_parent_id is not None:
            logger.info(f"Task {task_id} is a recurring instance, nothing to generate")
            return []

        created = await self._generate_window(parent)
        logger.info(f"Created {len(created)} recurring instances for task {task_id}")
        return created

    async def on_complete(self, task_id: int) -> CompletionResult:
        """
        Advance the forward window after a task in a chain was completed.

        Re-links the next unfinished instance to the chain root and appends
        one instance after the latest incomplete future instance.

        Raises:
            NotFoundError: task does not exist
        """
        completed = await self._load(task_id)
        if completed.repeat_type == RepeatType.NONE:
            return CompletionResult()

        root_id = completed.chain_root_id
        updated_task = None
        created_task = None

        if completed.due_date is not None:
            next_instance = await self.task_repo.find_first(
                TaskQuery(
                    recurring_parent_id=root_id,
                    is_completed=False,
                    due_after=completed.due_date,
                    sort=SortOrder.ASC,
                )
            )
            if next_instance:
                updated_task = await self.task_repo.update(
                    next_instance.task_id, TaskUpdate(recurring_parent_id=root_id)
                )
                await self.notifier.notify(
                    completed.user_id,
                    ActivityAction.RECURRING_TASK_UPDATED,
                    updated_task.task_id,
                )

        latest_future = await self.task_repo.find_first(
            TaskQuery(
                recurring_parent_id=root_id,
                is_completed=False,
                due_after=self._clock(),
                sort=SortOrder.DESC,
            )
        )
        if latest_future:
            next_date = recurrence_calculator.next_occurrence(
                latest_future.due_date, completed.repeat_type
            )
            created_task = await self._create_instance(completed, next_date, root_id)

        logger.info(f"Processed completion for recurring task {task_id}")
        return CompletionResult(updated_task=updated_task, created_task=created_task)

    async def on_delete(self, task_id: int, user_id: str) -> int:
        """
        Delete every instance of the chain the task belongs to.

        The chain root is task_id itself when it still has instances,
        otherwise the deleted task's own recurring_parent_id.

        Returns:
            Number of deleted instances

        Raises:
            NotFoundError: task has no instances and does not exist
        """
        children = await self.task_repo.list(
            TaskQuery(recurring_parent_id=task_id, user_id=user_id, limit=1)
        )
        root_id = task_id
        if not children:
            task = await self._load(task_id, user_id=user_id)
            if task.recurring_parent_id is None:
                return 0
            root_id = task.recurring_parent_id

        deleted = await self.task_repo.delete_by_recurring_parent(root_id, user_id)
        if deleted > 0:
            await self.notifier.notify(
                user_id, ActivityAction.RECURRING_TASKS_DELETED, root_id
            )
        logger.info(f"Deleted {deleted} recurring tasks for task {task_id}")
        return deleted

    # ===========================================
    # Cadence / due date edits
    # ===========================================

    async def on_due_date_change(
        self, task_id: int, new_due_date: datetime
    ) -> RegenerationResult:
        """Move a recurring parent's due date and rebuild its future instances."""
        due_date = coerce_utc(new_due_date)
        if due_date is None:
            raise ValidationError("Valid new due date is required")

        task = await self._load(task_id)
        if not task.is_recurring_parent:
            return RegenerationResult(
                message="Task is not a recurring parent, no instances to regenerate"
            )

        self._validate(task.model_copy(update={"due_date": due_date}))
        deleted = await self.task_repo.delete_by_recurring_parent(
            task.task_id, task.user_id, due_from=self._clock()
        )
        parent = await self.task_repo.update(task.task_id, TaskUpdate(due_date=due_date))
        new_instances = await self._generate_window(parent)

        return RegenerationResult(
            deleted_count=deleted,
            generated_count=len(new_instances),
            new_instances=new_instances,
            message=(
                f"Deleted {deleted} future instances and generated "
                f"{len(new_instances)} new instances"
            ),
        )

    async def on_repeat_type_change(
        self, task_id: int, new_repeat_type: RepeatType | str
    ) -> RegenerationResult:
        """Change a task's cadence, dropping and regenerating future instances."""
        try:
            cadence = RepeatType(new_repeat_type)
        except ValueError:
            raise ValidationError(
                "Valid repeat type is required (none, daily, weekly, monthly)"
            )

        task = await self._load(task_id)
        if task.recurring_parent_id is not None:
            raise ValidationError("Cadence can only be changed on the recurring parent")
        if cadence != RepeatType.NONE:
            self._validate(task.model_copy(update={"repeat_type": cadence}))

        deleted = 0
        if task.is_recurring_parent:
            deleted = await self.task_repo.delete_by_recurring_parent(
                task.task_id, task.user_id, due_from=self._clock()
            )

        parent = await self.task_repo.update(task.task_id, TaskUpdate(repeat_type=cadence))
        if cadence == RepeatType.NONE:
            return RegenerationResult(
                deleted_count=deleted,
                message=f"Changed repeat type to none. Deleted {deleted} recurring instances",
            )

        new_instances = await self._generate_window(parent)
        return RegenerationResult(
            deleted_count=deleted,
            generated_count=len(new_instances),
            new_instances=new_instances,
            message=(
                f"Changed repeat type to {cadence.value}. Deleted {deleted} old "
                f"instances and generated {len(new_instances)} new instances"
            ),
        )

    # ===========================================
    # Maintenance
    # ===========================================

    async def sweep_orphans(self) -> int:
        """
        Delete instances whose recurring parent no longer exists.

        Each record is handled in isolation: a failure on one is logged and
        the sweep continues. Safe to re-run at any time.

        Returns:
            Number of orphans removed
        """
        instances = await self.task_repo.list(TaskQuery(has_recurring_parent=True))
        parent_exists: dict[int, bool] = {}
        removed = 0

        for instance in instances:
            root_id = instance.recurring_parent_id
            try:
                if root_id not in parent_exists:
                    parent_exists[root_id] = await self.task_repo.get(root_id) is not None
                if parent_exists[root_id]:
                    continue
                if not await self.task_repo.delete(instance.task_id):
                    continue
            except Exception as e:
                logger.error(f"Failed to clean up recurring task {instance.task_id}: {e}")
                continue

            removed += 1
            await self.notifier.notify(
                instance.user_id,
                ActivityAction.ORPHANED_RECURRING_TASK_CLEANED,
                instance.task_id,
            )

        logger.info(f"Cleaned up {removed} orphaned recurring tasks")
        return removed

    async def reconcile_windows(self) -> WindowReconciliation:
        """
        Bring every chain's forward window back to the target size.

        Duplicate due dates and instances beyond the window are trimmed;
        chains with at least one but fewer than window_size incomplete future
        instances are topped up. Exhausted chains are left alone.
        """
        now = self._clock()
        summary = WindowReconciliation()
        parents = await self.task_repo.list(TaskQuery(recurring_parents_only=True))

        for parent in parents:
            summary.parents_checked += 1
            try:
                generated, trimmed = await self._reconcile_chain(parent, now)
            except Exception as e:
                logger.error(f"Error reconciling recurring task {parent.task_id}: {e}")
                summary.errors.append({"parent_task_id": parent.task_id, "error": str(e)})
                continue
            summary.instances_generated += generated
            summary.instances_trimmed += trimmed

        logger.info(
            f"Window reconciliation: {summary.parents_checked} chains, "
            f"{summary.instances_generated} generated, {summary.instances_trimmed} trimmed"
        )
        return summary

    async def _reconcile_chain(self, parent: Task, now: datetime) -> tuple[int, int]:
        window = await self.task_repo.list(
            TaskQuery(
                recurring_parent_id=parent.task_id,
                is_completed=False,
                due_after=now,
                sort=SortOrder.ASC,
            )
        )
        if not window:
            return 0, 0

        keep: list[Task] = []
        surplus: list[Task] = []
        seen_dates = set()
        for instance in window:
            if instance.due_date in seen_dates:
                surplus.append(instance)
            else:
                seen_dates.add(instance.due_date)
                keep.append(instance)
        surplus.extend(keep[self.window_size:])
        keep = keep[: self.window_size]

        trimmed = 0
        for instance in surplus:
            if await self.task_repo.delete(instance.task_id):
                trimmed += 1
                await self.notifier.notify(
                    instance.user_id,
                    ActivityAction.RECURRING_TASK_TRIMMED,
                    instance.task_id,
                )

        generated = 0
        latest = keep[-1].due_date
        while len(keep) + generated < self.window_size:
            latest = recurrence_calculator.next_occurrence(latest, parent.repeat_type)
            await self._create_instance(parent, latest, parent.task_id)
            generated += 1

        return generated, trimmed

    async def stats(self, user_id: Optional[str] = None) -> RecurringTaskStats:
        """Aggregate counts, optionally scoped to one owner."""
        return await self.task_repo.get_recurrence_stats(user_id)
