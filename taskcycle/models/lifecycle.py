"""
Result and report models for the recurring task lifecycle.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from taskcycle.models.enums import HealthStatus, LifecycleOperation
from taskcycle.models.task import Task


class CompletionResult(BaseModel):
    """Outcome of window advancement after a completion."""

    updated_task: Optional[Task] = Field(
        None, description="Next unfinished instance, re-linked to the chain root"
    )
    created_task: Optional[Task] = Field(
        None, description="Instance appended to keep the forward window full"
    )


class RegenerationResult(BaseModel):
    """Outcome of deleting and regenerating a chain's future instances."""

    deleted_count: int = 0
    generated_count: int = 0
    new_instances: list[Task] = Field(default_factory=list)
    message: str = ""


class RecurringTaskStats(BaseModel):
    """Aggregate task counts, optionally scoped to one owner."""

    total_tasks: int = 0
    recurring_parents: int = 0
    recurring_instances: int = 0
    daily: int = 0
    weekly: int = 0
    monthly: int = 0


class WindowReconciliation(BaseModel):
    """Summary of a forward-window reconciliation pass."""

    parents_checked: int = 0
    instances_generated: int = 0
    instances_trimmed: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)


class DispatchResult(BaseModel):
    """Envelope returned by LifecycleFacade.dispatch."""

    success: bool
    operation: LifecycleOperation
    task_id: str
    result: Any = None


class HealthReport(BaseModel):
    """Engine health as reported by LifecycleFacade.health."""

    status: HealthStatus
    timestamp: datetime
    services: dict[str, str]
    stats: Optional[RecurringTaskStats] = None
    error: Optional[str] = None


class MaintenanceReport(BaseModel):
    """Structured summary of a maintenance pass."""

    success: bool
    timestamp: datetime
    duration_ms: int
    orphans_removed: int = 0
    windows: WindowReconciliation = Field(default_factory=WindowReconciliation)


class DetailedStats(BaseModel):
    """Stats plus component status, as reported to operators."""

    timestamp: datetime
    user_id: str = "all_users"
    recurring_tasks: RecurringTaskStats
    services: dict[str, str]
