"""
Enum definitions for the application.

These enums are used across models and provide type-safe cadence/operation values.
"""

from enum import Enum


class RepeatType(str, Enum):
    """Recurrence cadence of a task."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Priority(str, Enum):
    """Priority level."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LifecycleOperation(str, Enum):
    """Operations accepted by LifecycleFacade.dispatch."""

    CREATE = "create"
    COMPLETE = "complete"
    DELETE = "delete"


class ActivityAction(str, Enum):
    """Activity actions emitted by the recurrence engine."""

    RECURRING_TASK_CREATED = "RECURRING_TASK_CREATED"
    RECURRING_TASK_UPDATED = "RECURRING_TASK_UPDATED"
    RECURRING_TASKS_DELETED = "RECURRING_TASKS_DELETED"
    RECURRING_TASK_TRIMMED = "RECURRING_TASK_TRIMMED"
    ORPHANED_RECURRING_TASK_CLEANED = "ORPHANED_RECURRING_TASK_CLEANED"


class HealthStatus(str, Enum):
    """Health status reported by LifecycleFacade.health."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class SortOrder(str, Enum):
    """Sort direction for due-date ordered queries."""

    ASC = "asc"
    DESC = "desc"
