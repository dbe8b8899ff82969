"""
Task model definitions.

Tasks are the unit of work. A task with a cadence other than NONE and no
recurring_parent_id is a recurring parent; tasks generated from it carry
its task_id in recurring_parent_id.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from taskcycle.models.enums import Priority, RepeatType, SortOrder
from taskcycle.utils.datetime_utils import ensure_utc


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: str = Field("", max_length=2000, description="Task description")
    due_date: Optional[datetime] = Field(None, description="Due timestamp (UTC)")
    priority: Priority = Field(Priority.MEDIUM, description="Priority (low/medium/high)")
    category: str = Field("", max_length=200)
    links: list[str] = Field(default_factory=list, description="External links")
    additional_notes: str = Field("", max_length=5000)
    repeat_type: RepeatType = Field(RepeatType.NONE, description="Recurrence cadence")
    is_completed: bool = False
    parent_id: Optional[int] = Field(
        None, description="Hierarchical parent task_id (subtasks only)"
    )
    recurring_parent_id: Optional[int] = Field(
        None, description="task_id of the recurring parent this instance belongs to"
    )

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    pass


class TaskUpdate(BaseModel):
    """Schema for updating an existing task."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    category: Optional[str] = Field(None, max_length=200)
    links: Optional[list[str]] = None
    additional_notes: Optional[str] = Field(None, max_length=5000)
    repeat_type: Optional[RepeatType] = None
    is_completed: Optional[bool] = None
    recurring_parent_id: Optional[int] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Task(TaskBase):
    """Complete task model with all fields."""

    id: UUID
    task_id: int = Field(..., ge=1, description="Application-level sequential ID")
    user_id: str = Field(..., description="Owner user ID")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_recurring_parent(self) -> bool:
        return self.repeat_type != RepeatType.NONE and self.recurring_parent_id is None

    @property
    def is_recurring_instance(self) -> bool:
        return self.recurring_parent_id is not None

    @property
    def is_subtask(self) -> bool:
        return self.parent_id is not None

    @property
    def chain_root_id(self) -> int:
        """task_id identifying the recurring chain this task belongs to."""
        return self.recurring_parent_id or self.task_id

    def is_overdue(self, now: datetime) -> bool:
        if self.is_completed or self.due_date is None:
            return False
        return self.due_date < ensure_utc(now)


class TaskQuery(BaseModel):
    """
    Filter, sort and paging options for listing tasks.

    Every filter left as None is not applied.
    """

    user_id: Optional[str] = None
    recurring_parent_id: Optional[int] = None
    has_recurring_parent: Optional[bool] = None
    recurring_parents_only: bool = False
    repeat_type: Optional[RepeatType] = None
    is_completed: Optional[bool] = None
    due_after: Optional[datetime] = Field(None, description="Strictly after")
    due_from: Optional[datetime] = Field(None, description="At or after")
    sort: Optional[SortOrder] = Field(None, description="Order by due_date")
    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)

    @field_validator("due_after", "due_from")
    @classmethod
    def normalize_bounds(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)
