"""
User activity models.

Activity records are an audit trail written on a best-effort basis; the
recurrence engine never depends on them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


def format_activity_message(
    action: str, task_id: Optional[str] = None, error: Optional[str] = None
) -> str:
    """Build the human-readable message stored with an activity record."""
    if error:
        if task_id:
            return f"User attempted {action} :: {task_id} :: ERROR: {error}"
        return f"User attempted {action} :: ERROR: {error}"
    if task_id:
        return f"User performed {action} :: {task_id}"
    return f"User performed {action}"


class ActivityCreate(BaseModel):
    """Schema for recording an activity."""

    user_id: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1, max_length=100)
    task_id: Optional[str] = None
    error: Optional[str] = Field(None, max_length=2000)

    @property
    def message(self) -> str:
        return format_activity_message(self.action, self.task_id, self.error)


class ActivityRecord(BaseModel):
    """Stored activity record."""

    id: UUID
    user_id: str
    action: str
    task_id: Optional[str] = None
    error: Optional[str] = None
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
