"""
Best-effort activity notification.

Wraps the activity repository so that recording an activity can never undo
or abort the operation that triggered it: every failure is logged and
swallowed here.
"""

from __future__ import annotations

from typing import Optional, Union

from taskcycle.core.logger import setup_logger
from taskcycle.interfaces.activity_repository import IActivityRepository
from taskcycle.models.activity import ActivityCreate, ActivityRecord
from taskcycle.models.enums import ActivityAction

logger = setup_logger(__name__)


class ActivityNotifier:
    """Fire-and-forget activity recording."""

    def __init__(self, activity_repo: Optional[IActivityRepository] = None):
        self.activity_repo = activity_repo

    async def notify(
        self,
        user_id: Optional[str],
        action: Union[ActivityAction, str],
        task_id: Optional[Union[int, str]] = None,
        error: Optional[str] = None,
    ) -> Optional[ActivityRecord]:
        """
        Record an activity. Never raises.

        Returns:
            The stored record, or None if nothing was recorded
        """
        if self.activity_repo is None:
            return None

        action_name = action.value if isinstance(action, ActivityAction) else action
        if not user_id:
            logger.warning(f"Activity {action_name} skipped: user_id is required")
            return None

        try:
            activity = ActivityCreate(
                user_id=str(user_id),
                action=action_name,
                task_id=str(task_id) if task_id is not None else None,
                error=error,
            )
            return await self.activity_repo.record(activity)
        except Exception as e:
            logger.warning(f"Failed to record activity {action_name} for {task_id}: {e}")
            return None
