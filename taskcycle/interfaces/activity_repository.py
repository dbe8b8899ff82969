"""
Activity repository interface.

Defines contract for user activity audit persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from taskcycle.models.activity import ActivityCreate, ActivityRecord


class IActivityRepository(ABC):
    """Abstract interface for activity persistence."""

    @abstractmethod
    async def record(self, activity: ActivityCreate) -> ActivityRecord:
        """Persist one activity record."""
        pass

    @abstractmethod
    async def list(self, user_id: str, limit: int = 50) -> list[ActivityRecord]:
        """List a user's most recent activity records, newest first."""
        pass
