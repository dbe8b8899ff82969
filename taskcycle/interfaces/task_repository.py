"""
Task repository interface.

Defines the contract for task persistence operations.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from taskcycle.models.lifecycle import RecurringTaskStats
from taskcycle.models.task import Task, TaskCreate, TaskQuery, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Owner user ID
            task: Task creation data

        Returns:
            Created task with allocated task_id and timestamps
        """
        pass

    @abstractmethod
    async def get(self, task_id: int, user_id: Optional[str] = None) -> Optional[Task]:
        """
        Get a task by its application-level ID.

        Args:
            task_id: Sequential task ID
            user_id: Restrict the lookup to this owner when given

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(self, query: TaskQuery) -> list[Task]:
        """
        List tasks matching a query.

        Args:
            query: Filters, due-date ordering, limit and offset

        Returns:
            List of tasks matching filters
        """
        pass

    @abstractmethod
    async def find_first(self, query: TaskQuery) -> Optional[Task]:
        """Return the first task matching a query, honouring its sort order."""
        pass

    @abstractmethod
    async def update(self, task_id: int, update: TaskUpdate) -> Task:
        """
        Update an existing task.

        Raises:
            NotFoundError: If task doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        """
        Delete a single task.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def delete_by_recurring_parent(
        self,
        recurring_parent_id: int,
        user_id: str,
        due_from: Optional[datetime] = None,
    ) -> int:
        """
        Delete every task of one owner that belongs to a recurring chain.

        Args:
            recurring_parent_id: Chain root task_id
            user_id: Owner user ID
            due_from: Only delete instances due at or after this time

        Returns:
            Number of deleted tasks
        """
        pass

    @abstractmethod
    async def get_recurrence_stats(
        self, user_id: Optional[str] = None
    ) -> RecurringTaskStats:
        """Aggregate task counts by recurrence role and cadence."""
        pass
