"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, case, delete, func, select

from taskcycle.core.config import get_settings
from taskcycle.core.exceptions import NotFoundError
from taskcycle.infrastructure.local.database import TaskORM, get_session_factory
from taskcycle.interfaces.task_repository import ITaskRepository
from taskcycle.models.enums import RepeatType, SortOrder
from taskcycle.models.lifecycle import RecurringTaskStats
from taskcycle.models.task import Task, TaskCreate, TaskQuery, TaskUpdate
from taskcycle.services.sequence_allocator import SequenceAllocator
from taskcycle.utils.datetime_utils import ensure_utc


def _to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Store datetimes as naive UTC; SQLite has no timezone type."""
    value = ensure_utc(value)
    return value.replace(tzinfo=None) if value else None


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        session_factory=None,
        sequence_allocator: Optional[SequenceAllocator] = None,
        counter_name: Optional[str] = None,
    ):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
            sequence_allocator: Allocator issuing task_id values
            counter_name: Counter used for task_id (defaults to TASK_COUNTER_NAME)
        """
        self._session_factory = session_factory or get_session_factory()
        if sequence_allocator is None:
            from taskcycle.infrastructure.local.counter_repository import (
                SqliteCounterRepository,
            )

            sequence_allocator = SequenceAllocator(
                SqliteCounterRepository(session_factory=self._session_factory)
            )
        self._allocator = sequence_allocator
        self._counter_name = counter_name or get_settings().TASK_COUNTER_NAME

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            task_id=orm.task_id,
            user_id=orm.user_id,
            title=orm.title,
            description=orm.description or "",
            due_date=ensure_utc(orm.due_date),
            priority=orm.priority,
            category=orm.category or "",
            links=orm.links or [],
            additional_notes=orm.additional_notes or "",
            repeat_type=RepeatType(orm.repeat_type),
            is_completed=bool(orm.is_completed),
            parent_id=orm.parent_id,
            recurring_parent_id=orm.recurring_parent_id,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _apply_query(self, stmt, query: TaskQuery):
        conditions = []
        if query.user_id is not None:
            conditions.append(TaskORM.user_id == query.user_id)
        if query.recurring_parent_id is not None:
            conditions.append(TaskORM.recurring_parent_id == query.recurring_parent_id)
        if query.has_recurring_parent is True:
            conditions.append(TaskORM.recurring_parent_id.is_not(None))
        elif query.has_recurring_parent is False:
            conditions.append(TaskORM.recurring_parent_id.is_(None))
        if query.recurring_parents_only:
            conditions.append(TaskORM.repeat_type != RepeatType.NONE.value)
            conditions.append(TaskORM.recurring_parent_id.is_(None))
        if query.repeat_type is not None:
            conditions.append(TaskORM.repeat_type == query.repeat_type.value)
        if query.is_completed is not None:
            conditions.append(TaskORM.is_completed == query.is_completed)
        if query.due_after is not None:
            conditions.append(TaskORM.due_date > _to_db_datetime(query.due_after))
        if query.due_from is not None:
            conditions.append(TaskORM.due_date >= _to_db_datetime(query.due_from))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        if query.sort == SortOrder.ASC:
            stmt = stmt.order_by(TaskORM.due_date.asc(), TaskORM.task_id.asc())
        elif query.sort == SortOrder.DESC:
            stmt = stmt.order_by(TaskORM.due_date.desc(), TaskORM.task_id.desc())
        else:
            stmt = stmt.order_by(TaskORM.task_id.asc())

        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        if query.offset:
            stmt = stmt.offset(query.offset)
        return stmt

    async def create(self, user_id: str, task: TaskCreate) -> Task:
        """Create a new task."""
        task_id = await self._allocator.next(self._counter_name)
        async with self._session_factory() as session:
            orm = TaskORM(
                id=str(uuid4()),
                task_id=task_id,
                user_id=user_id,
                title=task.title,
                description=task.description,
                due_date=_to_db_datetime(task.due_date),
                priority=task.priority.value,
                category=task.category,
                links=list(task.links),
                additional_notes=task.additional_notes,
                repeat_type=task.repeat_type.value,
                is_completed=task.is_completed,
                parent_id=task.parent_id,
                recurring_parent_id=task.recurring_parent_id,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, task_id: int, user_id: Optional[str] = None) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            stmt = select(TaskORM).where(TaskORM.task_id == task_id)
            if user_id is not None:
                stmt = stmt.where(TaskORM.user_id == user_id)
            result = await session.execute(stmt)
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self, query: TaskQuery) -> list[Task]:
        """List tasks matching a query."""
        async with self._session_factory() as session:
            result = await session.execute(self._apply_query(select(TaskORM), query))
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def find_first(self, query: TaskQuery) -> Optional[Task]:
        """Return the first task matching a query."""
        tasks = await self.list(query.model_copy(update={"limit": 1}))
        return tasks[0] if tasks else None

    async def update(self, task_id: int, update: TaskUpdate) -> Task:
        """Update an existing task."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.task_id == task_id)
            )
            orm = result.scalar_one_or_none()

            if not orm:
                raise NotFoundError(f"Task {task_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if value is None:
                    continue
                if field == "due_date":
                    value = _to_db_datetime(value)
                elif hasattr(value, "value"):  # Enum
                    value = value.value
                setattr(orm, field, value)

            orm.updated_at = datetime.utcnow()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, task_id: int) -> bool:
        """Delete a task."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(TaskORM).where(TaskORM.task_id == task_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def delete_by_recurring_parent(
        self,
        recurring_parent_id: int,
        user_id: str,
        due_from: Optional[datetime] = None,
    ) -> int:
        """Delete every task of one owner that belongs to a recurring chain."""
        async with self._session_factory() as session:
            stmt = delete(TaskORM).where(
                and_(
                    TaskORM.recurring_parent_id == recurring_parent_id,
                    TaskORM.user_id == user_id,
                )
            )
            if due_from is not None:
                stmt = stmt.where(TaskORM.due_date >= _to_db_datetime(due_from))
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

    async def get_recurrence_stats(
        self, user_id: Optional[str] = None
    ) -> RecurringTaskStats:
        """Aggregate task counts by recurrence role and cadence."""

        def _count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(TaskORM.id),
            _count_where(
                and_(
                    TaskORM.repeat_type != RepeatType.NONE.value,
                    TaskORM.recurring_parent_id.is_(None),
                )
            ),
            _count_where(TaskORM.recurring_parent_id.is_not(None)),
            _count_where(TaskORM.repeat_type == RepeatType.DAILY.value),
            _count_where(TaskORM.repeat_type == RepeatType.WEEKLY.value),
            _count_where(TaskORM.repeat_type == RepeatType.MONTHLY.value),
        )
        if user_id is not None:
            stmt = stmt.where(TaskORM.user_id == user_id)

        async with self._session_factory() as session:
            row = (await session.execute(stmt)).one()

        total, parents, instances, daily, weekly, monthly = (int(v or 0) for v in row)
        return RecurringTaskStats(
            total_tasks=total,
            recurring_parents=parents,
            recurring_instances=instances,
            daily=daily,
            weekly=weekly,
            monthly=monthly,
        )
