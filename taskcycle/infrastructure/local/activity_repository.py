"""
SQLite implementation of activity repository.
"""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import select

from taskcycle.infrastructure.local.database import UserActivityORM, get_session_factory
from taskcycle.interfaces.activity_repository import IActivityRepository
from taskcycle.models.activity import ActivityCreate, ActivityRecord


class SqliteActivityRepository(IActivityRepository):
    """SQLite implementation of activity repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: UserActivityORM) -> ActivityRecord:
        return ActivityRecord.model_validate(orm, from_attributes=True)

    async def record(self, activity: ActivityCreate) -> ActivityRecord:
        """Persist one activity record."""
        async with self._session_factory() as session:
            orm = UserActivityORM(
                id=str(uuid4()),
                user_id=activity.user_id,
                action=activity.action,
                task_id=activity.task_id,
                error=activity.error,
                message=activity.message,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list(self, user_id: str, limit: int = 50) -> list[ActivityRecord]:
        """List a user's most recent activity records."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserActivityORM)
                .where(UserActivityORM.user_id == user_id)
                .order_by(UserActivityORM.created_at.desc())
                .limit(limit)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
