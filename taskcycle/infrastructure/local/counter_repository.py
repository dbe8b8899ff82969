"""
SQLite implementation of counter repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from taskcycle.infrastructure.local.database import CounterORM, get_session_factory
from taskcycle.interfaces.counter_repository import ICounterRepository
from taskcycle.models.counter import Counter


class SqliteCounterRepository(ICounterRepository):
    """SQLite implementation of counter repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: CounterORM) -> Counter:
        """Convert ORM object to Pydantic model."""
        return Counter.model_validate(orm, from_attributes=True)

    async def increment(self, name: str) -> int:
        """Atomically increment a counter, creating it on first use."""
        # One upsert statement: SQLite serialises writers, so concurrent
        # callers each observe a distinct value.
        stmt = (
            sqlite_insert(CounterORM)
            .values(name=name, value=1, updated_at=datetime.utcnow())
            .on_conflict_do_update(
                index_elements=[CounterORM.name],
                set_={
                    "value": CounterORM.value + 1,
                    "updated_at": datetime.utcnow(),
                },
            )
            .returning(CounterORM.value)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            value = result.scalar_one()
            await session.commit()
            return value

    async def create_if_absent(self, name: str, value: int) -> bool:
        """Create a counter holding value unless one exists."""
        stmt = (
            sqlite_insert(CounterORM)
            .values(name=name, value=value, updated_at=datetime.utcnow())
            .on_conflict_do_nothing(index_elements=[CounterORM.name])
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return (result.rowcount or 0) > 0

    async def set(self, name: str, value: int) -> int:
        """Create or overwrite a counter."""
        stmt = (
            sqlite_insert(CounterORM)
            .values(name=name, value=value, updated_at=datetime.utcnow())
            .on_conflict_do_update(
                index_elements=[CounterORM.name],
                set_={"value": value, "updated_at": datetime.utcnow()},
            )
            .returning(CounterORM.value)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            stored = result.scalar_one()
            await session.commit()
            return stored

    async def get(self, name: str) -> Optional[Counter]:
        """Get a counter by name."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(CounterORM).where(CounterORM.name == name)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self) -> list[Counter]:
        """List all counters ordered by name."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(CounterORM).order_by(CounterORM.name.asc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
