"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from taskcycle.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    task_id = Column(Integer, nullable=False, unique=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    due_date = Column(DateTime, nullable=True, index=True)
    priority = Column(String(10), default="medium")
    category = Column(String(200), nullable=False, default="")
    links = Column(JSON, nullable=True, default=list)
    additional_notes = Column(Text, nullable=False, default="")
    repeat_type = Column(String(10), nullable=False, default="none", index=True)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    parent_id = Column(Integer, nullable=True, index=True)
    recurring_parent_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CounterORM(Base):
    """Named sequence counter ORM model."""

    __tablename__ = "counters"

    name = Column(String(100), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserActivityORM(Base):
    """User activity ORM model."""

    __tablename__ = "user_activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    task_id = Column(String(100), nullable=True)
    error = Column(Text, nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


# ===========================================
# Database Session Management
# ===========================================


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with the SQLite busy timeout applied."""
    settings = get_settings()
    return create_async_engine(
        database_url,
        echo=echo,
        connect_args={"timeout": settings.DATABASE_TIMEOUT_SECONDS},
    )


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_engine_for_url(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory(engine: AsyncEngine | None = None):
    """Get async session factory."""
    return sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
