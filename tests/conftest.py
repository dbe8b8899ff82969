"""
Shared pytest fixtures.

Every test gets its own SQLite file so concurrent connections behave like
they do in production.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from taskcycle.infrastructure.local.activity_repository import SqliteActivityRepository
from taskcycle.infrastructure.local.counter_repository import SqliteCounterRepository
from taskcycle.infrastructure.local.database import (
    create_engine_for_url,
    get_session_factory,
    init_db,
)
from taskcycle.infrastructure.local.task_repository import SqliteTaskRepository
from taskcycle.services.activity_notifier import ActivityNotifier
from taskcycle.services.lifecycle_facade import LifecycleFacade
from taskcycle.services.occurrence_orchestrator import OccurrenceOrchestrator
from taskcycle.services.sequence_allocator import SequenceAllocator

# Frozen "now" used by orchestrator tests
FIXED_NOW = datetime(2030, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine over a throwaway SQLite file with all tables created."""
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'taskcycle.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def test_user_id():
    return "test_user"


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def counter_repo(session_factory):
    return SqliteCounterRepository(session_factory=session_factory)


@pytest.fixture
def allocator(counter_repo):
    return SequenceAllocator(counter_repo)


@pytest.fixture
def task_repo(session_factory, allocator):
    return SqliteTaskRepository(session_factory=session_factory, sequence_allocator=allocator)


@pytest.fixture
def activity_repo(session_factory):
    return SqliteActivityRepository(session_factory=session_factory)


@pytest.fixture
def notifier(activity_repo):
    return ActivityNotifier(activity_repo)


@pytest.fixture
def orchestrator(task_repo, notifier, fixed_now):
    return OccurrenceOrchestrator(task_repo, notifier=notifier, clock=lambda: fixed_now)


@pytest.fixture
def facade(orchestrator):
    return LifecycleFacade(orchestrator)
