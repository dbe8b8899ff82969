"""
Dependency wiring.

Cached factories returning the concrete implementations for the configured
environment. Tests construct services directly instead.
"""

from functools import lru_cache

from taskcycle.interfaces.activity_repository import IActivityRepository
from taskcycle.interfaces.counter_repository import ICounterRepository
from taskcycle.interfaces.task_repository import ITaskRepository
from taskcycle.services.activity_notifier import ActivityNotifier
from taskcycle.services.lifecycle_facade import LifecycleFacade
from taskcycle.services.occurrence_orchestrator import OccurrenceOrchestrator
from taskcycle.services.sequence_allocator import SequenceAllocator


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_counter_repository() -> ICounterRepository:
    """Get counter repository instance."""
    from taskcycle.infrastructure.local.counter_repository import SqliteCounterRepository

    return SqliteCounterRepository()


@lru_cache()
def get_activity_repository() -> IActivityRepository:
    """Get activity repository instance."""
    from taskcycle.infrastructure.local.activity_repository import SqliteActivityRepository

    return SqliteActivityRepository()


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from taskcycle.infrastructure.local.task_repository import SqliteTaskRepository

    return SqliteTaskRepository(sequence_allocator=get_sequence_allocator())


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_sequence_allocator() -> SequenceAllocator:
    """Get sequence allocator instance."""
    return SequenceAllocator(get_counter_repository())


@lru_cache()
def get_activity_notifier() -> ActivityNotifier:
    """Get best-effort activity notifier."""
    return ActivityNotifier(get_activity_repository())


@lru_cache()
def get_occurrence_orchestrator() -> OccurrenceOrchestrator:
    """Get occurrence orchestrator instance."""
    return OccurrenceOrchestrator(get_task_repository(), notifier=get_activity_notifier())


@lru_cache()
def get_lifecycle_facade() -> LifecycleFacade:
    """Get lifecycle facade instance."""
    return LifecycleFacade(get_occurrence_orchestrator())
