"""Abstract interfaces for infrastructure abstraction."""

from taskcycle.interfaces.activity_repository import IActivityRepository
from taskcycle.interfaces.counter_repository import ICounterRepository
from taskcycle.interfaces.task_repository import ITaskRepository

__all__ = [
    "ITaskRepository",
    "ICounterRepository",
    "IActivityRepository",
]
