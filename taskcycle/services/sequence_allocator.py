"""
Sequence allocator service.

Issues strictly increasing integer identifiers per named counter. Values
from next() are unique only while every caller uses next() for that name;
reset() and concurrent next() calls must not be mixed.
"""

from __future__ import annotations

from typing import Awaitable, Callable, TypeVar

from taskcycle.core.exceptions import AllocationError, ValidationError
from taskcycle.core.logger import setup_logger
from taskcycle.interfaces.counter_repository import ICounterRepository
from taskcycle.models.counter import Counter

logger = setup_logger(__name__)

T = TypeVar("T")


class SequenceAllocator:
    """Atomic per-name integer sequence service."""

    def __init__(self, counter_repo: ICounterRepository):
        self.counter_repo = counter_repo

    @staticmethod
    def _validate_name(counter_name: str) -> None:
        if not counter_name or not isinstance(counter_name, str):
            raise ValidationError("Counter name is required and must be a string")

    @staticmethod
    def _validate_value(value: int, label: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{label} must be a non-negative integer")

    async def _call(self, counter_name: str, action: Callable[[], Awaitable[T]]) -> T:
        try:
            return await action()
        except Exception as e:
            logger.error(f"Counter operation failed for '{counter_name}': {e}")
            raise AllocationError(counter_name, e) from e

    async def next(self, counter_name: str) -> int:
        """Increment and return the counter, creating it at 0 -> 1 on first use."""
        self._validate_name(counter_name)
        return await self._call(
            counter_name, lambda: self.counter_repo.increment(counter_name)
        )

    async def initialize(self, counter_name: str, start_value: int = 0) -> bool:
        """
        Create a counter holding start_value if none exists.

        The next call to next() returns start_value + 1. An existing counter is
        never overwritten.

        Returns:
            True if the counter was created, False if it already existed
        """
        self._validate_name(counter_name)
        self._validate_value(start_value, "Start value")
        created = await self._call(
            counter_name,
            lambda: self.counter_repo.create_if_absent(counter_name, start_value),
        )
        if created:
            logger.info(f"Initialized counter '{counter_name}' at {start_value}")
        else:
            logger.info(f"Counter '{counter_name}' already exists, not initialized")
        return created

    async def reset(self, counter_name: str, value: int) -> int:
        """
        Overwrite a counter unconditionally.

        Unsafe for names whose values were already issued: later next() calls
        may hand out identifiers that are already in use.
        """
        self._validate_name(counter_name)
        self._validate_value(value, "Reset value")
        stored = await self._call(
            counter_name, lambda: self.counter_repo.set(counter_name, value)
        )
        logger.warning(f"Counter '{counter_name}' reset to {stored}")
        return stored

    async def current_value(self, counter_name: str) -> int:
        """Return the last issued value without incrementing (0 when absent)."""
        self._validate_name(counter_name)
        counter = await self._call(
            counter_name, lambda: self.counter_repo.get(counter_name)
        )
        return counter.value if counter else 0

    async def list_counters(self) -> list[Counter]:
        """List all counters, for monitoring."""
        return await self._call("*", self.counter_repo.list)
