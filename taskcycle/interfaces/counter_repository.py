"""
Counter repository interface.

Defines contract for named sequence counter persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from taskcycle.models.counter import Counter


class ICounterRepository(ABC):
    """Abstract interface for sequence counter persistence."""

    @abstractmethod
    async def increment(self, name: str) -> int:
        """
        Atomically increment a counter and return the new value.

        A missing counter is created at 0 and incremented in the same
        atomic operation, so the first call returns 1. Implementations must
        not split this into a read followed by a write.
        """
        pass

    @abstractmethod
    async def create_if_absent(self, name: str, value: int) -> bool:
        """Create a counter holding value. Returns False if it already exists."""
        pass

    @abstractmethod
    async def set(self, name: str, value: int) -> int:
        """Create or overwrite a counter. Returns the stored value."""
        pass

    @abstractmethod
    async def get(self, name: str) -> Optional[Counter]:
        """Get a counter by name."""
        pass

    @abstractmethod
    async def list(self) -> list[Counter]:
        """List all counters ordered by name."""
        pass
