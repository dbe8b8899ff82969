"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class TaskCycleError(Exception):
    """Base exception for taskcycle."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(TaskCycleError):
    """Resource not found."""

    pass


class ValidationError(TaskCycleError):
    """Validation error."""

    pass


class InvalidArgumentError(ValidationError):
    """Argument outside the accepted domain of a pure calculation."""

    pass


class AllocationError(TaskCycleError):
    """Sequence counter could not be read or advanced."""

    def __init__(self, counter_name: str, cause: Exception):
        super().__init__(
            f"Failed to allocate sequence value for '{counter_name}': {cause}",
            details={"counter_name": counter_name, "cause": repr(cause)},
        )
        self.counter_name = counter_name
        self.cause = cause


class ProcessingError(TaskCycleError):
    """Lifecycle operation failed."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(
            f"Failed to process {operation}: {cause}",
            details={"operation": operation, "cause": repr(cause)},
        )
        self.operation = operation
        self.cause = cause


class InfrastructureError(TaskCycleError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass
