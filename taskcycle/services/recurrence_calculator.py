"""
Recurrence date calculation.

Pure functions over dates for the three supported cadences. Nothing in this
module touches storage or the clock unless a caller omits `now`.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, TypeVar, Union

from taskcycle.core.exceptions import InvalidArgumentError, ValidationError
from taskcycle.models.enums import RepeatType
from taskcycle.utils.datetime_utils import coerce_utc, ensure_utc, now_utc

MAX_OCCURRENCES = 100
MAX_PERIOD_ITERATIONS = 1000
DEFAULT_PAST_TOLERANCE = timedelta(days=1)

RECURRING_TYPES = (RepeatType.DAILY, RepeatType.WEEKLY, RepeatType.MONTHLY)

_DESCRIPTIONS = {
    RepeatType.NONE: "No recurrence",
    RepeatType.DAILY: "Repeats daily",
    RepeatType.WEEKLY: "Repeats weekly",
    RepeatType.MONTHLY: "Repeats monthly",
}

D = TypeVar("D", date, datetime)


@dataclass(frozen=True)
class TimeUntilNext:
    """Distance from now to the next occurrence."""

    next_date: datetime
    total_seconds: float
    days: int
    hours: int
    minutes: int
    is_past: bool


def _require_date(value: Any, label: str = "base date") -> None:
    # datetime is a subclass of date
    if not isinstance(value, date):
        raise InvalidArgumentError(f"Valid {label} is required")


def _require_cadence(repeat_type: Union[RepeatType, str]) -> RepeatType:
    try:
        cadence = RepeatType(repeat_type)
    except ValueError:
        cadence = None
    if cadence not in RECURRING_TYPES:
        valid = ", ".join(t.value for t in RECURRING_TYPES)
        raise InvalidArgumentError(
            f"Invalid repeat type '{repeat_type}'. Must be one of: {valid}"
        )
    return cadence


def clamp_to_month_day(value: D, target_day: int) -> D:
    """Move value to target_day of its month, or the month's last day if shorter."""
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=min(target_day, last_day))


def _add_one_month(value: D) -> D:
    if value.month == 12:
        year, month = value.year + 1, 1
    else:
        year, month = value.year, value.month + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def next_occurrence(base_date: D, repeat_type: Union[RepeatType, str]) -> D:
    """
    Calculate the occurrence following base_date.

    DAILY adds one calendar day and WEEKLY seven. MONTHLY keeps the
    day-of-month, clamped to the last day of a shorter target month
    (Jan 31 -> Feb 28/29). Time of day and tzinfo are preserved.

    Raises:
        InvalidArgumentError: unsupported cadence or non-date input
    """
    _require_date(base_date)
    cadence = _require_cadence(repeat_type)

    if cadence == RepeatType.DAILY:
        return base_date + timedelta(days=1)
    if cadence == RepeatType.WEEKLY:
        return base_date + timedelta(days=7)
    return _add_one_month(base_date)


def generate_occurrences(
    start_date: D, repeat_type: Union[RepeatType, str], count: int = 3
) -> list[D]:
    """Return `count` consecutive occurrences strictly after start_date."""
    _require_date(start_date, "start date")
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidArgumentError("Count must be a positive integer")
    if count > MAX_OCCURRENCES:
        raise InvalidArgumentError(f"Count cannot exceed {MAX_OCCURRENCES} occurrences")

    occurrences = []
    current = start_date
    for _ in range(count):
        current = next_occurrence(current, repeat_type)
        occurrences.append(current)
    return occurrences


def validate_recurrence_rules(
    task: Any,
    now: Optional[datetime] = None,
    tolerance: timedelta = DEFAULT_PAST_TOLERANCE,
) -> bool:
    """
    Check that a task may carry a recurrence cadence.

    Tasks without a cadence (or with NONE) are always valid. Otherwise the
    cadence must be supported, the due date present, parseable and no more
    than `tolerance` in the past, and the task must not be a subtask.

    Raises:
        ValidationError: naming the violated rule
    """
    if task is None:
        raise ValidationError("Valid task object is required")

    raw_type = getattr(task, "repeat_type", None)
    if raw_type is None or raw_type == RepeatType.NONE or raw_type == "":
        return True

    try:
        cadence = RepeatType(raw_type)
    except ValueError:
        raise ValidationError(f"Invalid repeat type: {raw_type}")
    if cadence == RepeatType.NONE:
        return True

    raw_due = getattr(task, "due_date", None)
    if raw_due is None or raw_due == "":
        raise ValidationError("Due date is required for recurring tasks")

    due_date = coerce_utc(raw_due)
    if due_date is None:
        raise ValidationError("Due date must be a valid date")

    reference = ensure_utc(now) if now else now_utc()
    if due_date < reference - tolerance:
        raise ValidationError(
            "Due date for recurring tasks should not be more than 1 day in the past"
        )

    if getattr(task, "parent_id", None) is not None:
        raise ValidationError("Sub-tasks cannot have recurring patterns")

    return True


def occurrences_in_period(
    start_date: D,
    end_date: D,
    repeat_type: Union[RepeatType, str],
    max_iterations: int = MAX_PERIOD_ITERATIONS,
) -> list[D]:
    """
    Enumerate start_date and its successors up to and including end_date.

    At most max_iterations dates are returned.
    """
    _require_date(start_date, "start date")
    _require_date(end_date, "end date")
    if end_date <= start_date:
        raise InvalidArgumentError("End date must be after start date")
    _require_cadence(repeat_type)

    occurrences = []
    current = start_date
    while current <= end_date and len(occurrences) < max_iterations:
        occurrences.append(current)
        current = next_occurrence(current, repeat_type)
    return occurrences


def is_weekend(value: date) -> bool:
    """True for Saturday and Sunday."""
    _require_date(value, "date")
    return value.weekday() >= 5


def adjust_to_business_day(value: D) -> D:
    """Shift a weekend date forward to the following Monday."""
    while is_weekend(value):
        value = value + timedelta(days=1)
    return value


def describe_recurrence(repeat_type: Union[RepeatType, str, None]) -> str:
    """Human-readable cadence description."""
    try:
        return _DESCRIPTIONS[RepeatType(repeat_type)]
    except ValueError:
        return "Unknown recurrence pattern"


def time_until_next(
    base_date: datetime,
    repeat_type: Union[RepeatType, str],
    now: Optional[datetime] = None,
) -> TimeUntilNext:
    """Compute how long until the occurrence after base_date."""
    next_date = ensure_utc(next_occurrence(base_date, repeat_type))
    reference = ensure_utc(now) if now else now_utc()
    total = (next_date - reference).total_seconds()

    magnitude = abs(int(total))
    days, remainder = divmod(magnitude, 86400)
    hours, remainder = divmod(remainder, 3600)
    sign = -1 if total < 0 else 1
    return TimeUntilNext(
        next_date=next_date,
        total_seconds=total,
        days=sign * days,
        hours=sign * hours,
        minutes=sign * (remainder // 60),
        is_past=total < 0,
    )
