"""
Operation number and date ordering.

Responsibility:
    Computes day-boundary ranges in a fixed reference calendar and defines
    the total order among stock operations.  Every date-scoped query uses
    ``day_range`` so that boundaries are identical across queries and
    storage engines.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - A day is the closed range [start-of-day, end-of-day - 1ms].
    - Operations are ordered by (calendar day, operation_order,
      operation_date, created_at).
    - Operation numbers are non-empty and at most 255 characters.
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Protocol

from stock_kernel.db.types import MAX_OPERATION_NUMBER_LENGTH
from stock_kernel.exceptions import InvalidArgumentError, OperationNumberTooLongError

DAY_END_PRECISION = timedelta(milliseconds=1)


class OrderedOperation(Protocol):
    """Fields that place an operation in the total order."""

    operation_date: datetime
    operation_order: int


def to_utc(instant: datetime) -> datetime:
    """Normalize an instant to UTC.  Naive values are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def calendar_day(instant: datetime | date, tz: tzinfo = UTC) -> date:
    """Calendar day of an instant in the reference calendar."""
    if isinstance(instant, datetime):
        return to_utc(instant).astimezone(tz).date()
    return instant


def day_range(day: datetime | date, tz: tzinfo = UTC) -> tuple[datetime, datetime]:
    """
    Inclusive bounds of a calendar day, as UTC instants.

    Args:
        day: A date, or an instant whose calendar day (in ``tz``) is used.
        tz: Reference calendar.

    Returns:
        (start, end) where start is midnight and end is the next midnight
        minus one millisecond.
    """
    local_day = calendar_day(day, tz)
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    next_start = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    end = next_start - DAY_END_PRECISION
    return start.astimezone(UTC), end.astimezone(UTC)


def operation_sort_key(operation: OrderedOperation, tz: tzinfo = UTC) -> tuple:
    """Sort key implementing the total order among operations."""
    created_at = getattr(operation, "created_at", None)
    return (
        calendar_day(operation.operation_date, tz),
        operation.operation_order,
        to_utc(operation.operation_date),
        to_utc(created_at) if created_at is not None else datetime.min.replace(tzinfo=UTC),
    )


def is_after(candidate: OrderedOperation, reference: OrderedOperation, tz: tzinfo = UTC) -> bool:
    """
    True if ``candidate`` happened after ``reference``.

    Same calendar day with a strictly greater operation_order, or a strictly
    later calendar day.
    """
    candidate_day = calendar_day(candidate.operation_date, tz)
    reference_day = calendar_day(reference.operation_date, tz)
    if candidate_day != reference_day:
        return candidate_day > reference_day
    return candidate.operation_order > reference.operation_order


def validate_operation_number(number: str | None) -> str:
    """
    Check an operation number used for lookup.

    Raises:
        InvalidArgumentError: number is None or empty.
        OperationNumberTooLongError: number exceeds 255 characters.
    """
    if not number:
        raise InvalidArgumentError(
            "operation_number", "The operation number to find must be defined."
        )
    if len(number) > MAX_OPERATION_NUMBER_LENGTH:
        raise OperationNumberTooLongError(len(number), MAX_OPERATION_NUMBER_LENGTH)
    return number
