"""
Filter specifications for stock operation queries.

Each filter is an immutable value naming one kind of lookup.  The query
layer (StockOperationSelector) interprets it into SQL; no executable
callbacks cross the kernel boundary.  Filters check their own inputs on
construction, so a filter that exists is always well-formed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from stock_kernel.domain.ordering import validate_operation_number
from stock_kernel.domain.roles import expand_roles
from stock_kernel.domain.search import StockOperationSearch
from stock_kernel.exceptions import InvalidArgumentError


def _require(value, argument: str, message: str) -> None:
    if value is None:
        raise InvalidArgumentError(argument, message)


@dataclass(frozen=True)
class ByNumber:
    """Exact operation number match."""

    number: str

    def __post_init__(self) -> None:
        validate_operation_number(self.number)


@dataclass(frozen=True)
class ByStockroom:
    """Operations with the stockroom as source or destination."""

    stockroom_id: UUID

    def __post_init__(self) -> None:
        _require(self.stockroom_id, "stockroom", "The stockroom must be defined.")


@dataclass(frozen=True)
class ByOperation:
    """Item rows of one operation.  Not an OperationFilter."""

    operation_id: UUID

    def __post_init__(self) -> None:
        _require(self.operation_id, "operation", "The operation must be defined.")


@dataclass(frozen=True)
class ByUser:
    """
    Operations the user created, or whose type the user may approve.

    role_ids is the user's expanded role set (parents included).
    """

    user_id: UUID
    role_ids: frozenset[UUID] = field(default_factory=frozenset)
    status: str | None = None

    def __post_init__(self) -> None:
        _require(self.user_id, "user", "The user must be defined.")

    @classmethod
    def for_user(cls, user, status: str | None = None) -> ByUser:
        """Build the filter from a user, expanding its role hierarchy once."""
        _require(user, "user", "The user must be defined.")
        role_ids = frozenset(role.id for role in expand_roles(user.roles))
        return cls(user_id=user.id, role_ids=role_ids, status=status)


@dataclass(frozen=True)
class BySearch:
    """Caller-supplied search template."""

    search: StockOperationSearch

    def __post_init__(self) -> None:
        _require(self.search, "search", "The operation search must be defined.")
        _require(
            self.search.template,
            "search.template",
            "The operation search template must be defined.",
        )


@dataclass(frozen=True)
class SinceDate:
    """Operations strictly after an instant."""

    instant: datetime

    def __post_init__(self) -> None:
        _require(self.instant, "operation_date", "The operation date must be defined.")


@dataclass(frozen=True)
class FutureOf:
    """Operations later than a reference operation in the total order."""

    operation_date: datetime
    operation_order: int

    def __post_init__(self) -> None:
        _require(self.operation_date, "operation", "The operation must be defined.")

    @classmethod
    def of(cls, reference) -> FutureOf:
        _require(reference, "operation", "The operation must be defined.")
        return cls(
            operation_date=reference.operation_date,
            operation_order=reference.operation_order,
        )


@dataclass(frozen=True)
class OnDate:
    """Operations within one whole calendar day."""

    day: date | datetime

    def __post_init__(self) -> None:
        _require(self.day, "date", "The date to search for must be defined.")


# Filters over operations.  ByOperation filters item rows and is excluded.
OperationFilter = ByNumber | ByStockroom | ByUser | BySearch | SinceDate | FutureOf | OnDate
