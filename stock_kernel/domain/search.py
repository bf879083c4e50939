"""
Search templates for stock operation queries.

A search is a value object: the query layer reads the populated template
fields and turns each into a predicate.  Unset fields do not filter.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class StringComparison(str, Enum):
    """How the template's operation number is matched."""

    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    LIKE = "like"  # case-insensitive prefix match


class DateComparison(str, Enum):
    """How the search's date_created bound is applied."""

    BEFORE = "before"
    ON_OR_AFTER = "on_or_after"


@dataclass(frozen=True)
class StockOperationTemplate:
    """Example operation; every populated field must match."""

    operation_number: str | None = None
    status: str | None = None
    instance_type_id: UUID | None = None
    source_id: UUID | None = None
    destination_id: UUID | None = None
    # Matches either source or destination
    stockroom_id: UUID | None = None
    creator_id: UUID | None = None


@dataclass(frozen=True)
class StockOperationSearch:
    """Template plus comparison options."""

    template: StockOperationTemplate | None
    operation_number_comparison: StringComparison = StringComparison.EQUAL
    date_created: datetime | None = None
    date_created_comparison: DateComparison = DateComparison.ON_OR_AFTER
