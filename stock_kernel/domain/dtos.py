"""
Data transfer objects for the stock kernel.

Selectors return these frozen DTOs rather than ORM instances.  The
stock-take inputs (InventoryStockTake, ItemStockSummary) are built by
callers and handed to StockTakeService.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class StockOperationInfo:
    """Immutable view of a stock operation."""

    id: UUID
    operation_number: str
    instance_type_id: UUID
    instance_type_name: str
    status: str
    source_id: UUID | None
    destination_id: UUID | None
    operation_date: datetime
    operation_day: date
    operation_order: int
    creator_id: UUID
    created_at: datetime

    @property
    def is_new(self) -> bool:
        return self.status == "NEW"


@dataclass(frozen=True)
class StockOperationItemInfo:
    """Immutable view of one stock operation item."""

    id: UUID
    operation_id: UUID
    item_id: UUID
    item_name: str
    quantity: int
    expiration: date | None
    calculated_expiration: bool
    calculated_batch: bool
    batch_operation_id: UUID | None


@dataclass(frozen=True)
class ItemStockSummary:
    """
    Counted stock of one item in a stockroom.

    quantity is the previously recorded quantity; actual_quantity is what
    was counted.
    """

    item_id: UUID
    actual_quantity: int
    quantity: int
    expiration: date | None = None

    @property
    def delta(self) -> int:
        """Adjustment needed to bring the record in line with the count."""
        return self.actual_quantity - self.quantity


@dataclass(frozen=True)
class InventoryStockTake:
    """A stock-take of one stockroom."""

    stockroom_id: UUID
    summaries: tuple[ItemStockSummary, ...] = field(default_factory=tuple)
    operation_number: str | None = None
