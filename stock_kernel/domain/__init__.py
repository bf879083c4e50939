"""
Pure domain layer.

Value objects and pure functions with NO dependencies on the ORM, the
database, or I/O (SystemClock is the single sanctioned time source).
"""

from stock_kernel.domain.authorization import (
    ensure_can_process,
    type_in_scope,
    user_can_process,
)
from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.dtos import (
    InventoryStockTake,
    ItemStockSummary,
    StockOperationInfo,
    StockOperationItemInfo,
)
from stock_kernel.domain.filters import (
    ByNumber,
    ByOperation,
    BySearch,
    ByStockroom,
    ByUser,
    FutureOf,
    OnDate,
    OperationFilter,
    SinceDate,
)
from stock_kernel.domain.ordering import (
    calendar_day,
    day_range,
    is_after,
    operation_sort_key,
    validate_operation_number,
)
from stock_kernel.domain.paging import PagingInfo
from stock_kernel.domain.roles import expand_roles
from stock_kernel.domain.search import (
    DateComparison,
    StockOperationSearch,
    StockOperationTemplate,
    StringComparison,
)

__all__ = [
    "ByNumber",
    "ByOperation",
    "BySearch",
    "ByStockroom",
    "ByUser",
    "Clock",
    "DateComparison",
    "DeterministicClock",
    "FutureOf",
    "InventoryStockTake",
    "ItemStockSummary",
    "OnDate",
    "OperationFilter",
    "PagingInfo",
    "SinceDate",
    "StockOperationInfo",
    "StockOperationItemInfo",
    "StockOperationSearch",
    "StockOperationTemplate",
    "StringComparison",
    "SystemClock",
    "calendar_day",
    "day_range",
    "ensure_can_process",
    "expand_roles",
    "is_after",
    "operation_sort_key",
    "type_in_scope",
    "user_can_process",
    "validate_operation_number",
]
