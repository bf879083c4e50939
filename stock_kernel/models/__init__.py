"""Domain models for the stock kernel."""

from stock_kernel.models.operation_type import ADJUSTMENT_TYPE_NAME, StockOperationType
from stock_kernel.models.stock_operation import (
    ReservedTransaction,
    StockOperation,
    StockOperationItem,
    StockOperationStatus,
    StockOperationTransaction,
)
from stock_kernel.models.stockroom import Item, Stockroom
from stock_kernel.models.user import Role, User, role_inheritance, user_roles

__all__ = [
    "ADJUSTMENT_TYPE_NAME",
    "Item",
    "ReservedTransaction",
    "Role",
    "StockOperation",
    "StockOperationItem",
    "StockOperationStatus",
    "StockOperationTransaction",
    "StockOperationType",
    "Stockroom",
    "User",
    "role_inheritance",
    "user_roles",
]
