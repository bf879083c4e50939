"""Read-only query selectors for the stock kernel."""

from stock_kernel.selectors.authorization_selector import AuthorizationSelector
from stock_kernel.selectors.base import BaseSelector
from stock_kernel.selectors.operation_type_selector import (
    OperationTypeSelector,
    StockOperationTypeInfo,
)
from stock_kernel.selectors.stock_operation_selector import StockOperationSelector

__all__ = [
    "AuthorizationSelector",
    "BaseSelector",
    "OperationTypeSelector",
    "StockOperationSelector",
    "StockOperationTypeInfo",
]
