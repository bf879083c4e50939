"""Write-side services for the stock kernel."""

from stock_kernel.services.base import BaseService
from stock_kernel.services.sequence_service import SequenceCounter, SequenceService
from stock_kernel.services.stock_operation_service import StockOperationService
from stock_kernel.services.stock_take_service import StockTakeService

__all__ = [
    "BaseService",
    "SequenceCounter",
    "SequenceService",
    "StockOperationService",
    "StockTakeService",
]
