"""
StockTakeService -- turns a counted-inventory stock-take into an Adjustment.

Responsibility:
    Builds a fresh Adjustment StockOperation for one stockroom with one item
    per counted summary, then submits it through StockOperationService.

Invariants enforced:
    - Each item's quantity is the signed delta actual_quantity - quantity.
    - Expiration and batch are marked as explicitly supplied (not calculated).
    - Each item's batch operation is the new operation itself.
    - The item set is built from scratch for every submission.

Non-goals:
    - Authorization.  The caller must check that the acting user may process
      the Adjustment type (``domain.authorization.ensure_can_process``) before
      calling ``submit``.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from stock_kernel.domain.clock import Clock
from stock_kernel.domain.dtos import InventoryStockTake, ItemStockSummary, StockOperationInfo
from stock_kernel.exceptions import InvalidArgumentError
from stock_kernel.logging_config import get_logger
from stock_kernel.models.stock_operation import (
    StockOperation,
    StockOperationItem,
    StockOperationStatus,
)
from stock_kernel.services.base import BaseService
from stock_kernel.services.stock_operation_service import StockOperationService

logger = get_logger("services.stock_take")


class StockTakeService(BaseService[StockOperation]):
    """Submits stock-takes as Adjustment operations."""

    def __init__(
        self,
        session: Session,
        clock: Clock,
        operation_service: StockOperationService,
    ):
        super().__init__(session)
        self._clock = clock
        self._operation_service = operation_service

    def _build_item(
        self, operation: StockOperation, summary: ItemStockSummary
    ) -> StockOperationItem:
        if summary.item_id is None:
            raise InvalidArgumentError("item", "Every counted item must reference an item.")
        return StockOperationItem(
            item_id=summary.item_id,
            quantity=summary.delta,
            expiration=summary.expiration,
            calculated_expiration=False,
            calculated_batch=False,
            batch_operation=operation,
        )

    def build_operation(self, stock_take: InventoryStockTake, adjustment_type) -> StockOperation:
        """
        Build the Adjustment draft for a stock-take.

        Args:
            stock_take: Stockroom, counted summaries and optional number.
            adjustment_type: The resolved Adjustment operation type (anything
                with an ``id``).

        Returns:
            A transient StockOperation, not yet validated or stored.
        """
        if stock_take is None:
            raise InvalidArgumentError("stock_take", "The stock take must be defined.")
        if stock_take.stockroom_id is None:
            raise InvalidArgumentError("stockroom", "The stockroom must be defined.")
        if adjustment_type is None:
            raise InvalidArgumentError("adjustment_type", "The adjustment operation type must be defined.")

        operation = StockOperation(
            status=StockOperationStatus.NEW.value,
            instance_type_id=adjustment_type.id,
            source_id=stock_take.stockroom_id,
            operation_number=stock_take.operation_number,
            operation_date=self._clock.now_utc(),
        )
        operation.items = [self._build_item(operation, summary) for summary in stock_take.summaries]
        return operation

    def submit(
        self,
        stock_take: InventoryStockTake,
        adjustment_type,
        actor_id: UUID,
    ) -> StockOperationInfo:
        """Build the Adjustment for a stock-take and submit it."""
        operation = self.build_operation(stock_take, adjustment_type)
        info = self._operation_service.submit_operation(operation, actor_id)
        logger.info(
            "stock_take_submitted",
            extra={
                "operation_id": str(info.id),
                "operation_number": info.operation_number,
                "stockroom_id": str(stock_take.stockroom_id),
                "item_count": len(stock_take.summaries),
            },
        )
        return info
