"""
Module: stock_kernel.selectors.operation_type_selector
Responsibility: Read access to the stock operation type registry, including
    the well-known Adjustment type used by stock-takes.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select

from stock_kernel.models.operation_type import ADJUSTMENT_TYPE_NAME, StockOperationType
from stock_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class StockOperationTypeInfo:
    """Immutable view of a stock operation type."""

    id: UUID
    name: str
    has_source: bool
    has_destination: bool
    user_id: UUID | None
    role_id: UUID | None


class OperationTypeSelector(BaseSelector[StockOperationType]):
    """Selector for stock operation types."""

    def _to_dto(self, operation_type: StockOperationType) -> StockOperationTypeInfo:
        return StockOperationTypeInfo(
            id=operation_type.id,
            name=operation_type.name,
            has_source=operation_type.has_source,
            has_destination=operation_type.has_destination,
            user_id=operation_type.user_id,
            role_id=operation_type.role_id,
        )

    def get_by_id(self, type_id: UUID) -> StockOperationTypeInfo | None:
        operation_type = self.session.get(StockOperationType, type_id)
        return self._to_dto(operation_type) if operation_type else None

    def get_by_name(self, name: str) -> StockOperationTypeInfo | None:
        """Find a type by its unique name, or None."""
        operation_type = self.session.execute(
            select(StockOperationType).where(StockOperationType.name == name)
        ).scalar_one_or_none()
        return self._to_dto(operation_type) if operation_type else None

    def get_adjustment_type(
        self, name: str = ADJUSTMENT_TYPE_NAME
    ) -> StockOperationTypeInfo | None:
        """The built-in Adjustment type, or None if it is not registered."""
        return self.get_by_name(name)

    def list_types(self) -> list[StockOperationTypeInfo]:
        types = self.session.execute(
            select(StockOperationType).order_by(StockOperationType.name)
        ).scalars().all()
        return [self._to_dto(t) for t in types]
