"""
Module: stock_kernel.models.stock_operation
Responsibility: ORM persistence for stock operations, their items, and the
    ledger rows (posted and reserved transactions) associated with them.
Architecture position: Kernel > Models.  May import from db/base.py and other
    model modules only.  MUST NOT import from services/, selectors/, or outer
    layers.

Invariants enforced:
    - operation_number is unique system-wide (uq_stock_operation_number).
    - (operation_day, operation_order) orders operations within and across
      business days; ties fall back to created_at.
    - Every StockOperationItem belongs to exactly one operation; items are
      deleted with their operation (delete-orphan).
    - status is an open value: StockOperationStatus lists the known values
      but the column accepts any status string.

Failure modes:
    - IntegrityError on duplicate operation_number.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base, TrackedBase, UUIDString
from stock_kernel.db.types import MAX_OPERATION_NUMBER_LENGTH
from stock_kernel.models.operation_type import StockOperationType
from stock_kernel.models.stockroom import Item, Stockroom


class StockOperationStatus(str, Enum):
    """Known stock operation statuses.

    Contract: NEW is the initial state of every submitted operation.  The
    remaining values are owned by the processing workflow; the column is not
    restricted to this set.
    """

    NEW = "NEW"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ROLLBACK = "ROLLBACK"


class StockOperation(TrackedBase):
    """
    A discrete inventory transaction: receipt, transfer, adjustment or
    stock-take.

    Guarantees:
        - operation_number is unique once set.
        - created_by_id is the creator; created_at is the dateCreated stamp.
        - operation_day is the calendar day of operation_date in the reference
          calendar, stamped by StockOperationService.
    """

    __tablename__ = "stock_operations"

    __table_args__ = (
        UniqueConstraint("operation_number", name="uq_stock_operation_number"),
        Index("idx_stock_operation_date", "operation_date"),
        Index("idx_stock_operation_day_order", "operation_day", "operation_order"),
        Index("idx_stock_operation_created", "created_at"),
        Index("idx_stock_operation_status", "status"),
        Index("idx_stock_operation_type", "instance_type_id"),
        Index("idx_stock_operation_source", "source_id"),
        Index("idx_stock_operation_destination", "destination_id"),
    )

    # Business identifier
    operation_number: Mapped[str] = mapped_column(
        String(MAX_OPERATION_NUMBER_LENGTH),
        nullable=False,
    )

    instance_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("stock_operation_types.id"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=StockOperationStatus.NEW.value,
    )

    source_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stockrooms.id"),
        nullable=True,
    )

    destination_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stockrooms.id"),
        nullable=True,
    )

    # Business instant of the transaction (not the creation timestamp)
    operation_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Calendar day of operation_date in the reference calendar
    operation_day: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    # Tie-breaker among operations on the same day
    operation_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    instance_type: Mapped[StockOperationType] = relationship(lazy="joined")

    source: Mapped[Stockroom | None] = relationship(
        foreign_keys=[source_id],
        lazy="joined",
    )

    destination: Mapped[Stockroom | None] = relationship(
        foreign_keys=[destination_id],
        lazy="joined",
    )

    items: Mapped[list[StockOperationItem]] = relationship(
        back_populates="operation",
        foreign_keys="StockOperationItem.operation_id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    transactions: Mapped[list[StockOperationTransaction]] = relationship(
        back_populates="operation",
        lazy="select",
    )

    reserved_transactions: Mapped[list[ReservedTransaction]] = relationship(
        back_populates="operation",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<StockOperation {self.operation_number} status={self.status}>"


class StockOperationItem(Base):
    """
    One item line of a stock operation.

    quantity is signed.  For adjustments it is a delta: counted actual
    quantity minus previously recorded quantity.
    """

    __tablename__ = "stock_operation_items"

    __table_args__ = (
        Index("idx_stock_operation_item_operation", "operation_id"),
    )

    operation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("stock_operations.id", ondelete="CASCADE"),
        nullable=False,
    )

    item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("items.id"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    expiration: Mapped[date | None] = mapped_column(Date, nullable=True)

    calculated_expiration: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    calculated_batch: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Operation that established this item's batch
    batch_operation_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stock_operations.id", ondelete="SET NULL"),
        nullable=True,
    )

    operation: Mapped[StockOperation] = relationship(
        back_populates="items",
        foreign_keys=[operation_id],
    )

    item: Mapped[Item] = relationship(lazy="joined")

    batch_operation: Mapped[StockOperation | None] = relationship(
        foreign_keys=[batch_operation_id],
    )

    def __repr__(self) -> str:
        return f"<StockOperationItem item={self.item_id} qty={self.quantity}>"


class StockOperationTransaction(Base):
    """Posted stock ledger entry produced by processing an operation."""

    __tablename__ = "stock_operation_transactions"

    __table_args__ = (
        Index("idx_stock_transaction_operation", "operation_id"),
    )

    operation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("stock_operations.id"),
        nullable=False,
    )

    item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("items.id"),
        nullable=False,
    )

    stockroom_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stockrooms.id"),
        nullable=True,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    operation: Mapped[StockOperation] = relationship(back_populates="transactions")


class ReservedTransaction(Base):
    """Ledger entry tentatively committed against an operation."""

    __tablename__ = "stock_reserved_transactions"

    __table_args__ = (
        Index("idx_stock_reserved_operation", "operation_id"),
    )

    operation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("stock_operations.id"),
        nullable=False,
    )

    item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("items.id"),
        nullable=False,
    )

    stockroom_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("stockrooms.id"),
        nullable=True,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    operation: Mapped[StockOperation] = relationship(back_populates="reserved_transactions")
