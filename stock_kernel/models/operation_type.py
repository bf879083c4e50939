"""
Module: stock_kernel.models.operation_type
Responsibility: ORM persistence for stock operation types (Adjustment,
    Transfer, Receipt, ...).  A type names who may process its operations,
    either a single approving user, an approving role, or both, and which
    stockroom references its operations require.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Type names are unique; "Adjustment" is the well-known stock-take type.

Failure modes:
    - IntegrityError on duplicate type name.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base, UUIDString
from stock_kernel.models.user import Role, User

ADJUSTMENT_TYPE_NAME = "Adjustment"


class StockOperationType(Base):
    """
    Metadata describing a class of stock operations.

    Guarantees:
        - user_id / role_id designate who may process operations of this type.
        - has_source / has_destination drive structural validation of drafts.
    """

    __tablename__ = "stock_operation_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    has_source: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    has_destination: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Designated approving user
    user_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Designated approving role
    role_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
    )

    user: Mapped[User | None] = relationship(foreign_keys=[user_id], lazy="joined")

    role: Mapped[Role | None] = relationship(foreign_keys=[role_id], lazy="joined")

    def __repr__(self) -> str:
        return f"<StockOperationType {self.name}>"
