"""
Module: stock_kernel.models.stockroom
Responsibility: ORM persistence for stockrooms (inventory holding locations)
    and the inventory items moved between them.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


class Stockroom(Base):
    """Physical or logical inventory holding location."""

    __tablename__ = "stockrooms"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    def __repr__(self) -> str:
        return f"<Stockroom {self.name}>"


class Item(Base):
    """Inventory item.  Operation item listings are sorted by name."""

    __tablename__ = "items"

    __table_args__ = (Index("idx_item_name", "name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    code: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Item {self.name}>"
