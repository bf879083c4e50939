"""
Module: stock_kernel.models.user
Responsibility: ORM persistence for users and roles.  Roles form a hierarchy
    through the role_inheritance association: a role inherits every privilege
    of its parent roles.
Architecture position: Kernel > Models.  May import from db/base.py only
    (role expansion is delegated to the pure domain.roles module at call time).

Invariants enforced:
    - username and role name are unique.
    - User.all_roles always includes inherited (parent) roles transitively.

Failure modes:
    - IntegrityError on duplicate username or role name.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base, UUIDString

# Association: user <-> role, many-to-many
user_roles: Table = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", UUIDString(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", UUIDString(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

# Association: role -> parent role, many-to-many
role_inheritance: Table = Table(
    "role_inheritance",
    Base.metadata,
    Column("role_id", UUIDString(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("parent_role_id", UUIDString(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """
    Named role.  A role holds every privilege of its parent roles.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    parent_roles: Mapped[list[Role]] = relationship(
        "Role",
        secondary=role_inheritance,
        primaryjoin=lambda: Role.id == role_inheritance.c.role_id,
        secondaryjoin=lambda: Role.id == role_inheritance.c.parent_role_id,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class User(Base):
    """
    System user.  Creator of stock operations and, through direct assignment
    or role membership, approver of operation types.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    roles: Mapped[list[Role]] = relationship(
        "Role",
        secondary=user_roles,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"

    @property
    def all_roles(self) -> frozenset[Role]:
        """Directly assigned roles plus all inherited parent roles."""
        from stock_kernel.domain.roles import expand_roles

        return expand_roles(self.roles)
