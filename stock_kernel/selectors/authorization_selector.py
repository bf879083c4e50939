"""
Module: stock_kernel.selectors.authorization_selector
Responsibility: Resolves the set of stock operation types a user may approve,
    as a SQL subquery for composition into larger queries and as a
    materialized id set.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A type qualifies when its approving user is the user, or its approving
      role is in the user's expanded role set.
    - With no roles, only the approving-user rule applies.
    - Pure read: no side effects.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import Select, or_, select

from stock_kernel.domain.roles import expand_roles
from stock_kernel.exceptions import InvalidArgumentError
from stock_kernel.models.operation_type import StockOperationType
from stock_kernel.selectors.base import BaseSelector


class AuthorizationSelector(BaseSelector[StockOperationType]):
    """Operation types within a user's approval scope."""

    def approvable_types_subquery(
        self,
        user_id: UUID,
        role_ids: Iterable[UUID] | None = None,
    ) -> Select:
        """
        SELECT of qualifying operation type ids.

        Args:
            user_id: The user.
            role_ids: The user's expanded role ids (parents included).
        """
        role_ids = frozenset(role_ids or ())
        query = select(StockOperationType.id)
        if role_ids:
            return query.where(
                or_(
                    # Types that require user approval
                    StockOperationType.user_id == user_id,
                    # Types that require role approval
                    StockOperationType.role_id.in_(role_ids),
                )
            )
        return query.where(StockOperationType.user_id == user_id)

    def approvable_type_ids(self, user) -> set[UUID]:
        """Materialized ids of the types the user may approve."""
        if user is None:
            raise InvalidArgumentError("user", "The user must be defined.")
        role_ids = {role.id for role in expand_roles(user.roles)}
        return set(
            self.session.execute(
                self.approvable_types_subquery(user.id, role_ids)
            ).scalars()
        )
