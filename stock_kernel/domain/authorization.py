"""
Authorization predicates for processing stock operations.

An operation type is in a user's scope when the type's approving user is
that user, or the type's approving role is one of the user's roles
(inherited roles included).  A user with no roles qualifies only through
the approving-user rule.

The query-side counterpart, which composes the same rule into SQL, is
stock_kernel.selectors.authorization_selector.
"""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from stock_kernel.domain.roles import expand_roles
from stock_kernel.exceptions import OperationNotAuthorizedError


class _Identified(Protocol):
    id: UUID


class ApprovableType(Protocol):
    name: str
    user_id: UUID | None
    role_id: UUID | None


def type_in_scope(
    operation_type: ApprovableType,
    user: _Identified,
    roles: Iterable[_Identified] | None,
) -> bool:
    """True if ``user`` (holding the expanded ``roles``) may approve the type."""
    if operation_type.user_id is not None and operation_type.user_id == user.id:
        return True
    if operation_type.role_id is None or not roles:
        return False
    return operation_type.role_id in {role.id for role in roles}


def user_can_process(user, operation_type: ApprovableType) -> bool:
    """True if the user may process operations of the given type."""
    return type_in_scope(operation_type, user, expand_roles(user.roles))


def ensure_can_process(user, operation_type: ApprovableType) -> None:
    """
    Gate to call before submitting an operation on a user's behalf.

    Raises:
        OperationNotAuthorizedError: the user may not process the type.
    """
    if not user_can_process(user, operation_type):
        raise OperationNotAuthorizedError(str(user.id), operation_type.name)
