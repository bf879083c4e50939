"""
Role hierarchy expansion.

Pure traversal over the parent-role relation.  Kept separate from the
authorization scope resolver so the expansion can be tested on its own.
"""

from collections.abc import Iterable
from typing import Protocol, TypeVar


class HierarchicalRole(Protocol):
    """Anything exposing its direct parent roles."""

    @property
    def parent_roles(self) -> Iterable["HierarchicalRole"]: ...


R = TypeVar("R", bound=HierarchicalRole)


def expand_roles(roles: Iterable[R] | None) -> frozenset[R]:
    """
    Return the given roles plus every ancestor reachable through parent_roles.

    Cycles in the parent relation are tolerated; each role is visited once.
    """
    if not roles:
        return frozenset()

    seen: set[R] = set()
    pending: list[R] = list(roles)
    while pending:
        role = pending.pop()
        if role in seen:
            continue
        seen.add(role)
        pending.extend(parent for parent in role.parent_roles or () if parent not in seen)

    return frozenset(seen)
