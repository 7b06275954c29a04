# SPDX-License-Identifier: Apache-2.0

"""
Organizational hierarchy domain logic.

Pure functions over the organizational-unit forest: parent validation,
cycle detection and deletion guards. Nothing here mutates state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
from ..models.entities import OrganizationalUnit


PARENT_NOT_FOUND = "Parent unit with ID '{parent_id}' not found."
SELF_PARENT = "An organizational unit cannot be its own parent."
CIRCULAR_REFERENCE = "Setting this parent would create a circular reference in the organizational structure."
HAS_CHILDREN = "Cannot delete an organizational unit that has child units. Delete or reassign children first."


class ParentCheck(str, Enum):
    """Outcome tags for a proposed parent assignment."""
    OK = "ok"
    PARENT_NOT_FOUND = "parent-not-found"
    SELF_PARENT = "self-parent"
    CYCLE = "cycle"
    CORRUPT_CHAIN = "corrupt-chain"


@dataclass
class ParentCheckResult:
    """Tagged result of a parent assignment check."""
    outcome: ParentCheck
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.outcome == ParentCheck.OK


def check_parent_assignment(
    unit_id: Optional[str],
    parent_id: Optional[str],
    units: Dict[str, OrganizationalUnit]
) -> ParentCheckResult:
    """
    Check whether ``unit_id`` may hang below ``parent_id``.

    Walks the parent chain upward from the proposed parent. The walk fails if
    it reaches the unit being modified, and also if it revisits any node, which
    only happens when the stored forest is already corrupt. The walk is
    bounded by the number of units.

    Args:
        unit_id: Unit being created (None) or updated
        parent_id: Proposed parent; empty means root
        units: Current units keyed by id

    Returns:
        ParentCheckResult tagged with the outcome
    """
    if not parent_id:
        return ParentCheckResult(ParentCheck.OK)

    if unit_id is not None and parent_id == unit_id:
        return ParentCheckResult(ParentCheck.SELF_PARENT, SELF_PARENT)

    if parent_id not in units:
        return ParentCheckResult(
            ParentCheck.PARENT_NOT_FOUND,
            PARENT_NOT_FOUND.format(parent_id=parent_id)
        )

    visited = set()
    current: Optional[str] = parent_id
    for _ in range(len(units) + 1):
        if current is None:
            return ParentCheckResult(ParentCheck.OK)
        if unit_id is not None and current == unit_id:
            return ParentCheckResult(ParentCheck.CYCLE, CIRCULAR_REFERENCE)
        if current in visited:
            return ParentCheckResult(ParentCheck.CORRUPT_CHAIN, CIRCULAR_REFERENCE)
        visited.add(current)

        node = units.get(current)
        # Dangling parent pointers terminate the chain
        current = node.parent_id if node is not None and node.parent_id else None

    return ParentCheckResult(ParentCheck.CORRUPT_CHAIN, CIRCULAR_REFERENCE)


def has_children(unit_id: str, units: Dict[str, OrganizationalUnit]) -> bool:
    """Check if any unit references ``unit_id`` as its parent."""
    return any(unit.parent_id == unit_id for unit in units.values())
