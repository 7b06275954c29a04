# SPDX-License-Identifier: Apache-2.0

"""
Authorization domain logic for ownership changes.

This module contains pure role checks; user identity is resolved by the
caller.
"""

from dataclasses import dataclass
from typing import Optional
from ..models.entities import User
from ..models.enums import UserRole


SECTION_OWNER_ROLES = frozenset({UserRole.ADMIN.value, UserRole.REPORT_OWNER.value})


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None


def can_change_section_owner(user: User) -> AuthorizationResult:
    """
    Check if a user may reassign section ownership.

    Args:
        user: Acting user

    Returns:
        AuthorizationResult indicating if the change is allowed
    """
    if user.role in SECTION_OWNER_ROLES:
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason="Only administrators or report owners can change section ownership."
    )
