# SPDX-License-Identifier: Apache-2.0

"""
Ownership notification domain logic.

Pure builders for the inbox entries written when a section or data point
changes hands. Delivery is handled outside the store.
"""

from typing import List, Optional
from ..models.entities import OwnerNotification, User
from ..models.enums import NotificationType


def _actor_name(changed_by: Optional[User]) -> str:
    return changed_by.name if changed_by is not None else "Unknown User"


def build_ownership_notifications(
    entity_type: str,
    entity_id: str,
    entity_title: str,
    old_owner_id: Optional[str],
    new_owner_id: Optional[str],
    changed_by: Optional[User],
    changed_by_id: str = ""
) -> List[OwnerNotification]:
    """
    Build the notifications for an ownership change.

    The previous owner gets a removal notice and the new owner an assignment
    notice. Nothing is produced when the owner did not change, and an actor
    is never notified about their own change.

    Args:
        entity_type: "ReportSection" or "DataPoint"
        entity_id: Id of the reassigned entity
        entity_title: Title shown in the message
        old_owner_id: Previous owner, empty when unassigned
        new_owner_id: New owner, empty when cleared
        changed_by: Acting user, if known
        changed_by_id: Acting user id

    Returns:
        Notifications in the order removal, assignment
    """
    old_owner_id = old_owner_id or ""
    new_owner_id = new_owner_id or ""
    if old_owner_id == new_owner_id:
        return []

    is_section = entity_type == "ReportSection"
    noun = "section" if is_section else "data point"
    assigned_type = NotificationType.SECTION_ASSIGNED if is_section else NotificationType.DATAPOINT_ASSIGNED
    removed_type = NotificationType.SECTION_REMOVED if is_section else NotificationType.DATAPOINT_REMOVED
    actor = _actor_name(changed_by)

    notifications: List[OwnerNotification] = []
    if old_owner_id and old_owner_id != changed_by_id:
        notifications.append(OwnerNotification(
            recipient_user_id=old_owner_id,
            notification_type=removed_type,
            entity_id=entity_id,
            entity_type=entity_type,
            entity_title=entity_title,
            message=f"{actor} removed you as owner of the {noun} '{entity_title}'.",
            changed_by=changed_by_id,
            changed_by_name=actor
        ))
    if new_owner_id and new_owner_id != changed_by_id:
        notifications.append(OwnerNotification(
            recipient_user_id=new_owner_id,
            notification_type=assigned_type,
            entity_id=entity_id,
            entity_type=entity_type,
            entity_title=entity_title,
            message=f"{actor} assigned you as owner of the {noun} '{entity_title}'.",
            changed_by=changed_by_id,
            changed_by_name=actor
        ))
    return notifications
