# SPDX-License-Identifier: Apache-2.0

"""
Data point domain logic.

This module contains pure functions for data point field validation,
completeness derivation, completion readiness and the approved-state
freeze check.
"""

from typing import Dict, Iterable, List, Optional, Tuple
from ..models.entities import DataPoint, User
from ..models.enums import (
    CompletenessStatus,
    InformationType,
    ReviewStatus,
    enum_values,
    match_enum
)
from ..models.responses import MissingFieldDetail


APPROVED_READ_ONLY = "Cannot modify approved data points. Only admins can make changes to approved entries."
COMPLETE_BLOCKED = "Cannot mark data point as complete. Required fields are missing."

# Attribute name -> field name recorded in the audit trail, in audit order
AUDITED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("type", "Type"),
    ("classification", "Classification"),
    ("title", "Title"),
    ("content", "Content"),
    ("value", "Value"),
    ("unit", "Unit"),
    ("owner_id", "OwnerId"),
    ("contributor_ids", "ContributorIds"),
    ("source", "Source"),
    ("information_type", "InformationType"),
    ("assumptions", "Assumptions"),
    ("completeness_status", "CompletenessStatus"),
    ("review_status", "ReviewStatus"),
    ("deadline", "Deadline"),
    ("is_blocked", "IsBlocked"),
    ("blocker_reason", "BlockerReason"),
    ("blocker_due_date", "BlockerDueDate"),
)

# Fields an approved data point must keep unchanged
FROZEN_FIELDS: Tuple[str, ...] = tuple(
    attr for attr, _ in AUDITED_FIELDS if attr != "review_status"
)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _one_of(enum_cls) -> str:
    return ", ".join(enum_values(enum_cls))


def validate_data_point_fields(
    request,
    users: Dict[str, User],
    require_owner: bool = False,
    section_id: Optional[str] = None
) -> Optional[str]:
    """
    Validate the editable fields shared by create and update requests.

    Checks run in a fixed order and the first failure wins.

    Args:
        request: Create or update request carrying the data point fields
        users: Reference users keyed by id
        require_owner: Whether an empty owner is rejected
        section_id: Section id to require (create only)

    Returns:
        Error message, or None when every field is valid
    """
    if _blank(request.title):
        return "Title is required."

    if _blank(request.content):
        return "Content is required."

    if section_id is not None and _blank(section_id):
        return "SectionId is required."

    owner_id = request.owner_id or ""
    if require_owner and _blank(owner_id):
        return "OwnerId is required."

    if owner_id and owner_id not in users:
        return f"Owner with ID '{owner_id}' not found."

    contributor_ids = request.contributor_ids or []
    if owner_id and owner_id in contributor_ids:
        return "Owner cannot also be listed as a contributor."

    for contributor_id in contributor_ids:
        if contributor_id not in users:
            return f"Contributor with ID '{contributor_id}' not found."

    if _blank(request.source):
        return "Source is required."

    if _blank(request.information_type):
        return "InformationType is required."

    information_type = match_enum(InformationType, request.information_type)
    if information_type is None:
        return f"InformationType must be one of: {_one_of(InformationType)}."

    if information_type == InformationType.ESTIMATE and _blank(request.assumptions):
        return "Assumptions field is required when InformationType is 'estimate'."

    if request.is_blocked and _blank(request.blocker_reason):
        return "BlockerReason is required when the data point is blocked."

    if not _blank(request.completeness_status) and match_enum(CompletenessStatus, request.completeness_status) is None:
        return f"CompletenessStatus must be one of: {_one_of(CompletenessStatus)}."

    if not _blank(request.review_status) and match_enum(ReviewStatus, request.review_status) is None:
        return f"ReviewStatus must be one of: {_one_of(ReviewStatus)}."

    return None


def derive_completeness(
    title: Optional[str],
    content: Optional[str],
    source: Optional[str],
    information_type: Optional[str],
    evidence_ids: Iterable[str],
    owner_id: Optional[str],
    users: Dict[str, User]
) -> str:
    """
    Auto-derive the completeness status of a data point.

    A data point is complete when title, content, source and information type
    are filled, at least one evidence item is linked and the owner resolves to
    a known user. Anything else is incomplete; an existing data point is never
    derived as missing.
    """
    has_owner = bool(owner_id) and owner_id in users
    if (
        not _blank(title)
        and not _blank(content)
        and not _blank(source)
        and not _blank(information_type)
        and any(True for _ in evidence_ids)
        and has_owner
    ):
        return CompletenessStatus.COMPLETE.value
    return CompletenessStatus.INCOMPLETE.value


def completion_gaps(data_point: DataPoint, users: Dict[str, User]) -> List[MissingFieldDetail]:
    """
    List every field that blocks an explicit transition to complete.

    Args:
        data_point: Candidate or stored data point
        users: Reference users keyed by id

    Returns:
        Missing field details in a stable order; empty when ready
    """
    gaps: List[MissingFieldDetail] = []

    if _blank(data_point.title):
        gaps.append(MissingFieldDetail(field="Title", reason="A title is required."))
    if _blank(data_point.content):
        gaps.append(MissingFieldDetail(field="Content", reason="Narrative content is required."))
    if _blank(data_point.value):
        gaps.append(MissingFieldDetail(field="Value", reason="A reported value is required."))
    if _blank(data_point.source):
        gaps.append(MissingFieldDetail(field="Source", reason="The data source must be documented."))
    if _blank(data_point.information_type):
        gaps.append(MissingFieldDetail(field="InformationType", reason="The information type must be set."))
    if _blank(data_point.owner_id) or data_point.owner_id not in users:
        gaps.append(MissingFieldDetail(field="Owner", reason="An owner must be assigned."))
    if _blank(data_point.deadline):
        gaps.append(MissingFieldDetail(field="Deadline", reason="A reporting deadline must be set."))
    if not data_point.evidence_ids:
        gaps.append(MissingFieldDetail(field="Evidence", reason="At least one evidence item must be linked."))

    return gaps


def resolve_completeness(
    requested: Optional[str],
    candidate: DataPoint,
    users: Dict[str, User]
) -> Tuple[Optional[str], Optional[str]]:
    """
    Decide the completeness status to store for a candidate data point.

    An empty request derives the status. An explicit ``complete`` must satisfy
    the completeness invariant (owner, title, content, source, information
    type and evidence).

    Returns:
        (status, error message); exactly one of them is set
    """
    if _blank(requested):
        return derive_completeness(
            candidate.title,
            candidate.content,
            candidate.source,
            candidate.information_type,
            candidate.evidence_ids,
            candidate.owner_id,
            users
        ), None

    status = match_enum(CompletenessStatus, requested)
    if status is None:
        return None, f"CompletenessStatus must be one of: {_one_of(CompletenessStatus)}."

    if status == CompletenessStatus.COMPLETE:
        if _blank(candidate.owner_id):
            return None, "Cannot set completeness status to 'complete' without an assigned owner."
        if derive_completeness(
            candidate.title,
            candidate.content,
            candidate.source,
            candidate.information_type,
            candidate.evidence_ids,
            candidate.owner_id,
            users
        ) != CompletenessStatus.COMPLETE.value:
            return None, COMPLETE_BLOCKED

    return status.value, None


def changes_frozen_fields(current: DataPoint, candidate: DataPoint) -> bool:
    """Check if the candidate differs from the stored data point outside review status."""
    return any(getattr(current, attr) != getattr(candidate, attr) for attr in FROZEN_FIELDS)


def is_assigned(data_point: DataPoint, user_id: Optional[str]) -> bool:
    """Owner or contributor match; an empty user id matches everything."""
    if not user_id:
        return True
    return data_point.is_assigned_to(user_id)
