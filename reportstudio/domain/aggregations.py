# SPDX-License-Identifier: Apache-2.0

"""
Read-time projections over sections and data points.

Progress status, completeness breakdowns, section summaries and the
responsibility matrix are recomputed from snapshots on every call and never
stored.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional
from ..models.entities import DataPoint, Evidence, ReportSection, User
from ..models.enums import Category, CompletenessStatus, ProgressStatus, ReviewStatus
from ..models.responses import (
    CompletenessBreakdown,
    CompletenessStats,
    OwnerAssignment,
    OwnerSectionAssignment,
    ResponsibilityMatrix,
    SectionSummary
)


UNASSIGNED = "unassigned"
UNASSIGNED_NAME = "Unassigned"


def progress_status(data_points: List[DataPoint]) -> str:
    """
    Derive a section's progress from its data points.

    Changes requested on any data point marks the section blocked, and that
    check wins over everything else.
    """
    if any(dp.review_status == ReviewStatus.CHANGES_REQUESTED.value for dp in data_points):
        return ProgressStatus.BLOCKED.value
    if not data_points or all(dp.completeness_status == CompletenessStatus.MISSING.value for dp in data_points):
        return ProgressStatus.NOT_STARTED.value
    done = (CompletenessStatus.COMPLETE.value, CompletenessStatus.NOT_APPLICABLE.value)
    if all(dp.completeness_status in done for dp in data_points):
        return ProgressStatus.COMPLETED.value
    return ProgressStatus.IN_PROGRESS.value


def completeness_breakdown(
    data_points: Iterable[DataPoint],
    key: str = "",
    name: str = ""
) -> CompletenessBreakdown:
    """Single-pass tally of the completeness buckets with a one-decimal percentage."""
    counts = {status.value: 0 for status in CompletenessStatus}
    total = 0
    for dp in data_points:
        total += 1
        if dp.completeness_status in counts:
            counts[dp.completeness_status] += 1

    complete = counts[CompletenessStatus.COMPLETE.value]
    percentage = round(complete * 100.0 / total, 1) if total else 0.0

    return CompletenessBreakdown(
        id=key,
        name=name,
        missing_count=counts[CompletenessStatus.MISSING.value],
        incomplete_count=counts[CompletenessStatus.INCOMPLETE.value],
        complete_count=complete,
        not_applicable_count=counts[CompletenessStatus.NOT_APPLICABLE.value],
        total_count=total,
        complete_percentage=percentage
    )


def completeness_stats(
    sections: List[ReportSection],
    data_points: List[DataPoint],
    users: Dict[str, User],
    category: Optional[str] = None,
    owner_id: Optional[str] = None
) -> CompletenessStats:
    """
    Completeness overall, per category and per owner.

    Args:
        sections: Sections in scope (already filtered by period)
        data_points: All data points; those outside ``sections`` are ignored
        users: Reference users keyed by id
        category: Optional category filter, case-insensitive
        owner_id: Optional owner filter, standing in for organizational unit

    Returns:
        CompletenessStats with categories sorted by display name
    """
    if category:
        wanted = category.strip().lower()
        sections = [section for section in sections if section.category == wanted]

    section_category = {section.id: section.category for section in sections}
    in_scope = [dp for dp in data_points if dp.section_id in section_category]
    if owner_id:
        in_scope = [dp for dp in in_scope if dp.owner_id == owner_id]

    by_category = []
    for cat in Category:
        points = [dp for dp in in_scope if section_category[dp.section_id] == cat.value]
        by_category.append(completeness_breakdown(points, cat.value, cat.value.capitalize()))
    by_category.sort(key=lambda item: item.name)

    grouped: Dict[str, List[DataPoint]] = OrderedDict()
    for dp in in_scope:
        grouped.setdefault(dp.owner_id or UNASSIGNED, []).append(dp)

    by_owner = []
    for key, points in grouped.items():
        user = users.get(key)
        name = user.name if user is not None else UNASSIGNED_NAME
        by_owner.append(completeness_breakdown(points, key, name))
    by_owner.sort(key=lambda item: item.name)

    return CompletenessStats(
        overall=completeness_breakdown(in_scope, "overall", "Overall"),
        by_category=by_category,
        by_organizational_unit=by_owner
    )


def summarize_section(
    section: ReportSection,
    data_points: List[DataPoint],
    evidence: List[Evidence],
    users: Dict[str, User]
) -> SectionSummary:
    """Build the summary projection of one section from its own data points and evidence."""
    complete = sum(1 for dp in data_points if dp.completeness_status == CompletenessStatus.COMPLETE.value)
    percentage = int(round(complete * 100.0 / len(data_points))) if data_points else 0
    owner = users.get(section.owner_id) if section.owner_id else None

    return SectionSummary(
        **section.model_dump(),
        data_point_count=len(data_points),
        evidence_count=len(evidence),
        gap_count=sum(1 for dp in data_points if dp.completeness_status == CompletenessStatus.MISSING.value),
        assumption_count=sum(1 for dp in data_points if dp.assumptions and dp.assumptions.strip()),
        completeness_percentage=percentage,
        owner_name=owner.name if owner is not None else "",
        progress_status=progress_status(data_points)
    )


def responsibility_matrix(
    sections: List[ReportSection],
    data_points: List[DataPoint],
    users: Dict[str, User],
    period_id: Optional[str] = None,
    owner_filter: Optional[str] = None
) -> ResponsibilityMatrix:
    """
    Group sections by owner.

    Unassigned sections come first, then owners alphabetically by name.
    ``owner_filter`` is either ``"unassigned"`` or a user id.
    """
    points_by_section: Dict[str, List[DataPoint]] = {}
    for dp in data_points:
        points_by_section.setdefault(dp.section_id, []).append(dp)

    groups: Dict[str, OwnerAssignment] = OrderedDict()
    for section in sorted(sections, key=lambda s: s.order):
        key = section.owner_id or UNASSIGNED
        if owner_filter and owner_filter.lower() == UNASSIGNED and key != UNASSIGNED:
            continue
        if owner_filter and owner_filter.lower() != UNASSIGNED and key != owner_filter:
            continue

        assignment = groups.get(key)
        if assignment is None:
            user = users.get(section.owner_id) if section.owner_id else None
            if key == UNASSIGNED:
                assignment = OwnerAssignment()
            else:
                assignment = OwnerAssignment(
                    owner_id=section.owner_id,
                    owner_name=user.name if user is not None else UNASSIGNED_NAME,
                    owner_email=user.email if user is not None else None
                )
            groups[key] = assignment

        points = points_by_section.get(section.id, [])
        assignment.sections.append(OwnerSectionAssignment(
            section_id=section.id,
            section_title=section.title,
            category=section.category,
            data_point_count=len(points),
            progress_status=progress_status(points)
        ))
        assignment.total_data_points += len(points)

    assignments = sorted(
        groups.values(),
        key=lambda a: (a.owner_id is not None, a.owner_name.lower())
    )
    total = sum(len(a.sections) for a in assignments)
    unassigned = sum(len(a.sections) for a in assignments if a.owner_id is None)

    return ResponsibilityMatrix(
        assignments=assignments,
        total_sections=total,
        unassigned_sections=unassigned,
        period_id=period_id
    )
