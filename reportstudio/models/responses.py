# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Result values and read-time projections returned by the store.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field
from .entities import (
    OrganizationalUnit,
    Organization,
    ReportSection,
    ReportingPeriod
)


class OperationResult(BaseModel):
    """Outcome of a validating store operation."""

    success: bool = Field(..., description="Whether the operation committed")
    data: Optional[Any] = Field(None, description="Resulting entity on success")
    error_message: Optional[str] = Field(None, description="Reason on failure")

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "OperationResult":
        return cls(success=False, error_message=message)


class MissingFieldDetail(BaseModel):
    """One deficiency blocking a transition to complete."""

    field: str = Field(..., description="Missing field name")
    reason: str = Field(..., description="Human-readable explanation")


class StatusValidationError(BaseModel):
    """Structured error listing every missing field at once."""

    message: str = Field(..., description="Summary message")
    missing_fields: List[MissingFieldDetail] = Field(default_factory=list, description="All deficiencies")


class StatusUpdateResult(BaseModel):
    """Outcome of an explicit completeness status transition."""

    success: bool = Field(..., description="Whether the transition committed")
    data: Optional[Any] = Field(None, description="Updated data point on success")
    error_message: Optional[str] = Field(None, description="Simple failure reason")
    validation_error: Optional[StatusValidationError] = Field(None, description="Structured failure")


class SectionSummary(ReportSection):
    """Section plus denormalized counts, recomputed on every read."""

    data_point_count: int = Field(default=0, description="Data points in the section")
    evidence_count: int = Field(default=0, description="Evidence items in the section")
    gap_count: int = Field(default=0, description="Data points still missing")
    assumption_count: int = Field(default=0, description="Data points carrying assumptions")
    completeness_percentage: int = Field(default=0, description="Share of complete data points")
    owner_name: str = Field(default="", description="Owner display name")
    progress_status: str = Field(default="not-started", description="Derived progress status")


class CompletenessBreakdown(BaseModel):
    """Completeness tally for one slice of data points."""

    id: str = Field(default="", description="Slice key (category or owner ID)")
    name: str = Field(default="", description="Slice display name")
    missing_count: int = Field(default=0)
    incomplete_count: int = Field(default=0)
    complete_count: int = Field(default=0)
    not_applicable_count: int = Field(default=0)
    total_count: int = Field(default=0)
    complete_percentage: float = Field(default=0.0, description="complete / total, one decimal")


class CompletenessStats(BaseModel):
    """Completeness at overall, per-category and per-owner granularity."""

    overall: CompletenessBreakdown = Field(default_factory=CompletenessBreakdown)
    by_category: List[CompletenessBreakdown] = Field(default_factory=list)
    by_organizational_unit: List[CompletenessBreakdown] = Field(default_factory=list)


class OwnerSectionAssignment(BaseModel):
    """A section as listed inside the responsibility matrix."""

    section_id: str
    section_title: str
    category: str
    data_point_count: int = 0
    progress_status: str = "not-started"


class OwnerAssignment(BaseModel):
    """All sections held by one owner (or by nobody)."""

    owner_id: Optional[str] = Field(None, description="Owner user ID, None when unassigned")
    owner_name: str = Field(default="Unassigned", description="Owner display name")
    owner_email: Optional[str] = Field(None, description="Owner email")
    sections: List[OwnerSectionAssignment] = Field(default_factory=list)
    total_data_points: int = Field(default=0)


class ResponsibilityMatrix(BaseModel):
    """Sections grouped by owner, unassigned first then alphabetically."""

    assignments: List[OwnerAssignment] = Field(default_factory=list)
    total_sections: int = Field(default=0)
    unassigned_sections: int = Field(default=0)
    period_id: Optional[str] = Field(None)


class BulkUpdateFailure(BaseModel):
    """A section skipped by a bulk ownership change."""

    section_id: str
    reason: str


class BulkUpdateSectionOwnerResult(BaseModel):
    """Outcome of a bulk ownership change."""

    updated_sections: List[ReportSection] = Field(default_factory=list)
    skipped_sections: List[BulkUpdateFailure] = Field(default_factory=list)


class ReportingDataSnapshot(BaseModel):
    """Consistent copy of the reporting structure."""

    organization: Optional[Organization] = None
    periods: List[ReportingPeriod] = Field(default_factory=list)
    sections: List[ReportSection] = Field(default_factory=list)
    section_summaries: List[SectionSummary] = Field(default_factory=list)
    organizational_units: List[OrganizationalUnit] = Field(default_factory=list)
