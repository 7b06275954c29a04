# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for store operations.

Fields the store validates against an enumeration are plain strings so that
bad input comes back as a failed OperationResult instead of a pydantic error.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field
from .base import BaseRequest


class CreateOrganizationRequest(BaseRequest):
    """Request model for creating the organization."""

    name: str = Field(default="", description="Organization name")
    legal_form: str = Field(default="", description="Legal form")
    country: str = Field(default="", description="Country of registration")
    identifier: str = Field(default="", description="Registration identifier")
    coverage_type: str = Field(default="", description="Reporting coverage type")
    coverage_justification: Optional[str] = Field(None, description="Coverage justification")
    created_by: str = Field(default="", description="Acting user ID")


class UpdateOrganizationRequest(BaseRequest):
    """Request model for updating the organization."""

    name: str = Field(default="", description="Organization name")
    legal_form: str = Field(default="", description="Legal form")
    country: str = Field(default="", description="Country of registration")
    identifier: str = Field(default="", description="Registration identifier")
    coverage_type: str = Field(default="", description="Reporting coverage type")
    coverage_justification: Optional[str] = Field(None, description="Coverage justification")
    updated_by: str = Field(default="", description="Acting user ID")


class CreateOrganizationalUnitRequest(BaseRequest):
    """Request model for creating an organizational unit."""

    name: str = Field(default="", description="Unit name")
    parent_id: Optional[str] = Field(None, description="Parent unit ID")
    description: str = Field(default="", description="Unit description")
    created_by: str = Field(default="", description="Acting user ID")


class UpdateOrganizationalUnitRequest(BaseRequest):
    """Request model for updating an organizational unit."""

    name: str = Field(default="", description="Unit name")
    parent_id: Optional[str] = Field(None, description="Parent unit ID")
    description: str = Field(default="", description="Unit description")
    updated_by: str = Field(default="", description="Acting user ID")


class CreateSectionCatalogItemRequest(BaseRequest):
    """Request model for adding a catalog item."""

    title: str = Field(default="", description="Section title")
    code: str = Field(default="", description="Unique catalog code")
    category: str = Field(default="", description="environmental, social or governance")
    description: str = Field(default="", description="Section description")
    created_by: str = Field(default="", description="Acting user ID")


class UpdateSectionCatalogItemRequest(BaseRequest):
    """Request model for editing a catalog item."""

    title: str = Field(default="", description="Section title")
    code: str = Field(default="", description="Unique catalog code")
    category: str = Field(default="", description="environmental, social or governance")
    description: str = Field(default="", description="Section description")
    updated_by: str = Field(default="", description="Acting user ID")


class CreateReportingPeriodRequest(BaseRequest):
    """Request model for opening a reporting period."""

    name: str = Field(default="", description="Period name")
    start_date: str = Field(default="", description="Start date (ISO 8601)")
    end_date: str = Field(default="", description="End date (ISO 8601)")
    reporting_mode: str = Field(default="simplified", description="simplified or extended")
    report_scope: str = Field(default="single-company", description="Report scope")
    owner_id: str = Field(default="", description="Period owner user ID")


class UpdateReportingPeriodRequest(BaseRequest):
    """Request model for changing a period's configuration."""

    name: str = Field(default="", description="Period name")
    start_date: str = Field(default="", description="Start date (ISO 8601)")
    end_date: str = Field(default="", description="End date (ISO 8601)")
    reporting_mode: str = Field(default="simplified", description="simplified or extended")
    report_scope: str = Field(default="single-company", description="Report scope")
    updated_by: str = Field(default="", description="Acting user ID")


class CreateDataPointRequest(BaseRequest):
    """Request model for adding a data point to a section."""

    section_id: str = Field(default="", description="Owning section ID")
    type: str = Field(default="narrative", description="Data point type")
    classification: Optional[str] = Field(None, description="Classification")
    title: str = Field(default="", description="Title")
    content: str = Field(default="", description="Narrative content")
    value: Optional[str] = Field(None, description="Reported value")
    unit: Optional[str] = Field(None, description="Unit of the value")
    owner_id: str = Field(default="", description="Owner user ID")
    contributor_ids: List[str] = Field(default_factory=list, description="Contributor user IDs")
    source: str = Field(default="", description="Data source")
    information_type: str = Field(default="", description="fact, estimate, declaration or plan")
    assumptions: Optional[str] = Field(None, description="Assumptions behind an estimate")
    completeness_status: str = Field(default="", description="Explicit completeness status, or empty to derive")
    review_status: str = Field(default="draft", description="Initial review status")
    deadline: Optional[str] = Field(None, description="Deadline (ISO 8601 date)")
    is_blocked: bool = Field(default=False, description="Whether work is blocked")
    blocker_reason: Optional[str] = Field(None, description="Why work is blocked")
    blocker_due_date: Optional[str] = Field(None, description="When the blocker should be resolved")
    created_by: str = Field(default="", description="Acting user ID")


class UpdateDataPointRequest(BaseRequest):
    """Full-replacement update of a data point's editable fields."""

    type: str = Field(default="narrative", description="Data point type")
    classification: Optional[str] = Field(None, description="Classification")
    title: str = Field(default="", description="Title")
    content: str = Field(default="", description="Narrative content")
    value: Optional[str] = Field(None, description="Reported value")
    unit: Optional[str] = Field(None, description="Unit of the value")
    owner_id: str = Field(default="", description="Owner user ID")
    contributor_ids: List[str] = Field(default_factory=list, description="Contributor user IDs")
    source: str = Field(default="", description="Data source")
    information_type: str = Field(default="", description="fact, estimate, declaration or plan")
    assumptions: Optional[str] = Field(None, description="Assumptions behind an estimate")
    completeness_status: str = Field(default="", description="Explicit completeness status, or empty to derive")
    review_status: str = Field(default="", description="Review status, or empty to keep the current one")
    deadline: Optional[str] = Field(None, description="Deadline; left unchanged when omitted")
    is_blocked: bool = Field(default=False, description="Whether work is blocked")
    blocker_reason: Optional[str] = Field(None, description="Why work is blocked")
    blocker_due_date: Optional[str] = Field(None, description="When the blocker should be resolved")
    updated_by: str = Field(default="", description="Acting user ID")
    change_note: Optional[str] = Field(None, description="Note stored on the audit entry")


class ApproveDataPointRequest(BaseRequest):
    """Reviewer approval of a data point."""

    reviewed_by: str = Field(default="", description="Reviewer user ID")
    review_comments: Optional[str] = Field(None, description="Optional comments")


class RequestChangesRequest(BaseRequest):
    """Reviewer request for changes on a data point."""

    reviewed_by: str = Field(default="", description="Reviewer user ID")
    review_comments: str = Field(default="", description="Mandatory comments")


class UpdateDataPointStatusRequest(BaseRequest):
    """Explicit completeness status transition."""

    completeness_status: str = Field(default="", description="Target completeness status")
    updated_by: str = Field(default="", description="Acting user ID")
    change_note: Optional[str] = Field(None, description="Note stored on the audit entry")


class CreateDataPointNoteRequest(BaseRequest):
    """Internal note on a data point."""

    content: str = Field(default="", description="Note text")
    created_by: str = Field(default="", description="Author user ID")


class CreateEvidenceRequest(BaseRequest):
    """Request model for attaching evidence to a section."""

    section_id: str = Field(default="", description="Owning section ID")
    title: str = Field(default="", description="Evidence title")
    description: Optional[str] = Field(None, description="Evidence description")
    file_name: Optional[str] = Field(None, description="Uploaded file name")
    file_url: Optional[str] = Field(None, description="Stored file location")
    source_url: Optional[str] = Field(None, description="External HTTP(S) source")
    uploaded_by: str = Field(default="", description="Uploader user ID")


class CreateValidationRuleRequest(BaseRequest):
    """Request model for adding a validation rule to a section."""

    section_id: str = Field(default="", description="Section the rule applies to")
    rule_type: str = Field(default="", description="Rule type")
    target_field: Optional[str] = Field(None, description="Field the rule targets")
    parameters: Optional[str] = Field(None, description="JSON-encoded rule parameters")
    error_message: str = Field(default="", description="Message reported when the rule fails")
    created_by: str = Field(default="", description="Acting user ID")


class UpdateValidationRuleRequest(BaseRequest):
    """Request model for editing a validation rule."""

    rule_type: str = Field(default="", description="Rule type")
    target_field: Optional[str] = Field(None, description="Field the rule targets")
    parameters: Optional[str] = Field(None, description="JSON-encoded rule parameters")
    error_message: str = Field(default="", description="Message reported when the rule fails")
    is_active: bool = Field(default=True, description="Whether the rule is evaluated")
    updated_by: str = Field(default="", description="Acting user ID")


class UpdateSectionOwnerRequest(BaseRequest):
    """Reassign a section to a new owner (empty owner clears it)."""

    owner_id: str = Field(default="", description="New owner user ID")
    updated_by: str = Field(default="", description="Acting user ID")
    change_note: Optional[str] = Field(None, description="Note stored on the audit entry")


class BulkUpdateSectionOwnerRequest(BaseRequest):
    """Reassign several sections in one call."""

    section_ids: List[str] = Field(default_factory=list, description="Sections to reassign")
    owner_id: str = Field(default="", description="New owner user ID")
    updated_by: str = Field(default="", description="Acting user ID")
    change_note: Optional[str] = Field(None, description="Note stored on each audit entry")


class ReminderConfigurationRequest(BaseRequest):
    """Replace the reminder configuration of a period."""

    enabled: bool = Field(default=True, description="Whether reminders are sent")
    days_before_deadline: List[int] = Field(default_factory=lambda: [7, 3, 1], description="Reminder thresholds")
    check_frequency_hours: int = Field(default=24, description="How often the scheduler checks")
    updated_by: str = Field(default="", description="Acting user ID")


class AuditLogFilters(BaseRequest):
    """Filters for audit trail retrieval; all optional."""

    entity_type: Optional[str] = Field(None, description="Entity type, case-insensitive")
    entity_id: Optional[str] = Field(None, description="Entity identifier")
    user_id: Optional[str] = Field(None, description="Acting user ID")
    start_date: Optional[datetime] = Field(None, description="Inclusive lower timestamp bound")
    end_date: Optional[datetime] = Field(None, description="Inclusive upper timestamp bound")
