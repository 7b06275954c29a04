# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the ESG report studio domain.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseEntity, generate_object_id, utc_now
from .enums import (
    Category,
    CompletenessStatus,
    InformationType,
    NotificationType,
    PeriodStatus,
    ReportingMode,
    ReviewStatus,
    UserRole
)


class User(BaseModel):
    """Reference user. Not created through the store."""

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(..., description="User identifier")
    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., description="User email address")
    role: UserRole = Field(..., description="User role")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        import re
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v.lower()):
            raise ValueError('Invalid email format')
        return v.lower()


class Organization(BaseEntity):
    """The single reporting organization of a store."""

    name: str = Field(..., description="Organization name")
    legal_form: str = Field(default="", description="Legal form")
    country: str = Field(default="", description="Country of registration")
    identifier: str = Field(default="", description="Registration identifier")
    coverage_type: str = Field(default="", description="Reporting coverage type")
    coverage_justification: Optional[str] = Field(None, description="Why the coverage was chosen")
    created_by: str = Field(default="", description="User ID who created the organization")


class OrganizationalUnit(BaseEntity):
    """Node of the organizational forest."""

    name: str = Field(..., description="Unit name")
    parent_id: Optional[str] = Field(None, description="Parent unit ID")
    description: str = Field(default="", description="Unit description")
    created_by: str = Field(default="", description="User ID who created the unit")


class SectionCatalogItem(BaseEntity):
    """Template for report sections materialized into each period."""

    title: str = Field(..., description="Section title")
    code: str = Field(..., description="Stable catalog code, e.g. ENV-001")
    category: Category = Field(..., description="ESG category")
    description: str = Field(default="", description="Section description")
    is_deprecated: bool = Field(default=False, description="Whether the item is deprecated")
    deprecated_at: Optional[datetime] = Field(None, description="Deprecation timestamp")


class ReportingPeriod(BaseEntity):
    """A bounded reporting date range."""

    name: str = Field(..., description="Period name")
    start_date: str = Field(..., description="Start date (ISO 8601)")
    end_date: str = Field(..., description="End date (ISO 8601)")
    reporting_mode: ReportingMode = Field(default=ReportingMode.SIMPLIFIED, description="Reporting mode")
    report_scope: str = Field(default="single-company", description="Report scope")
    status: PeriodStatus = Field(default=PeriodStatus.ACTIVE, description="Lifecycle status")
    owner_id: str = Field(default="", description="Period owner user ID")
    owner_name: str = Field(default="", description="Owner display name at creation")
    organization_id: Optional[str] = Field(None, description="Owning organization ID")


class ReportSection(BaseModel):
    """A section generated for a period from the catalog."""

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    id: str = Field(default_factory=generate_object_id, description="Section identifier")
    period_id: str = Field(..., description="Owning period ID")
    title: str = Field(..., description="Section title")
    category: Category = Field(..., description="ESG category")
    description: str = Field(default="", description="Section description")
    owner_id: str = Field(default="", description="Section owner user ID")
    status: str = Field(default="draft", description="Editorial status")
    completeness: str = Field(default="empty", description="Completeness marker")
    order: int = Field(default=0, description="Zero-based order within the period")
    catalog_code: Optional[str] = Field(None, description="Catalog code the section came from")


class DataPoint(BaseEntity):
    """An individual ESG disclosure within a section."""

    section_id: str = Field(..., description="Owning section ID")
    type: str = Field(default="narrative", description="Data point type")
    classification: Optional[str] = Field(None, description="Classification")
    title: str = Field(..., description="Title")
    content: str = Field(..., description="Narrative content")
    value: Optional[str] = Field(None, description="Reported value")
    unit: Optional[str] = Field(None, description="Unit of the value")
    owner_id: str = Field(default="", description="Owner user ID")
    contributor_ids: List[str] = Field(default_factory=list, description="Contributor user IDs")
    source: str = Field(default="", description="Data source")
    information_type: InformationType = Field(..., description="Information type")
    assumptions: Optional[str] = Field(None, description="Assumptions behind an estimate")
    completeness_status: CompletenessStatus = Field(..., description="Completeness status")
    review_status: ReviewStatus = Field(default=ReviewStatus.DRAFT, description="Review status")
    reviewed_by: Optional[str] = Field(None, description="Reviewer user ID")
    reviewed_at: Optional[datetime] = Field(None, description="Review timestamp")
    review_comments: Optional[str] = Field(None, description="Reviewer comments")
    evidence_ids: List[str] = Field(default_factory=list, description="Linked evidence IDs")
    deadline: Optional[str] = Field(None, description="Deadline (ISO 8601 date)")
    is_blocked: bool = Field(default=False, description="Whether work is blocked")
    blocker_reason: Optional[str] = Field(None, description="Why work is blocked")
    blocker_due_date: Optional[str] = Field(None, description="When the blocker should be resolved")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")

    def is_approved(self) -> bool:
        """Approved data points are read-only outside the review workflow."""
        return self.review_status == ReviewStatus.APPROVED

    def is_assigned_to(self, user_id: str) -> bool:
        """Check if user owns or contributes to this data point."""
        return self.owner_id == user_id or user_id in self.contributor_ids


class DataPointNote(BaseEntity):
    """Internal accountability note on a data point."""

    data_point_id: str = Field(..., description="Annotated data point ID")
    content: str = Field(..., description="Note text")
    created_by: str = Field(..., description="Author user ID")
    created_by_name: str = Field(default="", description="Author display name")


class Evidence(BaseEntity):
    """Supporting document or link for one or more data points."""

    section_id: str = Field(..., description="Owning section ID")
    title: str = Field(..., description="Evidence title")
    description: Optional[str] = Field(None, description="Evidence description")
    file_name: Optional[str] = Field(None, description="Uploaded file name")
    file_url: Optional[str] = Field(None, description="Stored file location")
    source_url: Optional[str] = Field(None, description="External HTTP(S) source")
    uploaded_by: str = Field(..., description="Uploader user ID")
    uploaded_at: datetime = Field(default_factory=utc_now, description="Upload timestamp")
    linked_data_point_ids: List[str] = Field(default_factory=list, description="Linked data point IDs")


class ValidationRule(BaseEntity):
    """Per-section constraint evaluated before a data point commits."""

    section_id: str = Field(..., description="Section the rule applies to")
    rule_type: str = Field(..., description="Rule type tag")
    target_field: Optional[str] = Field(None, description="Field the rule targets")
    parameters: Optional[str] = Field(None, description="JSON-encoded rule parameters")
    error_message: str = Field(..., description="Message reported when the rule fails")
    is_active: bool = Field(default=True, description="Whether the rule is evaluated")
    created_by: str = Field(..., description="User ID who created the rule")


class FieldChange(BaseModel):
    """A single field delta inside an audit entry."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Changed field")
    old_value: str = Field(default="", description="Value before the change")
    new_value: str = Field(default="", description="Value after the change")


class AuditLogEntry(BaseModel):
    """Immutable audit trail entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    timestamp: datetime = Field(default_factory=utc_now, description="Action timestamp")
    user_id: str = Field(..., description="Acting user ID")
    user_name: str = Field(..., description="Acting user display name")
    action: str = Field(..., description="Action performed")
    entity_type: str = Field(..., description="Entity type")
    entity_id: str = Field(..., description="Entity identifier")
    change_note: Optional[str] = Field(None, description="Free-text note")
    changes: List[FieldChange] = Field(default_factory=list, description="Ordered field deltas")


class ReminderConfiguration(BaseEntity):
    """Reminder schedule for one reporting period."""

    period_id: str = Field(..., description="Reporting period ID")
    enabled: bool = Field(default=True, description="Whether reminders are sent")
    days_before_deadline: List[int] = Field(default_factory=lambda: [7, 3, 1], description="Reminder thresholds")
    check_frequency_hours: int = Field(default=24, description="How often the scheduler checks")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")


class ReminderHistory(BaseModel):
    """Record of a reminder that was sent."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    data_point_id: str = Field(..., description="Data point the reminder is about")
    recipient_user_id: str = Field(..., description="Recipient user ID")
    recipient_email: str = Field(default="", description="Recipient email")
    sent_at: datetime = Field(default_factory=utc_now, description="Send timestamp")
    reminder_type: str = Field(default="", description="missing or incomplete")
    days_until_deadline: int = Field(..., description="Threshold that triggered the reminder")
    deadline_date: Optional[str] = Field(None, description="Deadline at send time")
    email_sent: bool = Field(default=False, description="Whether delivery succeeded")
    error_message: Optional[str] = Field(None, description="Delivery failure reason")


class OwnerNotification(BaseModel):
    """Inbox entry about an ownership change."""

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    recipient_user_id: str = Field(..., description="Recipient user ID")
    notification_type: NotificationType = Field(..., description="Notification kind")
    entity_id: str = Field(..., description="Section or data point ID")
    entity_type: str = Field(..., description="ReportSection or DataPoint")
    entity_title: str = Field(default="", description="Section or data point title")
    message: str = Field(default="", description="Human-readable message")
    changed_by: str = Field(default="", description="User ID who made the change")
    changed_by_name: str = Field(default="", description="Name of the user who made the change")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    is_read: bool = Field(default=False, description="Read flag")
    email_sent: bool = Field(default=False, description="Whether email delivery succeeded")
