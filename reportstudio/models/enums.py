# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the ESG report studio domain.
"""

from enum import Enum
from typing import List, Optional, Type


class ReportingMode(str, Enum):
    """Reporting depth; decides which catalog sections a period receives."""
    SIMPLIFIED = "simplified"
    EXTENDED = "extended"


class PeriodStatus(str, Enum):
    """Reporting period lifecycle status."""
    ACTIVE = "active"
    CLOSED = "closed"


class Category(str, Enum):
    """ESG pillar of a section."""
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    GOVERNANCE = "governance"


class InformationType(str, Enum):
    """Nature of a disclosed data point."""
    FACT = "fact"
    ESTIMATE = "estimate"
    DECLARATION = "declaration"
    PLAN = "plan"


class CompletenessStatus(str, Enum):
    """Per-data-point fill state."""
    MISSING = "missing"
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    NOT_APPLICABLE = "not applicable"


class ReviewStatus(str, Enum):
    """Data point review workflow status."""
    DRAFT = "draft"
    READY_FOR_REVIEW = "ready-for-review"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes-requested"


class RuleType(str, Enum):
    """Supported validation rule types."""
    NON_NEGATIVE = "non-negative"
    REQUIRED_UNIT = "required-unit"
    ALLOWED_UNITS = "allowed-units"
    VALUE_WITHIN_PERIOD = "value-within-period"


class UserRole(str, Enum):
    """Reference user roles."""
    ADMIN = "admin"
    REPORT_OWNER = "report-owner"
    CONTRIBUTOR = "contributor"
    AUDITOR = "auditor"


class ProgressStatus(str, Enum):
    """Derived section progress."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"


class NotificationType(str, Enum):
    """Ownership notification kinds."""
    SECTION_ASSIGNED = "section-assigned"
    SECTION_REMOVED = "section-removed"
    DATAPOINT_ASSIGNED = "datapoint-assigned"
    DATAPOINT_REMOVED = "datapoint-removed"


class AuditAction(str, Enum):
    """Action verbs written to the audit trail."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DEPRECATE = "deprecate"
    APPROVE = "approve"
    REQUEST_CHANGES = "request-changes"
    UPDATE_STATUS = "update-status"
    UPDATE_OWNER = "update-owner"
    LINK_EVIDENCE = "link-evidence"
    UNLINK_EVIDENCE = "unlink-evidence"


class EntityType(str, Enum):
    """Entity types recorded in the audit trail."""
    ORGANIZATION = "Organization"
    ORGANIZATIONAL_UNIT = "OrganizationalUnit"
    SECTION_CATALOG_ITEM = "SectionCatalogItem"
    REPORTING_PERIOD = "ReportingPeriod"
    REPORT_SECTION = "ReportSection"
    DATA_POINT = "DataPoint"
    DATA_POINT_NOTE = "DataPointNote"
    EVIDENCE = "Evidence"
    VALIDATION_RULE = "ValidationRule"
    REMINDER_CONFIGURATION = "ReminderConfiguration"


def enum_values(enum_cls: Type[Enum]) -> List[str]:
    """Wire values of an enumeration, in declaration order."""
    return [member.value for member in enum_cls]


def match_enum(enum_cls: Type[Enum], value: Optional[str]) -> Optional[Enum]:
    """Case-insensitive lookup of an enum member by value."""
    if value is None:
        return None
    candidate = value.strip().lower()
    for member in enum_cls:
        if member.value == candidate:
            return member
    return None
