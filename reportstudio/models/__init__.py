# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the ESG report studio.
"""

# Base models
from .base import BaseEntity, BaseRequest, generate_object_id, utc_now

# Enumerations
from .enums import (
    AuditAction,
    Category,
    CompletenessStatus,
    EntityType,
    InformationType,
    NotificationType,
    PeriodStatus,
    ProgressStatus,
    ReportingMode,
    ReviewStatus,
    RuleType,
    UserRole
)

# Core entities
from .entities import (
    User,
    Organization,
    OrganizationalUnit,
    SectionCatalogItem,
    ReportingPeriod,
    ReportSection,
    DataPoint,
    DataPointNote,
    Evidence,
    ValidationRule,
    FieldChange,
    AuditLogEntry,
    ReminderConfiguration,
    ReminderHistory,
    OwnerNotification
)

# Request models
from .requests import (
    CreateOrganizationRequest,
    UpdateOrganizationRequest,
    CreateOrganizationalUnitRequest,
    UpdateOrganizationalUnitRequest,
    CreateSectionCatalogItemRequest,
    UpdateSectionCatalogItemRequest,
    CreateReportingPeriodRequest,
    UpdateReportingPeriodRequest,
    CreateDataPointRequest,
    UpdateDataPointRequest,
    ApproveDataPointRequest,
    RequestChangesRequest,
    UpdateDataPointStatusRequest,
    CreateDataPointNoteRequest,
    CreateEvidenceRequest,
    CreateValidationRuleRequest,
    UpdateValidationRuleRequest,
    UpdateSectionOwnerRequest,
    BulkUpdateSectionOwnerRequest,
    ReminderConfigurationRequest,
    AuditLogFilters
)

# Result models
from .responses import (
    OperationResult,
    MissingFieldDetail,
    StatusValidationError,
    StatusUpdateResult,
    SectionSummary,
    CompletenessBreakdown,
    CompletenessStats,
    OwnerSectionAssignment,
    OwnerAssignment,
    ResponsibilityMatrix,
    BulkUpdateFailure,
    BulkUpdateSectionOwnerResult,
    ReportingDataSnapshot
)

__all__ = [
    # Base models
    "BaseEntity",
    "BaseRequest",
    "generate_object_id",
    "utc_now",

    # Enumerations
    "AuditAction",
    "Category",
    "CompletenessStatus",
    "EntityType",
    "InformationType",
    "NotificationType",
    "PeriodStatus",
    "ProgressStatus",
    "ReportingMode",
    "ReviewStatus",
    "RuleType",
    "UserRole",

    # Core entities
    "User",
    "Organization",
    "OrganizationalUnit",
    "SectionCatalogItem",
    "ReportingPeriod",
    "ReportSection",
    "DataPoint",
    "DataPointNote",
    "Evidence",
    "ValidationRule",
    "FieldChange",
    "AuditLogEntry",
    "ReminderConfiguration",
    "ReminderHistory",
    "OwnerNotification",

    # Request models
    "CreateOrganizationRequest",
    "UpdateOrganizationRequest",
    "CreateOrganizationalUnitRequest",
    "UpdateOrganizationalUnitRequest",
    "CreateSectionCatalogItemRequest",
    "UpdateSectionCatalogItemRequest",
    "CreateReportingPeriodRequest",
    "UpdateReportingPeriodRequest",
    "CreateDataPointRequest",
    "UpdateDataPointRequest",
    "ApproveDataPointRequest",
    "RequestChangesRequest",
    "UpdateDataPointStatusRequest",
    "CreateDataPointNoteRequest",
    "CreateEvidenceRequest",
    "CreateValidationRuleRequest",
    "UpdateValidationRuleRequest",
    "UpdateSectionOwnerRequest",
    "BulkUpdateSectionOwnerRequest",
    "ReminderConfigurationRequest",
    "AuditLogFilters",

    # Result models
    "OperationResult",
    "MissingFieldDetail",
    "StatusValidationError",
    "StatusUpdateResult",
    "SectionSummary",
    "CompletenessBreakdown",
    "CompletenessStats",
    "OwnerSectionAssignment",
    "OwnerAssignment",
    "ResponsibilityMatrix",
    "BulkUpdateFailure",
    "BulkUpdateSectionOwnerResult",
    "ReportingDataSnapshot"
]
