# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
In-memory report store with OpenTelemetry tracing.

The store owns every entity of the reporting workspace and enforces the
business rules that govern how they change. One re-entrant lock guards all
reads and writes; each public operation holds it for its whole duration, so
validation, mutation and the audit append happen as one unit. Entities
handed to callers are deep copies.
"""

import functools
import logging
import threading
from datetime import timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from opentelemetry import trace

from ..config import StoreSettings
from ..domain import aggregations, data_points as dp_rules, hierarchy, periods as period_rules
from ..domain.authorization import can_change_section_owner
from ..domain.evidence import validate_evidence_fields
from ..domain.notifications import build_ownership_notifications
from ..domain.validation_rules import RuleContext, evaluate_rules
from ..exceptions import HierarchyError
from ..models.base import utc_now
from ..models.entities import (
    DataPoint,
    DataPointNote,
    Evidence,
    FieldChange,
    Organization,
    OrganizationalUnit,
    OwnerNotification,
    ReminderConfiguration,
    ReminderHistory,
    ReportingPeriod,
    ReportSection,
    SectionCatalogItem,
    User,
    ValidationRule
)
from ..models.enums import (
    AuditAction,
    Category,
    CompletenessStatus,
    EntityType,
    InformationType,
    PeriodStatus,
    ReportingMode,
    ReviewStatus,
    RuleType,
    UserRole,
    enum_values,
    match_enum
)
from ..models.requests import (
    ApproveDataPointRequest,
    AuditLogFilters,
    BulkUpdateSectionOwnerRequest,
    CreateDataPointNoteRequest,
    CreateDataPointRequest,
    CreateEvidenceRequest,
    CreateOrganizationalUnitRequest,
    CreateOrganizationRequest,
    CreateReportingPeriodRequest,
    CreateSectionCatalogItemRequest,
    CreateValidationRuleRequest,
    ReminderConfigurationRequest,
    RequestChangesRequest,
    UpdateDataPointRequest,
    UpdateDataPointStatusRequest,
    UpdateOrganizationalUnitRequest,
    UpdateOrganizationRequest,
    UpdateReportingPeriodRequest,
    UpdateSectionCatalogItemRequest,
    UpdateSectionOwnerRequest,
    UpdateValidationRuleRequest
)
from ..models.responses import (
    BulkUpdateFailure,
    BulkUpdateSectionOwnerResult,
    CompletenessStats,
    OperationResult,
    ReportingDataSnapshot,
    ResponsibilityMatrix,
    SectionSummary,
    StatusUpdateResult,
    StatusValidationError
)
from .audit import AuditFilters, AuditTrail, calculate_changes, creation_changes

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


SAMPLE_USERS: Tuple[Tuple[str, str, str, UserRole], ...] = (
    ("user-1", "Sarah Chen", "sarah.chen@company.com", UserRole.REPORT_OWNER),
    ("user-2", "Admin User", "admin@company.com", UserRole.ADMIN),
    ("user-3", "John Smith", "john.smith@company.com", UserRole.CONTRIBUTOR),
    ("user-4", "Emily Johnson", "emily.johnson@company.com", UserRole.CONTRIBUTOR),
    ("user-5", "Michael Brown", "michael.brown@company.com", UserRole.CONTRIBUTOR),
    ("user-6", "Lisa Anderson", "lisa.anderson@company.com", UserRole.AUDITOR),
)

UNKNOWN_USER_ID = "unknown"
UNKNOWN_USER_NAME = "Unknown User"

ORGANIZATION_FIELDS = (
    ("name", "Name"),
    ("legal_form", "LegalForm"),
    ("country", "Country"),
    ("identifier", "Identifier"),
    ("coverage_type", "CoverageType"),
    ("coverage_justification", "CoverageJustification"),
)
UNIT_FIELDS = (("name", "Name"), ("parent_id", "ParentId"), ("description", "Description"))
CATALOG_FIELDS = (("title", "Title"), ("code", "Code"), ("category", "Category"), ("description", "Description"))
PERIOD_FIELDS = (
    ("name", "Name"),
    ("start_date", "StartDate"),
    ("end_date", "EndDate"),
    ("reporting_mode", "ReportingMode"),
    ("report_scope", "ReportScope"),
    ("status", "Status"),
    ("owner_id", "OwnerId"),
)
EVIDENCE_FIELDS = (
    ("title", "Title"),
    ("description", "Description"),
    ("file_name", "FileName"),
    ("file_url", "FileUrl"),
    ("source_url", "SourceUrl"),
    ("section_id", "SectionId"),
)
RULE_FIELDS = (
    ("rule_type", "RuleType"),
    ("target_field", "TargetField"),
    ("parameters", "Parameters"),
    ("error_message", "ErrorMessage"),
    ("is_active", "IsActive"),
)
REMINDER_FIELDS = (
    ("enabled", "Enabled"),
    ("days_before_deadline", "DaysBeforeDeadline"),
    ("check_frequency_hours", "CheckFrequencyHours"),
)


def store_operation(name: str):
    """
    Run a store method inside a span while holding the store lock.

    Failures are recorded on the span and logged before being re-raised.
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            with tracer.start_as_current_span(f"report_store.{name}") as span:
                with self._lock:
                    try:
                        return method(self, *args, **kwargs)
                    except HierarchyError as e:
                        span.record_exception(e)
                        span.set_status(trace.Status(trace.StatusCode.ERROR, e.message))
                        logger.warning(
                            "Organizational hierarchy violation",
                            extra={"extra_fields": {"operation": name, "error": e.message}}
                        )
                        raise
                    except Exception as e:
                        span.record_exception(e)
                        span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                        logger.error(
                            "Report store operation failed",
                            extra={"extra_fields": {"operation": name, "error": str(e)}},
                            exc_info=True
                        )
                        raise
        return wrapper
    return decorator


def _annotate(**attributes):
    """Set non-empty attributes on the current span."""
    span = trace.get_current_span()
    span.set_attributes({
        f"report_store.{key}": value
        for key, value in attributes.items()
        if value is not None
    })


def _copy(model):
    return model.model_copy(deep=True) if model is not None else None


def _copies(models: Iterable) -> List:
    return [model.model_copy(deep=True) for model in models]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _reject(operation: str, message: str, **context) -> OperationResult:
    """Log a rejected operation and build the failed result."""
    span = trace.get_current_span()
    span.set_attribute("report_store.rejected", True)
    logger.info(
        f"{operation} rejected",
        extra={"extra_fields": {"reason": message, **{k: v for k, v in context.items() if v is not None}}}
    )
    return OperationResult.fail(message)


class ReportStore:
    """Authoritative in-memory state of the reporting workspace."""

    def __init__(self, settings: Optional[StoreSettings] = None, users: Optional[Iterable[User]] = None):
        """
        Initialize the store.

        Args:
            settings: Behaviour switches; defaults to ``StoreSettings()``
            users: Reference users; when omitted the sample users are seeded
                if the settings ask for it
        """
        self.settings = settings or StoreSettings()
        self._lock = threading.RLock()

        self._users: Dict[str, User] = {}
        self._organization: Optional[Organization] = None
        self._units: Dict[str, OrganizationalUnit] = {}
        self._catalog: List[SectionCatalogItem] = []
        self._periods: List[ReportingPeriod] = []
        self._sections: List[ReportSection] = []
        self._data_points: Dict[str, DataPoint] = {}
        self._notes: List[DataPointNote] = []
        self._evidence: Dict[str, Evidence] = {}
        self._rules: List[ValidationRule] = []
        self._reminder_configs: Dict[str, ReminderConfiguration] = {}
        self._reminder_history: List[ReminderHistory] = []
        self._notifications: List[OwnerNotification] = []
        self._audit = AuditTrail()

        if users is not None:
            for user in users:
                self._users[user.id] = _copy(user)
        elif self.settings.seed_sample_users:
            for user_id, name, email, role in SAMPLE_USERS:
                self._users[user_id] = User(id=user_id, name=name, email=email, role=role)

        if self.settings.seed_default_catalog:
            self._catalog = period_rules.build_default_catalog()

        logger.info(
            "Report store initialized",
            extra={"extra_fields": {
                "users": len(self._users),
                "catalog_items": len(self._catalog),
                "require_data_point_owner": self.settings.require_data_point_owner
            }}
        )

    # Internal helpers, called with the lock held

    def _actor(self, user_id: Optional[str]) -> Tuple[str, str]:
        """Audit identity for a user id, falling back to unknown."""
        if _blank(user_id):
            return UNKNOWN_USER_ID, UNKNOWN_USER_NAME
        user = self._users.get(user_id)
        return user_id, user.name if user is not None else UNKNOWN_USER_NAME

    def _audit_action(
        self,
        user_id: Optional[str],
        action: AuditAction,
        entity_type: EntityType,
        entity_id: str,
        changes,
        change_note: Optional[str] = None
    ):
        actor_id, actor_name = self._actor(user_id)
        return self._audit.log_action(
            user_id=actor_id,
            user_name=actor_name,
            action=action.value,
            entity_type=entity_type.value,
            entity_id=entity_id,
            changes=changes,
            change_note=change_note
        )

    def _find_section(self, section_id: Optional[str]) -> Optional[ReportSection]:
        return next((s for s in self._sections if s.id == section_id), None)

    def _find_period(self, period_id: Optional[str]) -> Optional[ReportingPeriod]:
        return next((p for p in self._periods if p.id == period_id), None)

    def _period_of_section(self, section_id: str) -> Optional[ReportingPeriod]:
        section = self._find_section(section_id)
        return self._find_period(section.period_id) if section is not None else None

    def _sections_of(self, period_id: Optional[str]) -> List[ReportSection]:
        if period_id is None:
            return list(self._sections)
        return [s for s in self._sections if s.period_id == period_id]

    def _points_of_section(self, section_id: str) -> List[DataPoint]:
        return [dp for dp in self._data_points.values() if dp.section_id == section_id]

    def _reporting_started(self, period_id: str) -> bool:
        section_ids = {s.id for s in self._sections_of(period_id)}
        return any(dp.section_id in section_ids for dp in self._data_points.values())

    def _summaries(self, period_id: Optional[str]) -> List[SectionSummary]:
        summaries = []
        for section in self._sections_of(period_id):
            evidence = [e for e in self._evidence.values() if e.section_id == section.id]
            summaries.append(aggregations.summarize_section(
                section, self._points_of_section(section.id), evidence, self._users
            ))
        return summaries

    def _notify(self, notifications: List[OwnerNotification]):
        self._notifications.extend(notifications)
        for notification in notifications:
            logger.debug(
                "Owner notification recorded",
                extra={"extra_fields": {
                    "recipient_user_id": notification.recipient_user_id,
                    "notification_type": notification.notification_type,
                    "entity_id": notification.entity_id
                }}
            )

    def _rule_outcome(self, candidate: DataPoint):
        rules = [r for r in self._rules if r.section_id == candidate.section_id]
        context = RuleContext(period=self._period_of_section(candidate.section_id))
        return evaluate_rules(rules, candidate, context)

    def _drop_evidence_link(self, data_point: DataPoint, evidence_id: str) -> bool:
        """
        Remove an evidence id from a stored data point.

        Returns True when the removal forced a complete data point back to
        incomplete.
        """
        data_point.evidence_ids = [e for e in data_point.evidence_ids if e != evidence_id]
        data_point.updated_at = utc_now()
        if not data_point.evidence_ids and data_point.completeness_status == CompletenessStatus.COMPLETE.value:
            data_point.completeness_status = CompletenessStatus.INCOMPLETE.value
            return True
        return False

    # Reference data

    @store_operation("get_users")
    def get_users(self) -> List[User]:
        return _copies(self._users.values())

    @store_operation("get_user")
    def get_user(self, user_id: str) -> Optional[User]:
        return _copy(self._users.get(user_id))

    @store_operation("get_organization")
    def get_organization(self) -> Optional[Organization]:
        return _copy(self._organization)

    @store_operation("create_organization")
    def create_organization(self, request: CreateOrganizationRequest) -> OperationResult:
        """Create the single organization of the store."""
        if self._organization is not None:
            return _reject("Organization creation", "Organization already exists.")
        if _blank(request.name):
            return _reject("Organization creation", "Name is required.")

        organization = Organization(
            name=request.name.strip(),
            legal_form=request.legal_form,
            country=request.country,
            identifier=request.identifier,
            coverage_type=request.coverage_type,
            coverage_justification=request.coverage_justification,
            created_by=request.created_by
        )
        self._organization = organization
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.ORGANIZATION, organization.id,
            creation_changes(organization.model_dump(), ORGANIZATION_FIELDS)
        )
        _annotate(organization_id=organization.id)
        logger.info("Organization created", extra={"extra_fields": {"organization_id": organization.id}})
        return OperationResult.ok(_copy(organization))

    @store_operation("update_organization")
    def update_organization(self, request: UpdateOrganizationRequest) -> OperationResult:
        """Update the organization in place."""
        if self._organization is None:
            return _reject("Organization update", "Organization not found.")
        if _blank(request.name):
            return _reject("Organization update", "Name is required.")

        before = self._organization.model_dump()
        candidate = self._organization.model_copy(update={
            "name": request.name.strip(),
            "legal_form": request.legal_form,
            "country": request.country,
            "identifier": request.identifier,
            "coverage_type": request.coverage_type,
            "coverage_justification": request.coverage_justification
        })
        changes = calculate_changes(before, candidate.model_dump(), ORGANIZATION_FIELDS)
        if changes:
            self._organization = candidate
            self._audit_action(
                request.updated_by, AuditAction.UPDATE, EntityType.ORGANIZATION, candidate.id, changes
            )
            logger.info("Organization updated", extra={"extra_fields": {"organization_id": candidate.id, "changes_count": len(changes)}})
        return OperationResult.ok(_copy(self._organization))

    @store_operation("get_organizational_units")
    def get_organizational_units(self) -> List[OrganizationalUnit]:
        return _copies(self._units.values())

    @store_operation("get_organizational_unit")
    def get_organizational_unit(self, unit_id: str) -> Optional[OrganizationalUnit]:
        return _copy(self._units.get(unit_id))

    def _check_parent(self, unit_id: Optional[str], parent_id: Optional[str]) -> Optional[str]:
        """Raise on structural violations; return a message for an unknown parent."""
        result = hierarchy.check_parent_assignment(unit_id, parent_id, self._units)
        if result.is_valid:
            return None
        if result.outcome == hierarchy.ParentCheck.PARENT_NOT_FOUND:
            return result.message
        raise HierarchyError(result.message, unit_id=unit_id, parent_id=parent_id)

    @store_operation("create_organizational_unit")
    def create_organizational_unit(self, request: CreateOrganizationalUnitRequest) -> OperationResult:
        """
        Add a unit to the organizational forest.

        Raises:
            HierarchyError: If the parent assignment is structurally invalid
        """
        if _blank(request.name):
            return _reject("Organizational unit creation", "Name is required.")

        parent_id = request.parent_id or None
        error = self._check_parent(None, parent_id)
        if error:
            return _reject("Organizational unit creation", error, parent_id=parent_id)

        unit = OrganizationalUnit(
            name=request.name.strip(),
            parent_id=parent_id,
            description=request.description,
            created_by=request.created_by
        )
        self._units[unit.id] = unit
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.ORGANIZATIONAL_UNIT, unit.id,
            creation_changes(unit.model_dump(), UNIT_FIELDS)
        )
        _annotate(unit_id=unit.id, parent_id=parent_id)
        logger.info("Organizational unit created", extra={"extra_fields": {"unit_id": unit.id, "parent_id": parent_id}})
        return OperationResult.ok(_copy(unit))

    @store_operation("update_organizational_unit")
    def update_organizational_unit(self, unit_id: str, request: UpdateOrganizationalUnitRequest) -> OperationResult:
        """
        Rename, describe or re-parent a unit.

        Raises:
            HierarchyError: If the new parent is the unit itself or one of
                its descendants
        """
        unit = self._units.get(unit_id)
        if unit is None:
            return _reject("Organizational unit update", "Organizational unit not found.", unit_id=unit_id)
        if _blank(request.name):
            return _reject("Organizational unit update", "Name is required.", unit_id=unit_id)

        parent_id = request.parent_id or None
        error = self._check_parent(unit_id, parent_id)
        if error:
            return _reject("Organizational unit update", error, unit_id=unit_id, parent_id=parent_id)

        candidate = unit.model_copy(update={
            "name": request.name.strip(),
            "parent_id": parent_id,
            "description": request.description
        })
        changes = calculate_changes(unit.model_dump(), candidate.model_dump(), UNIT_FIELDS)
        if changes:
            self._units[unit_id] = candidate
            self._audit_action(
                request.updated_by, AuditAction.UPDATE, EntityType.ORGANIZATIONAL_UNIT, unit_id, changes
            )
            logger.info("Organizational unit updated", extra={"extra_fields": {"unit_id": unit_id, "changes_count": len(changes)}})
        return OperationResult.ok(_copy(self._units[unit_id]))

    @store_operation("delete_organizational_unit")
    def delete_organizational_unit(self, unit_id: str, deleted_by: str = "") -> OperationResult:
        """
        Delete a leaf unit.

        Raises:
            HierarchyError: If other units still reference it as parent
        """
        unit = self._units.get(unit_id)
        if unit is None:
            return _reject("Organizational unit deletion", "Organizational unit not found.", unit_id=unit_id)
        if hierarchy.has_children(unit_id, self._units):
            raise HierarchyError(hierarchy.HAS_CHILDREN, unit_id=unit_id)

        del self._units[unit_id]
        self._audit_action(
            deleted_by, AuditAction.DELETE, EntityType.ORGANIZATIONAL_UNIT, unit_id,
            calculate_changes(unit.model_dump(), {}, UNIT_FIELDS)
        )
        logger.info("Organizational unit deleted", extra={"extra_fields": {"unit_id": unit_id}})
        return OperationResult.ok(_copy(unit))

    # Section catalog

    @store_operation("get_section_catalog")
    def get_section_catalog(self, include_deprecated: bool = True) -> List[SectionCatalogItem]:
        return _copies(item for item in self._catalog if include_deprecated or not item.is_deprecated)

    @store_operation("get_section_catalog_item")
    def get_section_catalog_item(self, item_id: str) -> Optional[SectionCatalogItem]:
        return _copy(next((item for item in self._catalog if item.id == item_id), None))

    def _validate_catalog_fields(self, request, exclude_id: Optional[str] = None) -> Optional[str]:
        if _blank(request.title):
            return "Title is required."
        if _blank(request.code):
            return "Code is required."
        if match_enum(Category, request.category) is None:
            return f"Category must be one of: {', '.join(enum_values(Category))}."
        code = request.code.strip().lower()
        for item in self._catalog:
            if item.id != exclude_id and item.code.lower() == code:
                return f"A section with code '{request.code.strip()}' already exists."
        return None

    @store_operation("create_section_catalog_item")
    def create_section_catalog_item(self, request: CreateSectionCatalogItemRequest) -> OperationResult:
        """Append a new item to the section catalog."""
        error = self._validate_catalog_fields(request)
        if error:
            return _reject("Catalog item creation", error, code=request.code)

        item = SectionCatalogItem(
            title=request.title.strip(),
            code=request.code.strip(),
            category=match_enum(Category, request.category),
            description=request.description
        )
        self._catalog.append(item)
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.SECTION_CATALOG_ITEM, item.id,
            creation_changes(item.model_dump(), CATALOG_FIELDS)
        )
        _annotate(catalog_item_id=item.id, code=item.code)
        logger.info("Section catalog item created", extra={"extra_fields": {"catalog_item_id": item.id, "code": item.code}})
        return OperationResult.ok(_copy(item))

    @store_operation("update_section_catalog_item")
    def update_section_catalog_item(self, item_id: str, request: UpdateSectionCatalogItemRequest) -> OperationResult:
        """Edit a catalog item; already generated sections are not touched."""
        index = next((i for i, item in enumerate(self._catalog) if item.id == item_id), None)
        if index is None:
            return _reject("Catalog item update", "Section catalog item not found.", catalog_item_id=item_id)
        error = self._validate_catalog_fields(request, exclude_id=item_id)
        if error:
            return _reject("Catalog item update", error, catalog_item_id=item_id)

        current = self._catalog[index]
        candidate = current.model_copy(update={
            "title": request.title.strip(),
            "code": request.code.strip(),
            "category": match_enum(Category, request.category).value,
            "description": request.description
        })
        changes = calculate_changes(current.model_dump(), candidate.model_dump(), CATALOG_FIELDS)
        if changes:
            self._catalog[index] = candidate
            self._audit_action(
                request.updated_by, AuditAction.UPDATE, EntityType.SECTION_CATALOG_ITEM, item_id, changes
            )
        return OperationResult.ok(_copy(self._catalog[index]))

    @store_operation("deprecate_section_catalog_item")
    def deprecate_section_catalog_item(self, item_id: str, deprecated_by: str = "") -> OperationResult:
        """Deprecate a catalog item. There is no way back."""
        item = next((item for item in self._catalog if item.id == item_id), None)
        if item is None:
            return _reject("Catalog item deprecation", "Section catalog item not found.", catalog_item_id=item_id)
        if item.is_deprecated:
            return _reject("Catalog item deprecation", "Section is already deprecated.", catalog_item_id=item_id)

        before = item.model_dump()
        item.is_deprecated = True
        item.deprecated_at = utc_now()
        self._audit_action(
            deprecated_by, AuditAction.DEPRECATE, EntityType.SECTION_CATALOG_ITEM, item_id,
            calculate_changes(before, item.model_dump(), (("is_deprecated", "IsDeprecated"),))
        )
        logger.info("Section catalog item deprecated", extra={"extra_fields": {"catalog_item_id": item_id, "code": item.code}})
        return OperationResult.ok(_copy(item))

    # Reporting periods and sections

    @store_operation("get_periods")
    def get_periods(self) -> List[ReportingPeriod]:
        return _copies(self._periods)

    @store_operation("get_period")
    def get_period(self, period_id: str) -> Optional[ReportingPeriod]:
        return _copy(self._find_period(period_id))

    def _validate_period_fields(self, request, exclude_id: Optional[str] = None) -> Optional[str]:
        if _blank(request.name):
            return "Name is required."
        if match_enum(ReportingMode, request.reporting_mode) is None:
            return f"ReportingMode must be one of: {', '.join(enum_values(ReportingMode))}."
        dates = period_rules.validate_date_range(request.start_date, request.end_date)
        if not dates.is_valid:
            return dates.error_message
        overlapping = period_rules.find_overlapping_period(dates.start, dates.end, self._periods, exclude_id)
        if overlapping is not None:
            return period_rules.overlap_message(overlapping)
        return None

    @store_operation("create_period")
    def create_period(self, request: CreateReportingPeriodRequest) -> OperationResult:
        """
        Open a new reporting period and generate its sections.

        Every existing period is closed, so at most one period is active.
        Sections come from the non-deprecated catalog, restricted to the
        simplified subset in simplified mode.

        Args:
            request: Period name, bounds, mode, scope and owner

        Returns:
            OperationResult with the new ReportingPeriod
        """
        if self._organization is None:
            return _reject(
                "Reporting period creation",
                "Organization must be configured before creating reporting periods."
            )
        if not self._units:
            return _reject(
                "Reporting period creation",
                "Organizational structure must be defined before creating reporting periods. "
                "Please add at least one organizational unit."
            )
        error = self._validate_period_fields(request)
        if error:
            return _reject("Reporting period creation", error, start_date=request.start_date, end_date=request.end_date)

        closed = []
        for existing in self._periods:
            if existing.status != PeriodStatus.CLOSED.value:
                existing.status = PeriodStatus.CLOSED
                closed.append(existing.id)

        owner = self._users.get(request.owner_id) if request.owner_id else None
        mode = match_enum(ReportingMode, request.reporting_mode)
        period = ReportingPeriod(
            name=request.name.strip(),
            start_date=request.start_date,
            end_date=request.end_date,
            reporting_mode=mode,
            report_scope=request.report_scope,
            status=PeriodStatus.ACTIVE,
            owner_id=request.owner_id,
            owner_name=owner.name if owner is not None else "",
            organization_id=self._organization.id
        )
        self._periods.append(period)

        items = period_rules.select_catalog_items(self._catalog, mode.value)
        sections = period_rules.generate_sections(period.id, items)
        self._sections.extend(sections)

        self._audit_action(
            request.owner_id, AuditAction.CREATE, EntityType.REPORTING_PERIOD, period.id,
            creation_changes(period.model_dump(), PERIOD_FIELDS),
            change_note=f"Closed periods: {', '.join(closed)}" if closed else None
        )
        _annotate(period_id=period.id, reporting_mode=mode.value, sections=len(sections))
        logger.info(
            "Reporting period created",
            extra={"extra_fields": {
                "period_id": period.id,
                "reporting_mode": mode.value,
                "sections_generated": len(sections),
                "periods_closed": len(closed)
            }}
        )
        return OperationResult.ok(_copy(period))

    @store_operation("update_period")
    def update_period(self, period_id: str, request: UpdateReportingPeriodRequest) -> OperationResult:
        """Change a period's configuration until reporting has started."""
        period = self._find_period(period_id)
        if period is None:
            return _reject("Reporting period update", "Reporting period not found.", period_id=period_id)
        if self._reporting_started(period_id):
            return _reject(
                "Reporting period update",
                "Cannot edit configuration after reporting has started. "
                "Reporting is considered started when data points have been added to sections.",
                period_id=period_id
            )
        error = self._validate_period_fields(request, exclude_id=period_id)
        if error:
            return _reject("Reporting period update", error, period_id=period_id)

        before = period.model_dump()
        period.name = request.name.strip()
        period.start_date = request.start_date
        period.end_date = request.end_date
        period.reporting_mode = match_enum(ReportingMode, request.reporting_mode)
        period.report_scope = request.report_scope
        changes = calculate_changes(before, period.model_dump(), PERIOD_FIELDS)
        if changes:
            self._audit_action(
                request.updated_by, AuditAction.UPDATE, EntityType.REPORTING_PERIOD, period_id, changes
            )
            logger.info("Reporting period updated", extra={"extra_fields": {"period_id": period_id, "changes_count": len(changes)}})
        return OperationResult.ok(_copy(period))

    @store_operation("has_reporting_started")
    def has_reporting_started(self, period_id: str) -> bool:
        return self._reporting_started(period_id)

    @store_operation("get_sections")
    def get_sections(self, period_id: Optional[str] = None) -> List[ReportSection]:
        return _copies(self._sections_of(period_id))

    @store_operation("get_section")
    def get_section(self, section_id: str) -> Optional[ReportSection]:
        return _copy(self._find_section(section_id))

    @store_operation("get_section_summaries")
    def get_section_summaries(self, period_id: Optional[str] = None) -> List[SectionSummary]:
        return self._summaries(period_id)

    @store_operation("get_snapshot")
    def get_snapshot(self) -> ReportingDataSnapshot:
        """Organization, periods, sections, summaries and units as one copy."""
        return ReportingDataSnapshot(
            organization=_copy(self._organization),
            periods=_copies(self._periods),
            sections=_copies(self._sections),
            section_summaries=self._summaries(None),
            organizational_units=_copies(self._units.values())
        )

    def _reassign_section(self, section_id: str, owner_id: str, updated_by: str, change_note: Optional[str]):
        """Shared single-section ownership change; returns (section, error)."""
        section = self._find_section(section_id)
        if section is None:
            return None, "Section not found."
        new_owner = None
        if owner_id:
            new_owner = self._users.get(owner_id)
            if new_owner is None:
                return None, "Owner user not found."
        actor = self._users.get(updated_by) if updated_by else None
        if actor is None:
            return None, "Updating user not found."
        authorization = can_change_section_owner(actor)
        if not authorization.allowed:
            return None, authorization.reason

        old_owner_id = section.owner_id
        if old_owner_id == owner_id:
            return section, None

        old_owner = self._users.get(old_owner_id) if old_owner_id else None
        section.owner_id = owner_id
        self._audit_action(
            updated_by, AuditAction.UPDATE_OWNER, EntityType.REPORT_SECTION, section_id,
            [self._owner_change(old_owner_id, old_owner, owner_id, new_owner)],
            change_note=change_note
        )
        self._notify(build_ownership_notifications(
            EntityType.REPORT_SECTION.value, section.id, section.title,
            old_owner_id, owner_id, actor, updated_by
        ))
        logger.info(
            "Section owner updated",
            extra={"extra_fields": {"section_id": section_id, "old_owner_id": old_owner_id, "new_owner_id": owner_id}}
        )
        return section, None

    @staticmethod
    def _owner_change(old_id: str, old_owner: Optional[User], new_id: str, new_owner: Optional[User]):
        def render(user_id, user):
            if not user_id:
                return ""
            return f"{user.name} ({user_id})" if user is not None else user_id

        return FieldChange(field="OwnerId", old_value=render(old_id, old_owner), new_value=render(new_id, new_owner))

    @store_operation("update_section_owner")
    def update_section_owner(self, section_id: str, request: UpdateSectionOwnerRequest) -> OperationResult:
        """
        Reassign a section. Only admins and report owners may do this; an
        empty owner id clears the owner.
        """
        section, error = self._reassign_section(
            section_id, request.owner_id, request.updated_by, request.change_note
        )
        if error:
            return _reject("Section owner update", error, section_id=section_id)
        return OperationResult.ok(_copy(section))

    @store_operation("bulk_update_section_owner")
    def bulk_update_section_owner(self, request: BulkUpdateSectionOwnerRequest) -> BulkUpdateSectionOwnerResult:
        """Apply the single-section ownership rules to each listed section."""
        result = BulkUpdateSectionOwnerResult()
        for section_id in request.section_ids:
            section, error = self._reassign_section(
                section_id, request.owner_id, request.updated_by, request.change_note
            )
            if error:
                result.skipped_sections.append(BulkUpdateFailure(section_id=section_id, reason=error))
            else:
                result.updated_sections.append(_copy(section))
        _annotate(updated=len(result.updated_sections), skipped=len(result.skipped_sections))
        logger.info(
            "Bulk section owner update finished",
            extra={"extra_fields": {"updated": len(result.updated_sections), "skipped": len(result.skipped_sections)}}
        )
        return result

    # Data points

    @store_operation("get_data_points")
    def get_data_points(
        self,
        section_id: Optional[str] = None,
        assigned_user_id: Optional[str] = None
    ) -> List[DataPoint]:
        """Data points, optionally by section and by owner or contributor."""
        return _copies(
            dp for dp in self._data_points.values()
            if (section_id is None or dp.section_id == section_id)
            and dp_rules.is_assigned(dp, assigned_user_id)
        )

    @store_operation("get_data_point")
    def get_data_point(self, data_point_id: str) -> Optional[DataPoint]:
        return _copy(self._data_points.get(data_point_id))

    @store_operation("get_data_points_for_period")
    def get_data_points_for_period(self, period_id: str) -> List[DataPoint]:
        section_ids = {s.id for s in self._sections_of(period_id)}
        return _copies(dp for dp in self._data_points.values() if dp.section_id in section_ids)

    @store_operation("create_data_point")
    def create_data_point(self, request: CreateDataPointRequest) -> OperationResult:
        """
        Add a data point to a section.

        Field validation, completeness resolution and the section's active
        validation rules all run before anything is stored.

        Args:
            request: Data point fields

        Returns:
            OperationResult with the stored DataPoint
        """
        error = dp_rules.validate_data_point_fields(
            request, self._users,
            require_owner=self.settings.require_data_point_owner,
            section_id=request.section_id
        )
        if error:
            return _reject("Data point creation", error, section_id=request.section_id)
        if self._find_section(request.section_id) is None:
            return _reject(
                "Data point creation",
                f"Section with ID '{request.section_id}' not found.",
                section_id=request.section_id
            )

        review_status = match_enum(ReviewStatus, request.review_status) or ReviewStatus.DRAFT
        candidate = DataPoint(
            section_id=request.section_id,
            type=request.type,
            classification=request.classification,
            title=request.title,
            content=request.content,
            value=request.value,
            unit=request.unit,
            owner_id=request.owner_id,
            contributor_ids=list(request.contributor_ids),
            source=request.source,
            information_type=match_enum(InformationType, request.information_type),
            assumptions=request.assumptions,
            completeness_status=CompletenessStatus.INCOMPLETE,
            review_status=review_status,
            deadline=request.deadline,
            is_blocked=request.is_blocked,
            blocker_reason=request.blocker_reason if request.is_blocked else None,
            blocker_due_date=request.blocker_due_date if request.is_blocked else None
        )
        status, error = dp_rules.resolve_completeness(request.completeness_status, candidate, self._users)
        if error:
            return _reject("Data point creation", error, section_id=request.section_id)
        candidate.completeness_status = status

        outcome = self._rule_outcome(candidate)
        if not outcome.is_valid:
            return _reject("Data point creation", outcome.error_message, rule_id=outcome.rule_id)

        self._data_points[candidate.id] = candidate
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.DATA_POINT, candidate.id,
            creation_changes(candidate.model_dump(), dp_rules.AUDITED_FIELDS)
        )
        self._notify(build_ownership_notifications(
            EntityType.DATA_POINT.value, candidate.id, candidate.title,
            "", candidate.owner_id, self._users.get(request.created_by), request.created_by
        ))
        _annotate(data_point_id=candidate.id, section_id=candidate.section_id)
        logger.info(
            "Data point created",
            extra={"extra_fields": {
                "data_point_id": candidate.id,
                "section_id": candidate.section_id,
                "completeness_status": candidate.completeness_status
            }}
        )
        return OperationResult.ok(_copy(candidate))

    @store_operation("update_data_point")
    def update_data_point(self, data_point_id: str, request: UpdateDataPointRequest) -> OperationResult:
        """
        Replace a data point's editable fields.

        Approved data points only accept requests whose sole difference is
        the review status. Evidence links are kept; the deadline is kept when
        the request leaves it out.
        """
        current = self._data_points.get(data_point_id)
        if current is None:
            return _reject("Data point update", "DataPoint not found.", data_point_id=data_point_id)

        error = dp_rules.validate_data_point_fields(request, self._users)
        if error:
            if current.is_approved():
                return _reject("Data point update", dp_rules.APPROVED_READ_ONLY, data_point_id=data_point_id)
            return _reject("Data point update", error, data_point_id=data_point_id)

        review_status = match_enum(ReviewStatus, request.review_status)
        candidate = current.model_copy(deep=True)
        candidate.type = request.type
        candidate.classification = request.classification
        candidate.title = request.title
        candidate.content = request.content
        candidate.value = request.value
        candidate.unit = request.unit
        candidate.owner_id = request.owner_id
        candidate.contributor_ids = list(request.contributor_ids)
        candidate.source = request.source
        candidate.information_type = match_enum(InformationType, request.information_type)
        candidate.assumptions = request.assumptions
        if review_status is not None:
            candidate.review_status = review_status
        if request.deadline is not None:
            candidate.deadline = request.deadline
        candidate.is_blocked = request.is_blocked
        candidate.blocker_reason = request.blocker_reason if request.is_blocked else None
        candidate.blocker_due_date = request.blocker_due_date if request.is_blocked else None

        status, error = dp_rules.resolve_completeness(request.completeness_status, candidate, self._users)
        if error:
            if current.is_approved():
                return _reject("Data point update", dp_rules.APPROVED_READ_ONLY, data_point_id=data_point_id)
            return _reject("Data point update", error, data_point_id=data_point_id)
        candidate.completeness_status = status

        if current.is_approved() and dp_rules.changes_frozen_fields(current, candidate):
            return _reject("Data point update", dp_rules.APPROVED_READ_ONLY, data_point_id=data_point_id)

        outcome = self._rule_outcome(candidate)
        if not outcome.is_valid:
            return _reject("Data point update", outcome.error_message, rule_id=outcome.rule_id)

        changes = calculate_changes(current.model_dump(), candidate.model_dump(), dp_rules.AUDITED_FIELDS)
        if not changes:
            return OperationResult.ok(_copy(current))

        candidate.updated_at = utc_now()
        self._data_points[data_point_id] = candidate
        self._audit_action(
            request.updated_by, AuditAction.UPDATE, EntityType.DATA_POINT, data_point_id,
            changes, change_note=request.change_note
        )
        if current.owner_id != candidate.owner_id:
            self._notify(build_ownership_notifications(
                EntityType.DATA_POINT.value, candidate.id, candidate.title,
                current.owner_id, candidate.owner_id, self._users.get(request.updated_by), request.updated_by
            ))
        _annotate(data_point_id=data_point_id, changes=len(changes))
        logger.info("Data point updated", extra={"extra_fields": {"data_point_id": data_point_id, "changes_count": len(changes)}})
        return OperationResult.ok(_copy(candidate))

    @store_operation("delete_data_point")
    def delete_data_point(self, data_point_id: str, deleted_by: str = "") -> OperationResult:
        """Delete a data point, its notes and its evidence links."""
        data_point = self._data_points.get(data_point_id)
        if data_point is None:
            return _reject("Data point deletion", "DataPoint not found.", data_point_id=data_point_id)

        for evidence in self._evidence.values():
            if data_point_id in evidence.linked_data_point_ids:
                evidence.linked_data_point_ids = [
                    linked for linked in evidence.linked_data_point_ids if linked != data_point_id
                ]
        self._notes = [note for note in self._notes if note.data_point_id != data_point_id]
        del self._data_points[data_point_id]

        self._audit_action(
            deleted_by, AuditAction.DELETE, EntityType.DATA_POINT, data_point_id,
            calculate_changes(data_point.model_dump(), {}, (("title", "Title"), ("section_id", "SectionId")))
        )
        logger.info("Data point deleted", extra={"extra_fields": {"data_point_id": data_point_id}})
        return OperationResult.ok(_copy(data_point))

    def _review(self, data_point_id: str, reviewed_by: str, action: str) -> Tuple[Optional[DataPoint], Optional[str]]:
        data_point = self._data_points.get(data_point_id)
        if data_point is None:
            return None, "DataPoint not found."
        if data_point.review_status != ReviewStatus.READY_FOR_REVIEW.value:
            return None, f"Data point must be in 'ready-for-review' status to {action}."
        if _blank(reviewed_by) or reviewed_by not in self._users:
            return None, f"Reviewer with ID '{reviewed_by}' not found."
        return data_point, None

    def _apply_review(self, data_point: DataPoint, status: ReviewStatus, reviewed_by: str,
                      comments: Optional[str], action: AuditAction) -> DataPoint:
        before = data_point.model_dump()
        data_point.review_status = status
        data_point.reviewed_by = reviewed_by
        data_point.reviewed_at = utc_now()
        data_point.review_comments = comments
        data_point.updated_at = utc_now()
        self._audit_action(
            reviewed_by, action, EntityType.DATA_POINT, data_point.id,
            calculate_changes(before, data_point.model_dump(), (
                ("review_status", "ReviewStatus"),
                ("reviewed_by", "ReviewedBy"),
                ("review_comments", "ReviewComments"),
            )),
            change_note=comments
        )
        logger.info(
            "Data point reviewed",
            extra={"extra_fields": {"data_point_id": data_point.id, "review_status": data_point.review_status}}
        )
        return data_point

    @store_operation("approve_data_point")
    def approve_data_point(self, data_point_id: str, request: ApproveDataPointRequest) -> OperationResult:
        """Approve a data point that is ready for review."""
        data_point, error = self._review(data_point_id, request.reviewed_by, "be approved")
        if error:
            return _reject("Data point approval", error, data_point_id=data_point_id)
        approved = self._apply_review(
            data_point, ReviewStatus.APPROVED, request.reviewed_by, request.review_comments, AuditAction.APPROVE
        )
        return OperationResult.ok(_copy(approved))

    @store_operation("request_changes")
    def request_changes(self, data_point_id: str, request: RequestChangesRequest) -> OperationResult:
        """Send a data point that is ready for review back with comments."""
        data_point, error = self._review(data_point_id, request.reviewed_by, "request changes")
        if error:
            return _reject("Change request", error, data_point_id=data_point_id)
        if _blank(request.review_comments):
            return _reject(
                "Change request", "Review comments are required when requesting changes.",
                data_point_id=data_point_id
            )
        updated = self._apply_review(
            data_point, ReviewStatus.CHANGES_REQUESTED, request.reviewed_by,
            request.review_comments, AuditAction.REQUEST_CHANGES
        )
        return OperationResult.ok(_copy(updated))

    @store_operation("update_data_point_status")
    def update_data_point_status(self, data_point_id: str, request: UpdateDataPointStatusRequest) -> StatusUpdateResult:
        """
        Explicitly move a data point to a completeness status.

        Moving to ``complete`` reports every missing field at once instead of
        stopping at the first one.
        """
        data_point = self._data_points.get(data_point_id)
        if data_point is None:
            return StatusUpdateResult(success=False, error_message="DataPoint not found.")

        status = match_enum(CompletenessStatus, request.completeness_status)
        if status is None:
            return StatusUpdateResult(
                success=False,
                error_message=f"CompletenessStatus must be one of: {', '.join(enum_values(CompletenessStatus))}."
            )

        if data_point.completeness_status == status.value:
            return StatusUpdateResult(success=True, data=_copy(data_point))

        if data_point.is_approved():
            return StatusUpdateResult(success=False, error_message=dp_rules.APPROVED_READ_ONLY)

        if status == CompletenessStatus.COMPLETE:
            gaps = dp_rules.completion_gaps(data_point, self._users)
            if gaps:
                logger.info(
                    "Data point completion blocked",
                    extra={"extra_fields": {"data_point_id": data_point_id, "missing_fields": [gap.field for gap in gaps]}}
                )
                return StatusUpdateResult(
                    success=False,
                    error_message=dp_rules.COMPLETE_BLOCKED,
                    validation_error=StatusValidationError(message=dp_rules.COMPLETE_BLOCKED, missing_fields=gaps)
                )

        before = data_point.model_dump()
        data_point.completeness_status = status
        data_point.updated_at = utc_now()
        self._audit_action(
            request.updated_by, AuditAction.UPDATE_STATUS, EntityType.DATA_POINT, data_point_id,
            calculate_changes(before, data_point.model_dump(), (("completeness_status", "CompletenessStatus"),)),
            change_note=request.change_note
        )
        logger.info(
            "Data point status updated",
            extra={"extra_fields": {"data_point_id": data_point_id, "completeness_status": status.value}}
        )
        return StatusUpdateResult(success=True, data=_copy(data_point))

    @store_operation("add_data_point_note")
    def add_data_point_note(self, data_point_id: str, request: CreateDataPointNoteRequest) -> OperationResult:
        """Attach an internal note to a data point."""
        if data_point_id not in self._data_points:
            return _reject("Data point note", "DataPoint not found.", data_point_id=data_point_id)
        if _blank(request.content):
            return _reject("Data point note", "Content is required.", data_point_id=data_point_id)
        if _blank(request.created_by):
            return _reject("Data point note", "CreatedBy is required.", data_point_id=data_point_id)

        _, author_name = self._actor(request.created_by)
        note = DataPointNote(
            data_point_id=data_point_id,
            content=request.content.strip(),
            created_by=request.created_by,
            created_by_name=author_name
        )
        self._notes.append(note)
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.DATA_POINT_NOTE, note.id,
            creation_changes(note.model_dump(), (("data_point_id", "DataPointId"), ("content", "Content")))
        )
        return OperationResult.ok(_copy(note))

    @store_operation("get_data_point_notes")
    def get_data_point_notes(self, data_point_id: str) -> List[DataPointNote]:
        return _copies(note for note in self._notes if note.data_point_id == data_point_id)

    # Validation rules

    def _validate_rule_type(self, rule_type: str) -> Optional[str]:
        if _blank(rule_type):
            return "RuleType is required."
        if match_enum(RuleType, rule_type) is None:
            return f"RuleType must be one of: {', '.join(enum_values(RuleType))}."
        return None

    @store_operation("create_validation_rule")
    def create_validation_rule(self, request: CreateValidationRuleRequest) -> OperationResult:
        """Add a rule to a section; it applies to the section's next data point change."""
        if _blank(request.section_id):
            return _reject("Validation rule creation", "SectionId is required.")
        error = self._validate_rule_type(request.rule_type)
        if error:
            return _reject("Validation rule creation", error, section_id=request.section_id)
        if _blank(request.error_message):
            return _reject("Validation rule creation", "ErrorMessage is required.", section_id=request.section_id)
        if _blank(request.created_by):
            return _reject("Validation rule creation", "CreatedBy is required.", section_id=request.section_id)
        if self._find_section(request.section_id) is None:
            return _reject(
                "Validation rule creation",
                f"Section with ID '{request.section_id}' not found.",
                section_id=request.section_id
            )

        rule = ValidationRule(
            section_id=request.section_id,
            rule_type=match_enum(RuleType, request.rule_type).value,
            target_field=request.target_field,
            parameters=request.parameters,
            error_message=request.error_message,
            created_by=request.created_by
        )
        self._rules.append(rule)
        self._audit_action(
            request.created_by, AuditAction.CREATE, EntityType.VALIDATION_RULE, rule.id,
            creation_changes(rule.model_dump(), RULE_FIELDS)
        )
        _annotate(rule_id=rule.id, rule_type=rule.rule_type)
        logger.info(
            "Validation rule created",
            extra={"extra_fields": {"rule_id": rule.id, "section_id": rule.section_id, "rule_type": rule.rule_type}}
        )
        return OperationResult.ok(_copy(rule))

    @store_operation("update_validation_rule")
    def update_validation_rule(self, rule_id: str, request: UpdateValidationRuleRequest) -> OperationResult:
        index = next((i for i, rule in enumerate(self._rules) if rule.id == rule_id), None)
        if index is None:
            return _reject("Validation rule update", "ValidationRule not found.", rule_id=rule_id)
        error = self._validate_rule_type(request.rule_type)
        if error:
            return _reject("Validation rule update", error, rule_id=rule_id)
        if _blank(request.error_message):
            return _reject("Validation rule update", "ErrorMessage is required.", rule_id=rule_id)

        current = self._rules[index]
        candidate = current.model_copy(update={
            "rule_type": match_enum(RuleType, request.rule_type).value,
            "target_field": request.target_field,
            "parameters": request.parameters,
            "error_message": request.error_message,
            "is_active": request.is_active
        })
        changes = calculate_changes(current.model_dump(), candidate.model_dump(), RULE_FIELDS)
        if changes:
            self._rules[index] = candidate
            self._audit_action(
                request.updated_by, AuditAction.UPDATE, EntityType.VALIDATION_RULE, rule_id, changes
            )
        return OperationResult.ok(_copy(self._rules[index]))

    @store_operation("delete_validation_rule")
    def delete_validation_rule(self, rule_id: str, deleted_by: str = "") -> OperationResult:
        rule = next((rule for rule in self._rules if rule.id == rule_id), None)
        if rule is None:
            return _reject("Validation rule deletion", "ValidationRule not found.", rule_id=rule_id)
        self._rules = [r for r in self._rules if r.id != rule_id]
        self._audit_action(
            deleted_by, AuditAction.DELETE, EntityType.VALIDATION_RULE, rule_id,
            calculate_changes(rule.model_dump(), {}, RULE_FIELDS)
        )
        return OperationResult.ok(_copy(rule))

    @store_operation("get_validation_rules")
    def get_validation_rules(self, section_id: Optional[str] = None, active_only: bool = False) -> List[ValidationRule]:
        return _copies(
            rule for rule in self._rules
            if (section_id is None or rule.section_id == section_id)
            and (not active_only or rule.is_active)
        )

    @store_operation("get_validation_rule")
    def get_validation_rule(self, rule_id: str) -> Optional[ValidationRule]:
        return _copy(next((rule for rule in self._rules if rule.id == rule_id), None))

    # Evidence

    @store_operation("create_evidence")
    def create_evidence(self, request: CreateEvidenceRequest) -> OperationResult:
        """Register a file reference or source URL as evidence for a section."""
        error = validate_evidence_fields(request)
        if error:
            return _reject("Evidence creation", error, section_id=request.section_id)
        if self._find_section(request.section_id) is None:
            return _reject(
                "Evidence creation",
                f"Section with ID '{request.section_id}' not found.",
                section_id=request.section_id
            )

        evidence = Evidence(
            section_id=request.section_id,
            title=request.title.strip(),
            description=request.description,
            file_name=request.file_name,
            file_url=request.file_url,
            source_url=request.source_url.strip() if request.source_url else None,
            uploaded_by=request.uploaded_by
        )
        self._evidence[evidence.id] = evidence
        self._audit_action(
            request.uploaded_by, AuditAction.CREATE, EntityType.EVIDENCE, evidence.id,
            creation_changes(evidence.model_dump(), EVIDENCE_FIELDS)
        )
        _annotate(evidence_id=evidence.id, section_id=evidence.section_id)
        logger.info("Evidence created", extra={"extra_fields": {"evidence_id": evidence.id, "section_id": evidence.section_id}})
        return OperationResult.ok(_copy(evidence))

    @store_operation("get_evidence")
    def get_evidence(self, section_id: Optional[str] = None) -> List[Evidence]:
        return _copies(e for e in self._evidence.values() if section_id is None or e.section_id == section_id)

    @store_operation("get_evidence_by_id")
    def get_evidence_by_id(self, evidence_id: str) -> Optional[Evidence]:
        return _copy(self._evidence.get(evidence_id))

    @store_operation("delete_evidence")
    def delete_evidence(self, evidence_id: str, deleted_by: str = "") -> OperationResult:
        """
        Delete evidence and remove it from every linked data point.

        Complete data points left without evidence fall back to incomplete;
        the audit entry's note lists them.
        """
        evidence = self._evidence.get(evidence_id)
        if evidence is None:
            return _reject("Evidence deletion", f"Evidence with ID '{evidence_id}' not found.", evidence_id=evidence_id)

        reverted = []
        for data_point_id in evidence.linked_data_point_ids:
            data_point = self._data_points.get(data_point_id)
            if data_point is not None and self._drop_evidence_link(data_point, evidence_id):
                reverted.append(data_point_id)
        del self._evidence[evidence_id]

        self._audit_action(
            deleted_by, AuditAction.DELETE, EntityType.EVIDENCE, evidence_id,
            calculate_changes(
                evidence.model_dump(), {},
                (("title", "Title"), ("linked_data_point_ids", "LinkedDataPointIds"))
            ),
            change_note=f"Reverted to incomplete: {', '.join(reverted)}" if reverted else None
        )
        logger.info(
            "Evidence deleted",
            extra={"extra_fields": {
                "evidence_id": evidence_id,
                "unlinked_data_points": len(evidence.linked_data_point_ids),
                "reverted_data_points": len(reverted)
            }}
        )
        return OperationResult.ok(_copy(evidence))

    def _resolve_link(self, evidence_id: str, data_point_id: str):
        evidence = self._evidence.get(evidence_id)
        if evidence is None:
            return None, None, f"Evidence with ID '{evidence_id}' not found."
        data_point = self._data_points.get(data_point_id)
        if data_point is None:
            return None, None, f"DataPoint with ID '{data_point_id}' not found."
        return evidence, data_point, None

    @store_operation("link_evidence")
    def link_evidence(self, evidence_id: str, data_point_id: str, linked_by: str = "") -> OperationResult:
        """Link evidence and a data point in both directions."""
        evidence, data_point, error = self._resolve_link(evidence_id, data_point_id)
        if error:
            return _reject("Evidence link", error, evidence_id=evidence_id, data_point_id=data_point_id)
        if data_point_id in evidence.linked_data_point_ids:
            return _reject("Evidence link", "Evidence is already linked to this data point.", evidence_id=evidence_id)
        if evidence_id in data_point.evidence_ids:
            return _reject("Evidence link", "Data point already has this evidence linked.", evidence_id=evidence_id)

        before = data_point.model_dump()
        evidence.linked_data_point_ids = evidence.linked_data_point_ids + [data_point_id]
        data_point.evidence_ids = data_point.evidence_ids + [evidence_id]
        data_point.updated_at = utc_now()
        self._audit_action(
            linked_by, AuditAction.LINK_EVIDENCE, EntityType.DATA_POINT, data_point_id,
            calculate_changes(before, data_point.model_dump(), (("evidence_ids", "EvidenceIds"),))
        )
        logger.info("Evidence linked", extra={"extra_fields": {"evidence_id": evidence_id, "data_point_id": data_point_id}})
        return OperationResult.ok(_copy(evidence))

    @store_operation("unlink_evidence")
    def unlink_evidence(self, evidence_id: str, data_point_id: str, unlinked_by: str = "") -> OperationResult:
        """Remove the link in both directions."""
        evidence, data_point, error = self._resolve_link(evidence_id, data_point_id)
        if error:
            return _reject("Evidence unlink", error, evidence_id=evidence_id, data_point_id=data_point_id)
        if data_point_id not in evidence.linked_data_point_ids and evidence_id not in data_point.evidence_ids:
            return _reject("Evidence unlink", "Evidence is not linked to this data point.", evidence_id=evidence_id)

        before = data_point.model_dump()
        evidence.linked_data_point_ids = [d for d in evidence.linked_data_point_ids if d != data_point_id]
        self._drop_evidence_link(data_point, evidence_id)
        self._audit_action(
            unlinked_by, AuditAction.UNLINK_EVIDENCE, EntityType.DATA_POINT, data_point_id,
            calculate_changes(before, data_point.model_dump(), (
                ("evidence_ids", "EvidenceIds"),
                ("completeness_status", "CompletenessStatus"),
            ))
        )
        logger.info("Evidence unlinked", extra={"extra_fields": {"evidence_id": evidence_id, "data_point_id": data_point_id}})
        return OperationResult.ok(_copy(evidence))

    # Audit trail

    @store_operation("get_audit_log")
    def get_audit_log(self, filters: Optional[AuditLogFilters] = None) -> List[Any]:
        """Audit entries matching the filters, newest first."""
        return _copies(self._audit.query(AuditFilters.from_request(filters)))

    # Derived aggregations

    @store_operation("get_completeness_stats")
    def get_completeness_stats(
        self,
        period_id: Optional[str] = None,
        category: Optional[str] = None,
        organizational_unit_id: Optional[str] = None
    ) -> CompletenessStats:
        """Completeness overall, per category and per owner."""
        return aggregations.completeness_stats(
            self._sections_of(period_id),
            list(self._data_points.values()),
            self._users,
            category=category,
            owner_id=organizational_unit_id
        )

    @store_operation("get_responsibility_matrix")
    def get_responsibility_matrix(
        self,
        period_id: Optional[str] = None,
        owner_filter: Optional[str] = None
    ) -> ResponsibilityMatrix:
        return aggregations.responsibility_matrix(
            self._sections_of(period_id),
            list(self._data_points.values()),
            self._users,
            period_id=period_id,
            owner_filter=owner_filter
        )

    # Reminders

    @store_operation("get_reminder_configuration")
    def get_reminder_configuration(self, period_id: str) -> Optional[ReminderConfiguration]:
        return _copy(self._reminder_configs.get(period_id))

    @store_operation("create_or_update_reminder_configuration")
    def create_or_update_reminder_configuration(
        self,
        period_id: str,
        request: ReminderConfigurationRequest
    ) -> OperationResult:
        """
        Replace the reminder configuration of a period.

        The stored record is swapped for a fresh one rather than mutated.
        """
        if self._find_period(period_id) is None:
            return _reject("Reminder configuration", "Reporting period not found.", period_id=period_id)
        if any(days < 0 for days in request.days_before_deadline):
            return _reject("Reminder configuration", "Days before deadline must be non-negative.", period_id=period_id)
        if request.check_frequency_hours < 1:
            return _reject("Reminder configuration", "Check frequency must be at least 1 hour.", period_id=period_id)

        existing = self._reminder_configs.get(period_id)
        thresholds = sorted(set(request.days_before_deadline), reverse=True)
        config = ReminderConfiguration(
            period_id=period_id,
            enabled=request.enabled,
            days_before_deadline=thresholds,
            check_frequency_hours=request.check_frequency_hours
        )
        if existing is not None:
            config = config.model_copy(update={"id": existing.id, "created_at": existing.created_at})
        self._reminder_configs[period_id] = config

        changes = calculate_changes(
            existing.model_dump() if existing is not None else {}, config.model_dump(), REMINDER_FIELDS
        )
        if changes:
            self._audit_action(
                request.updated_by,
                AuditAction.UPDATE if existing is not None else AuditAction.CREATE,
                EntityType.REMINDER_CONFIGURATION,
                config.id,
                changes
            )
        return OperationResult.ok(_copy(config))

    @store_operation("record_reminder_sent")
    def record_reminder_sent(self, history: ReminderHistory) -> ReminderHistory:
        self._reminder_history.append(_copy(history))
        logger.info(
            "Reminder recorded",
            extra={"extra_fields": {
                "data_point_id": history.data_point_id,
                "recipient_user_id": history.recipient_user_id,
                "days_until_deadline": history.days_until_deadline,
                "email_sent": history.email_sent
            }}
        )
        return _copy(history)

    @store_operation("has_reminder_been_sent_today")
    def has_reminder_been_sent_today(self, data_point_id: str, days_until_deadline: int) -> bool:
        """True when a reminder for this data point and threshold was sent today (UTC)."""
        today = utc_now().date()
        for record in self._reminder_history:
            sent_at = record.sent_at
            if sent_at.tzinfo is not None:
                sent_at = sent_at.astimezone(timezone.utc)
            if (
                record.data_point_id == data_point_id
                and record.days_until_deadline == days_until_deadline
                and sent_at.date() == today
            ):
                return True
        return False

    @store_operation("get_reminder_history")
    def get_reminder_history(
        self,
        data_point_id: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> List[ReminderHistory]:
        records = [
            record for record in self._reminder_history
            if (data_point_id is None or record.data_point_id == data_point_id)
            and (user_id is None or record.recipient_user_id == user_id)
        ]
        records.sort(key=lambda record: record.sent_at, reverse=True)
        return _copies(records)

    # Notifications

    @store_operation("record_notification")
    def record_notification(self, notification: OwnerNotification) -> OwnerNotification:
        self._notify([_copy(notification)])
        return _copy(notification)

    @store_operation("get_notifications")
    def get_notifications(self, user_id: str, unread_only: bool = False) -> List[OwnerNotification]:
        """Inbox of one recipient, newest first."""
        indexed = [
            (position, n) for position, n in enumerate(self._notifications)
            if n.recipient_user_id == user_id and (not unread_only or not n.is_read)
        ]
        indexed.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return _copies(n for _, n in indexed)

    @store_operation("mark_notification_as_read")
    def mark_notification_as_read(self, notification_id: str) -> bool:
        notification = next((n for n in self._notifications if n.id == notification_id), None)
        if notification is None:
            return False
        notification.is_read = True
        return True
