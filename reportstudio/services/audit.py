# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Append-only audit trail with OpenTelemetry correlation.

The trail is not synchronized on its own; the owning store calls it while
holding its lock.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from opentelemetry import trace

from ..models.entities import AuditLogEntry, FieldChange

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive bounds as UTC so they compare with entry timestamps."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuditFilters:
    """Filters for audit log queries."""

    def __init__(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.user_id = user_id
        self.start_date = _as_utc(start_date)
        self.end_date = _as_utc(end_date)

    @classmethod
    def from_request(cls, request) -> "AuditFilters":
        """Build filters from an AuditLogFilters request model."""
        if request is None:
            return cls()
        return cls(
            entity_type=request.entity_type,
            entity_id=request.entity_id,
            user_id=request.user_id,
            start_date=request.start_date,
            end_date=request.end_date
        )

    def matches(self, entry: AuditLogEntry) -> bool:
        """Check an entry against every populated filter."""
        if self.entity_type and entry.entity_type.lower() != self.entity_type.lower():
            return False

        if self.entity_id and entry.entity_id != self.entity_id:
            return False

        if self.user_id and entry.user_id != self.user_id:
            return False

        # Date range filter
        if self.start_date and entry.timestamp < self.start_date:
            return False
        if self.end_date and entry.timestamp > self.end_date:
            return False

        return True


def render_value(value: Any) -> str:
    """Render a field value the way it is stored in a change record."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(render_value(item) for item in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def calculate_changes(
    before: Dict[str, Any],
    after: Dict[str, Any],
    fields: Iterable[Tuple[str, str]]
) -> List[FieldChange]:
    """
    Calculate field-level changes for detailed audit trail.

    Args:
        before: State before the change
        after: State after the change
        fields: (key, audit field name) pairs, in the order to report them

    Returns:
        List[FieldChange]: Changed fields only
    """
    changes = []

    for key, field_name in fields:
        old_value = before.get(key)
        new_value = after.get(key)

        if render_value(old_value) != render_value(new_value):
            changes.append(FieldChange(
                field=field_name,
                old_value=render_value(old_value),
                new_value=render_value(new_value)
            ))

    return changes


def creation_changes(after: Dict[str, Any], fields: Iterable[Tuple[str, str]]) -> List[FieldChange]:
    """Changes describing a newly created entity; empty fields are left out."""
    return calculate_changes({}, after, fields)


class AuditTrail:
    """Append-only ledger of audit entries."""

    def __init__(self):
        """Initialize an empty trail."""
        self._entries: List[AuditLogEntry] = []
        logger.info("Audit trail initialized")

    def __len__(self) -> int:
        return len(self._entries)

    def log_action(
        self,
        user_id: str,
        user_name: str,
        action: str,
        entity_type: str,
        entity_id: str,
        changes: List[FieldChange],
        change_note: Optional[str] = None
    ) -> AuditLogEntry:
        """
        Append an audit trail entry with trace correlation and structured logging.

        Args:
            user_id: ID of user performing the action
            user_name: Display name of that user
            action: Action being performed
            entity_type: Type of entity being acted upon
            entity_id: ID of the specific entity
            changes: Ordered field deltas
            change_note: Optional free-text note

        Returns:
            AuditLogEntry: The appended entry
        """
        with tracer.start_as_current_span("audit.log_action") as span:
            entry = AuditLogEntry(
                user_id=user_id,
                user_name=user_name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                change_note=change_note,
                changes=list(changes)
            )

            span.set_attributes({
                "audit.entity_type": entity_type,
                "audit.action": action,
                "audit.user_id": user_id,
                "audit.entity_id": entity_id,
                "audit.changes_count": len(entry.changes)
            })

            self._entries.append(entry)

            span_context = span.get_span_context()
            logger.info(
                "Audit trail entry created",
                extra={"extra_fields": {
                    "audit_id": entry.id,
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "action": action,
                    "user_id": user_id,
                    "trace_id": format(span_context.trace_id, "032x") if span_context.is_valid else None,
                    "changes_count": len(entry.changes),
                    "audit_category": "business_action"
                }}
            )

            return entry

    def query(self, filters: Optional[AuditFilters] = None) -> List[AuditLogEntry]:
        """
        Query audit entries, newest first.

        Entries with equal timestamps are returned in reverse insertion order.

        Args:
            filters: Audit log filters (optional)

        Returns:
            List[AuditLogEntry]: Matching entries
        """
        with tracer.start_as_current_span("audit.query") as span:
            filters = filters or AuditFilters()
            indexed = [
                (position, entry) for position, entry in enumerate(self._entries)
                if filters.matches(entry)
            ]
            indexed.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)

            span.set_attribute("audit.query.results", len(indexed))
            logger.debug(
                "Audit trail queried",
                extra={"extra_fields": {"returned_items": len(indexed), "total_entries": len(self._entries)}}
            )

            return [entry for _, entry in indexed]
