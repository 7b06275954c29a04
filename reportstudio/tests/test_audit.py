# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the audit trail.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from reportstudio.models.entities import FieldChange
from reportstudio.models.enums import CompletenessStatus
from reportstudio.models.requests import AuditLogFilters, UpdateOrganizationalUnitRequest
from reportstudio.services.audit import AuditFilters, AuditTrail, calculate_changes, render_value

from .conftest import ADMIN_ID, OWNER_ID


class TestRenderValue:
    """Test how values are written into change records."""

    def test_scalars(self):
        assert render_value(None) == ""
        assert render_value(True) == "true"
        assert render_value(False) == "false"
        assert render_value(12) == "12"
        assert render_value(CompletenessStatus.NOT_APPLICABLE) == "not applicable"

    def test_lists_are_joined(self):
        assert render_value(["user-3", "user-4"]) == "user-3, user-4"
        assert render_value([]) == ""

    def test_datetimes_use_iso_format(self):
        moment = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert render_value(moment) == "2024-05-01T12:00:00+00:00"


class TestCalculateChanges:
    """Test field delta calculation."""

    def test_only_changed_fields_in_given_order(self):
        changes = calculate_changes(
            {"name": "HQ", "description": "Main", "parent_id": None},
            {"name": "Head Office", "description": "Main", "parent_id": "u-1"},
            (("parent_id", "ParentId"), ("name", "Name"), ("description", "Description"))
        )
        assert changes == [
            FieldChange(field="ParentId", old_value="", new_value="u-1"),
            FieldChange(field="Name", old_value="HQ", new_value="Head Office"),
        ]

    def test_none_and_empty_are_equivalent(self):
        assert calculate_changes({"value": None}, {"value": ""}, (("value", "Value"),)) == []


class TestAuditTrail:
    """Test the append-only ledger."""

    def setup_method(self):
        self.trail = AuditTrail()

    def _log(self, entity_type="DataPoint", entity_id="dp-1", user_id=OWNER_ID):
        return self.trail.log_action(
            user_id=user_id,
            user_name="Sarah Chen",
            action="update",
            entity_type=entity_type,
            entity_id=entity_id,
            changes=[FieldChange(field="Title", old_value="a", new_value="b")]
        )

    def test_entries_are_immutable(self):
        entry = self._log()
        with pytest.raises(ValidationError):
            entry.action = "delete"

    def test_newest_first_with_insertion_tiebreak(self):
        first = self._log(entity_id="dp-1")
        second = self._log(entity_id="dp-2")
        third = self._log(entity_id="dp-3")
        assert [e.id for e in self.trail.query()] == [third.id, second.id, first.id]

    def test_filters(self):
        self._log(entity_type="DataPoint", entity_id="dp-1")
        self._log(entity_type="Evidence", entity_id="ev-1", user_id=ADMIN_ID)

        assert len(self.trail.query(AuditFilters(entity_type="datapoint"))) == 1
        assert len(self.trail.query(AuditFilters(entity_id="ev-1"))) == 1
        assert len(self.trail.query(AuditFilters(user_id=ADMIN_ID))) == 1
        assert len(self.trail) == 2

    def test_date_range_accepts_naive_bounds(self):
        self._log()
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        assert len(self.trail.query(AuditFilters(start_date=now - timedelta(minutes=1)))) == 1
        assert self.trail.query(AuditFilters(end_date=now - timedelta(minutes=1))) == []


class TestStoreAuditLog:
    """Test the audit log as written by store operations."""

    def test_one_entry_per_mutation(self, store, unit):
        before = len(store.get_audit_log())
        store.update_organizational_unit(unit.id, UpdateOrganizationalUnitRequest(
            name="Head Office", description="Group headquarters", updated_by=ADMIN_ID
        ))
        log = store.get_audit_log()
        assert len(log) == before + 1
        assert [c.field for c in log[0].changes] == ["Name", "Description"]

    def test_unknown_actor(self, store, unit):
        store.update_organizational_unit(unit.id, UpdateOrganizationalUnitRequest(name="Head Office"))
        entry = store.get_audit_log()[0]
        assert entry.user_id == "unknown"
        assert entry.user_name == "Unknown User"

    def test_returned_entries_do_not_alter_history(self, store, unit):
        store.update_organizational_unit(unit.id, UpdateOrganizationalUnitRequest(
            name="Head Office", updated_by=ADMIN_ID
        ))
        entry = store.get_audit_log()[0]
        entry.changes.clear()

        stored = store.get_audit_log()[0]
        assert stored.id == entry.id
        assert [c.field for c in stored.changes] == ["Name"]

    def test_filter_request(self, store, period, data_point):
        entries = store.get_audit_log(AuditLogFilters(entity_type="ReportingPeriod"))
        assert [e.entity_id for e in entries] == [period.id]

        entries = store.get_audit_log(AuditLogFilters(entity_id=data_point.id, user_id=OWNER_ID))
        assert len(entries) == 1

    def test_failed_operations_leave_no_entry(self, store, unit):
        before = len(store.get_audit_log())
        store.update_organizational_unit(unit.id, UpdateOrganizationalUnitRequest(name=""))
        assert len(store.get_audit_log()) == before
