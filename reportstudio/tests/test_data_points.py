# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the data point lifecycle.

Covers field validation, completeness derivation, the review workflow and the
approved-state freeze.
"""

import pytest

from reportstudio.domain.data_points import (
    APPROVED_READ_ONLY,
    COMPLETE_BLOCKED,
    completion_gaps,
    derive_completeness,
    validate_data_point_fields
)
from reportstudio.models.requests import (
    ApproveDataPointRequest,
    CreateDataPointNoteRequest,
    RequestChangesRequest,
    UpdateDataPointStatusRequest
)
from reportstudio.models.entities import User
from reportstudio.services.store import SAMPLE_USERS

from .conftest import (
    ADMIN_ID,
    AUDITOR_ID,
    CONTRIBUTOR_ID,
    OWNER_ID,
    SECOND_CONTRIBUTOR_ID,
    update_request_from
)


@pytest.fixture
def users():
    return {
        user_id: User(id=user_id, name=name, email=email, role=role)
        for user_id, name, email, role in SAMPLE_USERS
    }


def _submit_for_review(store, data_point):
    result = store.update_data_point(data_point.id, update_request_from(data_point, review_status="ready-for-review"))
    assert result.success, result.error_message
    return result.data


class TestFieldValidation:
    """Test the ordered field checks."""

    @pytest.mark.parametrize("overrides,expected", [
        ({"title": " "}, "Title is required."),
        ({"content": ""}, "Content is required."),
        ({"owner_id": "ghost"}, "Owner with ID 'ghost' not found."),
        ({"contributor_ids": ["user-1"]}, "Owner cannot also be listed as a contributor."),
        ({"contributor_ids": ["ghost"]}, "Contributor with ID 'ghost' not found."),
        ({"source": ""}, "Source is required."),
        ({"information_type": ""}, "InformationType is required."),
        ({"information_type": "rumour"}, "InformationType must be one of: fact, estimate, declaration, plan."),
        ({"information_type": "estimate"}, "Assumptions field is required when InformationType is 'estimate'."),
        ({"is_blocked": True}, "BlockerReason is required when the data point is blocked."),
        ({"completeness_status": "done"},
         "CompletenessStatus must be one of: missing, incomplete, complete, not applicable."),
        ({"review_status": "published"},
         "ReviewStatus must be one of: draft, ready-for-review, approved, changes-requested."),
    ])
    def test_first_failure_wins(self, data_point_request, users, overrides, expected):
        request = data_point_request.model_copy(update=overrides)
        assert validate_data_point_fields(request, users, section_id=request.section_id) == expected

    def test_valid_request(self, data_point_request, users):
        assert validate_data_point_fields(data_point_request, users, section_id=data_point_request.section_id) is None

    def test_section_required_on_create(self, data_point_request, users):
        request = data_point_request.model_copy(update={"section_id": ""})
        assert validate_data_point_fields(request, users, section_id="") == "SectionId is required."

    def test_owner_optional_by_default(self, data_point_request, users):
        request = data_point_request.model_copy(update={"owner_id": ""})
        assert validate_data_point_fields(request, users) is None
        assert validate_data_point_fields(request, users, require_owner=True) == "OwnerId is required."

    def test_enum_values_are_case_insensitive(self, data_point_request, users):
        request = data_point_request.model_copy(update={"information_type": "Fact", "review_status": "DRAFT"})
        assert validate_data_point_fields(request, users) is None


class TestCompletenessDerivation:
    """Test auto-derived completeness."""

    def test_complete_requires_evidence_and_owner(self, users):
        fields = ("Title", "Content", "Source", "fact")
        assert derive_completeness(*fields, ["ev-1"], OWNER_ID, users) == "complete"
        assert derive_completeness(*fields, [], OWNER_ID, users) == "incomplete"
        assert derive_completeness(*fields, ["ev-1"], "", users) == "incomplete"
        assert derive_completeness(*fields, ["ev-1"], "ghost", users) == "incomplete"

    def test_never_derives_missing(self, users):
        assert derive_completeness("", "", "", "", [], "", users) == "incomplete"

    def test_completion_gaps_lists_every_field(self, data_point, users):
        bare = data_point.model_copy(update={"value": None, "owner_id": "", "deadline": None})
        assert [gap.field for gap in completion_gaps(bare, users)] == ["Value", "Owner", "Deadline", "Evidence"]


class TestCreateDataPoint:
    """Test data point creation through the store."""

    def test_create_derives_incomplete_without_evidence(self, store, data_point):
        assert data_point.completeness_status == "incomplete"
        assert data_point.review_status == "draft"
        assert store.get_data_point(data_point.id).title == "Scope 1 emissions"

    def test_create_is_audited(self, store, data_point):
        entry = store.get_audit_log()[0]
        assert entry.action == "create"
        assert entry.entity_type == "DataPoint"
        assert entry.user_name == "Sarah Chen"
        fields = [c.field for c in entry.changes]
        assert fields[:3] == ["Type", "Title", "Content"]
        assert "CompletenessStatus" in fields
        assert "IsBlocked" in fields

    def test_unknown_section(self, store, data_point_request):
        result = store.create_data_point(data_point_request.model_copy(update={"section_id": "missing"}))
        assert result.error_message == "Section with ID 'missing' not found."

    def test_explicit_complete_without_owner(self, store, data_point_request):
        result = store.create_data_point(data_point_request.model_copy(update={
            "owner_id": "", "completeness_status": "complete"
        }))
        assert result.error_message == "Cannot set completeness status to 'complete' without an assigned owner."

    def test_explicit_complete_without_evidence(self, store, data_point_request):
        result = store.create_data_point(data_point_request.model_copy(update={"completeness_status": "complete"}))
        assert result.error_message == COMPLETE_BLOCKED

    def test_explicit_status_is_kept(self, store, data_point_request):
        result = store.create_data_point(data_point_request.model_copy(update={
            "completeness_status": "Not Applicable"
        }))
        assert result.data.completeness_status == "not applicable"

    def test_strict_store_requires_owner(self, strict_store, data_point_request):
        result = strict_store.create_data_point(data_point_request.model_copy(update={"owner_id": ""}))
        assert result.error_message == "OwnerId is required."

    def test_blocker_fields_only_kept_when_blocked(self, store, data_point_request):
        result = store.create_data_point(data_point_request.model_copy(update={
            "blocker_reason": "Waiting for supplier", "is_blocked": False
        }))
        assert result.data.blocker_reason is None

    def test_new_owner_is_notified(self, store, data_point_request):
        store.create_data_point(data_point_request.model_copy(update={"created_by": ADMIN_ID}))
        notifications = store.get_notifications(OWNER_ID)
        assert len(notifications) == 1
        assert notifications[0].notification_type == "datapoint-assigned"
        assert notifications[0].changed_by_name == "Admin User"


class TestAssignmentQueries:
    """Test owner and contributor filtering."""

    def test_filter_by_assignment(self, store, data_point, section):
        assert [dp.id for dp in store.get_data_points(assigned_user_id=OWNER_ID)] == [data_point.id]
        assert [dp.id for dp in store.get_data_points(assigned_user_id=CONTRIBUTOR_ID)] == [data_point.id]
        assert store.get_data_points(assigned_user_id=SECOND_CONTRIBUTOR_ID) == []
        assert len(store.get_data_points(section_id=section.id)) == 1

    def test_data_points_for_period(self, store, data_point, period):
        assert [dp.id for dp in store.get_data_points_for_period(period.id)] == [data_point.id]
        assert store.get_data_points_for_period("missing") == []


class TestUpdateDataPoint:
    """Test full-replacement updates."""

    def test_update_records_only_changed_fields(self, store, data_point):
        result = store.update_data_point(data_point.id, update_request_from(
            data_point, value="1350", change_note="Corrected meter reading"
        ))
        assert result.success

        entry = store.get_audit_log()[0]
        assert entry.action == "update"
        assert entry.change_note == "Corrected meter reading"
        assert [(c.field, c.old_value, c.new_value) for c in entry.changes] == [("Value", "1200", "1350")]

    def test_noop_update_writes_no_audit_entry(self, store, data_point):
        before = len(store.get_audit_log())
        result = store.update_data_point(data_point.id, update_request_from(data_point))
        assert result.success
        assert len(store.get_audit_log()) == before

    def test_deadline_kept_when_omitted(self, store, data_point):
        result = store.update_data_point(data_point.id, update_request_from(data_point, title="Scope 1"))
        assert result.data.deadline == "2024-11-30"

    def test_evidence_links_survive_update(self, store, data_point, evidence):
        store.link_evidence(evidence.id, data_point.id, linked_by=OWNER_ID)
        result = store.update_data_point(data_point.id, update_request_from(data_point, title="Scope 1"))
        assert result.data.evidence_ids == [evidence.id]
        assert result.data.completeness_status == "complete"

    def test_clearing_block_drops_reason(self, store, data_point):
        blocked = store.update_data_point(data_point.id, update_request_from(
            data_point, is_blocked=True, blocker_reason="Supplier late", blocker_due_date="2024-10-01"
        )).data
        assert blocked.blocker_reason == "Supplier late"

        cleared = store.update_data_point(data_point.id, update_request_from(blocked, is_blocked=False)).data
        assert cleared.blocker_reason is None
        assert cleared.blocker_due_date is None

    def test_update_missing(self, store, data_point):
        result = store.update_data_point("missing", update_request_from(data_point))
        assert result.error_message == "DataPoint not found."

    def test_owner_change_notifies_both_owners(self, store, data_point):
        store.update_data_point(data_point.id, update_request_from(
            data_point, owner_id=SECOND_CONTRIBUTOR_ID, updated_by=ADMIN_ID
        ))
        removed = store.get_notifications(OWNER_ID)
        assigned = store.get_notifications(SECOND_CONTRIBUTOR_ID)
        assert removed[0].notification_type == "datapoint-removed"
        assert assigned[0].notification_type == "datapoint-assigned"

    def test_failed_update_leaves_state_untouched(self, store, data_point):
        result = store.update_data_point(data_point.id, update_request_from(data_point, source="", value="0"))
        assert not result.success
        assert store.get_data_point(data_point.id).value == "1200"


class TestReviewWorkflow:
    """Test approval, change requests and the approved freeze."""

    def test_approve_requires_ready_for_review(self, store, data_point):
        result = store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by=ADMIN_ID))
        assert result.error_message == "Data point must be in 'ready-for-review' status to be approved."

    def test_approve_requires_known_reviewer(self, store, data_point):
        _submit_for_review(store, data_point)
        result = store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by="ghost"))
        assert result.error_message == "Reviewer with ID 'ghost' not found."

    def test_approve(self, store, data_point):
        _submit_for_review(store, data_point)
        result = store.approve_data_point(data_point.id, ApproveDataPointRequest(
            reviewed_by=AUDITOR_ID, review_comments="Looks good"
        ))
        assert result.success
        assert result.data.review_status == "approved"
        assert result.data.reviewed_by == AUDITOR_ID
        assert result.data.reviewed_at is not None

        entry = store.get_audit_log()[0]
        assert entry.action == "approve"
        assert entry.changes[0].field == "ReviewStatus"
        assert entry.changes[0].new_value == "approved"

    def test_request_changes_requires_comments(self, store, data_point):
        _submit_for_review(store, data_point)
        result = store.request_changes(data_point.id, RequestChangesRequest(reviewed_by=AUDITOR_ID))
        assert result.error_message == "Review comments are required when requesting changes."

    def test_request_changes(self, store, data_point):
        _submit_for_review(store, data_point)
        result = store.request_changes(data_point.id, RequestChangesRequest(
            reviewed_by=AUDITOR_ID, review_comments="Add the methodology"
        ))
        assert result.data.review_status == "changes-requested"
        assert store.get_audit_log()[0].change_note == "Add the methodology"

    def test_resubmit_after_changes_requested(self, store, data_point):
        submitted = _submit_for_review(store, data_point)
        store.request_changes(data_point.id, RequestChangesRequest(reviewed_by=AUDITOR_ID, review_comments="Fix"))
        result = store.update_data_point(data_point.id, update_request_from(
            submitted, content="Direct emissions, methodology attached.", review_status="ready-for-review"
        ))
        assert result.success
        assert result.data.review_status == "ready-for-review"

    def test_approved_point_rejects_field_changes(self, store, data_point):
        _submit_for_review(store, data_point)
        approved = store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by=AUDITOR_ID)).data

        result = store.update_data_point(data_point.id, update_request_from(approved, value="999"))
        assert result.error_message == APPROVED_READ_ONLY
        assert store.get_data_point(data_point.id).value == "1200"

    def test_approved_point_rejects_invalid_requests_as_read_only(self, store, data_point):
        _submit_for_review(store, data_point)
        approved = store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by=AUDITOR_ID)).data
        result = store.update_data_point(data_point.id, update_request_from(approved, source=""))
        assert result.error_message == APPROVED_READ_ONLY

    def test_approved_point_accepts_review_status_only_change(self, store, data_point):
        _submit_for_review(store, data_point)
        approved = store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by=AUDITOR_ID)).data

        result = store.update_data_point(data_point.id, update_request_from(approved, review_status="draft"))
        assert result.success
        assert result.data.review_status == "draft"
        entry = store.get_audit_log()[0]
        assert [c.field for c in entry.changes] == ["ReviewStatus"]

    def test_approved_point_status_change_rejected(self, store, data_point):
        _submit_for_review(store, data_point)
        store.approve_data_point(data_point.id, ApproveDataPointRequest(reviewed_by=AUDITOR_ID))
        result = store.update_data_point_status(data_point.id, UpdateDataPointStatusRequest(
            completeness_status="not applicable"
        ))
        assert result.error_message == APPROVED_READ_ONLY


class TestCompletenessTransition:
    """Test explicit completeness status transitions."""

    def test_complete_reports_every_missing_field(self, store, data_point_request):
        created = store.create_data_point(data_point_request.model_copy(update={
            "owner_id": "", "value": None, "deadline": None
        })).data

        result = store.update_data_point_status(created.id, UpdateDataPointStatusRequest(
            completeness_status="complete", updated_by=OWNER_ID
        ))
        assert not result.success
        assert result.error_message == COMPLETE_BLOCKED
        assert [gap.field for gap in result.validation_error.missing_fields] == [
            "Value", "Owner", "Deadline", "Evidence"
        ]

    def test_complete_when_ready(self, store, data_point, evidence):
        store.link_evidence(evidence.id, data_point.id)
        result = store.update_data_point_status(data_point.id, UpdateDataPointStatusRequest(
            completeness_status="complete", updated_by=OWNER_ID, change_note="All inputs received"
        ))
        assert result.success
        assert result.data.completeness_status == "complete"

        entry = store.get_audit_log()[0]
        assert entry.action == "update-status"
        assert entry.change_note == "All inputs received"

    def test_invalid_status(self, store, data_point):
        result = store.update_data_point_status(data_point.id, UpdateDataPointStatusRequest(completeness_status="done"))
        assert result.error_message.startswith("CompletenessStatus must be one of")

    def test_other_statuses_skip_gap_check(self, store, data_point):
        result = store.update_data_point_status(data_point.id, UpdateDataPointStatusRequest(
            completeness_status="missing"
        ))
        assert result.success
        assert result.validation_error is None

    def test_unknown_data_point(self, store):
        result = store.update_data_point_status("missing", UpdateDataPointStatusRequest(completeness_status="missing"))
        assert result.error_message == "DataPoint not found."


class TestDeleteAndNotes:
    """Test deletion and internal notes."""

    def test_note_lifecycle(self, store, data_point):
        result = store.add_data_point_note(data_point.id, CreateDataPointNoteRequest(
            content="Waiting for Q4 invoices", created_by=CONTRIBUTOR_ID
        ))
        assert result.success
        assert result.data.created_by_name == "John Smith"
        assert len(store.get_data_point_notes(data_point.id)) == 1

    def test_note_requires_content(self, store, data_point):
        result = store.add_data_point_note(data_point.id, CreateDataPointNoteRequest(created_by=OWNER_ID))
        assert result.error_message == "Content is required."

    def test_delete_cascades(self, store, data_point, evidence):
        store.link_evidence(evidence.id, data_point.id)
        store.add_data_point_note(data_point.id, CreateDataPointNoteRequest(content="note", created_by=OWNER_ID))

        result = store.delete_data_point(data_point.id, deleted_by=ADMIN_ID)
        assert result.success
        assert store.get_data_point(data_point.id) is None
        assert store.get_evidence_by_id(evidence.id).linked_data_point_ids == []
        assert store.get_data_point_notes(data_point.id) == []
        assert store.get_audit_log()[0].action == "delete"

    def test_delete_missing(self, store):
        assert store.delete_data_point("missing").error_message == "DataPoint not found."
