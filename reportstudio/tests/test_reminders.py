# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for reminder configuration, reminder history and the owner inbox.
"""

from datetime import timedelta

from reportstudio.models.base import utc_now
from reportstudio.models.entities import OwnerNotification, ReminderHistory
from reportstudio.models.requests import ReminderConfigurationRequest

from .conftest import ADMIN_ID, OWNER_ID


class TestReminderConfiguration:
    """Test replace-on-write reminder configuration."""

    def test_create_configuration(self, store, period):
        result = store.create_or_update_reminder_configuration(period.id, ReminderConfigurationRequest(
            days_before_deadline=[1, 7, 3, 7], updated_by=ADMIN_ID
        ))
        assert result.success
        assert result.data.days_before_deadline == [7, 3, 1]
        assert store.get_audit_log()[0].entity_type == "ReminderConfiguration"

    def test_update_replaces_record(self, store, period):
        first = store.create_or_update_reminder_configuration(period.id, ReminderConfigurationRequest()).data
        reader_copy = store.get_reminder_configuration(period.id)

        second = store.create_or_update_reminder_configuration(period.id, ReminderConfigurationRequest(
            enabled=False, check_frequency_hours=12
        )).data

        assert second.id == first.id
        assert reader_copy.enabled
        stored = store.get_reminder_configuration(period.id)
        assert not stored.enabled
        assert stored.check_frequency_hours == 12

    def test_validation(self, store, period):
        assert store.create_or_update_reminder_configuration(period.id, ReminderConfigurationRequest(
            days_before_deadline=[3, -1]
        )).error_message == "Days before deadline must be non-negative."
        assert store.create_or_update_reminder_configuration(period.id, ReminderConfigurationRequest(
            check_frequency_hours=0
        )).error_message == "Check frequency must be at least 1 hour."
        assert store.create_or_update_reminder_configuration("missing", ReminderConfigurationRequest(
        )).error_message == "Reporting period not found."

    def test_missing_configuration(self, store, period):
        assert store.get_reminder_configuration(period.id) is None


class TestReminderHistory:
    """Test reminder idempotency queries."""

    def _record(self, store, days=3, sent_at=None, data_point_id="dp-1"):
        history = ReminderHistory(
            data_point_id=data_point_id,
            recipient_user_id=OWNER_ID,
            recipient_email="sarah.chen@company.com",
            reminder_type="incomplete",
            days_until_deadline=days,
            email_sent=True,
            **({"sent_at": sent_at} if sent_at is not None else {})
        )
        return store.record_reminder_sent(history)

    def test_sent_today(self, store):
        self._record(store)
        assert store.has_reminder_been_sent_today("dp-1", 3)
        assert not store.has_reminder_been_sent_today("dp-1", 7)
        assert not store.has_reminder_been_sent_today("dp-2", 3)

    def test_yesterday_does_not_count(self, store):
        self._record(store, sent_at=utc_now() - timedelta(days=1))
        assert not store.has_reminder_been_sent_today("dp-1", 3)

    def test_history_newest_first(self, store):
        old = self._record(store, sent_at=utc_now() - timedelta(days=2))
        new = self._record(store)
        self._record(store, data_point_id="dp-2")
        assert [h.id for h in store.get_reminder_history(data_point_id="dp-1")] == [new.id, old.id]
        assert len(store.get_reminder_history(user_id=OWNER_ID)) == 3


class TestNotificationInbox:
    """Test the per-recipient inbox."""

    def _notification(self, recipient=OWNER_ID, **overrides):
        return OwnerNotification(
            recipient_user_id=recipient,
            notification_type="section-assigned",
            entity_id="s-1",
            entity_type="ReportSection",
            entity_title="Energy & Emissions",
            **overrides
        )

    def test_record_and_read(self, store):
        first = store.record_notification(self._notification())
        second = store.record_notification(self._notification())
        store.record_notification(self._notification(recipient=ADMIN_ID))

        inbox = store.get_notifications(OWNER_ID)
        assert [n.id for n in inbox] == [second.id, first.id]

        assert store.mark_notification_as_read(first.id)
        assert [n.id for n in store.get_notifications(OWNER_ID, unread_only=True)] == [second.id]

    def test_mark_unknown_notification(self, store):
        assert not store.mark_notification_as_read("missing")
