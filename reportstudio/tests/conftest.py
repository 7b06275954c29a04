# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest

from reportstudio.config import StoreSettings
from reportstudio.models.requests import (
    CreateDataPointRequest,
    CreateEvidenceRequest,
    CreateOrganizationalUnitRequest,
    CreateOrganizationRequest,
    CreateReportingPeriodRequest,
    UpdateDataPointRequest
)
from reportstudio.services.store import ReportStore

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

OWNER_ID = "user-1"
ADMIN_ID = "user-2"
CONTRIBUTOR_ID = "user-3"
SECOND_CONTRIBUTOR_ID = "user-4"
AUDITOR_ID = "user-6"


@pytest.fixture
def store():
    """Fresh store seeded with sample users and the default catalog."""
    return ReportStore()


@pytest.fixture
def strict_store():
    """Store that requires an owner on every new data point."""
    return ReportStore(settings=StoreSettings(require_data_point_owner=True))


@pytest.fixture
def organization(store):
    result = store.create_organization(CreateOrganizationRequest(
        name="Acme",
        legal_form="GmbH",
        country="DE",
        identifier="HRB-12345",
        coverage_type="full",
        created_by=ADMIN_ID
    ))
    assert result.success
    return result.data


@pytest.fixture
def unit(store, organization):
    result = store.create_organizational_unit(CreateOrganizationalUnitRequest(
        name="HQ",
        description="Headquarters",
        created_by=ADMIN_ID
    ))
    assert result.success
    return result.data


@pytest.fixture
def period(store, unit):
    """Active simplified period covering 2024."""
    result = store.create_period(CreateReportingPeriodRequest(
        name="FY 2024",
        start_date="2024-01-01",
        end_date="2024-12-31",
        reporting_mode="simplified",
        owner_id=OWNER_ID
    ))
    assert result.success
    return result.data


@pytest.fixture
def section(store, period):
    """First generated section of the active period."""
    return store.get_sections(period.id)[0]


@pytest.fixture
def data_point_request(section):
    """Valid data point request; tests override fields with model_copy."""
    return CreateDataPointRequest(
        section_id=section.id,
        title="Scope 1 emissions",
        content="Direct emissions from owned sources.",
        value="1200",
        unit="tCO2e",
        owner_id=OWNER_ID,
        contributor_ids=[CONTRIBUTOR_ID],
        source="Fuel invoices",
        information_type="fact",
        deadline="2024-11-30",
        created_by=OWNER_ID
    )


@pytest.fixture
def data_point(store, data_point_request):
    result = store.create_data_point(data_point_request)
    assert result.success, result.error_message
    return result.data


@pytest.fixture
def evidence(store, section):
    result = store.create_evidence(CreateEvidenceRequest(
        section_id=section.id,
        title="Fuel invoices 2024",
        file_name="invoices.pdf",
        file_url="/files/invoices.pdf",
        uploaded_by=OWNER_ID
    ))
    assert result.success, result.error_message
    return result.data


def update_request_from(data_point, **overrides):
    """Update request mirroring a stored data point, with overrides applied."""
    fields = {
        "type": data_point.type,
        "classification": data_point.classification,
        "title": data_point.title,
        "content": data_point.content,
        "value": data_point.value,
        "unit": data_point.unit,
        "owner_id": data_point.owner_id,
        "contributor_ids": list(data_point.contributor_ids),
        "source": data_point.source,
        "information_type": data_point.information_type,
        "assumptions": data_point.assumptions,
        "is_blocked": data_point.is_blocked,
        "blocker_reason": data_point.blocker_reason,
        "blocker_due_date": data_point.blocker_due_date,
        "updated_by": OWNER_ID
    }
    fields.update(overrides)
    return UpdateDataPointRequest(**fields)
