# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for per-section validation rules.
"""

import pytest

from reportstudio.domain.validation_rules import (
    AllowedUnitsRule,
    NonNegativeRule,
    RuleContext,
    UnknownRule,
    ValueWithinPeriodRule,
    build_rule,
    evaluate_rules
)
from reportstudio.models.entities import DataPoint, ReportingPeriod, ValidationRule
from reportstudio.models.requests import CreateValidationRuleRequest, UpdateValidationRuleRequest

from .conftest import ADMIN_ID, OWNER_ID, update_request_from


def _rule(rule_type, parameters=None, is_active=True, message="Rule failed"):
    return ValidationRule(
        section_id="section-1",
        rule_type=rule_type,
        parameters=parameters,
        error_message=message,
        is_active=is_active,
        created_by=ADMIN_ID
    )


def _point(value=None, unit=None):
    return DataPoint(
        section_id="section-1",
        title="Metric",
        content="Content",
        value=value,
        unit=unit,
        information_type="fact",
        completeness_status="incomplete"
    )


PERIOD_2024 = RuleContext(period=ReportingPeriod(name="FY 2024", start_date="2024-01-01", end_date="2024-12-31"))


class TestRuleVariants:
    """Test each rule type in isolation."""

    @pytest.mark.parametrize("value,expected", [
        ("10", True),
        ("0", True),
        ("-0.5", False),
        ("n/a", True),
        (None, True),
    ])
    def test_non_negative(self, value, expected):
        assert NonNegativeRule(_rule("non-negative")).passes(_point(value), RuleContext()) is expected

    def test_required_unit(self):
        rule = build_rule(_rule("required-unit"))
        assert rule.passes(_point("5", "kWh"), RuleContext())
        assert not rule.passes(_point("5"), RuleContext())
        assert rule.passes(_point(), RuleContext())

    def test_allowed_units_case_insensitive(self):
        rule = AllowedUnitsRule(_rule("allowed-units", '["kWh", "MWh"]'))
        assert rule.passes(_point("5", "mwh"), RuleContext())
        assert not rule.passes(_point("5", "GJ"), RuleContext())
        assert rule.passes(_point("5"), RuleContext())

    @pytest.mark.parametrize("parameters", [None, "", "not json", '{"units": ["kWh"]}', "[1, 2]", "[]"])
    def test_allowed_units_malformed_parameters_pass(self, parameters):
        rule = AllowedUnitsRule(_rule("allowed-units", parameters))
        assert rule.passes(_point("5", "GJ"), RuleContext())

    def test_value_within_period_is_inclusive(self):
        rule = ValueWithinPeriodRule(_rule("value-within-period"))
        assert rule.passes(_point("2024-01-01"), PERIOD_2024)
        assert rule.passes(_point("2024-12-31"), PERIOD_2024)
        assert not rule.passes(_point("2025-01-15"), PERIOD_2024)

    def test_value_within_period_lenient(self):
        rule = ValueWithinPeriodRule(_rule("value-within-period"))
        assert rule.passes(_point("12.5"), PERIOD_2024)
        assert rule.passes(_point("2025-01-15"), RuleContext())

    def test_unknown_rule_type_passes(self):
        rule = build_rule(_rule("max-length"))
        assert isinstance(rule, UnknownRule)
        assert rule.check(_point("anything"), RuleContext()) is None

    def test_rule_type_tag_is_case_insensitive(self):
        assert isinstance(build_rule(_rule("Non-Negative")), NonNegativeRule)


class TestRuleEvaluation:
    """Test ordered evaluation."""

    def test_first_failure_aborts(self):
        rules = [
            _rule("required-unit", message="Unit missing"),
            _rule("non-negative", message="Negative value"),
        ]
        outcome = evaluate_rules(rules, _point("-3"), RuleContext())
        assert not outcome.is_valid
        assert outcome.error_message == "Unit missing"
        assert outcome.rule_id == rules[0].id

    def test_inactive_rules_are_skipped(self):
        rules = [_rule("non-negative", is_active=False)]
        assert evaluate_rules(rules, _point("-3"), RuleContext()).is_valid


class TestRulesInStore:
    """Test rule management and enforcement through the store."""

    def _create(self, store, section, **overrides):
        fields = {
            "section_id": section.id,
            "rule_type": "non-negative",
            "error_message": "Emissions cannot be negative.",
            "created_by": ADMIN_ID
        }
        fields.update(overrides)
        return store.create_validation_rule(CreateValidationRuleRequest(**fields))

    def test_create_rule(self, store, section):
        result = self._create(store, section)
        assert result.success
        assert result.data.is_active
        assert store.get_validation_rules(section.id) == [result.data]

    def test_invalid_rule_type(self, store, section):
        result = self._create(store, section, rule_type="regex")
        assert result.error_message == (
            "RuleType must be one of: non-negative, required-unit, allowed-units, value-within-period."
        )

    def test_rule_requires_existing_section(self, store, period):
        result = store.create_validation_rule(CreateValidationRuleRequest(
            section_id="missing", rule_type="non-negative", error_message="x", created_by=ADMIN_ID
        ))
        assert result.error_message == "Section with ID 'missing' not found."

    def test_rule_blocks_create(self, store, section, data_point_request):
        self._create(store, section)
        result = store.create_data_point(data_point_request.model_copy(update={"value": "-5"}))
        assert result.error_message == "Emissions cannot be negative."
        assert store.get_data_points(section_id=section.id) == []

    def test_rule_blocks_update(self, store, section, data_point):
        self._create(store, section)
        result = store.update_data_point(data_point.id, update_request_from(data_point, value="-1"))
        assert result.error_message == "Emissions cannot be negative."

    def test_value_within_owning_period(self, store, section, data_point_request):
        self._create(store, section, rule_type="value-within-period", error_message="Date outside period.")
        assert store.create_data_point(data_point_request.model_copy(update={"value": "2024-06-30"})).success
        result = store.create_data_point(data_point_request.model_copy(update={"value": "2023-12-31"}))
        assert result.error_message == "Date outside period."

    def test_deactivated_rule_is_ignored(self, store, section, data_point_request):
        rule = self._create(store, section).data
        result = store.update_validation_rule(rule.id, UpdateValidationRuleRequest(
            rule_type=rule.rule_type,
            error_message=rule.error_message,
            is_active=False,
            updated_by=ADMIN_ID
        ))
        assert result.success
        assert store.get_validation_rules(section.id, active_only=True) == []
        assert store.create_data_point(data_point_request.model_copy(update={"value": "-5"})).success

        entry = store.get_audit_log(None)[1]
        assert entry.entity_type == "ValidationRule"
        assert [c.field for c in entry.changes] == ["IsActive"]

    def test_rules_do_not_leak_across_sections(self, store, period, data_point_request):
        other_section = store.get_sections(period.id)[1]
        self._create(store, other_section)
        assert store.create_data_point(data_point_request.model_copy(update={"value": "-5"})).success

    def test_delete_rule(self, store, section):
        rule = self._create(store, section).data
        assert store.delete_validation_rule(rule.id, deleted_by=OWNER_ID).success
        assert store.get_validation_rule(rule.id) is None
        assert store.delete_validation_rule(rule.id).error_message == "ValidationRule not found."
