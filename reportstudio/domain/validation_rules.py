# SPDX-License-Identifier: Apache-2.0

"""
Validation rule engine.

Each supported rule type is one variant with a ``check`` method. Rules are
looked up through ``RULE_REGISTRY``; a type without a variant resolves to
``UnknownRule``, which always passes. Every variant passes when the input it
inspects is absent.
"""

import json
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Type
from ..models.entities import DataPoint, ReportingPeriod, ValidationRule
from ..models.enums import RuleType
from .periods import parse_date


@dataclass
class RuleContext:
    """State a rule may consult besides the data point itself."""
    period: Optional[ReportingPeriod] = None


@dataclass
class RuleOutcome:
    """Result of evaluating the active rules of a section."""
    is_valid: bool
    error_message: Optional[str] = None
    rule_id: Optional[str] = None


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class Rule:
    """Base rule variant."""

    rule_type: Optional[RuleType] = None

    def __init__(self, rule: ValidationRule):
        self.rule = rule

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        raise NotImplementedError

    def check(self, data_point: DataPoint, context: RuleContext) -> Optional[str]:
        """Return the configured error message on failure, None on success."""
        if self.passes(data_point, context):
            return None
        return self.rule.error_message


class NonNegativeRule(Rule):
    """Numeric values must be >= 0; non-numeric values pass."""

    rule_type = RuleType.NON_NEGATIVE

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        if _blank(data_point.value):
            return True
        try:
            number = float(data_point.value.strip())
        except ValueError:
            return True
        return not number < 0


class RequiredUnitRule(Rule):
    """A value needs a unit."""

    rule_type = RuleType.REQUIRED_UNIT

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        if _blank(data_point.value):
            return True
        return not _blank(data_point.unit)


class AllowedUnitsRule(Rule):
    """Unit must match one of a JSON list of allowed units, ignoring case."""

    rule_type = RuleType.ALLOWED_UNITS

    def allowed_units(self) -> List[str]:
        """Decode the parameters; malformed or non-list JSON yields no units."""
        if _blank(self.rule.parameters):
            return []
        try:
            decoded = json.loads(self.rule.parameters)
        except (TypeError, ValueError):
            return []
        if not isinstance(decoded, list) or not all(isinstance(unit, str) for unit in decoded):
            return []
        return decoded

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        if _blank(data_point.unit):
            return True
        allowed = self.allowed_units()
        if not allowed:
            return True
        unit = data_point.unit.strip().lower()
        return any(unit == candidate.strip().lower() for candidate in allowed)


class ValueWithinPeriodRule(Rule):
    """Date values must fall inside the owning period, bounds inclusive."""

    rule_type = RuleType.VALUE_WITHIN_PERIOD

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        if _blank(data_point.value) or context.period is None:
            return True
        value_date = parse_date(data_point.value)
        start = parse_date(context.period.start_date)
        end = parse_date(context.period.end_date)
        if value_date is None or start is None or end is None:
            return True
        return start <= value_date <= end


class UnknownRule(Rule):
    """Rule types without a variant pass."""

    def passes(self, data_point: DataPoint, context: RuleContext) -> bool:
        return True


RULE_REGISTRY: Dict[str, Type[Rule]] = {
    variant.rule_type.value: variant
    for variant in (NonNegativeRule, RequiredUnitRule, AllowedUnitsRule, ValueWithinPeriodRule)
}


def build_rule(rule: ValidationRule) -> Rule:
    """Resolve the variant for a stored rule."""
    variant = RULE_REGISTRY.get(str(rule.rule_type).lower(), UnknownRule)
    return variant(rule)


def evaluate_rules(
    rules: Iterable[ValidationRule],
    data_point: DataPoint,
    context: RuleContext
) -> RuleOutcome:
    """
    Evaluate active rules in order; the first failure aborts.

    Args:
        rules: Rules of the data point's section, in insertion order
        data_point: Candidate data point
        context: Period and other lookups the rules may need

    Returns:
        RuleOutcome with the failing rule's message, if any
    """
    for rule in rules:
        if not rule.is_active:
            continue
        error = build_rule(rule).check(data_point, context)
        if error is not None:
            return RuleOutcome(is_valid=False, error_message=error, rule_id=rule.id)
    return RuleOutcome(is_valid=True)
