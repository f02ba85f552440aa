"""
Condition and rule evaluation.

A condition is evaluated against a record snapshot through the operator
table; a rule combines its conditions with AND/OR logic. Condition groups
are carried on the payload but never evaluated here.

Evaluation never raises on bad data:
- unknown operator       -> warning, condition is False
- missing record field   -> unary operators per definition, others False
- malformed logic value  -> warning, rule is False
"""

import logging
from collections.abc import Mapping
from typing import Iterable, Optional, Union

from contentmatch.core.operators import (
    DEFAULT_OPERATOR_TABLE,
    UNARY_OPERATORS,
    OperatorTable,
)
from contentmatch.core.types import (
    DEFAULT_LOGIC,
    Condition,
    RecordSnapshot,
    Rule,
    Targeted,
)

logger = logging.getLogger(__name__)

LOGIC_AND = "AND"
LOGIC_OR = "OR"

RecordLike = Union[RecordSnapshot, Mapping]


class RuleEvaluator:
    """
    Evaluates conditions and rules against a record.

    Args:
        operators: Operator table to resolve names against. Defaults to the
            frozen standard table.
    """

    def __init__(self, operators: Optional[OperatorTable] = None):
        self.operators = operators if operators is not None else DEFAULT_OPERATOR_TABLE

    def evaluate_condition(self, condition: Union[Condition, Mapping], record: RecordLike) -> bool:
        """
        Evaluate one condition.

        Args:
            condition: Condition (or its dict form) to test.
            record: Record snapshot or plain field mapping.

        Returns:
            True if the condition holds for the record.
        """
        condition = Condition.coerce(condition)
        record = RecordSnapshot.coerce(record)

        operator_fn = self.operators.get_optional(condition.operator)
        if operator_fn is None:
            logger.warning(f"Unknown operator: {condition.operator!r} (property {condition.property!r})")
            return False

        record_value = record.get(condition.property)
        if record_value is None and condition.operator not in UNARY_OPERATORS:
            result = False
        else:
            result = operator_fn(record_value, condition.value)

        logger.debug(
            f"Condition {condition.property} {condition.operator} {condition.value!r} "
            f"| record value {record_value!r} | result {result}"
        )
        return result

    def evaluate_conditions(
        self,
        conditions: Iterable[Condition],
        logic: Optional[str],
        record: RecordLike,
    ) -> bool:
        """Combine a flat condition list. Empty is vacuously True."""
        conditions = list(conditions or [])
        if not conditions:
            return True
        return self._combine(
            (self.evaluate_condition(c, record) for c in conditions),
            logic,
        )

    def evaluate_rule(self, rule: Union[Targeted, Mapping], record: RecordLike) -> bool:
        """
        Evaluate a rule's conditions.

        A rule with no conditions always matches, whatever its logic or
        condition groups. Object type, pipeline, stage and display-on-all
        handling belong to the matchers, not here.
        """
        if isinstance(rule, Mapping):
            rule = Rule.from_dict(rule)
        record = RecordSnapshot.coerce(record)

        return self.evaluate_conditions(rule.conditions, rule.logic, record)

    @staticmethod
    def _combine(results: Iterable[bool], logic: Optional[str]) -> bool:
        logic = logic or DEFAULT_LOGIC
        if logic == LOGIC_AND:
            return all(results)
        if logic == LOGIC_OR:
            return any(results)
        logger.warning(f"Unsupported logic {logic!r}; treating as non-matching")
        return False


DEFAULT_EVALUATOR = RuleEvaluator()


def evaluate_condition(condition: Union[Condition, Mapping], record: RecordLike) -> bool:
    """Evaluate a condition with the default operator table."""
    return DEFAULT_EVALUATOR.evaluate_condition(condition, record)


def evaluate_rule(rule: Union[Targeted, Mapping], record: RecordLike) -> bool:
    """Evaluate a rule with the default operator table."""
    return DEFAULT_EVALUATOR.evaluate_rule(rule, record)


__all__ = [
    "LOGIC_AND",
    "LOGIC_OR",
    "RuleEvaluator",
    "DEFAULT_EVALUATOR",
    "evaluate_condition",
    "evaluate_rule",
]
