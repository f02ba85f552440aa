"""
Rule set matching for banners and plays.

Pipeline, per rule, in order:
    1. skip rules explicitly disabled
    2. object type / pipeline / stage gates
    3. include if display_on_all, else if the rule's conditions match
Survivors are ordered by priority, highest first. Python's sort is stable,
so equal priorities keep input order, but callers must not rely on it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Union

from contentmatch.core.evaluator import DEFAULT_EVALUATOR, RecordLike, RuleEvaluator
from contentmatch.core.types import MatchContext, RecordSnapshot, Rule
from contentmatch.matching.gates import gate_failure

logger = logging.getLogger(__name__)


def priority_key(target: Any) -> float:
    """Descending-priority sort key; missing priority counts as 0."""
    return -(target.priority or 0)


class RuleSetMatcher:
    """Applies a RuleEvaluator across a rule set for one record and context."""

    def __init__(self, evaluator: Optional[RuleEvaluator] = None):
        self.evaluator = evaluator if evaluator is not None else DEFAULT_EVALUATOR

    def match(
        self,
        rules: Iterable[Union[Rule, Mapping]],
        record: RecordLike,
        context: Union[MatchContext, Mapping, None] = None,
    ) -> List[Rule]:
        """
        Return the rules that apply to the record, highest priority first.

        Raises:
            TypeError: If ``rules`` is not iterable or holds non-rule values.
        """
        rules = [Rule.coerce(r) for r in rules]
        record = RecordSnapshot.coerce(record)
        context = MatchContext.coerce(context)

        logger.debug(f"Evaluating {len(rules)} rules for objectType={context.object_type}")

        matching: List[Rule] = []
        for rule in rules:
            if rule.enabled is False:
                logger.debug(f"Rule {rule.id} skipped - disabled")
                continue

            failed_gate = gate_failure(rule, context)
            if failed_gate:
                logger.debug(f"Rule {rule.id} skipped - {failed_gate} mismatch")
                continue

            if rule.display_on_all or self.evaluator.evaluate_rule(rule, record):
                logger.debug(f"Rule {rule.id} ({rule.name}) matched - displayOnAll={rule.display_on_all}")
                matching.append(rule)

        logger.debug(f"Total matching rules: {len(matching)}")
        return sorted(matching, key=priority_key)


def match_rules(
    rules: Iterable[Union[Rule, Mapping]],
    record: RecordLike,
    context: Union[MatchContext, Mapping, None] = None,
) -> List[Rule]:
    """Match rules with the default evaluator."""
    return RuleSetMatcher().match(rules, record, context)


__all__ = [
    "priority_key",
    "RuleSetMatcher",
    "match_rules",
]
