"""
contentmatch core: types, operator table and rule evaluation.

Layer Architecture:
    Operator Table:    operator name -> predicate (frozen, injectable)
                           ↓
    Evaluation:        Condition -> Rule (AND/OR)
                           ↓
    Matching:          contentmatch.matching (gates, ordering, tags)

Usage:
    from contentmatch.core import (
        Condition,
        Rule,
        RecordSnapshot,
        evaluate_rule,
        DEFAULT_OPERATOR_TABLE,
    )
"""

from contentmatch.core.exceptions import ContentMatchError, PayloadError
from contentmatch.core.types import (
    DEFAULT_LOGIC,
    Condition,
    ConditionGroup,
    Targeted,
    Rule,
    TagRule,
    ContentItem,
    ContentTag,
    MatchContext,
    RecordSnapshot,
    MATCH_TYPE_EXACT,
    MATCH_TYPE_STARTS_WITH,
    GlossaryEntry,
)
from contentmatch.core.operators import (
    OperatorFn,
    OperatorName,
    UNARY_OPERATORS,
    OperatorTable,
    build_default_operator_table,
    DEFAULT_OPERATOR_TABLE,
)
from contentmatch.core.evaluator import (
    LOGIC_AND,
    LOGIC_OR,
    RuleEvaluator,
    DEFAULT_EVALUATOR,
    evaluate_condition,
    evaluate_rule,
)

__all__ = [
    # Errors
    "ContentMatchError",
    "PayloadError",
    # Types
    "DEFAULT_LOGIC",
    "Condition",
    "ConditionGroup",
    "Targeted",
    "Rule",
    "TagRule",
    "ContentItem",
    "ContentTag",
    "MatchContext",
    "RecordSnapshot",
    "MATCH_TYPE_EXACT",
    "MATCH_TYPE_STARTS_WITH",
    "GlossaryEntry",
    # Operators
    "OperatorFn",
    "OperatorName",
    "UNARY_OPERATORS",
    "OperatorTable",
    "build_default_operator_table",
    "DEFAULT_OPERATOR_TABLE",
    # Evaluation
    "LOGIC_AND",
    "LOGIC_OR",
    "RuleEvaluator",
    "DEFAULT_EVALUATOR",
    "evaluate_condition",
    "evaluate_rule",
]
