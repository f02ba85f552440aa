"""
contentmatch: Content targeting for CRM record pages.

Decides which banners, plays and recommended content apply to the record a
user is viewing, and precomputes the glossary lookup used for tooltips.

Layer Architecture:
    Operator Table:    operator name -> predicate
                           ↓
    Evaluation:        Condition -> Rule (AND/OR)
                           ↓
    Matching:          Rule sets (priority) | Tag rules -> Content (tags OR conditions)
                           ↓
    Glossary:          entries -> term map cache (independent of matching)

Usage:
    from contentmatch import (
        evaluate_rule,
        match_rules,
        get_recommendations,
        build_term_map_cache,
    )
"""

from contentmatch.core import (
    Condition,
    ConditionGroup,
    ContentItem,
    ContentTag,
    GlossaryEntry,
    MatchContext,
    OperatorTable,
    RecordSnapshot,
    Rule,
    RuleEvaluator,
    TagRule,
    DEFAULT_OPERATOR_TABLE,
    evaluate_condition,
    evaluate_rule,
)
from contentmatch.matching import (
    ContentRecommendationMatcher,
    RecommendationResult,
    RecommendedItem,
    RuleSetMatcher,
    active_tags,
    get_recommendations,
    group_by_category,
    group_by_type,
    match_content,
    match_rules,
)
from contentmatch.glossary import (
    TermMapCache,
    build_sorted_term_list,
    build_term_map_cache,
    match_label,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "Condition",
    "ConditionGroup",
    "ContentItem",
    "ContentTag",
    "GlossaryEntry",
    "MatchContext",
    "RecordSnapshot",
    "Rule",
    "TagRule",
    # Evaluation
    "OperatorTable",
    "DEFAULT_OPERATOR_TABLE",
    "RuleEvaluator",
    "evaluate_condition",
    "evaluate_rule",
    # Matching
    "RuleSetMatcher",
    "match_rules",
    "ContentRecommendationMatcher",
    "RecommendationResult",
    "RecommendedItem",
    "active_tags",
    "match_content",
    "get_recommendations",
    "group_by_category",
    "group_by_type",
    # Glossary
    "TermMapCache",
    "build_term_map_cache",
    "build_sorted_term_list",
    "match_label",
]
