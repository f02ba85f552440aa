"""
Matching layer: decides which rules and content apply to a record.

Modules:
    gates: object type / pipeline / stage pre-filters
    rules: banner and play matching, priority ordered
    recommendations: tag activation and content recommendation
"""

from contentmatch.matching.gates import gate_failure, passes_context_gates
from contentmatch.matching.rules import RuleSetMatcher, match_rules, priority_key
from contentmatch.matching.recommendations import (
    CONTENT_TYPE_LABELS,
    DEFAULT_CATEGORY,
    DEFAULT_CONTENT_TYPE,
    ContentRecommendationMatcher,
    RecommendationResult,
    RecommendedItem,
    active_tags,
    get_recommendations,
    group_by_category,
    group_by_type,
    match_content,
    recommendation_sort_key,
)

__all__ = [
    # Gates
    "gate_failure",
    "passes_context_gates",
    # Rules
    "RuleSetMatcher",
    "match_rules",
    "priority_key",
    # Recommendations
    "CONTENT_TYPE_LABELS",
    "DEFAULT_CATEGORY",
    "DEFAULT_CONTENT_TYPE",
    "ContentRecommendationMatcher",
    "RecommendationResult",
    "RecommendedItem",
    "active_tags",
    "get_recommendations",
    "group_by_category",
    "group_by_type",
    "match_content",
    "recommendation_sort_key",
]
