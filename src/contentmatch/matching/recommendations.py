"""
Content recommendations via tag rules and direct conditions.

Content can surface two independent ways (logical OR between them):
    1. Tags: tag rules that match the record emit tag ids; an item whose
       tag_ids intersect the active set is included.
    2. Direct: the item's own gates and conditions match the record, the
       same way a banner would. Unlike a bare rule, an item with no
       conditions never matches directly; it needs tags or display_on_all.

Results are ordered by priority (highest first) then title, and each item is
enriched with its resolved tag metadata for display.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from contentmatch.core.evaluator import DEFAULT_EVALUATOR, RecordLike, RuleEvaluator
from contentmatch.core.types import (
    ContentItem,
    ContentTag,
    MatchContext,
    RecordSnapshot,
    TagRule,
)
from contentmatch.matching.gates import gate_failure, passes_context_gates
from contentmatch.utils.text import locale_sort_key

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"
DEFAULT_CONTENT_TYPE = "external_link"
CONTENT_TYPE_LABELS: Dict[str, str] = {
    "external_link": "Links",
    "hubspot_document": "Documents",
    "hubspot_sequence": "Sequences",
}

ContextLike = Union[MatchContext, Mapping, None]


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class RecommendedItem:
    """A matched content item with its resolved tags."""
    item: ContentItem
    tags: List[ContentTag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.item.to_dict()
        payload["tags"] = [tag.to_dict() for tag in self.tags]
        return payload


@dataclass
class RecommendationResult:
    """Recommendations plus the tag state that produced them."""
    recommendations: List[RecommendedItem] = field(default_factory=list)
    active_tags: List[str] = field(default_factory=list)
    tag_map: Dict[str, ContentTag] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "activeTags": list(self.active_tags),
            "tagMap": {tag_id: tag.to_dict() for tag_id, tag in self.tag_map.items()},
        }


def recommendation_sort_key(item: ContentItem):
    """Priority descending, then title ascending in locale order."""
    return (-(item.priority or 0), locale_sort_key(item.title))


# =============================================================================
# ENGINE
# =============================================================================

class ContentRecommendationMatcher:
    """
    Matches content items against a record through tags or direct conditions.

    Args:
        evaluator: RuleEvaluator used for tag rules and direct conditions.
    """

    def __init__(self, evaluator: Optional[RuleEvaluator] = None):
        self.evaluator = evaluator if evaluator is not None else DEFAULT_EVALUATOR

    def collect_active_tags(
        self,
        tag_rules: Iterable[Union[TagRule, Mapping]],
        record: RecordLike,
        context: ContextLike = None,
    ) -> List[str]:
        """
        Tag ids emitted by every matching tag rule, in activation order.

        Tag rules have no display-on-all bypass and no priority: every rule
        that passes its gates and genuinely matches contributes its tags.
        """
        tag_rules = [TagRule.coerce(r) for r in (tag_rules or [])]
        record = RecordSnapshot.coerce(record)
        context = MatchContext.coerce(context)

        active: Dict[str, None] = {}
        if not tag_rules:
            logger.debug("No tag rules to evaluate")
            return []

        for rule in tag_rules:
            if rule.enabled is False:
                continue
            if not passes_context_gates(rule, context):
                continue
            if not self.evaluator.evaluate_rule(rule, record):
                continue
            for tag_id in rule.output_tag_ids:
                active[tag_id] = None
                logger.debug(f"Tag rule {rule.name or rule.id} activated tag {tag_id}")

        logger.debug(f"Active tags: {list(active)}")
        return list(active)

    def active_tags(
        self,
        tag_rules: Iterable[Union[TagRule, Mapping]],
        record: RecordLike,
        context: ContextLike = None,
    ) -> Set[str]:
        """Set of tag ids activated by the tag rules for this record."""
        return set(self.collect_active_tags(tag_rules, record, context))

    @staticmethod
    def matches_tags(item: ContentItem, active_tags: Iterable[str]) -> bool:
        """True iff the item has tags and any of them is active."""
        if not item.tag_ids:
            return False
        active = active_tags if isinstance(active_tags, (set, frozenset, dict)) else set(active_tags)
        return any(tag_id in active for tag_id in item.tag_ids)

    def matches_direct_conditions(
        self,
        item: ContentItem,
        record: RecordLike,
        context: ContextLike = None,
    ) -> bool:
        """
        True iff the item matches on its own targeting.

        display_on_all wins outright; otherwise the gates apply, and an item
        with no conditions does not match directly.
        """
        if item.display_on_all:
            return True

        context = MatchContext.coerce(context)
        failed_gate = gate_failure(item, context)
        if failed_gate:
            logger.debug(f"Content {item.id} direct match blocked - {failed_gate} mismatch")
            return False

        if not item.has_conditions:
            return False

        return self.evaluator.evaluate_rule(item, record)

    def match(
        self,
        items: Iterable[Union[ContentItem, Mapping]],
        active_tags: Iterable[str],
        record: RecordLike,
        context: ContextLike = None,
    ) -> List[ContentItem]:
        """Enabled items matching by tags or direct conditions, sorted for display."""
        items = [ContentItem.coerce(i) for i in (items or [])]
        if not items:
            return []

        record = RecordSnapshot.coerce(record)
        context = MatchContext.coerce(context)
        active = set(active_tags)

        logger.debug(f"Evaluating {len(items)} content items")

        matching: List[ContentItem] = []
        for item in items:
            if item.enabled is False:
                continue

            tags_match = self.matches_tags(item, active)
            direct_match = self.matches_direct_conditions(item, record, context)

            if tags_match or direct_match:
                logger.debug(f"Content matched: {item.title} | tags={tags_match} | direct={direct_match}")
                matching.append(item)

        matching.sort(key=recommendation_sort_key)
        logger.debug(f"Total matching content: {len(matching)}")
        return matching

    def get_recommendations(
        self,
        data: Mapping,
        record: RecordLike,
        context: ContextLike = None,
    ) -> RecommendationResult:
        """
        Full recommendation pass for one record.

        Args:
            data: Mapping with ``tagRules``, ``recommendedContent`` and
                ``contentTags`` (snake_case spellings also accepted).
            record: Record snapshot or plain field mapping.
            context: Current object type / pipeline / stage.

        Returns:
            RecommendationResult with enriched items, active tag ids and the
            tag lookup map.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"get_recommendations expects a mapping, got {type(data).__name__}")

        tag_rules = _first_present(data, "tagRules", "tag_rules")
        content = _first_present(data, "recommendedContent", "recommended_content")
        content_tags = _first_present(data, "contentTags", "content_tags")

        tag_map: Dict[str, ContentTag] = {}
        for raw_tag in content_tags:
            tag = ContentTag.coerce(raw_tag)
            tag_map[tag.id] = tag

        record = RecordSnapshot.coerce(record)
        context = MatchContext.coerce(context)

        active = self.collect_active_tags(tag_rules, record, context)
        matched = self.match(content, active, record, context)

        recommendations = [
            RecommendedItem(
                item=item,
                tags=[tag_map[tag_id] for tag_id in item.tag_ids if tag_id in tag_map],
            )
            for item in matched
        ]
        logger.info(
            f"Recommendations: {len(recommendations)} items, {len(active)} active tags"
        )
        return RecommendationResult(
            recommendations=recommendations,
            active_tags=active,
            tag_map=tag_map,
        )


def _first_present(data: Mapping, *keys: str) -> List[Any]:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return list(value)
    return []


# =============================================================================
# DISPLAY GROUPING
# =============================================================================

def _content_of(entry: Union[RecommendedItem, ContentItem]) -> ContentItem:
    return entry.item if isinstance(entry, RecommendedItem) else entry


def group_by_category(
    recommendations: Iterable[Union[RecommendedItem, ContentItem]],
    fallback: str = DEFAULT_CATEGORY,
) -> Dict[str, List[Union[RecommendedItem, ContentItem]]]:
    """Group recommendations by category, preserving order within groups."""
    grouped: Dict[str, List[Union[RecommendedItem, ContentItem]]] = {}
    for entry in recommendations:
        category = _content_of(entry).category or fallback
        grouped.setdefault(category, []).append(entry)
    return grouped


def group_by_type(
    recommendations: Iterable[Union[RecommendedItem, ContentItem]],
) -> Dict[str, List[Union[RecommendedItem, ContentItem]]]:
    """Group recommendations under display labels for their content type."""
    grouped: Dict[str, List[Union[RecommendedItem, ContentItem]]] = {}
    for entry in recommendations:
        content_type = _content_of(entry).content_type or DEFAULT_CONTENT_TYPE
        label = CONTENT_TYPE_LABELS.get(content_type, content_type)
        grouped.setdefault(label, []).append(entry)
    return grouped


# =============================================================================
# MODULE-LEVEL ENTRY POINTS
# =============================================================================

_DEFAULT_MATCHER = ContentRecommendationMatcher()


def active_tags(
    tag_rules: Iterable[Union[TagRule, Mapping]],
    record: RecordLike,
    context: ContextLike = None,
) -> Set[str]:
    """Active tag set with the default evaluator."""
    return _DEFAULT_MATCHER.active_tags(tag_rules, record, context)


def match_content(
    items: Iterable[Union[ContentItem, Mapping]],
    active: Iterable[str],
    record: RecordLike,
    context: ContextLike = None,
) -> List[ContentItem]:
    """Matched content items with the default evaluator."""
    return _DEFAULT_MATCHER.match(items, active, record, context)


def get_recommendations(
    data: Mapping,
    record: RecordLike,
    context: ContextLike = None,
) -> RecommendationResult:
    """Full recommendation pass with the default evaluator."""
    return _DEFAULT_MATCHER.get_recommendations(data, record, context)


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_CONTENT_TYPE",
    "CONTENT_TYPE_LABELS",
    "RecommendedItem",
    "RecommendationResult",
    "recommendation_sort_key",
    "ContentRecommendationMatcher",
    "group_by_category",
    "group_by_type",
    "active_tags",
    "match_content",
    "get_recommendations",
]
