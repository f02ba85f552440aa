from __future__ import annotations

import pytest

from contentmatch.core.types import ContentItem
from contentmatch.matching.recommendations import (
    ContentRecommendationMatcher,
    RecommendedItem,
    active_tags,
    get_recommendations,
    group_by_category,
    group_by_type,
    match_content,
)


WON = {"property": "dealstage", "operator": "equals", "value": "closedwon"}
ENTERPRISE = {"property": "tier", "operator": "equals", "value": "enterprise"}


def tag_rule(rule_id, tags, conditions=None, **kwargs):
    payload = {"id": rule_id, "conditions": conditions or [], "logic": "AND", "outputTagIds": tags}
    payload.update(kwargs)
    return payload


def item(item_id, title=None, **kwargs):
    payload = {"id": item_id, "title": title or item_id, "conditions": [], "logic": "AND"}
    payload.update(kwargs)
    return payload


class TestActiveTags:

    def test_matching_rules_emit_tags(self):
        rules = [
            tag_rule("won", ["closing"], [WON]),
            tag_rule("ent", ["enterprise", "closing"], [ENTERPRISE]),
        ]
        assert active_tags(rules, {"dealstage": "closedwon", "tier": "enterprise"}) == {"closing", "enterprise"}
        assert active_tags(rules, {"dealstage": "open", "tier": "enterprise"}) == {"enterprise", "closing"}
        assert active_tags(rules, {"dealstage": "open"}) == set()

    def test_activation_order_preserved(self):
        rules = [tag_rule("b", ["beta"]), tag_rule("a", ["alpha", "beta"])]
        matcher = ContentRecommendationMatcher()
        assert matcher.collect_active_tags(rules, {}) == ["beta", "alpha"]

    def test_display_on_all_does_not_apply_to_tag_rules(self):
        rules = [tag_rule("won", ["closing"], [WON], displayOnAll=True)]
        assert active_tags(rules, {"dealstage": "open"}) == set()

    def test_disabled_and_gated_rules_skipped(self):
        rules = [
            tag_rule("off", ["off"], enabled=False),
            tag_rule("tickets", ["support"], objectTypes=["ticket"]),
            tag_rule("deals", ["sales"], objectTypes=["deal"]),
        ]
        assert active_tags(rules, {}, {"objectType": "deal"}) == {"sales"}

    def test_no_rules(self):
        assert active_tags([], {"dealstage": "closedwon"}) == set()
        assert active_tags(None, {}) == set()


class TestMatchContent:

    def test_tag_rescue(self):
        items = [item("guide", tagIds=["closing"], conditions=[ENTERPRISE])]
        matched = match_content(items, {"closing"}, {"tier": "smb"})
        assert [i.id for i in matched] == ["guide"]

    def test_direct_conditions_without_tags(self):
        items = [item("guide", tagIds=["closing"], conditions=[ENTERPRISE])]
        matched = match_content(items, set(), {"tier": "enterprise"})
        assert [i.id for i in matched] == ["guide"]

    def test_neither_path_excludes(self):
        items = [item("guide", tagIds=["closing"], conditions=[ENTERPRISE])]
        assert match_content(items, {"other"}, {"tier": "smb"}) == []

    def test_item_without_conditions_needs_tags(self):
        items = [item("orphan")]
        assert match_content(items, {"closing"}, {}) == []

    def test_item_with_only_condition_groups_matches_directly(self):
        group = {"id": "g", "logic": "AND", "conditions": [ENTERPRISE]}
        items = [item("grouped", conditionGroups=[group])]
        assert [i.id for i in match_content(items, set(), {"tier": "smb"})] == ["grouped"]

    def test_display_on_all(self):
        items = [item("everywhere", displayOnAll=True, conditions=[ENTERPRISE])]
        assert [i.id for i in match_content(items, set(), {})] == ["everywhere"]

    def test_gates_block_direct_but_not_tags(self):
        items = [item("deal-guide", objectTypes=["deal"], conditions=[ENTERPRISE], tagIds=["closing"])]
        context = {"objectType": "contact"}
        assert match_content(items, set(), {"tier": "enterprise"}, context) == []
        assert [i.id for i in match_content(items, {"closing"}, {"tier": "enterprise"}, context)] == ["deal-guide"]

    def test_disabled_items_skipped(self):
        items = [item("off", enabled=False, displayOnAll=True)]
        assert match_content(items, set(), {}) == []

    def test_priority_then_title_order(self):
        items = [
            item("b", title="beta", displayOnAll=True, priority=1),
            item("a2", title="Alpha", displayOnAll=True, priority=1),
            item("a1", title="alpha", displayOnAll=True, priority=1),
            item("top", title="zeta", displayOnAll=True, priority=9),
            item("accent", title="Ábaco", displayOnAll=True, priority=1),
        ]
        matched = match_content(items, set(), {})
        assert [i.id for i in matched] == ["top", "accent", "a1", "a2", "b"]

    def test_non_iterable_items_raise(self):
        with pytest.raises(TypeError):
            match_content(5, set(), {})


class TestGetRecommendations:

    DATA = {
        "tagRules": [tag_rule("won", ["closing", "ghost"], [WON])],
        "recommendedContent": [
            item("playbook", title="Closing playbook", tagIds=["closing", "ghost"], priority=2, category="Sales"),
            item("pricing", title="Pricing", conditions=[ENTERPRISE], contentType="hubspot_document"),
            item("faq", title="FAQ"),
        ],
        "contentTags": [
            {"id": "closing", "name": "Closing", "color": "green"},
            {"id": "unused", "name": "Unused"},
        ],
    }

    def test_scenario(self):
        result = get_recommendations(self.DATA, {"dealstage": "closedwon", "tier": "enterprise"}, {"objectType": "deal"})
        assert [r.item.id for r in result.recommendations] == ["playbook", "pricing"]
        assert result.active_tags == ["closing", "ghost"]
        assert set(result.tag_map) == {"closing", "unused"}

    def test_enrichment_drops_unknown_tags(self):
        result = get_recommendations(self.DATA, {"dealstage": "closedwon"})
        playbook = result.recommendations[0]
        assert [tag.id for tag in playbook.tags] == ["closing"]
        assert playbook.tags[0].color == "green"

    def test_to_dict_shape(self):
        payload = get_recommendations(self.DATA, {"dealstage": "closedwon"}).to_dict()
        assert set(payload) == {"recommendations", "activeTags", "tagMap"}
        first = payload["recommendations"][0]
        assert first["id"] == "playbook"
        assert first["conditionGroups"] == []
        assert first["tags"] == [{"id": "closing", "name": "Closing", "slug": None, "color": "green", "description": None}]

    def test_snake_case_keys(self):
        data = {
            "tag_rules": self.DATA["tagRules"],
            "recommended_content": self.DATA["recommendedContent"],
            "content_tags": self.DATA["contentTags"],
        }
        result = get_recommendations(data, {"dealstage": "closedwon"})
        assert [r.item.id for r in result.recommendations] == ["playbook"]

    def test_missing_collections_default_empty(self):
        result = get_recommendations({}, {"dealstage": "closedwon"})
        assert result.recommendations == []
        assert result.active_tags == []
        assert result.tag_map == {}

    def test_non_mapping_data_raises(self):
        with pytest.raises(TypeError):
            get_recommendations([], {})


class TestGrouping:

    def _items(self):
        return [
            RecommendedItem(ContentItem(id="1", title="a", category="Sales", content_type="hubspot_document")),
            RecommendedItem(ContentItem(id="2", title="b")),
            RecommendedItem(ContentItem(id="3", title="c", category="Sales", content_type="hubspot_sequence")),
            RecommendedItem(ContentItem(id="4", title="d", content_type="webinar")),
        ]

    def test_group_by_category(self):
        grouped = group_by_category(self._items())
        assert list(grouped) == ["Sales", "Other"]
        assert [e.item.id for e in grouped["Sales"]] == ["1", "3"]
        assert [e.item.id for e in grouped["Other"]] == ["2", "4"]

    def test_group_by_category_custom_fallback(self):
        grouped = group_by_category(self._items(), fallback="General")
        assert "General" in grouped

    def test_group_by_type(self):
        grouped = group_by_type(self._items())
        assert list(grouped) == ["Documents", "Links", "Sequences", "webinar"]
        assert [e.item.id for e in grouped["Links"]] == ["2"]

    def test_grouping_accepts_plain_items(self):
        grouped = group_by_category([ContentItem(id="x", category="Legal")])
        assert [i.id for i in grouped["Legal"]] == ["x"]
