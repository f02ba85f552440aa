from __future__ import annotations

import numpy as np
import pytest

from contentmatch.core.types import (
    Condition,
    ContentItem,
    GlossaryEntry,
    MatchContext,
    RecordSnapshot,
    Rule,
    TagRule,
)


class TestPayloadSpellings:
    """Extension payloads use camelCase, database rows snake_case."""

    def test_rule_camel_case(self):
        rule = Rule.from_dict({
            "id": "r1",
            "conditions": [{"property": "dealstage", "operator": "equals", "value": "closedwon"}],
            "displayOnAll": True,
            "objectTypes": ["deal"],
            "priority": 7,
        })
        assert rule.display_on_all is True
        assert rule.object_types == ["deal"]
        assert rule.priority == 7
        assert rule.conditions == [Condition("dealstage", "equals", "closedwon")]

    def test_rule_snake_case(self):
        rule = Rule.from_dict({"id": "r1", "display_on_all": True, "object_types": ("deal", "ticket")})
        assert rule.display_on_all is True
        assert rule.object_types == ["deal", "ticket"]

    def test_defaults(self):
        rule = Rule.from_dict({"id": "r1"})
        assert rule.enabled is True
        assert rule.logic == "AND"
        assert rule.priority == 0
        assert rule.conditions == []
        assert not rule.has_conditions

    def test_only_explicit_false_disables(self):
        assert Rule.from_dict({"enabled": None}).enabled is True
        assert Rule.from_dict({"enabled": 0}).enabled is True
        assert Rule.from_dict({"enabled": False}).enabled is False

    def test_tag_rule_output_ids(self):
        rule = TagRule.from_dict({"id": "t", "outputTagIds": np.array(["a", "b"])})
        assert rule.output_tag_ids == ["a", "b"]

    def test_content_item_fields(self):
        item = ContentItem.from_dict({
            "id": "c1",
            "title": "Pricing guide",
            "tag_ids": ["pricing"],
            "contentType": "document",
            "category": "Sales",
        })
        assert item.tag_ids == ["pricing"]
        assert item.content_type == "document"
        assert item.category == "Sales"

    def test_unknown_keys_preserved(self):
        rule = Rule.from_dict({"id": "r1", "color": "#ff0000", "body": "<b>hi</b>"})
        assert rule.extra == {"color": "#ff0000", "body": "<b>hi</b>"}
        payload = rule.to_dict()
        assert payload["color"] == "#ff0000"
        assert payload["displayOnAll"] is False

    def test_content_item_round_trip_keeps_condition_groups(self):
        payload = {
            "id": "c1",
            "title": "Renewal kit",
            "conditions": [],
            "logic": "AND",
            "conditionGroups": [
                {"id": "g1", "logic": "OR", "conditions": [
                    {"property": "tier", "operator": "equals", "value": "enterprise"},
                ]},
            ],
            "groupLogic": "OR",
        }
        rendered = ContentItem.from_dict(payload).to_dict()
        assert rendered["conditionGroups"] == payload["conditionGroups"]
        assert rendered["groupLogic"] == "OR"
        assert "conditionGroups" not in ContentItem.from_dict(payload).extra

    def test_list_condition_value_joined(self):
        condition = Condition.from_dict({"property": "tier", "operator": "in_list", "value": ["smb", "enterprise"]})
        assert condition.value == "smb,enterprise"


class TestCoercion:

    def test_instances_pass_through(self):
        rule = Rule(id="r1")
        assert Rule.coerce(rule) is rule

    def test_non_mapping_raises_type_error(self):
        with pytest.raises(TypeError):
            Rule.coerce("not a rule")
        with pytest.raises(TypeError):
            Condition.coerce(42)

    def test_match_context(self):
        assert MatchContext.coerce(None) == MatchContext()
        context = MatchContext.coerce({"objectType": "deal", "pipeline": "default"})
        assert context.object_type == "deal"
        assert context.pipeline == "default"
        assert context.stage is None


class TestRecordSnapshot:

    def test_missing_means_absent_none_or_nan(self):
        snapshot = RecordSnapshot({"a": None, "b": float("nan"), "c": np.float64("nan"), "d": "x"})
        assert snapshot.get("a") is None
        assert snapshot.get("b") is None
        assert snapshot.get("c") is None
        assert snapshot.get("zzz") is None
        assert "d" in snapshot
        assert "b" not in snapshot

    def test_numpy_scalars_become_python(self):
        snapshot = RecordSnapshot({"amount": np.int64(5), "flag": np.bool_(True)})
        assert snapshot.get("amount") == 5
        assert type(snapshot.get("amount")) is int
        assert snapshot.get("flag") is True

    def test_snapshot_is_a_copy(self):
        fields = {"dealstage": "open"}
        snapshot = RecordSnapshot(fields)
        fields["dealstage"] = "closedwon"
        assert snapshot.get("dealstage") == "open"

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            RecordSnapshot(["dealstage"])


class TestGlossaryEntry:

    def test_primary_trigger_prefers_trigger(self):
        assert GlossaryEntry(id="a", trigger="MQL", term="Lead").primary_trigger == "MQL"
        assert GlossaryEntry(id="a", trigger="", term="Lead").primary_trigger == "Lead"
        assert GlossaryEntry(id="a").primary_trigger is None

    def test_non_string_aliases_dropped(self):
        entry = GlossaryEntry.from_dict({"id": "a", "trigger": "MQL", "aliases": ["mql", None, 3, "Marketing Qualified"]})
        assert entry.aliases == ["mql", "Marketing Qualified"]

    def test_match_type_spellings(self):
        assert GlossaryEntry.from_dict({"id": "a", "matchType": "starts_with"}).match_type == "starts_with"
        assert GlossaryEntry.from_dict({"id": "a", "match_type": "starts_with"}).match_type == "starts_with"
        assert GlossaryEntry.from_dict({"id": "a"}).match_type == "exact"
