from __future__ import annotations

import pytest

from contentmatch.core.types import GlossaryEntry
from contentmatch.glossary.term_cache import TermMapCache, build_term_map_cache


class TestBuildTermMapCache:

    def test_trigger_and_legacy_term_collision(self):
        """Both entries claim "MQL"; the later one wins the key."""
        cache = build_term_map_cache([
            {"id": "a", "trigger": "MQL", "aliases": [], "enabled": True},
            {"id": "b", "term": "MQL", "enabled": True},
        ])
        assert cache.term_map == {"mql": "b"}
        assert set(cache.entries_by_id) == {"a", "b"}

    def test_aliases_registered(self):
        cache = build_term_map_cache([
            {"id": "arr", "trigger": "ARR", "aliases": ["Annual Recurring Revenue", "  run rate "]},
        ])
        assert cache.term_map == {
            "arr": "arr",
            "annual recurring revenue": "arr",
            "run rate": "arr",
        }

    def test_alias_collision_last_wins(self):
        cache = build_term_map_cache([
            {"id": "first", "trigger": "Pipeline", "aliases": ["funnel"]},
            {"id": "second", "trigger": "Funnel"},
        ])
        assert cache.term_map["funnel"] == "second"
        assert cache.term_map["pipeline"] == "first"
        assert set(cache.entries_by_id) == {"first", "second"}

    def test_disabled_entries_absent(self):
        cache = build_term_map_cache([
            {"id": "off", "trigger": "Churn", "enabled": False},
            {"id": "on", "trigger": "NRR", "enabled": None},
        ])
        assert "off" not in cache.entries_by_id
        assert "churn" not in cache.term_map
        assert cache.term_map == {"nrr": "on"}

    def test_entry_without_trigger_kept_by_id_only(self):
        cache = build_term_map_cache([{"id": "notes", "trigger": "", "aliases": ["memo"]}])
        assert cache.term_map == {}
        assert "notes" in cache.entries_by_id

    def test_blank_aliases_skipped(self):
        cache = build_term_map_cache([{"id": "a", "trigger": "SQL", "aliases": ["", "   "]}])
        assert cache.term_map == {"sql": "a"}

    def test_empty_inputs(self):
        assert len(build_term_map_cache([])) == 0
        assert len(build_term_map_cache(None)) == 0

    def test_rebuild_is_deterministic(self):
        entries = [
            {"id": "a", "trigger": "MQL", "aliases": ["lead"]},
            {"id": "b", "trigger": "Lead"},
        ]
        assert build_term_map_cache(entries).to_dict() == build_term_map_cache(entries).to_dict()

    def test_accepts_entry_instances(self):
        cache = build_term_map_cache([GlossaryEntry(id="x", trigger="CAC")])
        assert cache.term_map == {"cac": "x"}

    def test_non_mapping_entry_raises(self):
        with pytest.raises(TypeError):
            build_term_map_cache(["MQL"])


class TestTermMapCache:

    def _cache(self) -> TermMapCache:
        return build_term_map_cache([
            {"id": "mql", "trigger": "MQL", "definition": "Marketing qualified lead"},
        ])

    def test_lookup_normalizes(self):
        entry = self._cache().lookup("  mQl ")
        assert entry is not None
        assert entry.definition == "Marketing qualified lead"

    def test_lookup_miss(self):
        cache = self._cache()
        assert cache.lookup("SQL") is None
        assert cache.lookup("") is None
        assert cache.lookup(None) is None

    def test_contains(self):
        cache = self._cache()
        assert "MQL" in cache
        assert "SQL" not in cache

    def test_to_dict(self):
        payload = self._cache().to_dict()
        assert payload["termMap"] == {"mql": "mql"}
        assert payload["entriesById"]["mql"]["trigger"] == "MQL"
        assert payload["entriesById"]["mql"]["matchType"] == "exact"
