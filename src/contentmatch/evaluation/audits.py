"""
Deterministic audits over rule sets and glossary entries.

These gates check configuration that evaluates without error but behaves
surprisingly: glossary triggers silently overwritten by a later entry,
content that can never surface, and rules that never fire across a batch
of sample records.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import networkx as nx
import pandas as pd

from contentmatch.core.types import ContentItem, GlossaryEntry, MatchContext, Rule, TagRule
from contentmatch.glossary.term_cache import build_term_map_cache
from contentmatch.matching.rules import RuleSetMatcher
from contentmatch.utils.text import normalize_trigger

logger = logging.getLogger(__name__)

_SOURCE_NODE = ("source", "enabled_tag_rules")

COLLISION_COLUMNS = ["trigger", "entry_ids", "claim_count", "winner_entry_id"]
COVERAGE_COLUMNS = ["record_index", "rule_id", "priority", "rank"]


@dataclass
class AuditResult:
    gate_id: str
    passed: bool
    total: int
    succeeded: int
    threshold: float
    details: str = ""

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.total if self.total else 1.0


# =============================================================================
# GLOSSARY COLLISIONS
# =============================================================================

def term_collision_report(entries: Iterable[Union[GlossaryEntry, Mapping]]) -> pd.DataFrame:
    """
    Every normalized trigger claimed by more than one enabled entry.

    Output columns:
        trigger
        entry_ids (claimants in input order)
        claim_count
        winner_entry_id (the entry the term map cache resolves to)
    """
    entries = [GlossaryEntry.coerce(e) for e in (entries or [])]
    claims: Dict[str, List[str]] = {}
    for entry in entries:
        if entry.enabled is False or not entry.primary_trigger:
            continue
        for trigger in [entry.primary_trigger, *entry.aliases]:
            key = normalize_trigger(trigger)
            if not key:
                continue
            claimants = claims.setdefault(key, [])
            if entry.id not in claimants:
                claimants.append(entry.id)

    cache = build_term_map_cache(entries)
    rows = [
        {
            "trigger": trigger,
            "entry_ids": claimants,
            "claim_count": len(claimants),
            "winner_entry_id": cache.term_map.get(trigger),
        }
        for trigger, claimants in claims.items()
        if len(claimants) > 1
    ]
    if not rows:
        return pd.DataFrame(columns=COLLISION_COLUMNS)
    return pd.DataFrame(rows, columns=COLLISION_COLUMNS)


def term_collision_gate(entries: Iterable[Union[GlossaryEntry, Mapping]]) -> AuditResult:
    """Pass when no glossary trigger is claimed by two entries."""
    entries = [GlossaryEntry.coerce(e) for e in (entries or [])]
    report = term_collision_report(entries)
    total = len(build_term_map_cache(entries).term_map)
    collided = len(report)
    details = ""
    if collided:
        sample = ", ".join(
            f"{row.trigger}->{row.winner_entry_id}" for row in report.head(5).itertuples()
        )
        details = f"{collided} triggers overwritten by a later entry: {sample}"
    return AuditResult(
        gate_id="glossary_term_collisions",
        passed=collided == 0,
        total=total,
        succeeded=total - collided,
        threshold=1.0,
        details=details,
    )


# =============================================================================
# CONTENT REACHABILITY
# =============================================================================

def build_tag_graph(
    tag_rules: Iterable[Union[TagRule, Mapping]],
    items: Iterable[Union[ContentItem, Mapping]],
) -> nx.DiGraph:
    """
    Directed graph: source -> enabled tag rule -> tag -> content item.

    Disabled tag rules appear as nodes but are not connected to the source.
    """
    graph = nx.DiGraph()
    graph.add_node(_SOURCE_NODE)

    for index, raw in enumerate(tag_rules or []):
        rule = TagRule.coerce(raw)
        rule_node = ("tag_rule", rule.id or f"#{index}")
        graph.add_node(rule_node, enabled=rule.enabled)
        if rule.enabled:
            graph.add_edge(_SOURCE_NODE, rule_node)
        for tag_id in rule.output_tag_ids:
            graph.add_edge(rule_node, ("tag", tag_id))

    for index, raw in enumerate(items or []):
        item = ContentItem.coerce(raw)
        item_node = ("content", item.id or f"#{index}")
        graph.add_node(item_node)
        for tag_id in item.tag_ids:
            graph.add_edge(("tag", tag_id), item_node)

    return graph


def unreachable_content(
    tag_rules: Iterable[Union[TagRule, Mapping]],
    items: Iterable[Union[ContentItem, Mapping]],
) -> List[str]:
    """
    Ids of enabled content items that can never be recommended.

    An item is unreachable when it does not display on all records, has no
    direct conditions, and none of its tags is emitted by an enabled tag rule.
    Gates are ignored, so this is a lower bound.
    """
    items = [ContentItem.coerce(i) for i in (items or [])]
    graph = build_tag_graph(tag_rules, items)
    reachable = nx.descendants(graph, _SOURCE_NODE)

    unreachable: List[str] = []
    for index, item in enumerate(items):
        if item.enabled is False or item.display_on_all or item.has_conditions:
            continue
        if ("content", item.id or f"#{index}") not in reachable:
            unreachable.append(item.id or f"#{index}")
    return unreachable


def unreachable_content_gate(
    tag_rules: Iterable[Union[TagRule, Mapping]],
    items: Iterable[Union[ContentItem, Mapping]],
) -> AuditResult:
    items = [ContentItem.coerce(i) for i in (items or [])]
    enabled = [item for item in items if item.enabled is not False]
    missing = unreachable_content(tag_rules, items)
    details = f"Unreachable content: {missing[:10]}" if missing else ""
    if missing:
        logger.warning(f"{len(missing)} content items can never surface: {missing[:5]}")
    return AuditResult(
        gate_id="content_reachability",
        passed=not missing,
        total=len(enabled),
        succeeded=len(enabled) - len(missing),
        threshold=1.0,
        details=details,
    )


# =============================================================================
# RULE COVERAGE
# =============================================================================

def _record_rows(records: Union[pd.DataFrame, Iterable[Mapping]]) -> List[Mapping]:
    if isinstance(records, pd.DataFrame):
        return records.to_dict(orient="records")
    return list(records)


def rule_coverage_frame(
    rules: Iterable[Union[Rule, Mapping]],
    records: Union[pd.DataFrame, Iterable[Mapping]],
    context: Union[MatchContext, Mapping, None] = None,
    matcher: Optional[RuleSetMatcher] = None,
) -> pd.DataFrame:
    """
    Match a rule set against a batch of records.

    Output columns:
        record_index (position of the record in the batch)
        rule_id
        priority
        rank (0 = shown first for that record)
    """
    matcher = matcher or RuleSetMatcher()
    rules = [Rule.coerce(r) for r in rules]

    rows = []
    for record_index, record in enumerate(_record_rows(records)):
        for rank, rule in enumerate(matcher.match(rules, record, context)):
            rows.append({
                "record_index": record_index,
                "rule_id": rule.id,
                "priority": rule.priority,
                "rank": rank,
            })

    if not rows:
        return pd.DataFrame(columns=COVERAGE_COLUMNS)
    return pd.DataFrame(rows, columns=COVERAGE_COLUMNS)


def rule_coverage_summary(
    rules: Iterable[Union[Rule, Mapping]],
    records: Union[pd.DataFrame, Iterable[Mapping]],
    context: Union[MatchContext, Mapping, None] = None,
) -> pd.DataFrame:
    """Per-rule hit counts and hit rates over the batch, in rule order."""
    rules = [Rule.coerce(r) for r in rules]
    rows = _record_rows(records)
    coverage = rule_coverage_frame(rules, rows, context)

    hits = coverage.groupby("rule_id").size() if not coverage.empty else pd.Series(dtype=int)
    summary = pd.DataFrame({"rule_id": [rule.id for rule in rules]})
    summary["hits"] = summary["rule_id"].map(hits).fillna(0).astype(int)
    summary["hit_rate"] = summary["hits"] / len(rows) if rows else 0.0
    return summary


# =============================================================================
# REPORT
# =============================================================================

def write_audit_report(results: Iterable[AuditResult], output_dir: Union[str, Path]) -> Path:
    """Write gate results as JSON and return the report path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    results = list(results)
    payload = {
        "overall_status": "PASS" if all(r.passed for r in results) else "FAIL",
        "gates": [
            {**asdict(r), "success_rate": r.success_rate} for r in results
        ],
    }
    report_path = output_dir / "audit_report.json"
    with open(report_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    logger.info(f"Audit report written to {report_path}")
    return report_path


__all__ = [
    "AuditResult",
    "COLLISION_COLUMNS",
    "COVERAGE_COLUMNS",
    "term_collision_report",
    "term_collision_gate",
    "build_tag_graph",
    "unreachable_content",
    "unreachable_content_gate",
    "rule_coverage_frame",
    "rule_coverage_summary",
    "write_audit_report",
]
