#!/usr/bin/env python3
"""
Run contentmatch against JSON documents.

Commands:
    match        banners/plays for one record
    recommend    content recommendations for one record
    build-cache  glossary term map cache
    label        resolve page labels to glossary entries
    audit        glossary collision and content reachability gates

Usage:
    python -m contentmatch.run_matching match --rules rules.json --record record.json --object-type deal
    python -m contentmatch.run_matching recommend --data recommendations.json --record record.json
    python -m contentmatch.run_matching build-cache --entries wiki.json --output output
    python -m contentmatch.run_matching audit --entries wiki.json --data recommendations.json
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from contentmatch.config import EngineConfig, configure_logging
from contentmatch.core.exceptions import PayloadError
from contentmatch.core.types import MatchContext
from contentmatch.evaluation.audits import (
    term_collision_gate,
    unreachable_content_gate,
    write_audit_report,
)
from contentmatch.glossary.labels import build_sorted_term_list, match_label
from contentmatch.glossary.term_cache import build_term_map_cache
from contentmatch.matching.recommendations import get_recommendations, group_by_category
from contentmatch.matching.rules import match_rules

logger = logging.getLogger(__name__)


# =============================================================================
# LOADING
# =============================================================================

def load_json_document(path: str) -> Any:
    """Read a JSON document, raising PayloadError when it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"{path}: invalid JSON ({exc})") from exc


def load_collection(path: str, *keys: str) -> List[Dict[str, Any]]:
    """
    Load a list either stored bare or under one of ``keys``.

    Raises:
        PayloadError: If the document holds neither shape.
    """
    document = load_json_document(path)
    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        for key in keys:
            if isinstance(document.get(key), list):
                return document[key]
    raise PayloadError(f"{path}: expected a list or an object with one of {list(keys)}")


def load_record(path: str) -> Dict[str, Any]:
    document = load_json_document(path)
    if not isinstance(document, dict):
        raise PayloadError(f"{path}: record must be a JSON object")
    return document.get("properties", document)


def context_from_args(args: argparse.Namespace) -> MatchContext:
    return MatchContext(
        object_type=args.object_type,
        pipeline=args.pipeline,
        stage=args.stage,
    )


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_match(args: argparse.Namespace, config: EngineConfig) -> int:
    rules = load_collection(args.rules, "rules", "banners", "plays")
    record = load_record(args.record)
    matches = match_rules(rules, record, context_from_args(args))

    print(f"Matched {len(matches)} of {len(rules)} rules")
    for rule in matches:
        print(f"  [{rule.priority}] {rule.id} {rule.name or ''}".rstrip())
    return 0


def cmd_recommend(args: argparse.Namespace, config: EngineConfig) -> int:
    data = load_json_document(args.data)
    if not isinstance(data, dict):
        raise PayloadError(f"{args.data}: expected an object with tagRules/recommendedContent/contentTags")
    record = load_record(args.record)
    result = get_recommendations(data, record, context_from_args(args))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"Active tags: {', '.join(result.active_tags) or '(none)'}")
    grouped = group_by_category(result.recommendations, fallback=config.fallback_category)
    for category, entries in grouped.items():
        print(f"{category}:")
        for entry in entries:
            tag_names = ", ".join(tag.name for tag in entry.tags)
            suffix = f" ({tag_names})" if tag_names else ""
            print(f"  [{entry.item.priority}] {entry.item.title}{suffix}")
    return 0


def cmd_build_cache(args: argparse.Namespace, config: EngineConfig) -> int:
    entries = load_collection(args.entries, "wikiEntries", "entries")
    cache = build_term_map_cache(entries)

    output_dir = Path(args.output) if args.output else config.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    cache_path = output_dir / "term_map_cache.json"
    with open(cache_path, "w", encoding="utf-8") as fh:
        json.dump(cache.to_dict(), fh, indent=2)

    print(f"Cached {len(cache.term_map)} triggers for {len(cache.entries_by_id)} entries")
    print(f"Written to: {cache_path}")
    return 0


def cmd_label(args: argparse.Namespace, config: EngineConfig) -> int:
    entries = load_collection(args.entries, "wikiEntries", "entries")
    sorted_terms = build_sorted_term_list(entries, min_length=config.min_term_length)

    for text in args.labels:
        entry = match_label(text, sorted_terms)
        target = f"{entry.id} ({entry.primary_trigger})" if entry else "-"
        print(f"{text!r}: {target}")
    return 0


def cmd_audit(args: argparse.Namespace, config: EngineConfig) -> int:
    results = []
    if args.entries:
        results.append(term_collision_gate(load_collection(args.entries, "wikiEntries", "entries")))
    if args.data:
        data = load_json_document(args.data)
        if not isinstance(data, dict):
            raise PayloadError(f"{args.data}: expected an object with tagRules/recommendedContent")
        results.append(unreachable_content_gate(
            data.get("tagRules") or data.get("tag_rules") or [],
            data.get("recommendedContent") or data.get("recommended_content") or [],
        ))
    if not results:
        print("Nothing to audit: pass --entries and/or --data")
        return 2

    output_dir = Path(args.output) if args.output else config.output_dir
    report_path = write_audit_report(results, output_dir)

    for result in results:
        status = "[+]" if result.passed else "[x]"
        print(f"{status} {result.gate_id}: {result.succeeded}/{result.total}")
        if result.details:
            print(f"    {result.details}")
    print(f"Report saved to: {report_path}")
    return 0 if all(r.passed for r in results) else 1


# =============================================================================
# CLI
# =============================================================================

def _add_context_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--object-type", default=None, help="Object type of the record (deal, contact, ...)")
    parser.add_argument("--pipeline", default=None, help="Pipeline id of the record")
    parser.add_argument("--stage", default=None, help="Stage id of the record")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate content targeting rules")
    parser.add_argument("--log-level", default=None, help="Logging level (overrides CONTENTMATCH_LOG_LEVEL)")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    match = subparsers.add_parser("match", help="Match banner/play rules against a record")
    match.add_argument("--rules", required=True, help="JSON list of rules")
    match.add_argument("--record", required=True, help="JSON object of record properties")
    _add_context_args(match)
    match.set_defaults(handler=cmd_match)

    recommend = subparsers.add_parser("recommend", help="Recommend content for a record")
    recommend.add_argument("--data", required=True, help="JSON object with tagRules, recommendedContent, contentTags")
    recommend.add_argument("--record", required=True, help="JSON object of record properties")
    recommend.add_argument("--json", action="store_true", help="Print the full result as JSON")
    _add_context_args(recommend)
    recommend.set_defaults(handler=cmd_recommend)

    cache = subparsers.add_parser("build-cache", help="Build the glossary term map cache")
    cache.add_argument("--entries", required=True, help="JSON list of glossary entries")
    cache.add_argument("--output", default=None, help="Output directory")
    cache.set_defaults(handler=cmd_build_cache)

    label = subparsers.add_parser("label", help="Resolve page labels to glossary entries")
    label.add_argument("--entries", required=True, help="JSON list of glossary entries")
    label.add_argument("labels", nargs="+", help="Label text as shown on the page")
    label.set_defaults(handler=cmd_label)

    audit = subparsers.add_parser("audit", help="Run configuration audits")
    audit.add_argument("--entries", default=None, help="JSON list of glossary entries")
    audit.add_argument("--data", default=None, help="JSON object with tagRules and recommendedContent")
    audit.add_argument("--output", default=None, help="Output directory")
    audit.set_defaults(handler=cmd_audit)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = EngineConfig.from_env(args.env_file)
    configure_logging(args.log_level or config.log_level)
    logger.debug(f"Running {args.command} with {config}")

    return args.handler(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
