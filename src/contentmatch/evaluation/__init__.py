"""
Configuration audits for rule sets and glossary entries.

Submodules:
    audits: collision, reachability and coverage gates
"""

from contentmatch.evaluation.audits import (
    AuditResult,
    build_tag_graph,
    rule_coverage_frame,
    rule_coverage_summary,
    term_collision_gate,
    term_collision_report,
    unreachable_content,
    unreachable_content_gate,
    write_audit_report,
)

__all__ = [
    "AuditResult",
    "build_tag_graph",
    "rule_coverage_frame",
    "rule_coverage_summary",
    "term_collision_gate",
    "term_collision_report",
    "unreachable_content",
    "unreachable_content_gate",
    "write_audit_report",
]
