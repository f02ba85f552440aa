"""Coarse object type / pipeline / stage gates applied before condition logic."""

from __future__ import annotations

from typing import List, Optional, Tuple

from contentmatch.core.types import MatchContext, Targeted


def _gates(target: Targeted, context: MatchContext) -> List[Tuple[str, List[str], Optional[str]]]:
    return [
        ("objectType", target.object_types, context.object_type),
        ("pipeline", target.pipelines, context.pipeline),
        ("stage", target.stages, context.stage),
    ]


def gate_failure(target: Targeted, context: MatchContext) -> Optional[str]:
    """
    Return the name of the first gate the target fails, or None if all pass.

    A gate with an empty allow-list is unrestricted. A non-empty allow-list
    fails when the context value is absent or not a member.
    """
    for gate_name, allowed, current in _gates(target, context):
        if allowed and (not current or current not in allowed):
            return gate_name
    return None


def passes_context_gates(target: Targeted, context: MatchContext) -> bool:
    return gate_failure(target, context) is None


__all__ = [
    "gate_failure",
    "passes_context_gates",
]
