"""
Label matching for glossary highlighting.

The page highlighter walks short text labels ("Deal Stage:", "Contacts (2)")
and asks which glossary entry, if any, the label names. Terms are tried
longest first so "annual recurring revenue" wins over "revenue".
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Iterable, List, Optional, Tuple, Union

from contentmatch.core.types import MATCH_TYPE_STARTS_WITH, GlossaryEntry
from contentmatch.utils.text import normalize_label

DEFAULT_MIN_TERM_LENGTH = 2

TRAILING_PUNCT_RX = re.compile(r"\s*[:?]\s*$")
TRAILING_COUNT_RX = re.compile(r"\s*\(\d+\)\s*$")

SortedTerm = Tuple[str, GlossaryEntry]


def build_sorted_term_list(
    entries: Iterable[Union[GlossaryEntry, Mapping]],
    min_length: int = DEFAULT_MIN_TERM_LENGTH,
) -> List[SortedTerm]:
    """
    Build (normalized term, entry) pairs, longest term first.

    Disabled entries and entries without a trigger are skipped, as are
    normalized terms shorter than ``min_length``. Equal-length terms keep
    input order.
    """
    terms: List[SortedTerm] = []
    for raw in entries or []:
        entry = GlossaryEntry.coerce(raw)
        if entry.enabled is False or not entry.primary_trigger:
            continue
        for trigger in [entry.primary_trigger, *entry.aliases]:
            normalized = normalize_label(trigger)
            if len(normalized) >= min_length:
                terms.append((normalized, entry))

    terms.sort(key=lambda pair: -len(pair[0]))
    return terms


def clean_label(text: Optional[str]) -> str:
    """Normalize a label and strip a trailing ':'/'?' and a trailing '(n)' count."""
    normalized = normalize_label(text)
    normalized = TRAILING_PUNCT_RX.sub("", normalized)
    return TRAILING_COUNT_RX.sub("", normalized)


def is_plural_variant(label: str, term: str) -> bool:
    """True when label equals term or a simple English plural of it."""
    if label == term or label == term + "s" or label == term + "es":
        return True
    return term.endswith("y") and label == term[:-1] + "ies"


def label_matches(label: str, term: str, match_type: Optional[str]) -> bool:
    if match_type == MATCH_TYPE_STARTS_WITH:
        return label.startswith(term)
    return is_plural_variant(label, term)


def match_label(text: Optional[str], sorted_terms: Iterable[SortedTerm]) -> Optional[GlossaryEntry]:
    """
    Return the glossary entry a page label refers to, or None.

    Args:
        text: Raw label text from the page.
        sorted_terms: Output of build_sorted_term_list.
    """
    label = clean_label(text)
    if not label:
        return None

    for term, entry in sorted_terms:
        if label_matches(label, term, entry.match_type):
            return entry
    return None


__all__ = [
    "DEFAULT_MIN_TERM_LENGTH",
    "SortedTerm",
    "build_sorted_term_list",
    "clean_label",
    "is_plural_variant",
    "label_matches",
    "match_label",
]
