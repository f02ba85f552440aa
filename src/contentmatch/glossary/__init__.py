"""
Glossary lookup structures.

Modules:
    term_cache: trigger -> entry map rebuilt on every glossary save
    labels: longest-first label matching with plural tolerance
"""

from contentmatch.glossary.term_cache import TermMapCache, build_term_map_cache
from contentmatch.glossary.labels import (
    DEFAULT_MIN_TERM_LENGTH,
    build_sorted_term_list,
    clean_label,
    is_plural_variant,
    match_label,
)

__all__ = [
    "TermMapCache",
    "build_term_map_cache",
    "DEFAULT_MIN_TERM_LENGTH",
    "build_sorted_term_list",
    "clean_label",
    "is_plural_variant",
    "match_label",
]
