"""
Glossary term map cache.

The tooltip highlighter needs a synchronous trigger -> entry lookup. This
module precomputes it from the glossary entries:

    term_map:      normalized trigger/alias -> entry id
    entries_by_id: entry id -> entry

Invariants:
- only enabled entries are present
- every key is trimmed and lower-cased; blank triggers are skipped
- each entry contributes its primary trigger plus every alias
- on a collision the entry processed last wins
- entries without a trigger are kept in entries_by_id only

The cache is rebuilt from scratch on every glossary save; the build is linear
in entries plus aliases and depends only on input order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Union

from contentmatch.core.types import GlossaryEntry
from contentmatch.utils.text import normalize_trigger

logger = logging.getLogger(__name__)


@dataclass
class TermMapCache:
    """Precomputed glossary lookup tables."""
    term_map: Dict[str, str] = field(default_factory=dict)
    entries_by_id: Dict[str, GlossaryEntry] = field(default_factory=dict)

    def lookup(self, text: Optional[str]) -> Optional[GlossaryEntry]:
        """Entry whose trigger or alias equals the text, ignoring case and padding."""
        key = normalize_trigger(text)
        if not key:
            return None
        entry_id = self.term_map.get(key)
        if entry_id is None:
            return None
        return self.entries_by_id.get(entry_id)

    def __contains__(self, text: object) -> bool:
        return normalize_trigger(text) in self.term_map  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self.term_map)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "termMap": dict(self.term_map),
            "entriesById": {
                entry_id: entry.to_dict() for entry_id, entry in self.entries_by_id.items()
            },
        }


def build_term_map_cache(
    entries: Optional[Iterable[Union[GlossaryEntry, Mapping]]],
) -> TermMapCache:
    """
    Build the term map cache from glossary entries.

    Args:
        entries: Glossary entries (or their dict forms) in display order.
            None is treated as an empty collection.

    Returns:
        TermMapCache with term_map and entries_by_id populated.

    Raises:
        TypeError: If entries is not iterable or holds non-entry values.

    Example:
        >>> cache = build_term_map_cache([
        ...     {"id": "a", "trigger": "MQL"},
        ...     {"id": "b", "term": "MQL"},
        ... ])
        >>> cache.term_map["mql"]
        'b'
    """
    cache = TermMapCache()

    for raw in entries or []:
        entry = GlossaryEntry.coerce(raw)
        if entry.enabled is False:
            continue

        cache.entries_by_id[entry.id] = entry

        primary = entry.primary_trigger
        if not primary:
            continue

        for trigger in [primary, *entry.aliases]:
            key = normalize_trigger(trigger)
            if key:
                cache.term_map[key] = entry.id

    logger.debug(
        f"Built term map cache: {len(cache.term_map)} triggers, "
        f"{len(cache.entries_by_id)} entries"
    )
    return cache


__all__ = [
    "TermMapCache",
    "build_term_map_cache",
]
