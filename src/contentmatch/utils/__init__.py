"""
Utility modules for contentmatch.

Submodules:
    text: Text utilities (scalar rendering, numeric parsing, trigger normalization)
    serialize: Normalization of numpy/pandas cells into plain Python values
"""

from contentmatch.utils.text import (
    Scalar,
    scalar_text,
    parse_number,
    normalize_trigger,
    normalize_label,
    locale_sort_key,
)
from contentmatch.utils.serialize import normalize_scalar, normalize_id_list

__all__ = [
    # Text utilities
    "Scalar",
    "scalar_text",
    "parse_number",
    "normalize_trigger",
    "normalize_label",
    "locale_sort_key",
    # Serialization utilities
    "normalize_scalar",
    "normalize_id_list",
]
