"""
Text processing utilities for contentmatch.

This module provides the string handling shared by the operator table,
the recommendation sorter and the glossary cache:
- Scalar-to-text rendering for case-insensitive comparisons
- Lenient numeric parsing of display-formatted values
- Trigger normalization for term map keys
- Locale-style sort keys for title ordering
"""

import re
import unicodedata
from typing import Optional, Tuple, Union

Scalar = Union[str, int, float, bool, None]

_NON_NUMERIC_RX = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RX = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)")
_ZERO_WIDTH_RX = re.compile(r"[\u200B-\u200D\uFEFF]")


def scalar_text(value: Scalar) -> str:
    """
    Render a record or rule scalar as the text a user would have seen.

    Integral floats drop their fractional part and booleans render in
    lower case, so ``15000.0`` compares equal to ``"15000"`` and ``True``
    to ``"true"``.

    Args:
        value: A scalar field value.

    Returns:
        Text form of the value ("" for None).

    Example:
        >>> scalar_text(15000.0)
        '15000'
        >>> scalar_text(True)
        'true'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_number(value: Scalar) -> Optional[float]:
    """
    Parse a display-formatted number such as ``$125,000`` or ``-12.5%``.

    Every character that is not a digit, ``.`` or ``-`` is stripped, then the
    longest leading decimal prefix is read. Numbers pass through untouched.

    Args:
        value: Record or rule value.

    Returns:
        The parsed float, or None when nothing numeric remains.

    Example:
        >>> parse_number("$125,000")
        125000.0
        >>> parse_number("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        return float(value)

    cleaned = _NON_NUMERIC_RX.sub("", str(value))
    match = _LEADING_NUMBER_RX.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def normalize_trigger(text: Optional[str]) -> str:
    """Lower-case and trim a glossary trigger or alias."""
    if not text:
        return ""
    return str(text).strip().lower()


def normalize_label(text: Optional[str]) -> str:
    """
    Normalize page label text for glossary matching.

    Removes zero-width characters that rich-text editors leave behind,
    trims, and lower-cases.
    """
    if not text:
        return ""
    return _ZERO_WIDTH_RX.sub("", str(text)).strip().lower()


def locale_sort_key(text: Optional[str]) -> Tuple[str, str, str]:
    """
    Sort key approximating a locale-aware string comparison.

    Primary ordering ignores accents and case; remaining ties are broken
    case-insensitively with accents, then with lower case before upper case.

    Example:
        >>> sorted(["beta", "Alpha", "alpha"], key=locale_sort_key)
        ['alpha', 'Alpha', 'beta']
    """
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), text.casefold(), text.swapcase())
