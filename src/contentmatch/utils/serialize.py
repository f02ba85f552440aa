"""
Serialization utilities for contentmatch.

Rules, records and glossary entries arrive from JSON payloads, database rows
or pandas DataFrames. These helpers flatten numpy scalars, arrays and NaN
markers into plain Python values before the engine sees them.
"""

from typing import Any, List

import numpy as np


def normalize_scalar(x: Any) -> Any:
    """
    Normalize a record cell to a plain Python scalar.

    - numpy integer/floating/bool -> int/float/bool
    - NaN (numpy or float) -> None
    - anything else -> unchanged

    Example:
        >>> normalize_scalar(np.int64(5))
        5
        >>> normalize_scalar(float("nan")) is None
        True
    """
    if isinstance(x, np.bool_):
        return bool(x)
    if isinstance(x, np.integer):
        return int(x)
    if isinstance(x, np.floating):
        x = float(x)
    if isinstance(x, float) and x != x:
        return None
    return x


def normalize_id_list(x: Any) -> List[str]:
    """
    Normalize list-like id columns to a plain list of strings.

    Handles the shapes id arrays take across payloads:
    - None -> empty list
    - numpy.ndarray / tuple / set -> list
    - a single string -> single-element list
    - falsy members are dropped

    Example:
        >>> normalize_id_list(np.array(["t1", "t2"]))
        ['t1', 't2']
        >>> normalize_id_list("deal")
        ['deal']
        >>> normalize_id_list(None)
        []
    """
    if x is None:
        return []

    if isinstance(x, np.ndarray):
        x = x.tolist()

    if isinstance(x, str):
        return [x] if x else []

    if isinstance(x, (list, tuple, set, frozenset)):
        return [str(item) for item in x if item is not None and item != ""]

    # Fallback for unexpected types
    return []
