"""
Operator Table: The fixed set of comparisons a condition may use.

Every condition names one operator. The table maps that name to a predicate
over (record value, rule value). Record values are scalars; rule values are
always text and are coerced per operator.

Operator Set:
    equals / not_equals              - case-insensitive string (in)equality
    contains / not_contains          - case-insensitive substring
    starts_with / ends_with          - case-insensitive prefix / suffix
    greater_than / less_than         - numeric, display formatting stripped
    greater_equal / less_equal       - numeric, display formatting stripped
    is_empty / is_not_empty          - unary, None or blank after trim
    in_list / not_in_list            - comma separated, trimmed, case-insensitive

The table is built once, frozen, and passed by reference to evaluators, so
evaluation stays a pure function of its inputs.
"""

from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional

from contentmatch.utils.text import Scalar, parse_number, scalar_text

OperatorFn = Callable[[Scalar, str], bool]


class OperatorName(str, Enum):
    """Canonical operator names."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    IN_LIST = "in_list"
    NOT_IN_LIST = "not_in_list"


# Operators that only inspect the record value and are defined for missing fields.
UNARY_OPERATORS: FrozenSet[str] = frozenset({
    OperatorName.IS_EMPTY.value,
    OperatorName.IS_NOT_EMPTY.value,
})


# =============================================================================
# PREDICATES
# =============================================================================

def _lower(value: Scalar) -> str:
    return scalar_text(value).lower()


def _split_list(rule_value: str) -> List[str]:
    return [part.strip().lower() for part in scalar_text(rule_value).split(",")]


def _numeric(compare: Callable[[float, float], bool]) -> OperatorFn:
    def _op(record_value: Scalar, rule_value: str) -> bool:
        left = parse_number(record_value)
        right = parse_number(rule_value)
        if left is None or right is None:
            return False
        return compare(left, right)
    return _op


def is_empty(record_value: Scalar, rule_value: str = "") -> bool:
    """True iff the value is None or blank after trimming."""
    if record_value is None:
        return True
    return scalar_text(record_value).strip() == ""


def in_list(record_value: Scalar, rule_value: str) -> bool:
    return _lower(record_value).strip() in _split_list(rule_value)


_DEFAULT_OPERATORS: Dict[str, OperatorFn] = {
    OperatorName.EQUALS.value: lambda a, b: _lower(a) == _lower(b),
    OperatorName.NOT_EQUALS.value: lambda a, b: _lower(a) != _lower(b),
    OperatorName.CONTAINS.value: lambda a, b: _lower(b) in _lower(a),
    OperatorName.NOT_CONTAINS.value: lambda a, b: _lower(b) not in _lower(a),
    OperatorName.STARTS_WITH.value: lambda a, b: _lower(a).startswith(_lower(b)),
    OperatorName.ENDS_WITH.value: lambda a, b: _lower(a).endswith(_lower(b)),
    OperatorName.GREATER_THAN.value: _numeric(lambda x, y: x > y),
    OperatorName.LESS_THAN.value: _numeric(lambda x, y: x < y),
    OperatorName.GREATER_EQUAL.value: _numeric(lambda x, y: x >= y),
    OperatorName.LESS_EQUAL.value: _numeric(lambda x, y: x <= y),
    OperatorName.IS_EMPTY.value: is_empty,
    OperatorName.IS_NOT_EMPTY.value: lambda a, b="": not is_empty(a),
    OperatorName.IN_LIST.value: in_list,
    OperatorName.NOT_IN_LIST.value: lambda a, b: not in_list(a, b),
}


# =============================================================================
# REGISTRY
# =============================================================================

class OperatorTable:
    """
    Registry of operator name -> predicate.

    Enforces:
    - Single definition per operator name
    - Immutability after freeze()
    - Lookup by name, strict or optional
    """

    def __init__(self, operators: Optional[Dict[str, OperatorFn]] = None):
        self._operators: Dict[str, OperatorFn] = {}
        self._frozen: bool = False
        for name, fn in (operators or {}).items():
            self.register(name, fn)

    def register(self, name: str, fn: OperatorFn) -> None:
        """
        Register an operator.

        Raises:
            ValueError: If the name is already registered.
            RuntimeError: If the table is frozen.
        """
        if self._frozen:
            raise RuntimeError(f"Operator table is frozen. Cannot register '{name}'")

        if name in self._operators:
            raise ValueError(f"Operator '{name}' already registered")

        self._operators[name] = fn

    def freeze(self) -> "OperatorTable":
        """Freeze table - no more registrations allowed."""
        self._frozen = True
        return self

    def is_frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> OperatorFn:
        """
        Get operator by name.

        Raises:
            KeyError: If the operator is not registered.
        """
        if name not in self._operators:
            raise KeyError(f"Operator '{name}' not registered")
        return self._operators[name]

    def get_optional(self, name: str) -> Optional[OperatorFn]:
        """Get operator by name, returning None if not found."""
        return self._operators.get(name)

    def contains(self, name: str) -> bool:
        return name in self._operators

    def names(self) -> List[str]:
        """Registered operator names in registration order."""
        return list(self._operators)

    def extended(self, operators: Dict[str, OperatorFn]) -> "OperatorTable":
        """Return a new unfrozen table with these operators added."""
        table = OperatorTable(dict(self._operators))
        for name, fn in operators.items():
            table.register(name, fn)
        return table

    def __contains__(self, name: object) -> bool:
        return name in self._operators

    def __len__(self) -> int:
        return len(self._operators)


def build_default_operator_table() -> OperatorTable:
    """Build a frozen table holding the standard operator set."""
    return OperatorTable(_DEFAULT_OPERATORS).freeze()


DEFAULT_OPERATOR_TABLE = build_default_operator_table()


__all__ = [
    "OperatorFn",
    "OperatorName",
    "UNARY_OPERATORS",
    "OperatorTable",
    "build_default_operator_table",
    "DEFAULT_OPERATOR_TABLE",
    "is_empty",
    "in_list",
]
