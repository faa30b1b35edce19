"""Core type definitions for schemaeq."""

from enum import Enum
from typing import TypeAlias

ColumnName: TypeAlias = str

__all__ = [
    "ColumnName",
    "Rule",
    "AcceptRejectRule",
    "EquivalencyResult",
]


class Rule(Enum):
    """Action taken on related rows when a referenced row is deleted or updated."""

    NONE = "none"
    CASCADE = "cascade"
    SET_NULL = "set_null"
    SET_DEFAULT = "set_default"


class AcceptRejectRule(Enum):
    """Action taken on child rows when changes to a parent row are accepted or rejected."""

    NONE = "none"
    CASCADE = "cascade"


class EquivalencyResult(Enum):
    """Outcome of offering a pair of comparands to an equivalency step."""

    CONTINUE_WITH_NEXT = "continue_with_next"
    EQUIVALENCY_PROVEN = "equivalency_proven"
