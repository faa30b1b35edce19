"""Equivalency assertions for relational schema constraints."""

from schemaeq.assertions import (
    assert_constraint_equivalent,
    assert_table_constraints_equivalent,
    check_constraint_equivalency,
    check_table_constraints,
)
from schemaeq.config import Config, configure_logging
from schemaeq.equivalency.options import EquivalencyOptions
from schemaeq.exceptions import EquivalencyAssertionError, SchemaeqError
from schemaeq.schema.models import (
    Column,
    Constraint,
    ForeignKeyConstraint,
    Table,
    UniqueConstraint,
)
from schemaeq.types import AcceptRejectRule, Rule

__version__ = "0.1.0"

__all__ = [
    "assert_constraint_equivalent",
    "assert_table_constraints_equivalent",
    "check_constraint_equivalency",
    "check_table_constraints",
    "Config",
    "configure_logging",
    "EquivalencyOptions",
    "EquivalencyAssertionError",
    "SchemaeqError",
    "Column",
    "Constraint",
    "ForeignKeyConstraint",
    "Table",
    "UniqueConstraint",
    "AcceptRejectRule",
    "Rule",
]
