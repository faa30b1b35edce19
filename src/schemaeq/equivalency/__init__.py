"""Equivalency engine: steps, member rules, options and failure reporting."""

from schemaeq.equivalency.constraint import (
    ConstraintEquivalencyStep,
    compare_constraint_columns,
)
from schemaeq.equivalency.context import Comparands, EquivalencyValidationContext
from schemaeq.equivalency.execution import AssertionChain, Failure
from schemaeq.equivalency.options import EquivalencyOptions, load_options
from schemaeq.equivalency.validator import EquivalencyStep, EquivalencyValidator

__all__ = [
    "ConstraintEquivalencyStep",
    "compare_constraint_columns",
    "Comparands",
    "EquivalencyValidationContext",
    "AssertionChain",
    "Failure",
    "EquivalencyOptions",
    "load_options",
    "EquivalencyStep",
    "EquivalencyValidator",
]
