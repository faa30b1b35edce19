"""Top-level entry points for constraint equivalency assertions.

Each call owns exactly one :class:`AssertionChain`; failures are collected
for the whole comparison and only then returned or raised.
"""

import logging
from typing import Any, Optional

from schemaeq.config import Config
from schemaeq.equivalency.context import Comparands, EquivalencyValidationContext
from schemaeq.equivalency.execution import (
    AssertionChain,
    Failure,
    escape,
    format_value,
    join_using_writing_style,
)
from schemaeq.equivalency.members import Node
from schemaeq.equivalency.options import EquivalencyOptions
from schemaeq.equivalency.validator import EquivalencyValidator
from schemaeq.exceptions import EquivalencyAssertionError
from schemaeq.schema.models import Constraint, Table

logger = logging.getLogger(__name__)

__all__ = [
    "check_constraint_equivalency",
    "assert_constraint_equivalent",
    "check_table_constraints",
    "assert_table_constraints_equivalent",
]


def check_constraint_equivalency(
    subject: Any,
    expectation: Constraint,
    because: str = "",
    *because_args: Any,
    options: Optional[EquivalencyOptions] = None,
) -> list[Failure]:
    """Compare two constraints and return every failure found.

    Without explicit ``options``, they are built from :meth:`Config.from_env`.
    """
    chain = AssertionChain.create(because, *because_args)
    context = EquivalencyValidationContext(
        current_node=Node.root(),
        options=_resolve_options(options),
        chain=chain,
    )
    EquivalencyValidator().assert_equivalency_of(
        Comparands(subject=subject, expectation=expectation, compile_time_type=Constraint),
        context,
    )
    return chain.failures


def assert_constraint_equivalent(
    subject: Any,
    expectation: Constraint,
    because: str = "",
    *because_args: Any,
    options: Optional[EquivalencyOptions] = None,
) -> None:
    """Assert that two constraints are equivalent.

    Raises:
        EquivalencyAssertionError: Listing every failure, if any.
    """
    failures = check_constraint_equivalency(
        subject, expectation, because, *because_args, options=options
    )
    _raise_if_failed(failures)


def check_table_constraints(
    subject_table: Table,
    expectation_table: Table,
    because: str = "",
    *because_args: Any,
    options: Optional[EquivalencyOptions] = None,
) -> list[Failure]:
    """Compare the constraint lists of two tables, pairing constraints by name.

    Missing and unexpected constraint names are each reported once; every
    pair found on both sides is compared with the constraint step.
    """
    options = _resolve_options(options)
    chain = AssertionChain.create(because, *because_args)
    table_node = Node(
        path=expectation_table.name,
        description=f"table {expectation_table.name}",
    )
    context = EquivalencyValidationContext(
        current_node=table_node, options=options, chain=chain
    )
    table_chain = chain.for_context(context)

    subject_by_name = {c.name: c for c in subject_table.constraints}
    expectation_by_name = {c.name: c for c in expectation_table.constraints}

    missing = [name for name in expectation_by_name if name not in subject_by_name]
    extra = [name for name in subject_by_name if name not in expectation_by_name]

    if missing:
        table_chain.fail_with(
            "Expected {context:table} to have "
            + _constraints_phrase(missing)
            + "{reason}, but it does not."
        )
    if extra:
        table_chain.fail_with(
            "Did not expect {context:table} to have "
            + _constraints_phrase(extra)
            + "{reason}, but it does."
        )

    validator = EquivalencyValidator()
    constraints_context = EquivalencyValidationContext(
        current_node=table_node.child("constraints"), options=options, chain=chain
    )
    for name, expectation in expectation_by_name.items():
        subject = subject_by_name.get(name)
        if subject is None:
            continue
        validator.assert_equivalency_of(
            Comparands(subject=subject, expectation=expectation, compile_time_type=Constraint),
            constraints_context.as_item(format_value(name)),
        )

    logger.debug(
        f"Compared {len(expectation_by_name)} constraint(s) of table "
        f"{expectation_table.name!r}: {len(chain.failures)} failure(s)"
    )
    return chain.failures


def assert_table_constraints_equivalent(
    subject_table: Table,
    expectation_table: Table,
    because: str = "",
    *because_args: Any,
    options: Optional[EquivalencyOptions] = None,
) -> None:
    """Assert that two tables carry equivalent constraints.

    Raises:
        EquivalencyAssertionError: Listing every failure, if any.
    """
    failures = check_table_constraints(
        subject_table, expectation_table, because, *because_args, options=options
    )
    _raise_if_failed(failures)


def _resolve_options(options: Optional[EquivalencyOptions]) -> EquivalencyOptions:
    """Fall back to options built from the SCHEMAEQ_* environment variables."""
    if options is None:
        return Config.from_env().build_options()
    return options


def _constraints_phrase(names: list[str]) -> str:
    noun = "constraint" if len(names) == 1 else "constraints"
    return f"{noun} " + escape(join_using_writing_style(names))


def _raise_if_failed(failures: list[Failure]) -> None:
    if failures:
        logger.info(f"Equivalency assertion failed with {len(failures)} failure(s)")
        raise EquivalencyAssertionError(failures)
