"""Equivalency step for unique and foreign key constraints."""

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from schemaeq.equivalency.context import Comparands, EquivalencyValidationContext
from schemaeq.equivalency.execution import AssertionChain, escape, join_using_writing_style
from schemaeq.equivalency.members import Member, MemberSelectionContext, Node
from schemaeq.equivalency.validator import EquivalencyStep, EquivalencyValidator
from schemaeq.schema.models import (
    Column,
    Constraint,
    ForeignKeyConstraint,
    Table,
    UniqueConstraint,
)
from schemaeq.types import ColumnName, EquivalencyResult

if TYPE_CHECKING:
    from schemaeq.equivalency.options import EquivalencyOptions

logger = logging.getLogger(__name__)


class ConstraintEquivalencyStep(EquivalencyStep):
    """Compare two constraints attribute by attribute.

    Constraints live polymorphically in a table's constraint list, so members
    are selected from the expectation's runtime type. The owning and related
    tables are compared by name only; they refer back to the constraint and
    are never walked. The extended properties bag is the only value handed
    back to the engine for a nested comparison.

    Always proves equivalency, whatever failures it records.
    """

    handled_type = Constraint

    def on_handle(self, comparands, context, validator):
        chain = context.chain.for_context(context)
        subject = comparands.subject
        expectation = comparands.expectation

        if not isinstance(subject, Constraint):
            chain.fail_with(
                "Expected {context:constraint} to be a value of type Constraint{reason}, but found {0}.",
                type(subject),
            )
            return EquivalencyResult.EQUIVALENCY_PROVEN

        selected_members = {
            member.name: member
            for member in get_members_from_expectation(
                comparands, context.current_node, context.options
            )
        }
        logger.debug(
            f"Comparing constraint {expectation.name!r} "
            f"({type(expectation).__name__}) on {sorted(selected_members)}"
        )

        _compare_common_properties(
            context, validator, subject, expectation, selected_members, chain
        )

        matching_type = type(subject) is type(expectation)
        chain.for_condition(matching_type).fail_with(
            "Expected {context:constraint} to be of type {0}{reason}, but found {1}.",
            type(expectation),
            type(subject),
        )
        if not matching_type:
            return EquivalencyResult.EQUIVALENCY_PROVEN

        if isinstance(subject, UniqueConstraint) and isinstance(
            expectation, UniqueConstraint
        ):
            _compare_unique_constraints(subject, expectation, selected_members, chain)
        elif isinstance(subject, ForeignKeyConstraint) and isinstance(
            expectation, ForeignKeyConstraint
        ):
            _compare_foreign_key_constraints(
                subject, expectation, selected_members, chain
            )
        else:
            chain.fail_with(
                "Don't know how to handle {constraint:a Constraint} of type {0}.",
                type(subject),
            )

        return EquivalencyResult.EQUIVALENCY_PROVEN


def _table_name(table: Optional[Table]) -> Optional[str]:
    return table.name if table is not None else None


def _compare_common_properties(
    context: EquivalencyValidationContext,
    validator: EquivalencyValidator,
    subject: Constraint,
    expectation: Constraint,
    selected_members: dict[str, Member],
    chain: AssertionChain,
) -> None:
    if "name" in selected_members:
        chain.for_condition(subject.name == expectation.name).fail_with(
            "Expected {context:constraint} to have a name of {0}{reason}, but found {1}.",
            expectation.name,
            subject.name,
        )

    if "table" in selected_members:
        expected_table = _table_name(expectation.table)
        actual_table = _table_name(subject.table)
        chain.for_condition(actual_table == expected_table).fail_with(
            "Expected {context:constraint} to be associated with a table named {0}{reason}, but found {1}.",
            expected_table,
            actual_table,
        )

    expectation_member = selected_members.get("extended_properties")
    if expectation_member is not None:
        matching_member = find_match_for(
            expectation_member, context.current_node, subject, context.options, chain
        )
        # No match means nothing to assert.
        if matching_member is not None:
            nested = Comparands(
                subject=matching_member.get_value(subject),
                expectation=expectation_member.get_value(expectation),
                compile_time_type=expectation_member.type,
            )
            validator.assert_equivalency_of(
                nested, context.as_nested_member(expectation_member)
            )


def _role(is_primary_key: bool) -> str:
    return "Primary Key" if is_primary_key else "Foreign Key"


def _compare_unique_constraints(
    subject: UniqueConstraint,
    expectation: UniqueConstraint,
    selected_members: dict[str, Member],
    chain: AssertionChain,
) -> None:
    if "is_primary_key" in selected_members:
        chain.for_condition(subject.is_primary_key == expectation.is_primary_key).fail_with(
            "Expected {context:constraint} to be a "
            + _role(expectation.is_primary_key)
            + " constraint{reason}, but found a "
            + _role(subject.is_primary_key)
            + " constraint."
        )

    if "columns" in selected_members:
        compare_constraint_columns(subject.columns, expectation.columns, chain)


def _compare_foreign_key_constraints(
    subject: ForeignKeyConstraint,
    expectation: ForeignKeyConstraint,
    selected_members: dict[str, Member],
    chain: AssertionChain,
) -> None:
    if "related_table" in selected_members:
        expected_table = _table_name(expectation.related_table)
        actual_table = _table_name(subject.related_table)
        chain.for_condition(actual_table == expected_table).fail_with(
            "Expected {context:constraint} to have a related table named {0}{reason}, but found {1}.",
            expected_table,
            actual_table,
        )

    if "accept_reject_rule" in selected_members:
        chain.for_condition(
            subject.accept_reject_rule == expectation.accept_reject_rule
        ).fail_with(
            "Expected {context:constraint} to have accept_reject_rule AcceptRejectRule.{0}{reason}, "
            "but found AcceptRejectRule.{1}.",
            expectation.accept_reject_rule,
            subject.accept_reject_rule,
        )

    if "delete_rule" in selected_members:
        chain.for_condition(subject.delete_rule == expectation.delete_rule).fail_with(
            "Expected {context:constraint} to have delete_rule Rule.{0}{reason}, but found Rule.{1}.",
            expectation.delete_rule,
            subject.delete_rule,
        )

    if "update_rule" in selected_members:
        chain.for_condition(subject.update_rule == expectation.update_rule).fail_with(
            "Expected {context:constraint} to have update_rule Rule.{0}{reason}, but found Rule.{1}.",
            expectation.update_rule,
            subject.update_rule,
        )

    if "columns" in selected_members:
        compare_constraint_columns(subject.columns, expectation.columns, chain)

    if "related_columns" in selected_members:
        compare_constraint_columns(
            subject.related_columns, expectation.related_columns, chain
        )


def _ordered_names(columns: Iterable[Column]) -> list[ColumnName]:
    return list(dict.fromkeys(col.name for col in columns))


def _columns_phrase(names: list[ColumnName]) -> str:
    if len(names) == 1:
        return f"column {escape(str(names[0]))}"
    return f"columns {escape(join_using_writing_style(names))}"


def compare_constraint_columns(
    subject_columns: Iterable[Column],
    expectation_columns: Iterable[Column],
    chain: AssertionChain,
) -> bool:
    """Compare two column lists as sets of names.

    Order and duplicates are ignored. Missing and unexpected columns are
    reported together in a single failure. Returns True when the sets match.
    """
    subject_names = _ordered_names(subject_columns)
    expectation_names = _ordered_names(expectation_columns)

    subject_set = set(subject_names)
    expectation_set = set(expectation_names)
    missing = [name for name in expectation_names if name not in subject_set]
    extra = [name for name in subject_names if name not in expectation_set]

    parts = []
    if missing:
        parts.append(
            "Expected {context:constraint} to include "
            + _columns_phrase(missing)
            + "{reason}, but constraint does not include "
            + ("that column." if len(missing) == 1 else "these columns.")
        )
    if extra:
        parts.append(
            "Did not expect {context:constraint} to include "
            + _columns_phrase(extra)
            + "{reason}, but it does."
        )

    return chain.for_condition(not parts).fail_with(" ".join(parts))


def find_match_for(
    expectation_member: Member,
    current_node: Node,
    subject: Any,
    options: "EquivalencyOptions",
    chain: AssertionChain,
) -> Optional[Member]:
    """Return the first subject member produced by the configured matching rules."""
    for rule in options.matching_rules:
        match = rule.match(expectation_member, subject, current_node, options, chain)
        if match is not None:
            return match
    return None


def get_members_from_expectation(
    comparands: Comparands, current_node: Node, options: "EquivalencyOptions"
) -> list[Member]:
    """Run the selection rules against the expectation's runtime type.

    A compile-time type of Constraint would only select base class members, so
    the discovered runtime type is used for both sides of the selection context.
    """
    runtime_type = comparands.runtime_type
    selection_context = MemberSelectionContext(
        compile_time_type=runtime_type,
        runtime_type=runtime_type,
        options=options,
    )
    members: list[Member] = []
    for rule in options.selection_rules:
        members = rule.select_members(current_node, members, selection_context)
    return members
