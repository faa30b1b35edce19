"""Shared test helpers for schemaeq tests."""

from dataclasses import dataclass

from schemaeq.schema.models import (
    Constraint,
    ForeignKeyConstraint,
    Table,
    UniqueConstraint,
)
from schemaeq.types import AcceptRejectRule, Rule


@dataclass(eq=False)
class CheckConstraint(Constraint):
    """A constraint variant the constraint step does not know about."""

    expression: str = ""


def make_table(name: str, *column_names: str) -> Table:
    """Create a Table with STRING columns of the given names."""
    table = Table(name=name)
    for col_name in column_names:
        table.add_column(col_name)
    return table


def make_unique(
    table: Table,
    *column_names: str,
    name: str = "uq",
    is_primary_key: bool = False,
    extended_properties: dict | None = None,
) -> UniqueConstraint:
    """Create a UniqueConstraint on ``table`` over existing or new columns."""
    columns = [table.get_column(c) or table.add_column(c) for c in column_names]
    constraint = UniqueConstraint(
        name=name,
        columns=columns,
        is_primary_key=is_primary_key,
        extended_properties=extended_properties or {},
    )
    table.add_constraint(constraint)
    return constraint


def make_foreign_key(
    table: Table,
    related_table: Table,
    column_names: list[str],
    related_column_names: list[str],
    name: str = "fk",
    accept_reject_rule: AcceptRejectRule = AcceptRejectRule.NONE,
    delete_rule: Rule = Rule.CASCADE,
    update_rule: Rule = Rule.CASCADE,
    extended_properties: dict | None = None,
) -> ForeignKeyConstraint:
    """Create a ForeignKeyConstraint from ``table`` to ``related_table``."""
    columns = [table.get_column(c) or table.add_column(c) for c in column_names]
    related_columns = [
        related_table.get_column(c) or related_table.add_column(c)
        for c in related_column_names
    ]
    constraint = ForeignKeyConstraint(
        name=name,
        related_table=related_table,
        columns=columns,
        related_columns=related_columns,
        accept_reject_rule=accept_reject_rule,
        delete_rule=delete_rule,
        update_rule=update_rule,
        extended_properties=extended_properties or {},
    )
    table.add_constraint(constraint)
    return constraint


def make_fk_pair(**overrides) -> tuple[ForeignKeyConstraint, ForeignKeyConstraint]:
    """Create two identical foreign keys on separate table graphs.

    Keyword overrides apply to the subject only.
    """

    def build(**kwargs) -> ForeignKeyConstraint:
        users = make_table("users", "id")
        orders = make_table("orders", "id", "user_id")
        return make_foreign_key(
            orders, users, ["user_id"], ["id"], name="fk_orders_users", **kwargs
        )

    return build(**overrides), build()
