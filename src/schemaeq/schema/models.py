"""Schema representation classes."""

from dataclasses import dataclass, field
from typing import Any, Optional

from schemaeq.types import AcceptRejectRule, Rule


@dataclass(eq=False)
class Column:
    """Column definition.

    Only the name takes part in constraint comparison. The owning table is a
    back-reference and is excluded from repr.
    """

    name: str
    type: str = "STRING"
    nullable: bool = True
    table: Optional["Table"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Strip whitespace from type."""
        self.type = self.type.strip()


@dataclass(eq=False)
class Constraint:
    """Base class for table constraints.

    The owning table is a weak relation: it points back at a table whose
    constraint list contains this constraint, so it is only ever read for its
    name.
    """

    name: str
    table: Optional["Table"] = field(default=None, repr=False)
    extended_properties: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class UniqueConstraint(Constraint):
    """Uniqueness or primary key constraint over one or more columns."""

    columns: list[Column] = field(default_factory=list)
    is_primary_key: bool = False


@dataclass(eq=False)
class ForeignKeyConstraint(Constraint):
    """Foreign key constraint.

    ``columns`` and ``related_columns`` are paired by position; ``related_table``
    is compared by name only.
    """

    related_table: Optional["Table"] = field(default=None, repr=False)
    columns: list[Column] = field(default_factory=list)
    related_columns: list[Column] = field(default_factory=list)
    accept_reject_rule: AcceptRejectRule = AcceptRejectRule.NONE
    delete_rule: Rule = Rule.CASCADE
    update_rule: Rule = Rule.CASCADE


@dataclass(eq=False)
class Table:
    """Table definition."""

    name: str
    columns: list[Column] = field(default_factory=list)
    constraints: list[Constraint] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Bind back-references of columns and constraints passed at construction."""
        for col in self.columns:
            col.table = self
        for constraint in self.constraints:
            constraint.table = self

    def add_column(self, name: str, type: str = "STRING", nullable: bool = True) -> Column:
        """Create a column owned by this table and return it."""
        if self.get_column(name) is not None:
            raise ValueError(f"Column '{name}' already exists in table '{self.name}'")
        col = Column(name=name, type=type, nullable=nullable, table=self)
        self.columns.append(col)
        return col

    def add_constraint(self, constraint: Constraint) -> Constraint:
        """Attach a constraint to this table; names are unique per table."""
        if self.get_constraint(constraint.name) is not None:
            raise ValueError(
                f"Constraint '{constraint.name}' already exists in table '{self.name}'"
            )
        constraint.table = self
        self.constraints.append(constraint)
        return constraint

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def get_constraint(self, name: str) -> Optional[Constraint]:
        """Get a constraint by name."""
        for constraint in self.constraints:
            if constraint.name == name:
                return constraint
        return None

    @property
    def primary_key(self) -> Optional[UniqueConstraint]:
        """Return the primary key constraint, if any."""
        for constraint in self.constraints:
            if isinstance(constraint, UniqueConstraint) and constraint.is_primary_key:
                return constraint
        return None

    def foreign_keys(self) -> list[ForeignKeyConstraint]:
        """Return foreign key constraints in declaration order."""
        return [c for c in self.constraints if isinstance(c, ForeignKeyConstraint)]


@dataclass
class Schema:
    """Complete schema definition."""

    tables: dict[str, Table]

    def get_table(self, name: str) -> Optional[Table]:
        """Get a table by name."""
        return self.tables.get(name)

    def table_names(self) -> set[str]:
        """Get all table names."""
        return set(self.tables.keys())
