"""Schema definition and loading modules."""

from schemaeq.schema.loader import build_schema, load_schema
from schemaeq.schema.models import (
    Column,
    Constraint,
    ForeignKeyConstraint,
    Schema,
    Table,
    UniqueConstraint,
)

__all__ = [
    "build_schema",
    "load_schema",
    "Column",
    "Constraint",
    "ForeignKeyConstraint",
    "Schema",
    "Table",
    "UniqueConstraint",
]
