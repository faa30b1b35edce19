"""Load schema definitions from YAML files."""

import logging
from pathlib import Path

import yaml

from schemaeq.exceptions import SchemaLoadError
from schemaeq.schema.models import (
    Column,
    Constraint,
    ForeignKeyConstraint,
    Schema,
    Table,
    UniqueConstraint,
)
from schemaeq.types import AcceptRejectRule, Rule

logger = logging.getLogger(__name__)

VALID_TABLE_FIELDS = {
    "table",
    "description",
    "columns",
    "constraints",
}

VALID_COLUMN_FIELDS = {
    "name",
    "type",
    "nullable",
}

VALID_CONSTRAINT_FIELDS = {
    "name",
    "type",
    "primary_key",
    "columns",
    "related_table",
    "related_columns",
    "accept_reject_rule",
    "delete_rule",
    "update_rule",
    "extended_properties",
}

CONSTRAINT_TYPES = {"unique", "foreign_key"}


def load_schema(schema_path: Path) -> Schema:
    """Load schema from a directory of YAML files or a single file."""
    schema_path = Path(schema_path)
    if schema_path.is_file():
        table_dicts = _read_single_file(schema_path)
    elif schema_path.is_dir():
        table_dicts = _read_directory(schema_path)
    else:
        raise SchemaLoadError(f"Schema path does not exist: {schema_path}")
    return build_schema(table_dicts)


def _read_yaml(file_path: Path):
    try:
        with open(file_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Invalid YAML in {file_path}: {e}") from e
    if data is None:
        raise SchemaLoadError(f"Empty YAML file: {file_path}")
    return data


def _read_directory(directory: Path) -> list[dict]:
    """Read one table definition per *.yaml file."""
    return [_read_yaml(yaml_file) for yaml_file in sorted(directory.glob("*.yaml"))]


def _read_single_file(file_path: Path) -> list[dict]:
    """Read a `tables:` list or a single table definition."""
    data = _read_yaml(file_path)
    if "tables" in data:
        return list(data.get("tables") or [])
    return [data]


def build_schema(table_dicts: list[dict]) -> Schema:
    """Build a Schema from parsed table definitions.

    Tables and columns are created first so that foreign keys may reference
    tables defined later in the input.
    """
    tables: dict[str, Table] = {}
    for data in table_dicts:
        table = _parse_table_dict(data)
        if table.name in tables:
            raise SchemaLoadError(f"Duplicate table name '{table.name}'")
        tables[table.name] = table

    for data in table_dicts:
        table = tables[data["table"]]
        for constraint_data in data.get("constraints", []) or []:
            constraint = _parse_constraint(constraint_data, table, tables)
            if table.get_constraint(constraint.name) is not None:
                raise SchemaLoadError(
                    f"Duplicate constraint name '{constraint.name}' in table '{table.name}'"
                )
            table.add_constraint(constraint)
        logger.debug(
            f"Loaded table {table.name!r} with {len(table.columns)} column(s) "
            f"and {len(table.constraints)} constraint(s)"
        )

    return Schema(tables=tables)


def _parse_table_dict(data: dict) -> Table:
    """Parse a table definition (without constraints) from a dictionary."""
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Table definition must be a mapping, got {type(data).__name__}")

    unknown_fields = set(data.keys()) - VALID_TABLE_FIELDS
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in table definition: {', '.join(sorted(unknown_fields))}"
        )

    name = data.get("table")
    if not name:
        raise SchemaLoadError("Table definition missing 'table' field")

    table = Table(name=name)
    for col_data in data.get("columns", []) or []:
        col = _parse_column(col_data)
        if table.get_column(col.name) is not None:
            raise SchemaLoadError(f"Duplicate column name '{col.name}' in table '{name}'")
        table.add_column(col.name, type=col.type, nullable=col.nullable)
    return table


def _parse_column(data: dict) -> Column:
    """Parse a column definition from a dictionary."""
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Column definition must be a mapping, got {type(data).__name__}")

    unknown_fields = set(data.keys()) - VALID_COLUMN_FIELDS
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in column definition: {', '.join(sorted(unknown_fields))}"
        )

    name = data.get("name")
    if not name:
        raise SchemaLoadError("Column definition missing 'name' field")

    return Column(
        name=str(name),
        type=data.get("type", "STRING"),
        nullable=data.get("nullable", True),
    )


def _resolve_columns(table: Table, names: list[str], constraint_name: str) -> list[Column]:
    columns = []
    for col_name in names or []:
        # YAML reads bare numbers as ints
        col_name = str(col_name)
        col = table.get_column(col_name)
        if col is None:
            raise SchemaLoadError(
                f"Constraint '{constraint_name}' references unknown column "
                f"'{col_name}' in table '{table.name}'"
            )
        columns.append(col)
    return columns


def _parse_rule(value, enum_cls, field_name: str, constraint_name: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise SchemaLoadError(
            f"Invalid {field_name} '{value}' in constraint '{constraint_name}'. "
            f"Expected one of: {allowed}"
        ) from e


def _parse_constraint(data: dict, table: Table, tables: dict[str, Table]) -> Constraint:
    """Parse a constraint definition, resolving column and table references."""
    if not isinstance(data, dict):
        raise SchemaLoadError(
            f"Constraint definition in table '{table.name}' must be a mapping, "
            f"got {type(data).__name__}"
        )

    unknown_fields = set(data.keys()) - VALID_CONSTRAINT_FIELDS
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in constraint definition: {', '.join(sorted(unknown_fields))}"
        )

    name = data.get("name")
    if not name:
        raise SchemaLoadError(f"Constraint in table '{table.name}' missing 'name' field")

    kind = data.get("type", "unique")
    if kind not in CONSTRAINT_TYPES:
        raise SchemaLoadError(
            f"Constraint '{name}' has unknown type '{kind}'. "
            f"Expected one of: {', '.join(sorted(CONSTRAINT_TYPES))}"
        )

    columns = _resolve_columns(table, data.get("columns", []), name)
    extended_properties = dict(data.get("extended_properties") or {})

    if kind == "unique":
        return UniqueConstraint(
            name=name,
            columns=columns,
            is_primary_key=bool(data.get("primary_key", False)),
            extended_properties=extended_properties,
        )

    related_name = data.get("related_table")
    if not related_name:
        raise SchemaLoadError(f"Foreign key '{name}' missing 'related_table' field")
    related_table = tables.get(related_name)
    if related_table is None:
        raise SchemaLoadError(
            f"Foreign key '{name}' references unknown table '{related_name}'"
        )

    related_columns = _resolve_columns(related_table, data.get("related_columns", []), name)
    if len(related_columns) != len(columns):
        raise SchemaLoadError(
            f"Foreign key '{name}' has {len(columns)} column(s) but "
            f"{len(related_columns)} related column(s)"
        )

    return ForeignKeyConstraint(
        name=name,
        related_table=related_table,
        columns=columns,
        related_columns=related_columns,
        accept_reject_rule=_parse_rule(
            data.get("accept_reject_rule", "none"), AcceptRejectRule, "accept_reject_rule", name
        ),
        delete_rule=_parse_rule(data.get("delete_rule", "cascade"), Rule, "delete_rule", name),
        update_rule=_parse_rule(data.get("update_rule", "cascade"), Rule, "update_rule", name),
        extended_properties=extended_properties,
    )
