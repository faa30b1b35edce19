"""Tests for schema loader."""

from pathlib import Path

import pytest

from schemaeq.exceptions import SchemaLoadError
from schemaeq.assertions import check_table_constraints
from schemaeq.schema.loader import build_schema, load_schema
from schemaeq.schema.models import ForeignKeyConstraint, UniqueConstraint
from schemaeq.types import AcceptRejectRule, Rule

FIXTURES_PATH = Path(__file__).parent.parent / "fixtures" / "schema"


def write(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


def test_loader_users_yaml_golden():
    """users.yaml loads its columns and unique constraints."""
    schema = load_schema(FIXTURES_PATH)
    users = schema.get_table("users")

    assert [c.name for c in users.columns] == ["id", "tenant_id", "email"]
    assert users.primary_key is not None
    assert users.primary_key.name == "pk_users"
    assert [c.name for c in users.primary_key.columns] == ["id", "tenant_id"]
    assert users.primary_key.extended_properties == {"owner": "core"}
    assert users.primary_key.table is users

    email = users.get_constraint("uq_users_email")
    assert isinstance(email, UniqueConstraint)
    assert email.is_primary_key is False


def test_loader_orders_yaml_golden():
    """orders.yaml foreign key resolves a table defined in another file."""
    schema = load_schema(FIXTURES_PATH)
    orders = schema.get_table("orders")
    users = schema.get_table("users")

    fk = orders.get_constraint("fk_orders_users")
    assert isinstance(fk, ForeignKeyConstraint)
    assert fk.table is orders
    assert fk.related_table is users
    assert [c.name for c in fk.columns] == ["user_id", "tenant_id"]
    assert fk.related_columns[0] is users.get_column("id")
    assert fk.delete_rule == Rule.SET_NULL
    assert fk.update_rule == Rule.NONE
    assert fk.accept_reject_rule == AcceptRejectRule.NONE
    assert orders.foreign_keys() == [fk]


def test_loader_single_file_with_tables_list(tmp_path):
    """A single file may hold several tables."""
    path = write(
        tmp_path / "schema.yaml",
        """
tables:
  - table: a
    columns: [{name: id}]
    constraints:
      - {name: fk_a_b, type: foreign_key, columns: [id], related_table: b, related_columns: [id]}
  - table: b
    columns: [{name: id}]
""",
    )
    schema = load_schema(path)

    fk = schema.get_table("a").get_constraint("fk_a_b")
    assert fk.related_table is schema.get_table("b")
    assert fk.delete_rule == Rule.CASCADE


def test_loader_missing_path(tmp_path):
    with pytest.raises(SchemaLoadError, match="does not exist"):
        load_schema(tmp_path / "missing.yaml")


def test_loader_empty_file(tmp_path):
    with pytest.raises(SchemaLoadError, match="Empty YAML file"):
        load_schema(write(tmp_path / "empty.yaml", ""))


def test_loader_unknown_table_field(tmp_path):
    with pytest.raises(SchemaLoadError, match="Unknown field"):
        load_schema(write(tmp_path / "t.yaml", "table: t\nindexes: []\n"))


def test_loader_unknown_constraint_type(tmp_path):
    content = "table: t\ncolumns: [{name: id}]\nconstraints: [{name: c, type: check, columns: [id]}]\n"
    with pytest.raises(SchemaLoadError, match="unknown type 'check'"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_unknown_column_reference(tmp_path):
    content = "table: t\ncolumns: [{name: id}]\nconstraints: [{name: pk, primary_key: true, columns: [nope]}]\n"
    with pytest.raises(SchemaLoadError, match="unknown column 'nope'"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_unknown_related_table(tmp_path):
    content = (
        "table: t\ncolumns: [{name: id}]\n"
        "constraints: [{name: fk, type: foreign_key, columns: [id], related_table: x, related_columns: [id]}]\n"
    )
    with pytest.raises(SchemaLoadError, match="unknown table 'x'"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_invalid_rule(tmp_path):
    content = (
        "table: t\ncolumns: [{name: id}]\n"
        "constraints: [{name: fk, type: foreign_key, columns: [id], related_table: t, "
        "related_columns: [id], delete_rule: restrict}]\n"
    )
    with pytest.raises(SchemaLoadError, match="Invalid delete_rule 'restrict'"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_mismatched_column_counts(tmp_path):
    content = (
        "table: t\ncolumns: [{name: id}, {name: parent}]\n"
        "constraints: [{name: fk, type: foreign_key, columns: [id, parent], related_table: t, "
        "related_columns: [id]}]\n"
    )
    with pytest.raises(SchemaLoadError, match="2 column\\(s\\) but 1 related column"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_duplicate_constraint_name(tmp_path):
    content = (
        "table: t\ncolumns: [{name: id}]\n"
        "constraints: [{name: c, columns: [id]}, {name: c, columns: [id]}]\n"
    )
    with pytest.raises(SchemaLoadError, match="Duplicate constraint name 'c'"):
        load_schema(write(tmp_path / "t.yaml", content))


def test_loader_duplicate_table_in_directory(tmp_path):
    write(tmp_path / "a.yaml", "table: t\n")
    write(tmp_path / "b.yaml", "table: t\n")
    with pytest.raises(SchemaLoadError, match="Duplicate table name 't'"):
        load_schema(tmp_path)


def test_loader_numeric_column_names_become_strings(tmp_path):
    """YAML reads a bare 2024 as an int; names are always strings."""
    content = "table: t\ncolumns: [{name: 2024}]\nconstraints: [{name: pk, primary_key: true, columns: [2024]}]\n"
    table = load_schema(write(tmp_path / "t.yaml", content)).get_table("t")

    assert table.columns[0].name == "2024"
    assert table.get_constraint("pk").columns == [table.get_column("2024")]


def test_loader_numeric_column_names_compare(tmp_path):
    def build(year):
        return build_schema([
            {"table": "t", "columns": [{"name": year}], "constraints": [{"name": "uq", "columns": [year]}]}
        ]).get_table("t")

    failures = check_table_constraints(build(2023), build(2024))

    assert [f.message for f in failures] == [
        'Expected t.constraints["uq"] to include column 2024, but constraint does not '
        'include that column. Did not expect t.constraints["uq"] to include column 2023, but it does.'
    ]


def test_loader_column_entry_not_a_mapping(tmp_path):
    with pytest.raises(SchemaLoadError, match="Column definition must be a mapping, got str"):
        load_schema(write(tmp_path / "t.yaml", "table: t\ncolumns: [id]\n"))


def test_loader_constraint_entry_not_a_mapping(tmp_path):
    content = "table: t\ncolumns: [{name: id}]\nconstraints: [pk]\n"
    with pytest.raises(SchemaLoadError, match="Constraint definition in table 't' must be a mapping"):
        load_schema(write(tmp_path / "t.yaml", content))
