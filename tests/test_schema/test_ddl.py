"""Tests for the static schema providers (crudgen.schema.ddl).

Covers:
- CREATE TABLE parsing (types, keys, nullability, comments)
- Skipping of index and constraint definitions
- JSON / YAML schema files
- Table lookup errors
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from crudgen.errors import CrudGenError, FileIOError, SchemaNotFoundError, SchemaParseError
from crudgen.schema import load_schemas, load_table_schema, parse_ddl


pytestmark = pytest.mark.unit


class TestParseDDL:
    def test_finds_all_tables(self, order_items_ddl: str):
        tables = parse_ddl(order_items_ddl)
        assert list(tables) == ["order_items", "users"]

    def test_columns_in_order(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["order_items"]
        assert [c.name for c in schema.ordered_columns] == [
            "id", "sku", "qty", "created_at", "updated_at", "deleted_at",
        ]
        assert [c.ordinal for c in schema.ordered_columns] == [1, 2, 3, 4, 5, 6]

    def test_types_are_normalized(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["order_items"]
        assert schema.column("id").sql_type == "bigint(20) unsigned"
        assert schema.column("sku").sql_type == "varchar(64)"
        assert schema.column("created_at").sql_type == "datetime"

    def test_table_level_primary_key(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["order_items"]
        assert schema.primary_key.name == "id"
        assert schema.column("id").is_nullable is False

    def test_inline_primary_key(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["users"]
        assert schema.primary_key.name == "id"

    def test_nullability(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["users"]
        assert schema.column("name").is_nullable is False
        assert schema.column("email").is_nullable is True

    def test_column_and_table_comments(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["order_items"]
        assert schema.column("sku").comment == "stock keeping unit"
        assert schema.column("qty").comment == "quantity"
        assert schema.comment == "order line items"

    def test_index_definitions_skipped(self, order_items_ddl: str):
        schema = parse_ddl(order_items_ddl)["order_items"]
        assert schema.column("KEY") is None
        assert len(schema.columns) == 6

    def test_column_named_like_keyword_prefix_kept(self):
        ddl = "CREATE TABLE t (key_id int NOT NULL, UNIQUE KEY uk (key_id));"
        schema = parse_ddl(ddl)["t"]
        assert [c.name for c in schema.columns] == ["key_id"]

    def test_quoted_comment_with_comma(self):
        ddl = "CREATE TABLE t (a varchar(10) COMMENT 'one, two', b decimal(10,2));"
        schema = parse_ddl(ddl)["t"]
        assert schema.column("a").comment == "one, two"
        assert schema.column("b").sql_type == "decimal(10,2)"

    def test_schema_qualified_name(self):
        schema = parse_ddl("create table `shop`.`carts` (`id` int primary key);")
        assert "carts" in schema

    def test_no_tables(self):
        assert parse_ddl("SELECT 1;") == {}

    def test_keywords_inside_comments_ignored(self):
        ddl = (
            "CREATE TABLE t (id bigint NOT NULL, "
            "ref_id bigint COMMENT 'primary key of the parent row', "
            "note varchar(10) COMMENT 'not null in practice', "
            "PRIMARY KEY (id));"
        )
        schema = parse_ddl(ddl)["t"]
        assert schema.column("ref_id").is_primary_key is False
        assert schema.column("note").is_nullable is True
        assert schema.primary_key.name == "id"

    def test_keywords_inside_default_ignored(self):
        ddl = "CREATE TABLE t (state varchar(16) DEFAULT 'NOT NULL');"
        assert parse_ddl(ddl)["t"].column("state").is_nullable is True

    def test_keywords_split_by_whitespace(self):
        ddl = "CREATE TABLE t (a int NOT\n  NULL);"
        assert parse_ddl(ddl)["t"].column("a").is_nullable is False


class TestParseDDLErrors:
    def test_unterminated_body(self):
        with pytest.raises(SchemaParseError) as exc_info:
            parse_ddl("CREATE TABLE t (id int, name varchar(10)")
        assert exc_info.value.table == "t"
        assert "unterminated" in str(exc_info.value)

    def test_column_without_type(self):
        with pytest.raises(SchemaParseError) as exc_info:
            parse_ddl("CREATE TABLE t (id int, name);")
        assert exc_info.value.table == "t"

    def test_malformed_primary_key_clause(self):
        with pytest.raises(SchemaParseError):
            parse_ddl("CREATE TABLE t (id int, PRIMARY KEY id);")

    def test_is_a_crudgen_error(self, tmp_path: Path):
        path = tmp_path / "broken.sql"
        path.write_text("CREATE TABLE t (id int")
        with pytest.raises(CrudGenError):
            load_schemas(path)


class TestLoadSchemas:
    def test_sql_file(self, schema_file: Path):
        schemas = load_schemas(schema_file)
        assert set(schemas) == {"order_items", "users"}

    def test_json_file(self, tmp_path: Path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({
            "tables": [{
                "table_name": "tags",
                "columns": [{"name": "label", "sql_type": "varchar(16)", "ordinal": 1}],
            }],
        }))
        schema = load_schemas(path)["tags"]
        assert schema.columns[0].name == "label"

    def test_yaml_file_with_list_root(self, tmp_path: Path):
        path = tmp_path / "schema.yaml"
        path.write_text(yaml.safe_dump([
            {"table_name": "tags", "columns": [{"name": "label", "sql_type": "text"}]},
        ]))
        assert "tags" in load_schemas(path)

    def test_invalid_definition(self, tmp_path: Path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps([{"columns": []}]))
        with pytest.raises(FileIOError, match="invalid table definition"):
            load_schemas(path)

    def test_unparseable_file(self, tmp_path: Path):
        path = tmp_path / "schema.json"
        path.write_text("{not json")
        with pytest.raises(FileIOError):
            load_schemas(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileIOError):
            load_schemas(tmp_path / "absent.sql")


class TestLoadTableSchema:
    def test_found(self, schema_file: Path):
        assert load_table_schema(schema_file, "users").table_name == "users"

    def test_not_found(self, schema_file: Path):
        with pytest.raises(SchemaNotFoundError) as exc_info:
            load_table_schema(schema_file, "payments")
        assert exc_info.value.table == "payments"
        assert "payments" in str(exc_info.value)
