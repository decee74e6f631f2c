"""Tests for the table schema models (crudgen.schema.models)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from crudgen.schema import Column, TableSchema


pytestmark = pytest.mark.unit


class TestColumn:
    def test_defaults(self):
        col = Column(name="sku", sql_type="varchar(64)")
        assert col.is_primary_key is False
        assert col.is_nullable is True
        assert col.comment == ""
        assert col.ordinal == 0

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Column(name="", sql_type="int")

    def test_negative_ordinal_rejected(self):
        with pytest.raises(ValidationError):
            Column(name="a", sql_type="int", ordinal=-1)

    def test_frozen(self):
        col = Column(name="a", sql_type="int")
        with pytest.raises(ValidationError):
            col.name = "b"


class TestTableSchema:
    def test_ordered_columns_sorted_by_ordinal(self):
        schema = TableSchema(
            table_name="t",
            columns=(
                Column(name="b", sql_type="int", ordinal=2),
                Column(name="a", sql_type="int", ordinal=1),
            ),
        )
        assert [c.name for c in schema.ordered_columns] == ["a", "b"]

    def test_ordered_columns_keeps_declaration_order_on_ties(self):
        schema = TableSchema(
            table_name="t",
            columns=(Column(name="z", sql_type="int"), Column(name="y", sql_type="int")),
        )
        assert [c.name for c in schema.ordered_columns] == ["z", "y"]

    def test_primary_key(self, order_items_schema: TableSchema):
        assert order_items_schema.primary_key is not None
        assert order_items_schema.primary_key.name == "id"

    def test_primary_key_none_when_composite(self):
        schema = TableSchema(
            table_name="t",
            columns=(
                Column(name="a", sql_type="int", is_primary_key=True),
                Column(name="b", sql_type="int", is_primary_key=True),
            ),
        )
        assert schema.primary_key is None
        assert len(schema.primary_keys) == 2

    def test_column_lookup(self, order_items_schema: TableSchema):
        assert order_items_schema.column("qty").sql_type == "int(11)"
        assert order_items_schema.column("missing") is None

    def test_empty_columns_allowed_at_model_level(self):
        assert TableSchema(table_name="empty").columns == ()
