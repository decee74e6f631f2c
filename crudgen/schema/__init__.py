"""Table schema models and static schema providers.

Quick usage::

    from crudgen.schema import load_table_schema

    schema = load_table_schema("schema.sql", "order_items")
"""

from crudgen.schema.ddl import load_schemas, load_table_schema, parse_ddl
from crudgen.schema.models import Column, TableSchema

__all__ = [
    "Column",
    "TableSchema",
    "load_schemas",
    "load_table_schema",
    "parse_ddl",
]
