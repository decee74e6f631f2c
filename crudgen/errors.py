"""Error taxonomy for crudgen.

Every failure raised by the synthesizer, the materializer or the schema
providers derives from :class:`CrudGenError`.  Each error keeps the identity
of the offending table, column, file or marker as attributes so callers can
report it without parsing the message.
"""

from __future__ import annotations

from pathlib import Path


class CrudGenError(Exception):
    """Base class for all crudgen errors."""


# ---------------------------------------------------------------------------
# Schema / synthesis errors
# ---------------------------------------------------------------------------


class EmptySchemaError(CrudGenError):
    """Raised when a table schema has no columns."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Table '{table}' has no columns")


class UnsupportedTypeError(CrudGenError):
    """Raised when a column's SQL type has no Go mapping."""

    def __init__(self, sql_type: str, column: str = "") -> None:
        self.sql_type = sql_type
        self.column = column
        where = f" (column '{column}')" if column else ""
        super().__init__(f"Unsupported SQL type '{sql_type}'{where}")


class DuplicateFieldNameError(CrudGenError):
    """Raised when two columns map to the same Go field identifier."""

    def __init__(self, table: str, field: str, columns: list[str]) -> None:
        self.table = table
        self.field = field
        self.columns = list(columns)
        super().__init__(
            f"Table '{table}': columns {', '.join(repr(c) for c in columns)} "
            f"all map to field '{field}'"
        )


class CompositePrimaryKeyError(CrudGenError):
    """Raised when a table declares more than one primary-key column."""

    def __init__(self, table: str, columns: list[str]) -> None:
        self.table = table
        self.columns = list(columns)
        super().__init__(
            f"Table '{table}' has a composite primary key ({', '.join(columns)}), "
            "which is not supported"
        )


class DuplicateTypeNameError(CrudGenError):
    """Raised when tables generated together map to the same Go type name."""

    def __init__(self, type_name: str, tables: list[str]) -> None:
        self.type_name = type_name
        self.tables = list(tables)
        super().__init__(
            f"Tables {', '.join(repr(t) for t in tables)} all map to type '{type_name}'"
        )


class SchemaNotFoundError(CrudGenError):
    """Raised when a schema provider has no definition for a table."""

    def __init__(self, table: str, source: str = "") -> None:
        self.table = table
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Table '{table}' not found{where}")


class SchemaParseError(CrudGenError):
    """Raised when a table definition cannot be decoded."""

    def __init__(self, table: str, reason: str) -> None:
        self.table = table
        self.reason = reason
        super().__init__(f"Cannot parse table '{table}': {reason}")


# ---------------------------------------------------------------------------
# Materialization errors
# ---------------------------------------------------------------------------


class UnbalancedMarkerError(CrudGenError):
    """Raised when a marker block is opened but never closed (or vice versa)."""

    def __init__(self, marker: str, path: str = "") -> None:
        self.marker = marker
        self.path = path
        where = f" in '{path}'" if path else ""
        super().__init__(f"Unbalanced marker '{marker}'{where}")


class OutputExistsError(CrudGenError):
    """Raised when materialization would overwrite existing generated files."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"'{self.path}' already exists, code generation cancelled"
        )


class TemplateNotFoundError(CrudGenError):
    """Raised when no template tree is registered under a name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template '{name}' is not registered")


class FileIOError(CrudGenError):
    """Raised when reading a template or writing an output file fails."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"I/O error on '{self.path}': {reason}")
