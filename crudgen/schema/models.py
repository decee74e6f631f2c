"""Pydantic v2 models describing a relational table.

``Column`` and ``TableSchema`` are the passive input of the synthesizer.  Both
are frozen: once a schema provider has produced them they are never mutated.
Structural invariants (non-empty, unique names, single primary key) are
checked by the synthesizer so that the error raised names the table.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Column(BaseModel):
    """A single table column as reported by a schema provider."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Column name as declared in the table")
    sql_type: str = Field(..., min_length=1, description="SQL type, e.g. 'varchar(64)', 'int unsigned'")
    is_primary_key: bool = Field(default=False, description="Whether the column is the primary key")
    is_nullable: bool = Field(default=True, description="Whether the column accepts NULL")
    comment: str = Field(default="", description="Column comment from the DDL")
    ordinal: int = Field(default=0, ge=0, description="1-based position in the table")


class TableSchema(BaseModel):
    """A table name plus its ordered columns."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1)
    columns: tuple[Column, ...] = Field(default_factory=tuple)
    comment: str = Field(default="", description="Table comment from the DDL")

    @property
    def ordered_columns(self) -> list[Column]:
        """Columns sorted by ordinal; ties keep declaration order."""
        return sorted(self.columns, key=lambda c: c.ordinal)

    @property
    def primary_keys(self) -> list[Column]:
        return [c for c in self.ordered_columns if c.is_primary_key]

    @property
    def primary_key(self) -> Column | None:
        """The single primary-key column, or ``None``."""
        keys = self.primary_keys
        return keys[0] if len(keys) == 1 else None

    def column(self, name: str) -> Column | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None
