"""Schema-to-code synthesizer.

Takes a ``TableSchema`` plus ``GenerationOptions`` and renders the four code
artifacts consumed by the materializer: the model struct, the DAO update
helper, the handler request/response structs and the canonical type-name
token.  All artifacts are rendered from one ``TableSpec`` built by a single
traversal of the schema, so field order and spelling agree everywhere.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from crudgen.config import GenerationOptions
from crudgen.errors import (
    CompositePrimaryKeyError,
    DuplicateFieldNameError,
    EmptySchemaError,
)
from crudgen.schema.models import Column, TableSchema
from crudgen.synthesizer.naming import (
    json_name,
    to_pascal,
    type_name_from_table,
)
from crudgen.synthesizer.templates import TemplateRenderer
from crudgen.synthesizer.types import INTEGER_GO_TYPES, GoType, map_type


# ---------------------------------------------------------------------------
# Embedded audit struct
# ---------------------------------------------------------------------------

BASE_MODEL_TYPE = "mysql.Model"

# Columns supplied by the embedded audit struct, with their Go identity.
AUDIT_FIELDS: dict[str, tuple[str, GoType]] = {
    "id": ("ID", GoType(name="uint64", tag_hint="bigint(20) unsigned", is_integer=True)),
    "created_at": (
        "CreatedAt",
        GoType(name="time.Time", tag_hint="datetime", imports_needed=frozenset({'"time"'})),
    ),
    "updated_at": (
        "UpdatedAt",
        GoType(name="time.Time", tag_hint="datetime", imports_needed=frozenset({'"time"'})),
    ),
    "deleted_at": (
        "DeletedAt",
        GoType(name="time.Time", tag_hint="datetime", imports_needed=frozenset({'"time"'})),
    ),
}

_STRUCT_BLOCK_RE = re.compile(r"(?P<head>struct \{\n)(?P<body>.*?)(?P<tail>^\})", re.MULTILINE | re.DOTALL)
_STRUCT_ROW_RE = re.compile(
    r"^\t(?P<name>\w+)[ \t]+(?P<type>\S+)(?:[ \t]+(?P<tag>`[^`]*`))?(?:[ \t]+// (?P<comment>.*))?$"
)


class ArtifactKind(str, Enum):
    """The code artifacts produced by one synthesis run."""

    MODEL = "model"
    DAO = "dao"
    HANDLER = "handler"
    TYPE_NAME = "type_name"


# ---------------------------------------------------------------------------
# Intermediate representation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """One Go struct field derived from a column."""

    column_name: str
    name: str
    json_name: str
    go_type: GoType
    is_primary_key: bool = False
    is_nullable: bool = True
    comment: str = ""


@dataclass(frozen=True)
class TableSpec:
    """Everything the artifact templates need, derived once per schema."""

    table_name: str
    type_name: str
    comment: str
    embed_base_model: bool
    fields: tuple[FieldSpec, ...]
    primary_key: FieldSpec | None = None
    audit_fields: tuple[FieldSpec, ...] = field(default_factory=tuple)

    @property
    def data_fields(self) -> list[FieldSpec]:
        """Explicit fields other than the primary key."""
        return [f for f in self.fields if not f.is_primary_key]


# ---------------------------------------------------------------------------
# Synthesizer
# ---------------------------------------------------------------------------


class Synthesizer:
    """Renders code artifacts for a table.

    The synthesizer holds no per-run state: ``generate`` is a pure function
    of its schema argument and the options given at construction.
    """

    def __init__(
        self,
        options: GenerationOptions | None = None,
        renderer: TemplateRenderer | None = None,
        base_model_type: str = BASE_MODEL_TYPE,
    ) -> None:
        self.options = options or GenerationOptions()
        self.renderer = renderer or TemplateRenderer()
        self.base_model_type = base_model_type

    # -- Public API --------------------------------------------------------

    def generate(self, schema: TableSchema) -> dict[ArtifactKind, str]:
        """Render all artifacts for *schema*.

        Raises:
            EmptySchemaError: The table has no columns.
            CompositePrimaryKeyError: More than one primary-key column.
            DuplicateFieldNameError: Two columns map to the same identifier.
            UnsupportedTypeError: A column type has no Go mapping.
        """
        spec = self.build_spec(schema)
        model_code = self.render_model(spec)
        return {
            ArtifactKind.MODEL: model_code,
            ArtifactKind.DAO: self.render_dao(spec, spec.type_name),
            ArtifactKind.HANDLER: self.render_handler(spec),
            ArtifactKind.TYPE_NAME: spec.type_name,
        }

    def build_spec(self, schema: TableSchema) -> TableSpec:
        """Validate *schema* and derive its ``TableSpec``."""
        columns = schema.ordered_columns
        if not columns:
            raise EmptySchemaError(schema.table_name)

        pks = [c.name for c in columns if c.is_primary_key]
        if len(pks) > 1:
            raise CompositePrimaryKeyError(schema.table_name, pks)

        embed = self.options.embed_base_model
        seen: dict[str, str] = {}
        if embed:
            for ident, _ in AUDIT_FIELDS.values():
                seen[ident] = f"{self.base_model_type}.{ident}"

        fields: list[FieldSpec] = []
        primary_key: FieldSpec | None = None
        for col in columns:
            if embed and col.name.lower() in AUDIT_FIELDS:
                continue
            spec = self._field_spec(col)
            if spec.name in seen:
                raise DuplicateFieldNameError(
                    schema.table_name, spec.name, [seen[spec.name], col.name]
                )
            seen[spec.name] = col.name
            fields.append(spec)
            if col.is_primary_key:
                primary_key = spec

        audit: tuple[FieldSpec, ...] = ()
        if embed:
            audit = tuple(
                FieldSpec(
                    column_name=column_name,
                    name=ident,
                    json_name=json_name(column_name),
                    go_type=go_type,
                    is_primary_key=column_name == "id",
                    is_nullable=column_name == "deleted_at",
                )
                for column_name, (ident, go_type) in AUDIT_FIELDS.items()
            )
            # The embedded struct owns the key unless the table keys on another column.
            if primary_key is None:
                primary_key = audit[0]

        return TableSpec(
            table_name=schema.table_name,
            type_name=type_name_from_table(schema.table_name),
            comment=schema.comment,
            embed_base_model=embed,
            fields=tuple(fields),
            primary_key=primary_key,
            audit_fields=audit,
        )

    # -- Artifact rendering ------------------------------------------------

    def render_model(self, spec: TableSpec) -> str:
        rows = [
            (f.name, f.go_type.name, self._model_tag(f), f.comment)
            for f in spec.fields
        ]
        lines: list[str] = []
        if spec.embed_base_model:
            lines.append(f'{self.base_model_type} `gorm:"embedded"`')
            if rows:
                lines.append("")
        lines.extend(_align_struct_rows(rows))

        imports = _collect_imports(spec.fields)
        return self.renderer.render(
            "model.go.j2",
            {
                "type_name": spec.type_name,
                "table_name": spec.table_name,
                "comment": spec.comment or spec.table_name,
                "imports": imports,
                "body": _indent_lines(lines),
            },
        )

    def render_dao(self, spec: TableSpec, type_name: str) -> str:
        """Render the DAO update helper around the model's *type_name*.

        The caller passes the type name produced for the model artifact so
        the two cannot drift apart.
        """
        updates: list[dict[str, str]] = []
        for f in spec.data_fields:
            ref = f"table.{f.name}"
            check = f.go_type.non_zero(ref)
            updates.append({
                "column": f.column_name,
                "ref": ref,
                "check": "" if check == "true" else check,
            })

        return self.renderer.render(
            "dao.go.j2",
            {
                "type_name": type_name,
                "model_ref": f"{self.options.output_package_name}.{type_name}",
                "updates": updates,
            },
        )

    def render_handler(self, spec: TableSpec) -> str:
        pk = spec.primary_key
        pk_rows = [(pk.name, pk.go_type.name, _wire_tag(pk, binding=True), "")] if pk else []
        data_rows = [(f.name, f.go_type.name, _wire_tag(f, binding=True), "") for f in spec.data_fields]
        detail_fields = ([pk] if pk else []) + spec.data_fields
        if spec.embed_base_model:
            detail_fields += [f for f in spec.audit_fields if f.name in ("CreatedAt", "UpdatedAt")]
        detail_rows = [(f.name, f.go_type.name, _wire_tag(f, binding=False), "") for f in detail_fields]

        ids_type = f"[]{pk.go_type.name}" if pk and not pk.go_type.is_integer else "[]uint64"
        imports = _collect_imports(detail_fields)

        code = self.renderer.render(
            "handler.go.j2",
            {
                "type_name": spec.type_name,
                "imports": imports,
                "has_pk": pk is not None,
                "ids_type": ids_type,
                "create_body": _indent_lines(_align_struct_rows(data_rows)),
                "update_body": _indent_lines(_align_struct_rows(pk_rows + data_rows)),
                "detail_body": _indent_lines(_align_struct_rows(detail_rows)),
            },
        )
        if pk is None:
            return code
        return adjust_id_type(code, pk.name, pk.json_name)

    # -- Helpers -----------------------------------------------------------

    def _field_spec(self, col: Column) -> FieldSpec:
        return FieldSpec(
            column_name=col.name,
            name=to_pascal(col.name),
            json_name=json_name(col.name),
            go_type=map_type(col.sql_type, col.name),
            is_primary_key=col.is_primary_key,
            is_nullable=col.is_nullable,
            comment=col.comment,
        )

    def _model_tag(self, f: FieldSpec) -> str:
        parts: list[str] = []
        if self.options.include_orm_tags:
            gorm = [f"column:{f.column_name}", f"type:{f.go_type.tag_hint}"]
            if f.is_primary_key:
                gorm.append("primary_key")
            elif not f.is_nullable:
                gorm.append("NOT NULL")
            parts.append(f'gorm:"{";".join(gorm)}"')
        if self.options.include_json_tags:
            parts.append(f'json:"{f.json_name}"')
        return f"`{' '.join(parts)}`" if parts else ""


def synthesize(
    schema: TableSchema, options: GenerationOptions | None = None
) -> dict[ArtifactKind, str]:
    """Convenience wrapper: ``Synthesizer(options).generate(schema)``."""
    return Synthesizer(options).generate(schema)


# ---------------------------------------------------------------------------
# Handler post-processing
# ---------------------------------------------------------------------------


def adjust_id_type(handler_code: str, field_name: str, json_key: str) -> str:
    """Make an integer primary key safe for JSON transport.

    Every struct field named *field_name* with an integer type and the json
    key *json_key* in the rendered handler code becomes ``uint64``
    serialised as a string (``json:"id,string"``).  Structs that change are
    re-aligned; non-integer keys are left untouched.
    """
    plain_key = f'json:"{json_key}"'

    def _promote(block: re.Match[str]) -> str:
        rows: list[tuple[str, str, str, str]] = []
        changed = False
        for line in block.group("body").splitlines():
            row = _STRUCT_ROW_RE.match(line)
            if row is None:
                return block.group(0)
            name, go_type, tag, comment = row.group("name", "type", "tag", "comment")
            tag = tag or ""
            if name == field_name and go_type in INTEGER_GO_TYPES and plain_key in tag:
                go_type = "uint64"
                tag = tag.replace(plain_key, f'json:"{json_key},string"')
                changed = True
            rows.append((name, go_type, tag, comment or ""))
        if not changed:
            return block.group(0)
        return f"{block.group('head')}{_indent_lines(_align_struct_rows(rows))}\n{block.group('tail')}"

    return _STRUCT_BLOCK_RE.sub(_promote, handler_code)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _wire_tag(f: FieldSpec, binding: bool) -> str:
    tag = f'json:"{f.json_name}"'
    if binding:
        tag += ' binding:""'
    return f"`{tag}`"


def _collect_imports(fields: Any) -> list[str]:
    imports: set[str] = set()
    for f in fields:
        imports.update(f.go_type.imports_needed)
    return sorted(imports)


def _align_struct_rows(rows: list[tuple[str, str, str, str]]) -> list[str]:
    """Align ``(name, type, tag, comment)`` rows into gofmt-style columns."""
    if not rows:
        return []
    name_width = max(len(r[0]) for r in rows)
    type_width = max(len(r[1]) for r in rows)
    lines = []
    for name, go_type, tag, comment in rows:
        line = f"{name.ljust(name_width)} {go_type.ljust(type_width) if tag or comment else go_type}"
        if tag:
            line += f" {tag}"
        if comment:
            line += f" // {comment}"
        lines.append(line.rstrip())
    return lines


def _indent_lines(lines: list[str]) -> str:
    return "\n".join(f"\t{line}" if line else "" for line in lines)
