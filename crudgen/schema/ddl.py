"""Static schema providers.

Turns MySQL ``CREATE TABLE`` statements (or JSON/YAML schema documents) into
``TableSchema`` objects.  This stands in for live database introspection: the
synthesizer only ever sees already-fetched column metadata.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from crudgen.errors import FileIOError, SchemaNotFoundError, SchemaParseError
from crudgen.schema.models import Column, TableSchema


_CREATE_RE = re.compile(
    r"CREATE\s+(?:TEMPORARY\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?"
    r"(?P<name>(?:[`\"]?[\w$]+[`\"]?\s*\.\s*)?[`\"]?[\w$]+[`\"]?)\s*\(",
    re.IGNORECASE,
)

_TYPE_RE = re.compile(
    r"^(?P<type>[a-z]+(?:\s*\([^)]*\))?(?:\s+(?:unsigned|signed|zerofill))*)",
    re.IGNORECASE,
)

_COMMENT_RE = re.compile(r"\bCOMMENT\s*=?\s*'(?P<text>(?:[^'\\]|\\.|'')*)'", re.IGNORECASE)

_QUOTED_RE = re.compile(r"'(?:[^'\\]|\\.|'')*'")

_NON_COLUMN_PREFIXES = (
    "KEY",
    "INDEX",
    "UNIQUE",
    "CONSTRAINT",
    "FOREIGN",
    "FULLTEXT",
    "SPATIAL",
    "CHECK",
)


# ---------------------------------------------------------------------------
# DDL parsing
# ---------------------------------------------------------------------------


def parse_ddl(sql_text: str) -> dict[str, TableSchema]:
    """Parse every ``CREATE TABLE`` statement in *sql_text*.

    Returns:
        Mapping of table name to ``TableSchema`` in statement order.

    Raises:
        SchemaParseError: If a statement is unterminated or declares a
            column without a type.
    """
    text = _strip_sql_comments(sql_text)
    tables: dict[str, TableSchema] = {}

    pos = 0
    while True:
        match = _CREATE_RE.search(text, pos)
        if not match:
            break
        table_name = _unquote(match.group("name").split(".")[-1])
        body_start = match.end()
        body_end = _find_closing_paren(text, body_start)
        if body_end == -1:
            raise SchemaParseError(table_name, "unterminated CREATE TABLE body")
        body = text[body_start:body_end]

        statement_end = text.find(";", body_end)
        if statement_end == -1:
            statement_end = len(text)
        options = text[body_end + 1 : statement_end]

        tables[table_name] = _build_table(table_name, body, options)
        pos = statement_end

    return tables


def _build_table(table_name: str, body: str, options: str) -> TableSchema:
    columns: list[dict[str, Any]] = []
    table_pks: list[str] = []

    for item in _split_top_level(body):
        upper = item.upper()
        if upper.startswith("PRIMARY KEY"):
            if "(" not in item or ")" not in item:
                raise SchemaParseError(table_name, f"malformed primary key clause {item!r}")
            inner = item[item.index("(") + 1 : item.rindex(")")]
            table_pks.extend(_unquote(part.split("(")[0]) for part in inner.split(","))
            continue
        if re.split(r"[\s(]", upper, maxsplit=1)[0] in _NON_COLUMN_PREFIXES:
            continue
        columns.append(_parse_column(item, ordinal=len(columns) + 1))

    for col in columns:
        if col["name"] in table_pks:
            col["is_primary_key"] = True
            col["is_nullable"] = False

    comment_match = _COMMENT_RE.search(options)
    try:
        return TableSchema(
            table_name=table_name,
            columns=tuple(Column(**c) for c in columns),
            comment=_unescape(comment_match.group("text")) if comment_match else "",
        )
    except ValidationError as exc:
        raise SchemaParseError(table_name, f"invalid column definition: {exc}") from exc


def _parse_column(definition: str, ordinal: int) -> dict[str, Any]:
    """Parse one column definition line into ``Column`` keyword arguments."""
    if definition[0] in "`\"":
        quote = definition[0]
        end = definition.find(quote, 1)
        if end == -1:
            end = len(definition)
        name = definition[1:end]
        rest = definition[end + 1 :].strip()
    else:
        parts = re.split(r"\s+", definition, maxsplit=1)
        name = parts[0]
        rest = parts[1].strip() if len(parts) > 1 else ""

    type_match = _TYPE_RE.match(rest)
    sql_type = re.sub(r"\s+", " ", type_match.group("type")).lower() if type_match else ""
    remainder = rest[type_match.end():] if type_match else ""
    comment_match = _COMMENT_RE.search(remainder)
    # quoted literals (comments, defaults) never carry column attributes
    keywords = re.sub(r"\s+", " ", _QUOTED_RE.sub("''", remainder)).upper()

    is_pk = "PRIMARY KEY" in keywords
    return {
        "name": name,
        "sql_type": sql_type,
        "is_primary_key": is_pk,
        "is_nullable": not (is_pk or "NOT NULL" in keywords),
        "comment": _unescape(comment_match.group("text")) if comment_match else "",
        "ordinal": ordinal,
    }


def _split_top_level(body: str) -> list[str]:
    """Split a table body on commas that are outside parens and quotes."""
    items: list[str] = []
    depth = 0
    quote = ""
    current: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            current.append(ch)
            if ch == "\\" and i + 1 < len(body):
                current.append(body[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "'\"`":
            quote = ch
            current.append(ch)
        elif ch == "(":
            depth += 1
            current.append(ch)
        elif ch == ")":
            depth -= 1
            current.append(ch)
        elif ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    tail = "".join(current).strip()
    if tail:
        items.append(tail)
    return [item for item in items if item]


def _find_closing_paren(text: str, start: int) -> int:
    """Return the index of the paren closing the one just before *start*, or -1."""
    depth = 1
    quote = ""
    i = start
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "'\"`":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _strip_sql_comments(text: str) -> str:
    text = re.sub(r"/\*.*?\*/", "", text, flags=re.DOTALL)
    return re.sub(r"(?m)^\s*(--|#).*$", "", text)


def _unquote(identifier: str) -> str:
    return identifier.strip().strip("`\"")


def _unescape(text: str) -> str:
    return text.replace("''", "'").replace("\\'", "'")


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def load_schemas(path: str | Path) -> dict[str, TableSchema]:
    """Load every table defined in a ``.sql``, ``.json`` or ``.yaml`` file."""
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileIOError(file_path, str(exc)) from exc

    suffix = file_path.suffix.lower()
    if suffix == ".sql":
        return parse_ddl(raw)

    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise FileIOError(file_path, f"cannot parse schema file: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("tables", [])

    schemas: dict[str, TableSchema] = {}
    for entry in data or []:
        try:
            schema = TableSchema.model_validate(entry)
        except ValidationError as exc:
            raise FileIOError(file_path, f"invalid table definition: {exc}") from exc
        schemas[schema.table_name] = schema
    return schemas


def load_table_schema(path: str | Path, table_name: str) -> TableSchema:
    """Load a single table from a schema file.

    Raises:
        SchemaNotFoundError: If the file does not define *table_name*.
    """
    schemas = load_schemas(path)
    if table_name not in schemas:
        raise SchemaNotFoundError(table_name, str(path))
    return schemas[table_name]
