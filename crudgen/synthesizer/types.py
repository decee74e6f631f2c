"""SQL -> Go type mapping.

``map_type`` is a pure function over the supported SQL vocabulary.  The
result carries everything the templates need for a field: the Go type, the
ORM tag hint, the imports the type pulls in and how to test it for its zero
value when building partial updates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from crudgen.errors import UnsupportedTypeError


@dataclass(frozen=True)
class GoType:
    """Immutable description of the Go type generated for one column."""

    name: str  # Go type, e.g. "int64", "time.Time"
    tag_hint: str  # normalized SQL type for the ORM tag, e.g. "varchar(64)"
    imports_needed: frozenset[str] = field(default_factory=frozenset)
    zero_check: str = "{ref} != 0"  # format string, {ref} is the field selector
    is_integer: bool = False

    def non_zero(self, ref: str) -> str:
        """Go boolean expression that is true when *ref* holds a non-zero value."""
        return self.zero_check.format(ref=ref)


_SIGNED_INTS = {
    "tinyint": "int8",
    "smallint": "int16",
    "mediumint": "int32",
    "int": "int",
    "integer": "int",
    "bigint": "int64",
    "year": "int",
}

_UNSIGNED_INTS = {
    "tinyint": "uint8",
    "smallint": "uint16",
    "mediumint": "uint32",
    "int": "uint",
    "integer": "uint",
    "bigint": "uint64",
    "year": "uint",
}

_FLOATS = {
    "float": "float32",
    "double": "float64",
    "real": "float64",
    "decimal": "float64",
    "numeric": "float64",
    "dec": "float64",
}

_STRINGS = {
    "char", "varchar", "tinytext", "text", "mediumtext", "longtext",
    "enum", "set", "json", "time",
}

_TIMES = {"date", "datetime", "timestamp"}

_BOOLS = {"bool", "boolean", "bit"}

_BYTES = {"binary", "varbinary", "tinyblob", "blob", "mediumblob", "longblob"}

_BASE_RE = re.compile(r"^\s*([a-z]+)", re.IGNORECASE)

INTEGER_GO_TYPES = frozenset(_SIGNED_INTS.values()) | frozenset(_UNSIGNED_INTS.values())


def normalize_sql_type(sql_type: str) -> str:
    """Lowercase and collapse whitespace: ``'INT(11)  UNSIGNED'`` -> ``'int(11) unsigned'``."""
    collapsed = re.sub(r"\s+", " ", sql_type.strip().lower())
    return re.sub(r"\s*\(\s*", "(", collapsed).replace(" )", ")")


def map_type(sql_type: str, column: str = "") -> GoType:
    """Map a SQL column type to a Go field type.

    Args:
        sql_type: Column type as declared, e.g. ``"bigint(20) unsigned"``.
        column: Column name, used only in error messages.

    Raises:
        UnsupportedTypeError: If the base SQL type is not in the vocabulary.
    """
    normalized = normalize_sql_type(sql_type)
    match = _BASE_RE.match(normalized)
    if not match:
        raise UnsupportedTypeError(sql_type, column)
    base = match.group(1)
    unsigned = " unsigned" in f" {normalized}"

    if base in _SIGNED_INTS:
        go_name = (_UNSIGNED_INTS if unsigned else _SIGNED_INTS)[base]
        return GoType(name=go_name, tag_hint=normalized, is_integer=True)

    if base in _FLOATS:
        return GoType(name=_FLOATS[base], tag_hint=normalized)

    if base in _STRINGS:
        return GoType(name="string", tag_hint=normalized, zero_check='{ref} != ""')

    if base in _TIMES:
        return GoType(
            name="time.Time",
            tag_hint=normalized,
            imports_needed=frozenset({'"time"'}),
            zero_check="!{ref}.IsZero()",
        )

    if base in _BOOLS:
        # bool fields are always part of an update map
        return GoType(name="bool", tag_hint=normalized, zero_check="true")

    if base in _BYTES:
        return GoType(name="[]byte", tag_hint=normalized, zero_check="len({ref}) > 0")

    raise UnsupportedTypeError(sql_type, column)
