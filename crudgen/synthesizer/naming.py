"""Go naming transforms.

Every identifier that appears in a generated artifact is derived here, so the
model, DAO and handler code agree on spelling.  Exported identifiers follow
Go's common-initialism convention (``user_id`` -> ``UserID``, ``sku`` ->
``SKU``).
"""

from __future__ import annotations

import re


GO_RESERVED_WORDS = {
    "break", "case", "chan", "const", "continue", "default", "defer",
    "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
    "interface", "map", "package", "range", "return", "select", "struct",
    "switch", "type", "var",
}

# golint's list plus a few database staples.
COMMON_INITIALISMS = {
    "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML",
    "HTTP", "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS", "RPC",
    "SKU", "SLA", "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP", "UI",
    "UID", "UUID", "URI", "URL", "UTF8", "VM", "XML", "XMPP", "XSRF", "XSS",
}

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+")

_IRREGULAR_SINGULARS = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
    "data": "data",
    "news": "news",
    "series": "series",
    "status": "status",
}


def split_words(name: str) -> list[str]:
    """Split snake_case, kebab-case, camelCase or PascalCase into words.

    Examples::

        split_words("order_items")  -> ["order", "items"]
        split_words("APIKey")       -> ["API", "Key"]
        split_words("userID")       -> ["user", "ID"]
    """
    words: list[str] = []
    for chunk in re.split(r"[^A-Za-z0-9]+", name):
        words.extend(_WORD_RE.findall(chunk))
    return words


def _title(word: str) -> str:
    upper = word.upper()
    if upper in COMMON_INITIALISMS:
        return upper
    return word[:1].upper() + word[1:].lower()


def to_pascal(name: str) -> str:
    """Convert a column or table name to an exported Go identifier."""
    ident = "".join(_title(w) for w in split_words(name))
    if not ident:
        return "Field"
    if ident[0].isdigit():
        ident = f"X{ident}"
    return ident


def to_lower_camel(name: str) -> str:
    """Convert a name to an unexported Go identifier (``orderItem``, ``apiKey``)."""
    words = split_words(name)
    if not words:
        return "field"
    head = words[0].lower()
    ident = head + "".join(_title(w) for w in words[1:])
    if ident[0].isdigit():
        ident = f"x{ident}"
    if ident in GO_RESERVED_WORDS:
        ident = f"{ident}_"
    return ident


def singularize(word: str) -> str:
    """Best-effort English singular of a lowercase table-name word."""
    lower = word.lower()
    if lower in _IRREGULAR_SINGULARS:
        return _IRREGULAR_SINGULARS[lower]
    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if lower.endswith("ss") or lower.endswith("us") or lower.endswith("is"):
        return word
    if lower.endswith("s") and len(lower) > 1:
        return word[:-1]
    return word


def type_name_from_table(table_name: str) -> str:
    """Derive the canonical Go type name of a table.

    The last word is singularized and the result is PascalCased:
    ``order_items`` -> ``OrderItem``, ``api_keys`` -> ``APIKey``.
    """
    words = split_words(table_name)
    if not words:
        return to_pascal(table_name)
    words[-1] = singularize(words[-1])
    return "".join(_title(w) for w in words)


def json_name(column_name: str) -> str:
    """JSON key used for a column in generated tags (``created_at`` -> ``createdAt``)."""
    words = split_words(column_name)
    if not words:
        return column_name
    return words[0].lower() + "".join(_title(w) for w in words[1:])
