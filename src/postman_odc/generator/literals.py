"""Render Python values as Power Query (M) literals.

Each value is classified into one tag and rendered by that tag's rule.
Anything unrecognized is rendered as text.
"""

import math
import re

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

M_KEYWORDS = {
    "and", "as", "each", "else", "error", "false", "if", "in", "is", "let",
    "meta", "not", "null", "or", "otherwise", "section", "shared", "then",
    "true", "try", "type",
}

# "#(" must be escaped before the control characters introduce new ones.
TEXT_ESCAPES = [
    ("#(", "#(#)("),
    ("\r\n", "#(cr,lf)"),
    ("\r", "#(cr)"),
    ("\n", "#(lf)"),
    ("\t", "#(tab)"),
]


def classify(value) -> str:
    """Return the M tag of a JSON-like value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "logical"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, dict):
        return "record"
    return "unknown"


def render_text(value: str) -> str:
    escaped = value.replace('"', '""')
    for char, token in TEXT_ESCAPES:
        escaped = escaped.replace(char, token)
    return f'"{escaped}"'


def render_number(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "#nan"
        if math.isinf(value):
            return "#infinity" if value > 0 else "-#infinity"
        return repr(value)
    return str(value)


def render_field_name(name: str) -> str:
    """A record field name: bare when it is a plain identifier, else quoted."""
    if IDENTIFIER_RE.fullmatch(name) and name not in M_KEYWORDS:
        return name
    return "#" + render_text(name)


def render_record(mapping: dict) -> str:
    fields = ", ".join(f"{render_field_name(str(k))} = {render_value(v)}" for k, v in mapping.items())
    return f"[{fields}]"


def render_list(items) -> str:
    return "{" + ", ".join(render_value(item) for item in items) + "}"


RENDERERS = {
    "null": lambda value: "null",
    "logical": lambda value: "true" if value else "false",
    "number": render_number,
    "text": render_text,
    "list": render_list,
    "record": render_record,
}


def render_value(value) -> str:
    """Render any JSON-like value as an M literal."""
    renderer = RENDERERS.get(classify(value))
    if renderer is None:
        return render_text(str(value))
    return renderer(value)
