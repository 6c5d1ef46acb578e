r"""Write Python values back as DCS table-literal source.

Output format::

    mission = {
    \t["weather"] = {
    \t\t["qnh"] = 760,
    \t\t["name"] = "line1\
    line2"
    \t}
    }

Tables list every pair as ``[key] = value`` in iteration order, one per
line, indented with tabs; the last pair has no trailing comma and an empty
table is written as ``{ }``. Newlines inside strings are written as a
backslash followed by a real line break.
"""

from __future__ import annotations

import math
from typing import Any

from realweather.errors import SerializationError

INDENT = "\t"

# Integral floats below this magnitude print without a decimal point
_INT_FORMAT_LIMIT = 1e16

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\\n",
    "\r": "\\r",
}


def dump_global(name: str, table: dict) -> str:
    """Serialize ``table`` as the assignment ``name = {...}``."""
    return f"{name} = {serialize_table(table)}"


def serialize_table(table: dict, indent_level: int = 0) -> str:
    if not table:
        return "{ }"

    inner = INDENT * (indent_level + 1)
    entries = [
        f"{inner}[{serialize_key(key)}] = {serialize_value(value, indent_level + 1)}"
        for key, value in table.items()
    ]
    return "{\n" + ",\n".join(entries) + "\n" + INDENT * indent_level + "}"


def serialize_key(key: Any) -> str:
    if isinstance(key, str):
        return quote_string(key)
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        return format_number(key)
    raise SerializationError(f"unsupported table key {key!r} of type {type(key).__name__}")


def serialize_value(value: Any, indent_level: int = 0) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, dict):
        return serialize_table(value, indent_level)
    raise SerializationError(f"unsupported value {value!r} of type {type(value).__name__}")


def format_number(value: int | float) -> str:
    """Shortest text that reads back as the same number."""
    if isinstance(value, int):
        return str(value)
    if math.isnan(value) or math.isinf(value):
        raise SerializationError(f"cannot write non-finite number {value!r}")
    if value.is_integer() and abs(value) < _INT_FORMAT_LIMIT:
        return str(int(value))
    return repr(value)


def quote_string(text: str) -> str:
    out = ['"']
    for ch in text:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
            continue
        code = ord(ch)
        if 0xDC80 <= code <= 0xDCFF:
            # raw byte carried through surrogateescape
            out.append(f"\\{code - 0xDC00:03d}")
        elif (code < 0x20 and ch != "\t") or code == 0x7F:
            out.append(f"\\{code:03d}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)
