"""
Text helpers for emitting TypeScript source.
"""

from __future__ import annotations

import json
import math
from typing import Any


def escape_description(text: str) -> str:
    """Escape text for a double-quoted string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def escape_pattern(pattern: str) -> str:
    """Escape a regex source for use inside a /.../ literal.

    Existing escapes are kept as they are; bare forward slashes and line
    breaks are escaped.
    """
    out = []
    escaped = False
    for char in pattern:
        if escaped:
            out.append(char)
            escaped = False
        elif char == "\\":
            out.append(char)
            escaped = True
        elif char == "/":
            out.append("\\/")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        else:
            out.append(char)
    if escaped:
        out.append("\\")
    return "".join(out)


def escape_jsdoc(text: str) -> str:
    """Keep user text from closing a comment or starting a JSDoc tag."""
    return text.replace("*/", "*\\/").replace("@", "\\@")


def format_number(value: int | float) -> str:
    """Render a number the way JavaScript prints it (1.0 -> "1")."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return repr(value)


def js_literal(value: Any) -> str:
    """Render a JSON value as a TypeScript literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return json.dumps(value, ensure_ascii=False)


def wrap_nullable(code: str, nullable: bool) -> str:
    return f"{code}.nullable()" if nullable else code


def add_description(code: str, description: Any, use_describe: bool) -> str:
    if not description or not use_describe or not isinstance(description, str):
        return code
    return f'{code}.describe("{escape_description(description)}")'


def indent(text: str, prefix: str = "\t") -> str:
    return "\n".join(f"{prefix}{line}" if line else line for line in text.split("\n"))
