"""
JSDoc comments for schemas and properties.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..utils import escape_jsdoc, format_number

logger = logging.getLogger(__name__)

# Constraint keywords surfaced as JSDoc tags on native types, in output order
CONSTRAINT_TAGS = (
    "minLength",
    "maxLength",
    "pattern",
    "minimum",
    "maximum",
    "minItems",
    "maxItems",
    "minProperties",
    "maxProperties",
    "multipleOf",
    "format",
)


def _example(value: Any) -> str | None:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        logger.warning("Could not serialize schema example %r", value)
        return None


def jsdoc_parts(schema: Any, name: str | None = None) -> list[str]:
    """Title (when it differs from the name), description, examples and @deprecated."""
    if not isinstance(schema, dict):
        return []
    parts = []
    title = schema.get("title")
    if isinstance(title, str) and title and title != name:
        parts.append(escape_jsdoc(title))
    description = schema.get("description")
    if isinstance(description, str) and description:
        parts.append(escape_jsdoc(description))

    examples = schema.get("examples")
    if isinstance(examples, list) and examples:
        rendered = [text for text in (_example(example) for example in examples) if text is not None]
        if rendered:
            parts.append(f"@example {', '.join(rendered)}")
    elif "example" in schema:
        rendered = _example(schema["example"])
        if rendered is not None:
            parts.append(f"@example {rendered}")

    if schema.get("deprecated") is True:
        parts.append("@deprecated")
    return parts


def constraint_tags(schema: Any) -> list[str]:
    if not isinstance(schema, dict):
        return []
    tags = []
    for key in CONSTRAINT_TAGS:
        value = schema.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = format_number(value)
        tags.append(f"@{key} {value}")
    return tags


def build_jsdoc(
    schema: Any,
    name: str | None = None,
    include_descriptions: bool = True,
    extra_lines: list[str] | None = None,
    with_constraints: bool = False,
) -> str:
    """
    JSDoc block for a schema, with a trailing newline, or "" when there is
    nothing to document.

    Plain documentation fits on one line: `/** Title Description @deprecated */`.
    Constraint tags and extra lines (e.g. allOf conflict warnings) switch to
    the multi-line form. With descriptions disabled only @deprecated remains.
    """
    if not include_descriptions:
        if isinstance(schema, dict) and schema.get("deprecated") is True:
            return "/** @deprecated */\n"
        return ""

    parts = jsdoc_parts(schema, name)
    tail = (constraint_tags(schema) if with_constraints else []) + list(extra_lines or [])
    if not tail:
        return f"/** {' '.join(parts)} */\n" if parts else ""

    lines = ["/**"]
    if parts:
        lines.append(f" * {' '.join(parts)}")
    lines.extend(f" * {line}" if line else " *" for line in tail)
    lines.append(" */")
    return "\n".join(lines) + "\n"
