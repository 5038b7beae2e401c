"""
Enum and const expressions, and the `export enum` declarations surfaced
for top-level enum schemas.
"""

from __future__ import annotations

import json
import math
from typing import Any

from ..naming import numeric_to_enum_member, string_to_enum_member
from ..utils import js_literal


def enum_name(type_name: str) -> str:
    """Name of the declared enum: "Status" -> "StatusEnum", "SortEnumOptions" -> "SortEnum"."""
    if type_name.endswith("EnumOptions"):
        return type_name[: -len("Options")]
    return f"{type_name}Enum"


def compile_const(value: Any) -> str:
    if value is None:
        return "z.null()"
    if isinstance(value, (dict, list)):
        literal = json.dumps(value, ensure_ascii=False)
        return f'z.unknown().refine((val) => JSON.stringify(val) === JSON.stringify({literal}), {{ message: "Value must equal the constant {escape_message(literal)}" }})'
    return f"z.literal({js_literal(value)})"


def escape_message(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def enum_values(values: list) -> list:
    """Enum values with `null` removed; it is expressed through .nullable() instead."""
    return [value for value in values if value is not None]


def is_boolean_enum(values: list) -> bool:
    values = enum_values(values)
    return bool(values) and all(isinstance(value, bool) for value in values)


def is_declarable_enum(values: list) -> bool:
    """Whether the values fit a TypeScript `enum`: strings and finite numbers only."""
    values = enum_values(values)
    return bool(values) and all(
        isinstance(value, str) or (isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)) for value in values
    )


def compile_enum_values(values: list) -> str:
    """
    Validator for an inline enum.

    All-string enums become z.enum; boolean enums collapse to z.boolean();
    anything else is a union of literals.
    """
    values = enum_values(values)
    if not values:
        return "z.null()"
    if is_boolean_enum(values):
        return "z.boolean()"
    if all(isinstance(value, str) for value in values):
        return f"z.enum([{', '.join(json.dumps(value, ensure_ascii=False) for value in values)}])"
    if len(values) == 1:
        return f"z.literal({js_literal(values[0])})"
    return f"z.union([{', '.join(f'z.literal({js_literal(value)})' for value in values)}])"


def literal_union_type(values: list) -> str:
    """TypeScript union of literal types: `"a" | "b" | 1`."""
    return " | ".join(js_literal(value) for value in enum_values(values)) or "never"


def build_enum_declaration(name: str, values: list) -> str:
    """
    `export enum <name> { Key = value, ... }`.

    Member keys are derived per value and de-duplicated case-insensitively
    in declaration order.
    """
    used_keys: set[str] = set()
    members = []
    for index, value in enumerate(enum_values(values)):
        if isinstance(value, str):
            key = string_to_enum_member(value, used_keys)
        else:
            key = numeric_to_enum_member(value, used_keys, index)
        members.append(f"\t{key} = {js_literal(value)},")
    return f"export enum {name} {{\n" + "\n".join(members) + "\n}"
