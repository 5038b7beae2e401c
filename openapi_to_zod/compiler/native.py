"""
Plain TypeScript type expressions for schemas emitted in native-type mode.

These have no runtime validator, so constraints are carried as JSDoc tags
on properties instead.
"""

from __future__ import annotations

from typing import Any

from ..config import EmptyObjectBehavior
from ..cycle_detector import resolve_schema_alias
from ..naming import quote_property_name
from ..ref_resolver import resolve_ref_name
from ..schema_nodes import SchemaKind, classify, is_explicitly_nullable, non_null_types, union_members
from ..utils import indent, js_literal
from .enums import enum_values, literal_union_type
from .jsdoc import build_jsdoc
from .session import CompilationSession, Scope, should_include_property

_PRIMITIVES = {
    SchemaKind.STRING: "string",
    SchemaKind.NUMBER: "number",
    SchemaKind.INTEGER: "number",
    SchemaKind.BOOLEAN: "boolean",
    SchemaKind.NULL: "null",
    SchemaKind.UNKNOWN: "unknown",
}


def _group(type_: str) -> str:
    """Parenthesise unions and intersections before applying a postfix or joining."""
    return f"({type_})" if (" | " in type_ or " & " in type_) and not type_.startswith("{") else type_


def compile_native_type(session: CompilationSession, schema: Any, scope: Scope) -> str:
    """TypeScript type for a schema node; `T | null` when nullable."""
    if not isinstance(schema, dict):
        return "unknown"
    kind = classify(schema)
    type_ = _native(session, schema, kind, scope)

    nullable = is_explicitly_nullable(schema) or (kind == SchemaKind.ENUM and None in schema["enum"])
    if nullable and kind != SchemaKind.NULL:
        return f"{_group(type_)} | null"
    return type_


def _native(session: CompilationSession, schema: dict, kind: SchemaKind, scope: Scope) -> str:
    if kind in _PRIMITIVES:
        return _PRIMITIVES[kind]

    if kind == SchemaKind.MULTI_TYPE:
        base = {key: value for key, value in schema.items() if key not in ("type", "nullable")}
        return " | ".join(_group(compile_native_type(session, {**base, "type": t}, scope.nested())) for t in non_null_types(schema))

    if kind == SchemaKind.REF:
        name = resolve_ref_name(schema["$ref"])
        target = resolve_schema_alias(name, session.schemas) if name in session.schemas else name
        if scope.owner is not None and name in session.schemas:
            session.add_dependency(scope.owner, target)
        return session.type_name(name)

    if kind == SchemaKind.CONST:
        return js_literal(schema["const"])

    if kind == SchemaKind.ENUM:
        if scope.top_level and scope.owner in session.enum_names:
            return session.enum_names[scope.owner]
        return literal_union_type(enum_values(schema["enum"]))

    if kind == SchemaKind.ALL_OF:
        return " & ".join(_group(compile_native_type(session, member, scope.nested())) for member in schema["allOf"])

    if kind == SchemaKind.UNION:
        return " | ".join(_group(compile_native_type(session, member, scope.nested())) for member in union_members(schema))

    if kind == SchemaKind.NOT:
        base = {key: value for key, value in schema.items() if key != "not"}
        return compile_native_type(session, base, scope.nested()) if any(k in base for k in ("type", "properties", "items")) else "unknown"

    if kind == SchemaKind.ARRAY:
        items = schema.get("items")
        item_type = compile_native_type(session, items, scope.nested()) if isinstance(items, dict) else "unknown"
        return f"{_group(item_type)}[]"

    if kind == SchemaKind.TUPLE:
        members = [compile_native_type(session, item, scope.nested()) for item in schema["prefixItems"]]
        rest = schema.get("items")
        if isinstance(rest, dict):
            members.append(f"...{_group(compile_native_type(session, rest, scope.nested()))}[]")
        return f"[{', '.join(members)}]"

    return _native_object(session, schema, scope)


def _native_object(session: CompilationSession, schema: dict, scope: Scope) -> str:
    properties = schema.get("properties") or {}
    additional = schema.get("additionalProperties")
    if not properties and not isinstance(additional, dict):
        if additional is False or scope.options.empty_object_behavior == EmptyObjectBehavior.STRICT:
            return "Record<string, never>"
        return "Record<string, unknown>"

    required = set(schema.get("required") or [])
    lines = []
    for name, prop_schema in properties.items():
        if not should_include_property(prop_schema, scope.include):
            continue
        optional = "" if name in required else "?"
        prop_type = compile_native_type(session, prop_schema, scope.nested())
        doc = build_jsdoc(prop_schema, name, scope.options.include_descriptions, with_constraints=True)
        lines.append(indent(f"{doc}{quote_property_name(name)}{optional}: {prop_type};"))
    if isinstance(additional, dict):
        lines.append(indent(f"[key: string]: {compile_native_type(session, additional, scope.nested())};"))
    return "{\n" + "\n".join(lines) + "\n}"
