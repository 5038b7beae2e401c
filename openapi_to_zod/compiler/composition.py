"""
Composition keywords: allOf, oneOf/anyOf, not and the unevaluated keywords
that apply to them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..ref_resolver import resolve_ref_name
from ..schema_nodes import is_object_shaped, union_members
from .objects import compile_shape
from .session import CompilationSession, CompileFn, Scope

logger = logging.getLogger(__name__)


def _member_properties(session: CompilationSession, member: Any) -> dict:
    """Properties declared by an allOf/union member, following one pointer hop."""
    if not isinstance(member, dict):
        return {}
    if isinstance(member.get("$ref"), str):
        target = session.schemas.get(resolve_ref_name(member["$ref"]))
        return (target or {}).get("properties") or {}
    return member.get("properties") or {}


def detect_all_of_conflicts(session: CompilationSession, members: list) -> list[str]:
    """Properties declared with different types by different allOf members."""
    seen: dict[str, Any] = {}
    conflicts = []
    for member in members:
        for name, prop in _member_properties(session, member).items():
            if not isinstance(prop, dict) or "type" not in prop:
                continue
            if name in seen and seen[name] != prop["type"]:
                conflicts.append(f"Property '{name}' has conflicting types: {seen[name]} vs {prop['type']}")
            else:
                seen.setdefault(name, prop["type"])
    return conflicts


def _is_inline_object(member: Any) -> bool:
    return isinstance(member, dict) and "$ref" not in member and "allOf" not in member and bool(member.get("properties"))


def compile_all_of(session: CompilationSession, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """
    A single member passes through. Object-shaped members are chained with
    `.extend()`; anything else is intersected with `.and()`.
    """
    members = schema["allOf"]
    member_scope = scope.nested(suppress_default_nullable=True)

    if len(members) == 1:
        code = compile_fn(members[0], member_scope)
    else:
        for conflict in detect_all_of_conflicts(session, members):
            logger.warning("allOf in schema '%s': %s", scope.owner, conflict)
            session.record_conflict(scope.owner, conflict)

        compiled = [compile_fn(member, member_scope) for member in members]
        code = compiled[0]
        extendable = all(is_object_shaped(member) for member in members) and _can_extend(code)
        for member, member_code in zip(members[1:], compiled[1:]):
            if extendable and _is_inline_object(member):
                code += f".extend({compile_shape(session, member, member_scope, compile_fn)})"
            elif extendable and _can_extend(member_code):
                code += f".extend({member_code}.shape)"
            else:
                code += f".and({member_code})"

    if "unevaluatedProperties" in schema:
        code = apply_unevaluated_properties(session, code, schema, scope, compile_fn)
    return code


def _can_extend(code: str) -> bool:
    """Only plain object validators expose `.shape`."""
    return not code.startswith("z.lazy(") and not code.endswith(".nullable()") and ".refine(" not in code and ".superRefine(" not in code


def order_by_mapping(members: list, mapping: dict[str, str]) -> list:
    """
    Reorder union members to follow a discriminator mapping.

    Mapped members come first, in mapping order. A mapping value without a
    matching member becomes a reference of its own; unmapped members follow.
    """
    ordered: list = []
    for target in mapping.values():
        target_name = resolve_ref_name(target)
        match = next(
            (m for m in members if isinstance(m, dict) and isinstance(m.get("$ref"), str) and resolve_ref_name(m["$ref"]) == target_name),
            None,
        )
        candidate = match if match is not None else {"$ref": target}
        if not any(candidate is existing for existing in ordered):
            ordered.append(candidate)
    for member in members:
        if not any(member is existing for existing in ordered):
            ordered.append(member)
    return ordered


def _with_catchall(code: str) -> str:
    return code if ".catchall(" in code else f"{code}.catchall(z.unknown())"


def compile_union(session: CompilationSession, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    members = union_members(schema)
    discriminator = schema.get("discriminator")
    member_scope = scope.nested(suppress_default_nullable=True)
    passthrough = "unevaluatedProperties" in schema

    property_name = discriminator.get("propertyName") if isinstance(discriminator, dict) else None
    if property_name and isinstance(discriminator.get("mapping"), dict):
        members = order_by_mapping(members, discriminator["mapping"])

    compiled = [compile_fn(member, member_scope) for member in members]
    if passthrough:
        compiled = [_with_catchall(code) for code in compiled]

    if property_name:
        code = f"z.discriminatedUnion({json.dumps(property_name)}, [{', '.join(compiled)}])"
    else:
        code = f"z.union([{', '.join(compiled)}])"

    if passthrough:
        code = apply_unevaluated_properties(session, code, schema, scope, compile_fn)
    return code


def compile_not(session: CompilationSession, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """The structural base (or z.unknown()) refined to reject what `not` accepts."""
    excluded = compile_fn(schema["not"], scope.nested())
    if any(key in schema for key in ("type", "properties", "items")):
        base_schema = {key: value for key, value in schema.items() if key not in ("not", "nullable")}
        base = compile_fn(base_schema, scope.nested(suppress_default_nullable=True))
    else:
        base = "z.unknown()"
    return f'{base}.refine((val) => !{excluded}.safeParse(val).success, {{ message: "Value must not match the excluded schema" }})'


def evaluated_properties(session: CompilationSession, schema: dict) -> list[str]:
    names = list((schema.get("properties") or {}).keys())
    for keyword in ("allOf", "oneOf", "anyOf"):
        for member in schema.get(keyword) or []:
            for name in _member_properties(session, member):
                if name not in names:
                    names.append(name)
    return names


def apply_unevaluated_properties(session: CompilationSession, code: str, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    unevaluated = schema.get("unevaluatedProperties")
    evaluated = f"new Set({json.dumps(evaluated_properties(session, schema))})"
    if ".extend(" in code:
        code = _with_catchall(code)

    if unevaluated is False:
        return f'{code}.refine((obj) => Object.keys(obj).every((key) => {evaluated}.has(key)), {{ message: "No unevaluated properties allowed" }})'
    if isinstance(unevaluated, dict):
        validator = compile_fn(unevaluated, scope.nested())
        return (
            f"{code}.refine((obj) => Object.keys(obj).filter((key) => !{evaluated}.has(key))"
            f'.every((key) => {validator}.safeParse(obj[key]).success), {{ message: "Unevaluated properties must match the schema" }})'
        )
    return code
