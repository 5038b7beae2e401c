"""
Conditional object refinements: dependencies, dependentRequired and
if/then/else.

The emitted refinements operate on the parsed object (`obj`) at runtime, so
each branch is reduced to a plain JavaScript boolean expression instead of a
nested validator.
"""

from __future__ import annotations

import json

from ..naming import property_access
from ..utils import format_number, js_literal
from .session import CompileFn, Scope

_TYPE_CHECKS = {
    "string": 'typeof {v} === "string"',
    "number": 'typeof {v} === "number"',
    "integer": "Number.isInteger({v})",
    "boolean": 'typeof {v} === "boolean"',
    "array": "Array.isArray({v})",
    "object": '({v} !== null && typeof {v} === "object" && !Array.isArray({v}))',
    "null": "{v} === null",
}


def _required_refinement(prop: str, required: list[str]) -> str:
    access = property_access(prop)
    checks = " || ".join(f"{property_access(name)} === undefined" for name in required)
    names = ", ".join(required)
    return (
        f".superRefine((obj, ctx) => {{ if ({access} !== undefined && ({checks})) {{ "
        f"ctx.addIssue({{ code: \"custom\", message: \"When '{prop}' is present, {names} must also be present\", path: [{json.dumps(prop)}] }}); }} }})"
    )


def compile_dependencies(schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """OpenAPI 3.0 `dependencies`: array form (required implication) or schema form."""
    dependencies = schema.get("dependencies")
    if not isinstance(dependencies, dict):
        return ""
    code = ""
    for prop, dependency in dependencies.items():
        if isinstance(dependency, list):
            if dependency:
                code += _required_refinement(prop, dependency)
        elif isinstance(dependency, dict):
            validator = compile_fn(dependency, scope.nested())
            access = property_access(prop)
            code += (
                f".superRefine((obj, ctx) => {{ if ({access} === undefined) return; "
                f"const result = {validator}.safeParse(obj); "
                f"if (!result.success) {{ ctx.addIssue({{ code: \"custom\", "
                f"message: `When '{prop}' is present, object must satisfy additional constraints: "
                f"${{result.error.issues.map((issue) => issue.path.join(\".\") || issue.message).join(\", \")}}`, "
                f"path: [{json.dumps(prop)}] }}); }} }})"
            )
    return code


def compile_dependent_required(schema: dict) -> str:
    dependent = schema.get("dependentRequired")
    if not isinstance(dependent, dict):
        return ""
    return "".join(_required_refinement(prop, required) for prop, required in dependent.items() if isinstance(required, list) and required)


def _property_checks(prop: str, prop_schema: dict) -> list[str]:
    """Boolean expressions asserting a property value against simple keywords."""
    value = property_access(prop)
    checks = []
    if "const" in prop_schema:
        checks.append(f"{value} === {js_literal(prop_schema['const'])}")
    if isinstance(prop_schema.get("enum"), list):
        checks.append(f"{json.dumps(prop_schema['enum'])}.includes({value})")
    type_ = prop_schema.get("type")
    if isinstance(type_, str) and type_ in _TYPE_CHECKS:
        checks.append(_TYPE_CHECKS[type_].format(v=value))
    if prop_schema.get("minimum") is not None:
        checks.append(f"{value} >= {format_number(prop_schema['minimum'])}")
    if prop_schema.get("maximum") is not None:
        checks.append(f"{value} <= {format_number(prop_schema['maximum'])}")
    if prop_schema.get("minLength") is not None:
        checks.append(f"{value}.length >= {prop_schema['minLength']}")
    if prop_schema.get("maxLength") is not None:
        checks.append(f"{value}.length <= {prop_schema['maxLength']}")
    return checks


def build_condition(branch: dict) -> str:
    """
    JavaScript condition equivalent to an `if` branch.

    Property assertions only apply when the property is present, matching
    JSON Schema semantics; `required` names must be present.
    """
    clauses = [f"{property_access(name)} !== undefined" for name in branch.get("required") or []]
    for prop, prop_schema in (branch.get("properties") or {}).items():
        if not isinstance(prop_schema, dict):
            continue
        checks = _property_checks(prop, prop_schema)
        if checks:
            clauses.append(f"({property_access(prop)} === undefined || ({' && '.join(checks)}))")
    return " && ".join(clauses) if clauses else "true"


def _branch_failures(branch: dict) -> list[tuple[str, str]]:
    """(failure condition, message) pairs for a then/else branch."""
    failures = []
    for name in branch.get("required") or []:
        failures.append((f"{property_access(name)} === undefined", f"{name} is required"))
    for prop, prop_schema in (branch.get("properties") or {}).items():
        if not isinstance(prop_schema, dict):
            continue
        checks = _property_checks(prop, prop_schema)
        if checks:
            value = property_access(prop)
            failures.append((f"{value} !== undefined && !({' && '.join(checks)})", f"{prop} is invalid"))
    return failures


def _branch_block(branch: dict | None) -> str:
    if not isinstance(branch, dict):
        return ""
    statements = []
    for condition, message in _branch_failures(branch):
        statements.append(f'if ({condition}) {{ ctx.addIssue({{ code: "custom", message: {json.dumps(message)}, path: [] }}); }}')
    return " ".join(statements)


def compile_if_then_else(schema: dict) -> str:
    """
    Conditional validation. A missing `then` or `else` branch passes.
    """
    condition_schema = schema.get("if")
    if not isinstance(condition_schema, dict):
        return ""
    then_block = _branch_block(schema.get("then"))
    else_block = _branch_block(schema.get("else"))
    if not then_block and not else_block:
        return ""

    condition = build_condition(condition_schema)
    body = f"if ({condition}) {{ {then_block} }}"
    if else_block:
        body += f" else {{ {else_block} }}"
    return f".superRefine((obj, ctx) => {{ {body} }})"
