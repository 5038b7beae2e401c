"""
Object validators.

Properties are emitted in document order. Openness follows the caller's
mode, except that `additionalProperties: false` always produces the strict
form. Keyword refinements (property counts, undeclared required names,
patternProperties, propertyNames, dependencies, if/then/else) are chained
after the object in that order.
"""

from __future__ import annotations

import json

from ..config import EmptyObjectBehavior, ObjectMode
from ..naming import property_access, quote_property_name
from ..utils import add_description, indent
from . import conditionals
from .jsdoc import build_jsdoc
from .session import CompilationSession, CompileFn, Scope, should_include_property

OBJECT_CONSTRUCTORS = {
    ObjectMode.STRICT: "z.strictObject",
    ObjectMode.NORMAL: "z.object",
    ObjectMode.LOOSE: "z.looseObject",
}

EMPTY_OBJECTS = {
    EmptyObjectBehavior.STRICT: "z.strictObject({})",
    EmptyObjectBehavior.LOOSE: "z.looseObject({})",
    EmptyObjectBehavior.RECORD: "z.record(z.string(), z.unknown())",
}

# Keywords that make an object schema more than an empty shape
_STRUCTURAL_KEYWORDS = (
    "required",
    "minProperties",
    "maxProperties",
    "patternProperties",
    "propertyNames",
    "dependencies",
    "dependentRequired",
    "if",
)


def is_empty_object(schema: dict) -> bool:
    if schema.get("properties"):
        return False
    return not any(schema.get(key) not in (None, [], {}) for key in _STRUCTURAL_KEYWORDS)


def compile_shape(session: CompilationSession, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """Object literal of property validators: `{\\n\\tid: z.string(),\\n...}`."""
    required = set(schema.get("required") or [])
    entries = []
    for name, prop_schema in (schema.get("properties") or {}).items():
        if not should_include_property(prop_schema, scope.include):
            continue
        code = compile_fn(prop_schema, scope.nested())
        if name not in required:
            code += ".optional()"
        doc = build_jsdoc(prop_schema, name, scope.options.include_descriptions)
        entries.append(indent(f"{doc}{quote_property_name(name)}: {code}"))
    if not entries:
        return "{}"
    return "{\n" + ",\n".join(entries) + "\n}"


def _count_refinement(schema: dict) -> str:
    minimum = schema.get("minProperties")
    maximum = schema.get("maxProperties")
    if minimum is None and maximum is None:
        return ""
    conditions = []
    if minimum is not None:
        conditions.append(f"Object.keys(obj).length >= {minimum}")
    if maximum is not None:
        conditions.append(f"Object.keys(obj).length <= {maximum}")
    if minimum is not None and maximum is not None:
        message = f"Object must have between {minimum} and {maximum} properties"
    elif minimum is not None:
        message = f"Object must have at least {minimum} {'property' if minimum == 1 else 'properties'}"
    else:
        message = f"Object must have at most {maximum} {'property' if maximum == 1 else 'properties'}"
    return f'.refine((obj) => {" && ".join(conditions)}, {{ message: "{message}" }})'


def _pattern_properties_refinement(schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """First matching pattern wins; declared properties are skipped."""
    patterns = schema["patternProperties"]
    defined = json.dumps(list((schema.get("properties") or {}).keys()))
    sources = json.dumps(list(patterns.keys()))
    validators = ", ".join(compile_fn(pattern_schema, scope.nested()) for pattern_schema in patterns.values())
    return (
        ".superRefine((obj, ctx) => {\n"
        f"\tconst definedProps = new Set({defined});\n"
        f"\tconst patterns = {sources};\n"
        f"\tconst schemas = [{validators}];\n"
        "\tconst regexps = patterns.map((p) => new RegExp(p));\n"
        "\tfor (const key of Object.keys(obj)) {\n"
        "\t\tif (definedProps.has(key)) continue;\n"
        "\t\tfor (let i = 0; i < regexps.length; i++) {\n"
        "\t\t\tif (!regexps[i].test(key)) continue;\n"
        "\t\t\tconst result = schemas[i].safeParse(obj[key]);\n"
        "\t\t\tif (!result.success) {\n"
        "\t\t\t\tfor (const issue of result.error.issues) {\n"
        "\t\t\t\t\tctx.addIssue({ ...issue, path: [key, ...issue.path], "
        "message: `Property '${key}' (pattern '${patterns[i]}'): ${issue.message}` });\n"
        "\t\t\t\t}\n"
        "\t\t\t}\n"
        "\t\t\tbreak;\n"
        "\t\t}\n"
        "\t}\n"
        "})"
    )


def _property_names_refinement(schema: dict) -> str:
    names = schema.get("propertyNames")
    if not isinstance(names, dict):
        return ""
    checks = []
    pattern = names.get("pattern")
    if pattern:
        message = json.dumps(f"must match pattern '{pattern}'")
        checks.append(f"if (!new RegExp({json.dumps(pattern)}).test(key)) failures.push({message});")
    if names.get("minLength") is not None:
        checks.append(f'if (key.length < {names["minLength"]}) failures.push("must be at least {names["minLength"]} characters");')
    if names.get("maxLength") is not None:
        checks.append(f'if (key.length > {names["maxLength"]}) failures.push("must be at most {names["maxLength"]} characters");')
    if not checks:
        return ""
    body = "\n".join(f"\t\t{check}" for check in checks)
    return (
        ".superRefine((obj, ctx) => {\n"
        "\tfor (const key of Object.keys(obj)) {\n"
        "\t\tconst failures = [];\n"
        f"{body}\n"
        "\t\tif (failures.length > 0) {\n"
        '\t\t\tctx.addIssue({ code: "custom", message: `Property name \'${key}\' ${failures.join(", ")}`, path: [key] });\n'
        "\t\t}\n"
        "\t}\n"
        "})"
    )


def compile_object(session: CompilationSession, schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    options = scope.options
    additional = schema.get("additionalProperties")

    if is_empty_object(schema) and additional is None:
        return add_description(EMPTY_OBJECTS[options.empty_object_behavior], schema.get("description"), options.use_describe)

    constructor = "z.strictObject" if additional is False else OBJECT_CONSTRUCTORS[options.mode]
    code = f"{constructor}({compile_shape(session, schema, scope, compile_fn)})"

    if isinstance(additional, dict):
        code += f".catchall({compile_fn(additional, scope.nested())})"
    elif additional is True:
        code += ".catchall(z.unknown())"
    elif additional is None and schema.get("patternProperties"):
        code += ".catchall(z.unknown())"

    code += _count_refinement(schema)

    declared = set((schema.get("properties") or {}).keys())
    undeclared = [name for name in schema.get("required") or [] if name not in declared]
    if undeclared:
        if ".catchall(" not in code:
            code += ".catchall(z.unknown())"
        checks = " && ".join(f"{property_access(name)} !== undefined" for name in undeclared)
        code += f'.refine((obj) => {checks}, {{ message: "Missing required fields: {", ".join(undeclared)}" }})'

    if schema.get("patternProperties"):
        code += _pattern_properties_refinement(schema, scope, compile_fn)
    code += _property_names_refinement(schema)
    code += conditionals.compile_dependencies(schema, scope, compile_fn)
    code += conditionals.compile_dependent_required(schema)
    code += conditionals.compile_if_then_else(schema)

    return add_description(code, schema.get("description"), options.use_describe)
