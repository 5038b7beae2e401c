"""
Array and tuple validators.
"""

from __future__ import annotations

from ..utils import add_description
from .session import CompileFn, Scope


def _contains_refinement(schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    if not isinstance(schema.get("contains"), dict):
        return ""
    matcher = compile_fn(schema["contains"], scope.nested())
    minimum = schema.get("minContains", 1)
    maximum = schema.get("maxContains")

    count = f"items.filter((item) => {matcher}.safeParse(item).success).length"
    if maximum is not None:
        condition = f"{count} >= {minimum} && {count} <= {maximum}"
        message = f"Array must contain between {minimum} and {maximum} matching items"
    else:
        condition = f"{count} >= {minimum}"
        message = f"Array must contain at least {minimum} matching item{'' if minimum == 1 else 's'}"
    return f'.refine((items) => {condition}, {{ message: "{message}" }})'


def compile_array(schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    items = schema.get("items")
    item_code = compile_fn(items, scope.nested()) if isinstance(items, dict) else "z.unknown()"
    code = f"z.array({item_code})"

    if schema.get("minItems") is not None:
        code += f".min({schema['minItems']})"
    if schema.get("maxItems") is not None:
        code += f".max({schema['maxItems']})"
    if schema.get("uniqueItems") is True:
        code += '.refine((items) => new Set(items).size === items.length, { message: "Array items must be unique" })'

    code += _contains_refinement(schema, scope, compile_fn)
    return add_description(code, schema.get("description"), scope.options.use_describe)


def compile_tuple(schema: dict, scope: Scope, compile_fn: CompileFn) -> str:
    """
    Compile prefixItems to a fixed tuple.

    `items` (or, failing that, an object-valued `unevaluatedItems`) becomes
    the rest element. `unevaluatedItems: false` without a rest element caps
    the length.
    """
    prefix_items = schema["prefixItems"]
    members = [compile_fn(item, scope.nested()) for item in prefix_items]
    code = f"z.tuple([{', '.join(members)}])"

    items = schema.get("items")
    unevaluated = schema.get("unevaluatedItems")
    if isinstance(items, dict):
        code += f".rest({compile_fn(items, scope.nested())})"
    elif isinstance(unevaluated, dict):
        code += f".rest({compile_fn(unevaluated, scope.nested())})"
    elif unevaluated is False:
        length = len(prefix_items)
        code += f'.refine((arr) => arr.length <= {length}, {{ message: "Array must not have more than {length} items" }})'

    if schema.get("minItems") is not None:
        code += f'.refine((arr) => arr.length >= {schema["minItems"]}, {{ message: "Array must have at least {schema["minItems"]} items" }})'
    if schema.get("maxItems") is not None:
        code += f'.refine((arr) => arr.length <= {schema["maxItems"]}, {{ message: "Array must have at most {schema["maxItems"]} items" }})'

    code += _contains_refinement(schema, scope, compile_fn)
    return add_description(code, schema.get("description"), scope.options.use_describe)
