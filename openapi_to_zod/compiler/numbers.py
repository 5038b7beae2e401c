"""
Number and integer validators.
"""

from __future__ import annotations

from ..utils import add_description, format_number


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compile_number(schema: dict, integer: bool, use_describe: bool) -> str:
    """
    Compile a number/integer schema.

    Both exclusive-bound styles are accepted: OpenAPI 3.0 boolean flags that
    turn minimum/maximum exclusive, and numeric exclusiveMinimum/Maximum
    values. multipleOf is applied last.
    """
    code = "z.number().int()" if integer else "z.number()"

    minimum = schema.get("minimum")
    maximum = schema.get("maximum")
    exclusive_min = schema.get("exclusiveMinimum")
    exclusive_max = schema.get("exclusiveMaximum")

    if _is_number(exclusive_min):
        code += f".gt({format_number(exclusive_min)})"
    elif minimum is not None:
        method = "gt" if exclusive_min is True else "gte"
        code += f".{method}({format_number(minimum)})"

    if _is_number(exclusive_max):
        code += f".lt({format_number(exclusive_max)})"
    elif maximum is not None:
        method = "lt" if exclusive_max is True else "lte"
        code += f".{method}({format_number(maximum)})"

    if schema.get("multipleOf") is not None:
        code += f".multipleOf({format_number(schema['multipleOf'])})"

    return add_description(code, schema.get("description"), use_describe)
