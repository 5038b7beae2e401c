"""
Query and header parameter schemas, one per operation.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Callable
from typing import Any

from .compiler import CompilationSession
from .compiler.enums import compile_enum_values
from .compiler.objects import OBJECT_CONSTRUCTORS
from .compiler.strings import cached_pattern
from .cycle_detector import resolve_schema_alias
from .naming import get_operation_name, quote_property_name, strip_path_prefix, to_pascal_case
from .ref_resolver import resolve_ref_name
from .usage_analyzer import iter_operations
from .utils import escape_description, format_number, indent

logger = logging.getLogger(__name__)

_STRING_FORMATS = {"email": "z.email()", "uri": "z.url()", "url": "z.url()", "uuid": "z.uuid()"}

OperationPredicate = Callable[[str, str, dict], bool]


def compile_query_param(session: CompilationSession, schema: Any, owner: str) -> str:
    """
    Validator for a query parameter.

    Query strings carry simple values, so only references, enums, strings,
    numbers, booleans and arrays of those are translated.
    """
    if not isinstance(schema, dict):
        return "z.unknown()"

    if isinstance(schema.get("$ref"), str):
        name = resolve_ref_name(schema["$ref"])
        if name not in session.schemas:
            return "z.unknown()"
        target = resolve_schema_alias(name, session.schemas)
        session.add_dependency(owner, target)
        return session.var_name(target)

    if isinstance(schema.get("enum"), list):
        return compile_enum_values(schema["enum"])

    type_ = schema.get("type")
    if type_ == "string":
        code = _STRING_FORMATS.get(schema.get("format") or "", "z.string()")
        if schema.get("minLength") is not None:
            code += f".min({schema['minLength']})"
        if schema.get("maxLength") is not None:
            code += f".max({schema['maxLength']})"
        if schema.get("pattern"):
            code += f".regex(/{cached_pattern(schema['pattern'], session.pattern_cache)}/)"
        return code

    if type_ in ("number", "integer"):
        code = "z.number().int()" if type_ == "integer" else "z.number()"
        if schema.get("minimum") is not None:
            method = "gt" if schema.get("exclusiveMinimum") is True else "gte"
            code += f".{method}({format_number(schema['minimum'])})"
        if schema.get("maximum") is not None:
            method = "lt" if schema.get("exclusiveMaximum") is True else "lte"
            code += f".{method}({format_number(schema['maximum'])})"
        return code

    if type_ == "boolean":
        return "z.boolean()"

    if type_ == "array" and isinstance(schema.get("items"), dict):
        code = f"z.array({compile_query_param(session, schema['items'], owner)})"
        if schema.get("minItems") is not None:
            code += f".min({schema['minItems']})"
        if schema.get("maxItems") is not None:
            code += f".max({schema['maxItems']})"
        return code

    return "z.unknown()"


def is_ignored_header(name: str, patterns: list[str]) -> bool:
    """Case-insensitive glob match; "*" ignores every header."""
    lowered = name.lower()
    return any(pattern == "*" or fnmatch.fnmatchcase(lowered, pattern.lower()) for pattern in patterns)


def _param_var_name(session: CompilationSession, operation_name: str, kind: str) -> str:
    name = operation_name
    if session.options.prefix:
        name = to_pascal_case(session.options.prefix) + name
    if session.options.suffix:
        name = name + to_pascal_case(session.options.suffix)
    return f"{name[:1].lower()}{name[1:]}{kind}Schema"


def _declaration(session: CompilationSession, description: str, var_name: str, type_name: str, entries: list[str]) -> str:
    constructor = OBJECT_CONSTRUCTORS[session.request_options.mode]
    body = "{\n" + ",\n".join(indent(entry) for entry in entries) + "\n}"
    return f"/**\n * {description}\n */\nexport const {var_name} = {constructor}({body});\nexport type {type_name} = z.infer<typeof {var_name}>;"


def build_parameter_schemas(session: CompilationSession, document: dict, include_operation: OperationPredicate | None = None) -> dict[str, str]:
    """
    Query and header parameter declarations for every included operation.

    Returns:
        Declarations keyed by "<Operation>QueryParams" / "<Operation>HeaderParams"
    """
    options = session.options
    request = session.request_options
    fragments: dict[str, str] = {}

    for path, method, path_item, operation in iter_operations(document):
        if include_operation is not None and not include_operation(path, method, operation):
            continue

        params = session.resolver.merge_parameters(path_item.get("parameters"), operation.get("parameters"))
        query = [p for p in params if isinstance(p, dict) and p.get("in") == "query"]
        headers = [p for p in params if isinstance(p, dict) and p.get("in") == "header" and not is_ignored_header(p.get("name", ""), options.ignore_headers)]
        if not query and not headers:
            continue

        operation_name = get_operation_name(
            operation.get("operationId"),
            method,
            strip_path_prefix(path, options.strip_path_prefix),
            options.use_operation_id,
        )
        label = operation.get("operationId") or f"{method.upper()} {path}"

        if query:
            key = f"{operation_name}QueryParams"
            entries = []
            for param in query:
                code = compile_query_param(session, param.get("schema"), key)
                description = param.get("description")
                if description and request.include_descriptions and request.use_describe:
                    code += f'.describe("{escape_description(description)}")'
                if param.get("required") is not True:
                    code += ".optional()"
                entries.append(f"{quote_property_name(param.get('name', ''))}: {code}")
            fragments[key] = _declaration(session, f"Query parameters for {label}", _param_var_name(session, operation_name, "QueryParams"), to_pascal_case(key), entries)

        if headers:
            key = f"{operation_name}HeaderParams"
            entries = [f"{quote_property_name(param.get('name', ''))}: z.string().optional()" for param in headers]
            fragments[key] = _declaration(session, f"Header parameters for {label}", _param_var_name(session, operation_name, "HeaderParams"), to_pascal_case(key), entries)

    logger.debug("Generated %d parameter schemas", len(fragments))
    return fragments
