"""
Schema usage analysis.

Classifies every named schema as used by requests, responses, or both by
walking the document's operations and expanding the reference closure of
what they touch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .ref_resolver import ReferenceResolver, resolve_ref_name

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")

# Keywords holding a single sub-schema / a list of sub-schemas
_SINGLE_CHILDREN = (
    "items",
    "not",
    "if",
    "then",
    "else",
    "additionalProperties",
    "contains",
    "propertyNames",
    "unevaluatedProperties",
    "unevaluatedItems",
)
_LIST_CHILDREN = ("allOf", "oneOf", "anyOf", "prefixItems")
# Keywords mapping names to sub-schemas (array-form dependencies are skipped)
_MAP_CHILDREN = ("properties", "patternProperties", "dependencies")

OperationPredicate = Callable[[str, str, dict], bool]


class SchemaContext(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    BOTH = "both"


@dataclass
class UsageAnalysis:
    """Result of usage analysis. Schemas missing from usage_map are unreferenced."""

    usage_map: dict[str, SchemaContext] = field(default_factory=dict)
    request_schemas: set[str] = field(default_factory=set)
    response_schemas: set[str] = field(default_factory=set)
    # Schemas reachable from the analyzed operations, before any readOnly/writeOnly fallback
    operation_schemas: set[str] = field(default_factory=set)

    def context_of(self, name: str) -> SchemaContext | None:
        return self.usage_map.get(name)


def iter_operations(document: dict) -> Iterator[tuple[str, str, dict, dict]]:
    """Yield (path, method, path_item, operation) in document order."""
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                yield path, method, path_item, operation


def extract_schema_refs(schema: Any, refs: set[str] | None = None) -> set[str]:
    """Collect the names of all schemas referenced anywhere inside a schema tree."""
    refs = set() if refs is None else refs
    stack = [schema]
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        ref = node.get("$ref")
        if isinstance(ref, str):
            refs.add(resolve_ref_name(ref))
        for key in _SINGLE_CHILDREN:
            if isinstance(node.get(key), dict):
                stack.append(node[key])
        for key in _LIST_CHILDREN:
            if isinstance(node.get(key), list):
                stack.extend(node[key])
        for key in _MAP_CHILDREN:
            if isinstance(node.get(key), dict):
                stack.extend(child for child in node[key].values() if isinstance(child, dict))
    return refs


def expand_transitive_references(names: set[str], schemas: dict[str, Any]) -> None:
    """Grow a set of schema names to its transitive reference closure (in place)."""
    pending = list(names)
    processed: set[str] = set()
    while pending:
        name = pending.pop()
        if name in processed:
            continue
        processed.add(name)
        schema = schemas.get(name)
        if schema is None:
            continue
        for ref in extract_schema_refs(schema):
            if ref not in names:
                names.add(ref)
                pending.append(ref)


def _has_flagged_property(schema: Any, flag: str) -> bool:
    if not isinstance(schema, dict):
        return False
    if schema.get(flag) is True:
        return True
    children = list((schema.get("properties") or {}).values())
    children.extend(schema.get("allOf") or [])
    if isinstance(schema.get("items"), dict):
        children.append(schema["items"])
    return any(_has_flagged_property(child, flag) for child in children)


def has_read_only_properties(schema: Any) -> bool:
    return _has_flagged_property(schema, "readOnly")


def has_write_only_properties(schema: Any) -> bool:
    return _has_flagged_property(schema, "writeOnly")


def _content_schemas(container: Any) -> Iterator[Any]:
    if not isinstance(container, dict):
        return
    for media_type in (container.get("content") or {}).values():
        if isinstance(media_type, dict) and "schema" in media_type:
            yield media_type["schema"]


def analyze_schema_usage(
    document: dict,
    resolver: ReferenceResolver | None = None,
    include_operation: OperationPredicate | None = None,
) -> UsageAnalysis:
    """
    Classify named schemas by the side of the API that uses them.

    Args:
        document: The parsed OpenAPI document
        resolver: Resolver used for request body, response and parameter pointers
        include_operation: Optional predicate (path, method, operation) deciding
            which operations take part in the analysis

    Returns:
        UsageAnalysis with the per-schema context
    """
    resolver = resolver or ReferenceResolver(document)
    schemas = resolver.schemas
    analysis = UsageAnalysis()
    requests, responses = analysis.request_schemas, analysis.response_schemas

    has_paths = bool(document.get("paths"))
    if has_paths:
        for path, method, path_item, operation in iter_operations(document):
            if include_operation is not None and not include_operation(path, method, operation):
                continue

            for schema in _content_schemas(resolver.resolve(operation.get("requestBody"))):
                extract_schema_refs(schema, requests)

            for response in (operation.get("responses") or {}).values():
                for schema in _content_schemas(resolver.resolve(response)):
                    extract_schema_refs(schema, responses)

            for param in resolver.merge_parameters(path_item.get("parameters"), operation.get("parameters")):
                if isinstance(param, dict) and "schema" in param:
                    extract_schema_refs(param["schema"], requests)

        expand_transitive_references(requests, schemas)
        expand_transitive_references(responses, schemas)
        analysis.operation_schemas = requests | responses

    if not has_paths or (not requests and not responses):
        logger.debug("No operation usage found, classifying schemas by readOnly/writeOnly properties")
        for name, schema in schemas.items():
            read_only = has_read_only_properties(schema)
            write_only = has_write_only_properties(schema)
            if write_only and not read_only:
                requests.add(name)
            elif read_only and not write_only:
                responses.add(name)

    for name in schemas:
        if name in requests and name in responses:
            analysis.usage_map[name] = SchemaContext.BOTH
        elif name in requests:
            analysis.usage_map[name] = SchemaContext.REQUEST
        elif name in responses:
            analysis.usage_map[name] = SchemaContext.RESPONSE

    logger.debug(
        "Schema usage: %d request, %d response, %d unreferenced",
        len(requests),
        len(responses),
        len(schemas) - len(analysis.usage_map),
    )
    return analysis
