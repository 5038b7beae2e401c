"""
Schema node classification.

Schema nodes are the raw mappings parsed from the document and are never
mutated. Each node is classified exactly once into a SchemaKind, in the
priority order the compiler relies on: a node carrying several keywords
(e.g. $ref next to properties) is compiled as its highest-priority kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class SchemaKind(Enum):
    """Closed set of node kinds, in dispatch priority order."""

    MULTI_TYPE = "multi_type"  # type: [string, number, ...]
    REF = "ref"
    CONST = "const"
    ENUM = "enum"
    ALL_OF = "all_of"
    UNION = "union"  # oneOf / anyOf
    NOT = "not"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    TUPLE = "tuple"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


_OBJECT_KEYWORDS = ("properties", "additionalProperties", "patternProperties", "propertyNames", "required", "minProperties", "maxProperties")
_ARRAY_KEYWORDS = ("items", "prefixItems", "contains")

_PRIMITIVE_KINDS = {
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.INTEGER,
    "boolean": SchemaKind.BOOLEAN,
    "null": SchemaKind.NULL,
    "object": SchemaKind.OBJECT,
}


def non_null_types(schema: dict) -> list[str]:
    type_ = schema.get("type")
    if isinstance(type_, list):
        return [t for t in type_ if t != "null"]
    return [type_] if isinstance(type_, str) and type_ != "null" else []


def primary_type(schema: dict) -> str | None:
    """Declared type, the first non-null entry of a type array, or one inferred from structural keywords."""
    type_ = schema.get("type")
    if isinstance(type_, list):
        types = non_null_types(schema)
        if types:
            return types[0]
        return "null" if "null" in type_ else None
    if type_ is not None:
        return type_
    if any(key in schema for key in _OBJECT_KEYWORDS):
        return "object"
    if any(key in schema for key in _ARRAY_KEYWORDS):
        return "array"
    return None


def has_multiple_types(schema: dict) -> bool:
    return len(non_null_types(schema)) > 1


def is_explicitly_nullable(schema: dict) -> bool:
    """OpenAPI 3.0 `nullable: true` or 3.1 "null" in a type array."""
    if schema.get("nullable") is True:
        return True
    type_ = schema.get("type")
    return isinstance(type_, list) and "null" in type_


def has_explicit_nullable_signal(schema: dict) -> bool:
    """Whether the schema says anything about nullability, either way."""
    return "nullable" in schema or isinstance(schema.get("type"), list)


def union_members(schema: dict) -> list[dict]:
    return schema.get("oneOf") or schema.get("anyOf") or []


def classify(schema: Any) -> SchemaKind:
    """Classify a schema node. Non-mapping nodes (e.g. `true`) are UNKNOWN."""
    if not isinstance(schema, dict):
        return SchemaKind.UNKNOWN
    if has_multiple_types(schema):
        return SchemaKind.MULTI_TYPE
    if isinstance(schema.get("$ref"), str):
        return SchemaKind.REF
    if "const" in schema:
        return SchemaKind.CONST
    if isinstance(schema.get("enum"), list):
        return SchemaKind.ENUM
    if isinstance(schema.get("allOf"), list) and schema["allOf"]:
        return SchemaKind.ALL_OF
    if union_members(schema):
        return SchemaKind.UNION
    if isinstance(schema.get("not"), dict):
        return SchemaKind.NOT

    type_ = primary_type(schema)
    if type_ == "array":
        return SchemaKind.TUPLE if isinstance(schema.get("prefixItems"), list) else SchemaKind.ARRAY
    return _PRIMITIVE_KINDS.get(type_, SchemaKind.UNKNOWN)


def is_object_shaped(schema: Any) -> bool:
    """allOf members that can be merged: objects, references and nested allOf."""
    if not isinstance(schema, dict):
        return False
    return schema.get("type") == "object" or "properties" in schema or "$ref" in schema or "allOf" in schema
