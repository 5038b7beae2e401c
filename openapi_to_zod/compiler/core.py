"""
Recursive schema-to-validator translation.

Every node is classified once (see schema_nodes.classify) and handed to the
handler registered for its kind. Helper modules never import this one: they
receive the compile function as a parameter.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

from ..cycle_detector import is_circular_through_alias, resolve_schema_alias
from ..errors import ReferenceResolutionError
from ..ref_resolver import resolve_ref_name
from ..schema_nodes import (
    SchemaKind,
    classify,
    has_explicit_nullable_signal,
    is_explicitly_nullable,
    non_null_types,
)
from ..utils import add_description, wrap_nullable
from . import arrays, composition, enums, numbers, objects, strings
from .session import CompilationSession, Scope

logger = logging.getLogger(__name__)

# Kinds whose result is never made nullable by the default-nullable policy
_NO_DEFAULT_NULLABLE = {SchemaKind.CONST, SchemaKind.ENUM, SchemaKind.ALL_OF, SchemaKind.UNION, SchemaKind.NULL}


def resolve_nullable(schema: dict, kind: SchemaKind, scope: Scope) -> bool:
    """
    Whether the compiled expression gets an outer `.nullable()`.

    An explicit signal (`nullable` or a type array) always wins; the
    default-nullable policy only applies to nested, non-composite values.
    """
    if kind == SchemaKind.ENUM and None in schema["enum"]:
        return True
    if has_explicit_nullable_signal(schema):
        return is_explicitly_nullable(schema)
    if kind in _NO_DEFAULT_NULLABLE or scope.top_level or scope.suppress_default_nullable:
        return False
    return scope.options.default_nullable


def compile_schema(session: CompilationSession, schema: Any, scope: Scope) -> str:
    """Compile one schema node to a validator expression."""
    if schema is False:
        return "z.never()"
    if not isinstance(schema, dict):
        return "z.unknown()"

    kind = classify(schema)
    code = _HANDLERS[kind](session, schema, scope)
    return wrap_nullable(code, resolve_nullable(schema, kind, scope))


def _compile_fn(session: CompilationSession):
    return partial(compile_schema, session)


def compile_reference(session: CompilationSession, ref: str, scope: Scope) -> str:
    """
    Identifier of a referenced schema, deferred with z.lazy when the reference
    closes a cycle.

    Aliases are followed to the schema carrying structure, so the emitted
    identifier never points at an alias declared later in the output.
    """
    name = resolve_ref_name(ref)
    if name not in session.schemas:
        raise ReferenceResolutionError(
            f"Invalid reference '{ref}': points to non-existent schema '{name}'",
            schema_name=scope.owner or "",
            path="",
            ref=ref,
        )

    target = resolve_schema_alias(name, session.schemas)
    owner = scope.owner
    if owner is not None:
        session.add_dependency(owner, target)

    var_name = session.var_name(target)
    deferred = owner is not None and (
        name == owner
        or target == owner
        or is_circular_through_alias(owner, name, session.schemas)
        or session.cycles.in_same_cycle(owner, target)
    )
    if deferred:
        logger.debug("Deferred reference %s -> %s", owner, target)
        return f"z.lazy((): z.ZodTypeAny => {var_name})"
    return var_name


def _compile_ref(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return compile_reference(session, schema["$ref"], scope)


def _compile_multi_type(session: CompilationSession, schema: dict, scope: Scope) -> str:
    base = {key: value for key, value in schema.items() if key not in ("type", "nullable")}
    members = [compile_schema(session, {**base, "type": type_}, scope.nested(suppress_default_nullable=True)) for type_ in non_null_types(schema)]
    return f"z.union([{', '.join(members)}])"


def _compile_const(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return enums.compile_const(schema["const"])


def _compile_enum(session: CompilationSession, schema: dict, scope: Scope) -> str:
    if scope.top_level and scope.owner in session.enum_names:
        return f"z.nativeEnum({session.enum_names[scope.owner]})"
    return enums.compile_enum_values(schema["enum"])


def _compile_all_of(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return composition.compile_all_of(session, schema, scope, _compile_fn(session))


def _compile_union(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return composition.compile_union(session, schema, scope, _compile_fn(session))


def _compile_not(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return composition.compile_not(session, schema, scope, _compile_fn(session))


def _compile_string(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return strings.compile_string(schema, session.pattern_cache, session.date_time_validation, scope.options.use_describe)


def _compile_number(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return numbers.compile_number(schema, False, scope.options.use_describe)


def _compile_integer(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return numbers.compile_number(schema, True, scope.options.use_describe)


def _compile_boolean(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return add_description("z.boolean()", schema.get("description"), scope.options.use_describe)


def _compile_null(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return "z.null()"


def _compile_tuple(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return arrays.compile_tuple(schema, scope, _compile_fn(session))


def _compile_array(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return arrays.compile_array(schema, scope, _compile_fn(session))


def _compile_object(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return objects.compile_object(session, schema, scope, _compile_fn(session))


def _compile_unknown(session: CompilationSession, schema: dict, scope: Scope) -> str:
    return add_description("z.unknown()", schema.get("description"), scope.options.use_describe)


_HANDLERS = {
    SchemaKind.MULTI_TYPE: _compile_multi_type,
    SchemaKind.REF: _compile_ref,
    SchemaKind.CONST: _compile_const,
    SchemaKind.ENUM: _compile_enum,
    SchemaKind.ALL_OF: _compile_all_of,
    SchemaKind.UNION: _compile_union,
    SchemaKind.NOT: _compile_not,
    SchemaKind.STRING: _compile_string,
    SchemaKind.NUMBER: _compile_number,
    SchemaKind.INTEGER: _compile_integer,
    SchemaKind.BOOLEAN: _compile_boolean,
    SchemaKind.NULL: _compile_null,
    SchemaKind.TUPLE: _compile_tuple,
    SchemaKind.ARRAY: _compile_array,
    SchemaKind.OBJECT: _compile_object,
    SchemaKind.UNKNOWN: _compile_unknown,
}
