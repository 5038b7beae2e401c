"""
Run-scoped state threaded through the schema compiler.

A CompilationSession holds everything one document's compilation reads
(options, usage, cycles) and the accumulators it writes (dependency edges,
enum declarations, conflicts). A Scope describes the position of a single
compile call: which named schema owns it and which options apply.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from ..config import GeneratorOptions, ResolvedOptions, SchemaType
from ..cycle_detector import CycleAnalysis
from ..lru_cache import LRUCache
from ..naming import schema_var_name, strip_schema_prefix, to_pascal_case
from ..ref_resolver import ReferenceResolver
from ..usage_analyzer import SchemaContext


@dataclass(frozen=True)
class Scope:
    """Per-call compilation position."""

    # Named schema whose body is being compiled (None for standalone compiles)
    owner: str | None
    options: ResolvedOptions
    # Usage context driving readOnly/writeOnly property filtering
    include: SchemaContext | None = None
    top_level: bool = False
    suppress_default_nullable: bool = False

    def nested(self, **changes: Any) -> Scope:
        """Scope for a child node: never top level, default nullability restored."""
        return replace(self, **{"top_level": False, "suppress_default_nullable": False, **changes})


# compile_fn(schema, scope) -> expression; handed to helper modules
CompileFn = Callable[[Any, Scope], str]


@dataclass
class CompilationSession:
    """State for compiling one document."""

    resolver: ReferenceResolver
    options: GeneratorOptions
    request_options: ResolvedOptions
    response_options: ResolvedOptions
    usage: dict[str, SchemaContext]
    cycles: CycleAnalysis
    pattern_cache: LRUCache[str, str]
    date_time_validation: str = "z.iso.datetime()"
    # Named schemas emitted as plain types instead of validators
    native_schemas: set[str] = field(default_factory=set)

    # Accumulated while compiling
    dependencies: dict[str, list[str]] = field(default_factory=dict)
    allof_conflicts: dict[str, list[str]] = field(default_factory=dict)
    native_enums: dict[str, str] = field(default_factory=dict)
    enum_names: dict[str, str] = field(default_factory=dict)

    @property
    def schemas(self) -> dict[str, Any]:
        return self.resolver.schemas

    def add_dependency(self, source: str, target: str) -> None:
        if source == target:
            return
        edges = self.dependencies.setdefault(source, [])
        if target not in edges:
            edges.append(target)

    def record_conflict(self, owner: str | None, message: str) -> None:
        if owner is None:
            return
        conflicts = self.allof_conflicts.setdefault(owner, [])
        if message not in conflicts:
            conflicts.append(message)

    def stripped_name(self, name: str) -> str:
        return strip_schema_prefix(name, self.options.strip_schema_prefix)

    def type_name(self, name: str) -> str:
        return to_pascal_case(self.stripped_name(name))

    def var_name(self, name: str) -> str:
        return schema_var_name(self.stripped_name(name), self.options.prefix, self.options.suffix)

    def context_of(self, name: str) -> SchemaContext | None:
        return self.usage.get(name)

    def options_for(self, name: str) -> ResolvedOptions:
        """Response options for response-only schemas, request options otherwise."""
        if self.usage.get(name) == SchemaContext.RESPONSE:
            return self.response_options
        return self.request_options

    def is_native(self, name: str) -> bool:
        return name in self.native_schemas

    def property_filter(self, name: str | None) -> SchemaContext | None:
        """Context whose readOnly/writeOnly rule applies inside a named schema."""
        schema_type = self.options.schema_type
        if schema_type == SchemaType.REQUEST:
            return SchemaContext.REQUEST
        if schema_type == SchemaType.RESPONSE:
            return SchemaContext.RESPONSE
        context = self.usage.get(name) if name else None
        return context if context in (SchemaContext.REQUEST, SchemaContext.RESPONSE) else None

    def scope_for(self, name: str) -> Scope:
        """Top-level scope for compiling a named schema's body."""
        return Scope(owner=name, options=self.options_for(name), include=self.property_filter(name), top_level=True)


def should_include_property(schema: Any, include: SchemaContext | None) -> bool:
    """readOnly properties are dropped from requests, writeOnly ones from responses."""
    if not isinstance(schema, dict):
        return True
    if include == SchemaContext.REQUEST:
        return schema.get("readOnly") is not True
    if include == SchemaContext.RESPONSE:
        return schema.get("writeOnly") is not True
    return True
