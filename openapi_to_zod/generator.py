"""
Per-document generation.

OpenApiGenerator runs the whole pipeline for one OpenAPI document:

1. Validate: the document has component schemas and every $ref resolves
2. Analyze: request/response usage, operation filters, reference cycles
3. Decide: validator-backed or native-type output for every schema
4. Compile: enum declarations first, then every schema, then parameters
5. Emit: dependency-ordered declarations rendered into one buffer
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .compiler import CompilationSession, build_jsdoc, compile_native_type, compile_schema
from .compiler.enums import build_enum_declaration, enum_name, is_declarable_enum
from .compiler.strings import build_date_time_validation
from .config import EnumType, GeneratorOptions, NativeEnumType
from .cycle_detector import build_dependency_graph, detect_circular_references, pin_circular_schemas
from .emitter import Emitter, GenerationStats
from .errors import ConfigurationError, GeneratorError, ReferenceResolutionError, SchemaGenerationError, SpecValidationError
from .filters import FilterStatistics, format_filter_statistics, should_include_operation, validate_filters
from .loader import load_document
from .lru_cache import LRUCache
from .parameters import build_parameter_schemas
from .ref_resolver import ReferenceResolver, resolve_ref_name
from .schema_nodes import SchemaKind, classify
from .sorter import topological_sort
from .usage_analyzer import SchemaContext, analyze_schema_usage, iter_operations
from .writer import AtomicWriter

logger = logging.getLogger(__name__)

CONFLICT_WARNING = "@warning allOf property conflicts detected:"


def _join(path: str, segment: str) -> str:
    if segment.startswith("["):
        return f"{path}{segment}"
    return f"{path}.{segment}" if path else segment


def _check_refs(owner: str, schema: Any, names: set[str], path: str = "") -> None:
    if not isinstance(schema, dict):
        return

    ref = schema.get("$ref")
    if isinstance(ref, str):
        target = resolve_ref_name(ref)
        if target not in names:
            location = f" at '{path}'" if path else ""
            raise ReferenceResolutionError(
                f"Invalid schema '{owner}': Invalid reference{location}: '{ref}' points to non-existent schema '{target}'",
                schema_name=owner,
                path=path,
                ref=ref,
            )

    for prop_name, prop_schema in (schema.get("properties") or {}).items():
        _check_refs(owner, prop_schema, names, _join(path, prop_name))
    if isinstance(schema.get("items"), dict):
        _check_refs(owner, schema["items"], names, _join(path, "[]"))
    for key in ("prefixItems", "allOf", "oneOf", "anyOf"):
        for i, member in enumerate(schema.get(key) or []):
            _check_refs(owner, member, names, _join(path, f"{key}[{i}]"))
    for key in ("additionalProperties", "not"):
        if isinstance(schema.get(key), dict):
            _check_refs(owner, schema[key], names, _join(path, key))


def validate_references(schemas: dict[str, Any]) -> None:
    """
    Check that every $ref reachable from every named schema resolves.

    Raises:
        ReferenceResolutionError: for the first pointer that does not resolve,
            naming the owning schema and the structural path to the pointer
    """
    names = set(schemas)
    for name, schema in schemas.items():
        _check_refs(name, schema, names)


class OpenApiGenerator:
    """Generates Zod schemas and TypeScript types from one OpenAPI document."""

    def __init__(self, options: GeneratorOptions, document: dict | None = None):
        if document is None and not options.input:
            raise ConfigurationError("An input path is required when no document is provided")
        if options.cache_size < 1:
            raise ConfigurationError(f"cache_size must be a positive integer, got {options.cache_size}")

        self.options = options
        self._document = document
        self.request_options = options.resolve_for_context("request")
        self.response_options = options.resolve_for_context("response")
        self.date_time_validation = build_date_time_validation(options.custom_date_time_format_regex)
        self.emitter = Emitter()

    @property
    def document(self) -> dict:
        if self._document is None:
            self._document = load_document(self.options.input)
        return self._document

    def _include_operation(self, path: str, method: str, operation: dict) -> bool:
        return should_include_operation(operation, path, method, self.options.operation_filters)

    def _filter_statistics(self) -> FilterStatistics:
        stats = FilterStatistics()
        for path, method, _, operation in iter_operations(self.document):
            stats.total_operations += 1
            if should_include_operation(operation, path, method, self.options.operation_filters, stats):
                stats.included_operations += 1
        return stats

    def _propagate_validators(self, session: CompilationSession, roots: list[str]) -> None:
        """Schemas used by a validator-backed declaration must be validator-backed too."""
        graph = build_dependency_graph(session.schemas)
        pending = list(roots)
        seen: set[str] = set()
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            if name in session.native_schemas:
                logger.debug("Schema %s is used by a validator, emitting it as a validator", name)
                session.native_schemas.discard(name)
            pending.extend(graph.get(name, ()))

    def _surface_enum(self, session: CompilationSession, name: str, schema: dict) -> None:
        if classify(schema) != SchemaKind.ENUM or not is_declarable_enum(schema["enum"]):
            return
        options = session.options_for(name)
        if session.is_native(name):
            surfaced = options.native_enum_type == NativeEnumType.ENUM
        else:
            surfaced = options.enum_type == EnumType.TYPESCRIPT
        if not surfaced:
            return

        declared = enum_name(session.type_name(name))
        jsdoc = build_jsdoc(schema, name, options.include_descriptions)
        session.enum_names[name] = declared
        session.native_enums[name] = f"{jsdoc}{build_enum_declaration(declared, schema['enum'])}"

    @staticmethod
    @contextmanager
    def _schema_errors(name: str) -> Iterator[None]:
        """Report unexpected failures as SchemaGenerationError naming the schema."""
        try:
            yield
        except GeneratorError:
            raise
        except Exception as e:
            raise SchemaGenerationError(f"Failed to generate schema '{name}': {e}", name) from e

    def _compile_named(self, session: CompilationSession, name: str, schema: Any) -> str:
        scope = session.scope_for(name)
        include_descriptions = scope.options.include_descriptions
        type_name = session.type_name(name)

        if session.is_native(name):
            jsdoc = build_jsdoc(schema, name, include_descriptions, with_constraints=True)
            return f"{jsdoc}export type {type_name} = {compile_native_type(session, schema, scope)};"

        code = compile_schema(session, schema, scope)
        conflicts = session.allof_conflicts.get(name)
        jsdoc = build_jsdoc(schema, name, include_descriptions, extra_lines=[CONFLICT_WARNING, *conflicts] if conflicts else None)
        var_name = session.var_name(name)
        return f"{jsdoc}export const {var_name} = {code};\nexport type {type_name} = z.infer<typeof {var_name}>;"

    def generate_string(self) -> str:
        """
        Generate the output without writing it.

        Returns:
            The generated TypeScript source

        Raises:
            SpecValidationError: if the document has no component schemas
            ReferenceResolutionError: if a $ref does not resolve
            SchemaGenerationError: if a schema fails to compile
        """
        document = self.document
        schemas = (document.get("components") or {}).get("schemas")
        if not isinstance(schemas, dict) or not schemas:
            source = self.options.input or "<document>"
            raise SpecValidationError(
                f"No schemas found in OpenAPI spec at {source}. Expected to find schemas at components.schemas",
                context={"file_path": self.options.input},
            )
        validate_references(schemas)

        resolver = ReferenceResolver(document)
        filters = self.options.operation_filters
        include_operation = self._include_operation if filters is not None else None
        filter_stats = self._filter_statistics() if filters is not None else FilterStatistics()

        analysis = analyze_schema_usage(document, resolver, include_operation)
        usage = analysis.usage_map
        cycles = detect_circular_references(schemas)
        pin_circular_schemas(usage, cycles)

        if filters is not None and filter_stats.total_operations > 0:
            emitted = [name for name in schemas if name in analysis.operation_schemas]
        else:
            emitted = list(schemas)

        session = CompilationSession(
            resolver=resolver,
            options=self.options,
            request_options=self.request_options,
            response_options=self.response_options,
            usage=usage,
            cycles=cycles,
            pattern_cache=LRUCache(self.options.cache_size),
            date_time_validation=self.date_time_validation,
        )
        if self.request_options.is_native:
            session.native_schemas = {name for name in emitted if usage.get(name) == SchemaContext.REQUEST}

        parameter_fragments = build_parameter_schemas(session, document, include_operation)
        roots = [name for name in emitted if name not in session.native_schemas]
        for key in parameter_fragments:
            roots.extend(session.dependencies.get(key, ()))
        self._propagate_validators(session, roots)
        logger.debug("%d of %d schemas emitted as native types", len(session.native_schemas), len(emitted))

        for name in emitted:
            with self._schema_errors(name):
                self._surface_enum(session, name, schemas[name])

        fragments: dict[str, str] = {}
        for name in emitted:
            logger.debug("Compiling schema %s", name)
            with self._schema_errors(name):
                fragments[name] = self._compile_named(session, name, schemas[name])
        fragments.update(parameter_fragments)
        logger.debug("Pattern cache holds %d of %d entries", len(session.pattern_cache), session.pattern_cache.capacity)

        if filters is not None:
            validate_filters(filter_stats, filters)

        stats = None
        if self.options.show_stats:
            conflicts = sum(len(messages) for messages in session.allof_conflicts.values())
            filter_lines = format_filter_statistics(filter_stats) if filters is not None else []
            stats = GenerationStats.from_fragments(fragments, conflicts, filter_lines)

        order = topological_sort(fragments, session.dependencies)
        return self.emitter.render(
            declarations=[fragments[name] for name in order],
            enums=list(session.native_enums.values()),
            import_zod=any(name not in session.native_schemas for name in fragments),
            stats=stats,
        )

    def generate(self) -> None:
        """Generate the output and write it to `options.output`."""
        if not self.options.output:
            raise ConfigurationError(
                "Output path is required when calling generate(). "
                "Either provide an 'output' option or use generate_string() to get the result as a string."
            )
        content = self.generate_string()
        AtomicWriter().write(Path(self.options.output), content)
        logger.info("Generated %s", self.options.output)
