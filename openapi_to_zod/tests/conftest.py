import pytest

from openapi_to_zod.compiler import CompilationSession, Scope, compile_schema
from openapi_to_zod.config import GeneratorOptions
from openapi_to_zod.cycle_detector import detect_circular_references, pin_circular_schemas
from openapi_to_zod.lru_cache import LRUCache
from openapi_to_zod.ref_resolver import ReferenceResolver
from openapi_to_zod.usage_analyzer import analyze_schema_usage


def make_document(schemas, paths=None):
    document = {"openapi": "3.0.3", "info": {"title": "Test", "version": "1.0.0"}, "components": {"schemas": schemas}}
    if paths is not None:
        document["paths"] = paths
    return document


def build_session(schemas=None, paths=None, **options):
    document = make_document(schemas or {}, paths)
    generator_options = GeneratorOptions.from_dict(options)
    resolver = ReferenceResolver(document)
    analysis = analyze_schema_usage(document, resolver)
    cycles = detect_circular_references(resolver.schemas)
    pin_circular_schemas(analysis.usage_map, cycles)
    return CompilationSession(
        resolver=resolver,
        options=generator_options,
        request_options=generator_options.resolve_for_context("request"),
        response_options=generator_options.resolve_for_context("response"),
        usage=analysis.usage_map,
        cycles=cycles,
        pattern_cache=LRUCache(generator_options.cache_size),
    )


def compile_node(session, schema, owner=None, top_level=False, include=None):
    scope = Scope(owner=owner, options=session.request_options, include=include, top_level=top_level)
    return compile_schema(session, schema, scope)


@pytest.fixture
def session():
    return build_session()
