"""
Schema compiler: translates schema nodes to Zod validator expressions or
plain TypeScript types.
"""

from .core import compile_reference, compile_schema, resolve_nullable
from .jsdoc import build_jsdoc
from .native import compile_native_type
from .session import CompilationSession, Scope, should_include_property

__all__ = [
    "CompilationSession",
    "Scope",
    "build_jsdoc",
    "compile_native_type",
    "compile_reference",
    "compile_schema",
    "resolve_nullable",
    "should_include_property",
]
