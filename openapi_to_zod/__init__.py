"""OpenAPI to Zod Generator

Generates Zod v4 validators and TypeScript types from the component
schemas of an OpenAPI document, with request/response aware options,
circular reference handling and dependency-ordered output.
"""

__version__ = "1.0.0"

from .batch import BatchSummary, SpecResult, execute_batch, get_batch_exit_code
from .config import (
    BatchConfig,
    ContextOptions,
    EmptyObjectBehavior,
    EnumType,
    ExecutionMode,
    GeneratorOptions,
    NativeEnumType,
    ObjectMode,
    OperationFilters,
    SchemaType,
    TypeMode,
    load_config,
)
from .errors import (
    CircularReferenceError,
    ConfigurationError,
    ConfigValidationError,
    DocumentParseError,
    FileOperationError,
    GeneratorError,
    ReferenceResolutionError,
    SchemaGenerationError,
    SpecValidationError,
)
from .generator import OpenApiGenerator

__all__ = [
    "OpenApiGenerator",
    "GeneratorOptions",
    "ContextOptions",
    "OperationFilters",
    "BatchConfig",
    "load_config",
    "ObjectMode",
    "EmptyObjectBehavior",
    "SchemaType",
    "EnumType",
    "TypeMode",
    "NativeEnumType",
    "ExecutionMode",
    "execute_batch",
    "get_batch_exit_code",
    "BatchSummary",
    "SpecResult",
    "GeneratorError",
    "DocumentParseError",
    "FileOperationError",
    "SpecValidationError",
    "ReferenceResolutionError",
    "SchemaGenerationError",
    "CircularReferenceError",
    "ConfigurationError",
    "ConfigValidationError",
]
