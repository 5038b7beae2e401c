"""
Error types raised by the generator.

Every error carries a machine-readable code and a context dict so that
callers (the CLI, the batch executor) can report failures without
parsing messages.
"""

from __future__ import annotations

from typing import Any


class GeneratorError(Exception):
    """Base class for all generator errors."""

    code = "GENERATOR_ERROR"

    def __init__(self, message: str, code: str | None = None, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class DocumentParseError(GeneratorError):
    """The input document could not be parsed."""

    code = "DOCUMENT_PARSE_ERROR"

    def __init__(self, message: str, file_path: str = "", context: dict[str, Any] | None = None):
        super().__init__(message, context={"file_path": file_path, **(context or {})})
        self.file_path = file_path


class FileOperationError(GeneratorError):
    """Reading or writing a file failed."""

    code = "FILE_OPERATION_ERROR"

    def __init__(self, message: str, file_path: str = "", context: dict[str, Any] | None = None):
        super().__init__(message, context={"file_path": file_path, **(context or {})})
        self.file_path = file_path


class SpecValidationError(GeneratorError):
    """The document does not have the shape the generator needs."""

    code = "SPEC_VALIDATION_ERROR"


class ReferenceResolutionError(SpecValidationError):
    """A $ref points to a schema that does not exist."""

    code = "REFERENCE_ERROR"

    def __init__(self, message: str, schema_name: str, path: str, ref: str):
        super().__init__(message, context={"schema_name": schema_name, "path": path, "ref": ref})
        self.schema_name = schema_name
        self.path = path
        self.ref = ref


class SchemaGenerationError(GeneratorError):
    """Compiling a named schema failed."""

    code = "SCHEMA_GENERATION_ERROR"

    def __init__(self, message: str, schema_name: str, context: dict[str, Any] | None = None):
        super().__init__(message, context={"schema_name": schema_name, **(context or {})})
        self.schema_name = schema_name


class CircularReferenceError(SchemaGenerationError):
    """A reference cycle that cannot be broken with a deferred reference."""

    code = "CIRCULAR_REFERENCE_ERROR"

    def __init__(self, schema_name: str, reference_path: list[str], context: dict[str, Any] | None = None):
        cycle = " -> ".join(reference_path)
        super().__init__(
            f"Circular reference detected in schema '{schema_name}': {cycle}",
            schema_name,
            context={"reference_path": list(reference_path), **(context or {})},
        )
        self.reference_path = list(reference_path)


class ConfigurationError(GeneratorError):
    """Invalid generator options."""

    code = "CONFIGURATION_ERROR"


class ConfigValidationError(ConfigurationError):
    """A configuration file failed validation."""

    code = "CONFIG_VALIDATION_ERROR"

    def __init__(self, message: str, config_path: str = "", context: dict[str, Any] | None = None):
        super().__init__(message, context={"config_path": config_path, **(context or {})})
        self.config_path = config_path
