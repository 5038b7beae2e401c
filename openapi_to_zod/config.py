"""
Configuration for the OpenAPI to Zod generator.

Options can be built directly, from a dict (camelCase or snake_case keys,
as found in configuration files) or from a YAML/JSON configuration file
holding several specs for batch generation.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError, ConfigValidationError


class ObjectMode(str, Enum):
    """How objects treat keys that are not declared as properties."""

    STRICT = "strict"  # z.strictObject: reject unknown keys
    NORMAL = "normal"  # z.object: strip unknown keys
    LOOSE = "loose"  # z.looseObject: keep unknown keys


class EmptyObjectBehavior(str, Enum):
    """Output for object schemas that declare no properties."""

    STRICT = "strict"
    LOOSE = "loose"
    RECORD = "record"


class SchemaType(str, Enum):
    """Which side of the API the emitted schemas describe."""

    ALL = "all"
    REQUEST = "request"
    RESPONSE = "response"


class EnumType(str, Enum):
    """Representation of top-level enums in validator-backed output."""

    ZOD = "zod"  # z.enum([...])
    TYPESCRIPT = "typescript"  # export enum + z.nativeEnum()


class TypeMode(str, Enum):
    """Whether a schema is emitted as a validator or as a plain type."""

    INFERRED = "inferred"
    NATIVE = "native"


class NativeEnumType(str, Enum):
    """Representation of enums in native-type output."""

    UNION = "union"
    ENUM = "enum"


class ExecutionMode(str, Enum):
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_ENUM_FIELDS: dict[str, type[Enum]] = {
    "mode": ObjectMode,
    "empty_object_behavior": EmptyObjectBehavior,
    "schema_type": SchemaType,
    "enum_type": EnumType,
    "type_mode": TypeMode,
    "native_enum_type": NativeEnumType,
    "execution_mode": ExecutionMode,
}


def to_snake_key(key: str) -> str:
    """Normalize a configuration key: "includeDescriptions" -> "include_descriptions"."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _coerce(name: str, value: Any) -> Any:
    enum_cls = _ENUM_FIELDS.get(name)
    if enum_cls is None or value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Invalid value {value!r} for '{name}'. Expected one of: {allowed}") from e


def _assign(target: Any, d: dict[str, Any], nested: dict[str, Any] | None = None) -> None:
    known = {f.name for f in fields(target)}
    for raw_key, value in d.items():
        key = to_snake_key(raw_key)
        if key not in known:
            raise ConfigurationError(f"Unknown option '{raw_key}'")
        if nested and key in nested and isinstance(value, dict):
            value = nested[key](value)
        setattr(target, key, _coerce(key, value))


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass
class ContextOptions:
    """Per-context overrides (request or response). None means "inherit"."""

    mode: ObjectMode | None = None
    include_descriptions: bool | None = None
    use_describe: bool | None = None
    default_nullable: bool | None = None
    empty_object_behavior: EmptyObjectBehavior | None = None
    enum_type: EnumType | None = None
    type_mode: TypeMode | None = None
    native_enum_type: NativeEnumType | None = None

    @staticmethod
    def from_dict(d: dict) -> ContextOptions:
        options = ContextOptions()
        _assign(options, d)
        return options

    def to_dict(self) -> dict:
        return {f.name: _serialize(getattr(self, f.name)) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class OperationFilters:
    """Include/exclude rules applied to path operations."""

    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=list)
    include_methods: list[str] = field(default_factory=list)
    exclude_methods: list[str] = field(default_factory=list)
    include_operation_ids: list[str] = field(default_factory=list)
    exclude_operation_ids: list[str] = field(default_factory=list)
    exclude_deprecated: bool = False

    @staticmethod
    def from_dict(d: dict) -> OperationFilters:
        filters = OperationFilters()
        _assign(filters, d)
        return filters

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ResolvedOptions:
    """Options in effect for one usage context after overrides are applied."""

    mode: ObjectMode = ObjectMode.NORMAL
    include_descriptions: bool = True
    use_describe: bool = False
    default_nullable: bool = False
    empty_object_behavior: EmptyObjectBehavior = EmptyObjectBehavior.LOOSE
    enum_type: EnumType = EnumType.ZOD
    type_mode: TypeMode = TypeMode.INFERRED
    native_enum_type: NativeEnumType = NativeEnumType.UNION

    @property
    def is_native(self) -> bool:
        return self.type_mode == TypeMode.NATIVE


@dataclass
class GeneratorOptions:
    """Configuration options for generating one output file from one document."""

    # Path of the OpenAPI document (YAML or JSON)
    input: str = ""

    # Path of the generated TypeScript file
    output: str = ""

    # Default object openness
    mode: ObjectMode = ObjectMode.NORMAL

    # Emit JSDoc comments from title/description/example/deprecated
    include_descriptions: bool = True

    # Append .describe() with the schema description
    use_describe: bool = False

    # Treat properties without an explicit nullable signal as nullable
    default_nullable: bool = False

    empty_object_behavior: EmptyObjectBehavior = EmptyObjectBehavior.LOOSE

    # Drop readOnly properties (request) or writeOnly properties (response)
    schema_type: SchemaType = SchemaType.ALL

    # Naming prefix/suffix applied to schema identifiers
    prefix: str | None = None
    suffix: str | None = None

    # Prefix (or list of glob prefixes) removed from schema names
    strip_schema_prefix: str | list[str] | None = None

    # Prefix removed from paths before deriving operation names
    strip_path_prefix: str | None = None

    use_operation_id: bool = True
    show_stats: bool = True
    enum_type: EnumType = EnumType.ZOD

    # Context-specific overrides
    request: ContextOptions | None = None
    response: ContextOptions | None = None

    operation_filters: OperationFilters | None = None

    # Header names (glob, case-insensitive) left out of header parameter schemas
    ignore_headers: list[str] = field(default_factory=list)

    # Capacity of the regex pattern cache
    cache_size: int = 1000

    # Maximum concurrent runs in parallel batch mode
    batch_size: int = 10

    custom_date_time_format_regex: str | None = None

    @staticmethod
    def from_dict(d: dict) -> GeneratorOptions:
        """Create options from a dictionary."""
        options = GeneratorOptions()
        _assign(
            options,
            d,
            nested={
                "request": ContextOptions.from_dict,
                "response": ContextOptions.from_dict,
                "operation_filters": OperationFilters.from_dict,
            },
        )
        return options

    def to_dict(self) -> dict:
        """Convert options to a dictionary."""
        return {f.name: _serialize(getattr(self, f.name)) for f in fields(self) if getattr(self, f.name) is not None}

    def resolve_for_context(self, context: str) -> ResolvedOptions:
        """Merge request/response overrides over the root options.

        Native type mode only applies to requests: responses are always
        validated at runtime.
        """
        overrides = self.request if context == "request" else self.response
        overrides = overrides or ContextOptions()

        def pick(name: str, default: Any) -> Any:
            value = getattr(overrides, name)
            return default if value is None else value

        type_mode = pick("type_mode", TypeMode.INFERRED) if context == "request" else TypeMode.INFERRED
        return ResolvedOptions(
            mode=pick("mode", self.mode),
            include_descriptions=pick("include_descriptions", self.include_descriptions),
            use_describe=pick("use_describe", self.use_describe),
            default_nullable=pick("default_nullable", self.default_nullable),
            empty_object_behavior=pick("empty_object_behavior", self.empty_object_behavior),
            enum_type=pick("enum_type", self.enum_type),
            type_mode=type_mode,
            native_enum_type=pick("native_enum_type", NativeEnumType.UNION),
        )


@dataclass
class BatchConfig:
    """A configuration file: shared defaults plus one entry per document."""

    specs: list[GeneratorOptions] = field(default_factory=list)
    execution_mode: ExecutionMode = ExecutionMode.PARALLEL
    # Maximum concurrent runs in parallel mode
    batch_size: int = 10
    defaults: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict, config_path: str = "") -> BatchConfig:
        unknown = set(d) - {"specs", "defaults", "executionMode", "execution_mode", "batchSize", "batch_size"}
        if unknown:
            raise ConfigValidationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}", config_path)

        specs = d.get("specs")
        if not isinstance(specs, list) or not specs:
            raise ConfigValidationError("Configuration must define a non-empty 'specs' list", config_path)

        defaults = d.get("defaults") or {}
        if not isinstance(defaults, dict):
            raise ConfigValidationError("'defaults' must be a mapping", config_path)

        config = BatchConfig(defaults=dict(defaults))
        try:
            config.execution_mode = _coerce("execution_mode", d.get("executionMode", d.get("execution_mode", "parallel")))
            config.batch_size = d.get("batchSize", d.get("batch_size", config.batch_size))
            if not isinstance(config.batch_size, int) or config.batch_size < 1:
                raise ConfigValidationError(f"batchSize must be a positive integer, got {config.batch_size!r}", config_path)
            for index, entry in enumerate(specs):
                if not isinstance(entry, dict):
                    raise ConfigValidationError(f"specs[{index}] must be a mapping", config_path)
                merged = {**defaults, **entry}
                options = GeneratorOptions.from_dict(merged)
                if not options.input or not options.output:
                    raise ConfigValidationError(f"specs[{index}] must define both 'input' and 'output'", config_path)
                config.specs.append(options)
        except ConfigValidationError:
            raise
        except ConfigurationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}", config_path) from e
        return config


def load_config(path: str | Path) -> BatchConfig:
    """Load a YAML or JSON configuration file.

    Relative input/output paths are resolved against the file's directory.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigValidationError(f"Configuration file not found: {path}", str(path))

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigValidationError(f"Failed to parse configuration file {path}: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Configuration file {path} must contain a mapping", str(path))

    config = BatchConfig.from_dict(data, str(path))
    base = path.parent
    for options in config.specs:
        options.input = str(base / options.input)
        options.output = str(base / options.output)
    return config
