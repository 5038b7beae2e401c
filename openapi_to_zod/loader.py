"""
Loading OpenAPI documents from YAML or JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import DocumentParseError, FileOperationError

logger = logging.getLogger(__name__)


def _check_mapping(data: Any, source: str) -> dict:
    if not isinstance(data, dict):
        raise DocumentParseError(
            f"Failed to parse OpenAPI document {source}: expected a mapping at the top level, got {type(data).__name__}",
            source,
        )
    return data


def load_document_from_string(text: str, source: str = "<string>") -> dict:
    """Parse a document held in memory. YAML is a superset of JSON, so both are accepted."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentParseError(
            f"Failed to parse OpenAPI document {source}: {e}\n"
            "Please ensure:\n"
            "  - The file contains valid YAML or JSON syntax\n"
            "  - Indentation uses spaces, not tabs",
            source,
        ) from e
    return _check_mapping(data, source)


def load_document(path: str | Path) -> dict:
    """Load an OpenAPI document from a .yaml, .yml or .json file."""
    path = Path(path)
    if not path.exists():
        raise FileOperationError(f"Input file not found: {path}", str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileOperationError(f"Failed to read input file {path}: {e}", str(path)) from e

    logger.debug("Loading OpenAPI document %s", path)
    if path.suffix.lower() == ".json":
        try:
            return _check_mapping(json.loads(text), str(path))
        except json.JSONDecodeError as e:
            raise DocumentParseError(
                f"Failed to parse OpenAPI document {path}: {e.msg} (line {e.lineno}, column {e.colno})",
                str(path),
            ) from e
    return load_document_from_string(text, str(path))
