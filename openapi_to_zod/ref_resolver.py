"""
Reference resolver for $ref resolution.

Resolves local component pointers (schemas, parameters, request bodies and
responses) to their definitions in the document.
"""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_COMPONENT_REF = re.compile(r"^#/components/(schemas|parameters|requestBodies|responses)/(.+)$")

DEFAULT_MAX_DEPTH = 10


def resolve_ref_name(ref: str) -> str:
    """Last segment of a pointer: "#/components/schemas/User" -> "User"."""
    return ref.rsplit("/", 1)[-1]


def is_ref(obj: Any) -> bool:
    return isinstance(obj, dict) and isinstance(obj.get("$ref"), str)


class ReferenceResolver:
    """Resolves $ref pointers against one document."""

    def __init__(self, document: dict, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the resolver.

        Args:
            document: The parsed OpenAPI document
            max_depth: Maximum number of chained pointers followed before giving up
        """
        self.document = document
        self.max_depth = max_depth
        components = document.get("components") or {}
        self._collections: dict[str, dict] = {
            category: components.get(category) or {} for category in ("schemas", "parameters", "requestBodies", "responses")
        }

    @property
    def schemas(self) -> dict[str, Any]:
        return self._collections["schemas"]

    def has_schema(self, name: str) -> bool:
        return name in self.schemas

    def get_schema(self, name: str) -> dict | None:
        return self.schemas.get(name)

    def get_schema_by_ref(self, ref: str) -> dict | None:
        """Schema named by the last segment of a pointer, without following chains."""
        return self.schemas.get(resolve_ref_name(ref))

    def resolve(self, obj: Any, max_depth: int | None = None) -> Any:
        """
        Follow a (possibly chained) pointer to the component it names.

        Non-reference values are returned unchanged. When the chain is longer
        than the depth limit or a pointer is not a recognized component
        pointer, the original value is returned and a warning is logged.
        """
        if not is_ref(obj):
            return obj

        depth = self.max_depth if max_depth is None else max_depth
        current = obj
        chain = []
        while is_ref(current):
            ref = current["$ref"]
            if len(chain) >= depth:
                logger.warning("Reference chain exceeds depth %d, leaving '%s' unresolved: %s", depth, obj["$ref"], " -> ".join(chain))
                return obj

            match = _COMPONENT_REF.match(ref)
            target = self._collections[match.group(1)].get(match.group(2)) if match else None
            if target is None:
                logger.warning("Could not resolve reference '%s'", ref)
                return obj

            chain.append(ref)
            current = target
        return current

    def merge_parameters(self, path_params: list | None, operation_params: list | None) -> list[dict]:
        """
        Merge path-level with operation-level parameters.

        Operation parameters replace path parameters with the same (name, in);
        unmatched path parameters are kept in their original position.
        """
        merged = [self.resolve(p) for p in path_params or []]
        for param in operation_params or []:
            param = self.resolve(param)
            if not isinstance(param, dict):
                continue
            for index, existing in enumerate(merged):
                if isinstance(existing, dict) and existing.get("name") == param.get("name") and existing.get("in") == param.get("in"):
                    merged[index] = param
                    break
            else:
                merged.append(param)
        return merged
