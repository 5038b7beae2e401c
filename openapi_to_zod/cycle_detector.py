"""
Reference cycle detection among named schemas.

Cyclic schemas cannot be emitted as plain forward identifiers, so every
member of a cycle is pinned to validator-backed output and the compiler
breaks the cycle with a deferred (z.lazy) reference.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from .errors import CircularReferenceError
from .ref_resolver import resolve_ref_name
from .usage_analyzer import SchemaContext, extract_schema_refs

logger = logging.getLogger(__name__)


@dataclass
class CycleAnalysis:
    """Strongly connected schema groups that contain a cycle."""

    circular: set[str] = field(default_factory=set)
    components: list[list[str]] = field(default_factory=list)
    paths: dict[str, list[str]] = field(default_factory=dict)

    def is_circular(self, name: str) -> bool:
        return name in self.circular

    def in_same_cycle(self, a: str, b: str) -> bool:
        return any(a in component and b in component for component in self.components)

    def cycle_path(self, name: str) -> list[str]:
        """A concrete cycle through the schema, e.g. ["A", "B", "A"]."""
        return self.paths.get(name, [])


def build_dependency_graph(schemas: dict[str, Any]) -> dict[str, list[str]]:
    """Map each schema name to the (existing) schemas it references, in a stable order."""
    return {name: sorted(ref for ref in extract_schema_refs(schema) if ref in schemas) for name, schema in schemas.items()}


def _find_cycle(start: str, graph: dict[str, list[str]], members: set[str]) -> list[str]:
    """Shortest cycle from start back to itself, staying inside one component."""
    parents: dict[str, str] = {}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for child in graph[node]:
            if child not in members:
                continue
            if child == start:
                path = [node]
                while path[-1] != start:
                    path.append(parents[path[-1]])
                return [*reversed(path), start]
            if child not in parents:
                parents[child] = node
                queue.append(child)
    return [start]


def detect_circular_references(schemas: dict[str, Any], graph: dict[str, list[str]] | None = None) -> CycleAnalysis:
    """
    Find every schema that takes part in a reference cycle.

    Uses Tarjan's strongly connected components algorithm with an explicit
    stack, so deep schema graphs do not hit the interpreter's recursion limit.
    A component is cyclic when it has several members or a self-reference.
    """
    graph = graph if graph is not None else build_dependency_graph(schemas)
    order = {name: i for i, name in enumerate(schemas)}
    index_of: dict[str, int] = {}
    low: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    analysis = CycleAnalysis()
    counter = 0

    def enter(node: str) -> None:
        nonlocal counter
        index_of[node] = low[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

    for root in graph:
        if root in index_of:
            continue
        enter(root)
        work = [(root, iter(graph[root]))]
        while work:
            node, children = work[-1]
            for child in children:
                if child not in graph:
                    continue
                if child not in index_of:
                    enter(child)
                    work.append((child, iter(graph[child])))
                    break
                if child in on_stack:
                    low[node] = min(low[node], index_of[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])
                if low[node] != index_of[node]:
                    continue
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1 or node in graph[node]:
                    component.sort(key=order.__getitem__)
                    analysis.components.append(component)

    analysis.components.sort(key=lambda component: order[component[0]])
    for component in analysis.components:
        members = set(component)
        analysis.circular.update(members)
        for name in component:
            analysis.paths[name] = _find_cycle(name, graph, members)
        logger.debug("Reference cycle: %s", " -> ".join(analysis.paths[component[0]]))
    return analysis


def pin_circular_schemas(usage_map: dict[str, SchemaContext], analysis: CycleAnalysis) -> None:
    """Force every cycle member to "both" so it is always emitted as a validator."""
    for name in sorted(analysis.circular):
        usage_map[name] = SchemaContext.BOTH


def alias_target(schema: Any) -> str | None:
    """Name a schema is a pure alias of: {$ref: X} or allOf: [{$ref: X}] with nothing structural beside it."""
    if not isinstance(schema, dict):
        return None
    if any(key in schema for key in ("properties", "oneOf", "anyOf", "items", "enum", "const", "not")):
        return None
    if isinstance(schema.get("$ref"), str):
        return resolve_ref_name(schema["$ref"])
    members = schema.get("allOf")
    if isinstance(members, list) and len(members) == 1 and isinstance(members[0], dict) and isinstance(members[0].get("$ref"), str):
        if len(members[0]) == 1:
            return resolve_ref_name(members[0]["$ref"])
    return None


def resolve_schema_alias(name: str, schemas: dict[str, Any]) -> str:
    """
    Follow a chain of pure aliases to the schema that carries structure.

    Raises:
        CircularReferenceError: if the chain loops without reaching a real schema
    """
    chain = [name]
    current = name
    while True:
        target = alias_target(schemas.get(current))
        if target is None or target not in schemas:
            return current
        if target in chain:
            raise CircularReferenceError(name, [*chain[chain.index(target) :], target])
        chain.append(target)
        current = target


def is_circular_through_alias(origin: str, target: str, schemas: dict[str, Any]) -> bool:
    """Whether referencing `target` from `origin` loops back to `origin` through aliases only."""
    seen: set[str] = set()
    current = target
    while current not in seen:
        seen.add(current)
        nxt = alias_target(schemas.get(current))
        if nxt is None:
            return False
        if nxt == origin:
            return True
        current = nxt
    return False
