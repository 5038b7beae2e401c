"""
Emission ordering of compiled schemas.

Schemas are ordered so that every dependency is declared before the schema
using it. Pure aliases (a declaration that only assigns another schema's
identifier) are set aside and appended after everything else, in discovery
order.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_ALIAS_DECLARATION = re.compile(r"= (\w+Schema);$", re.MULTILINE)
_STRUCTURAL_MARKERS = ("z.object", "z.enum", "z.union", "z.array", ".and(")


def is_pure_alias(code: str) -> bool:
    """Whether a fragment's declaration is nothing but another schema's identifier."""
    return _ALIAS_DECLARATION.search(code) is not None and not any(marker in code for marker in _STRUCTURAL_MARKERS)


def topological_sort(fragments: dict[str, str], dependencies: dict[str, list[str]]) -> list[str]:
    """
    Order fragment names dependencies-first.

    Depth-first post-order over the recorded edges, starting from each name
    in discovery order. A node already on the current path is not
    re-entered: such edges close a cycle, which the compiler has already
    broken with a deferred reference.

    Args:
        fragments: Compiled code keyed by name, in discovery order
        dependencies: Edges recorded during compilation (name -> names it uses)

    Returns:
        Every fragment name exactly once
    """
    aliases = [name for name, code in fragments.items() if is_pure_alias(code)]
    alias_set = set(aliases)
    ordered: list[str] = []
    visited: set[str] = set()

    for root in fragments:
        if root in visited or root in alias_set:
            continue
        visiting = {root}
        stack = [(root, iter(dependencies.get(root, ())))]
        while stack:
            node, edges = stack[-1]
            for dep in edges:
                if dep in visited or dep in visiting or dep in alias_set or dep not in fragments:
                    continue
                visiting.add(dep)
                stack.append((dep, iter(dependencies.get(dep, ()))))
                break
            else:
                stack.pop()
                visiting.discard(node)
                visited.add(node)
                ordered.append(node)

    ordered.extend(aliases)
    logger.debug("Emission order: %s", ", ".join(ordered))
    return ordered
