"""
Operation filters.

Include lists act as an allowlist and are checked first; exclude lists
(and `exclude_deprecated`) are checked second and always win. Empty lists
impose no constraint.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass

from .config import OperationFilters

logger = logging.getLogger(__name__)


@dataclass
class FilterStatistics:
    """Counters describing which operations a filter run kept and why others were dropped."""

    total_operations: int = 0
    included_operations: int = 0
    filtered_by_tags: int = 0
    filtered_by_paths: int = 0
    filtered_by_methods: int = 0
    filtered_by_operation_ids: int = 0
    filtered_by_deprecated: int = 0

    @property
    def filtered_operations(self) -> int:
        return (
            self.filtered_by_tags
            + self.filtered_by_paths
            + self.filtered_by_methods
            + self.filtered_by_operation_ids
            + self.filtered_by_deprecated
        )


def _matches_any(value: str | None, patterns: list[str]) -> bool:
    return bool(value) and any(fnmatch.fnmatchcase(value, pattern) for pattern in patterns)


def _contains_any(values: list[str], wanted: list[str]) -> bool:
    return any(value in values for value in wanted)


def _method_in(method: str, methods: list[str]) -> bool:
    return method.lower() in {m.lower() for m in methods}


def should_include_operation(
    operation: dict,
    path: str,
    method: str,
    filters: OperationFilters | None,
    stats: FilterStatistics | None = None,
) -> bool:
    """
    Decide whether an operation takes part in generation.

    Args:
        operation: The operation object
        path: The operation path (e.g. "/users/{id}")
        method: The HTTP method
        filters: Filter configuration; None includes everything
        stats: Optional counters updated with the reason an operation was dropped

    Returns:
        True if the operation is kept
    """
    if filters is None:
        return True

    operation_id = operation.get("operationId")
    tags = operation.get("tags") or []

    def reject(counter: str) -> bool:
        if stats is not None:
            setattr(stats, counter, getattr(stats, counter) + 1)
        return False

    if filters.include_tags and not _contains_any(tags, filters.include_tags):
        return reject("filtered_by_tags")
    if filters.include_paths and not _matches_any(path, filters.include_paths):
        return reject("filtered_by_paths")
    if filters.include_methods and not _method_in(method, filters.include_methods):
        return reject("filtered_by_methods")
    if filters.include_operation_ids and not _matches_any(operation_id, filters.include_operation_ids):
        return reject("filtered_by_operation_ids")

    if filters.exclude_deprecated and operation.get("deprecated") is True:
        return reject("filtered_by_deprecated")
    if filters.exclude_tags and _contains_any(tags, filters.exclude_tags):
        return reject("filtered_by_tags")
    if filters.exclude_paths and _matches_any(path, filters.exclude_paths):
        return reject("filtered_by_paths")
    if filters.exclude_methods and _method_in(method, filters.exclude_methods):
        return reject("filtered_by_methods")
    if filters.exclude_operation_ids and _matches_any(operation_id, filters.exclude_operation_ids):
        return reject("filtered_by_operation_ids")

    return True


def validate_filters(stats: FilterStatistics, filters: OperationFilters | None) -> None:
    """Warn when the filters removed every operation."""
    if filters is None or stats.total_operations == 0 or stats.included_operations > 0:
        return
    logger.warning("All %d operations were filtered out. Check your operationFilters configuration.", stats.total_operations)
    breakdown = []
    if stats.filtered_by_tags:
        breakdown.append(f"{stats.filtered_by_tags} by tags")
    if stats.filtered_by_paths:
        breakdown.append(f"{stats.filtered_by_paths} by paths")
    if stats.filtered_by_methods:
        breakdown.append(f"{stats.filtered_by_methods} by methods")
    if stats.filtered_by_operation_ids:
        breakdown.append(f"{stats.filtered_by_operation_ids} by operationIds")
    if stats.filtered_by_deprecated:
        breakdown.append(f"{stats.filtered_by_deprecated} by deprecated flag")
    if breakdown:
        logger.warning("Filtered: %s", ", ".join(breakdown))


def format_filter_statistics(stats: FilterStatistics) -> list[str]:
    """Lines describing a filter run, for the output's statistics block."""
    if stats.total_operations == 0:
        return []
    lines = [
        "Operation Filtering:",
        f"  Total operations: {stats.total_operations}",
        f"  Included operations: {stats.included_operations}",
    ]
    if stats.filtered_operations:
        lines.append(f"  Filtered operations: {stats.filtered_operations}")
        for label, count in (
            ("By tags", stats.filtered_by_tags),
            ("By paths", stats.filtered_by_paths),
            ("By methods", stats.filtered_by_methods),
            ("By operationIds", stats.filtered_by_operation_ids),
            ("By deprecated", stats.filtered_by_deprecated),
        ):
            if count:
                lines.append(f"    - {label}: {count}")
    return lines
