"""
Batch execution of several generator runs.

Every run is isolated: a failing document is recorded in the summary and
never stops its siblings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .config import ExecutionMode, GeneratorOptions
from .errors import ConfigurationError
from .generator import OpenApiGenerator

logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[GeneratorOptions], OpenApiGenerator]


@dataclass
class SpecResult:
    spec: GeneratorOptions
    success: bool
    error: str | None = None


@dataclass
class BatchSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: list[SpecResult] = field(default_factory=list)

    @staticmethod
    def from_results(results: list[SpecResult]) -> BatchSummary:
        successful = sum(1 for result in results if result.success)
        return BatchSummary(total=len(results), successful=successful, failed=len(results) - successful, results=results)


def _process_spec(spec: GeneratorOptions, index: int, total: int, create_generator: GeneratorFactory) -> SpecResult:
    logger.info("Processing [%d/%d] %s...", index + 1, total, spec.input or "spec")
    try:
        create_generator(spec).generate()
    except Exception as e:
        logger.error("Failed to generate %s: %s", spec.output or "output", e)
        return SpecResult(spec=spec, success=False, error=str(e))
    return SpecResult(spec=spec, success=True)


def _execute_parallel(specs: list[GeneratorOptions], create_generator: GeneratorFactory, batch_size: int) -> list[SpecResult]:
    logger.info("Executing %d document(s) in parallel (batch size: %d)", len(specs), batch_size)
    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        futures = [executor.submit(_process_spec, spec, i, len(specs), create_generator) for i, spec in enumerate(specs)]
        return [future.result() for future in futures]


def _execute_sequential(specs: list[GeneratorOptions], create_generator: GeneratorFactory) -> list[SpecResult]:
    logger.info("Executing %d document(s) sequentially", len(specs))
    return [_process_spec(spec, i, len(specs), create_generator) for i, spec in enumerate(specs)]


def log_summary(summary: BatchSummary) -> None:
    logger.info("Batch Execution Summary: %d total, %d successful, %d failed", summary.total, summary.successful, summary.failed)
    for result in summary.results:
        if not result.success:
            logger.error("  %s: %s", result.spec.input or "spec", result.error)


def execute_batch(
    specs: list[GeneratorOptions],
    execution_mode: ExecutionMode = ExecutionMode.PARALLEL,
    batch_size: int = 10,
    create_generator: GeneratorFactory = OpenApiGenerator,
) -> BatchSummary:
    """
    Run one generator per spec and collect the outcomes.

    Args:
        specs: Options for each document
        execution_mode: Run with bounded fan-out or strictly one at a time
        batch_size: Maximum concurrent runs in parallel mode
        create_generator: Factory building a generator from options

    Returns:
        BatchSummary with one result per spec, in spec order

    Raises:
        ConfigurationError: if there are no specs or batch_size is not positive
    """
    if not specs:
        raise ConfigurationError("No specs provided for batch execution", context={"execution_mode": str(execution_mode.value)})
    if batch_size < 1:
        raise ConfigurationError(f"batch_size must be a positive integer, got {batch_size}")

    if execution_mode == ExecutionMode.PARALLEL:
        results = _execute_parallel(specs, create_generator, batch_size)
    else:
        results = _execute_sequential(specs, create_generator)

    summary = BatchSummary.from_results(results)
    log_summary(summary)
    return summary


def get_batch_exit_code(summary: BatchSummary) -> int:
    """1 if any spec failed, 0 otherwise."""
    return 1 if summary.failed > 0 else 0
