"""
Multi-source aggregation.

The Aggregator runs every configured adapter concurrently, waits for all of
them, and merges their output into one deduplicated AggregationResult. A
failing or slow source never takes the others down: each failure becomes one
SourceError next to the jobs of the sources that succeeded.

Adapters are blocking (requests + time.sleep), so each one runs in a worker
thread of a dedicated executor and the event loop only coordinates them.
"""

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..models import (
    TIMEOUT_ERROR,
    TRANSPORT_ERROR,
    UNEXPECTED_ERROR,
    AggregationResult,
    NormalizedJob,
    SourceError,
)
from ..source_extractor.base import SourceAdapter, SourceFetchError

logger = logging.getLogger(__name__)


def deduplicate_jobs(jobs: Iterable[NormalizedJob]) -> list[NormalizedJob]:
    """
    Keep the first occurrence of every job id, preserving order.

    Applying it twice gives the same result as applying it once.
    """
    seen: set[str] = set()
    unique = []
    for job in jobs:
        if job.id in seen:
            continue
        seen.add(job.id)
        unique.append(job)
    return unique


class Aggregator:
    """
    Run a fixed set of adapters concurrently and merge their results.

    Usage:
        aggregator = Aggregator([BPCEAdapter(), LyraAdapter()], timeout=120)
        result = aggregator.run()
        for error in result.errors:
            print(error.source, error.message)
    """

    def __init__(self, adapters: Sequence[SourceAdapter], timeout: Optional[float] = None):
        """
        Args:
            adapters: Adapters in registration order; on duplicate ids the
                job from the earliest adapter wins
            timeout: Optional run-level timeout in seconds. Adapters still
                running when it fires are asked to stop before their next
                page and reported as timeouts.
        """
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")

        self.adapters = list(adapters)
        self.timeout = timeout

    def run(self) -> AggregationResult:
        """Blocking entry point for callers without an event loop."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> AggregationResult:
        """
        Run all adapters and wait for every one of them (or the timeout).

        Returns:
            AggregationResult with deduplicated jobs and one SourceError per
            failed adapter. Total failure yields no jobs and every error.

        Raises:
            asyncio.CancelledError: If the caller cancels the run
        """
        start_time = time.monotonic()
        if not self.adapters:
            logger.warning("No adapters configured, nothing to aggregate")
            return AggregationResult()

        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(
            max_workers=len(self.adapters), thread_name_prefix="source-adapter"
        )

        for adapter in self.adapters:
            adapter.clear_stop()

        tasks = [loop.run_in_executor(executor, adapter.fetch_jobs) for adapter in self.adapters]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self.timeout)
        except asyncio.CancelledError:
            for adapter, task in zip(self.adapters, tasks):
                adapter.request_stop()
                task.cancel()
            raise
        finally:
            # Abandoned workers stop before their next page; their results are discarded
            executor.shutdown(wait=False, cancel_futures=True)

        for adapter, task in zip(self.adapters, tasks):
            if task in pending:
                adapter.request_stop()
                task.cancel()

        merged: list[NormalizedJob] = []
        errors: list[SourceError] = []
        source_counts: dict[str, int] = {}

        for adapter, task in zip(self.adapters, tasks):
            if task in pending:
                errors.append(
                    SourceError(
                        source=adapter.source_name,
                        message=f"Timed out after {self.timeout} seconds",
                        origin_endpoint=adapter.endpoint,
                        kind=TIMEOUT_ERROR,
                    )
                )
                logger.error(
                    "Source timed out",
                    extra={"source": adapter.source_name, "timeout_seconds": self.timeout},
                )
                continue

            error = self._error_from_task(adapter, task)
            if error is not None:
                errors.append(error)
                continue

            jobs = task.result()
            source_counts[adapter.source_name] = len(jobs)
            merged.extend(jobs)

        unique_jobs = deduplicate_jobs(merged)

        logger.info(
            "Aggregation completed",
            extra={
                "sources": len(self.adapters),
                "succeeded_sources": len(source_counts),
                "failed_sources": len(errors),
                "jobs_before_dedup": len(merged),
                "jobs": len(unique_jobs),
                "duration_seconds": round(time.monotonic() - start_time, 3),
            },
        )
        if not source_counts:
            logger.error("All sources failed", extra={"errors": [e.source for e in errors]})

        return AggregationResult(
            jobs=tuple(unique_jobs),
            errors=tuple(errors),
            source_counts=source_counts,
        )

    def _error_from_task(self, adapter: SourceAdapter, task: asyncio.Future) -> Optional[SourceError]:
        """Turn a failed adapter task into a SourceError; None if it succeeded."""
        exc = task.exception()
        if exc is None:
            return None

        if isinstance(exc, SourceFetchError):
            logger.error(
                "Source fetch failed",
                extra={"source": adapter.source_name, "endpoint": exc.endpoint, "error": exc.message},
            )
            return SourceError(
                source=adapter.source_name,
                message=exc.message,
                origin_endpoint=exc.endpoint or adapter.endpoint,
                kind=TRANSPORT_ERROR,
            )

        logger.error(
            "Unexpected error in source adapter",
            extra={"source": adapter.source_name, "error_type": type(exc).__name__},
            exc_info=exc,
        )
        return SourceError(
            source=adapter.source_name,
            message=f"{type(exc).__name__}: {exc}",
            origin_endpoint=adapter.endpoint,
            kind=UNEXPECTED_ERROR,
        )
