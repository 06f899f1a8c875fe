"""
Job query service.

Entry point of the presentation layer. Answers "give me the jobs matching
these filters" from the cache when it is fresh, and otherwise runs the
Aggregator, refreshes the cache and reconciles the store.

Degradation rules:
- A source failure never hides the jobs of the other sources
- When every source fails, the last good cache entry (even expired, even
  after a forced refresh) is served rather than nothing
- A store failure is logged; the aggregated result is still served
"""

import logging
from collections.abc import Iterable
from typing import Any, Optional

from ..aggregator.aggregator import Aggregator
from ..cache.persistent_cache import CacheEntry, PersistentCache
from ..models import AggregationResult
from ..settings import Settings
from ..source_extractor.registry import build_adapters
from ..source_extractor.source_config import load_sources_config
from ..store.base import (
    SCRAPE_FAILED,
    SCRAPE_PARTIAL,
    SCRAPE_SUCCESS,
    JobFilters,
    JobStore,
    sort_jobs,
)
from ..store.db_operations import DatabaseError, PostgresJobStore

logger = logging.getLogger(__name__)

ORIGIN_CACHE = "cache"
ORIGIN_FRESH = "fresh"

STATUS_OK = "ok"
STATUS_DEGRADED = "degraded"
STATUS_FAILED = "failed"


def source_status(result: AggregationResult) -> list[dict[str, Any]]:
    """Per-source summary: ok, degraded (served from last-known-good data) or failed."""
    statuses = []
    for source, count in result.source_counts.items():
        degraded = any(job.degraded for job in result.jobs_for_source(source))
        statuses.append(
            {
                "source": source,
                "status": STATUS_DEGRADED if degraded else STATUS_OK,
                "jobCount": count,
                "message": None,
            }
        )
    for error in result.errors:
        statuses.append(
            {"source": error.source, "status": STATUS_FAILED, "jobCount": 0, "message": error.message}
        )
    return statuses


class JobQueryService:
    """
    Cache-first access to the aggregated job list.

    Usage:
        service = JobQueryService.from_settings(Settings.from_env())
        response = service.get_jobs(companies=["Air France"], search="technicien")
    """

    def __init__(
        self,
        aggregator: Aggregator,
        cache: PersistentCache,
        store: Optional[JobStore] = None,
    ):
        self.aggregator = aggregator
        self.cache = cache
        self.store = store

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        config_path: Optional[str] = None,
        store: Optional[JobStore] = None,
        connect_store: bool = True,
    ) -> "JobQueryService":
        """
        Wire adapters, cache and store from runtime settings.

        The PostgreSQL store is used when DATABASE_URL is set, no store is given
        and connect_store is true.

        Raises:
            FileNotFoundError, ValueError: On invalid sources configuration
            DatabaseError: If the database is configured but unreachable
        """
        providers = load_sources_config(config_path or settings.sources_config_path)
        aggregator = Aggregator(build_adapters(providers), timeout=settings.aggregator_timeout_seconds)
        cache = PersistentCache(settings.cache_dir, ttl_seconds=settings.cache_ttl_seconds)
        if store is None and connect_store and settings.database_url:
            store = PostgresJobStore(settings.database_url)
        return cls(aggregator, cache, store)

    def get_jobs(
        self,
        companies: Optional[Iterable[str]] = None,
        locations: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        """
        Return the jobs matching the filters.

        Returns:
            {
                "jobs": [...],              # serialized NormalizedJob, filtered and sorted
                "lastUpdated": str | None,  # ISO timestamp of the served result
                "totalCount": int,          # number of jobs after filtering
                "source": "cache" | "fresh",
                "cacheStatus": {...},       # CacheStatus plus "stale"
                "errors": [...],            # SourceErrors of the served run
                "sourceStatus": [...],      # ok / degraded / failed per source
            }
        """
        entry, origin, errors, stale = self.refresh(force_refresh=force_refresh)
        filters = JobFilters.build(companies, locations, search)

        if entry is None:
            jobs = []
            last_updated = None
            statuses = source_status(AggregationResult(errors=tuple(errors)))
        else:
            jobs = sort_jobs(job for job in entry.result.jobs if filters.matches(job))
            last_updated = entry.last_updated
            statuses = source_status(entry.result)

        cache_status = self.cache.status().to_dict()
        cache_status["stale"] = stale

        logger.info(
            "Served job query",
            extra={
                "origin": origin,
                "stale": stale,
                "jobs": len(jobs),
                "errors": len(errors),
                "force_refresh": force_refresh,
            },
        )

        return {
            "jobs": [job.to_dict() for job in jobs],
            "lastUpdated": last_updated,
            "totalCount": len(jobs),
            "source": origin,
            "cacheStatus": cache_status,
            "errors": [error.to_dict() for error in errors],
            "sourceStatus": statuses,
        }

    def refresh(self, force_refresh: bool = False) -> tuple[Optional[CacheEntry], str, list, bool]:
        """
        Resolve the result to serve.

        Returns:
            (entry or None, origin, source errors, stale flag)
        """
        if not force_refresh:
            entry = self.cache.get()
            if entry is not None:
                return entry, ORIGIN_CACHE, list(entry.result.errors), False

        # A forced refresh leaves the current entry on disk until put() replaces it
        stale_entry = self.cache.peek()

        result = self.aggregator.run()

        if result.errors and not result.source_counts:
            logger.error(
                "All sources failed",
                extra={"errors": [error.source for error in result.errors]},
            )
            self.reconcile(result)
            if stale_entry is not None:
                logger.warning(
                    "Serving last good cache entry",
                    extra={"last_updated": stale_entry.last_updated},
                )
                return stale_entry, ORIGIN_CACHE, list(result.errors), True
            return None, ORIGIN_FRESH, list(result.errors), False

        try:
            entry = self.cache.put(result)
        except OSError as e:
            logger.error(
                "Failed to write cache entry, serving result uncached",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            entry = CacheEntry(result=result, created_at=int(self.cache.clock() * 1000))

        self.reconcile(result)
        return entry, ORIGIN_FRESH, list(result.errors), False

    def reconcile(self, result: AggregationResult) -> dict[str, Any]:
        """
        Reconcile the store with every source that completed live extraction.

        Failed sources are skipped, and so are sources that only returned
        last-known-good data: in both cases the run says nothing about which
        postings disappeared.
        """
        if self.store is None:
            return {}

        reconciled = {}
        for source in result.source_counts:
            jobs = result.jobs_for_source(source)
            if any(job.degraded for job in jobs):
                logger.warning("Skipping reconcile of degraded source", extra={"source": source})
                self._log_scrape(source, SCRAPE_PARTIAL, len(jobs), "Served last-known-good data")
                continue

            try:
                stats = self.store.reconcile(source, jobs)
            except DatabaseError as e:
                logger.error(
                    "Store reconcile failed, serving aggregated result anyway",
                    extra={"source": source, "error": str(e)},
                )
                continue

            reconciled[source] = stats.to_dict()
            self._log_scrape(source, SCRAPE_SUCCESS, len(jobs), stats=stats)

        for error in result.errors:
            self._log_scrape(error.source, SCRAPE_FAILED, 0, error.message)

        return reconciled

    def filter_options(self) -> dict[str, list[str]]:
        """Distinct companies and locations for filter lists."""
        if self.store is not None:
            try:
                return {
                    "companies": self.store.distinct_values("company_name"),
                    "locations": self.store.distinct_values("location"),
                }
            except DatabaseError as e:
                logger.error("Failed to read filter options from store", extra={"error": str(e)})

        entry = self.cache.peek()
        jobs = entry.result.jobs if entry else ()
        return {
            "companies": sorted({job.company_name for job in jobs}),
            "locations": sorted({job.location for job in jobs}),
        }

    def _log_scrape(self, source, status, jobs_found, error_message=None, stats=None) -> None:
        if self.store is None:
            return
        try:
            self.store.log_scrape(source, status, jobs_found, error_message=error_message, stats=stats)
        except DatabaseError as e:
            logger.warning("Failed to log scraping run", extra={"source": source, "error": str(e)})
