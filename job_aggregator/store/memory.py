"""
In-memory job store.

Used when no database is configured, and as the reference backend in tests.
Reconciles of the same source are serialized with one lock per source;
different sources reconcile concurrently.
"""

import logging
import threading
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..models import NormalizedJob
from .base import (
    JobFilters,
    JobStore,
    ReconcileStats,
    ScrapeLogEntry,
    StoredJobRecord,
    sort_jobs,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryJobStore(JobStore):
    """Dictionary-backed JobStore keyed by job id."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self.clock = clock
        self._records: dict[str, StoredJobRecord] = {}
        self._logs: list[ScrapeLogEntry] = []
        self._records_lock = threading.Lock()
        self._source_locks: dict[str, threading.Lock] = {}
        self._source_locks_guard = threading.Lock()

    def _source_lock(self, source: str) -> threading.Lock:
        with self._source_locks_guard:
            return self._source_locks.setdefault(source, threading.Lock())

    def reconcile(self, source: str, fresh_records: Sequence[NormalizedJob]) -> ReconcileStats:
        self._check_source(source, fresh_records)

        with self._source_lock(source):
            now = self.clock()
            fresh_ids = set()
            created = updated = deactivated = 0

            with self._records_lock:
                for job in fresh_records:
                    fresh_ids.add(job.id)
                    existing = self._records.get(job.id)
                    if existing is None:
                        self._records[job.id] = StoredJobRecord(
                            job=job, is_active=True, scraped_at=now, created_at=now
                        )
                        created += 1
                    else:
                        self._records[job.id] = StoredJobRecord(
                            job=job, is_active=True, scraped_at=now, created_at=existing.created_at
                        )
                        updated += 1

                for job_id, record in list(self._records.items()):
                    if record.source == source and record.is_active and job_id not in fresh_ids:
                        self._records[job_id] = StoredJobRecord(
                            job=record.job,
                            is_active=False,
                            scraped_at=record.scraped_at,
                            created_at=record.created_at,
                        )
                        deactivated += 1

        stats = ReconcileStats(created=created, updated=updated, deactivated=deactivated)
        logger.info("Reconciled source", extra={"source": source, **stats.to_dict()})
        return stats

    def query(self, filters: Optional[JobFilters] = None) -> list[StoredJobRecord]:
        filters = filters or JobFilters()
        with self._records_lock:
            records = list(self._records.values())

        selected = {
            record.id: record
            for record in records
            if (filters.is_active is None or record.is_active == filters.is_active)
            and filters.matches(record.job)
        }
        return [selected[job.id] for job in sort_jobs(r.job for r in selected.values())]

    def distinct_values(self, field_name: str, active_only: bool = True) -> list[str]:
        self._check_field(field_name)
        with self._records_lock:
            records = list(self._records.values())

        values = {
            getattr(record.job, field_name)
            for record in records
            if record.is_active or not active_only
        }
        return sorted(value for value in values if value)

    def get(self, job_id: str) -> Optional[StoredJobRecord]:
        with self._records_lock:
            return self._records.get(job_id)

    def log_scrape(
        self,
        source: str,
        status: str,
        jobs_found: int,
        error_message: Optional[str] = None,
        duration_ms: Optional[int] = None,
        stats: Optional[ReconcileStats] = None,
    ) -> ScrapeLogEntry:
        entry = ScrapeLogEntry(
            source=source,
            status=status,
            jobs_found=jobs_found,
            scraped_at=self.clock(),
            error_message=error_message,
            duration_ms=duration_ms,
            stats=stats or ReconcileStats(),
        )
        with self._records_lock:
            self._logs.append(entry)
        return entry

    def stats(self) -> dict[str, Any]:
        with self._records_lock:
            active = [record for record in self._records.values() if record.is_active]
            last_log = self._logs[-1] if self._logs else None

        counts = Counter(record.job.company_name for record in active)
        return {
            "totalJobs": len(active),
            "companies": [
                {"companyName": name, "count": count} for name, count in counts.most_common()
            ],
            "lastScrape": last_log.to_dict() if last_log else None,
        }
