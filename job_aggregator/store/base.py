"""
Job Store Interface

The store keeps the durable history of postings across scraping runs. Its
central operation is reconcile(): after a successful run of one source, the
stored records of that source are brought in line with what was just seen.

Record lifecycle:
- First sight: inserted, active
- Seen again: content refreshed, scraped_at updated, active again if it was not
- Absent from a completed run of its source: deactivated (soft delete)

Records are never physically deleted by normal operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..models import NormalizedJob

# Fields accepted by distinct_values() and filters
DISTINCT_FIELDS = ("company_name", "location", "job_title", "source", "contract_type")

SCRAPE_SUCCESS = "success"
SCRAPE_PARTIAL = "partial"
SCRAPE_FAILED = "failed"


@dataclass(frozen=True)
class ReconcileStats:
    """What one reconcile pass did. For observability only."""

    created: int = 0
    updated: int = 0
    deactivated: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"created": self.created, "updated": self.updated, "deactivated": self.deactivated}


@dataclass(frozen=True)
class StoredJobRecord:
    """A NormalizedJob plus its lifecycle fields."""

    job: NormalizedJob
    is_active: bool
    scraped_at: datetime
    created_at: datetime

    @property
    def id(self) -> str:
        return self.job.id

    @property
    def source(self) -> str:
        return self.job.source

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.job.to_dict(),
            "isActive": self.is_active,
            "scrapedAt": self.scraped_at.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class JobFilters:
    """
    Filters shared by the store query and the query service.

    - companies: exact company names, any of them (empty = all)
    - locations: exact locations, any of them (empty = all)
    - search: case-insensitive substring of company, title, location or description
    - is_active: True (default) or False to select on lifecycle, None for all
    """

    companies: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    search: Optional[str] = None
    is_active: Optional[bool] = True

    @classmethod
    def build(
        cls,
        companies: Optional[Iterable[str]] = None,
        locations: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = True,
    ) -> "JobFilters":
        return cls(
            companies=tuple(c for c in (companies or ()) if c),
            locations=tuple(loc for loc in (locations or ()) if loc),
            search=(search or "").strip() or None,
            is_active=is_active,
        )

    def matches(self, job: NormalizedJob) -> bool:
        """Tell whether a job passes the content filters (is_active is not checked here)."""
        if self.companies and job.company_name not in self.companies:
            return False
        if self.locations and job.location not in self.locations:
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = (job.company_name, job.job_title, job.location, job.description or "")
            if not any(needle in text.lower() for text in haystacks):
                return False
        return True


@dataclass(frozen=True)
class ScrapeLogEntry:
    """One scraping run of one source."""

    source: str
    status: str
    jobs_found: int
    scraped_at: datetime
    error_message: Optional[str] = None
    duration_ms: Optional[int] = None
    stats: ReconcileStats = field(default_factory=ReconcileStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "status": self.status,
            "jobsFound": self.jobs_found,
            "scrapedAt": self.scraped_at.isoformat(),
            "errorMessage": self.error_message,
            "durationMs": self.duration_ms,
            **self.stats.to_dict(),
        }


def sort_jobs(jobs: Iterable[NormalizedJob]) -> list[NormalizedJob]:
    """Order by company name, then most recent publish date first (undated last)."""
    by_date = sorted(jobs, key=lambda job: job.publish_date or "", reverse=True)
    return sorted(by_date, key=lambda job: job.company_name.lower())


class JobStore(ABC):
    """Persistent storage of job postings with soft-delete lifecycle."""

    @abstractmethod
    def reconcile(self, source: str, fresh_records: Sequence[NormalizedJob]) -> ReconcileStats:
        """
        Bring the stored records of one source in line with a completed scrape.

        Upserts every fresh record, then deactivates every stored record of
        the same source whose id is not in the fresh set. Records of other
        sources are not touched. Reconciles of the same source are serialized.

        Args:
            source: Source tag; every fresh record must carry it
            fresh_records: Full result of one successful run of that source

        Raises:
            ValueError: If a fresh record belongs to another source
        """
        pass

    @abstractmethod
    def query(self, filters: Optional[JobFilters] = None) -> list[StoredJobRecord]:
        """Return matching records ordered by company name, then publish date descending."""
        pass

    @abstractmethod
    def distinct_values(self, field_name: str, active_only: bool = True) -> list[str]:
        """Sorted distinct non-empty values of a field, for filter lists."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[StoredJobRecord]:
        pass

    @abstractmethod
    def log_scrape(
        self,
        source: str,
        status: str,
        jobs_found: int,
        error_message: Optional[str] = None,
        duration_ms: Optional[int] = None,
        stats: Optional[ReconcileStats] = None,
    ) -> ScrapeLogEntry:
        """Record one scraping run of one source."""
        pass

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """
        Active job totals for dashboards.

        Returns:
            {"totalJobs": int, "companies": [{"companyName", "count"}...] sorted by
            count descending, "lastScrape": ScrapeLogEntry dict or None}
        """
        pass

    @staticmethod
    def _check_source(source: str, fresh_records: Sequence[NormalizedJob]) -> None:
        if not source:
            raise ValueError("source is required")
        for job in fresh_records:
            if job.source != source:
                raise ValueError(
                    f"Record {job.id} belongs to source '{job.source}', not '{source}'"
                )

    @staticmethod
    def _check_field(field_name: str) -> None:
        if field_name not in DISTINCT_FIELDS:
            raise ValueError(
                f"Unsupported field '{field_name}' (supported: {', '.join(DISTINCT_FIELDS)})"
            )
