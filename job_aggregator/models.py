"""Core data model shared by every stage of the pipeline.

All records are frozen dataclasses: a NormalizedJob never changes after its id
has been computed, and an AggregationResult is immutable once the Aggregator
has built it. Serialization uses the camelCase layout of the cache file and
of the query responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

# SourceError kinds
TRANSPORT_ERROR = "transport"
TIMEOUT_ERROR = "timeout"
UNEXPECTED_ERROR = "unexpected"


@dataclass(frozen=True)
class NormalizedJob:
    """Canonical unit of the system: one posting from one source."""

    id: str
    company_name: str
    job_title: str
    location: str
    url: str
    source: str
    publish_date: Optional[str] = None  # YYYY-MM-DD
    description: Optional[str] = None
    contract_type: Optional[str] = None
    degraded: bool = False  # True when served from an adapter's last-known-good data

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "companyName": self.company_name,
            "jobTitle": self.job_title,
            "location": self.location,
            "publishDate": self.publish_date,
            "url": self.url,
            "source": self.source,
            "description": self.description,
            "contractType": self.contract_type,
            "degraded": self.degraded,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NormalizedJob":
        return cls(
            id=data["id"],
            company_name=data["companyName"],
            job_title=data["jobTitle"],
            location=data["location"],
            url=data.get("url") or "",
            source=data["source"],
            publish_date=data.get("publishDate"),
            description=data.get("description"),
            contract_type=data.get("contractType"),
            degraded=bool(data.get("degraded", False)),
        )

    def as_degraded(self) -> "NormalizedJob":
        return replace(self, degraded=True)


@dataclass(frozen=True)
class SourceError:
    """One failed adapter in one aggregation run."""

    source: str
    message: str
    origin_endpoint: Optional[str] = None
    kind: str = UNEXPECTED_ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "message": self.message,
            "originEndpoint": self.origin_endpoint,
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceError":
        return cls(
            source=data["source"],
            message=data.get("message", ""),
            origin_endpoint=data.get("originEndpoint"),
            kind=data.get("kind", UNEXPECTED_ERROR),
        )


@dataclass(frozen=True)
class AggregationResult:
    """Deduplicated jobs plus one SourceError per failed adapter.

    source_counts maps every adapter that succeeded to the number of jobs it
    returned (before cross-source deduplication).
    """

    jobs: tuple[NormalizedJob, ...] = ()
    errors: tuple[SourceError, ...] = ()
    source_counts: dict[str, int] = field(default_factory=dict)

    @property
    def failed_sources(self) -> set[str]:
        return {error.source for error in self.errors}

    @property
    def succeeded_sources(self) -> set[str]:
        return set(self.source_counts)

    def jobs_for_source(self, source: str) -> list[NormalizedJob]:
        return [job for job in self.jobs if job.source == source]

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "errors": [error.to_dict() for error in self.errors],
            "sourceCounts": dict(self.source_counts),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AggregationResult":
        return cls(
            jobs=tuple(NormalizedJob.from_dict(job) for job in data.get("jobs", [])),
            errors=tuple(SourceError.from_dict(err) for err in data.get("errors", [])),
            source_counts={str(k): int(v) for k, v in (data.get("sourceCounts") or {}).items()},
        )
