"""
Store Lifecycle Manager

Keeps the persistent dataset consistent across scraping runs: upsert of
fresh postings, soft delete of postings that disappeared from their source.

Backends:
- InMemoryJobStore: default when no database is configured, used in tests
- PostgresJobStore: psycopg2, schema in db/schema.sql
"""

from .base import (
    DISTINCT_FIELDS,
    SCRAPE_FAILED,
    SCRAPE_PARTIAL,
    SCRAPE_SUCCESS,
    JobFilters,
    JobStore,
    ReconcileStats,
    ScrapeLogEntry,
    StoredJobRecord,
    sort_jobs,
)
from .db_operations import DatabaseError, PostgresJobStore
from .memory import InMemoryJobStore

__all__ = [
    "DISTINCT_FIELDS",
    "DatabaseError",
    "InMemoryJobStore",
    "JobFilters",
    "JobStore",
    "PostgresJobStore",
    "ReconcileStats",
    "SCRAPE_FAILED",
    "SCRAPE_PARTIAL",
    "SCRAPE_SUCCESS",
    "ScrapeLogEntry",
    "StoredJobRecord",
    "sort_jobs",
]
