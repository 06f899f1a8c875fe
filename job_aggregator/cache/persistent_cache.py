"""
Persistent TTL cache for aggregation results.

Holds exactly one entry: the last AggregationResult and the time it was
written. The entry lives in a JSON file so that it survives restarts:

    {
        "jobs": [...],
        "errors": [...],
        "sourceCounts": {...},
        "createdAt": 1721800000000,          # epoch milliseconds
        "lastUpdated": "2025-07-24T06:10:05+00:00"
    }

Writes go to a temporary file in the same directory which then replaces the
cache file, so readers see either the old entry or the new one, never a
partial write. An unreadable file is treated as a cache miss.
"""

import json
import logging
import os
import tempfile
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..models import AggregationResult

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "jobs-cache.json"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    """The cached result and its creation time (epoch milliseconds)."""

    result: AggregationResult
    created_at: int

    @property
    def last_updated(self) -> str:
        return datetime.fromtimestamp(self.created_at / 1000, tz=timezone.utc).isoformat()

    def age_seconds(self, now: float) -> float:
        return max(0.0, now - self.created_at / 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.result.to_dict(),
            "createdAt": self.created_at,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        created_at = data["createdAt"]
        if not isinstance(created_at, (int, float)) or isinstance(created_at, bool):
            raise ValueError("createdAt must be a number of milliseconds")
        if not isinstance(data.get("jobs"), list):
            raise ValueError("jobs must be a list")
        return cls(result=AggregationResult.from_dict(data), created_at=int(created_at))


@dataclass(frozen=True)
class CacheStatus:
    """Observability snapshot of the cache."""

    cached: bool
    age_seconds: Optional[float] = None
    job_count: int = 0
    remaining_seconds: Optional[float] = None
    last_updated: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cached": self.cached,
            "ageSeconds": self.age_seconds,
            "jobCount": self.job_count,
            "remainingSeconds": self.remaining_seconds,
            "lastUpdated": self.last_updated,
        }


class PersistentCache:
    """
    Single-entry, file-backed cache with a time-to-live.

    Usage:
        cache = PersistentCache("./cache", ttl_seconds=3600)
        entry = cache.get()
        if entry is None:
            entry = cache.put(aggregator.run())
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            cache_dir: Directory of the cache file, created on first write
            ttl_seconds: Entry lifetime; an entry is valid while age < ttl
            clock: Returns the current time in epoch seconds (injectable for tests)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.cache_dir = Path(cache_dir)
        self.path = self.cache_dir / CACHE_FILE_NAME
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()

    def get(self) -> Optional[CacheEntry]:
        """Return the entry if present and younger than the TTL, else None."""
        entry = self.peek()
        if entry is None:
            return None

        age = entry.age_seconds(self.clock())
        if age >= self.ttl_seconds:
            logger.info(
                "Cache entry expired",
                extra={"age_seconds": round(age, 1), "ttl_seconds": self.ttl_seconds},
            )
            return None

        return entry

    def peek(self) -> Optional[CacheEntry]:
        """Return the stored entry regardless of its age (stale fallback)."""
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(
                "Unreadable cache file, treating as absent",
                extra={"path": str(self.path), "error": str(e), "error_type": type(e).__name__},
            )
            return None

        try:
            return CacheEntry.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(
                "Malformed cache entry, treating as absent",
                extra={"path": str(self.path), "error": str(e), "error_type": type(e).__name__},
            )
            return None

    def put(self, result: AggregationResult) -> CacheEntry:
        """
        Replace the cached entry with a new one created now.

        Raises:
            OSError: If the cache directory cannot be written
        """
        entry = CacheEntry(result=result, created_at=int(self.clock() * 1000))

        with self._lock:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.cache_dir, prefix=".jobs-cache-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(entry.to_dict(), handle, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise

        logger.info(
            "Cache entry written",
            extra={
                "path": str(self.path),
                "jobs": len(result.jobs),
                "errors": len(result.errors),
            },
        )
        return entry

    def invalidate(self) -> None:
        """Delete the cache file. A missing file is not an error."""
        with self._lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                return
        logger.info("Cache invalidated", extra={"path": str(self.path)})

    def status(self) -> CacheStatus:
        """Report whether a valid entry exists, its age and remaining lifetime."""
        entry = self.get()
        if entry is None:
            return CacheStatus(cached=False)

        age = entry.age_seconds(self.clock())
        return CacheStatus(
            cached=True,
            age_seconds=round(age, 3),
            job_count=len(entry.result.jobs),
            remaining_seconds=round(self.ttl_seconds - age, 3),
            last_updated=entry.last_updated,
        )
