"""Source Adapter Base Class.

This module defines the abstract interface that every career-site adapter must
implement. The Aggregator only relies on ``fetch_jobs()``; everything else is
the adapter's own business. New sources are added by writing one new adapter.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from ..models import NormalizedJob
from ..normalizer.normalize import NormalizationError, normalize_job_posting
from .retry import RetryableStatusError, retry_http_call

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15
DEFAULT_MAX_PAGES = 20
DEFAULT_PAGE_DELAY_SECONDS = 0.5
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
}

# Text that shows up in navigation chrome and is never a job title
NOISE_TERMS = (
    "cookie",
    "navigation",
    "politique",
    "connexion",
    "accueil",
    "javascript",
    "mentions légales",
    "confidentialité",
    "candidature spontanée",
    "nous contacter",
)


@dataclass
class RawExtract:
    """One posting as scraped, before any normalization.

    Adapters keep whatever extra fields they scraped (description, contract
    type, reference number...) in ``payload``.
    """

    source: str
    title: str
    location: Optional[str] = None
    url: Optional[str] = None
    date_text: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)


class SourceFetchError(Exception):
    """Raised when an adapter cannot reach its source.

    Covers network errors, timeouts, non-2xx responses and unreadable
    payloads. Never raised for "source reachable but no postings found".
    """

    def __init__(
        self,
        source: str,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.source = source
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code


class SourceAdapter(ABC):
    """Abstract base class for career-site adapters.

    Subclasses implement one page of extraction (``fetch``) and the mapping of
    a scraped record to the common format (``map_to_common``). The base class
    provides the rest of the extraction contract:
    - Pagination in page order, bounded by ``max_pages``
    - A polite delay between page requests
    - Normalization and rejection of incomplete records
    - Noise filtering (navigation links mistaken for postings)
    - A clearly tagged degraded dataset when live extraction finds nothing

    Usage:
        class MySiteAdapter(SourceAdapter):
            BASE_URL = "https://careers.example.com"

            def __init__(self, **kwargs):
                super().__init__(source_name="my_site", company_name="Example", **kwargs)

            def fetch(self, page_token=None):
                # Fetch one page, return (raw records, next page token)
                ...

            def map_to_common(self, raw):
                # Map scraped fields to the common format
                ...
    """

    BASE_URL = ""
    MIN_TITLE_LENGTH = 4
    MAX_TITLE_LENGTH = 150

    # Last-known-good postings, served only when live extraction yields nothing.
    # Each entry is a common-format dict (see map_to_common).
    DEGRADED_JOBS: tuple[dict[str, Any], ...] = ()

    def __init__(
        self,
        source_name: str,
        company_name: str,
        max_pages: int = DEFAULT_MAX_PAGES,
        page_delay: float = DEFAULT_PAGE_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        use_degraded_data: bool = True,
    ):
        """Initialize the adapter.

        Args:
            source_name: Unique tag for this source (e.g., "bpce")
            company_name: Employer name attached to every posting
            max_pages: Hard ceiling on pages fetched per run
            page_delay: Seconds to wait between two page requests
            timeout: Per-request timeout in seconds
            max_retries: Retries for transient HTTP failures
            retry_delay: Delay before the first retry in seconds
            use_degraded_data: Serve DEGRADED_JOBS when live extraction is empty
        """
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")

        self.source_name = source_name
        self.company_name = company_name
        self.max_pages = max_pages
        self.page_delay = page_delay
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.use_degraded_data = use_degraded_data
        self.request_count = 0
        self._stop_event = threading.Event()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Ask a running extraction to give up before its next page."""
        self._stop_event.set()

    def clear_stop(self) -> None:
        self._stop_event.clear()

    @property
    def endpoint(self) -> str:
        """Main URL of the source, reported in SourceErrors."""
        return self.BASE_URL

    @abstractmethod
    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        """Fetch one page of postings from the source.

        Args:
            page_token: Token of the page to fetch. None for the first page.
                       Format is adapter-specific (page number, offset...).

        Returns:
            A tuple of:
            - List of RawExtract objects found on the page
            - Next page token (None when the source signals exhaustion)

        Raises:
            SourceFetchError: If the source cannot be reached
        """
        pass

    @abstractmethod
    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        """Map a scraped record to the common format.

        Returns:
            Dictionary with keys:
            - company_name: str
            - job_title: str
            - location: str
            - url: str | None
            - publish_date: str | None (any supported date format)
            - description: str | None
            - contract_type: str | None
        """
        pass

    def fetch_raw_pages(self) -> list[RawExtract]:
        """Walk the source's pages in order and collect every raw record.

        Stops when the source reports no next page, when ``max_pages`` pages
        have been fetched, or when a stop was requested; each case keeps what
        was collected.
        """
        collected: list[RawExtract] = []
        page_token: Optional[str] = None
        pages_fetched = 0

        while True:
            if self.stop_requested:
                logger.warning(
                    "Stop requested, abandoning extraction",
                    extra={"source": self.source_name, "pages_fetched": pages_fetched},
                )
                break

            raws, next_token = self.fetch(page_token)
            pages_fetched += 1
            collected.extend(raws)

            logger.debug(
                "Fetched page",
                extra={
                    "source": self.source_name,
                    "page": pages_fetched,
                    "records_in_page": len(raws),
                    "has_next_page": next_token is not None,
                },
            )

            if next_token is None:
                break

            if pages_fetched >= self.max_pages:
                logger.warning(
                    "Page ceiling reached, returning collected records",
                    extra={
                        "source": self.source_name,
                        "max_pages": self.max_pages,
                        "records_collected": len(collected),
                    },
                )
                break

            self._sleep(self.page_delay)
            page_token = next_token

        return collected

    def fetch_jobs(self) -> list[NormalizedJob]:
        """Extract, normalize and filter every posting of this source.

        Returns:
            Normalized jobs, unique by id within this source. When live
            extraction yields nothing, the degraded dataset (tagged
            ``degraded=True``) if the adapter has one, else an empty list.

        Raises:
            SourceFetchError: On transport failure. Never masked as zero results.
        """
        start_time = time.monotonic()
        raws = self.fetch_raw_pages()

        jobs: list[NormalizedJob] = []
        seen_ids: set[str] = set()
        rejected = 0

        for raw in raws:
            try:
                common = self.map_to_common(raw)
            except (KeyError, TypeError, ValueError) as e:
                rejected += 1
                logger.warning(
                    "Failed to map scraped record",
                    extra={"source": self.source_name, "title": raw.title, "error": str(e)},
                )
                continue

            if self.is_noise(common):
                rejected += 1
                continue

            try:
                job = normalize_job_posting(common, self.source_name)
            except NormalizationError as e:
                rejected += 1
                logger.debug(
                    "Rejected incomplete posting",
                    extra={"source": self.source_name, "title": raw.title, "error": str(e)},
                )
                continue

            if job.id in seen_ids:
                continue
            seen_ids.add(job.id)
            jobs.append(job)

        if not jobs and self.use_degraded_data and self.DEGRADED_JOBS:
            degraded = self.degraded_jobs()
            logger.warning(
                "Live extraction found no postings, serving degraded dataset",
                extra={
                    "source": self.source_name,
                    "raw_records": len(raws),
                    "degraded_jobs": len(degraded),
                },
            )
            return degraded

        logger.info(
            "Extracted jobs from source",
            extra={
                "source": self.source_name,
                "raw_records": len(raws),
                "jobs": len(jobs),
                "rejected": rejected,
                "requests": self.request_count,
                "duration_seconds": round(time.monotonic() - start_time, 3),
            },
        )

        return jobs

    def degraded_jobs(self) -> list[NormalizedJob]:
        """Normalize DEGRADED_JOBS and tag every record as degraded."""
        jobs = []
        for entry in self.DEGRADED_JOBS:
            common = {"company_name": self.company_name, **entry}
            jobs.append(normalize_job_posting(common, self.source_name).as_degraded())
        return jobs

    def is_noise(self, data: dict[str, Any]) -> bool:
        """Tell whether a mapped record is extraction noise rather than a posting."""
        title = (data.get("job_title") or "").strip()
        if len(title) < self.MIN_TITLE_LENGTH or len(title) > self.MAX_TITLE_LENGTH:
            return True

        lowered = title.lower()
        return any(term in lowered for term in NOISE_TERMS)

    def validate_common_format(self, data: dict[str, Any]) -> bool:
        """Validate that the mapped data has the required fields."""
        required_fields = {"job_title", "company_name", "location"}
        return all(data.get(field_name) for field_name in required_fields)

    def _http_get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """GET a URL with retries on transient failures.

        Raises:
            SourceFetchError: On network error, timeout or non-2xx status
        """
        request_headers = {**DEFAULT_HEADERS, **(headers or {})}

        @retry_http_call(max_retries=self.max_retries, initial_delay=self.retry_delay)
        def _send() -> requests.Response:
            self.request_count += 1
            response = requests.get(url, params=params, headers=request_headers, timeout=self.timeout)

            if response.status_code == 429 or response.status_code >= 500:
                raise RetryableStatusError(f"HTTP {response.status_code} from {url}", response=response)
            if response.status_code >= 400:
                raise requests.exceptions.HTTPError(f"HTTP {response.status_code} from {url}", response=response)

            return response

        try:
            return _send()
        except (requests.exceptions.RequestException, ConnectionError, TimeoutError) as e:
            status_code = getattr(getattr(e, "response", None), "status_code", None)
            logger.error(
                "Request to source failed",
                extra={
                    "source": self.source_name,
                    "url": url,
                    "status_code": status_code,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise SourceFetchError(
                self.source_name, f"{type(e).__name__}: {e}", url, status_code=status_code
            ) from e

    def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET a URL and decode its JSON body."""
        response = self._http_get(url, params=params, headers={"Accept": "application/json"})
        try:
            return response.json()
        except ValueError as e:
            raise SourceFetchError(self.source_name, f"Invalid JSON response: {e}", url) from e

    def _get_html(self, url: str, params: Optional[dict[str, Any]] = None) -> str:
        """GET a URL and return its HTML body."""
        response = self._http_get(
            url,
            params=params,
            headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
        )
        return response.text

    def _absolute_url(self, href: Optional[str]) -> str:
        if not href:
            return f"{self.BASE_URL}/"
        if href.startswith("http"):
            return href
        return f"{self.BASE_URL}/{href.lstrip('/')}"

    def _sleep(self, seconds: float) -> None:
        # Wakes up early when a stop is requested
        if seconds > 0:
            self._stop_event.wait(seconds)

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return f"{self.__class__.__name__}(source='{self.source_name}')"
