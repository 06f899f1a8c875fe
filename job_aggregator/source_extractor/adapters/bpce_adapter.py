"""BPCE Adapter.

Reads the Groupe BPCE job offers published on the Opendatasoft open data
portal (Explore API v2.1).

API Documentation: https://bpce.opendatasoft.com/api/explore/v2.1/console
"""

import logging
import re
import unicodedata
from typing import Any, Optional

from ..base import RawExtract, SourceAdapter, SourceFetchError

logger = logging.getLogger(__name__)

RECRUITMENT_SITE = "recrutement.bpce.fr"
GROUP_ORGANIZATION = "Groupe BPCE"


class BPCEAdapter(SourceAdapter):
    """Adapter for the BPCE open data job offers dataset.

    Pagination is offset/limit based. The page token is the offset of the
    next page, as a string.

    Example:
        adapter = BPCEAdapter(page_size=50)
        jobs = adapter.fetch_jobs()
    """

    BASE_URL = "https://bpce.opendatasoft.com/api/explore/v2.1"
    DATASET = "groupe-bpce-offres-emploi"
    DEFAULT_PAGE_SIZE = 100

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = 100,
        page_delay: float = 0.3,
        **kwargs: Any,
    ):
        """Initialize the BPCE adapter.

        Args:
            page_size: Records per request (the API caps it at 100)
            max_pages: Hard ceiling on requests per run
            page_delay: Seconds between two requests
        """
        super().__init__(
            source_name="bpce",
            company_name="BPCE",
            max_pages=max_pages,
            page_delay=page_delay,
            **kwargs,
        )
        self.page_size = page_size

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/catalog/datasets/{self.DATASET}/records"

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        """Fetch one page of records.

        Args:
            page_token: Offset as string (e.g., "100") or None for the first page

        Returns:
            Tuple of (list of RawExtract, next offset or None when exhausted)
        """
        offset = int(page_token) if page_token else 0
        params = {"limit": self.page_size, "offset": offset, "timezone": "UTC"}

        data = self._get_json(self.endpoint, params=params)
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise SourceFetchError(
                self.source_name, "Invalid response structure from BPCE API", self.endpoint
            )

        records = data["results"]
        total_count = data.get("total_count")

        raws = [self._to_raw(record) for record in records if isinstance(record, dict)]

        next_offset = offset + self.page_size
        has_more = bool(records) and len(records) == self.page_size
        # Without total_count only a short page ends the walk
        if isinstance(total_count, int) and not isinstance(total_count, bool):
            has_more = has_more and next_offset < total_count

        logger.debug(
            "Fetched BPCE records",
            extra={"offset": offset, "records": len(records), "total_count": total_count},
        )

        return raws, str(next_offset) if has_more else None

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        """Map a BPCE record to the common format.

        The hiring entity of the group is appended to the title when it is
        not the group itself ("Analyste crédit - Banque Populaire Rives de Paris").
        """
        record = raw.payload
        title = raw.title
        organization = record.get("organization") or record.get("company")
        if organization and organization != GROUP_ORGANIZATION:
            title = f"{title} - {organization}"

        return {
            "company_name": self.company_name,
            "job_title": title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "description": record.get("description"),
            "contract_type": record.get("jobtype") or "CDI",
        }

    def _to_raw(self, record: dict[str, Any]) -> RawExtract:
        return RawExtract(
            source=self.source_name,
            title=record.get("title") or "",
            location=format_location(record.get("city"), record.get("state")),
            url=self._job_url(record),
            date_text=record.get("lastmodifieddate"),
            payload=record,
        )

    def _job_url(self, record: dict[str, Any]) -> str:
        """Link to the offer on the group's recruitment site.

        The dataset's own url/apply_url fields are used when they already
        point to the recruitment site; otherwise the link is built from the title.
        """
        for key in ("url", "apply_url"):
            candidate = record.get(key)
            if candidate and RECRUITMENT_SITE in candidate:
                return candidate

        return f"https://{RECRUITMENT_SITE}/job/{title_slug(record.get('title') or '')}"


def format_location(city: Optional[str], state: Optional[str]) -> str:
    """Combine city and region: "Paris (Île-de-France)", falling back to "France"."""
    if city and state:
        return f"{city} ({state})"
    return city or state or "France"


def title_slug(text: str) -> str:
    """Slug used by recrutement.bpce.fr job pages."""
    ascii_text = unicodedata.normalize("NFKD", text.lower()).encode("ascii", "ignore").decode("ascii")
    without_specials = re.sub(r"[^\w\s-]", "", ascii_text)
    return re.sub(r"-+", "-", re.sub(r"\s+", "-", without_specials.strip())).strip("-")
