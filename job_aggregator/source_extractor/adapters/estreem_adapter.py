"""Estreem Adapter.

Scrapes the Estreem careers page hosted on TeamTailor. The page lists every
open position on a single page; each offer is a link to /jobs/<slug> whose
text is the title followed by the department name.
"""

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from ..base import RawExtract, SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Paris - Bercy Village"
TITLE_MARKERS = ("H/F", "F/H", "Manager", "Engineer", "Director", "Directeur")

_DEPARTMENT_SUFFIX_RE = re.compile(r"\s*(Tech|Finance et Achats|Achats|Finance)\s*$", re.IGNORECASE)
_GENDER_RE = re.compile(r"\((?:H/F|F/H)\)", re.IGNORECASE)


class EstreemAdapter(SourceAdapter):
    """Adapter for Estreem (partecis.teamtailor.com)."""

    BASE_URL = "https://partecis.teamtailor.com"
    MIN_LINK_TEXT_LENGTH = 10

    DEGRADED_JOBS = (
        {
            "job_title": "Business Analyst Expert Monétique (H/F)",
            "location": "Lyon, Paris - Bercy Village",
            "url": "https://partecis.teamtailor.com/jobs/business-analyst-expert-monetique",
            "contract_type": "Hybride",
            "description": "Tech",
        },
        {
            "job_title": "Purchase Officer (H/F)",
            "location": "Paris - Bercy Village",
            "url": "https://partecis.teamtailor.com/jobs/purchase-officer",
            "contract_type": "Hybride",
            "description": "Finance et Achats",
        },
        {
            "job_title": "Directeur Processus & Industrialisation (H/F)",
            "location": "Paris - Bercy Village",
            "url": "https://partecis.teamtailor.com/jobs/directeur-processus-and-industrialisation",
            "contract_type": "Hybride",
            "description": "Tech",
        },
        {
            "job_title": "Manager CICD (H/F)",
            "location": "Paris - Bercy Village",
            "url": "https://partecis.teamtailor.com/jobs/manager-cicd",
            "contract_type": "Hybride",
            "description": "Tech",
        },
        {
            "job_title": "Intégrateur Cloud (H/F)",
            "location": "Paris - Bercy Village, Lyon",
            "url": "https://partecis.teamtailor.com/jobs/integrateur-cloud",
            "contract_type": "Hybride",
            "description": "Tech",
        },
        {
            "job_title": "Documentation Manager (H/F)",
            "location": "Paris - Bercy Village",
            "url": "https://partecis.teamtailor.com/jobs/documentation-manager",
        },
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("max_pages", 1)
        super().__init__(source_name="estreem", company_name="Estreem", **kwargs)

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/jobs"

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        soup = BeautifulSoup(self._get_html(self.endpoint), "html.parser")

        raws = []
        for link in soup.select('a[href*="/jobs/"]'):
            text = link.get_text(" ", strip=True)
            if len(text) <= self.MIN_LINK_TEXT_LENGTH:
                continue
            if not any(marker in text for marker in TITLE_MARKERS):
                continue

            department = _DEPARTMENT_SUFFIX_RE.search(text)
            raws.append(
                RawExtract(
                    source=self.source_name,
                    title=clean_title(text),
                    location=DEFAULT_LOCATION,
                    url=self._absolute_url(link.get("href")),
                    payload={"department": department.group(1) if department else None},
                )
            )

        return raws, None

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": None,
            "description": raw.payload.get("department"),
            "contract_type": "Hybride",
        }


def clean_title(text: str) -> str:
    """Drop the trailing department tag and normalize the gender marker."""
    title = _DEPARTMENT_SUFFIX_RE.sub("", text)
    return _GENDER_RE.sub("(H/F)", re.sub(r"\s+", " ", title)).strip(" -•·")
