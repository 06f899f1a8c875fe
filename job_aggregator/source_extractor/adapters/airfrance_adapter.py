"""Air France Adapter.

Scrapes the offers list of recrutement.airfrance.com. The markup has moved
between tables, lists and plain links over time, so the adapter tries a few
container selectors and keeps whichever matches the most elements.
"""

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

from ..base import RawExtract, SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Ile-de-France"
DEFAULT_CONTRACT = "CDI"
HOME_URL = "https://recrutement.airfrance.com/"

CONTAINER_SELECTORS = (
    "table tr",
    'tr[id*="offre"], tr[class*="offre"], tr[id*="job"], tr[class*="job"]',
    ".job-item, .offer-item, .offre-item, .list-item",
    "[data-job], [data-offer], [data-offre]",
    'a[href*="offre"], a[href*="emploi"]',
)
TITLE_SELECTORS = ("td", ".title", '[class*="title"]', "h2, h3, h4", "strong, b")

_LOCATION_RE = re.compile(
    r"(Ile-de-France|Île-de-France|Paris|Lyon|Toulouse|Marseille|Bordeaux|Nantes|Nice|Lille|"
    r"Strasbourg|Montpellier|Rennes|Grenoble|Occitanie)",
    re.IGNORECASE,
)
_CONTRACT_RE = re.compile(r"\b(CDI|CDD|Stage|Alternance|Apprentissage)\b", re.IGNORECASE)
_GENDER_RE = re.compile(r"\(?\b(?:H/F|F/H)\b\)?", re.IGNORECASE)


def _known_offer(title: str, publish_date: str, location: str = DEFAULT_LOCATION) -> dict[str, Any]:
    return {
        "job_title": title,
        "location": location,
        "url": HOME_URL,
        "publish_date": publish_date,
        "contract_type": DEFAULT_CONTRACT,
    }


class AirFranceAdapter(SourceAdapter):
    """Adapter for Air France recruitment offers."""

    BASE_URL = "https://recrutement.airfrance.com"
    MIN_TITLE_LENGTH = 5

    DEGRADED_JOBS = (
        _known_offer("Technicienne / Technicien Planning Maintenance Avion (H/F)", "2025-01-15"),
        _known_offer("Responsable Ressources Humaines (H/F)", "2025-01-20"),
        _known_offer("Technicien avion (H/F)", "2025-01-27"),
        _known_offer("Agent d'Escale Commercial expérimenté Air France - CDI (H/F)", "2025-01-10"),
        _known_offer("Chargé de Projets/Produits Informatique - Toulouse (H/F)", "2025-01-12", "Occitanie"),
    )

    def __init__(self, timeout: float = 20, **kwargs: Any):
        kwargs.setdefault("max_pages", 1)
        super().__init__(source_name="airfrance", company_name="Air France", timeout=timeout, **kwargs)

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/offre-de-emploi/liste-offres.aspx"

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        soup = BeautifulSoup(self._get_html(self.endpoint), "html.parser")

        elements: list[Tag] = []
        for selector in CONTAINER_SELECTORS:
            candidates = soup.select(selector)
            if len(candidates) > len(elements):
                elements = candidates

        raws = []
        for element in elements:
            raw = self._to_raw(element)
            if raw is not None:
                raws.append(raw)

        return raws, None

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "description": None,
            "contract_type": raw.payload.get("contract_type", DEFAULT_CONTRACT),
        }

    def _to_raw(self, element: Tag) -> Optional[RawExtract]:
        link = element if element.name == "a" else element.find("a")
        title = link.get_text(" ", strip=True) if link is not None else ""

        if not title:
            for selector in TITLE_SELECTORS:
                candidate = element.select_one(selector)
                if candidate is not None and len(candidate.get_text(strip=True)) >= self.MIN_TITLE_LENGTH:
                    title = candidate.get_text(" ", strip=True)
                    break

        if not title:
            return None

        full_text = element.get_text(" ", strip=True)
        location_match = _LOCATION_RE.search(full_text)
        contract_match = _CONTRACT_RE.search(full_text)

        return RawExtract(
            source=self.source_name,
            title=clean_title(title),
            location=location_match.group(1) if location_match else DEFAULT_LOCATION,
            url=self._absolute_url(link.get("href") if link is not None else None),
            payload={"contract_type": contract_match.group(1) if contract_match else DEFAULT_CONTRACT},
        )


def clean_title(title: str) -> str:
    """Normalize the gender marker to "(H/F)" and drop trailing dashes."""
    cleaned = _GENDER_RE.sub("(H/F)", re.sub(r"\s+", " ", title))
    return re.sub(r"\s*-\s*$", "", cleaned).strip()
