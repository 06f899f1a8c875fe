"""Lyra Network Adapter.

Reads job offers from the WordPress REST API behind lyra.com. Offers are a
custom post type (`offer_type`); locations are only hinted at through the
department taxonomy, the title or the link.
"""

import logging
from typing import Any, Optional

from ..base import RawExtract, SourceAdapter, SourceFetchError

logger = logging.getLogger(__name__)

CITIES = (
    "Paris",
    "Lyon",
    "Marseille",
    "Toulouse",
    "Lille",
    "Bordeaux",
    "Nice",
    "Nantes",
    "Strasbourg",
    "Montpellier",
    "Grenoble",
    "Rennes",
    "Nancy",
    "Metz",
    "Clermont-Ferrand",
)
DEPARTMENT_LOCATIONS = ("Lyon", "Paris", "Toulouse", "Grenoble", "France")
HEADQUARTERS = "Toulouse"


class LyraAdapter(SourceAdapter):
    """Adapter for Lyra Network job offers.

    The page token is the WordPress page number. WordPress answers HTTP 400
    when asked for a page past the last one, which ends pagination.
    """

    BASE_URL = "https://www.lyra.com"
    API_URL = "https://www.lyra.com/fr/wp-json/wp/v2/offer_type"
    PER_PAGE = 12

    def __init__(self, max_pages: int = 20, page_delay: float = 0.5, **kwargs: Any):
        super().__init__(
            source_name="lyra",
            company_name="Lyra Network",
            max_pages=max_pages,
            page_delay=page_delay,
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        return self.API_URL

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        page = int(page_token) if page_token else 1
        params = {
            "filters": "{}",
            "page": page,
            "per_page": self.PER_PAGE,
            "search": "",
            "_fields": "id,title,excerpt,link,formatted_date_gmt,type,lyra_departments",
        }

        try:
            data = self._get_json(self.API_URL, params=params)
        except SourceFetchError as e:
            if e.status_code == 400 and page > 1:
                logger.debug("Page past the last one, stopping pagination", extra={"page": page})
                return [], None
            raise

        if not isinstance(data, list):
            raise SourceFetchError(self.source_name, "Unexpected response format from Lyra API", self.API_URL)

        raws = [self._to_raw(offer) for offer in data if isinstance(offer, dict) and offer.get("link")]
        has_more = len(data) == self.PER_PAGE
        return raws, str(page + 1) if has_more else None

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        excerpt = raw.payload.get("excerpt") or {}
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "description": excerpt.get("rendered"),
            "contract_type": None,
        }

    def _to_raw(self, offer: dict[str, Any]) -> RawExtract:
        title = (offer.get("title") or {}).get("rendered") or ""
        return RawExtract(
            source=self.source_name,
            title=title,
            location=extract_location(offer, title),
            url=offer["link"],
            date_text=offer.get("formatted_date_gmt"),
            payload=offer,
        )


def extract_location(offer: dict[str, Any], title: str) -> str:
    """Best-effort location: departments, then title, then link, then headquarters."""
    departments = " ".join(dept.get("name", "") for dept in offer.get("lyra_departments") or [])
    for keyword in DEPARTMENT_LOCATIONS:
        if keyword.lower() in departments.lower():
            return keyword

    for text in (title, offer.get("link") or ""):
        city = find_city(text)
        if city:
            return city

    return HEADQUARTERS


def find_city(text: str) -> Optional[str]:
    lowered = text.lower()
    for city in CITIES:
        if city.lower() in lowered:
            return city
    return None
