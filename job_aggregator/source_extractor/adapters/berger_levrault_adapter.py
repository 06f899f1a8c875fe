"""Berger-Levrault Adapter.

Scrapes the "all jobs" list of the Berger-Levrault careers site (Talentsoft).
The list is server-rendered HTML, paginated with a `page` query parameter.
"""

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from ..base import RawExtract, SourceAdapter

logger = logging.getLogger(__name__)

_REFERENCE_RE = re.compile(r"_(\d+)\.aspx")


class BergerLevraultAdapter(SourceAdapter):
    """Adapter for recrute.berger-levrault.com.

    Offers carry no publish date and no location in the list view; every
    posting is located in "France" and treated as a CDI.
    """

    BASE_URL = "https://recrute.berger-levrault.com"
    LIST_URL = "https://recrute.berger-levrault.com/job/list-of-all-jobs.aspx"
    DEFAULT_LOCATION = "France"
    LCID_ENGLISH = 2057

    def __init__(self, max_pages: int = 20, page_delay: float = 1.5, **kwargs: Any):
        super().__init__(
            source_name="berger_levrault",
            company_name="Berger-Levrault",
            max_pages=max_pages,
            page_delay=page_delay,
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        return self.LIST_URL

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        page = int(page_token) if page_token else 1
        params = {"all": 1, "mode": "list", "page": page, "LCID": self.LCID_ENGLISH}

        soup = BeautifulSoup(self._get_html(self.LIST_URL, params=params), "html.parser")

        raws = []
        for item in soup.select("li.ts-offer-list-item.offerlist-item"):
            link = item.select_one("a[title]")
            if link is None:
                continue
            title = link.get("title") or link.get_text(" ", strip=True)
            if not title:
                continue

            href = link.get("href")
            reference_match = _REFERENCE_RE.search(href or "")
            raws.append(
                RawExtract(
                    source=self.source_name,
                    title=title,
                    location=self.DEFAULT_LOCATION,
                    url=self._absolute_url(href),
                    payload={"reference": reference_match.group(1) if reference_match else None},
                )
            )

        if not raws or not has_next_page(soup, page):
            return raws, None
        return raws, str(page + 1)

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": None,
            "description": None,
            "contract_type": "CDI",
        }


def has_next_page(soup: BeautifulSoup, page: int) -> bool:
    """Next page exists when the pagination shows a "next" link or a link to page+1."""
    if soup.select_one('.pagination a[rel="next"]') is not None:
        return True

    next_label = str(page + 1)
    return any(link.get_text(strip=True) == next_label for link in soup.select(".pagination a"))
