"""
Unit tests for the Lyra Network adapter (WordPress REST API).

These tests use mocked API responses to verify adapter behavior
without making real API calls.
"""

from unittest.mock import Mock, patch

import pytest

from job_aggregator.source_extractor.adapters.lyra_adapter import (
    LyraAdapter,
    extract_location,
    find_city,
)
from job_aggregator.source_extractor.base import SourceFetchError


def offer(index, title=None, departments=(), link=True):
    return {
        "id": 1000 + index,
        "title": {"rendered": title or f"Développeur Java #{index} (H/F)"},
        "excerpt": {"rendered": "<p>Rejoignez nos équipes R&amp;D.</p>"},
        "link": f"https://www.lyra.com/fr/offer/developpeur-java-{index}/" if link else "",
        "formatted_date_gmt": "2025-06-0%d" % (index % 9 + 1),
        "type": "offer_type",
        "lyra_departments": [{"name": name} for name in departments],
    }


def json_response(payload, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    return response


FULL_PAGE = [offer(i) for i in range(LyraAdapter.PER_PAGE)]


class TestLyraAdapterFetch:
    """Test page fetching with mocked API responses."""

    @pytest.fixture(autouse=True)
    def no_sleep(self):
        with patch("job_aggregator.source_extractor.retry.time.sleep"):
            yield

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_full_page_has_next(self, mock_get):
        mock_get.return_value = json_response(FULL_PAGE)

        raws, next_token = LyraAdapter().fetch()

        assert len(raws) == 12
        assert next_token == "2"
        _, kwargs = mock_get.call_args
        assert kwargs["params"]["page"] == 1
        assert kwargs["params"]["per_page"] == 12

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_short_page_is_last(self, mock_get):
        mock_get.return_value = json_response([offer(1), offer(2)])

        raws, next_token = LyraAdapter().fetch("3")

        assert len(raws) == 2
        assert next_token is None
        _, kwargs = mock_get.call_args
        assert kwargs["params"]["page"] == 3

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_offers_without_link_are_skipped(self, mock_get):
        mock_get.return_value = json_response([offer(1), offer(2, link=False)])

        raws, _ = LyraAdapter().fetch()

        assert len(raws) == 1

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_bad_request_past_last_page_ends_pagination(self, mock_get):
        mock_get.return_value = json_response({"code": "rest_post_invalid_page_number"}, status_code=400)

        raws, next_token = LyraAdapter().fetch("2")

        assert raws == []
        assert next_token is None

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_bad_request_on_first_page_is_a_failure(self, mock_get):
        mock_get.return_value = json_response({}, status_code=400)

        with pytest.raises(SourceFetchError) as exc_info:
            LyraAdapter().fetch()

        assert exc_info.value.status_code == 400

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_unexpected_format_raises(self, mock_get):
        mock_get.return_value = json_response({"offers": []})

        with pytest.raises(SourceFetchError, match="Unexpected response format"):
            LyraAdapter().fetch()

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_fetch_jobs_stops_on_bad_request(self, mock_get):
        mock_get.side_effect = [
            json_response(FULL_PAGE),
            json_response({"code": "rest_post_invalid_page_number"}, status_code=400),
        ]
        adapter = LyraAdapter(page_delay=0)

        jobs = adapter.fetch_jobs()

        assert len(jobs) == 12
        assert all(job.company_name == "Lyra Network" for job in jobs)
        assert jobs[0].description == "Rejoignez nos équipes R&D."
        assert jobs[0].publish_date == "2025-06-01"
        assert mock_get.call_count == 2


class TestLyraLocation:
    """Test best-effort location extraction."""

    def test_department_wins(self):
        data = offer(1, title="Ingénieur support Paris", departments=["R&D Lyon"])
        assert extract_location(data, data["title"]["rendered"]) == "Lyon"

    def test_title_city(self):
        data = offer(1, title="Commercial grands comptes - Bordeaux")
        assert extract_location(data, data["title"]["rendered"]) == "Bordeaux"

    def test_link_city(self):
        data = offer(1, title="Chef de produit")
        data["link"] = "https://www.lyra.com/fr/offer/chef-de-produit-grenoble/"
        assert extract_location(data, "Chef de produit") == "Grenoble"

    def test_defaults_to_headquarters(self):
        data = offer(1, title="Chef de produit")
        assert extract_location(data, "Chef de produit") == "Toulouse"

    def test_find_city(self):
        assert find_city("Poste basé à MARSEILLE") == "Marseille"
        assert find_city("Télétravail") is None


# ============================================================================
# Mark all tests as unit tests
# ============================================================================

pytestmark = pytest.mark.unit
