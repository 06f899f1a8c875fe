"""Contract tests for SourceAdapter implementations.

These tests ensure that the SourceAdapter base class enforces the extraction
contract (pagination, normalization, noise filtering, degraded data) and that
its HTTP helpers turn every transport failure into a SourceFetchError.
"""

import time
from unittest.mock import Mock, patch

import pytest
import requests

from job_aggregator.models import NormalizedJob
from job_aggregator.source_extractor import RawExtract, SourceAdapter, SourceFetchError
from job_aggregator.source_extractor.adapters.mock_adapter import MockAdapter


class StubAdapter(SourceAdapter):
    """Adapter serving canned pages, keyed by page token."""

    BASE_URL = "https://careers.stub.example"

    def __init__(self, pages, **kwargs):
        kwargs.setdefault("page_delay", 0)
        super().__init__(source_name="stub", company_name="Stub Corp", **kwargs)
        self.pages = pages
        self.requested_tokens = []

    def fetch(self, page_token=None):
        self.requested_tokens.append(page_token)
        return self.pages[page_token]

    def map_to_common(self, raw):
        return {
            "company_name": self.company_name,
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "contract_type": raw.payload["contract"],
        }


def raw(title, location="Paris", date_text="2025-07-01", contract="CDI"):
    return RawExtract(
        source="stub",
        title=title,
        location=location,
        url="https://careers.stub.example/job",
        date_text=date_text,
        payload={"contract": contract},
    )


DEGRADED = (
    {
        "job_title": "Ingénieur Réseau (H/F)",
        "location": "Lyon",
        "url": "https://careers.stub.example/",
        "publish_date": "2025-06-01",
    },
)


class TestSourceAdapterContract:
    """Contract tests that all SourceAdapter implementations must pass."""

    @pytest.fixture
    def adapter(self) -> SourceAdapter:
        return MockAdapter(num_jobs=50, jobs_per_page=10)

    def test_adapter_has_source_name(self, adapter: SourceAdapter):
        assert isinstance(adapter.source_name, str)
        assert len(adapter.source_name) > 0

    def test_fetch_returns_correct_type(self, adapter: SourceAdapter):
        """fetch() must return tuple of (list[RawExtract], str | None)."""
        jobs, next_token = adapter.fetch()

        assert isinstance(jobs, list)
        for job in jobs:
            assert isinstance(job, RawExtract)
            assert job.source == adapter.source_name
        assert next_token is None or isinstance(next_token, str)

    def test_fetch_with_none_starts_at_beginning(self, adapter: SourceAdapter):
        jobs1, _ = adapter.fetch(None)
        jobs2, _ = adapter.fetch(None)

        assert [j.title for j in jobs1] == [j.title for j in jobs2]

    def test_fetch_pagination_works(self):
        adapter = MockAdapter(num_jobs=30, jobs_per_page=10)

        page1_jobs, token1 = adapter.fetch()
        page2_jobs, token2 = adapter.fetch(token1)
        page3_jobs, token3 = adapter.fetch(token2)

        assert len(page1_jobs) == len(page2_jobs) == len(page3_jobs) == 10
        assert token1 is not None and token2 is not None
        assert token3 is None
        assert page1_jobs[0].title != page2_jobs[0].title

    def test_fetch_jobs_returns_normalized_jobs(self, adapter: SourceAdapter):
        jobs = adapter.fetch_jobs()

        assert len(jobs) == 50
        for job in jobs:
            assert isinstance(job, NormalizedJob)
            assert job.source == "mock"
            assert job.degraded is False
        assert len({job.id for job in jobs}) == 50

    def test_max_pages_must_be_positive(self):
        with pytest.raises(ValueError, match="max_pages"):
            MockAdapter(max_pages=0)

    def test_repr(self, adapter: SourceAdapter):
        assert repr(adapter) == "MockAdapter(source='mock')"


class TestPagination:
    """Tests for fetch_raw_pages()"""

    def test_follows_tokens_in_order(self):
        adapter = StubAdapter({
            None: ([raw("Analyste crédit")], "2"),
            "2": ([raw("Chef de projet")], "3"),
            "3": ([raw("Data Engineer")], None),
        })

        raws = adapter.fetch_raw_pages()

        assert [r.title for r in raws] == ["Analyste crédit", "Chef de projet", "Data Engineer"]
        assert adapter.requested_tokens == [None, "2", "3"]

    def test_page_ceiling_keeps_collected_records(self):
        """Hitting max_pages is not an error"""
        adapter = MockAdapter(num_jobs=100, jobs_per_page=10, max_pages=3)

        raws = adapter.fetch_raw_pages()

        assert len(raws) == 30
        assert adapter.attempt_count == 3

    def test_sleeps_between_pages_only(self):
        adapter = MockAdapter(num_jobs=30, jobs_per_page=10, page_delay=0.25)

        with patch.object(adapter, "_sleep") as mock_sleep:
            adapter.fetch_raw_pages()

        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.25)

    def test_stop_request_ends_walk_before_next_page(self):
        adapter = StubAdapter({
            None: ([raw("Analyste crédit")], "2"),
            "2": ([raw("Chef de projet")], "3"),
            "3": ([raw("Data Engineer")], None),
        })
        fetch_page = adapter.fetch

        def fetch_then_stop(page_token=None):
            adapter.request_stop()
            return fetch_page(page_token)

        adapter.fetch = fetch_then_stop

        raws = adapter.fetch_raw_pages()

        assert [r.title for r in raws] == ["Analyste crédit"]
        assert adapter.requested_tokens == [None]

    def test_sleep_wakes_up_on_stop(self):
        adapter = MockAdapter()
        adapter.request_stop()

        started = time.monotonic()
        adapter._sleep(5.0)

        assert time.monotonic() - started < 1.0

    def test_fetch_error_propagates(self):
        adapter = MockAdapter(num_jobs=30, jobs_per_page=10, fail_on_attempt=2)

        with pytest.raises(SourceFetchError, match="Simulated"):
            adapter.fetch_raw_pages()


class TestFetchJobs:
    """Tests for normalization, filtering and degraded data in fetch_jobs()"""

    def test_incomplete_records_are_rejected(self):
        adapter = StubAdapter({
            None: ([
                raw("Analyste crédit (H/F)"),
                raw("Data Engineer (H/F)", location="   "),
                raw("<span></span>"),
            ], None),
        })

        jobs = adapter.fetch_jobs()

        assert [job.job_title for job in jobs] == ["Analyste crédit (H/F)"]

    def test_mapping_errors_are_rejected(self):
        adapter = StubAdapter({
            None: ([
                raw("Analyste crédit (H/F)"),
                RawExtract(source="stub", title="Chef de projet (H/F)", location="Paris"),
            ], None),
        })

        jobs = adapter.fetch_jobs()

        assert len(jobs) == 1

    def test_noise_is_filtered(self):
        adapter = StubAdapter({
            None: ([
                raw("Politique de cookies"),
                raw("Accueil"),
                raw("CDI"),
                raw("Technicien support (H/F)"),
            ], None),
        })

        jobs = adapter.fetch_jobs()

        assert [job.job_title for job in jobs] == ["Technicien support (H/F)"]

    def test_duplicates_within_source_are_dropped(self):
        adapter = StubAdapter({
            None: ([raw("Data Engineer (H/F)")], "2"),
            "2": ([raw("Data  Engineer (H/F)"), raw("Data Engineer (H/F)", date_text="2025-08-01")], None),
        })

        jobs = adapter.fetch_jobs()

        assert len(jobs) == 2
        assert jobs[0].publish_date == "2025-07-01"
        assert jobs[1].publish_date == "2025-08-01"

    def test_degraded_data_served_when_extraction_is_empty(self):
        adapter = MockAdapter(num_jobs=0, company_name="Acme France", degraded_jobs=DEGRADED)

        jobs = adapter.fetch_jobs()

        assert len(jobs) == 1
        assert jobs[0].degraded is True
        assert jobs[0].company_name == "Acme France"
        assert jobs[0].publish_date == "2025-06-01"

    def test_degraded_data_served_when_everything_is_noise(self):
        adapter = StubAdapter({None: ([raw("Mentions légales")], None)})
        adapter.DEGRADED_JOBS = DEGRADED

        jobs = adapter.fetch_jobs()

        assert [job.degraded for job in jobs] == [True]

    def test_degraded_data_not_served_when_live_jobs_found(self):
        adapter = MockAdapter(num_jobs=5, jobs_per_page=5, degraded_jobs=DEGRADED)

        jobs = adapter.fetch_jobs()

        assert len(jobs) == 5
        assert not any(job.degraded for job in jobs)

    def test_degraded_data_can_be_disabled(self):
        adapter = MockAdapter(num_jobs=0, degraded_jobs=DEGRADED, use_degraded_data=False)

        assert adapter.fetch_jobs() == []

    def test_empty_source_without_degraded_data(self):
        assert MockAdapter(num_jobs=0).fetch_jobs() == []

    def test_transport_failure_not_masked_by_degraded_data(self):
        """A source that cannot be reached fails, it does not look empty"""
        adapter = MockAdapter(num_jobs=10, fail_on_attempt=1, degraded_jobs=DEGRADED)

        with pytest.raises(SourceFetchError):
            adapter.fetch_jobs()


class TestNoiseFilter:
    """Tests for is_noise() and validate_common_format()"""

    @pytest.fixture
    def adapter(self):
        return MockAdapter()

    @pytest.mark.parametrize("title", [
        "",
        "CDI",
        "x" * 151,
        "Gestion des cookies",
        "Politique de confidentialité",
        "Se connecter / Connexion",
        "Candidature spontanée",
        "Veuillez activer JavaScript",
    ])
    def test_noise_titles(self, adapter, title):
        assert adapter.is_noise({"job_title": title}) is True

    @pytest.mark.parametrize("title", [
        "Ingénieur Réseau (H/F)",
        "Chef de projet MOA",
        "Data Engineer",
    ])
    def test_real_titles(self, adapter, title):
        assert adapter.is_noise({"job_title": title}) is False

    def test_validate_common_format(self, adapter):
        assert adapter.validate_common_format(
            {"company_name": "Acme", "job_title": "Data Engineer", "location": "Paris"}
        )
        assert not adapter.validate_common_format({"company_name": "Acme", "job_title": "Data Engineer"})


class TestHttpHelpers:
    """Tests for _http_get(), _get_json() and _get_html()"""

    @pytest.fixture
    def adapter(self):
        return StubAdapter({}, max_retries=2, retry_delay=0.01)

    @pytest.fixture(autouse=True)
    def no_sleep(self):
        with patch("job_aggregator.source_extractor.retry.time.sleep") as mock_sleep:
            yield mock_sleep

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_get_json_success(self, mock_get, adapter):
        mock_response = Mock(status_code=200)
        mock_response.json.return_value = {"results": []}
        mock_get.return_value = mock_response

        data = adapter._get_json("https://careers.stub.example/api", params={"page": 1})

        assert data == {"results": []}
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"page": 1}
        assert kwargs["timeout"] == adapter.timeout
        assert kwargs["headers"]["Accept"] == "application/json"
        assert "User-Agent" in kwargs["headers"]
        assert adapter.request_count == 1

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_get_html_success(self, mock_get, adapter):
        mock_get.return_value = Mock(status_code=200, text="<html><body>ok</body></html>")

        assert adapter._get_html("https://careers.stub.example/jobs") == "<html><body>ok</body></html>"

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_server_error_is_retried_then_succeeds(self, mock_get, adapter):
        mock_get.side_effect = [Mock(status_code=503), Mock(status_code=200, text="ok")]

        assert adapter._get_html("https://careers.stub.example/jobs") == "ok"
        assert mock_get.call_count == 2

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_rate_limit_exhausts_retries(self, mock_get, adapter):
        mock_get.return_value = Mock(status_code=429)

        with pytest.raises(SourceFetchError) as exc_info:
            adapter._get_html("https://careers.stub.example/jobs")

        assert mock_get.call_count == 3
        assert exc_info.value.status_code == 429
        assert exc_info.value.source == "stub"
        assert exc_info.value.endpoint == "https://careers.stub.example/jobs"

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_client_error_is_not_retried(self, mock_get, adapter):
        mock_get.return_value = Mock(status_code=404)

        with pytest.raises(SourceFetchError) as exc_info:
            adapter._get_html("https://careers.stub.example/missing")

        assert mock_get.call_count == 1
        assert exc_info.value.status_code == 404

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_connection_error_wrapped(self, mock_get, adapter):
        mock_get.side_effect = requests.exceptions.ConnectionError("Name or service not known")

        with pytest.raises(SourceFetchError, match="ConnectionError") as exc_info:
            adapter._get_html("https://careers.stub.example/jobs")

        assert mock_get.call_count == 3
        assert exc_info.value.status_code is None

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_timeout_wrapped(self, mock_get, adapter):
        mock_get.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(SourceFetchError, match="Timeout"):
            adapter._get_json("https://careers.stub.example/api")

    @patch("job_aggregator.source_extractor.base.requests.get")
    def test_invalid_json_raises_fetch_error(self, mock_get, adapter):
        mock_response = Mock(status_code=200)
        mock_response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = mock_response

        with pytest.raises(SourceFetchError, match="Invalid JSON"):
            adapter._get_json("https://careers.stub.example/api")

    def test_absolute_url(self, adapter):
        assert adapter._absolute_url("/jobs/1") == "https://careers.stub.example/jobs/1"
        assert adapter._absolute_url("jobs/1") == "https://careers.stub.example/jobs/1"
        assert adapter._absolute_url("https://other.example/x") == "https://other.example/x"
        assert adapter._absolute_url(None) == "https://careers.stub.example/"


# ============================================================================
# Mark all tests as unit tests
# ============================================================================

pytestmark = pytest.mark.unit
