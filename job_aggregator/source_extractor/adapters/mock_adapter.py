"""Mock Adapter for Testing.

This adapter simulates a career site for testing purposes.
It doesn't make real HTTP requests, but follows the same patterns.
"""

from typing import Any, Optional

from ..base import RawExtract, SourceAdapter, SourceFetchError


class MockAdapter(SourceAdapter):
    """Mock adapter that returns fake job postings for testing.

    This adapter is useful for:
    - Unit testing the Aggregator without hitting real sites
    - Demonstrating how to implement SourceAdapter
    - Simulating transport failures and slow sources

    Example:
        adapter = MockAdapter(num_jobs=50, jobs_per_page=10)
        raws, next_token = adapter.fetch()
        assert len(raws) == 10
        assert next_token is not None

        more_raws, next_token = adapter.fetch(next_token)
        assert len(more_raws) == 10
    """

    BASE_URL = "https://careers.example.com"

    def __init__(
        self,
        source_name: str = "mock",
        company_name: Optional[str] = None,
        num_jobs: int = 100,
        jobs_per_page: int = 20,
        fail_on_attempt: int = 0,
        response_delay: float = 0.0,
        degraded_jobs: tuple[dict[str, Any], ...] = (),
        max_pages: int = 20,
        page_delay: float = 0.0,
        **kwargs: Any,
    ):
        """Initialize the mock adapter.

        Args:
            source_name: Tag of the simulated source
            company_name: Employer of every posting. None cycles through fake companies.
            num_jobs: Total number of fake jobs to generate
            jobs_per_page: Number of jobs to return per page
            fail_on_attempt: If > 0, raise SourceFetchError on this fetch attempt
            response_delay: Seconds each fetch() blocks, to simulate a slow source
            degraded_jobs: Last-known-good data served when num_jobs is 0
        """
        super().__init__(
            source_name=source_name,
            company_name=company_name or "Mock",
            max_pages=max_pages,
            page_delay=page_delay,
            **kwargs,
        )
        self.fixed_company = company_name
        self.num_jobs = num_jobs
        self.jobs_per_page = jobs_per_page
        self.fail_on_attempt = fail_on_attempt
        self.response_delay = response_delay
        self.DEGRADED_JOBS = tuple(degraded_jobs)
        self.attempt_count = 0

    def fetch(self, page_token: Optional[str] = None) -> tuple[list[RawExtract], Optional[str]]:
        """Fetch fake job postings.

        Args:
            page_token: Page number as string (e.g., "1", "2") or None for first page

        Returns:
            Tuple of (list of RawExtract, next page token)
        """
        # Simulate failure for testing error isolation
        self.attempt_count += 1
        if self.fail_on_attempt > 0 and self.attempt_count == self.fail_on_attempt:
            raise SourceFetchError(self.source_name, "Simulated source failure for testing", self.BASE_URL)

        if self.response_delay:
            self._sleep(self.response_delay)

        # Determine current page
        current_page = 0 if page_token is None else int(page_token)

        # Calculate which jobs to return
        start_idx = current_page * self.jobs_per_page
        end_idx = min(start_idx + self.jobs_per_page, self.num_jobs)

        raws = []
        for i in range(start_idx, end_idx):
            job_data = self._generate_fake_job(i)
            raws.append(
                RawExtract(
                    source=self.source_name,
                    title=job_data["title"],
                    location=job_data["location"],
                    url=job_data["job_url"],
                    date_text=job_data["posted_date"],
                    payload=job_data,
                )
            )

        # Determine next page token
        has_more = end_idx < self.num_jobs
        next_token = str(current_page + 1) if has_more else None

        return raws, next_token

    def map_to_common(self, raw: RawExtract) -> dict[str, Any]:
        """Map mock job data to the common format."""
        payload = raw.payload

        return {
            "company_name": payload["company"],
            "job_title": raw.title,
            "location": raw.location,
            "url": raw.url,
            "publish_date": raw.date_text,
            "description": payload.get("description"),
            "contract_type": payload.get("contract_type"),
        }

    def _generate_fake_job(self, index: int) -> dict[str, Any]:
        """Generate a fake job posting.

        Args:
            index: Job index for unique data

        Returns:
            Dictionary with fake job data
        """
        job_titles = [
            "Ingénieur Réseau (H/F)",
            "Développeur Python (H/F)",
            "Chef de projet MOA (H/F)",
            "Analyste crédit (H/F)",
            "Technicien support (H/F)",
            "Data Engineer (H/F)",
        ]

        companies = [
            "Acme France",
            "Globex SA",
            "Initech SAS",
            "Umbrella Group",
            "Wayne Industries",
        ]

        locations = [
            "Paris",
            "Lyon",
            "Toulouse (31)",
            "Nantes",
            "Lille",
        ]

        contract_types = ["CDI", "CDD", "Stage"]

        # Use modulo to cycle through options, index keeps every posting unique
        title = f"{job_titles[index % len(job_titles)]} #{index}"
        company = self.fixed_company or companies[index % len(companies)]
        location = locations[index % len(locations)]
        contract_type = contract_types[index % len(contract_types)]

        return {
            "title": title,
            "company": company,
            "location": location,
            "contract_type": contract_type,
            "description": f"Nous recherchons un(e) {title} pour rejoindre {company} à {location}.",
            "posted_date": f"2025-07-{(index % 28) + 1:02d}",
            "job_url": f"{self.BASE_URL}/jobs/{index}",
        }
