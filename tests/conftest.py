"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

import os
from typing import Optional

import pytest

from job_aggregator.models import NormalizedJob
from job_aggregator.normalizer import normalize_job_posting


class FakeClock:
    """Settable clock returning epoch seconds, for cache TTL tests."""

    def __init__(self, now: float = 1_750_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_job(
    title: str = "Ingénieur Réseau",
    company: str = "Acme France",
    location: str = "Paris",
    source: str = "acme",
    publish_date: Optional[str] = "2025-01-10",
    **extra,
) -> NormalizedJob:
    """Build a NormalizedJob through the real normalization path."""
    return normalize_job_posting(
        {
            "company_name": company,
            "job_title": title,
            "location": location,
            "url": extra.pop("url", f"https://careers.example.com/{source}"),
            "publish_date": publish_date,
            **extra,
        },
        source,
    )


@pytest.fixture(scope="session")
def test_database_url() -> Optional[str]:
    """
    Provide the PostgreSQL URL for integration tests.

    Integration tests are skipped unless TEST_DATABASE_URL is set: they
    truncate tables, so they never fall back to DATABASE_URL.

    Scope: session (created once per test run)
    """
    return os.getenv("TEST_DATABASE_URL")


@pytest.fixture(scope="function")
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def sample_common_posting() -> dict:
    """
    Provide a common-format posting, as returned by SourceAdapter.map_to_common().

    Scope: function (created fresh for each test)
    """
    return {
        "company_name": "Infomil",
        "job_title": " Consultant   fonctionnel H/F ",
        "location": "Toulouse (31)",
        "url": "https://infomil.gestmax.fr/search",
        "publish_date": "24/07/2025",
        "description": "<p>Rejoignez l&#39;équipe <b>produit</b></p>",
        "contract_type": "CDI",
    }


@pytest.fixture(scope="function")
def sample_job_batch() -> list[NormalizedJob]:
    """
    Provide a batch of normalized jobs from two sources.

    Useful for testing deduplication, filtering and reconciliation.
    """
    return [
        make_job("Technicien avion (H/F)", "Air France", "Ile-de-France", "airfrance", "2025-01-27"),
        make_job("Responsable Ressources Humaines (H/F)", "Air France", "Ile-de-France", "airfrance", "2025-01-20"),
        make_job("Chargé de Projets Informatique (H/F)", "Air France", "Occitanie", "airfrance", None),
        make_job("Consultant fonctionnel H/F", "Infomil", "Toulouse (31)", "infomil", "2025-07-24",
                 description="Conseil auprès des enseignes de grande distribution"),
        make_job("Ingénieur réseaux H/F", "Infomil", "Toulouse (31)", "infomil", "2025-07-18"),
    ]


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    - pytest -m "not slow"  (skip slow tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (>1 second)"
    )
