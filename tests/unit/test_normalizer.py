"""
Unit Tests for Normalizer Service

These tests validate the normalizer's core logic in isolation: text cleanup,
publish date canonicalization, job id generation and posting normalization.

Test Organization:
- TestTextCleanup: whitespace, HTML and punctuation handling
- TestPublishDates: supported date shapes and unparseable values
- TestComputeId: identity rules used for deduplication
- TestNormalizeJobPosting: required fields, defaults and truncation
"""

from datetime import date, datetime

import pytest

from job_aggregator.normalizer.dates import parse_publish_date
from job_aggregator.normalizer.hash_generator import (
    HASH_LENGTH,
    clean_text,
    compute_id,
    normalize_for_comparison,
    normalize_whitespace,
    slugify,
    validate_job_id,
)
from job_aggregator.normalizer.normalize import (
    MAX_DESCRIPTION_LENGTH,
    NormalizationError,
    normalize_job_posting,
)


# ============================================================================
# Text Cleanup Tests
# ============================================================================

class TestTextCleanup:
    """Tests for the text helpers shared by normalization and identity"""

    def test_normalize_whitespace_basic(self):
        assert normalize_whitespace("Data   Engineer") == "Data Engineer"
        assert normalize_whitespace("  Data Engineer  ") == "Data Engineer"
        assert normalize_whitespace("Data\tEngineer\n") == "Data Engineer"

    def test_normalize_whitespace_empty(self):
        assert normalize_whitespace("") == ""
        assert normalize_whitespace(None) == ""
        assert normalize_whitespace("   ") == ""

    def test_clean_text_decodes_entities_and_drops_tags(self):
        assert clean_text("  • Ing&eacute;nieur <b>R&eacute;seau</b> (H/F) ") == "Ingénieur Réseau (H/F)"

    def test_clean_text_non_breaking_space(self):
        assert clean_text("Air\xa0France") == "Air France"

    def test_clean_text_keeps_case_and_punctuation(self):
        assert clean_text("Chef de projet (H/F) - CDI") == "Chef de projet (H/F) - CDI"

    def test_normalize_for_comparison(self):
        assert normalize_for_comparison("Ingénieur Réseau (H/F)") == "ingénieur réseau hf"
        assert normalize_for_comparison("ingénieur  réseau H/F") == "ingénieur réseau hf"

    @pytest.mark.parametrize("text,expected", [
        ("Berger-Levrault", "berger-levrault"),
        ("Société Générale", "societe-generale"),
        ("Air France", "air-france"),
        ("  ", ""),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected


# ============================================================================
# Publish Date Tests
# ============================================================================

class TestPublishDates:
    """Tests for publish date canonicalization"""

    @pytest.mark.parametrize("value,expected", [
        ("2025-01-10", "2025-01-10"),
        ("2025-1-9", "2025-01-09"),
        ("2025-01-10T08:00:00Z", "2025-01-10"),
        ("2025-01-10T08:00:00+02:00", "2025-01-10"),
        ("2025-01-10 08:00:00", "2025-01-10"),
        ("10/01/2025", "2025-01-10"),
        ("10-01-2025", "2025-01-10"),
        ("10.01.2025", "2025-01-10"),
        ("24/07/2025", "2025-07-24"),
        ("12/31/2025", "2025-12-31"),
        ("07/08/2025 6:10:05 AM", "2025-07-08"),
        ("10 janvier 2025", "2025-01-10"),
        ("1er mars 2025", "2025-03-01"),
        ("15 août 2025", "2025-08-15"),
        ("January 10, 2025", "2025-01-10"),
        ("Sept 3rd, 2025", "2025-09-03"),
    ])
    def test_supported_formats(self, value, expected):
        assert parse_publish_date(value) == expected

    def test_date_objects(self):
        assert parse_publish_date(date(2025, 1, 10)) == "2025-01-10"
        assert parse_publish_date(datetime(2025, 1, 10, 23, 59)) == "2025-01-10"

    @pytest.mark.parametrize("value", [
        None,
        "",
        "   ",
        "not a date",
        "31/31/2025",
        "2025-02-30",
        "32 janvier 2025",
        "10 brumaire 2025",
        12345,
    ])
    def test_unparseable_values_become_none(self, value):
        """Unparseable dates never raise"""
        assert parse_publish_date(value) is None


# ============================================================================
# Job Id Tests
# ============================================================================

class TestComputeId:
    """Tests for the stable job identifier"""

    def test_id_shape(self):
        job_id = compute_id("Air France", "Technicien avion (H/F)", "Ile-de-France", "2025-01-27")

        assert job_id.startswith("air-france-")
        assert len(job_id.rsplit("-", 1)[1]) == HASH_LENGTH
        assert validate_job_id(job_id)

    def test_deterministic(self):
        """Same inputs should always produce same id"""
        id1 = compute_id("Infomil", "Consultant fonctionnel H/F", "Toulouse (31)", "2025-07-24")
        id2 = compute_id("Infomil", "Consultant fonctionnel H/F", "Toulouse (31)", "2025-07-24")
        assert id1 == id2

    def test_formatting_differences_ignored(self):
        """Case, whitespace, punctuation and date format do not change identity"""
        id1 = compute_id("AIR  FRANCE", "Technicien avion (H/F)", "Ile-de-France", "27/01/2025")
        id2 = compute_id("air france", "technicien avion h/f", "ile-de-france", "2025-01-27")
        assert id1 == id2

    def test_publish_date_is_part_of_identity(self):
        """A repost on a later date is a distinct posting"""
        id1 = compute_id("Acme", "Ingénieur Réseau", "Paris", "2025-01-10")
        id2 = compute_id("Acme", "Ingénieur Réseau", "Paris", "2025-02-10")
        assert id1 != id2

    def test_missing_and_unparseable_dates_share_identity(self):
        id1 = compute_id("Acme", "Ingénieur Réseau", "Paris", None)
        id2 = compute_id("Acme", "Ingénieur Réseau", "Paris", "bientôt")
        assert id1 == id2
        assert id1 != compute_id("Acme", "Ingénieur Réseau", "Paris", "2025-01-10")

    @pytest.mark.parametrize("field", ["company", "title", "location"])
    def test_each_field_changes_identity(self, field):
        base = {"company": "Acme", "title": "Ingénieur Réseau", "location": "Paris"}
        changed = dict(base, **{field: base[field] + " Nord"})

        assert compute_id(base["company"], base["title"], base["location"]) != compute_id(
            changed["company"], changed["title"], changed["location"]
        )

    @pytest.mark.parametrize("company,title,location", [
        ("", "Ingénieur", "Paris"),
        ("Acme", "  ", "Paris"),
        ("Acme", "Ingénieur", None),
        ("Acme", "<br/>", "Paris"),
    ])
    def test_empty_required_field_raises(self, company, title, location):
        with pytest.raises(ValueError):
            compute_id(company, title, location)

    def test_non_ascii_company_gets_fallback_slug(self):
        job_id = compute_id("日本航空", "Pilote", "Tokyo")
        assert job_id.startswith("job-")
        assert validate_job_id(job_id)

    @pytest.mark.parametrize("job_id,valid", [
        ("air-france-0123456789abcdef", True),
        ("bpce-ffffffffffffffff", True),
        ("airfrance-html-1718000000000-3", False),
        ("air-france-0123456789ABCDEF", False),
        ("air-france-0123", False),
        ("", False),
        (None, False),
    ])
    def test_validate_job_id(self, job_id, valid):
        assert validate_job_id(job_id) is valid


# ============================================================================
# Normalize Job Posting Tests
# ============================================================================

class TestNormalizeJobPosting:
    """Tests for common-format posting normalization"""

    def test_normalize_basic(self, sample_common_posting):
        job = normalize_job_posting(sample_common_posting, "infomil")

        assert job.company_name == "Infomil"
        assert job.job_title == "Consultant fonctionnel H/F"
        assert job.location == "Toulouse (31)"
        assert job.publish_date == "2025-07-24"
        assert job.source == "infomil"
        assert job.contract_type == "CDI"
        assert job.description == "Rejoignez l'équipe produit"
        assert job.degraded is False
        assert job.id == compute_id("Infomil", "Consultant fonctionnel H/F", "Toulouse (31)", "2025-07-24")

    @pytest.mark.parametrize("field", ["company_name", "job_title", "location"])
    def test_missing_required_field_raises(self, sample_common_posting, field):
        sample_common_posting[field] = "   "

        with pytest.raises(NormalizationError, match=field):
            normalize_job_posting(sample_common_posting, "infomil")

    def test_required_field_absent_raises(self, sample_common_posting):
        del sample_common_posting["location"]

        with pytest.raises(NormalizationError):
            normalize_job_posting(sample_common_posting, "infomil")

    def test_unparseable_date_becomes_none(self, sample_common_posting):
        sample_common_posting["publish_date"] = "dès que possible"

        job = normalize_job_posting(sample_common_posting, "infomil")

        assert job.publish_date is None
        assert job.id == compute_id("Infomil", "Consultant fonctionnel H/F", "Toulouse (31)")

    def test_optional_fields_default_to_none(self):
        job = normalize_job_posting(
            {"company_name": "Acme", "job_title": "Ingénieur", "location": "Paris"},
            "acme",
        )

        assert job.url == ""
        assert job.publish_date is None
        assert job.description is None
        assert job.contract_type is None

    def test_description_truncated(self, sample_common_posting):
        sample_common_posting["description"] = "x" * (MAX_DESCRIPTION_LENGTH + 50)

        job = normalize_job_posting(sample_common_posting, "infomil")

        assert len(job.description) == MAX_DESCRIPTION_LENGTH

    def test_url_stripped(self, sample_common_posting):
        sample_common_posting["url"] = "  https://infomil.gestmax.fr/search  "

        job = normalize_job_posting(sample_common_posting, "infomil")

        assert job.url == "https://infomil.gestmax.fr/search"

    def test_idempotent(self, sample_common_posting):
        """Normalizing an already-normalized posting yields the same record"""
        first = normalize_job_posting(sample_common_posting, "infomil")
        second = normalize_job_posting(
            {
                "company_name": first.company_name,
                "job_title": first.job_title,
                "location": first.location,
                "url": first.url,
                "publish_date": first.publish_date,
                "description": first.description,
                "contract_type": first.contract_type,
            },
            "infomil",
        )

        assert second == first
