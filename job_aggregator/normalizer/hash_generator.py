"""
Job Identifier Generator for Deduplication

This module provides pure functions to derive a stable identifier for a job
posting from its semantic content: company name, job title, location and
publish date.

The identifier is used everywhere a posting must be recognized again: when
merging the output of several adapters, when serving cached results, and when
reconciling persistent storage. Two postings are the same if they have the
same company, title, location and publish date (after normalization).

Key Concepts:
- Scraping noise removal: "Ing&eacute;nieur <b>R&eacute;seau</b>" → "ingénieur réseau"
- Whitespace normalization: "Data  Engineer" → "Data Engineer"
- Case folding: "AIR FRANCE" → "air france"
- Publish date is part of the identity: a repost on a later date is a new posting
- Deterministic: Same inputs always produce the same id
- Readable: ids start with a slug of the company name ("air-france-3f9c...")
"""

import hashlib
import html
import re
import unicodedata
from typing import Optional

from .dates import parse_publish_date

NO_DATE_SENTINEL = "no-date"
HASH_LENGTH = 16

_TAG_RE = re.compile(r"<[^>]+>")
_LEADING_BULLETS_RE = re.compile(r"^[-•·*\s]+")
_PUNCTUATION_RE = re.compile(r"[^\w\s]", re.UNICODE)
_JOB_ID_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*-[0-9a-f]{%d}$" % HASH_LENGTH)


def normalize_whitespace(text: Optional[str]) -> str:
    """
    Normalize whitespace in a string.

    This function:
    1. Removes leading/trailing whitespace
    2. Collapses multiple spaces into a single space
    3. Handles None values safely

    Examples:
        >>> normalize_whitespace("  Data   Engineer  ")
        'Data Engineer'
        >>> normalize_whitespace("ACME\\n\\tCorp")
        'ACME Corp'
    """
    if not text:
        return ""

    return re.sub(r"\s+", " ", text.strip())


def clean_text(text: Optional[str]) -> str:
    """
    Produce the display form of a scraped text field.

    HTML entities are decoded, tags and leading bullets are dropped and
    whitespace is collapsed. Case and punctuation are preserved.

    Examples:
        >>> clean_text("  • Ing&eacute;nieur <b>R&eacute;seau</b> (H/F) ")
        'Ingénieur Réseau (H/F)'
    """
    if not text:
        return ""

    unescaped = html.unescape(str(text)).replace("\xa0", " ")
    without_tags = _TAG_RE.sub(" ", unescaped)
    return normalize_whitespace(_LEADING_BULLETS_RE.sub("", without_tags))


def normalize_for_comparison(text: Optional[str]) -> str:
    """
    Produce the comparison form of a text field.

    On top of clean_text(), the value is lower-cased and stray punctuation is
    removed, so that "Ingénieur Réseau (H/F)" and "ingénieur  réseau H/F"
    compare equal.

    Examples:
        >>> normalize_for_comparison("Ingénieur Réseau (H/F)")
        'ingénieur réseau hf'
    """
    cleaned = clean_text(text).lower()
    return normalize_whitespace(_PUNCTUATION_RE.sub("", cleaned))


def slugify(text: Optional[str]) -> str:
    """
    Build an ASCII slug for readable identifiers.

    Examples:
        >>> slugify("Berger-Levrault")
        'berger-levrault'
        >>> slugify("Société Générale")
        'societe-generale'
    """
    decomposed = unicodedata.normalize("NFKD", clean_text(text).lower())
    ascii_text = decomposed.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_text).strip("-")


def compute_id(
    company_name: str,
    job_title: str,
    location: str,
    publish_date: Optional[str] = None,
) -> str:
    """
    Generate the stable identifier of a job posting.

    Algorithm:
    1. Reduce company, title and location to their comparison form
    2. Canonicalize the publish date (missing or unparseable → "no-date")
    3. Concatenate with '|' delimiter
    4. MD5 hash, truncated to 16 hex characters
    5. Prefix with a slug of the company name

    Postings that only differ by publish date get different ids: a site that
    reposts the same role later produces a new posting.

    Examples:
        >>> compute_id("Air France", "Technicien avion (H/F)", "Ile-de-France", "2025-01-27")
        'air-france-...'  # slug + 16 hex characters

        >>> # These produce the same id (case, whitespace and date format differences):
        >>> id1 = compute_id("AIR  FRANCE", "Technicien avion (H/F)", "Ile-de-France", "27/01/2025")
        >>> id2 = compute_id("air france", "technicien avion h/f", "ile-de-france", "2025-01-27")
        >>> id1 == id2
        True

    Args:
        company_name: Company name (e.g., "Air France")
        job_title: Job title (e.g., "Technicien avion (H/F)")
        location: Location string (e.g., "Ile-de-France")
        publish_date: Optional publish date in any supported format

    Returns:
        Identifier of the form "<company-slug>-<16 hex characters>"

    Raises:
        ValueError: If company, title or location is empty after normalization
    """
    company_norm = normalize_for_comparison(company_name)
    title_norm = normalize_for_comparison(job_title)
    location_norm = normalize_for_comparison(location)

    if not company_norm:
        raise ValueError("Company name cannot be empty")
    if not title_norm:
        raise ValueError("Job title cannot be empty")
    if not location_norm:
        raise ValueError("Location cannot be empty")

    date_norm = parse_publish_date(publish_date) or NO_DATE_SENTINEL

    composite_key = f"{company_norm}|{title_norm}|{location_norm}|{date_norm}"
    digest = hashlib.md5(composite_key.encode("utf-8")).hexdigest()[:HASH_LENGTH]

    return f"{slugify(company_name) or 'job'}-{digest}"


def validate_job_id(job_id: str) -> bool:
    """
    Validate that a string has the shape produced by compute_id().

    Examples:
        >>> validate_job_id("air-france-0123456789abcdef")
        True
        >>> validate_job_id("airfrance-html-1718000000000-3")
        False
    """
    if not job_id or not isinstance(job_id, str):
        return False

    return bool(_JOB_ID_RE.match(job_id))
