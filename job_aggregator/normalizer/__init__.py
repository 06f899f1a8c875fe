"""
Normalizer

Pure functions that turn scraped fields into canonical job records.

Key responsibilities:
- Clean scraped text (HTML entities, tags, bullets, whitespace)
- Canonicalize publish dates to YYYY-MM-DD
- Compute the deterministic job id used for deduplication and reconciliation
"""

from .dates import parse_publish_date
from .hash_generator import (
    clean_text,
    compute_id,
    normalize_for_comparison,
    normalize_whitespace,
    validate_job_id,
)
from .normalize import NormalizationError, normalize_job_posting

__all__ = [
    "NormalizationError",
    "clean_text",
    "compute_id",
    "normalize_for_comparison",
    "normalize_job_posting",
    "normalize_whitespace",
    "parse_publish_date",
    "validate_job_id",
]
