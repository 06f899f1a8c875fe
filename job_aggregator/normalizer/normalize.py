"""
Job Posting Normalization Logic

This module transforms the common-format dictionaries produced by source
adapters into NormalizedJob records. It handles text cleanup, date
canonicalization, default values, and identifier generation.

Key Responsibilities:
- Clean required fields (company, title, location) for display
- Degrade unparseable optional fields to None instead of failing
- Generate the stable job id used for deduplication
"""

import logging
from typing import Any, Optional

from ..models import NormalizedJob
from .dates import parse_publish_date
from .hash_generator import clean_text, compute_id

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 200


class NormalizationError(Exception):
    """Raised when a job posting is missing a required field after cleaning."""
    pass


def normalize_job_posting(raw_data: dict[str, Any], source: str) -> NormalizedJob:
    """
    Normalize a common-format job posting into a NormalizedJob.

    Args:
        raw_data: Dictionary returned by SourceAdapter.map_to_common():
            {
                'company_name': str,       # Required
                'job_title': str,          # Required
                'location': str,           # Required
                'url': str | None,
                'publish_date': str | None,  # Any supported date format
                'description': str | None,
                'contract_type': str | None,
            }
        source: Tag of the adapter that produced the posting (e.g., "bpce")

    Returns:
        NormalizedJob with cleaned fields and a computed id

    Raises:
        NormalizationError: If company, title or location is empty after cleaning.
            Optional fields never raise; they degrade to None.

    Examples:
        >>> job = normalize_job_posting({
        ...     'company_name': 'Infomil',
        ...     'job_title': ' Consultant   fonctionnel H/F ',
        ...     'location': 'Toulouse (31)',
        ...     'publish_date': '24/07/2025',
        ... }, 'infomil')
        >>> job.job_title, job.publish_date
        ('Consultant fonctionnel H/F', '2025-07-24')
    """
    company_name = clean_text(raw_data.get("company_name"))
    job_title = clean_text(raw_data.get("job_title"))
    location = clean_text(raw_data.get("location"))

    if not company_name:
        raise NormalizationError("company_name is required and must be a non-empty string")
    if not job_title:
        raise NormalizationError("job_title is required and must be a non-empty string")
    if not location:
        raise NormalizationError("location is required and must be a non-empty string")

    publish_date = parse_publish_date(raw_data.get("publish_date"))
    if raw_data.get("publish_date") and publish_date is None:
        logger.warning(
            "Unparseable publish date, treating as absent",
            extra={
                "source": source,
                "job_title": job_title,
                "value": raw_data.get("publish_date"),
            },
        )

    try:
        job_id = compute_id(company_name, job_title, location, publish_date)
    except ValueError as e:
        raise NormalizationError(f"Failed to compute job id: {e}") from e

    description = _safe_string(raw_data.get("description"))
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH].rstrip()

    normalized = NormalizedJob(
        id=job_id,
        company_name=company_name,
        job_title=job_title,
        location=location,
        url=(raw_data.get("url") or "").strip(),
        source=source,
        publish_date=publish_date,
        description=description,
        contract_type=_safe_string(raw_data.get("contract_type")),
    )

    logger.debug(
        "Successfully normalized job posting",
        extra={
            "job_id": job_id,
            "company": company_name,
            "job_title": job_title,
            "source": source,
        },
    )

    return normalized


def _safe_string(value: Any) -> Optional[str]:
    """
    Safely convert a value to cleaned text or None.

    Args:
        value: Value to convert

    Returns:
        Cleaned string value or None if empty/None
    """
    if value is None:
        return None

    cleaned = clean_text(str(value))
    return cleaned or None
