"""
Publish date canonicalization.

Career sites expose dates in many shapes: ISO dates, ISO timestamps,
French day-first dates, US-style timestamps from Opendatasoft exports, and
spelled-out month names in French or English. Everything is reduced to a
plain ``YYYY-MM-DD`` string. A value that cannot be parsed becomes None;
the caller treats it as "no date" and never fails because of it.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

FRENCH_MONTHS = {
    "janvier": 1, "janv": 1,
    "fevrier": 2, "février": 2, "fevr": 2, "févr": 2,
    "mars": 3,
    "avril": 4, "avr": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7, "juil": 7,
    "aout": 8, "août": 8,
    "septembre": 9, "sept": 9,
    "octobre": 10, "oct": 10,
    "novembre": 11, "nov": 11,
    "decembre": 12, "décembre": 12, "dec": 12, "déc": 12,
}

ENGLISH_MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[T ]")
_DAY_FIRST = re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4})$")
_SLASH_WITH_TIME = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})\s+\d{1,2}:\d{2}(?::\d{2})?\s*(AM|PM)?$", re.IGNORECASE)
_DAY_MONTH_NAME = re.compile(r"^(\d{1,2})(?:er)?\s+([^\W\d_]+)\.?\s+(\d{4})$", re.UNICODE)
_MONTH_NAME_DAY = re.compile(r"^([^\W\d_]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$", re.UNICODE)


def _safe_date(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _month_number(name: str) -> Optional[int]:
    key = name.lower().rstrip(".")
    return FRENCH_MONTHS.get(key) or ENGLISH_MONTHS.get(key)


def parse_publish_date(value: Any) -> Optional[str]:
    """
    Canonicalize a publish date to ``YYYY-MM-DD``.

    Supported inputs:
    - date / datetime objects
    - "2025-01-10" and ISO 8601 timestamps ("2025-01-10T08:00:00Z")
    - Day-first numeric dates: "10/01/2025", "10-01-2025", "10.01.2025"
    - Opendatasoft timestamps: "07/08/2025 6:10:05 AM" (month first)
    - Month names: "10 janvier 2025", "1er mars 2025", "January 10, 2025"

    Args:
        value: Raw date value from a source

    Returns:
        ISO calendar date string, or None if the value is missing or unparseable

    Examples:
        >>> parse_publish_date("10/01/2025")
        '2025-01-10'
        >>> parse_publish_date("not a date") is None
        True
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        logger.debug("Unsupported publish date type", extra={"type": type(value).__name__})
        return None

    text = re.sub(r"\s+", " ", value).strip()
    if not text:
        return None

    match = _ISO_DATE.match(text)
    if match:
        return _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    if _ISO_PREFIX.match(text):
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            match = _ISO_PREFIX.match(text)
            return _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    # US-style timestamps come only from API exports, always month first
    match = _SLASH_WITH_TIME.match(text)
    if match:
        return _safe_date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
        parsed = _safe_date(year, month, day)
        if parsed is None and day <= 12:
            # 12/31/2025 style
            parsed = _safe_date(year, day, month)
        return parsed

    match = _DAY_MONTH_NAME.match(text)
    if match:
        month = _month_number(match.group(2))
        if month:
            return _safe_date(int(match.group(3)), month, int(match.group(1)))

    match = _MONTH_NAME_DAY.match(text)
    if match:
        month = _month_number(match.group(1))
        if month:
            return _safe_date(int(match.group(3)), month, int(match.group(2)))

    logger.debug("Failed to parse publish date", extra={"value": value})
    return None
