"""
Flexible date handling for user-supplied reading dates.

Dates arrive as ISO strings, ISO timestamps, or US/European slash forms.
Formats are tried in a fixed order and the first one that yields a real
calendar date wins. Because US month/day is tried before European
day/month, "3/4/2024" always means March 4th; European input is only
recognised when the US reading is impossible (e.g. "13/4/2024").
"""

import logging
import re
from datetime import date, datetime
from typing import Optional, Tuple, List, Pattern

logger = logging.getLogger(__name__)

# (label, pattern, strptime format); pattern group 1 is handed to strptime
DATE_FORMATS: List[Tuple[str, Pattern, str]] = [
    ("iso", re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$"), "%Y-%m-%d"),   # 2024-11-28, 2024-11-28T10:00:00Z
    ("us", re.compile(r"^(\d{1,2}/\d{1,2}/\d{4})$"), "%m/%d/%Y"),           # 11/28/2024
    ("us_dash", re.compile(r"^(\d{1,2}-\d{1,2}-\d{4})$"), "%m-%d-%Y"),      # 11-28-2024
    ("european", re.compile(r"^(\d{1,2}/\d{1,2}/\d{4})$"), "%d/%m/%Y"),     # 28/11/2024
]

_ISO_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_US_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_US_DASH = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

_YEAR_PATTERNS = [
    re.compile(r"^(\d{4})-"),
    re.compile(r"/(\d{4})$"),
    re.compile(r"-(\d{4})$"),
]

# Book attributes consulted, in order, when a single date is needed
BOOK_DATE_FIELDS = ("end_date", "date_read", "start_date", "date_added")


def parse_flexible_date(text: Optional[str]) -> Optional[date]:
    """Parse a date string in any supported format, or return None."""
    if not text:
        return None

    text = str(text).strip()
    for label, pattern, fmt in DATE_FORMATS:
        match = pattern.match(text)
        if not match:
            continue
        try:
            return datetime.strptime(match.group(1), fmt).date()
        except ValueError:
            continue

    logger.debug(f"Could not parse date: {text}")
    return None


def normalize_to_iso(text: Optional[str]) -> str:
    """
    Rewrite a date string as zero-padded ``YYYY-MM-DD``.

    Purely textual: no calendar validation happens here. Unrecognised
    non-empty input is returned unchanged.
    """
    if not text:
        return ""

    text = str(text).strip()
    if not text:
        return ""

    match = _ISO_PREFIX.match(text)
    if match:
        return match.group(1)

    for pattern in (_US_SLASH, _US_DASH):
        match = pattern.match(text)
        if match:
            month, day, year = match.groups()
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    return text


def resolve_book_date(book) -> Optional[date]:
    """First successfully parsed date among the book's date fields."""
    for attr in BOOK_DATE_FIELDS:
        parsed = parse_flexible_date(getattr(book, attr, ""))
        if parsed:
            return parsed
    return None


def extract_year(text: Optional[str]) -> Optional[int]:
    """Pull a four-digit year out of a date string without parsing it fully."""
    if not text:
        return None

    text = str(text).strip()
    for pattern in _YEAR_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def book_year(book) -> Optional[int]:
    """Year a book belongs to, for duplicate detection"""
    for attr in BOOK_DATE_FIELDS:
        year = extract_year(getattr(book, attr, ""))
        if year:
            return year
    return None
