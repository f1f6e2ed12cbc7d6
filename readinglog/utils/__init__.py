"""
Utility functions for the reading log.
"""

from .dates import (
    parse_flexible_date,
    normalize_to_iso,
    resolve_book_date,
    extract_year,
    book_year,
    DATE_FORMATS,
)
from .throttle import RateLimiter, SequentialExecutor

__all__ = [
    "parse_flexible_date",
    "normalize_to_iso",
    "resolve_book_date",
    "extract_year",
    "book_year",
    "DATE_FORMATS",
    "RateLimiter",
    "SequentialExecutor",
]
