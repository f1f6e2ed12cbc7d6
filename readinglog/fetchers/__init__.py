"""
Data fetcher modules for external book metadata.
"""

from .google_fetcher import (
    fetch_by_isbn,
    fetch_by_query,
    fetch_cover_candidates,
    clean_isbn,
    GOOGLE_BOOKS_URL,
)

__all__ = [
    "fetch_by_isbn",
    "fetch_by_query",
    "fetch_cover_candidates",
    "clean_isbn",
    "GOOGLE_BOOKS_URL",
]
