"""
Google Books API data fetcher.
"""

import re
from typing import Dict, Optional

from ..api_caller import APICaller

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"


def clean_isbn(isbn: str) -> str:
    """Drop hyphens, spaces and anything else that is not a digit or X"""
    return re.sub(r"[^0-9X]", "", (isbn or "").upper())


def _query(api_caller: APICaller, query: str, max_results: int, api_key: Optional[str]) -> Optional[Dict]:
    params = {"q": query, "maxResults": max_results}
    if api_key:
        params["key"] = api_key

    success, status_code, data = api_caller.get(GOOGLE_BOOKS_URL, params)

    if success and data and data.get("totalItems", 0) > 0 and data.get("items"):
        return data
    return None


def fetch_by_isbn(isbn: str, api_caller: APICaller, api_key: Optional[str] = None) -> Optional[Dict]:
    """Raw volumes response for an ISBN lookup, or None"""
    cleaned = clean_isbn(isbn)
    if not cleaned:
        return None
    return _query(api_caller, f"isbn:{cleaned}", 1, api_key)


def fetch_by_query(query: str, api_caller: APICaller, api_key: Optional[str] = None, max_results: int = 10) -> Optional[Dict]:
    """Raw volumes response for a free-text search, or None"""
    if not query or not query.strip():
        return None
    return _query(api_caller, query.strip(), max_results, api_key)


def fetch_cover_candidates(
    title: str,
    author: Optional[str],
    api_caller: APICaller,
    api_key: Optional[str] = None,
) -> Optional[Dict]:
    """
    Search by title and author for volumes that may carry cover images.

    Author is optional; without it the search is title-only.
    """
    if not title:
        return None
    query = f"intitle:{title}+inauthor:{author}" if author else f"intitle:{title}"
    return _query(api_caller, query, 3, api_key)
