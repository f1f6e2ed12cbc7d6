"""
Book metadata lookup against external providers.

Lookups never raise into callers: an unreachable service, an HTTP error or
an unexpected payload all come back as "not found" (None or an empty list).
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .api_caller import APICaller
from .fetchers import fetch_by_isbn, fetch_by_query, fetch_cover_candidates, GOOGLE_BOOKS_URL
from .models import BookMetadata
from .processors import process_google_response, process_volume, first_cover_url


class BookLookup(ABC):
    """Abstract base class for book metadata providers"""

    @abstractmethod
    def search_by_isbn(self, isbn: str) -> Optional[BookMetadata]:
        pass

    @abstractmethod
    def search_by_query(self, text: str) -> List[BookMetadata]:
        pass

    @abstractmethod
    def fetch_cover_url(self, title: str, author: Optional[str] = None) -> Optional[str]:
        pass


class GoogleBooksLookup(BookLookup):
    """Google Books volumes API client"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_caller: Optional[APICaller] = None,
        rate_limit: float = 5.0,
        timeout: float = 10,
    ):
        self.api_key = api_key
        self.api_caller = api_caller or APICaller(rate_limit=rate_limit, timeout=timeout)
        self.logger = logging.getLogger(self.__class__.__name__)

    def search_by_isbn(self, isbn: str) -> Optional[BookMetadata]:
        if not isbn:
            return None
        try:
            data = fetch_by_isbn(isbn, self.api_caller, self.api_key)
            if not data:
                self.logger.info(f"No Google Books match for ISBN {isbn}")
                return None
            return process_volume(data["items"][0])
        except Exception as e:
            self.logger.warning(f"ISBN lookup failed for {isbn}: {e}")
            return None

    def search_by_query(self, text: str) -> List[BookMetadata]:
        try:
            data = fetch_by_query(text, self.api_caller, self.api_key)
            if not data:
                return []
            return process_google_response(data)
        except Exception as e:
            self.logger.warning(f"Search failed for '{text}': {e}")
            return []

    def fetch_cover_url(self, title: str, author: Optional[str] = None) -> Optional[str]:
        if not title:
            return None
        try:
            data = fetch_cover_candidates(title, author, self.api_caller, self.api_key)
            if not data:
                return None
            return first_cover_url(data)
        except Exception as e:
            self.logger.warning(f"Cover lookup failed for '{title}': {e}")
            return None

    def test_connection(self) -> bool:
        """True if the API answers a trivial query"""
        params = {"q": "test", "maxResults": 1}
        if self.api_key:
            params["key"] = self.api_key
        success, status_code, _ = self.api_caller.get(GOOGLE_BOOKS_URL, params)
        return success
