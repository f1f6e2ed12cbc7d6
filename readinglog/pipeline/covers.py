"""
Cover image enrichment for imported books.
"""

import logging
from typing import Dict, List, Optional

from ..book_lookup import BookLookup
from ..models import Book
from ..utils.throttle import SequentialExecutor, ProgressCallback

DEFAULT_COVER_DELAY = 0.1


class CoverFetcher:
    """
    Looks up covers for books that have none, one request at a time.

    A failed lookup leaves that book without a cover and the batch carries
    on.
    """

    def __init__(self, lookup: BookLookup, executor: Optional[SequentialExecutor] = None):
        self.lookup = lookup
        self.executor = executor or SequentialExecutor(delay=DEFAULT_COVER_DELAY)
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def needs_cover(book: Book) -> bool:
        return not book.cover_url and bool(book.title)

    def fetch_covers(self, books: List[Book], on_progress: Optional[ProgressCallback] = None) -> Dict[int, str]:
        """
        Fetch covers for the books lacking one.

        Returns:
            Mapping of position in ``books`` to the cover URL found
        """
        pending = [index for index, book in enumerate(books) if self.needs_cover(book)]
        self.logger.info(f"Fetching covers for {len(pending)} of {len(books)} books")

        urls = self.executor.map(lambda index: self._lookup(books[index]), pending, on_progress)

        covers = {index: url for index, url in zip(pending, urls) if url}
        self.logger.info(f"Found {len(covers)} covers")
        return covers

    def _lookup(self, book: Book) -> Optional[str]:
        try:
            return self.lookup.fetch_cover_url(book.title, book.author)
        except Exception as e:
            self.logger.warning(f"Error fetching cover for '{book.title}': {e}")
            return None
