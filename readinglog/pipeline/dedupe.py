"""
Duplicate detection between incoming candidates and the stored library.

Two entries are the same logical read when title and author match
(case-insensitive, trimmed) and their book years do not differ. A missing
year on either side counts as a match, so uncertain cases are flagged as
duplicates for the user to review rather than silently imported twice.
Re-reads in a different year are distinct entries.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from ..models import Book, ImportRow
from ..utils.dates import book_year

Candidate = Union[Book, ImportRow]


class YearMatch(Enum):
    EQUAL = "equal"
    DIFFERENT = "different"
    UNKNOWN = "unknown"

    @property
    def is_match(self) -> bool:
        return self is not YearMatch.DIFFERENT


def compare_years(first: Optional[int], second: Optional[int]) -> YearMatch:
    if not first or not second:
        return YearMatch.UNKNOWN
    return YearMatch.EQUAL if first == second else YearMatch.DIFFERENT


def _identity_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def same_title_and_author(title: str, author: str, existing: Book) -> bool:
    return (
        _identity_key(title) == _identity_key(existing.title)
        and _identity_key(author) == _identity_key(existing.author)
    )


def is_same_entry(candidate: Book, existing: Book) -> bool:
    """True if ``candidate`` and ``existing`` record the same read."""
    if not same_title_and_author(candidate.title, candidate.author, existing):
        return False
    return compare_years(book_year(candidate), book_year(existing)).is_match


def _as_book(candidate: Candidate) -> Book:
    return candidate.book if isinstance(candidate, ImportRow) else candidate


@dataclass
class DuplicatePartition:
    """Candidates split into already-recorded duplicates and new entries"""
    duplicates: List[Candidate] = field(default_factory=list)
    unique: List[Candidate] = field(default_factory=list)


class DuplicateResolver:
    """Finds title + author + year collisions against an existing collection."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def find_match(self, candidate: Book, existing: Iterable[Book]) -> Optional[Book]:
        for book in existing:
            if is_same_entry(candidate, book):
                return book
        return None

    def partition(self, candidates: Iterable[Candidate], existing: Iterable[Book]) -> DuplicatePartition:
        """
        Split candidates into duplicates and unique entries.

        Accepts plain Books or ImportRows; input order is preserved in both
        output lists.
        """
        existing = list(existing)
        result = DuplicatePartition()

        for candidate in candidates:
            if self.find_match(_as_book(candidate), existing) is not None:
                result.duplicates.append(candidate)
            else:
                result.unique.append(candidate)

        self.logger.info(
            f"Duplicate check: {len(result.unique)} unique, {len(result.duplicates)} duplicates"
        )
        return result

    def check_duplicate(
        self,
        title: str,
        author: str,
        year: Optional[int],
        existing: Iterable[Book],
    ) -> Optional[Book]:
        """First existing book matching title, author and year, or None."""
        for book in existing:
            if not same_title_and_author(title, author, book):
                continue
            if compare_years(year, book_year(book)).is_match:
                return book
        return None
