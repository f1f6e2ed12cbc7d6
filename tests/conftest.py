# tests/conftest.py
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from readinglog.book_lookup import BookLookup
from readinglog.models import Book, BookMetadata
from readinglog.storage import MemoryStorage, BOOKS_KEY
from readinglog.utils.throttle import SequentialExecutor


class FakeLookup(BookLookup):
    """Lookup that answers from a title -> cover URL table"""

    def __init__(self, covers: Optional[Dict[str, str]] = None, failing=()):
        self.covers = covers or {}
        self.failing = set(failing)
        self.calls: List[tuple] = []

    def search_by_isbn(self, isbn):
        return None

    def search_by_query(self, text):
        return []

    def fetch_cover_url(self, title, author=None):
        self.calls.append((title, author))
        if title in self.failing:
            raise ConnectionError("lookup unavailable")
        return self.covers.get(title)


class FailingStorage(MemoryStorage):
    """Reads work, book writes fail until ``fail_saves`` is cleared"""

    def __init__(self, initial=None):
        self.fail_saves = False
        super().__init__(initial)
        self.fail_saves = True

    def save(self, key, value):
        if self.fail_saves and key == BOOKS_KEY:
            return False
        return super().save(key, value)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def executor(sleeps):
    # Records the pauses instead of sleeping
    return SequentialExecutor(delay=0.1, sleep=sleeps.append)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 6, 15, 9, 30, 0)


@pytest.fixture
def dune():
    return Book(title="Dune", author="Frank Herbert", id="dune-1", end_date="2023-05-01")


@pytest.fixture
def sample_books():
    return [
        Book(title="Dune", author="Frank Herbert", id="b1", genre="Sci-Fi", pages=412,
             price=9.99, rating=5, end_date="2024-01-10", format="ebook", source="Kindle"),
        Book(title="Children of Dune", author="Frank Herbert", id="b2", genre="Sci-Fi", pages=444,
             rating=4, end_date="2024-02-03"),
        Book(title="Emma", author="Jane Austen", id="b3", genre="Classic", pages=474,
             price=4.5, rating=3, start_date="3/1/2024", source="Library"),
        Book(title="Piranesi", author="Susanna Clarke", id="b4", genre="Fantasy", pages=272,
             rating=5, end_date="2024-03-20", did_not_finish=True, posted_blog=True),
        Book(title="Hyperion", author="Dan Simmons", id="b5", genre="Sci-Fi", pages=482,
             date_read="2023-11-11", format="audiobook", narrator="Victor Bevine"),
        Book(title="Undated", author="Nobody", id="b6"),
    ]


@pytest.fixture
def metadata():
    return BookMetadata(title="Dune", author="Frank Herbert", isbn="9780441013593", pages=412)
