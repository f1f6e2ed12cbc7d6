# readinglog/__init__.py
"""
Personal reading tracker core: CSV import/export with duplicate detection,
and yearly reading analytics.

Primary interfaces:
- ImportPipeline: Upload -> Review -> Covers -> Import state machine
- LibraryRepository: Book and reading-goal persistence
- CsvCodec: Decode arbitrary CSV exports, encode the library

Analytics interfaces:
- analytics: Pure functions over a book list (totals, top lists, trends)
- year_dashboard: Everything the yearly dashboard shows in one dict

Collaborators:
- StorageBackend: MemoryStorage, JSONFileStorage, S3Storage
- BookLookup: GoogleBooksLookup
"""

from .models import Book, ImportRow, RowError, ReadingGoal, BookMetadata
from .exceptions import (
    ReadingLogError,
    CsvFormatError,
    EmptyImportError,
    PersistenceError,
    InvalidStateError,
)
from .utils import parse_flexible_date, normalize_to_iso, resolve_book_date, SequentialExecutor
from .pipeline import CsvCodec, DuplicateResolver, CoverFetcher
from .storage import StorageBackend, MemoryStorage, JSONFileStorage, S3Storage
from .book_lookup import BookLookup, GoogleBooksLookup
from .library import LibraryRepository
from .import_pipeline import ImportPipeline, ImportState, ImportResult, ReviewSummary, import_csv
from . import analytics
from .analytics import year_dashboard

__all__ = [
    # Primary interface
    "ImportPipeline",
    "ImportState",
    "ImportResult",
    "ReviewSummary",
    "import_csv",
    "LibraryRepository",
    "CsvCodec",
    "DuplicateResolver",
    "CoverFetcher",

    # Models
    "Book",
    "ImportRow",
    "RowError",
    "ReadingGoal",
    "BookMetadata",

    # Analytics
    "analytics",
    "year_dashboard",

    # Dates
    "parse_flexible_date",
    "normalize_to_iso",
    "resolve_book_date",
    "SequentialExecutor",

    # Collaborators
    "StorageBackend",
    "MemoryStorage",
    "JSONFileStorage",
    "S3Storage",
    "BookLookup",
    "GoogleBooksLookup",

    # Errors
    "ReadingLogError",
    "CsvFormatError",
    "EmptyImportError",
    "PersistenceError",
    "InvalidStateError",
]
