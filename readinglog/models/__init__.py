"""
Data models for the reading log.
"""

from .book import (
    Book,
    ImportRow,
    RowError,
    FORMATS,
    DEFAULT_FORMAT,
    DEFAULT_CURRENCY,
    PUBLISHING_FLAGS,
)
from .goals import ReadingGoal
from .metadata import BookMetadata

__all__ = [
    "Book",
    "ImportRow",
    "RowError",
    "ReadingGoal",
    "BookMetadata",
    "FORMATS",
    "DEFAULT_FORMAT",
    "DEFAULT_CURRENCY",
    "PUBLISHING_FLAGS",
]
