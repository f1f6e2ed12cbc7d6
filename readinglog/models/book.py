"""
Core data models for the reading log.
"""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Dict, Optional, Any

FORMATS = ("physical", "ebook", "audiobook")
DEFAULT_FORMAT = "physical"
DEFAULT_CURRENCY = "USD"

# Attribute name -> key used in the stored JSON blob
STORAGE_KEYS = {
    "id": "id",
    "title": "title",
    "author": "author",
    "isbn": "isbn",
    "genre": "genre",
    "narrator": "narrator",
    "cover_url": "coverUrl",
    "format": "format",
    "source": "source",
    "pages": "pages",
    "price": "price",
    "currency": "currency",
    "rating": "rating",
    "start_date": "startDate",
    "end_date": "endDate",
    "date_read": "dateRead",
    "date_added": "dateAdded",
    "did_not_finish": "didNotFinish",
    "dnf_reason": "dnfReason",
    "review": "review",
    "author_instagram": "authorInstagram",
    "review_drafted": "reviewDrafted",
    "posted_goodreads": "postedGoodreads",
    "posted_instagram": "postedInstagram",
    "posted_ig_bbr": "postedIgBbr",
    "posted_blog": "postedBlog",
    "posted_amazon": "postedAmazon",
    "amazon_approved": "amazonApproved",
}

PUBLISHING_FLAGS = (
    "review_drafted",
    "posted_goodreads",
    "posted_instagram",
    "posted_ig_bbr",
    "posted_blog",
    "posted_amazon",
    "amazon_approved",
)


@dataclass
class Book:
    """
    A single tracked reading entry.

    Candidates parsed from CSV carry an empty ``id`` until the import
    pipeline assigns one. ``date_read`` is the legacy name for ``end_date``
    and is only read, never written by new code.
    """

    title: str = ""
    author: str = ""
    id: str = ""

    # Descriptive
    isbn: str = ""
    genre: str = ""
    narrator: str = ""
    cover_url: str = ""

    # Classification
    format: str = DEFAULT_FORMAT
    source: str = ""

    # Quantitative
    pages: int = 0
    price: float = 0.0
    currency: str = DEFAULT_CURRENCY
    rating: int = 0

    # Reading timeline
    start_date: str = ""
    end_date: str = ""
    date_read: str = ""
    date_added: str = ""

    # Completion
    did_not_finish: bool = False
    dnf_reason: str = ""

    # Review publishing
    review: str = ""
    author_instagram: str = ""
    review_drafted: bool = False
    posted_goodreads: bool = False
    posted_instagram: bool = False
    posted_ig_bbr: bool = False
    posted_blog: bool = False
    posted_amazon: bool = False
    amazon_approved: bool = False

    # Unknown keys found in stored data, written back untouched
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def create(cls, has_paid: bool = True, **values) -> "Book":
        """Build a new book with a fresh id and ``date_added`` timestamp."""
        book = cls(**values)
        book.id = str(uuid.uuid4())
        if not book.date_added:
            book.date_added = datetime.now().isoformat()
        if not has_paid:
            book.price = 0.0
        return book

    def copy(self, **changes) -> "Book":
        return replace(self, extra=dict(self.extra), **changes)

    def missing_identity(self) -> Optional[str]:
        """Return the validation message for a missing title/author, if any."""
        if not (self.title or "").strip():
            return "Missing title"
        if not (self.author or "").strip():
            return "Missing author"
        return None

    @property
    def has_identity(self) -> bool:
        return self.missing_identity() is None

    @property
    def completion_date(self) -> str:
        """End date, falling back to the legacy ``date_read`` field"""
        return self.end_date or self.date_read

    def to_dict(self) -> Dict[str, Any]:
        """Storage form, keyed the way the JSON blob has always been keyed."""
        data = dict(self.extra)
        for attr, key in STORAGE_KEYS.items():
            value = getattr(self, attr)
            if attr == "date_read" and not value:
                continue
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        known = {key: attr for attr, key in STORAGE_KEYS.items()}
        defaults = {f.name: f.default for f in fields(cls) if f.name != "extra"}
        values = {}
        extra = {}
        for key, value in data.items():
            attr = known.get(key)
            if attr is None:
                extra[key] = value
                continue
            if value is None:
                continue
            default = defaults[attr]
            if isinstance(default, bool):
                value = _to_bool(value)
            elif isinstance(default, int):
                value = _to_int(value)
            elif isinstance(default, float):
                value = _to_float(value)
            else:
                value = str(value)
            values[attr] = value
        return cls(extra=extra, **values)


def _to_int(value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class ImportRow:
    """A candidate book paired with its originating data-row index"""
    book: Book
    row_index: int


@dataclass
class RowError:
    """Row-level validation failure recorded during an import"""
    row_index: int
    message: str
    book: Optional[Book] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_index": self.row_index,
            "error": self.message,
            "title": self.book.title if self.book else "",
        }


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "1")
    return bool(value)
