"""
Book metadata returned by external lookup services.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any


@dataclass
class BookMetadata:
    """Lookup result mapped onto the fields the library cares about"""
    title: str
    author: str
    isbn: str = ""
    genre: str = ""
    pages: int = 0
    publisher: str = ""
    published_date: str = ""
    description: str = ""
    cover_url: str = ""
    price: Optional[float] = None
    currency: str = "USD"
    google_books_id: str = ""

    def to_book_fields(self) -> Dict[str, Any]:
        """Fields that can prefill a Book; price only when the lookup had one"""
        fields = {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "genre": self.genre,
            "pages": self.pages,
            "cover_url": self.cover_url,
        }
        if self.price is not None:
            fields["price"] = self.price
            fields["currency"] = self.currency
        return fields

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
