"""
Library repository: the book collection and reading goals on top of a
storage backend.

Every operation is a whole-collection read followed, for writes, by a
whole-collection save. Book objects handed out are fresh copies; mutating
them has no effect until they are saved back.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from .models import Book, ReadingGoal
from .pipeline.csv_codec import CsvCodec
from .pipeline.dedupe import DuplicateResolver
from .storage.base import StorageBackend, BOOKS_KEY, READING_GOALS_KEY, API_KEY_KEY


class LibraryRepository:
    """Book and reading-goal persistence through a StorageBackend"""

    def __init__(self, storage: StorageBackend):
        self.storage = storage
        self.resolver = DuplicateResolver()
        self.codec = CsvCodec()
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------- Books ------------------------- #

    def load_books(self) -> List[Book]:
        data = self.storage.load(BOOKS_KEY)
        if not data:
            return []
        if not isinstance(data, list):
            self.logger.warning(f"Ignoring malformed {BOOKS_KEY} value of type {type(data).__name__}")
            return []
        return [Book.from_dict(item) for item in data if isinstance(item, dict)]

    def save_books(self, books: List[Book]) -> bool:
        for book in books:
            problem = book.missing_identity()
            if problem:
                raise ValueError(f"Cannot save book {book.id or '<new>'}: {problem}")
        try:
            saved = self.storage.save(BOOKS_KEY, [book.to_dict() for book in books])
        except Exception as e:
            self.logger.error(f"Error saving books: {e}")
            return False
        if not saved:
            self.logger.error("Storage backend refused to save books")
        return bool(saved)

    def add_book(self, book: Book) -> bool:
        """
        Append a book to the collection.

        Callers wanting the duplicate warning call ``check_duplicate`` first;
        adding always succeeds for a valid book so the user can override.
        """
        if not book.id:
            book = Book.create(**{k: v for k, v in vars(book).items() if k != "id"})
        books = self.load_books()
        books.append(book)
        return self.save_books(books)

    def update_book(self, book_id: str, changes: Dict[str, Any]) -> bool:
        books = self.load_books()
        for index, book in enumerate(books):
            if book.id == book_id:
                changes = {k: v for k, v in changes.items() if k != "id"}
                books[index] = book.copy(**changes)
                return self.save_books(books)
        self.logger.warning(f"No book with id {book_id} to update")
        return False

    def delete_book(self, book_id: str) -> bool:
        books = self.load_books()
        remaining = [book for book in books if book.id != book_id]
        if len(remaining) == len(books):
            self.logger.warning(f"No book with id {book_id} to delete")
            return False
        return self.save_books(remaining)

    def get_book(self, book_id: str) -> Optional[Book]:
        for book in self.load_books():
            if book.id == book_id:
                return book
        return None

    def check_duplicate(self, title: str, author: str, year: Optional[int]) -> Optional[Book]:
        """Existing entry for the same title, author and year, if any"""
        return self.resolver.check_duplicate(title, author, year, self.load_books())

    # ------------------------- Import / export ------------------------- #

    def export_json(self) -> str:
        return json.dumps([book.to_dict() for book in self.load_books()], indent=2)

    def import_json(self, json_text: str) -> bool:
        """Replace the whole collection with a JSON array of books."""
        try:
            data = json.loads(json_text)
        except ValueError as e:
            self.logger.error(f"Error importing books: {e}")
            return False
        if not isinstance(data, list):
            self.logger.error("Error importing books: expected a JSON array")
            return False

        books = [Book.from_dict(item) for item in data if isinstance(item, dict)]
        valid = [book for book in books if book.has_identity]
        if len(valid) != len(books):
            self.logger.warning(f"Skipped {len(books) - len(valid)} books without title or author")
        return self.save_books(valid)

    def export_csv(self) -> str:
        return self.codec.encode(self.load_books())

    # ------------------------- Reading goals ------------------------- #

    def _stored_goals(self) -> Dict[str, Any]:
        data = self.storage.load(READING_GOALS_KEY) or {}
        if not isinstance(data, dict):
            self.logger.warning(f"Ignoring malformed {READING_GOALS_KEY} value of type {type(data).__name__}")
            return {}
        return data

    def load_goals(self) -> Dict[int, ReadingGoal]:
        data = self._stored_goals()
        goals = {}
        for year, goal in data.items():
            try:
                goals[int(year)] = ReadingGoal.from_dict(int(year), goal)
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Ignoring malformed reading goal for {year}: {e}")
        return goals

    def set_yearly_goal(self, year: int, target: int) -> Optional[ReadingGoal]:
        """Create or overwrite the goal for ``year``."""
        goal = ReadingGoal(year=int(year), target=int(target))
        data = self._stored_goals()
        data[str(goal.year)] = goal.to_dict()
        if not self.storage.save(READING_GOALS_KEY, data):
            self.logger.error(f"Error saving reading goal for {year}")
            return None
        self.logger.info(f"Reading goal for {year} set to {target}")
        return goal

    def get_yearly_goal(self, year: int) -> Optional[ReadingGoal]:
        return self.load_goals().get(int(year))

    # ------------------------- API key ------------------------- #

    def load_api_key(self) -> str:
        return self.storage.load(API_KEY_KEY) or ""

    def save_api_key(self, api_key: str) -> bool:
        return self.storage.save(API_KEY_KEY, api_key)

    def clear_api_key(self) -> bool:
        return self.storage.save(API_KEY_KEY, "")
