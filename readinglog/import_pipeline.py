"""
CSV import pipeline: Upload -> Review -> (Fetching covers) -> Importing -> Complete

This module ties the pipeline stages together for a single import:
1. Decode the uploaded CSV into candidate rows
2. Split candidates into unique entries and duplicates of stored books
3. Let the caller pick which duplicates to import anyway
4. Optionally look up missing covers, one request at a time
5. Merge the accepted books into the library in a single save

Row problems (missing title or author) are recorded and skipped so the rest
of the batch still imports. A failed save is fatal: nothing is written and
the pipeline returns to review so the import can be retried.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .book_lookup import BookLookup
from .exceptions import EmptyImportError, InvalidStateError, PersistenceError
from .library import LibraryRepository
from .models import Book, ImportRow, RowError
from .pipeline import CoverFetcher, CsvCodec, DecodedCsv, DuplicateResolver
from .storage import StorageBackend
from .utils.throttle import SequentialExecutor, ProgressCallback


class ImportState(Enum):
    UPLOAD = "upload"
    REVIEW = "review"
    FETCHING_COVERS = "fetching_covers"
    IMPORTING = "importing"
    COMPLETE = "complete"


@dataclass
class ReviewSummary:
    """What the caller sees before confirming an import"""
    unique: List[Book] = field(default_factory=list)
    duplicates: List[Book] = field(default_factory=list)
    row_errors: List[RowError] = field(default_factory=list)

    @property
    def unique_count(self) -> int:
        return len(self.unique)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicates)


@dataclass
class ImportResult:
    """Outcome of a completed import"""
    added: int = 0
    skipped: int = 0
    errors: int = 0
    covers_found: int = 0
    row_errors: List[RowError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added": self.added,
            "skipped": self.skipped,
            "errors": self.errors,
            "covers_found": self.covers_found,
            "row_errors": [error.to_dict() for error in self.row_errors],
        }


class ImportPipeline:
    """
    State machine over one import operation.

    Collaborators are injected: the storage backend holding the library, an
    optional book lookup for covers, and the executor that spaces out lookup
    calls.
    """

    def __init__(
        self,
        storage: StorageBackend,
        lookup: Optional[BookLookup] = None,
        executor: Optional[SequentialExecutor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repository = LibraryRepository(storage)
        self.codec = CsvCodec()
        self.resolver = DuplicateResolver()
        self.cover_fetcher = CoverFetcher(lookup, executor) if lookup else None
        self._clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)
        self.reset()

    def reset(self) -> None:
        """Discard any in-progress import and return to UPLOAD."""
        self.state = ImportState.UPLOAD
        self.unique: List[ImportRow] = []
        self.duplicates: List[ImportRow] = []
        self.selected_duplicates: Set[int] = set()
        self.row_errors: List[RowError] = []
        self.result: Optional[ImportResult] = None
        self._decoded: Optional[DecodedCsv] = None

    def _require(self, *states: ImportState) -> None:
        if self.state not in states:
            expected = ", ".join(state.value for state in states)
            raise InvalidStateError(f"Operation needs state {expected}, pipeline is in {self.state.value}")

    # ------------------------- Upload ------------------------- #

    def upload(self, csv_text: str) -> ReviewSummary:
        """
        Decode CSV text and move to REVIEW.

        Raises:
            CsvFormatError: the text is not decodable CSV
            EmptyImportError: no row has both a title and an author
        """
        self._require(ImportState.UPLOAD)
        decoded = self.codec.decode_rows(csv_text)

        rows = []
        errors = []
        for row in decoded.rows:
            problem = row.book.missing_identity()
            if problem:
                errors.append(RowError(row.row_index, problem, row.book))
            else:
                rows.append(row)

        if not rows:
            raise EmptyImportError(
                "No valid books found in CSV. Make sure the file has Title and Author columns."
            )

        self.logger.info(f"Upload accepted {len(rows)} rows, rejected {len(errors)}")
        self._decoded = decoded
        return self._enter_review(rows, errors)

    def stage(self, candidates: Iterable[Book]) -> ReviewSummary:
        """Start an import from in-memory candidates; row index is list position."""
        self._require(ImportState.UPLOAD)
        rows = [ImportRow(book=book, row_index=index) for index, book in enumerate(candidates)]
        if not rows:
            raise EmptyImportError("No books to import")
        self._decoded = None
        return self._enter_review(rows, [])

    def _enter_review(self, rows: List[ImportRow], errors: List[RowError]) -> ReviewSummary:
        partition = self.resolver.partition(rows, self.repository.load_books())
        self.unique = partition.unique
        self.duplicates = partition.duplicates
        self.selected_duplicates = set()
        self.row_errors = errors
        self.state = ImportState.REVIEW
        return self.review_summary()

    # ------------------------- Review ------------------------- #

    def review_summary(self) -> ReviewSummary:
        return ReviewSummary(
            unique=[row.book for row in self.unique],
            duplicates=[row.book for row in self.duplicates],
            row_errors=list(self.row_errors),
        )

    def toggle_duplicate(self, index: int) -> None:
        self._require(ImportState.REVIEW)
        if not 0 <= index < len(self.duplicates):
            raise IndexError(f"No duplicate at position {index}")
        self.selected_duplicates ^= {index}

    def select_duplicates(self, indices: Iterable[int]) -> None:
        """Replace the selection with ``indices``"""
        self._require(ImportState.REVIEW)
        indices = set(indices)
        invalid = [i for i in indices if not 0 <= i < len(self.duplicates)]
        if invalid:
            raise IndexError(f"No duplicates at positions {sorted(invalid)}")
        self.selected_duplicates = indices

    def select_all_duplicates(self) -> None:
        """Select every duplicate, or clear the selection if all are selected"""
        self._require(ImportState.REVIEW)
        if len(self.selected_duplicates) == len(self.duplicates):
            self.selected_duplicates = set()
        else:
            self.selected_duplicates = set(range(len(self.duplicates)))

    def abort(self) -> None:
        self._require(ImportState.REVIEW)
        self.logger.info("Import aborted during review")
        self.reset()

    # ------------------------- Import ------------------------- #

    def run(self, fetch_covers: bool = False, on_progress: Optional[ProgressCallback] = None) -> ImportResult:
        """
        Import the unique candidates plus the selected duplicates.

        Raises:
            PersistenceError: the library could not be saved; the pipeline is
                back in REVIEW and ``run`` may be called again
        """
        self._require(ImportState.REVIEW)

        accepted = self.unique + [
            row for index, row in enumerate(self.duplicates) if index in self.selected_duplicates
        ]
        errors = list(self.row_errors)

        now = self._clock()
        timestamp = now.isoformat()
        today = now.date().isoformat()

        new_books = []
        for row in accepted:
            problem = row.book.missing_identity()
            if problem:
                self.logger.warning(f"Row {row.row_index}: {problem}")
                errors.append(RowError(row.row_index, problem, row.book))
                continue
            new_books.append(self._prepare(row.book, timestamp, today))

        covers_found = 0
        try:
            if fetch_covers and self.cover_fetcher and new_books:
                self.state = ImportState.FETCHING_COVERS
                covers = self.cover_fetcher.fetch_covers(new_books, on_progress)
                for index, cover_url in covers.items():
                    new_books[index].cover_url = cover_url
                covers_found = len(covers)

            self.state = ImportState.IMPORTING
            self._persist(new_books)
        except Exception:
            self.state = ImportState.REVIEW
            raise

        errors.sort(key=lambda error: error.row_index)
        self.result = ImportResult(
            added=len(new_books),
            skipped=len(self.duplicates) - len(self.selected_duplicates),
            errors=len(errors),
            covers_found=covers_found,
            row_errors=errors,
        )
        self.state = ImportState.COMPLETE
        self.logger.info(
            f"Import complete: added={self.result.added}, skipped={self.result.skipped}, "
            f"errors={self.result.errors}, covers={self.result.covers_found}"
        )
        return self.result

    def _prepare(self, book: Book, timestamp: str, today: str) -> Book:
        end_date = book.completion_date
        return book.copy(
            id=str(uuid.uuid4()),
            date_added=book.date_added or timestamp,
            end_date=end_date or book.start_date or today,
            start_date=book.start_date or end_date or today,
        )

    def _persist(self, new_books: List[Book]) -> None:
        try:
            existing = self.repository.load_books()
            saved = self.repository.save_books(existing + new_books)
        except Exception as e:
            self.logger.error(f"Error importing books: {e}")
            raise PersistenceError(f"Could not save imported books: {e}") from e

        if not saved:
            self.logger.error("Error importing books: storage write failed")
            raise PersistenceError("Could not save imported books")

    # ------------------------- Complete ------------------------- #

    def results_csv(self) -> str:
        """
        The uploaded CSV with a leading "Result" column.

        Each original data row is marked ``Success`` or ``Error: <message>``.
        """
        self._require(ImportState.COMPLETE)
        if self._decoded is None:
            raise InvalidStateError("Results CSV is only available for CSV uploads")

        messages = {error.row_index: error.message for error in self.result.row_errors}
        statuses = [
            f"Error: {messages[index]}" if index in messages else "Success"
            for index in range(len(self._decoded.rows))
        ]
        return self.codec.encode_results(self._decoded, statuses)


def import_csv(
    csv_text: str,
    storage: StorageBackend,
    lookup: Optional[BookLookup] = None,
    include_duplicates: bool = False,
    fetch_covers: bool = False,
    on_progress: Optional[ProgressCallback] = None,
) -> ImportPipeline:
    """
    Convenience function running a whole import without interactive review.

    Returns:
        The completed pipeline, for its ``result`` and ``results_csv()``
    """
    pipeline = ImportPipeline(storage, lookup=lookup)
    pipeline.upload(csv_text)
    if include_duplicates:
        pipeline.select_all_duplicates()
    pipeline.run(fetch_covers=fetch_covers, on_progress=on_progress)
    return pipeline
