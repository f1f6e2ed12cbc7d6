"""
CSV encoding and decoding for the reading log.

Decoding reads arbitrary user CSV (any header names, RFC-4180 quoting, CRLF
or LF) into candidate Books. Encoding writes the fixed 26-column export.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from ..exceptions import CsvFormatError
from ..models import Book, ImportRow, DEFAULT_FORMAT, DEFAULT_CURRENCY
from .normalizer import normalize_record

CSV_HEADERS = [
    "Title", "Author", "ISBN", "Genre", "Pages", "Format", "Narrator", "Source",
    "Price", "Currency", "Start Date", "End Date", "Rating", "Did Not Finish",
    "DNF Reason", "Review", "Author Instagram", "Cover URL",
    "Review Drafted", "Posted Goodreads", "Posted Instagram", "Posted IG BBR",
    "Posted Blog", "Posted Amazon", "Amazon Approved", "Date Added",
]

RESULT_COLUMN = "Result"


@dataclass
class DecodedCsv:
    """Original header row, the raw text of each data row, and one ImportRow per data row"""
    header: List[str] = field(default_factory=list)
    frame: pd.DataFrame = field(default_factory=pd.DataFrame)
    rows: List[ImportRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def _keep_long_row(fields: List[str]) -> List[str]:
    # pandas drops the cells beyond the header width
    return fields


def _has_unterminated_quote(text: str) -> bool:
    """True when a quote that opens a field is never closed."""
    in_quotes = False
    field_start = True
    i = 0
    while i < len(text):
        char = text[i]
        if in_quotes:
            if char == '"':
                if text[i + 1:i + 2] == '"':
                    i += 1
                else:
                    in_quotes = False
        elif char == '"' and field_start:
            in_quotes = True
        # A quote inside an unquoted field is a literal character
        field_start = not in_quotes and (char in ",\r\n" or (field_start and char == " "))
        i += 1
    return in_quotes


def _record(header: List[str], values: List[str]) -> Dict[str, str]:
    # First column wins when a header name repeats
    record: Dict[str, str] = {}
    for name, value in zip(header, values):
        record.setdefault(name, value)
    return record


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _number(value) -> str:
    if not value:
        return ""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


class CsvCodec:
    """
    Converts between CSV text and Book records.

    Decoding is tolerant: unknown columns are ignored, short rows are padded
    and extra trailing cells are dropped. Only text that cannot be tokenised
    at all (such as an unterminated quoted field) is a format error.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------ decode

    def decode(self, csv_text: str) -> List[Book]:
        """
        Decode CSV text into candidate books.

        Rows without both a title and an author are dropped.
        """
        decoded = self.decode_rows(csv_text)
        books = [row.book for row in decoded.rows if row.book.has_identity]
        dropped = len(decoded.rows) - len(books)
        if dropped:
            self.logger.info(f"Dropped {dropped} rows missing title or author")
        return books

    def decode_rows(self, csv_text: str) -> DecodedCsv:
        """Decode every non-blank data row, keeping its position."""
        header, frame = self.read_table(csv_text)
        rows = [
            ImportRow(book=normalize_record(_record(header, values)), row_index=index)
            for index, values in enumerate(frame.values.tolist())
        ]
        self.logger.info(f"Decoded {len(rows)} CSV rows")
        return DecodedCsv(header=header, frame=frame, rows=rows)

    def read_table(self, csv_text: str) -> Tuple[List[str], pd.DataFrame]:
        """
        Read CSV text into its header row and a DataFrame of raw cell strings.

        The header is kept exactly as written, so blank or repeated column
        names survive. Documents with fewer than two non-blank lines have no
        data rows and give an empty frame.
        """
        text = (csv_text or "").lstrip("\ufeff")
        non_blank = [line for line in text.splitlines() if line.strip()]
        if len(non_blank) < 2:
            return [], pd.DataFrame()

        if _has_unterminated_quote(text):
            raise CsvFormatError("Unterminated quoted field in CSV")

        try:
            table = pd.read_csv(
                io.StringIO(text),
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                skipinitialspace=True,
                index_col=False,
                engine="python",
                on_bad_lines=_keep_long_row,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as e:
            raise CsvFormatError(f"Could not parse CSV: {e}") from e

        table = table.fillna("")
        if table.empty:
            return [], pd.DataFrame()

        header = [str(name) for name in table.iloc[0].tolist()]
        frame = table.iloc[1:].reset_index(drop=True)
        if frame.empty:
            return header, frame

        blank = frame.apply(lambda column: column.astype(str).str.strip() == "").all(axis=1)
        return header, frame[~blank].reset_index(drop=True)

    # ------------------------------------------------------------------ encode

    def encode(self, books: Iterable[Book]) -> str:
        """Encode books as the fixed-header export CSV (LF line endings)."""
        records = [self._book_to_row(book) for book in books]
        frame = pd.DataFrame(records, columns=CSV_HEADERS)
        self.logger.info(f"Encoded {len(records)} books to CSV")
        return frame.to_csv(index=False, lineterminator="\n")

    def _book_to_row(self, book: Book) -> Dict[str, str]:
        return {
            "Title": book.title,
            "Author": book.author,
            "ISBN": book.isbn,
            "Genre": book.genre,
            "Pages": _number(book.pages),
            "Format": book.format or DEFAULT_FORMAT,
            "Narrator": book.narrator,
            "Source": book.source,
            "Price": _number(book.price),
            "Currency": book.currency or DEFAULT_CURRENCY,
            "Start Date": book.start_date,
            "End Date": book.completion_date,
            "Rating": _number(book.rating),
            "Did Not Finish": _yes_no(book.did_not_finish),
            "DNF Reason": book.dnf_reason,
            "Review": book.review,
            "Author Instagram": book.author_instagram,
            "Cover URL": book.cover_url,
            "Review Drafted": _yes_no(book.review_drafted),
            "Posted Goodreads": _yes_no(book.posted_goodreads),
            "Posted Instagram": _yes_no(book.posted_instagram),
            "Posted IG BBR": _yes_no(book.posted_ig_bbr),
            "Posted Blog": _yes_no(book.posted_blog),
            "Posted Amazon": _yes_no(book.posted_amazon),
            "Amazon Approved": _yes_no(book.amazon_approved),
            "Date Added": book.date_added,
        }

    def encode_results(self, decoded: DecodedCsv, statuses: Sequence[str]) -> str:
        """
        Re-emit the decoded rows under their original header, with a leading
        "Result" column.

        ``statuses`` holds one entry per decoded row, in row order.
        """
        if len(statuses) != len(decoded.frame):
            raise ValueError(
                f"Expected {len(decoded.frame)} statuses, got {len(statuses)}"
            )
        frame = decoded.frame.copy()
        frame.insert(0, RESULT_COLUMN, list(statuses), allow_duplicates=True)
        return frame.to_csv(
            index=False,
            header=[RESULT_COLUMN] + decoded.header,
            lineterminator="\n",
        )
