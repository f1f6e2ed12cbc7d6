"""
Maps loosely-named CSV columns onto Book fields with type coercion.

Headers are matched after normalisation (lowercase, punctuation removed,
whitespace collapsed) against a static alias table, so "Date Read",
"date-read" and "DATE READ" all land on ``end_date``.
"""

import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..models import Book, FORMATS, DEFAULT_FORMAT, DEFAULT_CURRENCY
from ..utils.dates import normalize_to_iso

logger = logging.getLogger(__name__)

TRUE_VALUES = {"yes", "true", "1"}


def normalize_header(header: Any) -> str:
    """Lowercase, strip special characters and collapse whitespace"""
    text = str(header or "").lower().strip()
    text = re.sub(r"[^\w\s]", "", text)
    return re.sub(r"\s+", " ", text)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_int(value: Any) -> int:
    """Integer value or 0; accepts "3.0" style numbers"""
    text = _text(value)
    if not text:
        return 0
    try:
        return max(int(float(text)), 0)
    except (ValueError, OverflowError):
        return 0


def to_rating(value: Any) -> int:
    return min(to_int(value), 5)


_THOUSANDS = re.compile(r"^-?\d{1,3}(,\d{3})+(\.\d+)?$")
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d+$")


def to_price(value: Any) -> float:
    """
    Float price or 0.

    Currency symbols are dropped. Commas are thousands separators only in
    "1,234.50" form; a lone comma as in "12,50" is a decimal comma.
    """
    text = re.sub(r"[^0-9.,\-]", "", _text(value))
    if _THOUSANDS.match(text):
        text = text.replace(",", "")
    elif _DECIMAL_COMMA.match(text):
        text = text.replace(",", ".")
    if not text:
        return 0.0
    try:
        return max(float(text), 0.0)
    except ValueError:
        return 0.0


def to_bool(value: Any) -> bool:
    return _text(value).lower() in TRUE_VALUES


def to_format(value: Any) -> str:
    text = _text(value).lower()
    if text in FORMATS:
        return text
    if text:
        logger.debug(f"Unknown format '{text}', using {DEFAULT_FORMAT}")
    return DEFAULT_FORMAT


def to_currency(value: Any) -> str:
    return _text(value) or DEFAULT_CURRENCY


def to_date(value: Any) -> str:
    return normalize_to_iso(_text(value))


def to_timestamp(value: Any) -> str:
    """ISO timestamps are kept whole; other date forms become ``YYYY-MM-DD``"""
    text = _text(value)
    if re.match(r"^\d{4}-\d{2}-\d{2}[T ]\S", text):
        return text
    return normalize_to_iso(text)


def to_isbn(value: Any) -> str:
    """Strip the ="..." wrapper spreadsheet exports put around ISBNs"""
    text = _text(value)
    return re.sub(r'^="?([^"]*)"?$', r"\1", text).strip()


Coercer = Callable[[Any], Any]

_FIELD_SPECS: Dict[str, Tuple[Coercer, Tuple[str, ...]]] = {
    "title": (_text, ("title",)),
    "author": (_text, ("author",)),
    "isbn": (to_isbn, ("isbn",)),
    "genre": (_text, ("genre",)),
    "pages": (to_int, ("pages", "number of pages", "numberofpages")),
    "format": (to_format, ("format",)),
    "narrator": (_text, ("narrator",)),
    "source": (_text, ("source",)),
    "price": (to_price, ("price",)),
    "currency": (to_currency, ("currency",)),
    "start_date": (to_date, ("start date", "startdate")),
    "end_date": (to_date, ("end date", "enddate", "date read", "dateread")),
    "rating": (to_rating, ("rating", "my rating", "myrating")),
    "did_not_finish": (to_bool, ("did not finish", "didnotfinish", "dnf")),
    "dnf_reason": (_text, ("dnf reason", "dnfreason")),
    "review": (_text, ("review", "my review", "myreview")),
    "author_instagram": (_text, ("author instagram", "authorinstagram")),
    "cover_url": (_text, ("cover url", "coverurl")),
    "review_drafted": (to_bool, ("review drafted", "reviewdrafted")),
    "posted_goodreads": (to_bool, ("posted goodreads", "postedgoodreads", "goodreads")),
    "posted_instagram": (to_bool, ("posted instagram", "postedinstagram", "instagram")),
    "posted_ig_bbr": (to_bool, ("posted ig bbr", "posted igbbr", "postedigbbr", "igbbr", "postedtwitterx")),
    "posted_blog": (to_bool, ("posted blog", "postedblog", "blog")),
    "posted_amazon": (to_bool, ("posted amazon", "postedamazon", "amazon")),
    "amazon_approved": (to_bool, ("amazon approved", "amazonapproved")),
    "date_added": (to_timestamp, ("date added", "dateadded")),
}

# normalised header -> (Book attribute, coercer)
HEADER_ALIASES: Dict[str, Tuple[str, Coercer]] = {
    alias: (attr, coercer)
    for attr, (coercer, aliases) in _FIELD_SPECS.items()
    for alias in aliases
}


def resolve_header(header: Any) -> Optional[str]:
    """Book attribute a column header maps to, or None if unrecognised."""
    entry = HEADER_ALIASES.get(normalize_header(header))
    return entry[0] if entry else None


def normalize_field(header: Any, raw_value: Any) -> Dict[str, Any]:
    """
    Coerce one raw CSV cell into a partial Book mapping.

    Unrecognised headers produce an empty dict rather than an error.
    """
    entry = HEADER_ALIASES.get(normalize_header(header))
    if entry is None:
        return {}
    attr, coercer = entry
    return {attr: coercer(raw_value)}


def normalize_record(record: Mapping[Any, Any]) -> Book:
    """Build a candidate Book from a header -> raw value mapping."""
    values: Dict[str, Any] = {}
    for header, raw_value in record.items():
        values.update(normalize_field(header, raw_value))
    return Book(**values)
