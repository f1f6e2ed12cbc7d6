"""
Import/export pipeline stages: normalise, encode/decode, deduplicate and
enrich covers.
"""

from .normalizer import normalize_header, normalize_field, normalize_record, HEADER_ALIASES
from .csv_codec import CsvCodec, DecodedCsv, CSV_HEADERS, RESULT_COLUMN
from .dedupe import DuplicateResolver, DuplicatePartition, YearMatch, compare_years, is_same_entry
from .covers import CoverFetcher

__all__ = [
    "normalize_header",
    "normalize_field",
    "normalize_record",
    "HEADER_ALIASES",
    "CsvCodec",
    "DecodedCsv",
    "CSV_HEADERS",
    "RESULT_COLUMN",
    "DuplicateResolver",
    "DuplicatePartition",
    "YearMatch",
    "compare_years",
    "is_same_entry",
    "CoverFetcher",
]
