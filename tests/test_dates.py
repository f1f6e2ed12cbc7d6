from datetime import date

import pytest

from readinglog.models import Book
from readinglog.utils.dates import (
    parse_flexible_date,
    normalize_to_iso,
    resolve_book_date,
    extract_year,
    book_year,
)


@pytest.mark.parametrize("text, expected", [
    ("2024-03-04", date(2024, 3, 4)),
    ("2024-03-04T18:22:01.123Z", date(2024, 3, 4)),
    ("3/4/2024", date(2024, 3, 4)),
    ("03-04-2024", date(2024, 3, 4)),
    ("13/4/2024", date(2024, 4, 13)),
    (" 11/28/2024 ", date(2024, 11, 28)),
])
def test_parse_supported_formats(text, expected):
    assert parse_flexible_date(text) == expected


def test_us_reading_wins_over_european():
    # 3/4 is read as March 4th, never April 3rd
    assert parse_flexible_date("3/4/2024") == date(2024, 3, 4)


@pytest.mark.parametrize("text", ["", None, "not a date", "2024-02-30", "13/13/2024", "2024/03/04"])
def test_parse_rejects_invalid(text):
    assert parse_flexible_date(text) is None


def test_normalize_to_iso():
    assert normalize_to_iso("3/4/2024") == "2024-03-04"
    assert normalize_to_iso("2024-03-04") == "2024-03-04"
    assert normalize_to_iso("") == ""
    assert normalize_to_iso(None) == ""


def test_normalize_is_textual():
    assert normalize_to_iso("2024-03-04T10:00:00") == "2024-03-04"
    assert normalize_to_iso("12-5-2023") == "2023-12-05"
    assert normalize_to_iso("March 2024") == "March 2024"
    # No calendar check on the textual rewrite
    assert normalize_to_iso("2/30/2024") == "2024-02-30"


def test_resolve_book_date_field_order():
    book = Book(title="T", author="A", end_date="2024-05-01", start_date="2024-01-01")
    assert resolve_book_date(book) == date(2024, 5, 1)

    legacy = Book(title="T", author="A", date_read="2022-07-07", date_added="2024-01-01T00:00:00")
    assert resolve_book_date(legacy) == date(2022, 7, 7)


def test_resolve_book_date_skips_unparseable_fields():
    book = Book(title="T", author="A", end_date="sometime", date_added="2021-09-09T08:00:00")
    assert resolve_book_date(book) == date(2021, 9, 9)


def test_resolve_book_date_none_when_undated():
    assert resolve_book_date(Book(title="T", author="A")) is None


@pytest.mark.parametrize("text, expected", [
    ("2023-05-01", 2023),
    ("5/1/2023", 2023),
    ("5-1-2023", 2023),
    ("2023-05-01T00:00:00Z", 2023),
    ("May 2023", None),
    ("", None),
])
def test_extract_year(text, expected):
    assert extract_year(text) == expected


def test_book_year_falls_back_through_fields():
    assert book_year(Book(title="T", author="A", start_date="2020-02-02")) == 2020
    assert book_year(Book(title="T", author="A")) is None
