"""
Reading analytics over a book collection.

Every function here is pure: it takes a list of books, never mutates it, and
returns plain dicts/lists ready for a dashboard or JSON export. Dates are
resolved with the flexible parser, so books carrying only a legacy
``date_read`` or a US-style date still land in the right year and month.
"""

from collections import Counter
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional

from .models import Book, ReadingGoal, DEFAULT_FORMAT, PUBLISHING_FLAGS
from .utils.dates import resolve_book_date

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

UNKNOWN_AUTHOR = "Unknown"
UNCATEGORIZED = "Uncategorized"
UNKNOWN_SOURCE = "Unknown"

# Fewer books than this gives no meaningful first-half/second-half split
TRENDING_MIN_BOOKS = 6
TRENDING_LIMIT = 3


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a dashboard would: 0.5 goes up, not to even."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def _percentage(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def _author_key(book: Book) -> str:
    return book.author or UNKNOWN_AUTHOR


def _genre_key(book: Book) -> str:
    return book.genre or UNCATEGORIZED


# ------------------------- Filtering ------------------------- #

def filter_by_year(books: List[Book], year: int) -> List[Book]:
    """Books whose resolved date falls in ``year``; undated books are excluded."""
    result = []
    for book in books:
        resolved = resolve_book_date(book)
        if resolved and resolved.year == int(year):
            result.append(book)
    return result


def available_years(books: List[Book], today: Optional[date] = None) -> List[int]:
    """
    Distinct years across the collection, newest first.

    Falls back to the current year so a year picker always has an option.
    """
    years = set()
    for book in books:
        resolved = resolve_book_date(book)
        if resolved:
            years.add(resolved.year)

    if not years:
        years.add((today or date.today()).year)

    return sorted(years, reverse=True)


# ------------------------- Totals ------------------------- #

def totals(books: List[Book]) -> Dict[str, Any]:
    total_pages = sum(book.pages or 0 for book in books)
    return {
        "count": len(books),
        "total_pages": total_pages,
        "total_value": round(sum(book.price or 0 for book in books), 2),
        "average_pages": round_half_up(total_pages / len(books)) if books else 0,
    }


# ------------------------- Groupings ------------------------- #

def count_by(books: List[Book], key_fn: Callable[[Book], str]) -> Dict[str, int]:
    """Occurrences per key, in first-encountered order"""
    return dict(Counter(key_fn(book) for book in books))


def books_by_author(books: List[Book]) -> Dict[str, int]:
    return count_by(books, _author_key)


def books_by_genre(books: List[Book]) -> Dict[str, int]:
    return count_by(books, _genre_key)


def books_by_format(books: List[Book]) -> Dict[str, int]:
    return count_by(books, lambda book: book.format or DEFAULT_FORMAT)


def books_by_source(books: List[Book]) -> Dict[str, int]:
    return count_by(books, lambda book: book.source or UNKNOWN_SOURCE)


def top_authors(books: List[Book], n: int = 5) -> List[Dict[str, Any]]:
    """
    Most-read authors.

    Ties keep first-encountered order (Counter.most_common is stable).
    """
    counts = Counter(_author_key(book) for book in books)
    return [{"author": author, "count": count} for author, count in counts.most_common(n)]


def top_genres(books: List[Book], n: int = 5) -> List[Dict[str, Any]]:
    """Most-read genres with their share of the collection as a whole percent"""
    counts = Counter(_genre_key(book) for book in books)
    total = len(books)
    return [
        {"genre": genre, "count": count, "percentage": _percentage(count, total)}
        for genre, count in counts.most_common(n)
    ]


def by_month(books: List[Book]) -> List[Dict[str, Any]]:
    """Twelve buckets, Jan to Dec, counting books by resolved month."""
    counts = [0] * 12
    for book in books:
        resolved = resolve_book_date(book)
        if resolved:
            counts[resolved.month - 1] += 1
    return [{"month": name, "count": count} for name, count in zip(MONTH_NAMES, counts)]


def highest_rated(books: List[Book], n: int = 5) -> List[Book]:
    """Rated, finished books, best first."""
    rated = [book for book in books if book.rating > 0 and not book.did_not_finish]
    return sorted(rated, key=lambda book: book.rating, reverse=True)[:n]


def reading_pace(books: List[Book]) -> float:
    """Books per active month (a month with at least one book), one decimal."""
    if not books:
        return 0

    active_months = sum(1 for bucket in by_month(books) if bucket["count"] > 0)
    if active_months == 0:
        return 0

    return round_half_up(len(books) / active_months, 1)


# ------------------------- Trending ------------------------- #

def trending(books: List[Book], key_fn: Callable[[Book], str], label: str = "key") -> List[Dict[str, Any]]:
    """
    Keys read more in the second half of ``books`` than in the first.

    The collection is split at its midpoint in the order given, so callers
    wanting a time trend pass books sorted by date. Results carry the
    increase (``trend``) and the second-half count (``total``), biggest
    increase first, at most three.
    """
    if len(books) < TRENDING_MIN_BOOKS:
        return []

    midpoint = len(books) // 2
    first_half = Counter(key_fn(book) for book in books[:midpoint])
    second_half = Counter(key_fn(book) for book in books[midpoint:])

    rising = []
    for key, second_count in second_half.items():
        first_count = first_half.get(key, 0)
        if second_count > first_count:
            rising.append({label: key, "trend": second_count - first_count, "total": second_count})

    rising.sort(key=lambda entry: entry["trend"], reverse=True)
    return rising[:TRENDING_LIMIT]


def trending_authors(books: List[Book]) -> List[Dict[str, Any]]:
    return trending(books, _author_key, label="author")


def trending_genres(books: List[Book]) -> List[Dict[str, Any]]:
    return trending(books, _genre_key, label="genre")


# ------------------------- DNF and publishing ------------------------- #

def dnf_stats(books: List[Book]) -> Dict[str, Any]:
    dnf_books = [book for book in books if book.did_not_finish]
    return {
        "total": len(dnf_books),
        "percentage": _percentage(len(dnf_books), len(books)),
        "books": dnf_books,
    }


def publishing_stats(books: List[Book]) -> Dict[str, int]:
    """How many books have each review-publishing step ticked"""
    return {flag: sum(1 for book in books if getattr(book, flag)) for flag in PUBLISHING_FLAGS}


# ------------------------- Dashboard ------------------------- #

def sort_by_date(books: List[Book]) -> List[Book]:
    """Oldest first; undated books go last, keeping their relative order."""
    def sort_key(book: Book):
        resolved = resolve_book_date(book)
        return (resolved is None, resolved or date.min)

    return sorted(books, key=sort_key)


def year_dashboard(
    books: List[Book],
    year: int,
    goal: Optional[ReadingGoal] = None,
    top_n: int = 5,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Everything the yearly dashboard shows, in one dict.

    Args:
        books: Whole collection; filtered to ``year`` here
        year: Calendar year to report on
        goal: Reading goal for the year, if one is set
        top_n: Length of the top-authors/genres/rated lists
        today: Reference date for goal progress

    Returns:
        Dict of totals, rankings, monthly histogram, pace, trends, format
        and source breakdowns, DNF and publishing counts, and goal progress
        (None without a goal)
    """
    year_books = sort_by_date(filter_by_year(books, year))

    return {
        "year": int(year),
        "totals": totals(year_books),
        "top_authors": top_authors(year_books, top_n),
        "top_genres": top_genres(year_books, top_n),
        "by_month": by_month(year_books),
        "highest_rated": [book.to_dict() for book in highest_rated(year_books, top_n)],
        "reading_pace": reading_pace(year_books),
        "trending_authors": trending_authors(year_books),
        "trending_genres": trending_genres(year_books),
        "formats": books_by_format(year_books),
        "sources": books_by_source(year_books),
        "dnf": {**dnf_stats(year_books), "books": [book.title for book in year_books if book.did_not_finish]},
        "publishing": publishing_stats(year_books),
        "goal": goal.progress(len(year_books), today=today) if goal else None,
        "available_years": available_years(books, today=today),
    }
