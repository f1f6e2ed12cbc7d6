"""
Command line entry point: ``python -m readinglog <command>``

Commands:
    import <csv>          Import books from a CSV export
    export <path>         Write the library as CSV
    stats [--year N]      Print the yearly dashboard
    goal <year> [target]  Show or set the reading goal for a year
    lookup <isbn>         Look a book up on Google Books
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import analytics
from .book_lookup import GoogleBooksLookup
from .config import Settings, get_settings, build_storage
from .exceptions import ReadingLogError
from .import_pipeline import ImportPipeline
from .library import LibraryRepository
from .utils.throttle import SequentialExecutor

logger = logging.getLogger(__name__)


def _build_lookup(settings: Settings, repository: LibraryRepository) -> GoogleBooksLookup:
    api_key = settings.google_books_api_key or repository.load_api_key() or None
    return GoogleBooksLookup(
        api_key=api_key,
        rate_limit=settings.api_rate_limit,
        timeout=settings.google_books_timeout,
    )


def _print_progress(current: int, total: int) -> None:
    print(f"   🖼️  Covers {current}/{total}", end="\r" if current < total else "\n")


def cmd_import(args, settings: Settings) -> int:
    storage = build_storage(settings)
    repository = LibraryRepository(storage)
    lookup = _build_lookup(settings, repository) if args.fetch_covers else None
    pipeline = ImportPipeline(
        storage,
        lookup=lookup,
        executor=SequentialExecutor(delay=settings.cover_delay),
    )

    csv_text = Path(args.csv).read_text(encoding="utf-8-sig")
    print(f"📊 Reading {args.csv}...")
    summary = pipeline.upload(csv_text)
    print(f"📚 {summary.unique_count} new, {summary.duplicate_count} already in library, "
          f"{len(summary.row_errors)} invalid rows")

    if args.include_duplicates and summary.duplicate_count:
        pipeline.select_all_duplicates()

    result = pipeline.run(fetch_covers=args.fetch_covers, on_progress=_print_progress)

    print("\n" + "=" * 60)
    print("🎉 IMPORT COMPLETE")
    print("=" * 60)
    print(f"✅ Added: {result.added}")
    print(f"⏭️  Skipped duplicates: {result.skipped}")
    print(f"❌ Errors: {result.errors}")
    if args.fetch_covers:
        print(f"🖼️  Covers found: {result.covers_found}")
    for error in result.row_errors:
        print(f"   • Row {error.row_index + 1}: {error.message}")

    if args.results:
        Path(args.results).write_text(pipeline.results_csv(), encoding="utf-8")
        print(f"📄 Results written to {args.results}")
    return 0


def cmd_export(args, settings: Settings) -> int:
    repository = LibraryRepository(build_storage(settings))
    Path(args.path).write_text(repository.export_csv(), encoding="utf-8")
    print(f"📄 Exported library to {args.path}")
    return 0


def cmd_stats(args, settings: Settings) -> int:
    repository = LibraryRepository(build_storage(settings))
    books = repository.load_books()
    year = args.year or analytics.available_years(books)[0]
    dashboard = analytics.year_dashboard(books, year, goal=repository.get_yearly_goal(year))

    totals = dashboard["totals"]
    print(f"📊 READING STATS {year}")
    print("=" * 60)
    print(f"📚 Books: {totals['count']}")
    print(f"📖 Pages: {totals['total_pages']:,} (avg {totals['average_pages']})")
    print(f"💰 Value: {totals['total_value']:.2f}")
    print(f"⏱️  Pace: {dashboard['reading_pace']} books/month")
    print(f"🚫 Did not finish: {dashboard['dnf']['total']} ({dashboard['dnf']['percentage']}%)")

    if dashboard["top_authors"]:
        print("\n✍️  Top authors:")
        for entry in dashboard["top_authors"]:
            print(f"   • {entry['author']}: {entry['count']}")
    if dashboard["top_genres"]:
        print("\n🏷️  Top genres:")
        for entry in dashboard["top_genres"]:
            print(f"   • {entry['genre']}: {entry['count']} ({entry['percentage']}%)")

    print("\n📅 By month:")
    print("   " + "  ".join(f"{m['month']} {m['count']}" for m in dashboard["by_month"]))

    goal = dashboard["goal"]
    if goal:
        print(f"\n🎯 Goal: {goal['books_read']}/{goal['target']} ({goal['percent']:.0f}%)"
              f"{' ✅' if goal['is_complete'] else ''}")
    return 0


def cmd_goal(args, settings: Settings) -> int:
    repository = LibraryRepository(build_storage(settings))
    if args.target is not None:
        goal = repository.set_yearly_goal(args.year, args.target)
        if goal is None:
            print(f"❌ Could not save goal for {args.year}")
            return 1
        print(f"🎯 Goal for {args.year} set to {goal.target} books")
        return 0

    goal = repository.get_yearly_goal(args.year)
    if goal is None:
        print(f"No reading goal set for {args.year}")
        return 0

    books_read = len(analytics.filter_by_year(repository.load_books(), args.year))
    progress = goal.progress(books_read)
    print(f"🎯 {args.year}: {progress['books_read']}/{progress['target']} books "
          f"({progress['percent']:.0f}%), {progress['remaining']} to go")
    print("✅ On track" if progress["is_on_track"] else "⚠️  Behind schedule")
    return 0


def cmd_lookup(args, settings: Settings) -> int:
    repository = LibraryRepository(build_storage(settings))
    metadata = _build_lookup(settings, repository).search_by_isbn(args.isbn)
    if metadata is None:
        print(f"❌ No book found for ISBN {args.isbn}")
        return 1

    print(f"📖 {metadata.title}")
    print(f"✍️  {metadata.author}")
    for label, value in (
        ("ISBN", metadata.isbn),
        ("Genre", metadata.genre),
        ("Pages", metadata.pages or None),
        ("Publisher", metadata.publisher),
        ("Published", metadata.published_date),
        ("Cover", metadata.cover_url),
    ):
        if value:
            print(f"   {label}: {value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="readinglog", description="Personal reading tracker")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import books from CSV")
    import_parser.add_argument("csv", help="CSV file to import")
    import_parser.add_argument("--include-duplicates", action="store_true",
                               help="Import books already in the library as new entries")
    import_parser.add_argument("--fetch-covers", action="store_true",
                               help="Look up missing covers on Google Books")
    import_parser.add_argument("--results", help="Write the per-row results CSV here")
    import_parser.set_defaults(func=cmd_import)

    export_parser = subparsers.add_parser("export", help="Export the library as CSV")
    export_parser.add_argument("path", help="Output CSV file")
    export_parser.set_defaults(func=cmd_export)

    stats_parser = subparsers.add_parser("stats", help="Show yearly statistics")
    stats_parser.add_argument("--year", type=int, help="Year to report (default: most recent)")
    stats_parser.set_defaults(func=cmd_stats)

    goal_parser = subparsers.add_parser("goal", help="Show or set a yearly reading goal")
    goal_parser.add_argument("year", type=int)
    goal_parser.add_argument("target", type=int, nargs="?")
    goal_parser.set_defaults(func=cmd_goal)

    lookup_parser = subparsers.add_parser("lookup", help="Look up a book by ISBN")
    lookup_parser.add_argument("isbn")
    lookup_parser.set_defaults(func=cmd_lookup)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        return args.func(args, settings)
    except (ReadingLogError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
