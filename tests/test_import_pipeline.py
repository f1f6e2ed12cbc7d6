import pytest

from readinglog.exceptions import CsvFormatError, EmptyImportError, InvalidStateError, PersistenceError
from readinglog.import_pipeline import ImportPipeline, ImportState, import_csv
from readinglog.library import LibraryRepository
from readinglog.models import Book
from readinglog.storage import MemoryStorage, BOOKS_KEY

from conftest import FakeLookup, FailingStorage

CSV_TEXT = (
    "Title,Author,Date Read,Pages\n"
    "Dune,Frank Herbert,5/1/2023,412\n"
    "Emma,Jane Austen,2024-02-10,474\n"
    "Piranesi,Susanna Clarke,,272\n"
)


@pytest.fixture
def library_with_dune(dune):
    return MemoryStorage({BOOKS_KEY: [dune.to_dict()]})


def test_three_candidates_one_missing_author(storage, fixed_clock):
    pipeline = ImportPipeline(storage, clock=fixed_clock)
    pipeline.stage([
        Book(title="Dune", author="Frank Herbert"),
        Book(title="Mystery", author=""),
        Book(title="Emma", author="Jane Austen"),
    ])

    result = pipeline.run()

    assert result.added == 2
    assert result.errors == 1
    assert result.row_errors[0].row_index == 1
    assert result.row_errors[0].message == "Missing author"

    stored = LibraryRepository(storage).load_books()
    assert [book.title for book in stored] == ["Dune", "Emma"]
    assert pipeline.state is ImportState.COMPLETE


def test_imported_books_get_ids_and_default_dates(storage, fixed_clock):
    pipeline = ImportPipeline(storage, clock=fixed_clock)
    pipeline.stage([
        Book(title="A", author="X"),
        Book(title="B", author="X", start_date="2024-01-01"),
        Book(title="C", author="X", end_date="2024-03-01", date_added="2024-02-01"),
        Book(title="D", author="X", date_read="2022-02-02"),
    ])
    pipeline.run()

    a, b, c, d = LibraryRepository(storage).load_books()
    assert a.id and b.id and a.id != b.id
    assert (a.start_date, a.end_date) == ("2024-06-15", "2024-06-15")
    assert a.date_added == "2024-06-15T09:30:00"
    assert (b.start_date, b.end_date) == ("2024-01-01", "2024-01-01")
    assert (c.start_date, c.end_date, c.date_added) == ("2024-03-01", "2024-03-01", "2024-02-01")
    assert (d.start_date, d.end_date) == ("2022-02-02", "2022-02-02")


def test_upload_moves_to_review(library_with_dune):
    pipeline = ImportPipeline(library_with_dune)
    summary = pipeline.upload(CSV_TEXT)

    assert pipeline.state is ImportState.REVIEW
    assert summary.unique_count == 2
    assert summary.duplicate_count == 1
    assert summary.duplicates[0].title == "Dune"


def test_unselected_duplicates_are_skipped(library_with_dune):
    pipeline = ImportPipeline(library_with_dune)
    pipeline.upload(CSV_TEXT)

    result = pipeline.run()

    assert (result.added, result.skipped, result.errors) == (2, 1, 0)
    assert len(LibraryRepository(library_with_dune).load_books()) == 3


def test_selected_duplicates_are_imported(library_with_dune):
    pipeline = ImportPipeline(library_with_dune)
    pipeline.upload(CSV_TEXT)
    pipeline.toggle_duplicate(0)

    result = pipeline.run()

    assert (result.added, result.skipped) == (3, 0)
    titles = [book.title for book in LibraryRepository(library_with_dune).load_books()]
    assert titles.count("Dune") == 2


def test_select_all_duplicates_toggles(library_with_dune):
    pipeline = ImportPipeline(library_with_dune)
    pipeline.upload(CSV_TEXT)

    pipeline.select_all_duplicates()
    assert pipeline.selected_duplicates == {0}
    pipeline.select_all_duplicates()
    assert pipeline.selected_duplicates == set()

    with pytest.raises(IndexError):
        pipeline.toggle_duplicate(5)


def test_upload_records_rows_without_identity(storage):
    pipeline = ImportPipeline(storage)
    summary = pipeline.upload("Title,Author\nDune,Frank Herbert\nNo Author,\n,Anonymous\n")

    assert summary.unique_count == 1
    assert [(e.row_index, e.message) for e in summary.row_errors] == [(1, "Missing author"), (2, "Missing title")]

    result = pipeline.run()
    assert (result.added, result.errors) == (1, 2)


def test_results_csv_marks_each_row(storage):
    pipeline = ImportPipeline(storage)
    pipeline.upload("Title,Author,Shelf\nDune,Frank Herbert,read\nNo Author,,read\n")
    pipeline.run()

    lines = pipeline.results_csv().split("\n")
    assert lines[0] == "Result,Title,Author,Shelf"
    assert lines[1] == "Success,Dune,Frank Herbert,read"
    assert lines[2] == "Error: Missing author,No Author,,read"


def test_results_csv_keeps_original_header(storage):
    pipeline = ImportPipeline(storage)
    pipeline.upload("Title,Author,\nDune,Frank Herbert,\nEmma,,\n")
    pipeline.run()

    lines = pipeline.results_csv().split("\n")
    assert lines[:3] == [
        "Result,Title,Author,",
        "Success,Dune,Frank Herbert,",
        "Error: Missing author,Emma,,",
    ]


def test_results_csv_needs_completed_csv_import(storage):
    pipeline = ImportPipeline(storage)
    with pytest.raises(InvalidStateError):
        pipeline.results_csv()

    pipeline.stage([Book(title="Dune", author="Frank Herbert")])
    pipeline.run()
    with pytest.raises(InvalidStateError):
        pipeline.results_csv()


def test_format_error_leaves_state_unchanged(storage):
    pipeline = ImportPipeline(storage)
    with pytest.raises(CsvFormatError):
        pipeline.upload('Title,Author\n"Dune,Frank Herbert\n')
    assert pipeline.state is ImportState.UPLOAD


@pytest.mark.parametrize("text", ["Title,Author\n", "Title,Author\n,\nNo Author,\n"])
def test_nothing_importable(storage, text):
    pipeline = ImportPipeline(storage)
    with pytest.raises(EmptyImportError):
        pipeline.upload(text)
    assert pipeline.state is ImportState.UPLOAD


def test_persistence_failure_returns_to_review():
    storage = FailingStorage()
    pipeline = ImportPipeline(storage)
    pipeline.upload(CSV_TEXT)

    with pytest.raises(PersistenceError):
        pipeline.run()

    assert pipeline.state is ImportState.REVIEW
    assert storage.load(BOOKS_KEY) is None

    storage.fail_saves = False
    result = pipeline.run()
    assert result.added == 3
    assert len(storage.load(BOOKS_KEY)) == 3


def test_storage_exception_becomes_persistence_error(storage, monkeypatch):
    def explode(key, value):
        raise OSError("disk full")

    pipeline = ImportPipeline(storage)
    pipeline.upload(CSV_TEXT)
    monkeypatch.setattr(storage, "save", explode)

    with pytest.raises(PersistenceError):
        pipeline.run()
    assert pipeline.state is ImportState.REVIEW


def test_cover_fetching_is_sequential_with_delay(storage, executor, sleeps):
    lookup = FakeLookup(covers={"Dune": "https://covers/dune.jpg"}, failing={"Emma"})
    pipeline = ImportPipeline(storage, lookup=lookup, executor=executor)
    pipeline.stage([
        Book(title="Dune", author="Frank Herbert"),
        Book(title="Emma", author="Jane Austen"),
        Book(title="Has Cover", author="X", cover_url="https://covers/own.jpg"),
        Book(title="Piranesi", author="Susanna Clarke"),
    ])
    progress = []

    result = pipeline.run(fetch_covers=True, on_progress=lambda current, total: progress.append((current, total)))

    assert lookup.calls == [("Dune", "Frank Herbert"), ("Emma", "Jane Austen"), ("Piranesi", "Susanna Clarke")]
    assert progress == [(1, 3), (2, 3), (3, 3)]
    assert sleeps == [0.1, 0.1]
    assert result.added == 4
    assert result.covers_found == 1

    covers = {book.title: book.cover_url for book in LibraryRepository(storage).load_books()}
    assert covers == {
        "Dune": "https://covers/dune.jpg",
        "Emma": "",
        "Has Cover": "https://covers/own.jpg",
        "Piranesi": "",
    }


def test_covers_not_fetched_unless_requested(storage, executor):
    lookup = FakeLookup(covers={"Dune": "https://covers/dune.jpg"})
    pipeline = ImportPipeline(storage, lookup=lookup, executor=executor)
    pipeline.stage([Book(title="Dune", author="Frank Herbert")])

    result = pipeline.run()

    assert lookup.calls == []
    assert result.covers_found == 0


def test_wrong_state_operations(storage):
    pipeline = ImportPipeline(storage)
    with pytest.raises(InvalidStateError):
        pipeline.run()
    with pytest.raises(InvalidStateError):
        pipeline.abort()

    pipeline.upload(CSV_TEXT)
    with pytest.raises(InvalidStateError):
        pipeline.upload(CSV_TEXT)


def test_abort_and_reset(storage):
    pipeline = ImportPipeline(storage)
    pipeline.upload(CSV_TEXT)
    pipeline.abort()

    assert pipeline.state is ImportState.UPLOAD
    assert storage.load(BOOKS_KEY) is None

    pipeline.upload(CSV_TEXT)
    pipeline.run()
    pipeline.reset()
    assert pipeline.state is ImportState.UPLOAD
    assert pipeline.result is None


def test_import_csv_convenience(library_with_dune):
    pipeline = import_csv(CSV_TEXT, library_with_dune, include_duplicates=True)

    assert pipeline.result.added == 3
    assert pipeline.result.skipped == 0
