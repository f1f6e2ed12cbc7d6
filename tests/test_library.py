import json

import pytest

from readinglog.library import LibraryRepository
from readinglog.models import Book
from readinglog.storage import MemoryStorage, BOOKS_KEY, READING_GOALS_KEY


@pytest.fixture
def repo(storage):
    return LibraryRepository(storage)


def test_empty_library(repo):
    assert repo.load_books() == []
    assert repo.load_goals() == {}


def test_add_get_update_delete(repo):
    assert repo.add_book(Book(title="Dune", author="Frank Herbert"))
    book = repo.load_books()[0]
    assert book.id
    assert book.date_added

    assert repo.update_book(book.id, {"rating": 5, "id": "hijack"})
    updated = repo.get_book(book.id)
    assert updated.rating == 5
    assert updated.title == "Dune"

    assert repo.delete_book(book.id)
    assert repo.get_book(book.id) is None
    assert repo.delete_book(book.id) is False
    assert repo.update_book("missing", {"rating": 1}) is False


def test_save_rejects_books_without_identity(repo):
    with pytest.raises(ValueError, match="Missing author"):
        repo.save_books([Book(title="Dune", id="x")])


def test_insertion_order_is_preserved(repo):
    for title in ("C", "A", "B"):
        repo.add_book(Book(title=title, author="X"))
    assert [book.title for book in repo.load_books()] == ["C", "A", "B"]


def test_stored_form_uses_legacy_keys(storage, repo):
    repo.add_book(Book(title="Dune", author="Frank Herbert", end_date="2023-05-01", did_not_finish=True))
    stored = storage.load(BOOKS_KEY)[0]

    assert stored["endDate"] == "2023-05-01"
    assert stored["didNotFinish"] is True
    assert "dateRead" not in stored


def test_legacy_records_load(storage):
    storage.save(BOOKS_KEY, [{
        "id": "old-1", "title": "Dune", "author": "Frank Herbert", "dateRead": "2020-01-01",
        "pages": "412", "rating": None, "shelf": "favourites",
    }])
    book = LibraryRepository(storage).load_books()[0]

    assert book.completion_date == "2020-01-01"
    assert book.pages == 412
    assert book.rating == 0
    assert book.to_dict()["shelf"] == "favourites"


def test_check_duplicate(repo, dune):
    repo.save_books([dune])
    assert repo.check_duplicate("DUNE", "frank herbert", 2023).id == "dune-1"
    assert repo.check_duplicate("Dune", "Frank Herbert", 2024) is None


def test_json_export_and_import(repo, sample_books):
    repo.save_books(sample_books)
    exported = repo.export_json()

    other = LibraryRepository(MemoryStorage())
    assert other.import_json(exported)
    assert [book.id for book in other.load_books()] == [book.id for book in sample_books]


def test_import_json_rejects_bad_input(repo, dune):
    repo.save_books([dune])
    assert repo.import_json("{not json") is False
    assert repo.import_json(json.dumps({"title": "Dune"})) is False
    assert len(repo.load_books()) == 1


def test_import_json_skips_books_without_identity(repo):
    assert repo.import_json(json.dumps([{"title": "Dune", "author": "Frank Herbert"}, {"title": "Orphan"}]))
    assert [book.title for book in repo.load_books()] == ["Dune"]


def test_export_csv(repo, dune):
    repo.save_books([dune])
    lines = repo.export_csv().split("\n")
    assert lines[1].startswith("Dune,Frank Herbert,")


def test_yearly_goals(storage, repo):
    goal = repo.set_yearly_goal(2024, 30)
    assert goal.target == 30
    assert storage.load(READING_GOALS_KEY)["2024"]["target"] == 30

    repo.set_yearly_goal(2024, 40)
    assert repo.get_yearly_goal(2024).target == 40
    assert repo.get_yearly_goal(2023) is None


def test_malformed_goals_are_ignored(storage, repo):
    storage.save(READING_GOALS_KEY, [{"target": 10}])

    assert repo.load_goals() == {}
    assert repo.get_yearly_goal(2024) is None
    assert repo.set_yearly_goal(2024, 12).target == 12
    assert list(storage.load(READING_GOALS_KEY)) == ["2024"]


def test_goal_target_must_be_positive(repo):
    with pytest.raises(ValueError):
        repo.set_yearly_goal(2024, 0)


def test_api_key(repo):
    assert repo.load_api_key() == ""
    repo.save_api_key("abc")
    assert repo.load_api_key() == "abc"
    repo.clear_api_key()
    assert repo.load_api_key() == ""
