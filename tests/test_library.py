import pytest

from library_tracker.book import Book
from library_tracker.borrower import Borrower
from library_tracker.errors import NotFoundError, OutOfStockError, ValidationError
from library_tracker.library import FailureReason, Library


def test_empty_library_lists_nothing():
    lib = Library()
    assert list(lib.list_books()) == []
    assert list(lib.list_borrowers()) == []
    assert list(lib.list_lending_records()) == []
    assert len(lib.list_books()) == 0


def test_add_list_and_find(lib):
    lib.add_book(Book("Dune", "Frank Herbert", "111", 2))
    lib.add_book(Book("Emma", "Jane Austen", "222", 1))

    assert [b.isbn for b in lib.list_books()] == ["111", "222"]
    assert lib.find_book("dune").isbn == "111"
    assert lib.find_book("JANE AUSTEN").isbn == "222"
    assert lib.find_book("222").title == "Emma"
    assert lib.find_book("nothing like this") is None


def test_find_book_isbn_is_exact():
    lib = Library()
    lib.add_book(Book("Title", "Author", "abc-1", 1))
    assert lib.find_book("ABC-1") is None
    assert lib.find_book("abc-1") is not None


def test_list_views_are_restartable_and_live(lib):
    view = lib.list_books()
    assert list(view) == []
    lib.add_book(Book("Dune", "Frank Herbert", "111", 2))
    assert [b.title for b in view] == ["Dune"]
    assert [b.title for b in view] == ["Dune"]
    assert len(view) == 1


def test_duplicate_isbn_allowed_first_match_wins(lib):
    lib.add_book(Book("First", "Author", "111", 1))
    lib.add_book(Book("Second", "Author", "111", 5))

    assert len(lib.list_books()) == 2
    assert lib.find_book("111").title == "First"

    assert lib.borrow_book("111", "B1").success
    quantities = [b.quantity for b in lib.list_books()]
    assert quantities == [0, 5]


def test_callers_cannot_mutate_stored_books(lib):
    book = Book("Dune", "Frank Herbert", "111", 1)
    lib.add_book(book)
    book.sell_copy()

    assert lib.find_book("111").quantity == 1


def test_remove_book(lib):
    lib.add_book(Book("Test", "Author", "123", 1))
    lib.add_book(Book("Copy", "Author", "123", 1))
    assert lib.remove_book("123") is True
    assert len(lib.list_books()) == 0
    assert lib.remove_book("123") is False


def test_remove_missing_book_is_noop(lib):
    lib.add_book(Book("Test", "Author", "123", 1))
    assert lib.remove_book("999") is False
    assert len(lib.list_books()) == 1


def test_remove_book_drops_its_lending_record(lib):
    lib.add_book(Book("Test", "Author", "123", 2))
    lib.borrow_book("123", "B1")
    lib.remove_book("123")
    assert list(lib.list_lending_records()) == []


def test_borrowers(lib):
    lib.add_borrower(Borrower("Grace Hopper", "B2"))
    assert [b.id for b in lib.list_borrowers()] == ["B1", "B2"]
    assert lib.find_borrower("B2").name == "Grace Hopper"
    assert lib.remove_borrower("B2") is True
    assert lib.remove_borrower("B2") is False
    assert lib.find_borrower("B2") is None


def test_borrow_then_return_round_trip(lib):
    lib.add_book(Book("Dune", "Herbert", "111", 2))

    outcome = lib.borrow_book("111", "B1")
    assert outcome.success
    assert outcome.book.quantity == 1
    assert lib.find_book("111").quantity == 1
    assert lib.is_lent("111")
    records = list(lib.list_lending_records())
    assert len(records) == 1
    assert (records[0].book.isbn, records[0].borrower.id) == ("111", "B1")

    outcome = lib.return_book("111")
    assert outcome.success
    assert outcome.borrower.id == "B1"
    assert lib.find_book("111").quantity == 2
    assert not lib.is_lent("111")
    assert list(lib.list_lending_records()) == []


def test_borrow_out_of_stock_changes_nothing(lib):
    lib.add_book(Book("Foo", "Bar", "222", 1))
    lib.buy_book("222", "B1")

    outcome = lib.borrow_book("222", "B1")
    assert not outcome
    assert outcome.reason == FailureReason.OUT_OF_STOCK
    assert isinstance(outcome.error, OutOfStockError)
    assert lib.find_book("222").quantity == 0
    assert not lib.is_lent("222")


@pytest.mark.parametrize("isbn, borrower_id, reason", [
    ("999", "B1", FailureReason.BOOK_NOT_FOUND),
    ("111", "nobody", FailureReason.BORROWER_NOT_FOUND),
])
def test_borrow_missing_book_or_borrower(lib, isbn, borrower_id, reason):
    lib.add_book(Book("Dune", "Herbert", "111", 2))
    outcome = lib.borrow_book(isbn, borrower_id)
    assert not outcome.success
    assert outcome.reason == reason
    assert isinstance(outcome.error, NotFoundError)
    assert lib.find_book("111").quantity == 2


def test_borrow_uses_isbn_not_title(lib):
    lib.add_book(Book("Dune", "Herbert", "111", 2))
    assert lib.borrow_book("Dune", "B1").reason == FailureReason.BOOK_NOT_FOUND


def test_second_borrow_of_same_book_overwrites_record(lib):
    lib.add_borrower(Borrower("Grace Hopper", "B2"))
    lib.add_book(Book("Dune", "Herbert", "111", 3))

    lib.borrow_book("111", "B1")
    lib.borrow_book("111", "B2")

    assert lib.find_book("111").quantity == 1
    records = list(lib.list_lending_records())
    assert [r.borrower.id for r in records] == ["B2"]

    assert lib.return_book("111").success
    assert lib.find_book("111").quantity == 2
    assert lib.return_book("111").reason == FailureReason.NOT_LENT


def test_return_requires_active_record(lib):
    lib.add_book(Book("Dune", "Herbert", "111", 2))

    outcome = lib.return_book("111")
    assert outcome.reason == FailureReason.NOT_LENT
    assert lib.find_book("111").quantity == 2

    assert lib.return_book("999").reason == FailureReason.BOOK_NOT_FOUND


def test_return_after_borrower_removed(lib):
    lib.add_book(Book("Dune", "Herbert", "111", 1))
    lib.borrow_book("111", "B1")
    lib.remove_borrower("B1")

    outcome = lib.return_book("111")
    assert outcome.success
    assert outcome.borrower.id == "B1"


def test_buy_until_out_of_stock(lib):
    lib.add_book(Book("Foo", "Bar", "222", 1))

    first = lib.buy_book("222", "B1")
    assert first.success
    assert (first.book.quantity, first.book.sold) == (0, 1)

    second = lib.buy_book("222", "B1")
    assert not second.success
    assert isinstance(second.error, OutOfStockError)
    info = lib.find_book("222")
    assert (info.quantity, info.sold) == (0, 1)


def test_buy_requires_registered_borrower(lib):
    lib.add_book(Book("Foo", "Bar", "222", 1))
    outcome = lib.buy_book("222", "nobody")
    assert outcome.reason == FailureReason.BORROWER_NOT_FOUND
    assert lib.find_book("222").sold == 0


def test_restock(lib):
    lib.add_book(Book("Foo", "Bar", "222", 1))
    lib.buy_book("222", "B1")

    assert lib.restock_book("222", 3).book.quantity == 3
    assert lib.restock_book("999", 3).reason == FailureReason.BOOK_NOT_FOUND
    with pytest.raises(ValidationError):
        lib.restock_book("222", 0)
    assert lib.find_book("222").quantity == 3


def test_snapshot_round_trip(lib):
    lib.add_borrower(Borrower("Grace Hopper", "B2"))
    lib.add_book(Book("Dune", "Herbert", "111", 2))
    lib.add_book(Book("Foo", "Bar", "222", 1))
    lib.borrow_book("222", "B2")
    lib.buy_book("111", "B1")

    restored = Library.from_dict(lib.to_dict())

    assert list(restored.list_books()) == list(lib.list_books())
    assert list(restored.list_borrowers()) == list(lib.list_borrowers())
    assert list(restored.list_lending_records()) == list(lib.list_lending_records())
    assert restored.return_book("222").success


def test_from_dict_rejects_dangling_record():
    data = {"books": [], "borrowers": [], "lending_records": [{"book_index": 0, "borrower": {"name": "A", "id": "1"}}]}
    with pytest.raises(ValidationError):
        Library.from_dict(data)


def test_return_while_iterating_lending_records(lib):
    lib.add_book(Book("A", "Author", "1", 1))
    lib.add_book(Book("Z", "Author", "2", 1))
    lib.borrow_book("1", "B1")
    lib.borrow_book("2", "B1")

    seen = []
    for record in lib.list_lending_records():
        seen.append(record.book.isbn)
        lib.return_book("2")

    assert seen == ["1", "2"]
    assert [r.book.isbn for r in lib.list_lending_records()] == ["1"]


def test_find_book_ignores_case_without_folding():
    lib = Library()
    lib.add_book(Book("Straße", "Author", "1", 1))
    assert lib.find_book("STRASSE") is None
    assert lib.find_book("straße").isbn == "1"
