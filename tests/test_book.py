import pytest

from library_tracker.book import Book, BookInfo
from library_tracker.borrower import Borrower
from library_tracker.errors import OutOfStockError, ValidationError


@pytest.mark.parametrize("title, author, isbn, quantity", [
    ("Dune", "Frank Herbert", "111", 1),
    ("Ulysses", "James Joyce", "9780199535675", 12),
])
def test_valid_book_starts_with_nothing_sold(title, author, isbn, quantity):
    book = Book(title, author, isbn, quantity)
    assert book.quantity == quantity
    assert book.sold == 0
    assert (book.title, book.author, book.isbn) == (title, author, isbn)


@pytest.mark.parametrize("title, author, isbn, quantity, message", [
    ("", "Author", "111", 1, "Title cannot be null or empty."),
    ("   ", "Author", "111", 1, "Title cannot be null or empty."),
    ("Title", "", "111", 1, "Author cannot be null or empty."),
    ("Title", "Author", " ", 1, "ISBN cannot be null or empty."),
    ("Title", "Author", "111", 0, "Quantity must be a positive integer."),
    ("Title", "Author", "111", -3, "Quantity must be a positive integer."),
    (None, "Author", "111", 1, "Title cannot be null or empty."),
])
def test_invalid_book_is_rejected(title, author, isbn, quantity, message):
    with pytest.raises(ValidationError, match=message):
        Book(title, author, isbn, quantity)


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        Book("Title", "Author", "111", True)


def test_sell_copy_until_out_of_stock():
    book = Book("Foo", "Bar", "222", 1)
    book.sell_copy()
    assert (book.quantity, book.sold) == (0, 1)

    with pytest.raises(OutOfStockError, match="Book is out of stock."):
        book.sell_copy()
    assert (book.quantity, book.sold) == (0, 1)


def test_quantity_cannot_be_assigned_directly():
    book = Book("Foo", "Bar", "222", 1)
    with pytest.raises(AttributeError):
        book.quantity = 10


def test_restock_requires_positive_amount():
    book = Book("Foo", "Bar", "222", 1)
    book.restock(4)
    assert book.quantity == 5
    with pytest.raises(ValidationError):
        book.restock(0)
    assert book.quantity == 5


def test_snapshot_is_frozen():
    info = Book("Foo", "Bar", "222", 2).snapshot()
    assert info == BookInfo("Foo", "Bar", "222", 2, 0)
    with pytest.raises(AttributeError):
        info.quantity = 0


def test_from_dict_accepts_sold_out_state():
    book = Book.from_dict({"title": "Foo", "author": "Bar", "isbn": "222", "quantity": 0, "sold": 3})
    assert (book.quantity, book.sold) == (0, 3)

    with pytest.raises(ValidationError):
        Book.from_dict({"title": "Foo", "author": "Bar", "isbn": "222", "quantity": -1, "sold": 0})


def test_borrower_validation():
    borrower = Borrower("Ada Lovelace", "B1")
    assert str(borrower) == "Name: Ada Lovelace, ID: B1"

    with pytest.raises(ValidationError, match="Name cannot be null or empty."):
        Borrower("  ", "B1")
    with pytest.raises(ValidationError, match="ID cannot be null or empty."):
        Borrower("Ada", "")


def test_borrower_is_immutable():
    borrower = Borrower("Ada Lovelace", "B1")
    with pytest.raises(AttributeError):
        borrower.id = "B2"
