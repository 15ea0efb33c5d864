from __future__ import annotations

from dataclasses import dataclass

from library_tracker.errors import OutOfStockError
from library_tracker.validators import QuantityValidator, TextValidator


@dataclass(frozen=True)
class BookInfo:
    """Read-only view of a book as it stood when the view was taken."""

    title: str
    author: str
    isbn: str
    quantity: int
    sold: int

    def __str__(self) -> str:
        return (f"Title: {self.title}, Author: {self.author}, ISBN: {self.isbn}, "
                f"Quantity: {self.quantity}, Sold: {self.sold}")

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "quantity": self.quantity,
            "sold": self.sold,
        }


class Book:
    """A single catalog title with its available and sold copy counts."""

    def __init__(self, title: str, author: str, isbn: str, quantity: int) -> None:
        self.title = TextValidator.require(title, "Title")
        self.author = TextValidator.require(author, "Author")
        self.isbn = TextValidator.require(isbn, "ISBN")
        self._quantity = QuantityValidator.require_positive(quantity)
        self._sold = 0

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def sold(self) -> int:
        return self._sold

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return str(self.snapshot())

    def __repr__(self) -> str:
        return f"Book(title={self.title!r}, isbn={self.isbn!r}, quantity={self._quantity}, sold={self._sold})"

    # ------------------------- Stock changes ------------------------- #
    def sell_copy(self) -> None:
        """Sell one copy: quantity goes down and sold goes up, or nothing changes."""
        if self._quantity <= 0:
            raise OutOfStockError("Book is out of stock.")
        self._quantity -= 1
        self._sold += 1

    def lend_copy(self) -> None:
        if self._quantity <= 0:
            raise OutOfStockError("Book is out of stock.")
        self._quantity -= 1

    def return_copy(self) -> None:
        self._quantity += 1

    def restock(self, amount: int) -> None:
        self._quantity += QuantityValidator.require_positive(amount, "Restock amount")

    # ------------------------- Conversion ------------------------- #
    def snapshot(self) -> BookInfo:
        return BookInfo(self.title, self.author, self.isbn, self._quantity, self._sold)

    def copy(self) -> "Book":
        return Book.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return self.snapshot().to_dict()

    @staticmethod
    def from_dict(data: dict) -> "Book":
        """Rebuild a book from stored state.

        Unlike the constructor this accepts a quantity of zero, since a book
        that has been sold out or fully lent is still part of the catalog.
        """
        book = Book.__new__(Book)
        book.title = TextValidator.require(data.get("title"), "Title")
        book.author = TextValidator.require(data.get("author"), "Author")
        book.isbn = TextValidator.require(data.get("isbn"), "ISBN")
        book._quantity = QuantityValidator.require_non_negative(data.get("quantity"), "Quantity")
        book._sold = QuantityValidator.require_non_negative(data.get("sold", 0), "Sold")
        return book
