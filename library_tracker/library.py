import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from library_tracker.book import Book, BookInfo
from library_tracker.borrower import Borrower
from library_tracker.errors import LibraryError, NotFoundError, OutOfStockError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")


class FailureReason(str, Enum):
    BOOK_NOT_FOUND = "book_not_found"
    BORROWER_NOT_FOUND = "borrower_not_found"
    OUT_OF_STOCK = "out_of_stock"
    NOT_LENT = "not_lent"


@dataclass(frozen=True)
class LendingRecord:
    """An outstanding loan of one book to one borrower."""

    book: BookInfo
    borrower: Borrower

    def __str__(self) -> str:
        return f"{self.book.title} (ISBN: {self.book.isbn}) -> {self.borrower.name} (ID: {self.borrower.id})"


@dataclass(frozen=True)
class LendingOutcome:
    """Result of a borrow, return, buy or restock request."""

    success: bool
    message: str
    reason: Optional[FailureReason] = None
    book: Optional[BookInfo] = None
    borrower: Optional[Borrower] = None

    @property
    def error(self) -> Optional[LibraryError]:
        """The typed error matching a failed outcome, or None on success."""
        if self.success:
            return None
        if self.reason == FailureReason.OUT_OF_STOCK:
            return OutOfStockError(self.message)
        return NotFoundError(self.message)

    def __bool__(self) -> bool:
        return self.success


class EntityView(Generic[T, V]):
    """Lazy, restartable, insertion-ordered view over one of the library's collections."""

    def __init__(self, source: Callable[[], List[T]], convert: Callable[[T], V]) -> None:
        self._source = source
        self._convert = convert

    def __iter__(self) -> Iterator[V]:
        for item in list(self._source()):
            yield self._convert(item)

    def __len__(self) -> int:
        return len(self._source())

    def __bool__(self) -> bool:
        return len(self) > 0


class Library:
    """Owns the catalog, the borrower roster and the active lending records."""

    def __init__(self) -> None:
        self._books: List[Book] = []
        self._borrowers: List[Borrower] = []
        # Keyed by book identity: one active record per catalog entry
        self._lending: Dict[Book, Borrower] = {}

    # ------------------------- Catalog ------------------------- #
    def add_book(self, book: Book) -> BookInfo:
        """Add a copy of ``book`` to the catalog. Duplicate ISBNs are allowed."""
        stored = book.copy()
        self._books.append(stored)
        logger.info(f"Book added: {stored.title} (ISBN: {stored.isbn}, quantity: {stored.quantity})")
        return stored.snapshot()

    def remove_book(self, isbn: str) -> bool:
        """Remove every book with this ISBN. Returns False when nothing matched."""
        doomed = [b for b in self._books if b.isbn == isbn]
        if not doomed:
            logger.info(f"Remove skipped, no book with ISBN {isbn}")
            return False
        for book in doomed:
            self._lending.pop(book, None)
        self._books = [b for b in self._books if b.isbn != isbn]
        logger.info(f"Removed {len(doomed)} book(s) with ISBN {isbn}")
        return True

    def find_book(self, query: str) -> Optional[BookInfo]:
        """First book whose title or author matches ignoring case, or whose ISBN matches exactly."""
        book = self._search(query)
        return book.snapshot() if book else None

    def list_books(self) -> EntityView[Book, BookInfo]:
        return EntityView(lambda: self._books, Book.snapshot)

    # ------------------------- Borrowers ------------------------- #
    def add_borrower(self, borrower: Borrower) -> None:
        self._borrowers.append(borrower)
        logger.info(f"Borrower registered: {borrower.name} (ID: {borrower.id})")

    def remove_borrower(self, borrower_id: str) -> bool:
        before = len(self._borrowers)
        self._borrowers = [b for b in self._borrowers if b.id != borrower_id]
        removed = before - len(self._borrowers)
        if removed:
            logger.info(f"Removed {removed} borrower(s) with ID {borrower_id}")
        return removed > 0

    def find_borrower(self, borrower_id: str) -> Optional[Borrower]:
        return next((b for b in self._borrowers if b.id == borrower_id), None)

    def list_borrowers(self) -> EntityView[Borrower, Borrower]:
        return EntityView(lambda: self._borrowers, lambda borrower: borrower)

    # ------------------------- Lending ------------------------- #
    def borrow_book(self, isbn: str, borrower_id: str) -> LendingOutcome:
        book = self._book_by_isbn(isbn)
        borrower = self.find_borrower(borrower_id)
        if book is None:
            return self._reject(FailureReason.BOOK_NOT_FOUND, f"Book with ISBN {isbn} not found.", borrower=borrower)
        if borrower is None:
            return self._reject(FailureReason.BORROWER_NOT_FOUND, f"Borrower with ID {borrower_id} not found.", book)
        if book.quantity <= 0:
            return self._reject(FailureReason.OUT_OF_STOCK, "Book is out of stock.", book, borrower)

        book.lend_copy()
        previous = self._lending.get(book)
        self._lending[book] = borrower
        if previous is not None and previous.id != borrower.id:
            logger.warning(f"Lending record for ISBN {isbn} moved from {previous.id} to {borrower.id}")
        logger.info(f"Book borrowed: ISBN {isbn} by {borrower.id}, {book.quantity} left")
        return LendingOutcome(True, "Book borrowed successfully!", book=book.snapshot(), borrower=borrower)

    def return_book(self, isbn: str) -> LendingOutcome:
        book = self._book_by_isbn(isbn)
        if book is None:
            return self._reject(FailureReason.BOOK_NOT_FOUND, f"Book with ISBN {isbn} not found.")
        if book not in self._lending:
            return self._reject(FailureReason.NOT_LENT, f"Book with ISBN {isbn} is not borrowed.", book)

        borrower = self._lending.pop(book)
        book.return_copy()
        logger.info(f"Book returned: ISBN {isbn} from {borrower.id}, {book.quantity} available")
        return LendingOutcome(True, "Book returned successfully!", book=book.snapshot(), borrower=borrower)

    def buy_book(self, isbn: str, borrower_id: str) -> LendingOutcome:
        book = self._book_by_isbn(isbn)
        borrower = self.find_borrower(borrower_id)
        if book is None:
            return self._reject(FailureReason.BOOK_NOT_FOUND, f"Book with ISBN {isbn} not found.", borrower=borrower)
        if borrower is None:
            return self._reject(FailureReason.BORROWER_NOT_FOUND, f"Borrower with ID {borrower_id} not found.", book)

        try:
            book.sell_copy()
        except OutOfStockError as e:
            return self._reject(FailureReason.OUT_OF_STOCK, str(e), book, borrower)
        logger.info(f"Book sold: ISBN {isbn} to {borrower.id}, total sold {book.sold}")
        return LendingOutcome(True, "Book purchased successfully!", book=book.snapshot(), borrower=borrower)

    def restock_book(self, isbn: str, amount: int) -> LendingOutcome:
        """Add ``amount`` copies to the first book with this ISBN.

        Raises ValidationError when ``amount`` is not a positive integer.
        """
        book = self._book_by_isbn(isbn)
        if book is None:
            return self._reject(FailureReason.BOOK_NOT_FOUND, f"Book with ISBN {isbn} not found.")
        book.restock(amount)
        logger.info(f"Book restocked: ISBN {isbn} +{amount}, {book.quantity} available")
        return LendingOutcome(True, "Book restocked successfully!", book=book.snapshot())

    def is_lent(self, isbn: str) -> bool:
        book = self._book_by_isbn(isbn)
        return book is not None and book in self._lending

    def list_lending_records(self) -> EntityView[Tuple[Book, Borrower], LendingRecord]:
        return EntityView(
            lambda: list(self._lending.items()),
            lambda pair: LendingRecord(pair[0].snapshot(), pair[1]),
        )

    # ------------------------- Snapshot ------------------------- #
    def to_dict(self) -> dict:
        """Full state of the library. Lending records point at books by catalog position."""
        position = {id(book): index for index, book in enumerate(self._books)}
        return {
            "books": [book.to_dict() for book in self._books],
            "borrowers": [borrower.to_dict() for borrower in self._borrowers],
            "lending_records": [
                {"book_index": position[id(book)], "borrower": borrower.to_dict()}
                for book, borrower in self._lending.items()
            ],
        }

    @staticmethod
    def from_dict(data: dict) -> "Library":
        library = Library()
        library._books = [Book.from_dict(item) for item in data.get("books", [])]
        library._borrowers = [Borrower.from_dict(item) for item in data.get("borrowers", [])]
        for record in data.get("lending_records", []):
            index = record.get("book_index")
            if not isinstance(index, int) or not 0 <= index < len(library._books):
                raise ValidationError(f"Lending record points at unknown book position {index!r}.")
            library._lending[library._books[index]] = Borrower.from_dict(record.get("borrower") or {})
        return library

    # ------------------------- Utilities ------------------------- #
    def _search(self, query: str) -> Optional[Book]:
        if query is None:
            return None
        lowered = query.lower()
        for book in self._books:
            if book.title.lower() == lowered or book.author.lower() == lowered or book.isbn == query:
                return book
        return None

    def _book_by_isbn(self, isbn: str) -> Optional[Book]:
        return next((b for b in self._books if b.isbn == isbn), None)

    @staticmethod
    def _reject(reason: FailureReason, message: str, book: Optional[Book] = None,
                borrower: Optional[Borrower] = None) -> LendingOutcome:
        logger.info(f"Request rejected ({reason.value}): {message}")
        return LendingOutcome(
            success=False,
            message=message,
            reason=reason,
            book=book.snapshot() if book else None,
            borrower=borrower,
        )
