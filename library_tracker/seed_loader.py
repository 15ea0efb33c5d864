"""Comma-separated seed import for a fresh library.

Book lines carry exactly four fields (title, author, isbn, quantity) and
borrower lines exactly two (name, id). Lines with any other field count are
skipped without comment; lines that parse but fail validation are skipped
with a warning. Fields are split on every comma; quoting is not honoured,
so a quoted field containing a comma changes the field count.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from library_tracker.book import Book
from library_tracker.borrower import Borrower
from library_tracker.errors import ValidationError
from library_tracker.library import Library

logger = logging.getLogger(__name__)

BOOK_FIELDS = 4
BORROWER_FIELDS = 2


def _read_rows(path: str, width: int) -> Iterator[Tuple[int, List[str]]]:
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            row = line.rstrip("\r\n").split(",")
            if len(row) != width:
                continue
            yield line_no, [field.strip() for field in row]


def load_books(path: str) -> List[Book]:
    books: List[Book] = []
    try:
        for line_no, (title, author, isbn, quantity) in _read_rows(path, BOOK_FIELDS):
            try:
                books.append(Book(title, author, isbn, int(quantity)))
            except (ValueError, ValidationError) as e:
                logger.warning(f"Skipping book on line {line_no} of {path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error loading books from file {path}: {e}")
        return []
    logger.info(f"{len(books)} books loaded from file: {path}")
    return books


def load_borrowers(path: str) -> List[Borrower]:
    borrowers: List[Borrower] = []
    try:
        for line_no, (name, borrower_id) in _read_rows(path, BORROWER_FIELDS):
            try:
                borrowers.append(Borrower(name, borrower_id))
            except ValidationError as e:
                logger.warning(f"Skipping borrower on line {line_no} of {path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error loading borrowers from file {path}: {e}")
        return []
    logger.info(f"{len(borrowers)} borrowers loaded from file: {path}")
    return borrowers


def seed_library(library: Library, books_path: Optional[str], borrowers_path: Optional[str]) -> Tuple[int, int]:
    """Add every valid seed entry to ``library``. Returns (books added, borrowers added)."""
    books = load_books(books_path) if books_path else []
    borrowers = load_borrowers(borrowers_path) if borrowers_path else []
    for book in books:
        library.add_book(book)
    for borrower in borrowers:
        library.add_borrower(borrower)
    return len(books), len(borrowers)
