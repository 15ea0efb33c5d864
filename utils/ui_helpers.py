import os
import json
from typing import Iterable, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from library_tracker.book import BookInfo
from library_tracker.borrower import Borrower
from library_tracker.library import LendingOutcome, LendingRecord

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()

def set_output_mode(mode: str) -> bool:
    mode = (mode or "").lower().strip()
    if mode not in OUTPUT_MODES:
        return False
    os.environ[OUTPUT_MODE_ENV] = mode
    return True

def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, "plain").lower()
    return mode if mode in OUTPUT_MODES else "plain"

def print_books(books: Iterable[BookInfo]) -> None:
    """Print the catalog in the current output mode.
    - plain: one 'Title: ..., Quantity: ..., Sold: ...' line per book, or 'No books available.'
    - json: array of book objects
    - rich: table
    """
    books = list(books)
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print("No books available.")
        return

    if mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Quantity", justify="right")
        table.add_column("Sold", justify="right")
        for b in books:
            table.add_row(escape(b.isbn), escape(b.title), escape(b.author), str(b.quantity), str(b.sold))
        _console.print(table)
    else:
        for b in books:
            print(b)

def print_borrowers(borrowers: Iterable[Borrower]) -> None:
    borrowers = list(borrowers)
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in borrowers], ensure_ascii=False))
        return

    if not borrowers:
        print("No borrowers registered.")
        return

    if mode == "rich":
        table = Table(title="🧑 Borrowers", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        for b in borrowers:
            table.add_row(escape(b.id), escape(b.name))
        _console.print(table)
    else:
        for b in borrowers:
            print(b)

def print_loans(records: Iterable[LendingRecord]) -> None:
    records = list(records)
    mode = get_output_mode()

    if mode == "json":
        payload = [{"isbn": r.book.isbn, "title": r.book.title, "borrower_id": r.borrower.id,
                    "borrower_name": r.borrower.name} for r in records]
        print(json.dumps(payload, ensure_ascii=False))
        return

    if not records:
        print("No books on loan.")
        return

    if mode == "rich":
        table = Table(title="🔖 Loans", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Borrower", style="white")
        for r in records:
            table.add_row(escape(r.book.isbn), escape(r.book.title), f"{escape(r.borrower.name)} ({escape(r.borrower.id)})")
        _console.print(table)
    else:
        for r in records:
            print(r)

def print_book(book: Optional[BookInfo]) -> None:
    """Print a single search hit, or 'Book not found.'"""
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(book.to_dict() if book else None, ensure_ascii=False))
    elif book is None:
        print("Book not found.")
    elif mode == "rich":
        _console.print(Panel.fit(
            f"[bold]Title:[/] {escape(book.title)}\n"
            f"[bold]Author:[/] {escape(book.author)}\n"
            f"[bold]ISBN:[/] {escape(book.isbn)}\n"
            f"[bold]Quantity:[/] {book.quantity}\n"
            f"[bold]Sold:[/] {book.sold}",
            title="🔍 Book Found",
            border_style="green"
        ))
    else:
        print(f"Book found: {book}")

def print_outcome(outcome: LendingOutcome) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps({
            "success": outcome.success,
            "message": outcome.message,
            "reason": outcome.reason.value if outcome.reason else None,
            "book": outcome.book.to_dict() if outcome.book else None,
            "borrower": outcome.borrower.to_dict() if outcome.borrower else None,
        }, ensure_ascii=False))
    elif mode == "rich":
        style = "green" if outcome.success else "red"
        _console.print(f"[{style}]{escape(outcome.message)}[/]")
    elif outcome.success:
        print(outcome.message)
    else:
        print(f"Error: {outcome.message}")
