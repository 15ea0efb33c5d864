import logging
import os
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.markup import escape
from rich import box

from config import settings
from library_tracker.book import Book
from library_tracker.borrower import Borrower
from library_tracker.database import load_library, save_library, snapshot_exists
from library_tracker.errors import PersistenceError, ValidationError
from library_tracker.library import Library
from library_tracker.seed_loader import seed_library
from utils.ui_helpers import (
    set_output_mode,
    print_book,
    print_books,
    print_borrowers,
    print_loans,
    print_outcome,
)

logger = logging.getLogger(__name__)

console = Console()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_library() -> Library:
    """Load the saved library, or build a fresh one from the seed files on first run."""
    if snapshot_exists(settings.data_file):
        return load_library(settings.data_file)

    library = Library()
    books_file = settings.books_file if os.path.exists(settings.books_file) else None
    borrowers_file = settings.borrowers_file if os.path.exists(settings.borrowers_file) else None
    books, borrowers = seed_library(library, books_file, borrowers_file)
    if books or borrowers:
        logger.info(f"Seeded new library with {books} books and {borrowers} borrowers")
    return library


def save(library: Library) -> None:
    try:
        save_library(library, settings.data_file)
    except PersistenceError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)


# --- Typer CLI application ---
app = typer.Typer(help="Library lending tracker")

@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    data_file: Optional[str] = typer.Option(
        None,
        "--data-file",
        help="Snapshot file to load and save",
    ),
):
    """Global options for every command."""
    configure_logging()
    set_output_mode(output or settings.output_mode)
    if data_file:
        settings.data_file = data_file

@app.command("add-book")
def cli_add_book(title: str, author: str, isbn: str, quantity: int):
    """Add a book to the catalog."""
    library = open_library()
    try:
        book = Book(title, author, isbn, quantity)
    except ValidationError as e:
        print(f"Error: {e}")
        return
    library.add_book(book)
    save(library)
    print(f"Book added: {book.title} by {book.author}")

@app.command("remove-book")
def cli_remove_book(isbn: str):
    """Remove every book with the given ISBN."""
    library = open_library()
    if library.remove_book(isbn):
        save(library)
        print(f"Book with ISBN {isbn} has been removed.")
    else:
        print(f"Book with ISBN {isbn} not found.")

@app.command("search")
def cli_search(query: str = typer.Argument(..., help="Title, author or ISBN")):
    """Find the first book matching a title, author or ISBN."""
    print_book(open_library().find_book(query))

@app.command("add-borrower")
def cli_add_borrower(name: str, borrower_id: str):
    """Register a borrower."""
    library = open_library()
    try:
        borrower = Borrower(name, borrower_id)
    except ValidationError as e:
        print(f"Error: {e}")
        return
    library.add_borrower(borrower)
    save(library)
    print(f"Borrower added: {borrower.name} ({borrower.id})")

@app.command("remove-borrower")
def cli_remove_borrower(borrower_id: str):
    """Remove the borrower with the given ID."""
    library = open_library()
    if library.remove_borrower(borrower_id):
        save(library)
        print(f"Borrower with ID {borrower_id} has been removed.")
    else:
        print(f"Borrower with ID {borrower_id} not found.")

@app.command("borrow")
def cli_borrow(isbn: str, borrower_id: str):
    """Lend one copy of a book to a borrower."""
    library = open_library()
    outcome = library.borrow_book(isbn, borrower_id)
    if outcome:
        save(library)
    print_outcome(outcome)

@app.command("return")
def cli_return(isbn: str):
    """Take back a lent book."""
    library = open_library()
    outcome = library.return_book(isbn)
    if outcome:
        save(library)
    print_outcome(outcome)

@app.command("buy")
def cli_buy(isbn: str, borrower_id: str):
    """Sell one copy of a book to a borrower."""
    library = open_library()
    outcome = library.buy_book(isbn, borrower_id)
    if outcome:
        save(library)
    print_outcome(outcome)

@app.command("restock")
def cli_restock(isbn: str, amount: int):
    """Add copies to an existing book."""
    library = open_library()
    try:
        outcome = library.restock_book(isbn, amount)
    except ValidationError as e:
        print(f"Error: {e}")
        return
    if outcome:
        save(library)
    print_outcome(outcome)

@app.command("books")
def cli_books():
    """List all books."""
    print_books(open_library().list_books())

@app.command("borrowers")
def cli_borrowers():
    """List all borrowers."""
    print_borrowers(open_library().list_borrowers())

@app.command("loans")
def cli_loans():
    """List the books currently on loan."""
    print_loans(open_library().list_lending_records())

@app.command("menu")
def cli_menu():
    """Start the interactive menu."""
    run_menu()


# --- Interactive menu ---
def _ask_text(label: str) -> str:
    return Prompt.ask(label, default="", show_default=False)

def _menu_add_book(library: Library) -> None:
    title = _ask_text("Enter book title")
    author = _ask_text("Enter book author")
    isbn = _ask_text("Enter book ISBN")
    quantity = IntPrompt.ask("Enter book quantity")
    try:
        library.add_book(Book(title, author, isbn, quantity))
    except ValidationError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        return
    console.print(f"[green]✅ Book added:[/] [bold]{escape(title)}[/]")

def _menu_remove_book(library: Library) -> None:
    isbn = _ask_text("Enter ISBN of the book to remove")
    if library.remove_book(isbn):
        console.print(f"[green]✅ Book with ISBN {escape(isbn)} removed.[/]")
    else:
        console.print(f"[yellow]⚠️ Book with ISBN {escape(isbn)} not found.[/]")

def _menu_add_borrower(library: Library) -> None:
    name = _ask_text("Enter borrower name")
    borrower_id = _ask_text("Enter borrower ID")
    try:
        library.add_borrower(Borrower(name, borrower_id))
    except ValidationError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        return
    console.print(f"[green]✅ Borrower added:[/] [bold]{escape(name)}[/]")

def run_menu() -> None:
    """Interactive menu for the library. State is written only on 'Save and exit'."""
    configure_logging()
    library = open_library()

    def render_menu() -> None:
        menu_items = [
            ("1", "Add book", "➕"),
            ("2", "Remove book", "🗑️"),
            ("3", "Search book", "🔎"),
            ("4", "Add borrower", "🧑"),
            ("5", "Borrow book", "📖"),
            ("6", "Return book", "↩️"),
            ("7", "Buy book", "💳"),
            ("8", "Display all books", "📚"),
            ("9", "Display all borrowers", "📋"),
            ("10", "Save and exit", "💾"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        console.print(Panel(
            table,
            title=settings.app_name,
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))

    choices = [str(n) for n in range(1, 11)]
    while True:
        render_menu()
        choice = Prompt.ask("Enter your choice", choices=choices)

        if choice == "1":
            _menu_add_book(library)
        elif choice == "2":
            _menu_remove_book(library)
        elif choice == "3":
            print_book(library.find_book(_ask_text("Enter title, author, or ISBN to search")))
        elif choice == "4":
            _menu_add_borrower(library)
        elif choice == "5":
            isbn = _ask_text("Enter ISBN of the book to borrow")
            print_outcome(library.borrow_book(isbn, _ask_text("Enter borrower ID")))
        elif choice == "6":
            print_outcome(library.return_book(_ask_text("Enter ISBN of the book to return")))
        elif choice == "7":
            isbn = _ask_text("Enter ISBN of the book to buy")
            print_outcome(library.buy_book(isbn, _ask_text("Enter borrower ID")))
        elif choice == "8":
            console.print("\n[bold]--- All Books ---[/]")
            print_books(library.list_books())
        elif choice == "9":
            console.print("\n[bold]--- All Borrowers ---[/]")
            print_borrowers(library.list_borrowers())
        elif choice == "10":
            try:
                save_library(library, settings.data_file)
            except PersistenceError as e:
                console.print(f"[bold red]Error saving data:[/] {escape(str(e))}")
                continue
            console.print("[green]Data saved successfully![/] Exiting...")
            break
        print()  # blank line between operations

if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()
