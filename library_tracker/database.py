import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, List

from library_tracker.errors import LibraryError, PersistenceError
from library_tracker.library import Library

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS books (
        position INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        isbn TEXT NOT NULL,
        quantity INTEGER NOT NULL CHECK(quantity >= 0),
        sold INTEGER NOT NULL DEFAULT 0 CHECK(sold >= 0)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS borrowers (
        position INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        id TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lending_records (
        position INTEGER PRIMARY KEY,
        book_position INTEGER NOT NULL REFERENCES books(position),
        borrower_name TEXT NOT NULL,
        borrower_id TEXT NOT NULL
    )
    """,
)


def get_db_connection(db_file: str, read_only: bool = False) -> sqlite3.Connection:
    """Open a connection to a snapshot file. Read-only connections never create the file."""
    if read_only:
        uri = Path(db_file).resolve().as_uri() + "?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
    else:
        conn = sqlite3.connect(db_file)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(conn: sqlite3.Connection) -> None:
    for statement in SCHEMA:
        conn.execute(statement)


def snapshot_exists(db_file: str) -> bool:
    return os.path.isfile(db_file)


def save_library(library: Library, db_file: str) -> None:
    """Write the whole library to ``db_file``, replacing whatever was there.

    The snapshot is built in a sibling temp file and moved into place, so a
    failed save leaves the previous snapshot intact.
    """
    data = library.to_dict()
    tmp_file = f"{db_file}.tmp"
    try:
        parent = os.path.dirname(os.path.abspath(db_file))
        os.makedirs(parent, exist_ok=True)
        if os.path.exists(tmp_file):
            os.remove(tmp_file)

        conn = get_db_connection(tmp_file)
        try:
            create_tables(conn)
            conn.executemany(
                "INSERT INTO books (position, title, author, isbn, quantity, sold) VALUES (?, ?, ?, ?, ?, ?)",
                [(i, b["title"], b["author"], b["isbn"], b["quantity"], b["sold"])
                 for i, b in enumerate(data["books"])]
            )
            conn.executemany(
                "INSERT INTO borrowers (position, name, id) VALUES (?, ?, ?)",
                [(i, b["name"], b["id"]) for i, b in enumerate(data["borrowers"])]
            )
            conn.executemany(
                "INSERT INTO lending_records (position, book_position, borrower_name, borrower_id) VALUES (?, ?, ?, ?)",
                [(i, r["book_index"], r["borrower"]["name"], r["borrower"]["id"])
                 for i, r in enumerate(data["lending_records"])]
            )
            conn.commit()
        finally:
            conn.close()

        os.replace(tmp_file, db_file)
    except (sqlite3.Error, OSError) as e:
        raise PersistenceError(f"Error saving data to {db_file}: {e}") from e

    logger.info(
        f"Library saved to {db_file}: {len(data['books'])} books, "
        f"{len(data['borrowers'])} borrowers, {len(data['lending_records'])} loans"
    )


def read_library(db_file: str) -> Library:
    """Read a snapshot strictly. Raises PersistenceError for any missing or bad data."""
    if not snapshot_exists(db_file):
        raise PersistenceError(f"Snapshot file {db_file} does not exist.")

    try:
        conn = get_db_connection(db_file, read_only=True)
        try:
            data: Dict[str, List[Dict[str, Any]]] = {
                "books": [
                    dict(row) for row in conn.execute(
                        "SELECT title, author, isbn, quantity, sold FROM books ORDER BY position"
                    )
                ],
                "borrowers": [
                    dict(row) for row in conn.execute("SELECT name, id FROM borrowers ORDER BY position")
                ],
                "lending_records": [
                    {
                        "book_index": row["book_position"],
                        "borrower": {"name": row["borrower_name"], "id": row["borrower_id"]},
                    }
                    for row in conn.execute(
                        "SELECT book_position, borrower_name, borrower_id FROM lending_records ORDER BY position"
                    )
                ],
            }
        finally:
            conn.close()
        return Library.from_dict(data)
    except (sqlite3.Error, LibraryError, KeyError, TypeError) as e:
        raise PersistenceError(f"Error loading data from {db_file}: {e}") from e


def load_library(db_file: str) -> Library:
    """Load the saved library, falling back to an empty one when the snapshot is missing or unreadable."""
    if not snapshot_exists(db_file):
        logger.info(f"No snapshot at {db_file}, starting with an empty library")
        return Library()
    try:
        library = read_library(db_file)
    except PersistenceError as e:
        logger.error(f"{e} Starting with an empty library.")
        return Library()
    logger.info(f"Library loaded from {db_file}")
    return library
