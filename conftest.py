import os
import pytest

from config import settings
from library_tracker.borrower import Borrower
from library_tracker.library import Library
from utils.ui_helpers import OUTPUT_MODE_ENV

@pytest.fixture
def lib():
    # Fresh in-memory library with one registered borrower
    lib = Library()
    lib.add_borrower(Borrower("Ada Lovelace", "B1"))
    return lib

@pytest.fixture
def data_file(tmp_path, request):
    # Unique snapshot file per test
    return str(tmp_path / f"test_{request.node.name}.db")

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch, data_file):
    # Point the CLI at per-test files so nothing touches the working directory
    monkeypatch.setattr(settings, "data_file", data_file)
    monkeypatch.setattr(settings, "books_file", str(tmp_path / "books.csv"))
    monkeypatch.setattr(settings, "borrowers_file", str(tmp_path / "borrowers.csv"))
    monkeypatch.setattr(settings, "output_mode", "plain")
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    yield
    if os.path.exists(data_file):
        os.remove(data_file)
