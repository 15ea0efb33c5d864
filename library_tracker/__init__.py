"""Library Tracker - core package

This package contains the in-memory lending ledger and its collaborators:
- Data models (book.py, borrower.py)
- Library aggregate and lending rules (library.py)
- Snapshot persistence (database.py)
- CSV seed import (seed_loader.py)
"""
