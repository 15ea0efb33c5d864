class LibraryError(Exception):
    """Base class for every error raised by the lending ledger."""


class ValidationError(LibraryError, ValueError):
    """A required field is blank or a quantity is not a positive integer."""


class OutOfStockError(LibraryError):
    """A copy was requested from a book with no available quantity."""


class NotFoundError(LibraryError, LookupError):
    pass


class PersistenceError(LibraryError):
    """The snapshot file could not be read or written."""
