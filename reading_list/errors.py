"""Error taxonomy shared by the store, the search proxy and the API layer.

Each error carries the HTTP status the API responds with.
"""

from typing import Optional


class LibraryError(Exception):
    """Base class for reading list errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """A required field is missing or a value is out of range."""

    status_code = 400


class NotFoundError(LibraryError):
    """No book row matches the requested id."""

    status_code = 404


class ConfigurationError(LibraryError):
    """The server is missing a setting it needs (e.g. the search key)."""

    status_code = 500


class UpstreamError(LibraryError):
    """The external catalog call failed or returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None and status_code >= 400:
            self.status_code = status_code


class StorageError(LibraryError):
    """The underlying SQLite store raised."""

    status_code = 500
