import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Optional

from reading_list import database
from reading_list.book import Book, BookStatus, BookUpdate, UPDATABLE_FIELDS
from reading_list.database import get_db_connection, initialize_database
from reading_list.errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# SQLite INTEGER PRIMARY KEY is a signed 64-bit value
MAX_BOOK_ID = 2 ** 63 - 1


class Library:
    """Manages the reading list and its persistence in SQLite.

    Every public operation runs exactly one statement on a short-lived
    connection; there are no multi-statement transactions.
    """

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or database.DATABASE_FILE
        try:
            initialize_database(self.db_file)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database: {e}") from e

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = get_db_connection(self.db_file)
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error("Database error: %s", e)
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    # ------------------------- Core operations ------------------------- #
    def list_books(self, status: Optional[str] = None) -> List[Book]:
        """Return all books in insertion order, optionally only one status."""
        sql = "SELECT * FROM books"
        params: tuple = ()
        if status:
            sql += " WHERE status = ?"
            params = (status,)
        sql += " ORDER BY id"
        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Book.from_row(row) for row in rows]

    def find_book(self, book_id: int) -> Optional[Book]:
        if not self._valid_id(book_id):
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return Book.from_row(row) if row else None

    def add_book(self, title: Optional[str], status: Optional[str], *, author: Optional[str] = None,
                 notes: Optional[str] = None, cover_image_url: Optional[str] = None) -> Book:
        """Insert a new book and return it with its assigned id."""
        if not title or not status:
            raise ValidationError("Title and Status are required.")
        self._validate_title(title)
        self._validate_status(status)

        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO books (title, author, status, notes, cover_image_url) VALUES (?, ?, ?, ?, ?)",
                (title, author, status, notes, cover_image_url),
            )
            conn.commit()
            book_id = cursor.lastrowid
        logger.info("Added book %s: %s", book_id, title)
        return Book(id=book_id, title=title, status=status, author=author,
                    notes=notes, cover_image_url=cover_image_url)

    def update_book(self, book_id: int, update: BookUpdate) -> None:
        """Apply only the fields set on ``update`` to the book with ``book_id``."""
        if not update:
            raise ValidationError("No fields provided for update.")
        if not self._valid_id(book_id):
            raise NotFoundError("Book not found.")
        if "title" in update:
            self._validate_title(update.get("title"))
        if "status" in update:
            self._validate_status(update.get("status"))

        assignments = []
        params = []
        for name, value in update:
            assignments.append(f"{UPDATABLE_FIELDS[name]} = ?")
            params.append(value)
        params.append(book_id)

        with self._connect() as conn:
            cursor = conn.execute(f"UPDATE books SET {', '.join(assignments)} WHERE id = ?", params)
            conn.commit()
            changed = cursor.rowcount
        if changed == 0:
            raise NotFoundError("Book not found.")
        logger.info("Updated book %s: %s", book_id, ", ".join(update.changes()))

    def remove_book(self, book_id: int) -> None:
        if not self._valid_id(book_id):
            raise NotFoundError("Book not found.")
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            conn.commit()
            changed = cursor.rowcount
        if changed == 0:
            raise NotFoundError("Book not found.")
        logger.info("Deleted book %s", book_id)

    def count_books(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]

    # ------------------------- Helpers ------------------------- #
    @staticmethod
    def _valid_id(book_id: int) -> bool:
        return -MAX_BOOK_ID - 1 <= book_id <= MAX_BOOK_ID

    @staticmethod
    def _validate_title(title: Optional[str]) -> None:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title cannot be empty.")

    @staticmethod
    def _validate_status(status: Optional[str]) -> None:
        if not BookStatus.is_valid(status):
            raise ValidationError(f"Status must be one of: {', '.join(BookStatus.values())}.")
