import logging
import sqlite3
from typing import Optional

from reading_list.config import settings

logger = logging.getLogger(__name__)

# Default database file. Library(db_file=...) overrides it per instance.
DATABASE_FILE = settings.data_file


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Establishes a connection to the SQLite database."""
    conn = sqlite3.connect(db_file or DATABASE_FILE)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(conn: sqlite3.Connection) -> None:
    """Creates the books table if it doesn't exist."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS books (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            author TEXT,
            status TEXT NOT NULL,
            notes TEXT,
            cover_image_url TEXT
        )
    """)
    conn.commit()


def initialize_database(db_file: Optional[str] = None) -> None:
    """Create the database file and books table on first run."""
    path = db_file or DATABASE_FILE
    conn = get_db_connection(path)
    try:
        logger.info("Connected to the SQLite database at %s", path)
        create_tables(conn)
        logger.info("Books table ensured.")
    finally:
        conn.close()
