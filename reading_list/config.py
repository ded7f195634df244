import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "3001"))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))

    # Database settings
    data_file: str = os.getenv("LIBRARY_DB_FILE", "books.db")

    # Google Books API settings
    google_books_api_key: Optional[str] = os.getenv("GOOGLE_BOOKS_API_KEY") or None
    google_books_max_results: int = int(os.getenv("GOOGLE_BOOKS_MAX_RESULTS", "5"))

    # Client settings
    api_base_url: str = os.getenv("READING_LIST_API_URL", "http://localhost:3001")
    message_timeout: float = float(os.getenv("MESSAGE_TIMEOUT", "3"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Reading List API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
