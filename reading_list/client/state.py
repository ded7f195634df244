"""Client-side application state.

``AppState`` is the single container the view controller mutates. Everything
rendered (the three status buckets, the banner) is derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from reading_list.book import Book, BookStatus


class ViewMode(str, Enum):
    LIST = "list"
    ADD = "add"


@dataclass
class Message:
    text: str
    is_error: bool
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class AddForm:
    title: str = ""
    author: str = ""
    status: str = BookStatus.WANT_TO_READ.value
    notes: str = ""
    cover_image_url: str = ""

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "status": self.status,
            "notes": self.notes,
            "coverImageUrl": self.cover_image_url,
        }


@dataclass
class SearchHit:
    title: str
    author: str
    cover_image_url: Optional[str]
    description: str

    @staticmethod
    def from_dict(data: dict) -> "SearchHit":
        return SearchHit(
            title=data.get("title") or "",
            author=data.get("author") or "",
            cover_image_url=data.get("coverImageUrl"),
            description=data.get("description") or "",
        )


@dataclass
class AppState:
    books: List[Book] = field(default_factory=list)
    view: ViewMode = ViewMode.LIST
    loading: bool = False
    message: Optional[Message] = None
    form: AddForm = field(default_factory=AddForm)
    search_query: str = ""
    search_results: List[SearchHit] = field(default_factory=list)


def categorize(books: List[Book]) -> Dict[str, List[Book]]:
    """Partition books into the three status buckets, preserving order.

    Books whose status is outside the enumeration appear in no bucket.
    """
    buckets: Dict[str, List[Book]] = {status: [] for status in BookStatus.values()}
    for book in books:
        if book.status in buckets:
            buckets[book.status].append(book)
    return buckets
