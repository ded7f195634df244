from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterator, Tuple


class BookStatus(str, Enum):
    WANT_TO_READ = "Want to Read"
    READING = "Reading"
    FINISHED = "Finished"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        return isinstance(value, str) and value in cls.values()


# Wire name -> column name for every non-identifier field
UPDATABLE_FIELDS: Dict[str, str] = {
    "title": "title",
    "author": "author",
    "status": "status",
    "notes": "notes",
    "coverImageUrl": "cover_image_url",
}


class Book:
    """Represents a single book on the reading list."""

    def __init__(self, id: int, title: str, status: str, author: str | None = None,
                 notes: str | None = None, cover_image_url: str | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.status = status
        self.notes = notes
        self.cover_image_url = cover_image_url

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author or 'Unknown Author'} [{self.status}]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "status": self.status,
            "notes": self.notes,
            "coverImageUrl": self.cover_image_url,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            id=data["id"],
            title=data["title"],
            status=data["status"],
            author=data.get("author"),
            notes=data.get("notes"),
            cover_image_url=data.get("coverImageUrl"),
        )

    @staticmethod
    def from_row(row) -> "Book":
        """Build a Book from a sqlite3.Row of the books table."""
        return Book(
            id=row["id"],
            title=row["title"],
            status=row["status"],
            author=row["author"],
            notes=row["notes"],
            cover_image_url=row["cover_image_url"],
        )

    def apply(self, update: "BookUpdate") -> "Book":
        """Return a copy with the fields set on ``update`` applied."""
        data = self.to_dict()
        data.update(update.changes())
        return Book.from_dict(data)


class BookUpdate:
    """Explicit partial update: only fields passed to the constructor are set.

    ``BookUpdate(notes=None)`` clears the notes, while ``BookUpdate()`` changes
    nothing. Keys use the wire names (``coverImageUrl``).
    """

    def __init__(self, **fields: Any) -> None:
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        self._fields = dict(fields)

    def __repr__(self) -> str:  # pragma: no cover
        return f"BookUpdate({self._fields!r})"

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        # Field order follows UPDATABLE_FIELDS so generated SQL is stable
        for name in UPDATABLE_FIELDS:
            if name in self._fields:
                yield name, self._fields[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def changes(self) -> Dict[str, Any]:
        return dict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookUpdate":
        """Keep only recognized fields; anything else in ``data`` is ignored."""
        return cls(**{k: v for k, v in data.items() if k in UPDATABLE_FIELDS})
