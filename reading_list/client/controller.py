import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional, Union

from reading_list.book import Book, BookUpdate
from reading_list.client.api_client import APIError, BooksAPIClient
from reading_list.client.state import AddForm, AppState, Message, SearchHit, ViewMode, categorize
from reading_list.config import settings

logger = logging.getLogger(__name__)


class ViewController:
    """Drives ``AppState`` from user actions and backend responses.

    Mutations (add, update, delete) are serialized through one lock, so their
    confirmed results are applied to the local collection in the order the
    user triggered them. Reads are not serialized.
    """

    def __init__(self, api: BooksAPIClient, *, message_timeout: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.api = api
        self.state = AppState()
        self.message_timeout = settings.message_timeout if message_timeout is None else message_timeout
        self._clock = clock
        self._mutation_lock = asyncio.Lock()
        self._in_flight = 0

    # ------------------------- Messages ------------------------- #
    def show_message(self, text: str, is_error: bool = False) -> None:
        self.state.message = Message(text=text, is_error=is_error, expires_at=self._clock() + self.message_timeout)

    def current_message(self) -> Optional[Message]:
        """The banner to display, dropping it once its delay has passed."""
        message = self.state.message
        if message is not None and message.expired(self._clock()):
            self.state.message = None
            return None
        return message

    @asynccontextmanager
    async def _loading(self):
        self._in_flight += 1
        self.state.loading = True
        try:
            yield
        finally:
            self._in_flight -= 1
            self.state.loading = self._in_flight > 0

    # ------------------------- View ------------------------- #
    def set_view(self, view: Union[ViewMode, str]) -> None:
        self.state.view = ViewMode(view)

    def categorized(self) -> Dict[str, List[Book]]:
        return categorize(self.state.books)

    def update_form(self, **fields: str) -> None:
        for name, value in fields.items():
            if not hasattr(self.state.form, name):
                raise AttributeError(f"Unknown form field: {name}")
            setattr(self.state.form, name, value)

    # ------------------------- Loading ------------------------- #
    async def mount(self) -> None:
        """Load the full collection once."""
        async with self._loading():
            try:
                self.state.books = await self.api.list_books()
            except APIError as e:
                logger.error("Error fetching books: %s", e.message)
                self.show_message("Failed to load books. Please ensure the backend server is running.", True)

    # ------------------------- Search ------------------------- #
    def set_search_query(self, query: str) -> None:
        self.state.search_query = query

    async def search(self, query: Optional[str] = None) -> List[SearchHit]:
        if query is not None:
            self.state.search_query = query
        if not self.state.search_query.strip():
            self.state.search_results = []
            return []
        async with self._loading():
            try:
                results = await self.api.search_books(self.state.search_query)
            except APIError as e:
                logger.error("Error searching books: %s", e.message)
                self.show_message(f"Failed to search books: {e.message}", True)
                return self.state.search_results
            self.state.search_results = [SearchHit.from_dict(r) for r in results]
        return self.state.search_results

    def select_search_result(self, index: int) -> SearchHit:
        """Copy a search hit into the add form and clear the search."""
        hit = self.state.search_results[index]
        self.state.form.title = hit.title
        self.state.form.author = hit.author
        self.state.form.cover_image_url = hit.cover_image_url or ""
        self.state.search_results = []
        self.state.search_query = ""
        return hit

    # ------------------------- Mutations ------------------------- #
    async def add_book(self) -> Optional[Book]:
        payload = self.state.form.to_payload()
        # Blank optional fields are sent as null
        for key in ("author", "notes", "coverImageUrl"):
            if not payload[key]:
                payload[key] = None

        async with self._mutation_lock, self._loading():
            try:
                book = await self.api.create_book(payload)
            except APIError as e:
                logger.error("Error adding book: %s", e.message)
                self.show_message(f"Failed to add book: {e.message}", True)
                return None
            self.state.books = [*self.state.books, book]

        self.show_message("Book added successfully!")
        self.state.form = AddForm()
        self.state.search_results = []
        self.state.search_query = ""
        self.state.view = ViewMode.LIST
        return book

    async def update_book(self, book_id: int, update: Union[BookUpdate, dict]) -> bool:
        if isinstance(update, dict):
            update = BookUpdate.from_dict(update)
        async with self._mutation_lock, self._loading():
            try:
                await self.api.update_book(book_id, update.changes())
            except APIError as e:
                logger.error("Error updating book: %s", e.message)
                self.show_message(f"Failed to update book: {e.message}", True)
                return False
            self.state.books = [b.apply(update) if b.id == book_id else b for b in self.state.books]
        self.show_message("Book updated successfully!")
        return True

    async def delete_book(self, book_id: int) -> bool:
        async with self._mutation_lock, self._loading():
            try:
                await self.api.delete_book(book_id)
            except APIError as e:
                logger.error("Error deleting book: %s", e.message)
                self.show_message(f"Failed to delete book: {e.message}", True)
                return False
            self.state.books = [b for b in self.state.books if b.id != book_id]
        self.show_message("Book deleted successfully!")
        return True
