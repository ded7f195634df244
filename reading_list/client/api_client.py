import logging
from typing import Any, Dict, List, Optional

import httpx

from reading_list.book import Book
from reading_list.config import settings

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "Invalid response from the backend."


class APIError(Exception):
    """A backend call failed; ``message`` is what the user should see."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BooksAPIClient:
    """Async HTTP client for the reading list backend."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            raise APIError(f"Could not reach the backend at {self.base_url}: {e}") from e

        if not response.is_success:
            raise APIError(self._error_message(response), response.status_code)
        try:
            return response.json()
        except ValueError as e:
            logger.debug("%s %s returned a non-JSON body: %.200s", method, path, response.text)
            raise APIError(INVALID_RESPONSE, response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            text = body.get("error") or body.get("message")
            if text:
                return str(text)
        return f"HTTP error! status: {response.status_code}"

    @staticmethod
    def _to_book(data: Any) -> Book:
        try:
            return Book.from_dict(data)
        except (AttributeError, KeyError, TypeError) as e:
            raise APIError(INVALID_RESPONSE) from e

    async def list_books(self, status: Optional[str] = None) -> List[Book]:
        params = {"status": status} if status else None
        data = await self._request("GET", "/books", params=params)
        if not isinstance(data, list):
            raise APIError(INVALID_RESPONSE)
        return [self._to_book(item) for item in data]

    async def create_book(self, payload: Dict[str, Any]) -> Book:
        data = await self._request("POST", "/books", json=payload)
        return self._to_book(data)

    async def update_book(self, book_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/books/{book_id}", json=changes)

    async def delete_book(self, book_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/books/{book_id}")

    async def search_books(self, query: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/search-books", params={"q": query})
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise APIError(INVALID_RESPONSE)
        return data
