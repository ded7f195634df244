import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from reading_list.config import settings
from reading_list.errors import ConfigurationError, UpstreamError
from reading_list.services.http_client import SharedHTTPClient, get_http_client

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


@dataclass
class SearchResult:
    """A catalog hit trimmed to what the add form can pre-fill"""
    title: str
    author: str
    cover_image_url: Optional[str]
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "coverImageUrl": self.cover_image_url,
            "description": self.description,
        }

    @classmethod
    def from_volume(cls, item: Dict[str, Any]) -> "SearchResult":
        """Map one Google Books volume to a search result"""
        volume_info = item.get("volumeInfo")
        if not isinstance(volume_info, dict):
            volume_info = {}
        authors = volume_info.get("authors")
        if not isinstance(authors, list):
            authors = None
        image_links = volume_info.get("imageLinks")
        if not isinstance(image_links, dict):
            image_links = {}
        return cls(
            title=str(volume_info.get("title") or "N/A"),
            author=", ".join(str(a) for a in authors) if authors else "N/A",
            cover_image_url=image_links.get("thumbnail") or image_links.get("smallThumbnail"),
            description=str(volume_info.get("description") or "No description available."),
        )


class GoogleBooksService:
    """Server-side proxy for the Google Books search API.

    The API key stays on the server; callers only see mapped results.
    There is no caching and no retry.
    """

    def __init__(self, api_key: Optional[str] = None, http_client: Optional[SharedHTTPClient] = None,
                 max_results: Optional[int] = None):
        self.api_key = api_key if api_key is not None else settings.google_books_api_key
        self.base_url = GOOGLE_BOOKS_VOLUMES_URL
        self.max_results = max_results or settings.google_books_max_results
        self._http_client = http_client

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search_books(self, query: str) -> List[SearchResult]:
        """
        Search the catalog for ``query``.

        Args:
            query: free-text search (title, author, ...)

        Returns:
            At most ``max_results`` mapped results.

        Raises:
            ConfigurationError: the API key is not configured
            UpstreamError: the request failed or Google answered non-2xx
        """
        if not self.is_configured():
            logger.error("Google Books API key is not configured.")
            raise ConfigurationError(
                "Google Books API key is not configured on the server. Please check backend setup."
            )

        params = {"q": query, "key": self.api_key, "maxResults": self.max_results}
        client = self._http_client or await get_http_client()

        try:
            response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error("Error proxying Google Books API: %s", e)
            raise UpstreamError("Failed to search books from external API.") from e

        if not response.is_success:
            logger.error("Google Books API returned error %s: %s", response.status_code, response.text)
            raise UpstreamError(
                f"Google Books API error: {response.reason_phrase or response.status_code}.",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Google Books API returned invalid JSON: %s", e)
            raise UpstreamError("Failed to search books from external API.") from e

        items = (data.get("items") or []) if isinstance(data, dict) else None
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            logger.error("Google Books API returned an unexpected payload: %.200s", response.text)
            raise UpstreamError("Failed to search books from external API.")

        results = [SearchResult.from_volume(item) for item in items[:self.max_results]]
        logger.info("Found %d books for query: %s", len(results), query)
        return results
