"""Async HTTP client for the Google Books catalog."""
import httpx
from typing import List, Optional
import logging

from book_finder.errors import NetworkError
from book_finder.models import Book, SortOption, PAGE_SIZE
from book_finder.parse import parse_books_response, deduplicate_books

logger = logging.getLogger(__name__)


class AsyncGoogleBooksClient:
    """Async client for paginated book searches."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize async client.

        Args:
            api_key: Optional API key (increases rate limits)
            timeout: Request timeout in seconds
            client: Preconfigured httpx client, mainly for tests
        """
        self.api_key = api_key
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def search(
        self,
        query: str,
        sort_option: SortOption = SortOption.RELEVANCE,
        start_index: int = 0,
        max_results: int = PAGE_SIZE
    ) -> List[Book]:
        """
        Fetch one page of books.

        Args:
            query: Free-text search query
            sort_option: Catalog ordering
            start_index: Zero-based offset of the first result
            max_results: Page size (1-40)

        Returns:
            Books on the page, empty when the catalog has no matches

        Raises:
            NetworkError: on transport failure, timeout, non-2xx status or
                an undecodable body
        """
        params = {
            "q": query,
            "orderBy": SortOption(sort_option).value,
            "startIndex": start_index,
            "maxResults": min(max_results, 40)  # API limit
        }

        if self.api_key:
            params["key"] = self.api_key

        try:
            logger.info(f"Async request: {query} (order={params['orderBy']}, index={start_index})")
            response = await self.client.get(self.BASE_URL, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Request failed for query {query!r}: {e}")
            raise NetworkError(str(e)) from e

        if not response.is_success:
            logger.warning(f"Status {response.status_code} for query: {query}")
            raise NetworkError(f"Catalog answered with status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Undecodable catalog response: {e}")
            raise NetworkError("Catalog returned malformed JSON") from e

        if not isinstance(payload, dict):
            raise NetworkError("Catalog returned an unexpected payload")

        try:
            books = deduplicate_books(parse_books_response(payload))
        except (TypeError, AttributeError) as e:
            logger.error(f"Unexpected catalog payload: {e}")
            raise NetworkError("Catalog returned an unexpected payload") from e

        logger.info(f"Received {len(books)} books")
        return books

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
