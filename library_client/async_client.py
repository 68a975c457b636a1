"""Async HTTP client for concurrent page loads."""
import asyncio
import dataclasses
import httpx
from typing import List, Optional, Dict, Any, Tuple
import logging

from library_client.auth import IdentityProvider
from library_client.client import build_auth_headers, build_api_error
from library_client.errors import LibraryError, ResponseFormatError, TransportError
from library_client.mock_data import MOCK_BOOKS, find_mock_book
from library_client.models import Book, ReadingList, Review, Recommendation
from library_client.parse import (
    unwrap_payload,
    parse_books_response,
    parse_reading_lists,
    parse_reviews,
    parse_recommendations,
)

logger = logging.getLogger(__name__)


class AsyncLibraryApiClient:
    """Async client for the read side of the library API."""

    def __init__(
        self,
        base_url: str,
        identity: Optional[IdentityProvider] = None,
        timeout: int = 10,
        max_concurrent: int = 5,
        mock_latency: float = 0.3,
        use_mock_catalog: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: API root
            identity: Identity provider used for bearer tokens (optional)
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            mock_latency: Artificial delay of the mock catalog in seconds
            use_mock_catalog: Serve the catalog listing from mock data
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.identity = identity
        self.timeout = timeout
        self.mock_latency = mock_latency
        self.use_mock_catalog = use_mock_catalog
        self.semaphore = asyncio.Semaphore(max_concurrent)

        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get_books(self) -> List[Book]:
        if self.use_mock_catalog:
            await self._mock_delay()
            return [dataclasses.replace(book) for book in MOCK_BOOKS]
        payload = await self._request("GET", "/books", "fetch books", auth=False)
        return parse_books_response(payload)

    async def get_book(self, book_id: str) -> Optional[Book]:
        await self._mock_delay()
        book = find_mock_book(book_id)
        return dataclasses.replace(book) if book else None

    async def get_reviews(self, book_id: str) -> List[Review]:
        payload = await self._request(
            "GET", f"/books/{book_id}/reviews", "fetch reviews", auth=False
        )
        return parse_reviews(payload)

    async def get_reading_lists(self) -> List[ReadingList]:
        payload = await self._request("GET", "/reading-lists", "fetch reading lists")
        return parse_reading_lists(payload)

    async def get_recommendations(self, query: str) -> List[Recommendation]:
        payload = await self._request(
            "POST", "/recommendations", "get recommendations", json_body={"query": query}
        )
        return parse_recommendations(payload)

    async def get_reviews_for_books(
        self,
        book_ids: List[str]
    ) -> Tuple[Dict[str, List[Review]], Dict[str, LibraryError]]:
        """
        Fetch reviews for several books in parallel.

        A failed fetch does not cancel the others; each book ends up in
        exactly one of the two returned mappings.

        Args:
            book_ids: Books to fetch reviews for

        Returns:
            (reviews by book id, error by book id)
        """
        tasks = [self.get_reviews(book_id) for book_id in book_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        reviews, errors = {}, {}
        for book_id, result in zip(book_ids, results):
            if isinstance(result, LibraryError):
                logger.warning(f"Reviews for book {book_id} failed: {result}")
                errors[book_id] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                reviews[book_id] = result
        return reviews, errors

    async def load_book_page(self, book_id: str) -> Tuple[Optional[Book], List[Review]]:
        """Fetch a book and its reviews concurrently, as the detail page does on mount."""
        book, reviews = await asyncio.gather(
            self.get_book(book_id),
            self.get_reviews(book_id)
        )
        return book, reviews

    async def _mock_delay(self):
        if self.mock_latency > 0:
            await asyncio.sleep(self.mock_latency)

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        json_body: Optional[Dict[str, Any]] = None,
        auth: bool = True
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = build_auth_headers(self.identity) if auth else {}

        # Use semaphore to limit concurrency
        async with self.semaphore:
            logger.info(f"Async request: {method} {url}")
            try:
                response = await self.client.request(
                    method, url, headers=headers, json=json_body
                )
            except httpx.TimeoutException as e:
                logger.warning(f"Timeout on {method} {url}")
                raise TransportError(f"Failed to {action}: request timed out") from e
            except httpx.HTTPError as e:
                logger.warning(f"Async request failed: {e}")
                raise TransportError(f"Failed to {action}: {e}") from e

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            error = build_api_error(
                action, response.status_code, response.reason_phrase, error_data
            )
            logger.error(f"{error} (response: {error_data!r})")
            raise error

        try:
            data = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Failed to {action}: response is not JSON") from e
        return unwrap_payload(data)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
