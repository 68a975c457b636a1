"""HTTP client for the library API."""
import dataclasses
import time
import requests
from typing import Optional, Dict, Any, List
import logging

from library_client.auth import IdentityProvider
from library_client.errors import (
    ApiError,
    RateLimitError,
    ResponseFormatError,
    TransportError,
)
from library_client.mock_data import MOCK_BOOKS, find_mock_book
from library_client.models import Book, ReadingList, Review, Recommendation
from library_client.parse import (
    unwrap_payload,
    extract_error_message,
    parse_book,
    parse_books_response,
    parse_reading_list,
    parse_reading_lists,
    parse_review,
    parse_reviews,
    parse_recommendations,
)

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "AI service rate limit exceeded. Please try again in 24 hours."


def build_auth_headers(identity: Optional[IdentityProvider]) -> Dict[str, str]:
    """
    Headers for endpoints that want a signed-in user.

    Any failure to obtain a token degrades to anonymous headers so that
    public reads keep working without a session.
    """
    headers = {"Content-Type": "application/json"}
    if identity is None:
        return headers
    try:
        token = identity.get_id_token()
    except Exception as e:
        logger.debug(f"No session token, sending anonymous request: {e}")
        return headers
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_api_error(
    action: str,
    status: int,
    reason: str,
    data: Any
) -> ApiError:
    """
    Build the error for a non-2xx response.

    Args:
        action: What was attempted, e.g. "update reading list"
        status: HTTP status code
        reason: HTTP reason phrase
        data: Decoded error body, or None when it was not JSON

    Returns:
        ApiError (RateLimitError for a 429 on recommendations)
    """
    detail = extract_error_message(data)

    if status == 429 and action == "get recommendations":
        return RateLimitError(detail or RATE_LIMIT_MESSAGE, status, reason, detail)

    message = f"Failed to {action}: {status} {reason}".rstrip()
    if detail:
        message += f" - {detail}"
    return ApiError(message, status, reason, detail)


class LibraryApiClient:
    """Client for the books, reading lists, reviews and recommendations API."""

    def __init__(
        self,
        base_url: str,
        identity: Optional[IdentityProvider] = None,
        timeout: int = 10,
        mock_latency: float = 0.3,
        use_mock_catalog: bool = True
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. https://abc.execute-api.us-east-1.amazonaws.com/dev
            identity: Identity provider used for bearer tokens (optional)
            timeout: Request timeout in seconds
            mock_latency: Artificial delay of the mock catalog in seconds
            use_mock_catalog: Serve the catalog listing from mock data
        """
        self.base_url = base_url.rstrip("/")
        self.identity = identity
        self.timeout = timeout
        self.mock_latency = mock_latency
        self.use_mock_catalog = use_mock_catalog

        # Create session for connection pooling
        self.session = requests.Session()

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------

    def get_books(self) -> List[Book]:
        """
        Get all books from the catalog.

        Returns:
            List of Book objects (empty if the payload is not a list)
        """
        if self.use_mock_catalog:
            self._mock_delay()
            return [dataclasses.replace(book) for book in MOCK_BOOKS]

        payload = self._request("GET", "/books", "fetch books", auth=False)
        return parse_books_response(payload)

    def get_book(self, book_id: str) -> Optional[Book]:
        """
        Get a single book by ID.

        Served from the mock catalog until the single-book endpoint exists.

        Returns:
            Book or None if not found
        """
        self._mock_delay()
        book = find_mock_book(book_id)
        return dataclasses.replace(book) if book else None

    def create_book(self, book: Book) -> Book:
        """Create a new book (admin only)."""
        payload = self._request(
            "POST", "/books", "create book", json_body=book.to_dict(include_id=False)
        )
        return self._require_book(payload)

    def update_book(self, book_id: str, fields: Dict[str, Any]) -> Book:
        """Update an existing book (admin only)."""
        payload = self._request(
            "PUT", f"/books/{book_id}", "update book", json_body=fields
        )
        return self._require_book(payload)

    def delete_book(self, book_id: Optional[str]) -> None:
        """Delete a book (admin only)."""
        if not book_id:
            raise ValueError("Book ID is required for deletion")
        self._request("DELETE", f"/books/{book_id}", "delete book", decode=False)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def get_reviews(self, book_id: str) -> List[Review]:
        payload = self._request(
            "GET", f"/books/{book_id}/reviews", "fetch reviews", auth=False
        )
        return parse_reviews(payload)

    def create_review(
        self,
        book_id: str,
        user_id: str,
        user_name: str,
        rating: int,
        comment: str
    ) -> Review:
        """
        Post a review for a book.

        Returns:
            The stored review with its server-assigned id and timestamp
        """
        body = {
            "bookId": book_id,
            "userId": user_id,
            "userName": user_name,
            "rating": rating,
            "comment": comment,
        }
        payload = self._request(
            "POST", f"/books/{book_id}/reviews", "create review", json_body=body
        )
        return parse_review(payload)

    # ------------------------------------------------------------------
    # Reading lists
    # ------------------------------------------------------------------

    def get_reading_lists(self) -> List[ReadingList]:
        """Get the signed-in user's reading lists."""
        payload = self._request("GET", "/reading-lists", "fetch reading lists")
        return parse_reading_lists(payload)

    def create_reading_list(
        self,
        name: str,
        description: Optional[str] = None,
        book_ids: Optional[List[str]] = None
    ) -> ReadingList:
        """
        Create a reading list.

        Returns:
            The list with its generated id and timestamps
        """
        body = {
            "name": name,
            "description": description,
            "bookIds": list(book_ids or []),
        }
        payload = self._request(
            "POST", "/reading-lists", "create reading list", json_body=body
        )
        return parse_reading_list(payload)

    def update_reading_list(self, list_id: str, fields: Dict[str, Any]) -> ReadingList:
        """
        Replace a reading list.

        Args:
            list_id: Reading list id
            fields: Full record (name, description, bookIds); the API has
                no partial update

        Returns:
            The stored reading list
        """
        payload = self._request(
            "PUT", f"/reading-lists/{list_id}", "update reading list", json_body=fields
        )
        return parse_reading_list(payload)

    def delete_reading_list(self, list_id: str) -> None:
        self._request(
            "DELETE", f"/reading-lists/{list_id}", "delete reading list", decode=False
        )

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def get_recommendations(self, query: str) -> List[Recommendation]:
        """
        Ask the AI endpoint for recommendations.

        Raises:
            RateLimitError: when the daily quota is used up (429)
        """
        payload = self._request(
            "POST", "/recommendations", "get recommendations", json_body={"query": query}
        )
        return parse_recommendations(payload)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mock_delay(self):
        if self.mock_latency > 0:
            time.sleep(self.mock_latency)

    @staticmethod
    def _require_book(payload: Any) -> Book:
        book = parse_book(payload) if isinstance(payload, dict) else None
        if book is None:
            raise ResponseFormatError("Unexpected API response format")
        return book

    def _request(
        self,
        method: str,
        path: str,
        action: str,
        json_body: Optional[Dict[str, Any]] = None,
        auth: bool = True,
        decode: bool = True
    ) -> Any:
        """
        Make one HTTP request and return the unwrapped payload.

        Args:
            method: HTTP method
            path: Path below the base URL
            action: Description used in error messages
            json_body: JSON request body (optional)
            auth: Attach the session token when one is available
            decode: Decode and unwrap the response body

        Returns:
            Canonical payload, or None when ``decode`` is False

        Raises:
            TransportError: on connection problems and timeouts
            ApiError: on any non-2xx status
        """
        url = f"{self.base_url}{path}"
        headers = build_auth_headers(self.identity) if auth else {}

        logger.info(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json_body,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Timeout on {method} {url}")
            raise TransportError(f"Failed to {action}: request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Connection error on {method} {url}: {e}")
            raise TransportError(f"Failed to {action}: {e}") from e

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            error = build_api_error(action, response.status_code, response.reason or "", error_data)
            logger.error(f"{error} (response: {error_data!r})")
            raise error

        logger.info(f"Success: {response.status_code}")
        if not decode:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Failed to {action}: response is not JSON") from e
        return unwrap_payload(data)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
