"""Parse and normalize library API responses.

The API sits behind a gateway that sometimes returns the payload directly and
sometimes wraps it Lambda-proxy style, as a JSON string inside a ``body``
field. Every response goes through :func:`unwrap_payload` before anything else
looks at it, so callers only ever see the canonical payload.
"""
import json
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Union

from library_client.errors import ResponseFormatError
from library_client.models import Book, ReadingList, Review, Recommendation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectPayload:
    """Response body is the payload itself."""
    data: Any


@dataclass(frozen=True)
class ProxyPayload:
    """Payload JSON-encoded as a string inside ``body``."""
    body: str


Envelope = Union[DirectPayload, ProxyPayload]


def classify_envelope(data: Any) -> Envelope:
    """
    Decide which of the two response shapes ``data`` is.

    Args:
        data: Decoded JSON of the HTTP response

    Returns:
        ProxyPayload when ``data`` is a mapping with a non-empty string
        ``body``, DirectPayload otherwise
    """
    if isinstance(data, dict):
        body = data.get("body")
        if isinstance(body, str) and body:
            return ProxyPayload(body)
    return DirectPayload(data)


def unwrap_payload(data: Any) -> Any:
    """
    Return the canonical payload for a decoded response.

    Args:
        data: Decoded JSON of the HTTP response

    Returns:
        The parsed ``body`` string for proxy-wrapped responses, else ``data``

    Raises:
        ResponseFormatError: if the wrapped body is not valid JSON
    """
    envelope = classify_envelope(data)
    if isinstance(envelope, DirectPayload):
        return envelope.data
    try:
        return json.loads(envelope.body)
    except ValueError as e:
        raise ResponseFormatError(f"Invalid JSON in proxy response body: {e}") from e


def repair_reading_list(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rename a legacy ``books`` field to ``bookIds``.

    Older deployments of the reading-list functions still answer with
    ``books``. Delete this once every deployment returns ``bookIds``.
    """
    if "books" in record and "bookIds" not in record:
        record = dict(record)
        record["bookIds"] = record.pop("books")
    return record


def extract_error_message(data: Any) -> Optional[str]:
    """
    Pull a server-supplied message out of an error response.

    Looks at a top-level ``message`` or ``error`` first, then the same keys
    inside the (possibly string-encoded) nested ``body``.
    """
    if not isinstance(data, dict):
        return None
    for key in ("message", "error"):
        if data.get(key):
            return str(data[key])

    body = data.get("body")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return None


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book record.

    Args:
        item: Book object as returned by the API

    Returns:
        Book object or None if parsing fails
    """
    try:
        if not item.get("id"):
            return None
        return Book.from_dict(item)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        # Skip the record, keep the rest of the catalog
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books_response(payload: Any) -> List[Book]:
    """
    Parse a list of books.

    Args:
        payload: Unwrapped response payload

    Returns:
        List of Book objects (empty if the payload is not a list)
    """
    if not isinstance(payload, list):
        return []

    books = []
    for item in payload:
        book = parse_book(item)
        if book:
            books.append(book)
    return books


def parse_reading_list(payload: Any) -> ReadingList:
    """
    Parse a reading list returned by create or update.

    Raises:
        ResponseFormatError: if the record is not a reading list
    """
    if not isinstance(payload, dict):
        raise ResponseFormatError("Unexpected API response format")
    record = repair_reading_list(payload)
    if "bookIds" not in record or "id" not in record:
        raise ResponseFormatError("Unexpected API response format")
    try:
        return ReadingList.from_dict(record)
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseFormatError(f"Unexpected API response format: {e}") from e


def parse_reading_lists(payload: Any) -> List[ReadingList]:
    """
    Parse the user's reading lists.

    Args:
        payload: Unwrapped response payload

    Returns:
        List of ReadingList objects; malformed records are skipped

    Raises:
        ResponseFormatError: if the payload is not a list
    """
    if not isinstance(payload, list):
        raise ResponseFormatError("API response body is not an array")

    reading_lists = []
    for item in payload:
        try:
            # A stored list may have no bookIds yet; it is read as empty
            reading_lists.append(ReadingList.from_dict(repair_reading_list(item)))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping reading list record {item!r}: {e}")
    return reading_lists


def parse_review(payload: Any) -> Review:
    """
    Parse a single review.

    Raises:
        ResponseFormatError: if the record has no id or bad field types
    """
    if not isinstance(payload, dict):
        raise ResponseFormatError("Unexpected API response format")
    try:
        return Review.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseFormatError(f"Unexpected API response format: {e}") from e


def parse_reviews(payload: Any) -> List[Review]:
    """
    Parse the reviews of a book.

    Args:
        payload: Unwrapped response payload

    Returns:
        List of Review objects (empty if the payload is not a list);
        malformed records are skipped
    """
    if not isinstance(payload, list):
        return []

    reviews = []
    for item in payload:
        try:
            reviews.append(parse_review(item))
        except ResponseFormatError as e:
            logger.warning(f"Skipping review record {item!r}: {e}")
    return reviews


def parse_recommendations(payload: Any) -> List[Recommendation]:
    """
    Accept either ``{"recommendations": [...]}`` or a bare list.

    Raises:
        ResponseFormatError: for any other shape
    """
    if isinstance(payload, dict) and isinstance(payload.get("recommendations"), list):
        return payload["recommendations"]
    if isinstance(payload, list):
        return payload
    raise ResponseFormatError("Unexpected API response format")


def deduplicate_books(books: List[Book]) -> List[Book]:
    """
    Drop repeated catalog entries, keeping the first record for each id.

    The live catalog can return the same book more than once, which would
    otherwise show up twice in a reading list.
    """
    unique: Dict[str, Book] = {}
    for book in books:
        unique.setdefault(book.id, book)
    return list(unique.values())
