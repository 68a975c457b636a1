"""Exception types raised by the library API client."""
from typing import Dict, Optional


class LibraryError(Exception):
    """Base class for every error the client surfaces to callers."""


class TransportError(LibraryError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""


class ResponseFormatError(LibraryError):
    """The response was neither a direct payload nor a proxy-wrapped one."""


class NotFoundError(LibraryError):
    """A book or reading list that was asked for does not exist."""


class ApiError(LibraryError):
    """Non-2xx HTTP response."""

    def __init__(
        self,
        message: str,
        status: int,
        reason: str = "",
        detail: Optional[str] = None
    ):
        """
        Args:
            message: Human readable message shown to the user
            status: HTTP status code
            reason: HTTP reason phrase
            detail: Server supplied message, when one could be extracted
        """
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.detail = detail


class RateLimitError(ApiError):
    """429 from the recommendation endpoint."""


class ValidationError(LibraryError):
    """Client-side form validation failed."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid input")
