"""Display helpers for ratings, dates and counts."""
from datetime import datetime
from typing import Optional


def format_rating(rating: Optional[float]) -> str:
    """Format a rating with one decimal place, e.g. ``4.0``."""
    return f"{float(rating or 0):.1f}"


def format_date(value: str) -> str:
    """
    Format an ISO-8601 timestamp as ``Jan 5, 2024``.

    Args:
        value: ISO date or datetime string

    Returns:
        Formatted date, or ``value`` unchanged if it cannot be parsed
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def format_book_count(count: int) -> str:
    return f"{count} {'book' if count == 1 else 'books'}"
