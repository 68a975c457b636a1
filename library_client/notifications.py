"""User-facing notices (the CLI prints them, a UI would toast them)."""
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

SUCCESS = "success"
INFO = "info"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class Notifier:
    """Collects notices in the order they were raised."""

    def __init__(self):
        self.notices: List[Notice] = []

    def success(self, message: str):
        self.notices.append(Notice(SUCCESS, message))

    def info(self, message: str):
        self.notices.append(Notice(INFO, message))

    def handle_error(self, error: Exception):
        """Log an error and show its message to the user."""
        logger.error(f"{type(error).__name__}: {error}")
        message = str(error) or "An unexpected error occurred"
        self.notices.append(Notice(ERROR, message))

    @property
    def last(self):
        return self.notices[-1] if self.notices else None

    def drain(self) -> List[Notice]:
        """Return and forget all pending notices."""
        notices, self.notices = self.notices, []
        return notices
