"""Configuration management."""
import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # API
    API_BASE_URL = os.getenv("LIBRARY_API_BASE_URL", "").rstrip("/")
    API_TOKEN = os.getenv("LIBRARY_API_TOKEN")

    # Mock catalog served until the books endpoints are deployed
    USE_MOCK_CATALOG = _as_bool(os.getenv("USE_MOCK_CATALOG", "true"))
    MOCK_LATENCY = float(os.getenv("MOCK_LATENCY", "0.3"))

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    MAX_CONCURRENT = int(os.getenv("MAX_CONCURRENT", "5"))

    # Advisory only, the API enforces roles on its side
    ADMIN_EMAILS_RAW = os.getenv("ADMIN_EMAILS", "")

    @property
    def ADMIN_EMAILS(self) -> List[str]:
        """Parse the comma separated admin allow-list."""
        return [
            email.strip().lower()
            for email in self.ADMIN_EMAILS_RAW.split(",")
            if email.strip()
        ]
