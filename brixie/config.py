"""
Configuration from environment.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _parse_int(value: str | None, default: int) -> int:
    """Parse integer from environment variable."""
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Config:
    """Application configuration from environment."""
    # Rebrickable API access
    REBRICKABLE_API_KEY: str = os.getenv("REBRICKABLE_API_KEY", "")
    REBRICKABLE_BASE_URL: str = os.getenv("REBRICKABLE_BASE_URL", "https://rebrickable.com/api/v3")
    REQUEST_TIMEOUT: int = _parse_int(os.getenv("REQUEST_TIMEOUT"), 30)  # seconds

    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/brixie.db"))
    CACHE_DIR: Path = Path(os.getenv("CACHE_DIR", "./data/images"))
    PORT: int = _parse_int(os.getenv("PORT"), 5010)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Paging
    DEFAULT_PAGE_SIZE: int = _parse_int(os.getenv("DEFAULT_PAGE_SIZE"), 200)
    MAX_PAGE_SIZE: int = _parse_int(os.getenv("MAX_PAGE_SIZE"), 1000)

    # A feed synced longer ago than this is reported as stale (1 hour)
    SYNC_MAX_AGE_SECONDS: int = _parse_int(os.getenv("SYNC_MAX_AGE_SECONDS"), 3600)

    # Image cache limits
    IMAGE_CACHE_MAX_BYTES: int = _parse_int(os.getenv("IMAGE_CACHE_MAX_BYTES"), 50 * 1024 * 1024)
    IMAGE_MEMORY_ITEMS: int = _parse_int(os.getenv("IMAGE_MEMORY_ITEMS"), 100)

    @classmethod
    def has_api_key(cls) -> bool:
        """Check if a Rebrickable API key is configured."""
        return bool(cls.REBRICKABLE_API_KEY.strip())


config = Config()
